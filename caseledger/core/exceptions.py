# (c) Copyright Datacraft, 2026
"""
Ledger error taxonomy.

Every error that crosses the API boundary carries a stable ``code`` and a
human readable message. Internal details stay in the logs.
"""
from fastapi import status


class LedgerError(Exception):
	"""Base class for domain errors."""
	code: str = "SERVER_ERROR"
	status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
	default_message: str = "Internal server error"

	def __init__(self, message: str | None = None):
		self.message = message or self.default_message
		super().__init__(self.message)


class ValidationError(LedgerError):
	code = "VALIDATION_ERROR"
	status_code = status.HTTP_400_BAD_REQUEST
	default_message = "Invalid input"


class UnauthorizedError(LedgerError):
	code = "UNAUTHORIZED"
	status_code = status.HTTP_401_UNAUTHORIZED
	default_message = "Unauthorized"


class ForbiddenError(LedgerError):
	code = "FORBIDDEN"
	status_code = status.HTTP_403_FORBIDDEN
	default_message = "Insufficient permissions"


class NotFoundError(LedgerError):
	code = "NOT_FOUND"
	status_code = status.HTTP_404_NOT_FOUND
	default_message = "Not found"


class InvalidStatusError(LedgerError):
	code = "INVALID_STATUS"
	status_code = status.HTTP_400_BAD_REQUEST
	default_message = "Operation not allowed in current status"


class AlreadyPaidError(LedgerError):
	code = "ALREADY_PAID"
	status_code = status.HTTP_400_BAD_REQUEST
	default_message = "Invoice is already paid"


class NoEmailError(LedgerError):
	code = "NO_EMAIL"
	status_code = status.HTTP_400_BAD_REQUEST
	default_message = "No recipient email address"


class UploadError(LedgerError):
	code = "UPLOAD_ERROR"
	status_code = status.HTTP_502_BAD_GATEWAY
	default_message = "File upload failed"


class SendFailedError(LedgerError):
	code = "SEND_FAILED"
	status_code = status.HTTP_502_BAD_GATEWAY
	default_message = "Failed to send email"


def error_body(code: str, message: str) -> dict:
	return {"success": False, "error": {"code": code, "message": message}}
