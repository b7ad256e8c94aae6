# (c) Copyright Datacraft, 2026
"""Outbound mail delivery."""
from caseledger.core.config import get_settings

from .base import MailAttachment, MailBackend, MailResult
from .resend import ResendMailBackend

_mail_backend: MailBackend | None = None


def get_mail_backend() -> MailBackend:
	"""Get configured mail backend."""
	global _mail_backend
	if _mail_backend is None:
		settings = get_settings()
		_mail_backend = ResendMailBackend(
			api_key=settings.resend_api_key,
			api_url=settings.resend_api_url,
			timeout=settings.mail_timeout,
		)
	return _mail_backend


__all__ = [
	"MailAttachment",
	"MailBackend",
	"MailResult",
	"ResendMailBackend",
	"get_mail_backend",
]
