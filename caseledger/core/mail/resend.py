# (c) Copyright Datacraft, 2026
"""Resend HTTP API mail backend."""
import base64
import logging

import httpx

from .base import MailAttachment, MailBackend, MailResult

logger = logging.getLogger(__name__)


class ResendMailBackend(MailBackend):

	def __init__(
		self,
		api_key: str | None,
		api_url: str = "https://api.resend.com",
		timeout: float = 30.0,
	):
		self.api_key = api_key
		self.api_url = api_url.rstrip("/")
		self.timeout = timeout

	async def send(
		self,
		sender: str,
		to: str,
		cc: list[str],
		subject: str,
		body: str,
		attachments: list[MailAttachment],
		reply_to: str | None = None,
	) -> MailResult:
		if not self.api_key:
			return MailResult(success=False, error="Mail API key is not configured")

		payload = {
			"from": sender,
			"to": [to],
			"cc": cc,
			"subject": subject,
			"text": body,
			"attachments": [
				{
					"filename": a.filename,
					"content": base64.b64encode(a.content).decode("ascii"),
				}
				for a in attachments
			],
		}
		if reply_to:
			payload["reply_to"] = reply_to

		headers = {"Authorization": f"Bearer {self.api_key}"}

		try:
			async with httpx.AsyncClient(timeout=self.timeout) as client:
				response = await client.post(
					f"{self.api_url}/emails",
					json=payload,
					headers=headers,
				)
		except httpx.HTTPError as e:
			logger.error(f"Mail API request failed: {e}")
			return MailResult(success=False, error=str(e))

		if response.status_code >= 400:
			try:
				message = response.json().get("message")
			except ValueError:
				message = None
			logger.error(f"Mail API returned {response.status_code}: {message}")
			return MailResult(
				success=False,
				error=message or f"Mail API returned {response.status_code}",
			)

		return MailResult(success=True, message_id=response.json().get("id"))
