# (c) Copyright Datacraft, 2026
"""Outbound email delivery interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass
class MailAttachment:
	filename: str
	content: bytes


@dataclass
class MailResult:
	"""Outcome of one delivery attempt."""
	success: bool
	message_id: str | None = None
	error: str | None = None


class MailBackend(ABC):
	"""Sends a plain-text email with attachments."""

	@abstractmethod
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
		"""Deliver one message.

		Delivery problems are reported through ``MailResult`` rather than
		raised, so callers can record the failed attempt.
		"""
		...
