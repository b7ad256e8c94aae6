# (c) Copyright Datacraft, 2026
"""
Invoice delivery.

A send renders the PDF, gathers the case documents the invoice asks for,
hands everything to the mail backend and logs the attempt. Individual
document fetch failures are collected and reported instead of aborting.
"""
import logging
from dataclasses import dataclass, field

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from caseledger.core.config import get_settings
from caseledger.core.exceptions import NoEmailError
from caseledger.core.features.cases.db.orm import Case, CaseDocument, DocumentType
from caseledger.core.features.partners.db.orm import OurCompany, Partner
from caseledger.core.mail import MailAttachment, MailBackend
from caseledger.core.storage import StorageBackend, StorageError
from caseledger.core.utils.tz import utc_now

from .db.orm import Invoice, InvoiceSend, InvoiceStatus, SendStatus
from .lifecycle import check_sendable
from .pdf import InvoicePdfRenderer
from .schema import FailedAttachment, SendInvoiceRequest
from .service import InvoiceLifecycleService
from .templates import default_email_content

logger = logging.getLogger(__name__)

PDF_FAILED_MESSAGE = "PDF generation failed"

ATTACHMENT_FLAGS = (
	("attach_patient_docs", DocumentType.PATIENT),
	("attach_original_docs", DocumentType.ORIGINAL),
	("attach_medical_docs", DocumentType.MEDICAL),
)


@dataclass
class SendOutcome:
	record: InvoiceSend
	attachments_count: int
	failed_attachments: list[FailedAttachment] = field(default_factory=list)

	@property
	def failed(self) -> bool:
		return self.record.status == SendStatus.FAILED.value


def resolve_recipient(
	request: SendInvoiceRequest,
	invoice: Invoice,
	partner: Partner | None,
) -> str:
	"""Explicit override, then the invoice's address, then the partner default."""
	email = request.email or invoice.recipient_email or (partner.email if partner else None)
	if not email:
		raise NoEmailError()
	return email


def resolve_cc(request: SendInvoiceRequest, invoice: Invoice, to: str) -> list[str]:
	source = request.cc_emails if request.cc_emails is not None else (invoice.cc_emails or [])
	cc = []
	for address in source:
		address = str(address).strip()
		if address and "@" in address and address.lower() != to.lower() and address not in cc:
			cc.append(address)
	return cc


def wanted_document_types(request: SendInvoiceRequest, invoice: Invoice) -> list[DocumentType]:
	wanted = []
	for flag, doc_type in ATTACHMENT_FLAGS:
		override = getattr(request, flag)
		enabled = override if override is not None else getattr(invoice, flag)
		if enabled:
			wanted.append(doc_type)
	return wanted


class InvoiceSender:

	def __init__(
		self,
		session: AsyncSession,
		mailer: MailBackend,
		storage: StorageBackend,
		renderer: InvoicePdfRenderer,
	):
		self.session = session
		self.mailer = mailer
		self.storage = storage
		self.renderer = renderer

	async def send(
		self,
		invoice_id: str,
		request: SendInvoiceRequest,
		sent_by: str | None = None,
	) -> SendOutcome:
		"""Send an invoice by email and log the attempt.

		Raises NOT_FOUND, INVALID_STATUS or NO_EMAIL before anything is
		written. Otherwise an ``InvoiceSend`` row is always added, whether
		delivery succeeded or not.
		"""
		invoice = await InvoiceLifecycleService(self.session).get(invoice_id, with_services=True)
		check_sendable(invoice.status)

		case = await self.session.get(Case, invoice.case_id)
		sender = await self.session.get(OurCompany, invoice.sender_id)
		partner = await self.session.get(Partner, invoice.recipient_id)

		to = resolve_recipient(request, invoice, partner)
		cc = resolve_cc(request, invoice, to)

		default_subject, default_body = default_email_content(invoice, sender, partner, case)
		subject = request.subject or invoice.email_subject or default_subject
		body = request.body or invoice.email_body or default_body

		is_resend = await self._has_previous_sends(invoice.id)

		try:
			pdf = self.renderer.render(
				invoice, list(invoice.services), sender, partner, case, invoice.language
			)
		except Exception as e:
			logger.exception(f"PDF rendering failed for invoice {invoice.invoice_number}: {e}")
			record = self._record(
				invoice, sent_by, to, cc, subject, body, is_resend,
				status=SendStatus.FAILED, error=PDF_FAILED_MESSAGE,
			)
			await self.session.flush()
			return SendOutcome(record=record, attachments_count=0)

		invoice.pdf_generated_at = utc_now()

		attachments = [MailAttachment(filename=f"Invoice-{invoice.invoice_number}.pdf", content=pdf)]
		extra, failed = await self._collect_documents(
			invoice.case_id, wanted_document_types(request, invoice)
		)
		attachments.extend(extra)

		settings = get_settings()
		from_name = settings.mail_from_name or sender.name
		result = await self.mailer.send(
			sender=f"{from_name} <{settings.mail_from_address}>",
			to=to,
			cc=cc,
			subject=subject,
			body=body,
			attachments=attachments,
			reply_to=sender.email,
		)

		if result.success:
			record = self._record(
				invoice, sent_by, to, cc, subject, body, is_resend,
				status=SendStatus.SENT, message_id=result.message_id,
				attachments_count=len(attachments), failed=failed,
			)
			invoice.send_count += 1
			invoice.last_sent_at = record.sent_at
			if invoice.status == InvoiceStatus.DRAFT.value:
				invoice.status = InvoiceStatus.UNPAID.value
			invoice.updated_at = utc_now()
			logger.info(f"Sent invoice {invoice.invoice_number} to {to}")
		else:
			record = self._record(
				invoice, sent_by, to, cc, subject, body, is_resend,
				status=SendStatus.FAILED, error=result.error,
				attachments_count=len(attachments), failed=failed,
			)
			logger.error(f"Sending invoice {invoice.invoice_number} failed: {result.error}")

		await self.session.flush()
		return SendOutcome(
			record=record,
			attachments_count=len(attachments),
			failed_attachments=failed,
		)

	async def _collect_documents(
		self,
		case_id: str,
		doc_types: list[DocumentType],
	) -> tuple[list[MailAttachment], list[FailedAttachment]]:
		if not doc_types:
			return [], []

		stmt = (
			select(CaseDocument)
			.where(
				CaseDocument.case_id == case_id,
				CaseDocument.type.in_([t.value for t in doc_types]),
			)
			.order_by(CaseDocument.type, CaseDocument.created_at)
		)
		documents = (await self.session.execute(stmt)).scalars().all()

		attachments: list[MailAttachment] = []
		failed: list[FailedAttachment] = []
		for document in documents:
			try:
				content = await self.storage.get(document.storage_key)
			except StorageError as e:
				logger.warning(f"Could not fetch document {document.id} for attachment: {e}")
				failed.append(FailedAttachment(file_name=document.file_name, error=str(e)))
				continue
			attachments.append(MailAttachment(filename=document.file_name, content=content))
		return attachments, failed

	async def _has_previous_sends(self, invoice_id: str) -> bool:
		stmt = select(func.count()).select_from(InvoiceSend).where(
			InvoiceSend.invoice_id == invoice_id
		)
		return (await self.session.execute(stmt)).scalar_one() > 0

	def _record(
		self,
		invoice: Invoice,
		sent_by: str | None,
		to: str,
		cc: list[str],
		subject: str,
		body: str,
		is_resend: bool,
		status: SendStatus,
		message_id: str | None = None,
		error: str | None = None,
		attachments_count: int = 0,
		failed: list[FailedAttachment] | None = None,
	) -> InvoiceSend:
		record = InvoiceSend(
			invoice_id=invoice.id,
			sent_by=sent_by,
			email=to,
			cc_emails=cc,
			subject=subject,
			body=body,
			status=status.value,
			message_id=message_id,
			error_message=error,
			attachments_count=attachments_count,
			failed_attachments=[f.model_dump() for f in failed or []],
			is_resend=is_resend,
			sent_at=utc_now(),
		)
		self.session.add(record)
		return record
