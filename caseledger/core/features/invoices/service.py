# (c) Copyright Datacraft, 2026
"""Invoice service layer: create, edit, pay, duplicate and trash invoices."""
import logging

from sqlalchemy import delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from caseledger.core.exceptions import NotFoundError, InvalidStatusError
from caseledger.core.features.cases.db.orm import Case
from caseledger.core.features.cases.reconciler import reconcile_invoices_count
from caseledger.core.features.numbering import allocate_invoice_number
from caseledger.core.features.partners.db.orm import OurCompany, Partner
from caseledger.core.utils.tz import utc_now

from .db.orm import Invoice, InvoiceSend, InvoiceService, InvoiceStatus
from .lifecycle import (
	FINAL_STATUSES,
	check_payable,
	check_transition,
	invoice_amounts,
	line_amount,
)
from .schema import InvoiceCreate, InvoiceServiceInput, InvoiceUpdate, MarkPaidRequest

logger = logging.getLogger(__name__)

DUPLICATE_NOTE = "Duplicated from invoice: {number}"


class InvoiceLifecycleService:
	"""Owns invoice state and keeps amounts consistent with service lines."""

	def __init__(self, session: AsyncSession):
		self.session = session

	# ----- Reads -----

	async def get(self, invoice_id: str, with_services: bool = False) -> Invoice:
		stmt = select(Invoice).where(
			Invoice.id == invoice_id,
			Invoice.deleted_at.is_(None),
		)
		if with_services:
			stmt = stmt.options(selectinload(Invoice.services)).execution_options(
				populate_existing=True
			)
		invoice = (await self.session.execute(stmt)).scalar_one_or_none()
		if invoice is None:
			raise NotFoundError("Invoice not found")
		return invoice

	async def list_invoices(
		self,
		status: InvoiceStatus | None = None,
		case_id: str | None = None,
		recipient_id: str | None = None,
		search: str | None = None,
		page: int = 1,
		page_size: int = 20,
	) -> tuple[list[Invoice], int]:
		stmt = select(Invoice).where(Invoice.deleted_at.is_(None))
		if status:
			stmt = stmt.where(Invoice.status == status.value)
		if case_id:
			stmt = stmt.where(Invoice.case_id == case_id)
		if recipient_id:
			stmt = stmt.where(Invoice.recipient_id == recipient_id)
		if search:
			like = f"%{search}%"
			stmt = stmt.where(or_(
				Invoice.invoice_number.ilike(like),
				Invoice.notes.ilike(like),
			))

		count_stmt = select(func.count()).select_from(stmt.subquery())
		total = (await self.session.execute(count_stmt)).scalar_one()

		stmt = (
			stmt.order_by(Invoice.created_at.desc(), Invoice.id.desc())
			.offset((page - 1) * page_size)
			.limit(page_size)
		)
		result = await self.session.execute(stmt)
		return list(result.scalars().all()), total

	async def send_history(self, invoice_id: str) -> list[InvoiceSend]:
		await self.get(invoice_id)
		stmt = (
			select(InvoiceSend)
			.where(InvoiceSend.invoice_id == invoice_id)
			.order_by(InvoiceSend.sent_at.desc())
		)
		result = await self.session.execute(stmt)
		return list(result.scalars().all())

	# ----- Mutations -----

	async def create(self, data: InvoiceCreate, created_by: str | None = None) -> Invoice:
		await self._live_case(data.case_id)
		sender = await self._live_sender(data.sender_id)
		await self._live_recipient(data.recipient_id)

		invoice_number = await allocate_invoice_number(self.session, sender.invoice_prefix)

		invoice = Invoice(
			invoice_number=invoice_number,
			status=data.status.value,
			case_id=data.case_id,
			sender_id=data.sender_id,
			recipient_id=data.recipient_id,
			currency=data.currency.value,
			language=data.language.value,
			recipient_email=data.recipient_email,
			cc_emails=list(data.cc_emails),
			email_subject=data.email_subject,
			email_body=data.email_body,
			attach_patient_docs=data.attach_patient_docs,
			attach_original_docs=data.attach_original_docs,
			attach_medical_docs=data.attach_medical_docs,
			notes=data.notes,
			created_by=created_by,
		)
		self.session.add(invoice)
		await self.session.flush()

		line_totals = self._add_lines(invoice.id, data.services)
		self._apply_amounts(invoice, line_totals, data.franchise_amount)
		await self.session.flush()

		await reconcile_invoices_count(self.session, invoice.case_id)
		logger.info(f"Created invoice {invoice.invoice_number} ({invoice.id})")
		return await self.get(invoice.id, with_services=True)

	async def update(self, invoice_id: str, data: InvoiceUpdate) -> Invoice:
		invoice = await self.get(invoice_id)
		update_data = data.model_dump(exclude_unset=True)

		new_status = update_data.pop("status", None)
		services = update_data.pop("services", None)
		franchise = update_data.pop("franchise_amount", None)

		touches_amounts = services is not None or franchise is not None
		if touches_amounts and InvoiceStatus(invoice.status) in FINAL_STATUSES:
			raise InvalidStatusError(
				f"Amounts of a {invoice.status} invoice can no longer change"
			)
		if new_status is not None:
			check_transition(invoice.status, new_status)
		if update_data.get("sender_id"):
			await self._live_sender(update_data["sender_id"])
		if update_data.get("recipient_id"):
			await self._live_recipient(update_data["recipient_id"])

		for key, value in update_data.items():
			if value is None and key in ("sender_id", "recipient_id", "currency", "language"):
				continue
			if key in ("currency", "language"):
				value = value.value
			if key.startswith("attach_") and value is None:
				continue
			setattr(invoice, key, value)

		if services is not None:
			await self.session.execute(
				delete(InvoiceService).where(InvoiceService.invoice_id == invoice.id)
			)
			line_totals = self._add_lines(
				invoice.id,
				[InvoiceServiceInput(**s) for s in services],
			)
		else:
			line_totals = await self._current_line_totals(invoice.id)

		if touches_amounts:
			self._apply_amounts(
				invoice,
				line_totals,
				franchise if franchise is not None else invoice.franchise_amount,
			)

		if new_status is not None:
			invoice.status = new_status.value
			if new_status == InvoiceStatus.PAID and invoice.paid_at is None:
				invoice.paid_at = utc_now()
				invoice.paid_amount = invoice.total

		invoice.updated_at = utc_now()
		await self.session.flush()
		logger.info(f"Updated invoice {invoice.invoice_number}")
		return await self.get(invoice.id, with_services=True)

	async def cancel(self, invoice_id: str) -> Invoice:
		invoice = await self.get(invoice_id)
		check_transition(invoice.status, InvoiceStatus.CANCELLED)
		invoice.status = InvoiceStatus.CANCELLED.value
		invoice.updated_at = utc_now()
		await self.session.flush()
		logger.info(f"Cancelled invoice {invoice.invoice_number}")
		return invoice

	async def mark_paid(self, invoice_id: str, data: MarkPaidRequest) -> Invoice:
		invoice = await self.get(invoice_id)
		check_payable(invoice.status)

		invoice.status = InvoiceStatus.PAID.value
		invoice.paid_at = data.paid_at or utc_now()
		invoice.paid_amount = (
			data.paid_amount if data.paid_amount is not None else invoice.total
		)
		invoice.payment_reference = data.payment_reference
		invoice.payment_notes = data.payment_notes
		invoice.updated_at = utc_now()
		await self.session.flush()
		logger.info(f"Invoice {invoice.invoice_number} marked paid")
		return invoice

	async def duplicate(self, invoice_id: str, created_by: str | None = None) -> Invoice:
		"""Copy an invoice under a new number. The copy always starts as draft."""
		source = await self.get(invoice_id, with_services=True)
		await self._live_case(source.case_id)
		sender = await self.session.get(OurCompany, source.sender_id)

		invoice_number = await allocate_invoice_number(
			self.session,
			sender.invoice_prefix if sender else None,
		)
		clone = Invoice(
			invoice_number=invoice_number,
			status=InvoiceStatus.DRAFT.value,
			case_id=source.case_id,
			sender_id=source.sender_id,
			recipient_id=source.recipient_id,
			currency=source.currency,
			language=source.language,
			recipient_email=source.recipient_email,
			cc_emails=list(source.cc_emails or []),
			email_subject=source.email_subject,
			email_body=source.email_body,
			attach_patient_docs=source.attach_patient_docs,
			attach_original_docs=source.attach_original_docs,
			attach_medical_docs=source.attach_medical_docs,
			notes=DUPLICATE_NOTE.format(number=source.invoice_number),
			created_by=created_by,
		)
		self.session.add(clone)
		await self.session.flush()

		line_totals = self._add_lines(
			clone.id,
			[
				InvoiceServiceInput(
					description=line.description,
					quantity=line.quantity,
					unit_price=line.unit_price,
				)
				for line in source.services
			],
		)
		self._apply_amounts(clone, line_totals, source.franchise_amount)
		await self.session.flush()

		await reconcile_invoices_count(self.session, clone.case_id)
		logger.info(f"Duplicated invoice {source.invoice_number} as {clone.invoice_number}")
		return await self.get(clone.id, with_services=True)

	async def delete(self, invoice_id: str) -> None:
		"""Move an invoice to trash."""
		invoice = await self.get(invoice_id)
		invoice.deleted_at = utc_now()
		await self.session.flush()
		await reconcile_invoices_count(self.session, invoice.case_id)
		logger.info(f"Moved invoice {invoice.invoice_number} to trash")

	# ----- Helpers -----

	def _add_lines(self, invoice_id: str, lines: list[InvoiceServiceInput]) -> list:
		totals = []
		for index, line in enumerate(lines):
			amount = line_amount(line.quantity, line.unit_price)
			self.session.add(InvoiceService(
				invoice_id=invoice_id,
				description=line.description,
				quantity=amount.quantity,
				unit_price=amount.unit_price,
				total=amount.total,
				sort_order=index,
			))
			totals.append(amount.total)
		return totals

	async def _current_line_totals(self, invoice_id: str) -> list:
		stmt = select(InvoiceService.total).where(InvoiceService.invoice_id == invoice_id)
		return list((await self.session.execute(stmt)).scalars().all())

	def _apply_amounts(self, invoice: Invoice, line_totals: list, franchise) -> None:
		amounts = invoice_amounts(line_totals, franchise)
		invoice.subtotal = amounts.subtotal
		invoice.franchise_amount = amounts.franchise_amount
		invoice.total = amounts.total

	async def _live_case(self, case_id: str) -> Case:
		stmt = select(Case).where(Case.id == case_id, Case.deleted_at.is_(None))
		case = (await self.session.execute(stmt)).scalar_one_or_none()
		if case is None:
			raise NotFoundError("Case not found")
		return case

	async def _live_sender(self, sender_id: str) -> OurCompany:
		stmt = select(OurCompany).where(
			OurCompany.id == sender_id,
			OurCompany.deleted_at.is_(None),
		)
		sender = (await self.session.execute(stmt)).scalar_one_or_none()
		if sender is None:
			raise NotFoundError("Sender company not found")
		return sender

	async def _live_recipient(self, recipient_id: str) -> Partner:
		stmt = select(Partner).where(
			Partner.id == recipient_id,
			Partner.deleted_at.is_(None),
		)
		recipient = (await self.session.execute(stmt)).scalar_one_or_none()
		if recipient is None:
			raise NotFoundError("Recipient partner not found")
		return recipient
