# (c) Copyright Datacraft, 2026
"""
API router for the invoice lifecycle.
"""
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from caseledger.core.auth import CurrentActor
from caseledger.core.db.engine import get_db
from caseledger.core.exceptions import SendFailedError
from caseledger.core.features.cases.db.orm import Case
from caseledger.core.features.partners.db.orm import OurCompany, Partner
from caseledger.core.mail import MailBackend, get_mail_backend
from caseledger.core.storage import StorageBackend, get_storage
from caseledger.core.utils.export import ExportFormat, export_response
from caseledger.core.utils.tz import utc_now

from .db.orm import InvoiceStatus
from .export import INVOICE_EXPORT_COLUMNS, invoice_export_rows
from .pdf import InvoicePdfRenderer, get_pdf_renderer
from .schema import (
	Invoice,
	InvoiceCreate,
	InvoiceDetail,
	InvoiceList,
	InvoiceSendRecord,
	InvoiceUpdate,
	MarkPaidRequest,
	SendInvoiceRequest,
	SendInvoiceResult,
)
from .sending import InvoiceSender
from .service import InvoiceLifecycleService

router = APIRouter(prefix="/invoices", tags=["invoices"])


@router.get("", response_model=InvoiceList)
async def list_invoices(
	db: Annotated[AsyncSession, Depends(get_db)],
	actor: CurrentActor,
	status_filter: InvoiceStatus | None = Query(None, alias="status"),
	case_id: str | None = None,
	recipient_id: str | None = None,
	search: str | None = Query(None, max_length=100),
	page: int = Query(1, ge=1),
	page_size: int = Query(20, ge=1, le=100),
):
	items, total = await InvoiceLifecycleService(db).list_invoices(
		status=status_filter,
		case_id=case_id,
		recipient_id=recipient_id,
		search=search,
		page=page,
		page_size=page_size,
	)
	return InvoiceList(items=items, total=total, page=page, page_size=page_size)


@router.post("", response_model=InvoiceDetail, status_code=status.HTTP_201_CREATED)
async def create_invoice(
	data: InvoiceCreate,
	db: Annotated[AsyncSession, Depends(get_db)],
	actor: CurrentActor,
):
	invoice = await InvoiceLifecycleService(db).create(data, created_by=actor.id)
	await db.commit()
	return invoice


@router.get("/export")
async def export_invoices(
	db: Annotated[AsyncSession, Depends(get_db)],
	actor: CurrentActor,
	fmt: ExportFormat = Query(ExportFormat.CSV, alias="format"),
	status_filter: InvoiceStatus | None = Query(None, alias="status"),
):
	rows = await invoice_export_rows(db, status=status_filter)
	return export_response(INVOICE_EXPORT_COLUMNS, rows, fmt, "invoices")


@router.get("/{invoice_id}", response_model=InvoiceDetail)
async def get_invoice(
	invoice_id: str,
	db: Annotated[AsyncSession, Depends(get_db)],
	actor: CurrentActor,
):
	return await InvoiceLifecycleService(db).get(invoice_id, with_services=True)


@router.patch("/{invoice_id}", response_model=InvoiceDetail)
async def update_invoice(
	invoice_id: str,
	data: InvoiceUpdate,
	db: Annotated[AsyncSession, Depends(get_db)],
	actor: CurrentActor,
):
	invoice = await InvoiceLifecycleService(db).update(invoice_id, data)
	await db.commit()
	return invoice


@router.delete("/{invoice_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_invoice(
	invoice_id: str,
	db: Annotated[AsyncSession, Depends(get_db)],
	actor: CurrentActor,
):
	"""Move an invoice to trash."""
	await InvoiceLifecycleService(db).delete(invoice_id)
	await db.commit()


@router.post("/{invoice_id}/send", response_model=SendInvoiceResult)
async def send_invoice(
	invoice_id: str,
	data: SendInvoiceRequest,
	db: Annotated[AsyncSession, Depends(get_db)],
	mailer: Annotated[MailBackend, Depends(get_mail_backend)],
	storage: Annotated[StorageBackend, Depends(get_storage)],
	renderer: Annotated[InvoicePdfRenderer, Depends(get_pdf_renderer)],
	actor: CurrentActor,
):
	sender = InvoiceSender(db, mailer, storage, renderer)
	outcome = await sender.send(invoice_id, data, sent_by=actor.id)
	# The attempt is logged even when delivery failed
	await db.commit()

	if outcome.failed:
		raise SendFailedError(outcome.record.error_message or None)

	return SendInvoiceResult(
		send_id=outcome.record.id,
		message_id=outcome.record.message_id,
		email=outcome.record.email,
		sent_at=outcome.record.sent_at,
		attachments_count=outcome.attachments_count,
		failed_attachments=outcome.failed_attachments,
	)


@router.get("/{invoice_id}/sends", response_model=list[InvoiceSendRecord])
async def list_invoice_sends(
	invoice_id: str,
	db: Annotated[AsyncSession, Depends(get_db)],
	actor: CurrentActor,
):
	return await InvoiceLifecycleService(db).send_history(invoice_id)


@router.post("/{invoice_id}/mark-paid", response_model=Invoice)
async def mark_invoice_paid(
	invoice_id: str,
	data: MarkPaidRequest,
	db: Annotated[AsyncSession, Depends(get_db)],
	actor: CurrentActor,
):
	invoice = await InvoiceLifecycleService(db).mark_paid(invoice_id, data)
	await db.commit()
	return invoice


@router.post("/{invoice_id}/cancel", response_model=Invoice)
async def cancel_invoice(
	invoice_id: str,
	db: Annotated[AsyncSession, Depends(get_db)],
	actor: CurrentActor,
):
	invoice = await InvoiceLifecycleService(db).cancel(invoice_id)
	await db.commit()
	return invoice


@router.post(
	"/{invoice_id}/duplicate",
	response_model=InvoiceDetail,
	status_code=status.HTTP_201_CREATED,
)
async def duplicate_invoice(
	invoice_id: str,
	db: Annotated[AsyncSession, Depends(get_db)],
	actor: CurrentActor,
):
	invoice = await InvoiceLifecycleService(db).duplicate(invoice_id, created_by=actor.id)
	await db.commit()
	return invoice


@router.get("/{invoice_id}/pdf")
async def get_invoice_pdf(
	invoice_id: str,
	db: Annotated[AsyncSession, Depends(get_db)],
	renderer: Annotated[InvoicePdfRenderer, Depends(get_pdf_renderer)],
	actor: CurrentActor,
	language: str | None = Query(None, pattern="^(en|ka)$"),
):
	invoice = await InvoiceLifecycleService(db).get(invoice_id, with_services=True)
	pdf = renderer.render(
		invoice,
		list(invoice.services),
		await db.get(OurCompany, invoice.sender_id),
		await db.get(Partner, invoice.recipient_id),
		await db.get(Case, invoice.case_id),
		language,
	)
	invoice.pdf_generated_at = utc_now()
	await db.commit()

	return Response(
		content=pdf,
		media_type="application/pdf",
		headers={
			"Content-Disposition": f'inline; filename="Invoice-{invoice.invoice_number}.pdf"',
		},
	)
