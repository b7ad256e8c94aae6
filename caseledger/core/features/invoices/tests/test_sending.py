# (c) Copyright Datacraft, 2026
from decimal import Decimal

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from caseledger.core.exceptions import InvalidStatusError, NoEmailError, NotFoundError
from caseledger.core.features.cases.db.orm import DocumentType
from caseledger.core.features.invoices.db.orm import Invoice, InvoiceSend
from caseledger.core.features.invoices.schema import MarkPaidRequest, SendInvoiceRequest
from caseledger.core.features.invoices.sending import InvoiceSender
from caseledger.core.features.invoices.service import InvoiceLifecycleService
from caseledger.core.mail import MailResult


@pytest.fixture
def sender(db_session, mailer, storage, pdf_renderer) -> InvoiceSender:
	return InvoiceSender(db_session, mailer, storage, pdf_renderer)


async def count_sends(session: AsyncSession, invoice_id: str) -> int:
	stmt = select(func.count()).select_from(InvoiceSend).where(InvoiceSend.invoice_id == invoice_id)
	return (await session.execute(stmt)).scalar_one()


async def test_send_promotes_draft_to_unpaid(db_session, sender, mailer, make_invoice):
	invoice = await make_invoice(services=[("Consultation", 1, "80.00")])

	outcome = await sender.send(invoice.id, SendInvoiceRequest(), sent_by="handler-1")
	await db_session.commit()

	assert not outcome.failed
	assert outcome.record.message_id == "msg-0001"
	assert outcome.record.is_resend is False
	assert outcome.attachments_count == 1

	row = await db_session.get(Invoice, invoice.id, populate_existing=True)
	assert row.status == "unpaid"
	assert row.send_count == 1
	assert row.last_sent_at is not None
	assert row.pdf_generated_at is not None

	message = mailer.sent[0]
	assert message["to"] == "claims@partner-insurer.ge"
	assert message["reply_to"] == "billing@medassist.ge"
	assert invoice.invoice_number in message["subject"]
	attachment = message["attachments"][0]
	assert attachment.filename == f"Invoice-{invoice.invoice_number}.pdf"
	assert attachment.content.startswith(b"%PDF")


async def test_second_send_is_resend(db_session, sender, make_invoice):
	invoice = await make_invoice()

	await sender.send(invoice.id, SendInvoiceRequest())
	outcome = await sender.send(invoice.id, SendInvoiceRequest())
	await db_session.commit()

	assert outcome.record.is_resend is True
	row = await db_session.get(Invoice, invoice.id, populate_existing=True)
	assert row.status == "unpaid"
	assert row.send_count == 2
	assert await count_sends(db_session, invoice.id) == 2


async def test_recipient_override_and_cc_cleanup(db_session, sender, mailer, make_invoice):
	invoice = await make_invoice(
		recipient_email="finance@partner-insurer.ge",
		cc_emails=["ops@medassist.ge", "override@insurer.ge"],
	)

	await sender.send(invoice.id, SendInvoiceRequest(email="override@insurer.ge"))

	message = mailer.sent[0]
	assert message["to"] == "override@insurer.ge"
	assert message["cc"] == ["ops@medassist.ge"]


async def test_missing_document_is_reported_not_raised(
	db_session, sender, mailer, make_case, make_document, make_invoice
):
	case = await make_case()
	await make_document(case.id, DocumentType.MEDICAL, "discharge.pdf")
	await make_document(case.id, DocumentType.MEDICAL, "lost.pdf", stored=False)
	await make_document(case.id, DocumentType.PATIENT, "passport.pdf")
	invoice = await make_invoice(case=case, attach_medical_docs=True)

	outcome = await sender.send(invoice.id, SendInvoiceRequest())
	await db_session.commit()

	assert not outcome.failed
	assert outcome.attachments_count == 2
	assert [f.file_name for f in outcome.failed_attachments] == ["lost.pdf"]
	assert outcome.record.failed_attachments[0]["file_name"] == "lost.pdf"
	names = [a.filename for a in mailer.sent[0]["attachments"]]
	assert "discharge.pdf" in names
	assert "passport.pdf" not in names


async def test_request_flags_override_invoice_flags(db_session, sender, mailer, make_case, make_document, make_invoice):
	case = await make_case()
	await make_document(case.id, DocumentType.PATIENT, "passport.pdf")
	invoice = await make_invoice(case=case)

	outcome = await sender.send(invoice.id, SendInvoiceRequest(attach_patient_docs=True))

	assert outcome.attachments_count == 2
	assert mailer.sent[0]["attachments"][1].filename == "passport.pdf"


async def test_no_email_is_rejected_before_any_write(db_session, sender, mailer, make_partner, make_invoice):
	partner = await make_partner(email=None)
	invoice = await make_invoice(recipient=partner)

	with pytest.raises(NoEmailError):
		await sender.send(invoice.id, SendInvoiceRequest())

	assert mailer.sent == []
	assert await count_sends(db_session, invoice.id) == 0


@pytest.mark.parametrize("final_status", ["paid", "cancelled"])
async def test_final_invoices_cannot_be_sent(db_session, sender, mailer, make_invoice, final_status):
	invoice = await make_invoice(status="unpaid")
	service = InvoiceLifecycleService(db_session)
	if final_status == "paid":
		await service.mark_paid(invoice.id, MarkPaidRequest())
	else:
		await service.cancel(invoice.id)
	await db_session.commit()

	with pytest.raises(InvalidStatusError):
		await sender.send(invoice.id, SendInvoiceRequest())

	assert mailer.sent == []
	assert await count_sends(db_session, invoice.id) == 0


async def test_unknown_invoice(sender):
	with pytest.raises(NotFoundError):
		await sender.send("missing", SendInvoiceRequest())


async def test_failed_delivery_is_logged(db_session, sender, mailer, make_invoice):
	mailer.result = MailResult(success=False, error="mailbox unavailable")
	invoice = await make_invoice()

	outcome = await sender.send(invoice.id, SendInvoiceRequest())
	await db_session.commit()

	assert outcome.failed
	assert outcome.record.error_message == "mailbox unavailable"
	row = await db_session.get(Invoice, invoice.id, populate_existing=True)
	assert row.status == "draft"
	assert row.send_count == 0
	assert await count_sends(db_session, invoice.id) == 1


async def test_pdf_failure_is_logged(db_session, mailer, storage, make_invoice):
	class BrokenRenderer:
		def render(self, *args, **kwargs):
			raise RuntimeError("font missing")

	invoice = await make_invoice()
	outcome = await InvoiceSender(db_session, mailer, storage, BrokenRenderer()).send(
		invoice.id, SendInvoiceRequest()
	)
	await db_session.commit()

	assert outcome.failed
	assert outcome.record.error_message == "PDF generation failed"
	assert "font missing" not in outcome.record.error_message
	assert mailer.sent == []
	assert await count_sends(db_session, invoice.id) == 1


async def test_send_keeps_amounts(db_session, sender, make_invoice):
	invoice = await make_invoice(services=[("A", 2, "60")], franchise_amount=Decimal("20"))

	await sender.send(invoice.id, SendInvoiceRequest())
	await db_session.commit()

	row = await db_session.get(Invoice, invoice.id, populate_existing=True)
	assert row.total == Decimal("100.00")
