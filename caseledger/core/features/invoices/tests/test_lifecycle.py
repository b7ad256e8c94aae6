# (c) Copyright Datacraft, 2026
"""Invoice state machine, amounts and lifecycle service."""
from decimal import Decimal
from unittest.mock import patch

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from caseledger.core.exceptions import AlreadyPaidError, InvalidStatusError, NotFoundError
from caseledger.core.features.cases.db.orm import Case
from caseledger.core.features.invoices.db.orm import Invoice, InvoiceService, InvoiceStatus
from caseledger.core.features.invoices.lifecycle import (
	check_payable,
	check_sendable,
	check_transition,
	invoice_amounts,
	line_amount,
)
from caseledger.core.features.invoices.schema import InvoiceCreate, InvoiceUpdate, MarkPaidRequest
from caseledger.core.features.invoices.service import InvoiceLifecycleService
from caseledger.core.features.partners.service import PartnerService


def test_allowed_transitions():
	check_transition("draft", "unpaid")
	check_transition("draft", "cancelled")
	check_transition("unpaid", "paid")
	check_transition("unpaid", "cancelled")


@pytest.mark.parametrize("current,target", [
	("paid", "unpaid"),
	("paid", "cancelled"),
	("cancelled", "draft"),
	("cancelled", "unpaid"),
	("unpaid", "draft"),
])
def test_forbidden_transitions(current, target):
	with pytest.raises(InvalidStatusError):
		check_transition(current, target)


def test_send_and_pay_guards():
	check_sendable("draft")
	check_sendable("unpaid")
	with pytest.raises(InvalidStatusError):
		check_sendable("paid")
	with pytest.raises(InvalidStatusError):
		check_sendable("cancelled")

	with pytest.raises(AlreadyPaidError):
		check_payable("paid")
	with pytest.raises(InvalidStatusError):
		check_payable("cancelled")


def test_amounts():
	assert line_amount(3, Decimal("33.335")).total == Decimal("100.02")

	amounts = invoice_amounts([Decimal("200"), Decimal("100")], Decimal("50"))
	assert amounts.subtotal == Decimal("300.00")
	assert amounts.total == Decimal("250.00")


def test_franchise_larger_than_subtotal_clamps_to_zero():
	amounts = invoice_amounts([Decimal("40")], Decimal("100"))

	assert amounts.total == Decimal("0.00")
	assert amounts.franchise_amount == Decimal("100.00")


async def test_create_computes_amounts_and_counts(db_session: AsyncSession, make_invoice):
	invoice = await make_invoice(
		services=[("Consultation", 2, "100.00"), ("X-ray", 1, "50.00")],
		franchise_amount=Decimal("30"),
	)

	assert invoice.status == InvoiceStatus.DRAFT.value
	assert invoice.subtotal == Decimal("250.00")
	assert invoice.total == Decimal("220.00")
	assert [line.total for line in invoice.services] == [Decimal("200.00"), Decimal("50.00")]
	assert [line.sort_order for line in invoice.services] == [0, 1]

	case = await db_session.get(Case, invoice.case_id, populate_existing=True)
	assert case.invoices_count == 1


async def test_update_replaces_service_lines(db_session: AsyncSession, make_invoice):
	invoice = await make_invoice(services=[("A", 1, "10"), ("B", 1, "20")])

	updated = await InvoiceLifecycleService(db_session).update(
		invoice.id,
		InvoiceUpdate(services=[{"description": "C", "quantity": 4, "unit_price": "25"}]),
	)
	await db_session.commit()

	assert [line.description for line in updated.services] == ["C"]
	assert updated.subtotal == Decimal("100.00")
	assert updated.total == Decimal("100.00")

	stored = (await db_session.execute(
		select(InvoiceService).where(InvoiceService.invoice_id == invoice.id)
	)).scalars().all()
	assert len(stored) == 1


async def test_failed_line_replacement_rolls_back(db_session: AsyncSession, make_invoice):
	invoice = await make_invoice(services=[("A", 1, "10"), ("B", 1, "20")])

	with patch(
		"caseledger.core.features.invoices.service.invoice_amounts",
		side_effect=RuntimeError("amounts unavailable"),
	):
		with pytest.raises(RuntimeError):
			await InvoiceLifecycleService(db_session).update(
				invoice.id,
				InvoiceUpdate(services=[{"description": "C", "quantity": 4, "unit_price": "25"}]),
			)
	await db_session.rollback()

	lines = (await db_session.execute(
		select(InvoiceService.description, InvoiceService.total)
		.where(InvoiceService.invoice_id == invoice.id)
		.order_by(InvoiceService.sort_order)
	)).all()
	assert [tuple(line) for line in lines] == [("A", Decimal("10.00")), ("B", Decimal("20.00"))]
	stored = await db_session.get(Invoice, invoice.id, populate_existing=True)
	assert stored.subtotal == Decimal("30.00")
	assert stored.total == Decimal("30.00")


async def test_update_franchise_recomputes_total(db_session: AsyncSession, make_invoice):
	invoice = await make_invoice(services=[("A", 1, "300")])

	updated = await InvoiceLifecycleService(db_session).update(
		invoice.id, InvoiceUpdate(franchise_amount=Decimal("50"))
	)

	assert updated.subtotal == Decimal("300.00")
	assert updated.total == Decimal("250.00")


async def test_paid_invoice_amounts_are_frozen(db_session: AsyncSession, make_invoice):
	invoice = await make_invoice(status="unpaid")
	service = InvoiceLifecycleService(db_session)
	await service.mark_paid(invoice.id, MarkPaidRequest())
	await db_session.commit()

	with pytest.raises(InvalidStatusError):
		await service.update(invoice.id, InvoiceUpdate(franchise_amount=Decimal("1")))


async def test_mark_paid(db_session: AsyncSession, make_invoice):
	invoice = await make_invoice(status="unpaid", services=[("A", 1, "120")])
	service = InvoiceLifecycleService(db_session)

	paid = await service.mark_paid(
		invoice.id, MarkPaidRequest(payment_reference="TRX-1", payment_notes="wire")
	)
	await db_session.commit()

	assert paid.status == "paid"
	assert paid.paid_at is not None
	assert paid.paid_amount == Decimal("120.00")
	assert paid.payment_reference == "TRX-1"

	with pytest.raises(AlreadyPaidError):
		await service.mark_paid(invoice.id, MarkPaidRequest())


async def test_cancel(db_session: AsyncSession, make_invoice):
	invoice = await make_invoice()
	service = InvoiceLifecycleService(db_session)

	cancelled = await service.cancel(invoice.id)
	assert cancelled.status == "cancelled"

	with pytest.raises(InvalidStatusError):
		await service.mark_paid(invoice.id, MarkPaidRequest())
	with pytest.raises(InvalidStatusError):
		await service.update(invoice.id, InvoiceUpdate(status="unpaid"))


async def test_duplicate_scenario(db_session: AsyncSession, make_company, make_invoice):
	sender = await make_company(invoice_prefix="INV")
	source = await make_invoice(
		sender=sender,
		services=[("Hospital stay", 2, "100.00"), ("Medication", 1, "100.00")],
		franchise_amount=Decimal("50"),
		status="unpaid",
	)
	row = await db_session.get(Invoice, source.id)
	row.invoice_number = "INV-202501-0007"
	await db_session.commit()

	clone = await InvoiceLifecycleService(db_session).duplicate(source.id, created_by="handler-2")
	await db_session.commit()

	assert clone.id != source.id
	assert clone.invoice_number != "INV-202501-0007"
	assert clone.invoice_number.startswith("INV-")
	assert clone.status == "draft"
	assert clone.total == Decimal("250.00")
	assert clone.subtotal == Decimal("300.00")
	assert "INV-202501-0007" in clone.notes
	assert [(s.description, s.quantity, s.unit_price) for s in clone.services] == [
		("Hospital stay", 2, Decimal("100.00")),
		("Medication", 1, Decimal("100.00")),
	]

	original = await InvoiceLifecycleService(db_session).get(source.id, with_services=True)
	assert original.invoice_number == "INV-202501-0007"
	assert original.status == "unpaid"
	assert len(original.services) == 2

	case = await db_session.get(Case, source.case_id, populate_existing=True)
	assert case.invoices_count == 2


async def test_delete_is_soft_and_recounts(db_session: AsyncSession, make_invoice):
	invoice = await make_invoice()
	service = InvoiceLifecycleService(db_session)

	await service.delete(invoice.id)
	await db_session.commit()

	with pytest.raises(NotFoundError):
		await service.get(invoice.id)
	items, total = await service.list_invoices()
	assert total == 0 and items == []

	row = await db_session.get(Invoice, invoice.id)
	assert row is not None and row.deleted_at is not None
	case = await db_session.get(Case, invoice.case_id, populate_existing=True)
	assert case.invoices_count == 0


async def test_create_requires_live_parties(db_session: AsyncSession, make_case, make_company, make_partner):
	case = await make_case()
	sender = await make_company()
	partner = await make_partner()
	await PartnerService(db_session).delete(partner.id)
	await db_session.commit()

	with pytest.raises(NotFoundError):
		await InvoiceLifecycleService(db_session).create(InvoiceCreate(
			case_id=case.id,
			sender_id=sender.id,
			recipient_id=partner.id,
			services=[{"description": "A", "unit_price": "1"}],
		))
