# (c) Copyright Datacraft, 2026
"""Flat export rows for live invoices."""
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from caseledger.core.features.cases.db.orm import Case
from caseledger.core.features.partners.db.orm import OurCompany, Partner
from caseledger.core.utils.export import export_value

from .db.orm import Invoice, InvoiceStatus

INVOICE_EXPORT_COLUMNS = [
	"Invoice Number",
	"Status",
	"Case",
	"Patient",
	"From",
	"To",
	"Currency",
	"Subtotal",
	"Franchise",
	"Total",
	"Sent",
	"Send Count",
	"Paid",
	"Paid Amount",
	"Created",
]


async def invoice_export_rows(
	session: AsyncSession,
	status: InvoiceStatus | None = None,
) -> list[dict]:
	stmt = (
		select(Invoice, Case.case_number, Case.patient_name, OurCompany.name, Partner.name)
		.join(Case, Case.id == Invoice.case_id)
		.join(OurCompany, OurCompany.id == Invoice.sender_id)
		.join(Partner, Partner.id == Invoice.recipient_id)
		.where(Invoice.deleted_at.is_(None))
	)
	if status:
		stmt = stmt.where(Invoice.status == status.value)
	stmt = stmt.order_by(Invoice.created_at.desc(), Invoice.id.desc())

	rows = []
	result = await session.execute(stmt)
	for invoice, case_number, patient_name, sender_name, recipient_name in result.all():
		values = [
			invoice.invoice_number,
			invoice.status,
			case_number,
			patient_name,
			sender_name,
			recipient_name,
			invoice.currency,
			invoice.subtotal,
			invoice.franchise_amount,
			invoice.total,
			invoice.last_sent_at,
			invoice.send_count,
			invoice.paid_at,
			invoice.paid_amount,
			invoice.created_at,
		]
		rows.append({
			column: export_value(value)
			for column, value in zip(INVOICE_EXPORT_COLUMNS, values)
		})
	return rows
