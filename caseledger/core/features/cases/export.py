# (c) Copyright Datacraft, 2026
"""Flat export rows for live cases."""
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from caseledger.core.features.partners.db.orm import Partner
from caseledger.core.utils.export import export_value

from .db.orm import Case, CaseStatus

CASE_EXPORT_COLUMNS = [
	"Case Number",
	"Status",
	"Priority",
	"Patient Name",
	"Patient ID",
	"Birth Date",
	"Client",
	"Assigned To",
	"Medical",
	"Opened",
	"Closed",
	"Service Cost",
	"Assistance Cost",
	"Commission Cost",
	"Actions",
	"Documents",
	"Invoices",
]


async def case_export_rows(
	session: AsyncSession,
	status: CaseStatus | None = None,
) -> list[dict]:
	stmt = (
		select(Case, Partner.name)
		.outerjoin(Partner, Partner.id == Case.client_id)
		.where(Case.deleted_at.is_(None))
	)
	if status:
		stmt = stmt.where(Case.status == status.value)
	stmt = stmt.order_by(Case.opened_at.desc(), Case.id.desc())

	rows = []
	for case, client_name in (await session.execute(stmt)).all():
		values = [
			case.case_number,
			case.status,
			case.priority,
			case.patient_name,
			case.patient_id,
			case.patient_dob,
			client_name,
			case.assigned_to,
			case.is_medical,
			case.opened_at,
			case.closed_at,
			case.total_service_cost,
			case.total_assistance_cost,
			case.total_commission_cost,
			case.actions_count,
			case.documents_count,
			case.invoices_count,
		]
		rows.append({
			column: export_value(value)
			for column, value in zip(CASE_EXPORT_COLUMNS, values)
		})
	return rows
