# (c) Copyright Datacraft, 2026
"""
Case totals reconciliation.

A case caches totals over its child rows. Whenever actions, documents or
invoices of a case change, the matching cached fields are recomputed from
the children inside the same transaction as the change itself.
"""
import logging
from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from caseledger.core.exceptions import NotFoundError
from caseledger.core.features.currency import to_money
from caseledger.core.utils.tz import utc_now

from .db.orm import Case, CaseAction, CaseDocument

logger = logging.getLogger(__name__)


@dataclass
class CaseTotals:
	total_service_cost: Decimal
	total_assistance_cost: Decimal
	total_commission_cost: Decimal
	actions_count: int


async def lock_case(session: AsyncSession, case_id: str) -> Case:
	"""Load a live case and lock its row until the transaction ends."""
	stmt = (
		select(Case)
		.where(Case.id == case_id, Case.deleted_at.is_(None))
		.with_for_update()
		.execution_options(populate_existing=True)
	)
	case = (await session.execute(stmt)).scalar_one_or_none()
	if case is None:
		raise NotFoundError("Case not found")
	return case


async def compute_action_totals(session: AsyncSession, case_id: str) -> CaseTotals:
	"""Sum the three cost fields over the case's current actions.

	Each field is summed on its own; per-row currencies are not mixed into
	a single figure here.
	"""
	stmt = select(
		CaseAction.service_cost,
		CaseAction.assistance_cost,
		CaseAction.commission_cost,
	).where(CaseAction.case_id == case_id)
	rows = (await session.execute(stmt)).all()

	return CaseTotals(
		total_service_cost=sum((to_money(r.service_cost) for r in rows), Decimal("0.00")),
		total_assistance_cost=sum((to_money(r.assistance_cost) for r in rows), Decimal("0.00")),
		total_commission_cost=sum((to_money(r.commission_cost) for r in rows), Decimal("0.00")),
		actions_count=len(rows),
	)


async def reconcile_case_totals(session: AsyncSession, case: Case) -> CaseTotals:
	"""Recompute and write the cached action totals of ``case``.

	The caller is expected to hold the case row lock (see ``lock_case``)
	and to commit or roll back together with the triggering change.
	"""
	await session.flush()
	totals = await compute_action_totals(session, case.id)

	case.total_service_cost = totals.total_service_cost
	case.total_assistance_cost = totals.total_assistance_cost
	case.total_commission_cost = totals.total_commission_cost
	case.actions_count = totals.actions_count
	case.updated_at = utc_now()
	await session.flush()

	logger.debug(
		f"Reconciled case {case.id}: {totals.actions_count} actions, "
		f"service={totals.total_service_cost}"
	)
	return totals


async def reconcile_documents_count(session: AsyncSession, case: Case) -> int:
	await session.flush()
	stmt = select(func.count()).select_from(CaseDocument).where(
		CaseDocument.case_id == case.id
	)
	case.documents_count = (await session.execute(stmt)).scalar_one()
	case.updated_at = utc_now()
	await session.flush()
	return case.documents_count


async def reconcile_invoices_count(session: AsyncSession, case_id: str) -> int:
	"""Recount live invoices of a case.

	Trashed invoices are not counted, so soft delete and restore keep the
	count in step without separate bookkeeping.
	"""
	from caseledger.core.features.invoices.db.orm import Invoice

	await session.flush()
	case = await session.get(Case, case_id, with_for_update=True, populate_existing=True)
	if case is None:
		return 0
	stmt = select(func.count()).select_from(Invoice).where(
		Invoice.case_id == case_id,
		Invoice.deleted_at.is_(None),
	)
	case.invoices_count = (await session.execute(stmt)).scalar_one()
	case.updated_at = utc_now()
	await session.flush()
	return case.invoices_count
