# (c) Copyright Datacraft, 2026
"""
Read-only dashboard rollups over cases and invoices.

Money is never converted between currencies: every financial figure is a
list of per-currency totals built with ``sum_by_currency``.
"""
import logging
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Iterable

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from caseledger.core.config import get_settings
from caseledger.core.features.cases.db.orm import ACTIVE_CASE_STATUSES, Case, CaseStatus
from caseledger.core.features.currency import (
	format_money,
	percent_change,
	round_half_up,
	sum_by_currency,
	to_money,
)
from caseledger.core.features.invoices.db.orm import Invoice, InvoiceStatus
from caseledger.core.utils.tz import utc_now

from .periods import (
	Bucket,
	Granularity,
	ReportPeriod,
	bucket_key,
	chart_window,
	period_start,
	previous_period_start,
	shift_months,
)
from .schema import (
	AlertGroup,
	AlertItem,
	ChartPoint,
	CollectionRate,
	CurrencyChange,
	CurrencyTotal,
	DashboardAlerts,
	DashboardCharts,
	DashboardStats,
	EnhancedStats,
	FinancialStats,
	OperationalStats,
	StatusShare,
)

logger = logging.getLogger(__name__)

ALERT_LIMIT = 5
UNASSIGNED_ALERT_STATUSES = (CaseStatus.DRAFT, CaseStatus.IN_PROGRESS)


def collection_rate(paid: Decimal, outstanding: Decimal) -> int:
	"""Paid share of everything invoiced, as an integer percent."""
	invoiced = to_money(paid) + to_money(outstanding)
	if invoiced <= 0:
		return 0
	return round_half_up(to_money(paid) / invoiced * 100)


def currency_changes(
	previous: Iterable[tuple[str, Decimal | None]],
	current: Iterable[tuple[str, Decimal | None]],
) -> list[CurrencyChange]:
	before = {c.currency: c.amount for c in sum_by_currency(previous)}
	now = {c.currency: c.amount for c in sum_by_currency(current)}
	zero = Decimal("0.00")

	figures = [
		CurrencyChange(
			currency=code,
			amount=now.get(code, zero),
			previous_amount=before.get(code, zero),
			change=percent_change(before.get(code, zero), now.get(code, zero)),
		)
		for code in sorted(set(before) | set(now))
	]
	figures.sort(key=lambda f: f.amount, reverse=True)
	return figures


def build_series(
	cases: Iterable[tuple[str, datetime, datetime | None]],
	buckets: list[Bucket],
	granularity: Granularity,
) -> list[ChartPoint]:
	"""Opened and completed case counts per bucket.

	Every bucket starts at zero; cases outside the buckets are ignored.
	"""
	opened = {b.key: 0 for b in buckets}
	completed = {b.key: 0 for b in buckets}

	for status, created_at, closed_at in cases:
		key = bucket_key(created_at, granularity)
		if key in opened:
			opened[key] += 1
		if closed_at is not None and status == CaseStatus.COMPLETED.value:
			key = bucket_key(closed_at, granularity)
			if key in completed:
				completed[key] += 1

	return [
		ChartPoint(date=b.key, label=b.label, opened=opened[b.key], completed=completed[b.key])
		for b in buckets
	]


def status_breakdown(statuses: Iterable[str]) -> list[StatusShare]:
	counts = {s.value: 0 for s in CaseStatus}
	for status in statuses:
		counts[status] = counts.get(status, 0) + 1
	total = sum(counts.values()) or 1

	return [
		StatusShare(
			status=s.value,
			count=counts[s.value],
			percentage=round_half_up(Decimal(counts[s.value]) / total * 100),
		)
		for s in CaseStatus
	]


def realized(paid_amount: Decimal | None, total: Decimal | None) -> Decimal:
	"""Amount actually collected on a paid invoice."""
	return to_money(paid_amount or total)


class ReportService:
	"""Dashboard figures. Never writes."""

	def __init__(self, session: AsyncSession):
		self.session = session
		self.settings = get_settings()

	async def stats(
		self,
		period: ReportPeriod = ReportPeriod.MONTH,
		now: datetime | None = None,
	) -> DashboardStats:
		now = now or utc_now()
		operational = await self._operational(period, now)
		unpaid = await self._unpaid_invoices()

		return DashboardStats(
			total_cases=operational.total_cases,
			total_cases_change=operational.total_cases_change,
			active_cases=operational.active_cases,
			active_cases_change=operational.active_cases_change,
			completed_this_month=operational.completed_this_month,
			completed_change=operational.completed_change,
			unpaid_invoices=len(unpaid),
			unpaid_by_currency=[
				CurrencyTotal.model_validate(c)
				for c in sum_by_currency((r.currency, r.total) for r in unpaid)
			],
		)

	async def enhanced(
		self,
		period: ReportPeriod = ReportPeriod.MONTH,
		now: datetime | None = None,
	) -> EnhancedStats:
		now = now or utc_now()
		current_start = period_start(now, period)
		previous_start = previous_period_start(now, period)

		return EnhancedStats(
			period_start=current_start,
			previous_period_start=previous_start,
			operational=await self._operational(period, now),
			financial=await self._financial(current_start, previous_start, now),
		)

	async def charts(
		self,
		period: ReportPeriod = ReportPeriod.MONTH,
		now: datetime | None = None,
	) -> DashboardCharts:
		now = now or utc_now()
		start, granularity, buckets = chart_window(now, period)

		stmt = select(Case.status, Case.created_at, Case.closed_at).where(
			Case.deleted_at.is_(None),
			or_(Case.created_at >= start, Case.closed_at >= start),
		)
		rows = (await self.session.execute(stmt)).all()

		statuses = (await self.session.execute(
			select(Case.status).where(Case.deleted_at.is_(None))
		)).scalars().all()

		return DashboardCharts(
			cases_over_time=build_series(rows, buckets, granularity),
			status_breakdown=status_breakdown(statuses),
		)

	async def alerts(self, now: datetime | None = None) -> DashboardAlerts:
		now = now or utc_now()

		delayed_where = (Case.deleted_at.is_(None), Case.status == CaseStatus.DELAYED.value)
		delayed = await self._cases_alert(delayed_where, "/cases?status=delayed")

		unassigned_where = (
			Case.deleted_at.is_(None),
			Case.assigned_to.is_(None),
			Case.status.in_([s.value for s in UNASSIGNED_ALERT_STATUSES]),
		)
		unassigned = await self._cases_alert(unassigned_where, "/cases")

		overdue_where = (
			Invoice.deleted_at.is_(None),
			Invoice.status == InvoiceStatus.UNPAID.value,
			Invoice.created_at < self._overdue_threshold(now),
		)
		count = await self._count(Invoice, *overdue_where)
		stmt = (
			select(Invoice)
			.where(*overdue_where)
			.order_by(Invoice.created_at.asc())
			.limit(ALERT_LIMIT)
		)
		invoices = (await self.session.execute(stmt)).scalars().all()
		overdue = AlertGroup(
			count=count,
			items=[
				AlertItem(
					id=inv.id,
					title=inv.invoice_number,
					subtitle=format_money(inv.total, inv.currency),
					link="/invoices?status=unpaid",
				)
				for inv in invoices
			],
		)

		return DashboardAlerts(delayed=delayed, overdue=overdue, unassigned=unassigned)

	# ----- Helpers -----

	async def _operational(self, period: ReportPeriod, now: datetime) -> OperationalStats:
		current_start = period_start(now, period)
		live = Case.deleted_at.is_(None)
		active = Case.status.in_([s.value for s in ACTIVE_CASE_STATUSES])
		completed = Case.status == CaseStatus.COMPLETED.value

		total_cases = await self._count(Case, live)
		total_before = await self._count(Case, live, Case.created_at < current_start)
		active_cases = await self._count(Case, live, active)
		active_before = await self._count(Case, live, active, Case.created_at < current_start)

		month_start = datetime(now.year, now.month, 1)
		last_month_start = shift_months(month_start, -1)
		completed_this_month = await self._count(
			Case, live, completed, Case.closed_at >= month_start
		)
		completed_last_month = await self._count(
			Case, live, completed,
			Case.closed_at >= last_month_start,
			Case.closed_at < month_start,
		)

		delayed = await self._count(Case, live, Case.status == CaseStatus.DELAYED.value)
		unassigned = await self._count(
			Case, live,
			Case.assigned_to.is_(None),
			Case.status.in_([s.value for s in UNASSIGNED_ALERT_STATUSES]),
		)

		return OperationalStats(
			total_cases=total_cases,
			total_cases_change=percent_change(total_before, total_cases),
			active_cases=active_cases,
			active_cases_change=percent_change(active_before, active_cases),
			delayed_cases=delayed,
			completed_this_month=completed_this_month,
			completed_change=percent_change(completed_last_month, completed_this_month),
			unassigned_cases=unassigned,
		)

	async def _financial(
		self,
		current_start: datetime,
		previous_start: datetime,
		now: datetime,
	) -> FinancialStats:
		paid = (await self.session.execute(
			select(Invoice.currency, Invoice.paid_amount, Invoice.total, Invoice.paid_at).where(
				Invoice.deleted_at.is_(None),
				Invoice.status == InvoiceStatus.PAID.value,
			)
		)).all()

		current = [
			(r.currency, realized(r.paid_amount, r.total))
			for r in paid if r.paid_at is not None and r.paid_at >= current_start
		]
		previous = [
			(r.currency, realized(r.paid_amount, r.total))
			for r in paid
			if r.paid_at is not None and previous_start <= r.paid_at < current_start
		]

		all_paid = sum_by_currency((r.currency, realized(r.paid_amount, r.total)) for r in paid)
		unpaid = await self._unpaid_invoices()
		outstanding = sum_by_currency((r.currency, r.total) for r in unpaid)
		threshold = self._overdue_threshold(now)

		completed_cases = await self._count(
			Case, Case.deleted_at.is_(None), Case.status == CaseStatus.COMPLETED.value
		)
		avg_case_value = []
		if completed_cases:
			avg_case_value = [
				CurrencyTotal(currency=c.currency, amount=to_money(c.amount / completed_cases))
				for c in all_paid
			]

		paid_by_code = {c.currency: c.amount for c in all_paid}
		outstanding_by_code = {c.currency: c.amount for c in outstanding}
		zero = Decimal("0.00")

		return FinancialStats(
			revenue=currency_changes(previous, current),
			outstanding=[CurrencyTotal.model_validate(c) for c in outstanding],
			outstanding_count=len(unpaid),
			overdue_count=sum(1 for r in unpaid if r.created_at < threshold),
			avg_case_value=avg_case_value,
			collection_rate=collection_rate(
				sum(paid_by_code.values(), zero),
				sum(outstanding_by_code.values(), zero),
			),
			collection_by_currency=[
				CollectionRate(
					currency=code,
					rate=collection_rate(
						paid_by_code.get(code, zero),
						outstanding_by_code.get(code, zero),
					),
				)
				for code in sorted(set(paid_by_code) | set(outstanding_by_code))
			],
		)

	async def _unpaid_invoices(self) -> list:
		stmt = select(Invoice.currency, Invoice.total, Invoice.created_at).where(
			Invoice.deleted_at.is_(None),
			Invoice.status == InvoiceStatus.UNPAID.value,
		)
		return list((await self.session.execute(stmt)).all())

	async def _cases_alert(self, where: tuple, link: str) -> AlertGroup:
		count = await self._count(Case, *where)
		stmt = (
			select(Case.id, Case.case_number, Case.patient_name)
			.where(*where)
			.order_by(Case.opened_at.desc())
			.limit(ALERT_LIMIT)
		)
		rows = (await self.session.execute(stmt)).all()
		return AlertGroup(
			count=count,
			items=[
				AlertItem(id=r.id, title=r.case_number, subtitle=r.patient_name, link=link)
				for r in rows
			],
		)

	async def _count(self, model, *conditions) -> int:
		stmt = select(func.count()).select_from(model).where(*conditions)
		return (await self.session.execute(stmt)).scalar_one()

	def _overdue_threshold(self, now: datetime) -> datetime:
		return now - timedelta(days=self.settings.overdue_after_days)
