# (c) Copyright Datacraft, 2026
from datetime import datetime

from pydantic import BaseModel, ConfigDict

from caseledger.core.features.currency import Money


class CurrencyTotal(BaseModel):
	model_config = ConfigDict(from_attributes=True)

	currency: str
	amount: Money


class CurrencyChange(BaseModel):
	currency: str
	amount: Money
	previous_amount: Money
	change: int


class CollectionRate(BaseModel):
	currency: str
	rate: int


# ============ Stats Schemas ============

class DashboardStats(BaseModel):
	total_cases: int
	total_cases_change: int
	active_cases: int
	active_cases_change: int
	completed_this_month: int
	completed_change: int
	unpaid_invoices: int
	unpaid_by_currency: list[CurrencyTotal]


class OperationalStats(BaseModel):
	total_cases: int
	total_cases_change: int
	active_cases: int
	active_cases_change: int
	delayed_cases: int
	completed_this_month: int
	completed_change: int
	unassigned_cases: int


class FinancialStats(BaseModel):
	revenue: list[CurrencyChange]
	outstanding: list[CurrencyTotal]
	outstanding_count: int
	overdue_count: int
	avg_case_value: list[CurrencyTotal]
	collection_rate: int
	collection_by_currency: list[CollectionRate]


class EnhancedStats(BaseModel):
	period_start: datetime
	previous_period_start: datetime
	operational: OperationalStats
	financial: FinancialStats


# ============ Chart Schemas ============

class ChartPoint(BaseModel):
	date: str
	label: str
	opened: int
	completed: int


class StatusShare(BaseModel):
	status: str
	count: int
	percentage: int


class DashboardCharts(BaseModel):
	cases_over_time: list[ChartPoint]
	status_breakdown: list[StatusShare]


# ============ Alert Schemas ============

class AlertItem(BaseModel):
	id: str
	title: str
	subtitle: str | None = None
	link: str


class AlertGroup(BaseModel):
	count: int
	items: list[AlertItem]


class DashboardAlerts(BaseModel):
	delayed: AlertGroup
	overdue: AlertGroup
	unassigned: AlertGroup
