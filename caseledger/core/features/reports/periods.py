# (c) Copyright Datacraft, 2026
"""
Reporting periods and chart buckets.

Weeks start on Sunday. All moments are naive UTC datetimes.
"""
import calendar
import enum
from dataclasses import dataclass
from datetime import datetime, timedelta


class ReportPeriod(str, enum.Enum):
	WEEK = "week"
	MONTH = "month"
	QUARTER = "quarter"
	YEAR = "year"


class Granularity(str, enum.Enum):
	DAY = "day"
	WEEK = "week"
	MONTH = "month"


@dataclass(frozen=True)
class Bucket:
	key: str
	label: str


def midnight(moment: datetime) -> datetime:
	return datetime(moment.year, moment.month, moment.day)


def week_start(moment: datetime) -> datetime:
	day = midnight(moment)
	# Monday is 0, Sunday is 6
	return day - timedelta(days=(day.weekday() + 1) % 7)


def shift_months(moment: datetime, months: int) -> datetime:
	"""Move a first-of-month moment by whole months."""
	years, month = divmod(moment.month - 1 + months, 12)
	return moment.replace(year=moment.year + years, month=month + 1)


def period_start(now: datetime, period: ReportPeriod) -> datetime:
	if period is ReportPeriod.WEEK:
		return week_start(now)
	if period is ReportPeriod.MONTH:
		return datetime(now.year, now.month, 1)
	if period is ReportPeriod.QUARTER:
		return datetime(now.year, (now.month - 1) // 3 * 3 + 1, 1)
	return datetime(now.year, 1, 1)


def previous_period_start(now: datetime, period: ReportPeriod) -> datetime:
	"""Start of the calendar period just before the current one."""
	start = period_start(now, period)
	if period is ReportPeriod.WEEK:
		return start - timedelta(days=7)
	if period is ReportPeriod.MONTH:
		return shift_months(start, -1)
	if period is ReportPeriod.QUARTER:
		return shift_months(start, -3)
	return start.replace(year=start.year - 1)


def bucket_key(moment: datetime, granularity: Granularity) -> str:
	if granularity is Granularity.DAY:
		return moment.date().isoformat()
	if granularity is Granularity.WEEK:
		return week_start(moment).date().isoformat()
	return moment.strftime("%Y-%m")


def bucket_label(start: datetime, granularity: Granularity) -> str:
	if granularity is Granularity.DAY:
		return f"{start:%b} {start.day}"
	if granularity is Granularity.WEEK:
		return f"W{start.isocalendar()[1]}"
	return f"{start:%b}"


def chart_window(
	now: datetime,
	period: ReportPeriod,
) -> tuple[datetime, Granularity, list[Bucket]]:
	"""Chart start, bucket size and the ordered buckets for a period.

	week: the last 7 days; month: every day of the current month;
	quarter: the last 12 weeks including the current one; year: the last
	12 months including the current one.
	"""
	today = midnight(now)

	if period is ReportPeriod.WEEK:
		granularity = Granularity.DAY
		starts = [today - timedelta(days=6 - i) for i in range(7)]
	elif period is ReportPeriod.MONTH:
		granularity = Granularity.DAY
		days = calendar.monthrange(today.year, today.month)[1]
		starts = [today.replace(day=i) for i in range(1, days + 1)]
	elif period is ReportPeriod.QUARTER:
		granularity = Granularity.WEEK
		current = week_start(today)
		starts = [current - timedelta(weeks=11 - i) for i in range(12)]
	else:
		granularity = Granularity.MONTH
		current = today.replace(day=1)
		starts = [shift_months(current, i - 11) for i in range(12)]

	buckets = [
		Bucket(key=bucket_key(s, granularity), label=bucket_label(s, granularity))
		for s in starts
	]
	return starts[0], granularity, buckets
