# (c) Copyright Datacraft, 2026
"""
Sequential human-readable number allocation.

Numbers look like ``{PREFIX}-{PERIOD}-{COUNTER}``, e.g. ``INV-202501-0007``.
Allocation goes through a counter row per (prefix, period) that is locked
with ``SELECT ... FOR UPDATE``, so two transactions allocating for the same
sequence are serialized by the database and never compute the same value.
"""
import logging
from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import InstrumentedAttribute

from caseledger.core.utils.tz import utc_now

from .db.orm import NumberCounter

logger = logging.getLogger(__name__)

DEFAULT_INVOICE_PREFIX = "INV"


def format_number(prefix: str, period: str, value: int, width: int = 4) -> str:
	return f"{prefix}-{period}-{value:0{width}d}"


def parse_counter(number: str | None) -> int:
	"""Trailing counter of a formatted number, 0 when it can't be parsed."""
	if not number:
		return 0
	try:
		return int(number.rsplit("-", 1)[1])
	except (IndexError, ValueError):
		return 0


def month_period(now: datetime) -> str:
	return f"{now.year:04d}{now.month:02d}"


def year_period(now: datetime) -> str:
	return f"{now.year:04d}"


class NumberAllocator:
	"""Allocates numbers for the values stored in ``column``.

	``column`` is the unique column that holds issued numbers. It is used to
	seed a fresh counter from numbers issued before the counter existed and
	to skip values that are already taken.
	"""

	def __init__(
		self,
		session: AsyncSession,
		column: InstrumentedAttribute,
		width: int = 4,
	):
		self.session = session
		self.column = column
		self.width = width

	async def allocate(self, prefix: str, period: str) -> str:
		"""Reserve the next number in the (prefix, period) sequence.

		The reservation is part of the caller's transaction: it becomes
		permanent on commit and is released on rollback.
		"""
		await self._ensure_counter(prefix, period)
		counter = await self._lock_counter(prefix, period)

		while True:
			counter.last_value += 1
			number = format_number(prefix, period, counter.last_value, self.width)
			if not await self._is_taken(number):
				break
			logger.warning(f"Number {number} already issued, skipping")

		counter.updated_at = utc_now()
		await self.session.flush()
		logger.debug(f"Allocated number {number}")
		return number

	async def _ensure_counter(self, prefix: str, period: str) -> None:
		seed = await self._greatest_issued(prefix, period)
		insert = self._insert_for_dialect()
		stmt = (
			insert(NumberCounter)
			.values(prefix=prefix, period=period, last_value=seed, updated_at=utc_now())
			.on_conflict_do_nothing(index_elements=["prefix", "period"])
		)
		await self.session.execute(stmt)

	async def _lock_counter(self, prefix: str, period: str) -> NumberCounter:
		stmt = (
			select(NumberCounter)
			.where(
				NumberCounter.prefix == prefix,
				NumberCounter.period == period,
			)
			.with_for_update()
			.execution_options(populate_existing=True)
		)
		result = await self.session.execute(stmt)
		return result.scalar_one()

	async def _greatest_issued(self, prefix: str, period: str) -> int:
		pattern = f"{prefix}-{period}-%"
		stmt = select(func.max(self.column)).where(self.column.like(pattern))
		greatest = (await self.session.execute(stmt)).scalar()
		return parse_counter(greatest)

	async def _is_taken(self, number: str) -> bool:
		stmt = select(func.count()).where(self.column == number)
		return (await self.session.execute(stmt)).scalar_one() > 0

	def _insert_for_dialect(self):
		if self.session.bind.dialect.name == "sqlite":
			return sqlite_insert
		return pg_insert


async def allocate_invoice_number(
	session: AsyncSession,
	prefix: str | None,
	now: datetime | None = None,
) -> str:
	"""Next invoice number for an issuing company's prefix and month."""
	from caseledger.core.features.invoices.db.orm import Invoice

	prefix = (prefix or "").strip().upper() or DEFAULT_INVOICE_PREFIX
	period = month_period(now or utc_now())
	return await NumberAllocator(session, Invoice.invoice_number).allocate(prefix, period)


async def allocate_case_number(
	session: AsyncSession,
	prefix: str,
	now: datetime | None = None,
) -> str:
	"""Next case number for the year, e.g. ``CASE-2026-00042``."""
	from caseledger.core.features.cases.db.orm import Case

	period = year_period(now or utc_now())
	return await NumberAllocator(session, Case.case_number, width=5).allocate(prefix, period)
