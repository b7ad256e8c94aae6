# (c) Copyright Datacraft, 2026
"""Number sequence counters."""
from datetime import datetime

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from caseledger.core.db.base import Base
from caseledger.core.utils.tz import utc_now


class NumberCounter(Base):
	"""Last issued value for one (prefix, period) sequence.

	The row is locked for the duration of an allocating transaction, which
	serializes concurrent allocations for the same prefix and period.
	"""
	__tablename__ = "number_counters"

	prefix: Mapped[str] = mapped_column(String(10), primary_key=True)
	period: Mapped[str] = mapped_column(String(6), primary_key=True)
	last_value: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
	updated_at: Mapped[datetime] = mapped_column(
		DateTime, default=utc_now, onupdate=utc_now, nullable=False
	)
