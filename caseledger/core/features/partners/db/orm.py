# (c) Copyright Datacraft, 2026
"""
ORM models for billing parties: partners (invoice recipients) and the
business's own issuing companies.
"""
from datetime import datetime

from sqlalchemy import Boolean, DateTime, String, Text, Index
from sqlalchemy.orm import Mapped, mapped_column
from uuid_extensions import uuid7str

from caseledger.core.db.base import Base
from caseledger.core.utils.tz import utc_now


class Partner(Base):
	"""Insurance company or other partner that receives invoices."""
	__tablename__ = "partners"

	id: Mapped[str] = mapped_column(String(36), primary_key=True, default=uuid7str)
	name: Mapped[str] = mapped_column(String(200), nullable=False)
	legal_name: Mapped[str | None] = mapped_column(String(200))
	id_code: Mapped[str | None] = mapped_column(String(50))
	country: Mapped[str] = mapped_column(String(2), default="GE", nullable=False)
	city: Mapped[str | None] = mapped_column(String(100))
	address: Mapped[str | None] = mapped_column(String(500))
	email: Mapped[str | None] = mapped_column(String(255))
	phone: Mapped[str | None] = mapped_column(String(50))
	website: Mapped[str | None] = mapped_column(String(255))
	notes: Mapped[str | None] = mapped_column(Text)

	created_at: Mapped[datetime] = mapped_column(DateTime, default=utc_now, nullable=False)
	updated_at: Mapped[datetime] = mapped_column(
		DateTime, default=utc_now, onupdate=utc_now, nullable=False
	)
	deleted_at: Mapped[datetime | None] = mapped_column(DateTime)

	__table_args__ = (
		Index("idx_partners_deleted_at", "deleted_at"),
	)


class OurCompany(Base):
	"""A legal entity of the business that issues invoices."""
	__tablename__ = "our_companies"

	id: Mapped[str] = mapped_column(String(36), primary_key=True, default=uuid7str)
	name: Mapped[str] = mapped_column(String(200), nullable=False)
	legal_name: Mapped[str] = mapped_column(String(200), nullable=False)
	id_code: Mapped[str] = mapped_column(String(50), nullable=False)
	country: Mapped[str] = mapped_column(String(2), default="GE", nullable=False)
	city: Mapped[str | None] = mapped_column(String(100))
	address: Mapped[str | None] = mapped_column(String(500))
	email: Mapped[str | None] = mapped_column(String(255))
	phone: Mapped[str | None] = mapped_column(String(50))
	website: Mapped[str | None] = mapped_column(String(255))

	# Bank details, one account per invoicing currency
	bank_name: Mapped[str | None] = mapped_column(String(200))
	bank_code: Mapped[str | None] = mapped_column(String(50))
	account_gel: Mapped[str | None] = mapped_column(String(50))
	account_usd: Mapped[str | None] = mapped_column(String(50))
	account_eur: Mapped[str | None] = mapped_column(String(50))

	invoice_prefix: Mapped[str] = mapped_column(String(10), default="INV", nullable=False)
	invoice_footer_text: Mapped[str | None] = mapped_column(Text)
	is_default: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

	created_at: Mapped[datetime] = mapped_column(DateTime, default=utc_now, nullable=False)
	updated_at: Mapped[datetime] = mapped_column(
		DateTime, default=utc_now, onupdate=utc_now, nullable=False
	)
	deleted_at: Mapped[datetime | None] = mapped_column(DateTime)

	def account_for(self, currency: str) -> str | None:
		"""Bank account matching an invoice currency."""
		return {
			"GEL": self.account_gel,
			"USD": self.account_usd,
			"EUR": self.account_eur,
		}.get(str(currency), self.account_eur)

	__table_args__ = (
		Index("idx_our_companies_deleted_at", "deleted_at"),
	)
