# (c) Copyright Datacraft, 2026
"""Case ORM models."""
from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from sqlalchemy import (
	Boolean,
	Date,
	DateTime,
	ForeignKey,
	Index,
	Integer,
	Numeric,
	String,
	Text,
	UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from uuid_extensions import uuid7str

from caseledger.core.db.base import Base
from caseledger.core.utils.tz import utc_now


class CaseStatus(str, Enum):
	DRAFT = "draft"
	IN_PROGRESS = "in_progress"
	PAUSED = "paused"
	DELAYED = "delayed"
	COMPLETED = "completed"
	CANCELLED = "cancelled"


ACTIVE_CASE_STATUSES = (
	CaseStatus.DRAFT,
	CaseStatus.IN_PROGRESS,
	CaseStatus.PAUSED,
	CaseStatus.DELAYED,
)
CLOSED_CASE_STATUSES = (CaseStatus.COMPLETED, CaseStatus.CANCELLED)


class CasePriority(str, Enum):
	LOW = "low"
	NORMAL = "normal"
	HIGH = "high"
	URGENT = "urgent"


class DocumentType(str, Enum):
	"""Document categories; invoices can attach each category on send."""
	PATIENT = "patient"
	ORIGINAL = "original"
	MEDICAL = "medical"


class Case(Base):
	"""Patient engagement that accumulates billable actions and invoices."""
	__tablename__ = "cases"

	id: Mapped[str] = mapped_column(String(36), primary_key=True, default=uuid7str)
	case_number: Mapped[str] = mapped_column(String(32), nullable=False)
	status: Mapped[str] = mapped_column(
		String(20), default=CaseStatus.DRAFT.value, nullable=False
	)
	priority: Mapped[str] = mapped_column(
		String(10), default=CasePriority.NORMAL.value, nullable=False
	)

	# Patient
	patient_name: Mapped[str] = mapped_column(String(200), nullable=False)
	patient_id: Mapped[str | None] = mapped_column(String(50))
	patient_dob: Mapped[date | None] = mapped_column(Date)
	patient_phone: Mapped[str | None] = mapped_column(String(50))
	patient_email: Mapped[str | None] = mapped_column(String(255))
	insurance_policy_number: Mapped[str | None] = mapped_column(String(100))

	# Parties
	client_id: Mapped[str | None] = mapped_column(
		ForeignKey("partners.id", ondelete="SET NULL")
	)
	assigned_to: Mapped[str | None] = mapped_column(String(36))

	is_medical: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
	complaints: Mapped[str | None] = mapped_column(Text)
	diagnosis: Mapped[str | None] = mapped_column(Text)
	treatment_notes: Mapped[str | None] = mapped_column(Text)

	opened_at: Mapped[datetime] = mapped_column(DateTime, default=utc_now, nullable=False)
	closed_at: Mapped[datetime | None] = mapped_column(DateTime)

	# Derived from child rows, never written by clients
	total_service_cost: Mapped[Decimal] = mapped_column(
		Numeric(12, 2), default=Decimal("0"), nullable=False
	)
	total_assistance_cost: Mapped[Decimal] = mapped_column(
		Numeric(12, 2), default=Decimal("0"), nullable=False
	)
	total_commission_cost: Mapped[Decimal] = mapped_column(
		Numeric(12, 2), default=Decimal("0"), nullable=False
	)
	actions_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
	documents_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
	invoices_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

	created_by: Mapped[str | None] = mapped_column(String(36))
	created_at: Mapped[datetime] = mapped_column(DateTime, default=utc_now, nullable=False)
	updated_at: Mapped[datetime] = mapped_column(
		DateTime, default=utc_now, onupdate=utc_now, nullable=False
	)
	deleted_at: Mapped[datetime | None] = mapped_column(DateTime)

	actions: Mapped[list["CaseAction"]] = relationship(
		"CaseAction",
		back_populates="case",
		order_by="CaseAction.sort_order",
		passive_deletes=True,
	)
	documents: Mapped[list["CaseDocument"]] = relationship(
		"CaseDocument",
		back_populates="case",
		passive_deletes=True,
	)

	__table_args__ = (
		UniqueConstraint("case_number", name="uq_case_number"),
		Index("idx_cases_status", "status"),
		Index("idx_cases_deleted_at", "deleted_at"),
		Index("idx_cases_assigned_to", "assigned_to"),
	)


class CaseAction(Base):
	"""One billable service line on a case.

	Each cost carries its own currency; the three need not match.
	"""
	__tablename__ = "case_actions"

	id: Mapped[str] = mapped_column(String(36), primary_key=True, default=uuid7str)
	case_id: Mapped[str] = mapped_column(
		ForeignKey("cases.id", ondelete="CASCADE"), nullable=False
	)
	executor_id: Mapped[str | None] = mapped_column(
		ForeignKey("partners.id", ondelete="SET NULL")
	)
	service_name: Mapped[str] = mapped_column(String(200), nullable=False)
	service_description: Mapped[str | None] = mapped_column(Text)

	service_cost: Mapped[Decimal] = mapped_column(
		Numeric(12, 2), default=Decimal("0"), nullable=False
	)
	service_currency: Mapped[str] = mapped_column(String(3), default="GEL", nullable=False)
	assistance_cost: Mapped[Decimal] = mapped_column(
		Numeric(12, 2), default=Decimal("0"), nullable=False
	)
	assistance_currency: Mapped[str] = mapped_column(String(3), default="GEL", nullable=False)
	commission_cost: Mapped[Decimal] = mapped_column(
		Numeric(12, 2), default=Decimal("0"), nullable=False
	)
	commission_currency: Mapped[str] = mapped_column(String(3), default="GEL", nullable=False)

	service_date: Mapped[date | None] = mapped_column(Date)
	comment: Mapped[str | None] = mapped_column(Text)
	sort_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

	created_at: Mapped[datetime] = mapped_column(DateTime, default=utc_now, nullable=False)
	updated_at: Mapped[datetime] = mapped_column(
		DateTime, default=utc_now, onupdate=utc_now, nullable=False
	)

	case: Mapped["Case"] = relationship("Case", back_populates="actions")

	__table_args__ = (
		Index("idx_case_actions_case", "case_id", "sort_order"),
	)


class CaseDocument(Base):
	"""Uploaded file attached to a case."""
	__tablename__ = "case_documents"

	id: Mapped[str] = mapped_column(String(36), primary_key=True, default=uuid7str)
	case_id: Mapped[str] = mapped_column(
		ForeignKey("cases.id", ondelete="CASCADE"), nullable=False
	)
	type: Mapped[str] = mapped_column(String(20), nullable=False)
	file_name: Mapped[str] = mapped_column(String(255), nullable=False)
	file_url: Mapped[str] = mapped_column(String(1000), nullable=False)
	storage_key: Mapped[str] = mapped_column(String(500), nullable=False)
	file_size: Mapped[int | None] = mapped_column(Integer)
	mime_type: Mapped[str | None] = mapped_column(String(100))
	uploaded_by: Mapped[str | None] = mapped_column(String(36))
	created_at: Mapped[datetime] = mapped_column(DateTime, default=utc_now, nullable=False)

	case: Mapped["Case"] = relationship("Case", back_populates="documents")

	__table_args__ = (
		Index("idx_case_documents_case_type", "case_id", "type"),
	)
