# (c) Copyright Datacraft, 2026
"""
ORM models for invoices, their service lines and send attempts.
"""
import enum
from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
	JSON,
	Boolean,
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


class InvoiceStatus(str, enum.Enum):
	"""Invoice status."""
	DRAFT = "draft"
	UNPAID = "unpaid"
	PAID = "paid"
	CANCELLED = "cancelled"


class InvoiceLanguage(str, enum.Enum):
	EN = "en"
	KA = "ka"


class SendStatus(str, enum.Enum):
	SENT = "sent"
	FAILED = "failed"


class Invoice(Base):
	"""Billing document issued by one of our companies to a partner."""
	__tablename__ = "invoices"

	id: Mapped[str] = mapped_column(String(36), primary_key=True, default=uuid7str)
	invoice_number: Mapped[str] = mapped_column(String(32), nullable=False)
	status: Mapped[str] = mapped_column(
		String(20), default=InvoiceStatus.DRAFT.value, nullable=False
	)

	case_id: Mapped[str] = mapped_column(ForeignKey("cases.id"), nullable=False)
	sender_id: Mapped[str] = mapped_column(ForeignKey("our_companies.id"), nullable=False)
	recipient_id: Mapped[str] = mapped_column(ForeignKey("partners.id"), nullable=False)

	language: Mapped[str] = mapped_column(
		String(2), default=InvoiceLanguage.EN.value, nullable=False
	)
	currency: Mapped[str] = mapped_column(String(3), default="EUR", nullable=False)

	# Amounts; subtotal and total are always derived from the service lines
	subtotal: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"), nullable=False)
	franchise_amount: Mapped[Decimal] = mapped_column(
		Numeric(12, 2), default=Decimal("0"), nullable=False
	)
	total: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"), nullable=False)

	# Email overrides
	recipient_email: Mapped[str | None] = mapped_column(String(255))
	cc_emails: Mapped[list | None] = mapped_column(JSON)
	email_subject: Mapped[str | None] = mapped_column(String(200))
	email_body: Mapped[str | None] = mapped_column(Text)

	# Which categories of case documents go out with the invoice
	attach_patient_docs: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
	attach_original_docs: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
	attach_medical_docs: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

	notes: Mapped[str | None] = mapped_column(Text)

	# Payment
	paid_at: Mapped[datetime | None] = mapped_column(DateTime)
	paid_amount: Mapped[Decimal | None] = mapped_column(Numeric(12, 2))
	payment_reference: Mapped[str | None] = mapped_column(String(100))
	payment_notes: Mapped[str | None] = mapped_column(Text)

	# Delivery
	pdf_generated_at: Mapped[datetime | None] = mapped_column(DateTime)
	send_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
	last_sent_at: Mapped[datetime | None] = mapped_column(DateTime)

	created_by: Mapped[str | None] = mapped_column(String(36))
	created_at: Mapped[datetime] = mapped_column(DateTime, default=utc_now, nullable=False)
	updated_at: Mapped[datetime] = mapped_column(
		DateTime, default=utc_now, onupdate=utc_now, nullable=False
	)
	deleted_at: Mapped[datetime | None] = mapped_column(DateTime)

	services: Mapped[list["InvoiceService"]] = relationship(
		"InvoiceService",
		back_populates="invoice",
		order_by="InvoiceService.sort_order",
		passive_deletes=True,
	)

	__table_args__ = (
		UniqueConstraint("invoice_number", name="uq_invoice_number"),
		Index("idx_invoices_case", "case_id"),
		Index("idx_invoices_status", "status"),
		Index("idx_invoices_deleted_at", "deleted_at"),
	)


class InvoiceService(Base):
	"""One priced line on an invoice; ``total`` is quantity * unit_price."""
	__tablename__ = "invoice_services"

	id: Mapped[str] = mapped_column(String(36), primary_key=True, default=uuid7str)
	invoice_id: Mapped[str] = mapped_column(
		ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False
	)
	description: Mapped[str] = mapped_column(String(500), nullable=False)
	quantity: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
	unit_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
	total: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
	sort_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
	created_at: Mapped[datetime] = mapped_column(DateTime, default=utc_now, nullable=False)

	invoice: Mapped["Invoice"] = relationship("Invoice", back_populates="services")

	__table_args__ = (
		Index("idx_invoice_services_invoice", "invoice_id", "sort_order"),
	)


class InvoiceSend(Base):
	"""Append-only record of one attempt to email an invoice."""
	__tablename__ = "invoice_sends"

	id: Mapped[str] = mapped_column(String(36), primary_key=True, default=uuid7str)
	invoice_id: Mapped[str] = mapped_column(
		ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False
	)
	sent_by: Mapped[str | None] = mapped_column(String(36))
	email: Mapped[str] = mapped_column(String(255), nullable=False)
	cc_emails: Mapped[list | None] = mapped_column(JSON)
	subject: Mapped[str | None] = mapped_column(String(200))
	body: Mapped[str | None] = mapped_column(Text)
	status: Mapped[str] = mapped_column(String(10), nullable=False)
	message_id: Mapped[str | None] = mapped_column(String(255))
	error_message: Mapped[str | None] = mapped_column(Text)
	attachments_count: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
	failed_attachments: Mapped[list | None] = mapped_column(JSON)
	is_resend: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
	sent_at: Mapped[datetime] = mapped_column(DateTime, default=utc_now, nullable=False)

	__table_args__ = (
		Index("idx_invoice_sends_invoice", "invoice_id", "sent_at"),
	)
