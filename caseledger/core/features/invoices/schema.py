# (c) Copyright Datacraft, 2026
"""
Pydantic schemas for invoices.

Client-supplied subtotal and total values are never read: they are not
part of the input models and are recomputed from the service lines.
"""
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from caseledger.core.features.currency import CurrencyCode, Money

from .db.orm import InvoiceLanguage, InvoiceStatus, SendStatus

MAX_CC_EMAILS = 5


# ============ Service Line Schemas ============

class InvoiceServiceInput(BaseModel):
	description: str = Field(..., min_length=1, max_length=500)
	quantity: int = Field(default=1, ge=1)
	unit_price: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)


class InvoiceServiceLine(BaseModel):
	model_config = ConfigDict(from_attributes=True)

	id: str
	description: str
	quantity: int
	unit_price: Money
	total: Money
	sort_order: int


# ============ Invoice Schemas ============

class InvoiceCreate(BaseModel):
	case_id: str
	sender_id: str
	recipient_id: str
	status: InvoiceStatus = InvoiceStatus.DRAFT
	currency: CurrencyCode = CurrencyCode.EUR
	language: InvoiceLanguage = InvoiceLanguage.EN
	franchise_amount: Decimal = Field(default=Decimal("0"), ge=0, max_digits=12, decimal_places=2)
	recipient_email: EmailStr | None = None
	cc_emails: list[EmailStr] = Field(default_factory=list, max_length=MAX_CC_EMAILS)
	email_subject: str | None = Field(None, max_length=200)
	email_body: str | None = Field(None, max_length=5000)
	attach_patient_docs: bool = False
	attach_original_docs: bool = False
	attach_medical_docs: bool = False
	notes: str | None = Field(None, max_length=2000)
	services: list[InvoiceServiceInput] = Field(..., min_length=1)

	@field_validator("status")
	@classmethod
	def initial_status(cls, v: InvoiceStatus) -> InvoiceStatus:
		if v not in (InvoiceStatus.DRAFT, InvoiceStatus.UNPAID):
			raise ValueError("New invoices start as draft or unpaid")
		return v


class InvoiceUpdate(BaseModel):
	status: InvoiceStatus | None = None
	sender_id: str | None = None
	recipient_id: str | None = None
	currency: CurrencyCode | None = None
	language: InvoiceLanguage | None = None
	franchise_amount: Decimal | None = Field(None, ge=0, max_digits=12, decimal_places=2)
	recipient_email: EmailStr | None = None
	cc_emails: list[EmailStr] | None = Field(None, max_length=MAX_CC_EMAILS)
	email_subject: str | None = Field(None, max_length=200)
	email_body: str | None = Field(None, max_length=5000)
	attach_patient_docs: bool | None = None
	attach_original_docs: bool | None = None
	attach_medical_docs: bool | None = None
	notes: str | None = Field(None, max_length=2000)
	services: list[InvoiceServiceInput] | None = Field(None, min_length=1)


class Invoice(BaseModel):
	model_config = ConfigDict(from_attributes=True)

	id: str
	invoice_number: str
	status: InvoiceStatus
	case_id: str
	sender_id: str
	recipient_id: str
	language: InvoiceLanguage
	currency: CurrencyCode
	subtotal: Money
	franchise_amount: Money
	total: Money
	recipient_email: str | None = None
	cc_emails: list[str] | None = None
	email_subject: str | None = None
	email_body: str | None = None
	attach_patient_docs: bool
	attach_original_docs: bool
	attach_medical_docs: bool
	notes: str | None = None
	paid_at: datetime | None = None
	paid_amount: Money | None = None
	payment_reference: str | None = None
	payment_notes: str | None = None
	pdf_generated_at: datetime | None = None
	send_count: int
	last_sent_at: datetime | None = None
	created_at: datetime
	updated_at: datetime


class InvoiceDetail(Invoice):
	services: list[InvoiceServiceLine] = []


class InvoiceList(BaseModel):
	items: list[Invoice]
	total: int
	page: int
	page_size: int


# ============ Payment Schemas ============

class MarkPaidRequest(BaseModel):
	paid_at: datetime | None = None
	paid_amount: Decimal | None = Field(None, ge=0, max_digits=12, decimal_places=2)
	payment_reference: str | None = Field(None, max_length=100)
	payment_notes: str | None = Field(None, max_length=500)


# ============ Send Schemas ============

class SendInvoiceRequest(BaseModel):
	email: EmailStr | None = None
	cc_emails: list[EmailStr] | None = Field(None, max_length=MAX_CC_EMAILS)
	subject: str | None = Field(None, max_length=200)
	body: str | None = Field(None, max_length=5000)
	attach_patient_docs: bool | None = None
	attach_original_docs: bool | None = None
	attach_medical_docs: bool | None = None


class FailedAttachment(BaseModel):
	file_name: str
	error: str


class SendInvoiceResult(BaseModel):
	send_id: str
	message_id: str | None = None
	email: str
	sent_at: datetime
	attachments_count: int
	failed_attachments: list[FailedAttachment] = []


class InvoiceSendRecord(BaseModel):
	model_config = ConfigDict(from_attributes=True)

	id: str
	invoice_id: str
	sent_by: str | None = None
	email: str
	cc_emails: list[str] | None = None
	subject: str | None = None
	status: SendStatus
	message_id: str | None = None
	error_message: str | None = None
	attachments_count: int
	is_resend: bool
	sent_at: datetime
