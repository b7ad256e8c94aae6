# (c) Copyright Datacraft, 2026
"""
Pydantic schemas for cases, case actions and case documents.
"""
from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from caseledger.core.features.currency import CurrencyCode, Money

from .db.orm import CasePriority, CaseStatus, DocumentType


# ============ Case Schemas ============

class CaseCreate(BaseModel):
	patient_name: str = Field(..., min_length=1, max_length=200)
	patient_id: str | None = Field(None, max_length=50)
	patient_dob: date | None = None
	patient_phone: str | None = Field(None, max_length=50)
	patient_email: EmailStr | None = None
	insurance_policy_number: str | None = Field(None, max_length=100)
	client_id: str | None = None
	assigned_to: str | None = None
	status: CaseStatus = CaseStatus.DRAFT
	priority: CasePriority = CasePriority.NORMAL
	is_medical: bool = False
	complaints: str | None = Field(None, max_length=5000)
	diagnosis: str | None = Field(None, max_length=5000)
	treatment_notes: str | None = Field(None, max_length=5000)


class CaseUpdate(BaseModel):
	patient_name: str | None = Field(None, min_length=1, max_length=200)
	patient_id: str | None = Field(None, max_length=50)
	patient_dob: date | None = None
	patient_phone: str | None = Field(None, max_length=50)
	patient_email: EmailStr | None = None
	insurance_policy_number: str | None = Field(None, max_length=100)
	client_id: str | None = None
	assigned_to: str | None = None
	status: CaseStatus | None = None
	priority: CasePriority | None = None
	is_medical: bool | None = None
	complaints: str | None = Field(None, max_length=5000)
	diagnosis: str | None = Field(None, max_length=5000)
	treatment_notes: str | None = Field(None, max_length=5000)


class Case(BaseModel):
	model_config = ConfigDict(from_attributes=True)

	id: str
	case_number: str
	status: CaseStatus
	priority: CasePriority
	patient_name: str
	patient_id: str | None = None
	patient_dob: date | None = None
	patient_phone: str | None = None
	patient_email: str | None = None
	insurance_policy_number: str | None = None
	client_id: str | None = None
	assigned_to: str | None = None
	is_medical: bool
	complaints: str | None = None
	diagnosis: str | None = None
	treatment_notes: str | None = None
	opened_at: datetime
	closed_at: datetime | None = None
	total_service_cost: Money
	total_assistance_cost: Money
	total_commission_cost: Money
	actions_count: int
	documents_count: int
	invoices_count: int
	created_at: datetime
	updated_at: datetime


# ============ Case Action Schemas ============

class CaseActionCreate(BaseModel):
	executor_id: str | None = None
	service_name: str = Field(..., min_length=1, max_length=200)
	service_description: str | None = Field(None, max_length=1000)
	service_cost: Decimal = Field(default=Decimal("0"), ge=0, max_digits=12, decimal_places=2)
	service_currency: CurrencyCode = CurrencyCode.GEL
	assistance_cost: Decimal = Field(default=Decimal("0"), ge=0, max_digits=12, decimal_places=2)
	assistance_currency: CurrencyCode = CurrencyCode.GEL
	commission_cost: Decimal = Field(default=Decimal("0"), ge=0, max_digits=12, decimal_places=2)
	commission_currency: CurrencyCode = CurrencyCode.GEL
	service_date: date | None = None
	comment: str | None = Field(None, max_length=500)


class CaseActionUpdate(BaseModel):
	executor_id: str | None = None
	service_name: str | None = Field(None, min_length=1, max_length=200)
	service_description: str | None = Field(None, max_length=1000)
	service_cost: Decimal | None = Field(None, ge=0, max_digits=12, decimal_places=2)
	service_currency: CurrencyCode | None = None
	assistance_cost: Decimal | None = Field(None, ge=0, max_digits=12, decimal_places=2)
	assistance_currency: CurrencyCode | None = None
	commission_cost: Decimal | None = Field(None, ge=0, max_digits=12, decimal_places=2)
	commission_currency: CurrencyCode | None = None
	service_date: date | None = None
	comment: str | None = Field(None, max_length=500)


class CaseAction(BaseModel):
	model_config = ConfigDict(from_attributes=True)

	id: str
	case_id: str
	executor_id: str | None = None
	service_name: str
	service_description: str | None = None
	service_cost: Money
	service_currency: CurrencyCode
	assistance_cost: Money
	assistance_currency: CurrencyCode
	commission_cost: Money
	commission_currency: CurrencyCode
	service_date: date | None = None
	comment: str | None = None
	sort_order: int
	created_at: datetime
	updated_at: datetime


class ActionOrder(BaseModel):
	id: str
	sort_order: int = Field(..., ge=0)


class ActionReorder(BaseModel):
	actions: list[ActionOrder] = Field(..., min_length=1)

	@field_validator("actions")
	@classmethod
	def unique_ids(cls, v: list[ActionOrder]) -> list[ActionOrder]:
		ids = [item.id for item in v]
		if len(ids) != len(set(ids)):
			raise ValueError("Duplicate action ids")
		return v


class CaseActionMutation(BaseModel):
	"""An action change together with the case totals it produced."""
	action: CaseAction | None = None
	case: Case


# ============ Case Document Schemas ============

class CaseDocument(BaseModel):
	model_config = ConfigDict(from_attributes=True)

	id: str
	case_id: str
	type: DocumentType
	file_name: str
	file_url: str
	file_size: int | None = None
	mime_type: str | None = None
	uploaded_by: str | None = None
	created_at: datetime


class CaseList(BaseModel):
	items: list[Case]
	total: int
	page: int
	page_size: int
