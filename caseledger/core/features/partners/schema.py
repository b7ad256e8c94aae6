# (c) Copyright Datacraft, 2026
"""
Pydantic schemas for partners and issuing companies.
"""
from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field


# ============ Partner Schemas ============

class PartnerBase(BaseModel):
	name: str = Field(..., min_length=1, max_length=200)
	legal_name: str | None = Field(None, max_length=200)
	id_code: str | None = Field(None, max_length=50)
	country: str = Field(default="GE", min_length=2, max_length=2)
	city: str | None = Field(None, max_length=100)
	address: str | None = Field(None, max_length=500)
	email: EmailStr | None = None
	phone: str | None = Field(None, max_length=50)
	website: str | None = Field(None, max_length=255)
	notes: str | None = Field(None, max_length=2000)


class PartnerCreate(PartnerBase):
	pass


class PartnerUpdate(BaseModel):
	name: str | None = Field(None, min_length=1, max_length=200)
	legal_name: str | None = Field(None, max_length=200)
	id_code: str | None = Field(None, max_length=50)
	country: str | None = Field(None, min_length=2, max_length=2)
	city: str | None = Field(None, max_length=100)
	address: str | None = Field(None, max_length=500)
	email: EmailStr | None = None
	phone: str | None = Field(None, max_length=50)
	website: str | None = Field(None, max_length=255)
	notes: str | None = Field(None, max_length=2000)


class Partner(PartnerBase):
	model_config = ConfigDict(from_attributes=True)

	id: str
	email: str | None = None
	created_at: datetime
	updated_at: datetime


# ============ Our Company Schemas ============

class OurCompanyBase(BaseModel):
	name: str = Field(..., min_length=1, max_length=200)
	legal_name: str = Field(..., min_length=1, max_length=200)
	id_code: str = Field(..., min_length=1, max_length=50)
	country: str = Field(default="GE", min_length=2, max_length=2)
	city: str | None = Field(None, max_length=100)
	address: str | None = Field(None, max_length=500)
	email: EmailStr | None = None
	phone: str | None = Field(None, max_length=50)
	website: str | None = Field(None, max_length=255)
	bank_name: str | None = Field(None, max_length=200)
	bank_code: str | None = Field(None, max_length=50)
	account_gel: str | None = Field(None, max_length=50)
	account_usd: str | None = Field(None, max_length=50)
	account_eur: str | None = Field(None, max_length=50)
	invoice_prefix: str = Field(default="INV", min_length=1, max_length=10, pattern=r"^[A-Za-z0-9]+$")
	invoice_footer_text: str | None = Field(None, max_length=1000)
	is_default: bool = False


class OurCompanyCreate(OurCompanyBase):
	pass


class OurCompanyUpdate(BaseModel):
	name: str | None = Field(None, min_length=1, max_length=200)
	legal_name: str | None = Field(None, min_length=1, max_length=200)
	id_code: str | None = Field(None, min_length=1, max_length=50)
	country: str | None = Field(None, min_length=2, max_length=2)
	city: str | None = Field(None, max_length=100)
	address: str | None = Field(None, max_length=500)
	email: EmailStr | None = None
	phone: str | None = Field(None, max_length=50)
	website: str | None = Field(None, max_length=255)
	bank_name: str | None = Field(None, max_length=200)
	bank_code: str | None = Field(None, max_length=50)
	account_gel: str | None = Field(None, max_length=50)
	account_usd: str | None = Field(None, max_length=50)
	account_eur: str | None = Field(None, max_length=50)
	invoice_prefix: str | None = Field(None, min_length=1, max_length=10, pattern=r"^[A-Za-z0-9]+$")
	invoice_footer_text: str | None = Field(None, max_length=1000)
	is_default: bool | None = None


class OurCompany(OurCompanyBase):
	model_config = ConfigDict(from_attributes=True)

	id: str
	email: str | None = None
	created_at: datetime
	updated_at: datetime
