# (c) Copyright Datacraft, 2026
"""
API router for partners and issuing companies.
"""
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from caseledger.core.auth import CurrentActor
from caseledger.core.db.engine import get_db

from .schema import (
	Partner,
	PartnerCreate,
	PartnerUpdate,
	OurCompany,
	OurCompanyCreate,
	OurCompanyUpdate,
)
from .service import PartnerService, OurCompanyService

router = APIRouter(tags=["partners"])


# ============ Partners ============

@router.get("/partners", response_model=list[Partner])
async def list_partners(
	db: Annotated[AsyncSession, Depends(get_db)],
	actor: CurrentActor,
	search: str | None = Query(None, max_length=100),
):
	return await PartnerService(db).list_partners(search=search)


@router.post("/partners", response_model=Partner, status_code=status.HTTP_201_CREATED)
async def create_partner(
	data: PartnerCreate,
	db: Annotated[AsyncSession, Depends(get_db)],
	actor: CurrentActor,
):
	partner = await PartnerService(db).create(data)
	await db.commit()
	return partner


@router.get("/partners/{partner_id}", response_model=Partner)
async def get_partner(
	partner_id: str,
	db: Annotated[AsyncSession, Depends(get_db)],
	actor: CurrentActor,
):
	return await PartnerService(db).get(partner_id)


@router.patch("/partners/{partner_id}", response_model=Partner)
async def update_partner(
	partner_id: str,
	data: PartnerUpdate,
	db: Annotated[AsyncSession, Depends(get_db)],
	actor: CurrentActor,
):
	partner = await PartnerService(db).update(partner_id, data)
	await db.commit()
	return partner


@router.delete("/partners/{partner_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_partner(
	partner_id: str,
	db: Annotated[AsyncSession, Depends(get_db)],
	actor: CurrentActor,
):
	"""Move a partner to trash."""
	await PartnerService(db).delete(partner_id)
	await db.commit()


# ============ Our Companies ============

@router.get("/our-companies", response_model=list[OurCompany])
async def list_companies(
	db: Annotated[AsyncSession, Depends(get_db)],
	actor: CurrentActor,
):
	return await OurCompanyService(db).list_companies()


@router.post("/our-companies", response_model=OurCompany, status_code=status.HTTP_201_CREATED)
async def create_company(
	data: OurCompanyCreate,
	db: Annotated[AsyncSession, Depends(get_db)],
	actor: CurrentActor,
):
	company = await OurCompanyService(db).create(data)
	await db.commit()
	return company


@router.get("/our-companies/{company_id}", response_model=OurCompany)
async def get_company(
	company_id: str,
	db: Annotated[AsyncSession, Depends(get_db)],
	actor: CurrentActor,
):
	return await OurCompanyService(db).get(company_id)


@router.patch("/our-companies/{company_id}", response_model=OurCompany)
async def update_company(
	company_id: str,
	data: OurCompanyUpdate,
	db: Annotated[AsyncSession, Depends(get_db)],
	actor: CurrentActor,
):
	company = await OurCompanyService(db).update(company_id, data)
	await db.commit()
	return company


@router.delete("/our-companies/{company_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_company(
	company_id: str,
	db: Annotated[AsyncSession, Depends(get_db)],
	actor: CurrentActor,
):
	"""Move a company to trash."""
	await OurCompanyService(db).delete(company_id)
	await db.commit()
