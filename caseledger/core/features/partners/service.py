# (c) Copyright Datacraft, 2026
"""Partner and issuing company service layer."""
import logging

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from caseledger.core.exceptions import NotFoundError
from caseledger.core.utils.tz import utc_now

from .db.orm import Partner, OurCompany
from .schema import PartnerCreate, PartnerUpdate, OurCompanyCreate, OurCompanyUpdate

logger = logging.getLogger(__name__)


class PartnerService:
	"""CRUD for partners. Reads never return trashed rows."""

	def __init__(self, session: AsyncSession):
		self.session = session

	async def get(self, partner_id: str) -> Partner:
		stmt = select(Partner).where(
			Partner.id == partner_id,
			Partner.deleted_at.is_(None),
		)
		partner = (await self.session.execute(stmt)).scalar_one_or_none()
		if partner is None:
			raise NotFoundError("Partner not found")
		return partner

	async def list_partners(self, search: str | None = None) -> list[Partner]:
		stmt = select(Partner).where(Partner.deleted_at.is_(None))
		if search:
			stmt = stmt.where(Partner.name.ilike(f"%{search}%"))
		stmt = stmt.order_by(Partner.name)
		result = await self.session.execute(stmt)
		return list(result.scalars().all())

	async def create(self, data: PartnerCreate) -> Partner:
		partner = Partner(**data.model_dump())
		self.session.add(partner)
		await self.session.flush()
		logger.info(f"Created partner {partner.name} ({partner.id})")
		return partner

	async def update(self, partner_id: str, data: PartnerUpdate) -> Partner:
		partner = await self.get(partner_id)
		for key, value in data.model_dump(exclude_unset=True).items():
			setattr(partner, key, value)
		partner.updated_at = utc_now()
		await self.session.flush()
		return partner

	async def delete(self, partner_id: str) -> None:
		partner = await self.get(partner_id)
		partner.deleted_at = utc_now()
		await self.session.flush()
		logger.info(f"Moved partner {partner.id} to trash")


class OurCompanyService:
	"""CRUD for the business's own invoicing companies."""

	def __init__(self, session: AsyncSession):
		self.session = session

	async def get(self, company_id: str) -> OurCompany:
		stmt = select(OurCompany).where(
			OurCompany.id == company_id,
			OurCompany.deleted_at.is_(None),
		)
		company = (await self.session.execute(stmt)).scalar_one_or_none()
		if company is None:
			raise NotFoundError("Company not found")
		return company

	async def list_companies(self) -> list[OurCompany]:
		stmt = (
			select(OurCompany)
			.where(OurCompany.deleted_at.is_(None))
			.order_by(OurCompany.is_default.desc(), OurCompany.name)
		)
		result = await self.session.execute(stmt)
		return list(result.scalars().all())

	async def create(self, data: OurCompanyCreate) -> OurCompany:
		company = OurCompany(**data.model_dump())
		company.invoice_prefix = company.invoice_prefix.upper()
		if company.is_default:
			await self._clear_default()
		self.session.add(company)
		await self.session.flush()
		logger.info(f"Created company {company.name} ({company.id})")
		return company

	async def update(self, company_id: str, data: OurCompanyUpdate) -> OurCompany:
		company = await self.get(company_id)
		update_data = data.model_dump(exclude_unset=True)
		if update_data.get("invoice_prefix"):
			update_data["invoice_prefix"] = update_data["invoice_prefix"].upper()
		if update_data.get("is_default"):
			await self._clear_default()
		for key, value in update_data.items():
			setattr(company, key, value)
		company.updated_at = utc_now()
		await self.session.flush()
		return company

	async def delete(self, company_id: str) -> None:
		company = await self.get(company_id)
		company.deleted_at = utc_now()
		await self.session.flush()
		logger.info(f"Moved company {company.id} to trash")

	async def has_live_default(self, exclude_id: str | None = None) -> bool:
		stmt = select(OurCompany.id).where(
			OurCompany.is_default.is_(True),
			OurCompany.deleted_at.is_(None),
		)
		if exclude_id:
			stmt = stmt.where(OurCompany.id != exclude_id)
		return (await self.session.execute(stmt.limit(1))).first() is not None

	async def _clear_default(self) -> None:
		"""Only one live company is the default; trashed rows keep their flag."""
		await self.session.execute(
			update(OurCompany)
			.where(OurCompany.is_default.is_(True), OurCompany.deleted_at.is_(None))
			.values(is_default=False)
		)
