# (c) Copyright Datacraft, 2026
"""Case service layer."""
import logging

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from caseledger.core.config import get_settings
from caseledger.core.exceptions import NotFoundError
from caseledger.core.features.numbering import allocate_case_number
from caseledger.core.features.partners.service import PartnerService
from caseledger.core.utils.tz import utc_now

from .db.orm import Case, CaseStatus, CLOSED_CASE_STATUSES
from .schema import CaseCreate, CaseUpdate

logger = logging.getLogger(__name__)

NON_NULLABLE_FIELDS = {"patient_name", "priority", "is_medical"}


class CaseService:
	"""Case CRUD. Cached totals are owned by the reconciler, not by clients."""

	def __init__(self, session: AsyncSession):
		self.session = session

	async def get(self, case_id: str) -> Case:
		stmt = select(Case).where(Case.id == case_id, Case.deleted_at.is_(None))
		case = (await self.session.execute(stmt)).scalar_one_or_none()
		if case is None:
			raise NotFoundError("Case not found")
		return case

	async def list_cases(
		self,
		status: CaseStatus | None = None,
		assigned_to: str | None = None,
		search: str | None = None,
		page: int = 1,
		page_size: int = 20,
	) -> tuple[list[Case], int]:
		stmt = select(Case).where(Case.deleted_at.is_(None))
		if status:
			stmt = stmt.where(Case.status == status.value)
		if assigned_to:
			stmt = stmt.where(Case.assigned_to == assigned_to)
		if search:
			like = f"%{search}%"
			stmt = stmt.where(or_(
				Case.case_number.ilike(like),
				Case.patient_name.ilike(like),
				Case.patient_id.ilike(like),
			))

		count_stmt = select(func.count()).select_from(stmt.subquery())
		total = (await self.session.execute(count_stmt)).scalar_one()

		stmt = (
			stmt.order_by(Case.opened_at.desc(), Case.id.desc())
			.offset((page - 1) * page_size)
			.limit(page_size)
		)
		result = await self.session.execute(stmt)
		return list(result.scalars().all()), total

	async def create(self, data: CaseCreate, created_by: str | None = None) -> Case:
		if data.client_id:
			await PartnerService(self.session).get(data.client_id)
		settings = get_settings()
		case_number = await allocate_case_number(self.session, settings.case_number_prefix)

		values = data.model_dump()
		values["status"] = data.status.value
		values["priority"] = data.priority.value
		case = Case(case_number=case_number, created_by=created_by, **values)
		if data.status in CLOSED_CASE_STATUSES:
			case.closed_at = utc_now()

		self.session.add(case)
		await self.session.flush()
		logger.info(f"Created case {case.case_number} ({case.id})")
		return case

	async def update(self, case_id: str, data: CaseUpdate) -> Case:
		case = await self.get(case_id)
		update_data = data.model_dump(exclude_unset=True)
		if update_data.get("client_id"):
			await PartnerService(self.session).get(update_data["client_id"])

		new_status = update_data.pop("status", None)
		for key, value in update_data.items():
			if value is None and key in NON_NULLABLE_FIELDS:
				continue
			if key == "priority":
				value = value.value
			setattr(case, key, value)

		if new_status is not None and new_status.value != case.status:
			self._apply_status(case, new_status)

		case.updated_at = utc_now()
		await self.session.flush()
		return case

	async def delete(self, case_id: str) -> None:
		"""Move a case to trash. Actions and documents stay untouched."""
		case = await self.get(case_id)
		case.deleted_at = utc_now()
		await self.session.flush()
		logger.info(f"Moved case {case.case_number} to trash")

	def _apply_status(self, case: Case, status: CaseStatus) -> None:
		case.status = status.value
		if status in CLOSED_CASE_STATUSES:
			case.closed_at = utc_now()
		else:
			case.closed_at = None
