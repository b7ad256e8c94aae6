# (c) Copyright Datacraft, 2026
"""
Case action service.

Every mutation locks the parent case, applies the change and reconciles
the case totals before returning. The router commits both together.
"""
import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from caseledger.core.exceptions import NotFoundError, ValidationError
from caseledger.core.features.partners.service import PartnerService
from caseledger.core.utils.tz import utc_now

from .db.orm import Case, CaseAction
from .reconciler import lock_case, reconcile_case_totals
from .schema import ActionReorder, CaseActionCreate, CaseActionUpdate

logger = logging.getLogger(__name__)


class CaseActionService:

	def __init__(self, session: AsyncSession):
		self.session = session

	async def list_actions(self, case_id: str) -> list[CaseAction]:
		await self._get_live_case(case_id)
		stmt = (
			select(CaseAction)
			.where(CaseAction.case_id == case_id)
			.order_by(CaseAction.sort_order, CaseAction.created_at)
		)
		result = await self.session.execute(stmt)
		return list(result.scalars().all())

	async def create(self, case_id: str, data: CaseActionCreate) -> tuple[CaseAction, Case]:
		if data.executor_id:
			await PartnerService(self.session).get(data.executor_id)
		case = await lock_case(self.session, case_id)

		max_order = (await self.session.execute(
			select(func.max(CaseAction.sort_order)).where(CaseAction.case_id == case_id)
		)).scalar()

		values = data.model_dump()
		for field in ("service_currency", "assistance_currency", "commission_currency"):
			values[field] = values[field].value
		action = CaseAction(
			case_id=case_id,
			sort_order=0 if max_order is None else max_order + 1,
			**values,
		)
		self.session.add(action)

		await reconcile_case_totals(self.session, case)
		logger.info(f"Added action {action.id} to case {case.case_number}")
		return action, case

	async def update(
		self,
		case_id: str,
		action_id: str,
		data: CaseActionUpdate,
	) -> tuple[CaseAction, Case]:
		update_data = data.model_dump(exclude_unset=True)
		if update_data.get("executor_id"):
			await PartnerService(self.session).get(update_data["executor_id"])

		case = await lock_case(self.session, case_id)
		action = await self._get_action(case_id, action_id)

		for key, value in update_data.items():
			if key.endswith("_currency"):
				if value is None:
					continue
				value = value.value
			elif key.endswith("_cost") and value is None:
				continue
			elif key == "service_name" and value is None:
				continue
			setattr(action, key, value)
		action.updated_at = utc_now()

		await reconcile_case_totals(self.session, case)
		return action, case

	async def delete(self, case_id: str, action_id: str) -> Case:
		case = await lock_case(self.session, case_id)
		action = await self._get_action(case_id, action_id)

		await self.session.delete(action)
		await self.session.flush()
		await self._renumber(case_id)

		await reconcile_case_totals(self.session, case)
		logger.info(f"Removed action {action_id} from case {case.case_number}")
		return case

	async def reorder(self, case_id: str, data: ActionReorder) -> list[CaseAction]:
		"""Apply a new display order.

		The request must name every action of the case. The given positions
		decide the order; stored values are renumbered densely from 0.
		"""
		await lock_case(self.session, case_id)
		actions = await self._actions_for_update(case_id)
		by_id = {a.id: a for a in actions}

		requested = {item.id for item in data.actions}
		if requested != set(by_id):
			raise ValidationError("Reorder must list every action of the case exactly once")

		ordered = sorted(data.actions, key=lambda item: item.sort_order)
		for position, item in enumerate(ordered):
			by_id[item.id].sort_order = position
		await self.session.flush()

		return sorted(actions, key=lambda a: a.sort_order)

	async def _renumber(self, case_id: str) -> None:
		for position, action in enumerate(await self._actions_for_update(case_id)):
			if action.sort_order != position:
				action.sort_order = position
		await self.session.flush()

	async def _actions_for_update(self, case_id: str) -> list[CaseAction]:
		stmt = (
			select(CaseAction)
			.where(CaseAction.case_id == case_id)
			.order_by(CaseAction.sort_order, CaseAction.created_at)
		)
		result = await self.session.execute(stmt)
		return list(result.scalars().all())

	async def _get_action(self, case_id: str, action_id: str) -> CaseAction:
		stmt = select(CaseAction).where(
			CaseAction.id == action_id,
			CaseAction.case_id == case_id,
		)
		action = (await self.session.execute(stmt)).scalar_one_or_none()
		if action is None:
			raise NotFoundError("Action not found")
		return action

	async def _get_live_case(self, case_id: str) -> Case:
		stmt = select(Case).where(Case.id == case_id, Case.deleted_at.is_(None))
		case = (await self.session.execute(stmt)).scalar_one_or_none()
		if case is None:
			raise NotFoundError("Case not found")
		return case
