# (c) Copyright Datacraft, 2026
"""
Trash: soft-deleted rows across cases, invoices, partners and issuing
companies.

Soft-deleted rows stay restorable for ``trash_retention_days``. Rows past
that window drop out of the listing but are only removed by an explicit
permanent delete or by emptying the trash.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from caseledger.core.auth import Actor, require_elevated
from caseledger.core.config import get_settings
from caseledger.core.exceptions import InvalidStatusError, NotFoundError
from caseledger.core.features.cases.db.orm import Case, CaseAction, CaseDocument
from caseledger.core.features.cases.reconciler import reconcile_invoices_count
from caseledger.core.features.currency import format_money
from caseledger.core.features.invoices.db.orm import Invoice, InvoiceSend, InvoiceService
from caseledger.core.features.partners.db.orm import OurCompany, Partner
from caseledger.core.features.partners.service import OurCompanyService
from caseledger.core.utils.tz import utc_now

from .schema import EmptyTrashResult, TrashedItem, TrashEntityType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrashKind:
	model: type
	label: str
	name: Callable[[object], str]
	description: Callable[[object], str | None]


TRASH_KINDS = {
	TrashEntityType.CASE: TrashKind(
		Case, "Case",
		name=lambda c: f"#{c.case_number}",
		description=lambda c: c.patient_name,
	),
	TrashEntityType.INVOICE: TrashKind(
		Invoice, "Invoice",
		name=lambda i: f"#{i.invoice_number}",
		description=lambda i: format_money(i.total, i.currency),
	),
	TrashEntityType.PARTNER: TrashKind(
		Partner, "Partner",
		name=lambda p: p.name,
		description=lambda p: p.legal_name,
	),
	TrashEntityType.OUR_COMPANY: TrashKind(
		OurCompany, "Company",
		name=lambda c: c.name,
		description=lambda c: c.legal_name,
	),
}

# Cases go first: purging a case also purges its invoices
PURGE_ORDER = (
	TrashEntityType.CASE,
	TrashEntityType.INVOICE,
	TrashEntityType.PARTNER,
	TrashEntityType.OUR_COMPANY,
)


def days_remaining(deleted_at: datetime, now: datetime, retention_days: int) -> int:
	"""Whole days left before a trashed row leaves the listing."""
	return retention_days - (now - deleted_at).days


class TrashService:

	def __init__(self, session: AsyncSession, retention_days: int | None = None):
		self.session = session
		if retention_days is None:
			retention_days = get_settings().trash_retention_days
		self.retention_days = retention_days

	async def list_trash(
		self,
		entity_type: TrashEntityType | None = None,
		now: datetime | None = None,
	) -> list[TrashedItem]:
		"""Trashed rows still inside the retention window, newest first."""
		now = now or utc_now()
		kinds = [entity_type] if entity_type else list(TrashEntityType)

		items = []
		for kind in kinds:
			model = TRASH_KINDS[kind].model
			stmt = select(model).where(model.deleted_at.is_not(None))
			for row in (await self.session.execute(stmt)).scalars():
				item = self._project(kind, row, now)
				if item.days_remaining > 0:
					items.append(item)

		items.sort(key=lambda i: i.deleted_at, reverse=True)
		return items

	async def restore(self, entity_type: TrashEntityType, item_id: str) -> None:
		row = await self._get_trashed(entity_type, item_id)
		if entity_type is TrashEntityType.OUR_COMPANY and row.is_default:
			# Another company became the default while this one was trashed
			if await OurCompanyService(self.session).has_live_default(exclude_id=row.id):
				row.is_default = False
		row.deleted_at = None
		row.updated_at = utc_now()
		await self.session.flush()

		if entity_type is TrashEntityType.INVOICE:
			await reconcile_invoices_count(self.session, row.case_id)
		logger.info(f"Restored {entity_type.value} {item_id} from trash")

	async def permanent_delete(
		self,
		actor: Actor,
		entity_type: TrashEntityType,
		item_id: str,
	) -> list[str]:
		"""Irreversibly remove one trashed row.

		Only elevated actors may do this, and only for rows that are in the
		trash. Returns storage keys of documents whose objects should be
		removed once the transaction has committed.
		"""
		require_elevated(actor)
		row = await self._get_trashed(entity_type, item_id)
		keys = await self._purge(entity_type, row)
		logger.info(f"Actor {actor.id} permanently deleted {entity_type.value} {item_id}")
		return keys

	async def empty_trash(self, actor: Actor) -> tuple[EmptyTrashResult, list[str]]:
		"""Permanently delete everything in the trash.

		Partners and companies that trashed or live invoices still point to
		are left in place and reported as skipped.
		"""
		require_elevated(actor)
		now = utc_now()
		purged = {kind: 0 for kind in TrashEntityType}
		skipped = []
		keys = []

		for kind in PURGE_ORDER:
			model = TRASH_KINDS[kind].model
			stmt = select(model).where(model.deleted_at.is_not(None)).with_for_update()
			rows = list((await self.session.execute(stmt)).scalars().all())
			for row in rows:
				if await self._invoice_references(kind, row.id):
					skipped.append(self._project(kind, row, now))
					continue
				keys.extend(await self._purge(kind, row))
				purged[kind] += 1

		logger.info(
			f"Actor {actor.id} emptied trash: "
			+ ", ".join(f"{k.value}={v}" for k, v in purged.items())
		)
		return EmptyTrashResult(purged=purged, skipped=skipped), keys

	def _project(self, kind: TrashEntityType, row, now: datetime) -> TrashedItem:
		trash_kind = TRASH_KINDS[kind]
		return TrashedItem(
			id=row.id,
			entity_type=kind,
			name=trash_kind.name(row),
			description=trash_kind.description(row),
			deleted_at=row.deleted_at,
			days_remaining=days_remaining(row.deleted_at, now, self.retention_days),
		)

	async def _get_trashed(self, kind: TrashEntityType, item_id: str):
		trash_kind = TRASH_KINDS[kind]
		stmt = (
			select(trash_kind.model)
			.where(trash_kind.model.id == item_id, trash_kind.model.deleted_at.is_not(None))
			.with_for_update()
		)
		row = (await self.session.execute(stmt)).scalar_one_or_none()
		if row is None:
			raise NotFoundError(f"{trash_kind.label} not found in trash")
		return row

	async def _purge(self, kind: TrashEntityType, row) -> list[str]:
		if kind is TrashEntityType.CASE:
			return await self._purge_case(row.id)

		if kind is TrashEntityType.INVOICE:
			await self._purge_invoices([row.id])
			return []

		count = await self._invoice_references(kind, row.id)
		if count:
			raise InvalidStatusError(
				f"{TRASH_KINDS[kind].label} is still referenced by {count} invoice(s)"
			)
		if kind is TrashEntityType.PARTNER:
			await self.session.execute(
				update(Case).where(Case.client_id == row.id).values(client_id=None)
			)
			await self.session.execute(
				update(CaseAction).where(CaseAction.executor_id == row.id).values(executor_id=None)
			)
		model = TRASH_KINDS[kind].model
		await self.session.execute(delete(model).where(model.id == row.id))
		await self.session.flush()
		return []

	async def _purge_case(self, case_id: str) -> list[str]:
		"""Remove a case together with its invoices, actions and documents."""
		invoice_ids = list((await self.session.execute(
			select(Invoice.id).where(Invoice.case_id == case_id)
		)).scalars().all())
		await self._purge_invoices(invoice_ids)

		keys = list((await self.session.execute(
			select(CaseDocument.storage_key).where(CaseDocument.case_id == case_id)
		)).scalars().all())

		await self.session.execute(delete(CaseAction).where(CaseAction.case_id == case_id))
		await self.session.execute(delete(CaseDocument).where(CaseDocument.case_id == case_id))
		await self.session.execute(delete(Case).where(Case.id == case_id))
		await self.session.flush()
		return keys

	async def _purge_invoices(self, invoice_ids: list[str]) -> None:
		if not invoice_ids:
			return
		await self.session.execute(
			delete(InvoiceSend).where(InvoiceSend.invoice_id.in_(invoice_ids))
		)
		await self.session.execute(
			delete(InvoiceService).where(InvoiceService.invoice_id.in_(invoice_ids))
		)
		await self.session.execute(delete(Invoice).where(Invoice.id.in_(invoice_ids)))
		await self.session.flush()

	async def _invoice_references(self, kind: TrashEntityType, item_id: str) -> int:
		if kind is TrashEntityType.PARTNER:
			column = Invoice.recipient_id
		elif kind is TrashEntityType.OUR_COMPANY:
			column = Invoice.sender_id
		else:
			return 0
		stmt = select(func.count()).select_from(Invoice).where(column == item_id)
		return (await self.session.execute(stmt)).scalar_one()
