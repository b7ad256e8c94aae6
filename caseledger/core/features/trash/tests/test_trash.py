# (c) Copyright Datacraft, 2026
from datetime import datetime, timedelta

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from caseledger.core.auth import Actor
from caseledger.core.exceptions import ForbiddenError, InvalidStatusError, NotFoundError
from caseledger.core.features.cases.db.orm import Case, CaseAction, CaseDocument
from caseledger.core.features.cases.service import CaseService
from caseledger.core.features.invoices.db.orm import Invoice, InvoiceService
from caseledger.core.features.invoices.service import InvoiceLifecycleService
from caseledger.core.features.partners.db.orm import OurCompany, Partner
from caseledger.core.features.partners.service import OurCompanyService, PartnerService
from caseledger.core.features.trash.schema import TrashEntityType
from caseledger.core.features.trash.service import TrashService, days_remaining
from caseledger.core.utils.tz import utc_now

ADMIN = Actor(id="admin-1", role="super_admin")
COORDINATOR = Actor(id="handler-1", role="coordinator")


async def count(session: AsyncSession, model) -> int:
	return (await session.execute(select(func.count()).select_from(model))).scalar_one()


@pytest.mark.parametrize("age_days,expected", [(0, 30), (1, 29), (29, 1), (30, 0), (45, -15)])
def test_days_remaining(age_days, expected):
	now = datetime(2025, 3, 31, 12, 0)
	assert days_remaining(now - timedelta(days=age_days), now, 30) == expected


def test_partial_days_are_not_counted():
	now = datetime(2025, 3, 31, 12, 0)
	assert days_remaining(now - timedelta(days=4, hours=23), now, 30) == 26


async def test_listing_covers_all_kinds_newest_first(db_session: AsyncSession, make_invoice, make_partner):
	invoice = await make_invoice()
	partner = await make_partner(name="Old Insurer")
	await PartnerService(db_session).delete(partner.id)
	await db_session.commit()
	await InvoiceLifecycleService(db_session).delete(invoice.id)
	await db_session.commit()

	items = await TrashService(db_session).list_trash()

	assert [i.entity_type for i in items] == [TrashEntityType.INVOICE, TrashEntityType.PARTNER]
	assert items[0].name == f"#{invoice.invoice_number}"
	assert items[0].days_remaining == 30
	assert items[1].name == "Old Insurer"

	only_partners = await TrashService(db_session).list_trash(TrashEntityType.PARTNER)
	assert [i.id for i in only_partners] == [partner.id]


async def test_expired_items_leave_listing(db_session: AsyncSession, make_case):
	fresh = await make_case()
	stale = await make_case()
	now = utc_now()
	(await db_session.get(Case, fresh.id)).deleted_at = now - timedelta(days=3)
	(await db_session.get(Case, stale.id)).deleted_at = now - timedelta(days=31)
	await db_session.commit()

	items = await TrashService(db_session).list_trash(now=now)

	assert [(i.id, i.days_remaining) for i in items] == [(fresh.id, 27)]


async def test_soft_delete_and_restore_case(db_session: AsyncSession, make_case, make_action):
	case = await make_case()
	await make_action(case.id, service_cost="120.00")
	cases = CaseService(db_session)

	await cases.delete(case.id)
	await db_session.commit()
	with pytest.raises(NotFoundError):
		await cases.get(case.id)

	await TrashService(db_session).restore(TrashEntityType.CASE, case.id)
	await db_session.commit()

	restored = await cases.get(case.id)
	assert restored.deleted_at is None
	assert await count(db_session, CaseAction) == 1


async def test_restore_invoice_recounts_case(db_session: AsyncSession, make_invoice):
	invoice = await make_invoice()
	await InvoiceLifecycleService(db_session).delete(invoice.id)
	await db_session.commit()
	case = await db_session.get(Case, invoice.case_id, populate_existing=True)
	assert case.invoices_count == 0

	await TrashService(db_session).restore(TrashEntityType.INVOICE, invoice.id)
	await db_session.commit()

	case = await db_session.get(Case, invoice.case_id, populate_existing=True)
	assert case.invoices_count == 1


async def test_restore_keeps_default_company(db_session: AsyncSession, make_company):
	company = await make_company(is_default=True)
	await OurCompanyService(db_session).delete(company.id)
	await db_session.commit()

	await TrashService(db_session).restore(TrashEntityType.OUR_COMPANY, company.id)
	await db_session.commit()

	restored = await db_session.get(OurCompany, company.id, populate_existing=True)
	assert restored.deleted_at is None
	assert restored.is_default is True


async def test_restored_company_yields_to_newer_default(db_session: AsyncSession, make_company):
	first = await make_company(is_default=True)
	await OurCompanyService(db_session).delete(first.id)
	await db_session.commit()
	second = await make_company(name="Assist Partners", invoice_prefix="AP", is_default=True)

	await TrashService(db_session).restore(TrashEntityType.OUR_COMPANY, first.id)
	await db_session.commit()

	first = await db_session.get(OurCompany, first.id, populate_existing=True)
	second = await db_session.get(OurCompany, second.id, populate_existing=True)
	assert first.is_default is False
	assert second.is_default is True


async def test_restore_requires_trashed_row(db_session: AsyncSession, make_case):
	case = await make_case()

	with pytest.raises(NotFoundError):
		await TrashService(db_session).restore(TrashEntityType.CASE, case.id)


async def test_permanent_delete_requires_elevated_actor(db_session: AsyncSession, make_case):
	case = await make_case()
	await CaseService(db_session).delete(case.id)
	await db_session.commit()

	with pytest.raises(ForbiddenError):
		await TrashService(db_session).permanent_delete(COORDINATOR, TrashEntityType.CASE, case.id)

	assert await db_session.get(Case, case.id) is not None


async def test_permanent_delete_of_live_row_is_refused(db_session: AsyncSession, make_case):
	case = await make_case()

	with pytest.raises(NotFoundError):
		await TrashService(db_session).permanent_delete(ADMIN, TrashEntityType.CASE, case.id)


async def test_case_purge_cascades(
	db_session: AsyncSession, make_case, make_action, make_document, make_invoice
):
	case = await make_case()
	await make_action(case.id, service_cost="10")
	await make_action(case.id, service_cost="20")
	for name in ("a.pdf", "b.pdf", "c.pdf"):
		await make_document(case.id, file_name=name)
	await make_invoice(case=case)
	await CaseService(db_session).delete(case.id)
	await db_session.commit()

	keys = await TrashService(db_session).permanent_delete(ADMIN, TrashEntityType.CASE, case.id)
	await db_session.commit()

	assert len(keys) == 3
	for model in (Case, CaseAction, CaseDocument, Invoice, InvoiceService):
		assert await count(db_session, model) == 0


async def test_referenced_partner_cannot_be_purged(db_session: AsyncSession, make_partner, make_invoice):
	partner = await make_partner()
	await make_invoice(recipient=partner)
	await PartnerService(db_session).delete(partner.id)
	await db_session.commit()

	with pytest.raises(InvalidStatusError):
		await TrashService(db_session).permanent_delete(ADMIN, TrashEntityType.PARTNER, partner.id)


async def test_empty_trash(db_session: AsyncSession, make_case, make_partner, make_invoice):
	trashed_case = await make_case()
	await make_case()
	idle = await make_partner(name="Idle Insurer")
	busy = await make_partner(name="Busy Insurer")
	await make_invoice(recipient=busy)

	await CaseService(db_session).delete(trashed_case.id)
	await PartnerService(db_session).delete(idle.id)
	await PartnerService(db_session).delete(busy.id)
	await db_session.commit()

	result, keys = await TrashService(db_session).empty_trash(ADMIN)
	await db_session.commit()

	assert result.purged[TrashEntityType.CASE] == 1
	assert result.purged[TrashEntityType.PARTNER] == 1
	assert [s.id for s in result.skipped] == [busy.id]
	assert keys == []
	assert await db_session.get(Partner, idle.id) is None
	assert await count(db_session, Case) == 2


async def test_empty_trash_requires_elevated_actor(db_session: AsyncSession):
	with pytest.raises(ForbiddenError):
		await TrashService(db_session).empty_trash(COORDINATOR)
