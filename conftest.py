# (c) Copyright Datacraft, 2026
"""
Shared test fixtures: a file backed SQLite database, an API client that
runs requests on the test session, and factories for ledger rows.
"""
import os

os.environ.setdefault("CL_DB_URL", "sqlite+aiosqlite:///:memory:")

from decimal import Decimal

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from caseledger.app import app
from caseledger.core.db.base import Base
from caseledger.core.db.engine import get_db
from caseledger.core.features.cases.actions import CaseActionService
from caseledger.core.features.cases.db.orm import Case, CaseDocument, DocumentType
from caseledger.core.features.cases.reconciler import reconcile_documents_count
from caseledger.core.features.cases.schema import CaseActionCreate, CaseCreate
from caseledger.core.features.cases.service import CaseService
from caseledger.core.features.invoices.pdf import InvoicePdfRenderer, get_pdf_renderer
from caseledger.core.features.invoices.schema import InvoiceCreate
from caseledger.core.features.invoices.service import InvoiceLifecycleService
from caseledger.core.features.partners.db.orm import OurCompany, Partner
from caseledger.core.mail import MailBackend, MailResult, get_mail_backend
from caseledger.core.storage import get_storage
from caseledger.core.storage.local import LocalStorageBackend

ACTOR_HEADERS = {"X-Forwarded-User": "handler-1", "X-Forwarded-Roles": "coordinator"}
ADMIN_HEADERS = {"X-Forwarded-User": "admin-1", "X-Forwarded-Roles": "super_admin"}


class RecordingMailer(MailBackend):
	"""Mail backend that keeps sent messages in memory."""

	def __init__(self):
		self.sent = []
		self.result = MailResult(success=True, message_id="msg-0001")

	async def send(self, sender, to, cc, subject, body, attachments, reply_to=None):
		self.sent.append({
			"sender": sender,
			"to": to,
			"cc": cc,
			"subject": subject,
			"body": body,
			"attachments": attachments,
			"reply_to": reply_to,
		})
		return self.result


@pytest.fixture
async def db_engine(tmp_path):
	engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'ledger.db'}")
	async with engine.begin() as conn:
		await conn.run_sync(Base.metadata.create_all)
	yield engine
	await engine.dispose()


@pytest.fixture
async def db_session(db_engine) -> AsyncSession:
	session_factory = async_sessionmaker(db_engine, expire_on_commit=False)
	async with session_factory() as session:
		yield session


@pytest.fixture
def storage(tmp_path) -> LocalStorageBackend:
	return LocalStorageBackend(tmp_path / "media", base_url="/media")


@pytest.fixture
def mailer() -> RecordingMailer:
	return RecordingMailer()


@pytest.fixture
def pdf_renderer() -> InvoicePdfRenderer:
	return InvoicePdfRenderer()


@pytest.fixture
async def api_client(db_session, storage, mailer, pdf_renderer):
	async def _get_db():
		yield db_session

	app.dependency_overrides[get_db] = _get_db
	app.dependency_overrides[get_storage] = lambda: storage
	app.dependency_overrides[get_mail_backend] = lambda: mailer
	app.dependency_overrides[get_pdf_renderer] = lambda: pdf_renderer

	transport = ASGITransport(app=app)
	async with AsyncClient(
		transport=transport,
		base_url="http://test",
		headers=ACTOR_HEADERS,
	) as client:
		yield client

	app.dependency_overrides.clear()


@pytest.fixture
async def make_partner(db_session: AsyncSession):
	"""Factory fixture for creating partners."""
	async def _make_partner(
		name: str = "Aldagi Insurance",
		email: str | None = "claims@partner-insurer.ge",
		**kwargs,
	) -> Partner:
		partner = Partner(name=name, email=email, **kwargs)
		db_session.add(partner)
		await db_session.commit()
		await db_session.refresh(partner)
		return partner

	return _make_partner


@pytest.fixture
async def make_company(db_session: AsyncSession):
	"""Factory fixture for creating issuing companies."""
	async def _make_company(
		name: str = "Medical Assist",
		invoice_prefix: str = "MA",
		**kwargs,
	) -> OurCompany:
		company = OurCompany(
			name=name,
			legal_name=kwargs.pop("legal_name", f"{name} LLC"),
			id_code=kwargs.pop("id_code", "405123456"),
			email=kwargs.pop("email", "billing@medassist.ge"),
			invoice_prefix=invoice_prefix,
			**kwargs,
		)
		db_session.add(company)
		await db_session.commit()
		await db_session.refresh(company)
		return company

	return _make_company


@pytest.fixture
async def make_case(db_session: AsyncSession):
	"""Factory fixture for creating cases through the case service."""
	async def _make_case(patient_name: str = "Nino Beridze", **kwargs) -> Case:
		case = await CaseService(db_session).create(
			CaseCreate(patient_name=patient_name, **kwargs),
			created_by="handler-1",
		)
		await db_session.commit()
		return case

	return _make_case


@pytest.fixture
async def make_action(db_session: AsyncSession):
	"""Factory fixture for adding actions; case totals are reconciled."""
	async def _make_action(case_id: str, service_name: str = "Ambulance", **kwargs):
		action, case = await CaseActionService(db_session).create(
			case_id,
			CaseActionCreate(service_name=service_name, **kwargs),
		)
		await db_session.commit()
		return action

	return _make_action


@pytest.fixture
async def make_document(db_session: AsyncSession, storage: LocalStorageBackend):
	"""Factory fixture for case documents.

	With ``stored=False`` the row points at a key that has no object.
	"""
	async def _make_document(
		case_id: str,
		doc_type: DocumentType = DocumentType.MEDICAL,
		file_name: str = "report.pdf",
		content: bytes = b"%PDF-1.4 report",
		stored: bool = True,
	) -> CaseDocument:
		key = f"cases/{case_id}/{doc_type.value}/{file_name}"
		if stored:
			await storage.put(key, content, "application/pdf")
		document = CaseDocument(
			case_id=case_id,
			type=doc_type.value,
			file_name=file_name,
			file_url=storage.url_for(key),
			storage_key=key,
			file_size=len(content),
			mime_type="application/pdf",
		)
		db_session.add(document)
		case = await db_session.get(Case, case_id)
		await reconcile_documents_count(db_session, case)
		await db_session.commit()
		return document

	return _make_document


@pytest.fixture
async def make_invoice(db_session: AsyncSession, make_case, make_company, make_partner):
	"""Factory fixture for invoices created through the lifecycle service.

	Missing parties are created on the fly.
	"""
	async def _make_invoice(
		services: list[tuple[str, int, str]] | None = None,
		case: Case | None = None,
		sender: OurCompany | None = None,
		recipient: Partner | None = None,
		**kwargs,
	):
		case = case or await make_case()
		sender = sender or await make_company()
		recipient = recipient or await make_partner()
		services = services or [("Consultation", 1, "100.00")]

		invoice = await InvoiceLifecycleService(db_session).create(
			InvoiceCreate(
				case_id=case.id,
				sender_id=sender.id,
				recipient_id=recipient.id,
				services=[
					{"description": d, "quantity": q, "unit_price": Decimal(p)}
					for d, q, p in services
				],
				**kwargs,
			),
			created_by="handler-1",
		)
		await db_session.commit()
		return invoice

	return _make_invoice
