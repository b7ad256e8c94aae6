# (c) Copyright Datacraft, 2026
"""Case document service: uploads go to object storage, metadata to the case."""
import logging
import re

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from uuid_extensions import uuid7str

from caseledger.core.config import get_settings
from caseledger.core.exceptions import NotFoundError, UploadError, ValidationError
from caseledger.core.storage import StorageBackend, StorageError

from .db.orm import CaseDocument, DocumentType
from .reconciler import lock_case, reconcile_documents_count

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def storage_key_for(case_id: str, doc_type: DocumentType, file_name: str) -> str:
	safe_name = _UNSAFE_CHARS.sub("_", file_name).strip("._") or "file"
	return f"cases/{case_id}/{doc_type.value}/{uuid7str()}_{safe_name}"


class CaseDocumentService:

	def __init__(self, session: AsyncSession, storage: StorageBackend):
		self.session = session
		self.storage = storage

	async def list_documents(
		self,
		case_id: str,
		doc_type: DocumentType | None = None,
	) -> list[CaseDocument]:
		stmt = select(CaseDocument).where(CaseDocument.case_id == case_id)
		if doc_type:
			stmt = stmt.where(CaseDocument.type == doc_type.value)
		stmt = stmt.order_by(CaseDocument.created_at)
		result = await self.session.execute(stmt)
		return list(result.scalars().all())

	async def upload(
		self,
		case_id: str,
		doc_type: DocumentType,
		file_name: str,
		content: bytes,
		mime_type: str | None = None,
		uploaded_by: str | None = None,
	) -> CaseDocument:
		max_bytes = get_settings().max_file_size_mb * 1024 * 1024
		if not content:
			raise ValidationError("File is empty")
		if len(content) > max_bytes:
			raise ValidationError("File is too large")

		case = await lock_case(self.session, case_id)
		key = storage_key_for(case_id, doc_type, file_name)

		try:
			uploaded = await self.storage.put(key, content, content_type=mime_type)
		except StorageError as e:
			logger.error(f"Upload of {key} failed: {e}")
			raise UploadError("Failed to store document") from e

		try:
			document = CaseDocument(
				case_id=case_id,
				type=doc_type.value,
				file_name=file_name,
				file_url=uploaded.url,
				storage_key=uploaded.key,
				file_size=uploaded.size,
				mime_type=mime_type,
				uploaded_by=uploaded_by,
			)
			self.session.add(document)
			await reconcile_documents_count(self.session, case)
		except Exception:
			await discard_objects(self.storage, [uploaded.key])
			raise
		logger.info(f"Stored document {document.id} for case {case.case_number}")
		return document

	async def delete(self, case_id: str, document_id: str) -> str:
		"""Remove a document row and return its storage key.

		The stored object is removed by ``discard_objects`` once the
		transaction has committed.
		"""
		case = await lock_case(self.session, case_id)
		stmt = select(CaseDocument).where(
			CaseDocument.id == document_id,
			CaseDocument.case_id == case_id,
		)
		document = (await self.session.execute(stmt)).scalar_one_or_none()
		if document is None:
			raise NotFoundError("Document not found")

		key = document.storage_key
		await self.session.delete(document)
		await reconcile_documents_count(self.session, case)
		return key


async def discard_objects(storage: StorageBackend, keys: list[str]) -> list[str]:
	"""Best-effort removal of stored objects; returns keys that failed."""
	failed = []
	for key in keys:
		try:
			await storage.delete(key)
		except StorageError as e:
			logger.warning(f"Could not remove stored object {key}: {e}")
			failed.append(key)
	return failed
