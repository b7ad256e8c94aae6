# (c) Copyright Datacraft, 2026
"""
API router for cases, their actions and documents.
"""
from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from caseledger.core.auth import CurrentActor
from caseledger.core.db.engine import get_db
from caseledger.core.storage import StorageBackend, get_storage
from caseledger.core.utils.export import ExportFormat, export_response

from .actions import CaseActionService
from .db.orm import CaseStatus, DocumentType
from .documents import CaseDocumentService, discard_objects
from .export import CASE_EXPORT_COLUMNS, case_export_rows
from .schema import (
	ActionReorder,
	Case,
	CaseAction,
	CaseActionCreate,
	CaseActionMutation,
	CaseActionUpdate,
	CaseCreate,
	CaseDocument,
	CaseList,
	CaseUpdate,
)
from .service import CaseService

router = APIRouter(prefix="/cases", tags=["cases"])


# ============ Cases ============

@router.get("", response_model=CaseList)
async def list_cases(
	db: Annotated[AsyncSession, Depends(get_db)],
	actor: CurrentActor,
	status_filter: CaseStatus | None = Query(None, alias="status"),
	assigned_to: str | None = None,
	search: str | None = Query(None, max_length=100),
	page: int = Query(1, ge=1),
	page_size: int = Query(20, ge=1, le=100),
):
	items, total = await CaseService(db).list_cases(
		status=status_filter,
		assigned_to=assigned_to,
		search=search,
		page=page,
		page_size=page_size,
	)
	return CaseList(items=items, total=total, page=page, page_size=page_size)


@router.post("", response_model=Case, status_code=status.HTTP_201_CREATED)
async def create_case(
	data: CaseCreate,
	db: Annotated[AsyncSession, Depends(get_db)],
	actor: CurrentActor,
):
	case = await CaseService(db).create(data, created_by=actor.id)
	await db.commit()
	return case


@router.get("/export")
async def export_cases(
	db: Annotated[AsyncSession, Depends(get_db)],
	actor: CurrentActor,
	fmt: ExportFormat = Query(ExportFormat.CSV, alias="format"),
	status_filter: CaseStatus | None = Query(None, alias="status"),
):
	rows = await case_export_rows(db, status=status_filter)
	return export_response(CASE_EXPORT_COLUMNS, rows, fmt, "cases")


@router.get("/{case_id}", response_model=Case)
async def get_case(
	case_id: str,
	db: Annotated[AsyncSession, Depends(get_db)],
	actor: CurrentActor,
):
	return await CaseService(db).get(case_id)


@router.patch("/{case_id}", response_model=Case)
async def update_case(
	case_id: str,
	data: CaseUpdate,
	db: Annotated[AsyncSession, Depends(get_db)],
	actor: CurrentActor,
):
	case = await CaseService(db).update(case_id, data)
	await db.commit()
	return case


@router.delete("/{case_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_case(
	case_id: str,
	db: Annotated[AsyncSession, Depends(get_db)],
	actor: CurrentActor,
):
	"""Move a case to trash."""
	await CaseService(db).delete(case_id)
	await db.commit()


# ============ Actions ============

@router.get("/{case_id}/actions", response_model=list[CaseAction])
async def list_actions(
	case_id: str,
	db: Annotated[AsyncSession, Depends(get_db)],
	actor: CurrentActor,
):
	return await CaseActionService(db).list_actions(case_id)


@router.post(
	"/{case_id}/actions",
	response_model=CaseActionMutation,
	status_code=status.HTTP_201_CREATED,
)
async def create_action(
	case_id: str,
	data: CaseActionCreate,
	db: Annotated[AsyncSession, Depends(get_db)],
	actor: CurrentActor,
):
	action, case = await CaseActionService(db).create(case_id, data)
	await db.commit()
	return CaseActionMutation(action=action, case=case)


@router.patch("/{case_id}/actions/{action_id}", response_model=CaseActionMutation)
async def update_action(
	case_id: str,
	action_id: str,
	data: CaseActionUpdate,
	db: Annotated[AsyncSession, Depends(get_db)],
	actor: CurrentActor,
):
	action, case = await CaseActionService(db).update(case_id, action_id, data)
	await db.commit()
	return CaseActionMutation(action=action, case=case)


@router.delete("/{case_id}/actions/{action_id}", response_model=CaseActionMutation)
async def delete_action(
	case_id: str,
	action_id: str,
	db: Annotated[AsyncSession, Depends(get_db)],
	actor: CurrentActor,
):
	case = await CaseActionService(db).delete(case_id, action_id)
	await db.commit()
	return CaseActionMutation(case=case)


@router.put("/{case_id}/actions/reorder", response_model=list[CaseAction])
async def reorder_actions(
	case_id: str,
	data: ActionReorder,
	db: Annotated[AsyncSession, Depends(get_db)],
	actor: CurrentActor,
):
	actions = await CaseActionService(db).reorder(case_id, data)
	await db.commit()
	return actions


# ============ Documents ============

@router.get("/{case_id}/documents", response_model=list[CaseDocument])
async def list_documents(
	case_id: str,
	db: Annotated[AsyncSession, Depends(get_db)],
	storage: Annotated[StorageBackend, Depends(get_storage)],
	actor: CurrentActor,
	doc_type: DocumentType | None = Query(None, alias="type"),
):
	await CaseService(db).get(case_id)
	return await CaseDocumentService(db, storage).list_documents(case_id, doc_type)


@router.post(
	"/{case_id}/documents",
	response_model=CaseDocument,
	status_code=status.HTTP_201_CREATED,
)
async def upload_document(
	case_id: str,
	db: Annotated[AsyncSession, Depends(get_db)],
	storage: Annotated[StorageBackend, Depends(get_storage)],
	actor: CurrentActor,
	file: UploadFile = File(...),
	doc_type: DocumentType = Form(..., alias="type"),
):
	content = await file.read()
	document = await CaseDocumentService(db, storage).upload(
		case_id,
		doc_type,
		file_name=file.filename or "document",
		content=content,
		mime_type=file.content_type,
		uploaded_by=actor.id,
	)
	key = document.storage_key
	try:
		await db.commit()
	except Exception:
		await discard_objects(storage, [key])
		raise
	return document


@router.delete("/{case_id}/documents/{document_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_document(
	case_id: str,
	document_id: str,
	db: Annotated[AsyncSession, Depends(get_db)],
	storage: Annotated[StorageBackend, Depends(get_storage)],
	actor: CurrentActor,
):
	key = await CaseDocumentService(db, storage).delete(case_id, document_id)
	await db.commit()
	await discard_objects(storage, [key])
