# (c) Copyright Datacraft, 2026
"""
API router for the trash.
"""
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from caseledger.core.auth import CurrentActor
from caseledger.core.db.engine import get_db
from caseledger.core.features.cases.documents import discard_objects
from caseledger.core.storage import StorageBackend, get_storage

from .schema import EmptyTrashResult, RestoreRequest, TrashedItem, TrashEntityType
from .service import TrashService

router = APIRouter(prefix="/trash", tags=["trash"])


@router.get("", response_model=list[TrashedItem])
async def list_trash(
	db: Annotated[AsyncSession, Depends(get_db)],
	actor: CurrentActor,
	entity_type: TrashEntityType | None = None,
):
	return await TrashService(db).list_trash(entity_type)


@router.post("/empty", response_model=EmptyTrashResult)
async def empty_trash(
	db: Annotated[AsyncSession, Depends(get_db)],
	storage: Annotated[StorageBackend, Depends(get_storage)],
	actor: CurrentActor,
):
	result, keys = await TrashService(db).empty_trash(actor)
	await db.commit()
	await discard_objects(storage, keys)
	return result


@router.post("/{item_id}/restore", status_code=status.HTTP_204_NO_CONTENT)
async def restore_item(
	item_id: str,
	data: RestoreRequest,
	db: Annotated[AsyncSession, Depends(get_db)],
	actor: CurrentActor,
):
	await TrashService(db).restore(data.entity_type, item_id)
	await db.commit()


@router.delete("/{item_id}/permanent", status_code=status.HTTP_204_NO_CONTENT)
async def delete_permanently(
	item_id: str,
	db: Annotated[AsyncSession, Depends(get_db)],
	storage: Annotated[StorageBackend, Depends(get_storage)],
	actor: CurrentActor,
	entity_type: TrashEntityType = Query(...),
):
	keys = await TrashService(db).permanent_delete(actor, entity_type, item_id)
	await db.commit()
	await discard_objects(storage, keys)
