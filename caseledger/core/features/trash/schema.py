# (c) Copyright Datacraft, 2026
import enum
from datetime import datetime

from pydantic import BaseModel


class TrashEntityType(str, enum.Enum):
	CASE = "case"
	INVOICE = "invoice"
	PARTNER = "partner"
	OUR_COMPANY = "our_company"


# ============ Trash Schemas ============

class TrashedItem(BaseModel):
	"""Read-time view of one soft-deleted row."""
	id: str
	entity_type: TrashEntityType
	name: str
	description: str | None = None
	deleted_at: datetime
	days_remaining: int


class RestoreRequest(BaseModel):
	entity_type: TrashEntityType


class EmptyTrashResult(BaseModel):
	purged: dict[TrashEntityType, int]
	skipped: list[TrashedItem] = []
