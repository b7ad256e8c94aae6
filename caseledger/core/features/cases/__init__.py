# (c) Copyright Datacraft, 2026
"""Cases, billable case actions and case documents."""
from .db.orm import Case, CaseAction, CaseDocument, CaseStatus, DocumentType

__all__ = [
	"Case",
	"CaseAction",
	"CaseDocument",
	"CaseStatus",
	"DocumentType",
]
