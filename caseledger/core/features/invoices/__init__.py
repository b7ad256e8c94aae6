# (c) Copyright Datacraft, 2026
"""Invoice lifecycle: numbering, amounts, delivery and payment."""
from .db.orm import Invoice, InvoiceSend, InvoiceService, InvoiceStatus

__all__ = [
	"Invoice",
	"InvoiceSend",
	"InvoiceService",
	"InvoiceStatus",
]
