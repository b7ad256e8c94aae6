# (c) Copyright Datacraft, 2026
"""Sequential invoice and case number allocation."""
from .allocator import (
	DEFAULT_INVOICE_PREFIX,
	NumberAllocator,
	allocate_case_number,
	allocate_invoice_number,
	format_number,
	parse_counter,
)
from .db.orm import NumberCounter

__all__ = [
	"DEFAULT_INVOICE_PREFIX",
	"NumberAllocator",
	"NumberCounter",
	"allocate_case_number",
	"allocate_invoice_number",
	"format_number",
	"parse_counter",
]
