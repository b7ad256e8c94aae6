# (c) Copyright Datacraft, 2026
"""
Invoice state machine and amount arithmetic.

States move ``draft -> unpaid -> paid`` and ``draft|unpaid -> cancelled``.
Nothing leaves ``paid`` or ``cancelled``.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from caseledger.core.exceptions import AlreadyPaidError, InvalidStatusError
from caseledger.core.features.currency import to_money

from .db.orm import InvoiceStatus

ALLOWED_TRANSITIONS: dict[InvoiceStatus, frozenset[InvoiceStatus]] = {
	InvoiceStatus.DRAFT: frozenset({
		InvoiceStatus.UNPAID,
		InvoiceStatus.PAID,
		InvoiceStatus.CANCELLED,
	}),
	InvoiceStatus.UNPAID: frozenset({InvoiceStatus.PAID, InvoiceStatus.CANCELLED}),
	InvoiceStatus.PAID: frozenset(),
	InvoiceStatus.CANCELLED: frozenset(),
}

# Content that feeds the amounts is frozen once the invoice is settled
FINAL_STATUSES = frozenset({InvoiceStatus.PAID, InvoiceStatus.CANCELLED})


def check_transition(current: InvoiceStatus | str, target: InvoiceStatus | str) -> None:
	current = InvoiceStatus(current)
	target = InvoiceStatus(target)
	if current == target:
		return
	if target not in ALLOWED_TRANSITIONS[current]:
		raise InvalidStatusError(
			f"Cannot change invoice status from {current.value} to {target.value}"
		)


def check_sendable(status: InvoiceStatus | str) -> None:
	if InvoiceStatus(status) in FINAL_STATUSES:
		raise InvalidStatusError(f"Cannot send a {InvoiceStatus(status).value} invoice")


def check_payable(status: InvoiceStatus | str) -> None:
	status = InvoiceStatus(status)
	if status == InvoiceStatus.PAID:
		raise AlreadyPaidError()
	check_transition(status, InvoiceStatus.PAID)


@dataclass(frozen=True)
class LineAmount:
	quantity: int
	unit_price: Decimal
	total: Decimal


@dataclass(frozen=True)
class InvoiceAmounts:
	subtotal: Decimal
	franchise_amount: Decimal
	total: Decimal


def line_amount(quantity: int, unit_price: Decimal) -> LineAmount:
	price = to_money(unit_price)
	return LineAmount(quantity=quantity, unit_price=price, total=to_money(price * quantity))


def invoice_amounts(line_totals: Iterable[Decimal], franchise_amount: Decimal | None) -> InvoiceAmounts:
	"""``subtotal = sum(lines)`` and ``total = max(0, subtotal - franchise)``."""
	subtotal = sum((to_money(t) for t in line_totals), Decimal("0.00"))
	franchise = to_money(franchise_amount)
	total = max(Decimal("0.00"), subtotal - franchise)
	return InvoiceAmounts(subtotal=subtotal, franchise_amount=franchise, total=total)
