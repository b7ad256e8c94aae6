# (c) Copyright Datacraft, 2026
"""
Multi-currency aggregation helpers.

Amounts are only grouped and summed per currency code. No conversion is
ever performed: a figure in GEL and a figure in EUR stay separate tuples.
"""
import enum
from collections import defaultdict
from dataclasses import dataclass
from decimal import Decimal, ROUND_FLOOR, ROUND_HALF_UP
from typing import Annotated, Iterable

from pydantic import PlainSerializer

TWO_PLACES = Decimal("0.01")


class CurrencyCode(str, enum.Enum):
	"""Currencies the business invoices in."""
	GEL = "GEL"
	USD = "USD"
	EUR = "EUR"


CURRENCY_SYMBOLS = {
	CurrencyCode.GEL: "₾",
	CurrencyCode.EUR: "€",
	CurrencyCode.USD: "$",
}


@dataclass(frozen=True)
class CurrencyAmount:
	currency: str
	amount: Decimal


def to_money(value: Decimal | int | float | str | None) -> Decimal:
	"""Normalize a value to a two-decimal Decimal; None counts as zero."""
	if value is None:
		return Decimal("0.00")
	if not isinstance(value, Decimal):
		value = Decimal(str(value))
	return value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def format_money(amount: Decimal | None, currency: str | None = None) -> str:
	text = f"{to_money(amount):.2f}"
	if currency:
		return f"{text} {currency}"
	return text


def sum_by_currency(
	items: Iterable[tuple[str, Decimal | None]],
) -> list[CurrencyAmount]:
	"""Group ``(currency, amount)`` pairs and sum each group.

	Currencies whose sum is zero are dropped. The result is sorted by amount,
	largest first, with the currency code breaking ties.
	"""
	totals: dict[str, Decimal] = defaultdict(lambda: Decimal("0.00"))
	for currency, amount in items:
		code = currency.value if isinstance(currency, CurrencyCode) else str(currency)
		totals[code] += to_money(amount)

	grouped = [
		CurrencyAmount(currency=code, amount=amount)
		for code, amount in totals.items()
		if amount != 0
	]
	grouped.sort(key=lambda c: c.currency)
	grouped.sort(key=lambda c: c.amount, reverse=True)
	return grouped


def round_half_up(value: Decimal | float | int) -> int:
	"""Round to the nearest integer, halves toward positive infinity."""
	if not isinstance(value, Decimal):
		value = Decimal(str(value))
	return int((value + Decimal("0.5")).to_integral_value(rounding=ROUND_FLOOR))


def percent_change(previous: Decimal | int | float, current: Decimal | int | float) -> int:
	"""Integer percent change from ``previous`` to ``current``.

	A zero baseline yields 100 when there is any growth and 0 otherwise.
	"""
	previous = Decimal(str(previous))
	current = Decimal(str(current))
	if previous == 0:
		return 100 if current > 0 else 0
	return round_half_up((current - previous) / previous * 100)


# JSON representation of money: a number rounded to two decimals
Money = Annotated[
	Decimal,
	PlainSerializer(lambda v: float(to_money(v)), return_type=float, when_used="json"),
]
