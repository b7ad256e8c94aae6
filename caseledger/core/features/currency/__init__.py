# (c) Copyright Datacraft, 2026
from .aggregate import (
	CURRENCY_SYMBOLS,
	CurrencyAmount,
	CurrencyCode,
	Money,
	format_money,
	percent_change,
	round_half_up,
	sum_by_currency,
	to_money,
)

__all__ = [
	"CURRENCY_SYMBOLS",
	"CurrencyAmount",
	"CurrencyCode",
	"Money",
	"format_money",
	"percent_change",
	"round_half_up",
	"sum_by_currency",
	"to_money",
]
