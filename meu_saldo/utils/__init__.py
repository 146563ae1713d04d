"""Formatting and date helpers."""

from meu_saldo.utils.dates import (
    add_months,
    days_remaining_in_month,
    format_month_pt,
    is_same_month,
    last_day_of_month,
    today,
)
from meu_saldo.utils.formatting import format_currency, format_days_until

__all__ = [
    "add_months",
    "days_remaining_in_month",
    "format_currency",
    "format_days_until",
    "format_month_pt",
    "is_same_month",
    "last_day_of_month",
    "today",
]
