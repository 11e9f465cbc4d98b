"""Display formatting for amounts and dates according to user settings."""

from __future__ import annotations

from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Union

CURRENCY_SYMBOLS = {
    "INR": "₹",
    "EUR": "€",
    "GBP": "£",
    "USD": "$",
}

_DATE_PATTERNS = {
    "MM/DD/YYYY": "%m/%d/%Y",
    "DD/MM/YYYY": "%d/%m/%Y",
    "YYYY-MM-DD": "%Y-%m-%d",
}


def format_currency(amount: Union[Decimal, int, float, str], currency: str) -> str:
    """Render the absolute amount with the currency symbol, e.g. ``₹1,234.50``.

    Sign is left to the caller, which prefixes ``+`` or ``-`` by record type.
    """
    symbol = CURRENCY_SYMBOLS.get(currency, "$")
    value = abs(Decimal(str(amount))).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return f"{symbol}{value:,.2f}"


def format_date(value: date, date_format: str) -> str:
    pattern = _DATE_PATTERNS.get(date_format, _DATE_PATTERNS["MM/DD/YYYY"])
    return value.strftime(pattern)


def format_percentage(value: Decimal, places: int = 1) -> str:
    quantum = Decimal(1).scaleb(-places)
    return f"{value.quantize(quantum, rounding=ROUND_HALF_UP)}%"
