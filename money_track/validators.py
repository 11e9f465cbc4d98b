"""Validation helpers shared across Money Track services.

Presentation layers hand over raw form values (usually strings), so every
helper here accepts loosely typed input and returns a normalised value or
raises :class:`ValidationError`.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Callable, Iterable, Optional

from .exceptions import ValidationError
from .models import parse_date

ZERO = Decimal("0.00")


def _quantize_two_decimals(amount: Decimal) -> Decimal:
    """Round the amount to two decimal places using HALF_UP rounding."""
    return amount.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def _is_blank(raw: object) -> bool:
    return raw is None or (isinstance(raw, str) and not raw.strip())


def _to_decimal(raw: object, field: str) -> Decimal:
    try:
        amount = Decimal(str(raw).strip())
    except (InvalidOperation, TypeError) as exc:  # type: ignore[arg-type]
        raise ValidationError(f"{field} must be a numeric value") from exc
    if not amount.is_finite():
        raise ValidationError(f"{field} must be a numeric value")
    return amount


def parse_amount(raw: object, field: str) -> Decimal:
    """Convert raw input to a positive Decimal with exactly two fraction digits.

    Zero counts as a missing value, the same as an empty form field.
    """
    if _is_blank(raw):
        raise ValidationError(f"{field} is required")
    amount = _quantize_two_decimals(_to_decimal(raw, field))
    if amount == 0:
        raise ValidationError(f"{field} is required")
    if amount < 0:
        raise ValidationError(f"{field} must be greater than zero")
    return amount


def parse_optional_amount(raw: object, field: str) -> Decimal:
    """Parse a non-negative amount, treating blank or unparseable input as zero."""
    if _is_blank(raw):
        return ZERO
    try:
        amount = _to_decimal(raw, field)
    except ValidationError:
        return ZERO
    amount = _quantize_two_decimals(amount)
    if amount < 0:
        raise ValidationError(f"{field} cannot be negative")
    return amount


def parse_signed_amount(raw: object, field: str) -> Decimal:
    if _is_blank(raw):
        raise ValidationError(f"{field} is required")
    return _quantize_two_decimals(_to_decimal(raw, field))


def parse_record_id(raw: object, field: str) -> int:
    """Parse a record reference; empty, zero and non-integer values are rejected."""
    if _is_blank(raw) or isinstance(raw, bool):
        raise ValidationError(f"{field} is required")
    try:
        value = int(str(raw).strip())
    except ValueError as exc:
        raise ValidationError(f"{field} must be an integer id") from exc
    if value == 0:
        raise ValidationError(f"{field} is required")
    return value


def parse_optional_record_id(raw: object, field: str) -> Optional[int]:
    if _is_blank(raw):
        return None
    return parse_record_id(raw, field)


def validate_required_str(value: object, field: str, max_length: int) -> str:
    if value is None:
        raise ValidationError(f"{field} is required")
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string")
    trimmed = value.strip()
    if not trimmed:
        raise ValidationError(f"{field} cannot be empty")
    if len(trimmed) > max_length:
        raise ValidationError(f"{field} must be at most {max_length} characters")
    return trimmed


def validate_optional_str(value: object, field: str, max_length: int) -> str:
    if _is_blank(value):
        return ""
    return validate_required_str(value, field, max_length)


def validate_date(value: object, field: str) -> date:
    if _is_blank(value):
        raise ValidationError(f"{field} is required")
    try:
        return parse_date(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"{field} must be a date in YYYY-MM-DD format") from exc


def validate_enum(
    value: object,
    field: str,
    allowed: Iterable[str],
    *,
    normalize: Callable[[str], str] = str.lower,
) -> str:
    if _is_blank(value):
        raise ValidationError(f"{field} is required")
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string")
    canonical = normalize(value.strip())
    allowed = set(allowed)
    if canonical not in allowed:
        raise ValidationError(f"{field} must be one of: {', '.join(sorted(allowed))}")
    return canonical


MAX_TREND_MONTHS = 120


def parse_month_count(raw: object, field: str = "months") -> int:
    """Number of trend months, between 1 and :data:`MAX_TREND_MONTHS`."""
    if _is_blank(raw) or isinstance(raw, bool):
        raise ValidationError(f"{field} is required")
    try:
        value = int(str(raw).strip())
    except ValueError as exc:
        raise ValidationError(f"{field} must be a whole number") from exc
    if not 1 <= value <= MAX_TREND_MONTHS:
        raise ValidationError(f"{field} must be between 1 and {MAX_TREND_MONTHS}")
    return value
