"""Validation helpers shared by the console and API surfaces."""

from __future__ import annotations

from datetime import date
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from .codec import TRANSACTION_ID_DELIMITER
from .exceptions import ValidationError
from .models import TransactionKind
from .storage import FIELD_DELIMITER

# Characters that would corrupt a row on reload, since rows are not escaped.
RESERVED_CHARACTERS = (FIELD_DELIMITER, TRANSACTION_ID_DELIMITER, "\n", "\r")


def _quantize_two_decimals(amount: Decimal) -> Decimal:
    """Round the amount to two decimal places using HALF_UP rounding."""
    return amount.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def _parse_decimal(raw: object, field: str) -> Decimal:
    try:
        amount = Decimal(str(raw).strip())
    except (InvalidOperation, TypeError) as exc:  # type: ignore[arg-type]
        raise ValidationError(f"{field} must be a numeric value") from exc
    if not amount.is_finite():
        raise ValidationError(f"{field} must be a numeric value")
    return amount


def parse_amount(raw: object, field: str) -> Decimal:
    """Convert raw input to a positive Decimal with exactly two fraction digits."""
    amount = _parse_decimal(raw, field)
    if amount <= 0:
        raise ValidationError(f"{field} must be greater than zero")
    return _quantize_two_decimals(amount)


def parse_limit(raw: object, field: str) -> Decimal:
    amount = _parse_decimal(raw, field)
    if amount < 0:
        raise ValidationError(f"{field} cannot be negative")
    return _quantize_two_decimals(amount)


def parse_date(value: object, field: str) -> date:
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a date or YYYY-MM-DD string")
    try:
        return date.fromisoformat(value.strip())
    except ValueError as exc:
        raise ValidationError(f"{field} must use the YYYY-MM-DD format") from exc


def parse_kind(value: object, field: str) -> TransactionKind:
    if isinstance(value, TransactionKind):
        return value
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string")
    try:
        return TransactionKind.parse(value)
    except ValueError as exc:
        allowed = ", ".join(kind.value for kind in TransactionKind)
        raise ValidationError(f"{field} must be one of: {allowed}") from exc


def parse_account_id(raw: object, field: str) -> int:
    if isinstance(raw, bool):
        raise ValidationError(f"{field} must be an integer")
    try:
        account_id = int(str(raw).strip())
    except ValueError as exc:
        raise ValidationError(f"{field} must be an integer") from exc
    if account_id <= 0:
        raise ValidationError(f"{field} must be positive")
    return account_id


def validate_text(value: object, field: str, max_length: int) -> str:
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string")
    trimmed = value.strip()
    if not trimmed:
        raise ValidationError(f"{field} cannot be empty")
    if len(trimmed) > max_length:
        raise ValidationError(f"{field} must be at most {max_length} characters")
    if any(character in trimmed for character in RESERVED_CHARACTERS):
        raise ValidationError(f"{field} cannot contain commas, semicolons or line breaks")
    return trimmed
