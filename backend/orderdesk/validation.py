from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Iterable

from .errors import ValidationError


# Maximum amount: 9,999,999.99 (999,999,999 cents)
# Keeps integer columns well inside 32-bit range on every backend
MAX_AMOUNT_CENTS = 999_999_999

# Stock and line quantities are stored in 32-bit integer columns
MAX_QUANTITY = 2_147_483_647

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_CENT = Decimal("0.01")


def require_json_object(payload: Any) -> dict:
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON body. Use Content-Type: application/json")
    return payload


def require_fields(payload: dict, fields: Iterable[str], message: str) -> None:
    """Raise ValidationError(message) if any field is missing or blank."""
    for field in fields:
        value = payload.get(field)
        if value is None:
            raise ValidationError(message)
        if isinstance(value, str) and not value.strip():
            raise ValidationError(message)


def clean_str(value: Any, field: str, *, max_length: int = 255) -> str | None:
    if value is None:
        return None
    if isinstance(value, (dict, list, bool)):
        raise ValidationError(f"{field} must be a string")
    cleaned = str(value).strip()
    if len(cleaned) > max_length:
        raise ValidationError(f"{field} exceeds max length {max_length}")
    return cleaned


def normalize_email(value: Any) -> str | None:
    """Trim and lower-case an email; blank becomes None."""
    email = clean_str(value, "email")
    if not email:
        return None
    email = email.lower()
    if not _EMAIL_RE.match(email):
        raise ValidationError("email must be a valid email address")
    return email


def coerce_int(value: Any, field: str) -> int:
    """
    Strict integer coercion.

    Accepts ints and plain digit strings; rejects bools, decimals and
    scientific notation.
    """
    # Already an int (but not bool which is a subclass of int)
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            raise ValidationError(f"{field} must be an integer")
        if 'e' in stripped.lower():
            raise ValidationError(f"{field} must be a plain integer (scientific notation not allowed)")
        if '.' in stripped:
            raise ValidationError(f"{field} must be an integer (no decimals)")
        try:
            return int(stripped)
        except ValueError:
            raise ValidationError(f"{field} must be an integer")
    if isinstance(value, float) and value.is_integer():
        return int(value)
    raise ValidationError(f"{field} must be an integer")


def coerce_quantity(value: Any, field: str, *, minimum: int = 0) -> int:
    if value is None:
        raise ValidationError(f"{field} is required")
    quantity = coerce_int(value, field)
    if quantity < minimum:
        raise ValidationError(f"{field} must be >= {minimum}")
    if quantity > MAX_QUANTITY:
        raise ValidationError(f"{field} cannot exceed {MAX_QUANTITY}")
    return quantity


def parse_id(value: Any, field: str) -> int:
    """Identifiers are positive integers; anything else is a format error."""
    try:
        ident = coerce_int(value, field)
    except ValidationError:
        raise ValidationError(f"Invalid {field}")
    if ident < 1:
        raise ValidationError(f"Invalid {field}")
    return ident


def parse_amount_cents(value: Any, field: str) -> int:
    """
    Parse a decimal money amount (number or numeric string) into integer cents.

    Rounds half-up to the cent. Rejects bools, NaN/Infinity and negatives.
    """
    message = f"{field} must be a number >= 0"
    if value is None or isinstance(value, (bool, dict, list)):
        raise ValidationError(message)
    try:
        amount = Decimal(str(value).strip())
    except InvalidOperation:
        raise ValidationError(message)
    if not amount.is_finite() or amount < 0:
        raise ValidationError(message)
    # Bound before quantize; huge exponents overflow the rounding context
    if amount > Decimal(MAX_AMOUNT_CENTS) / 100:
        raise ValidationError(f"{field} cannot exceed {MAX_AMOUNT_CENTS / 100:,.2f}")
    cents = int((amount.quantize(_CENT, rounding=ROUND_HALF_UP) * 100).to_integral_value())
    return cents


def cents_to_amount(cents: int | None) -> float | None:
    if cents is None:
        return None
    return round(cents / 100, 2)


def coerce_strict_bool(value: Any, field: str) -> bool:
    if not isinstance(value, bool):
        raise ValidationError(f"{field} must be a boolean value")
    return value
