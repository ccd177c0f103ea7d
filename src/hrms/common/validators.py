from __future__ import annotations

from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Optional, Type, TypeVar

from ..core.exceptions import ValidationError

E = TypeVar("E", bound=Enum)


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_min_length(value: str, field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters")
    return value


def require_max_length(value: str, field_name: str, max_len: int) -> str:
    if value is not None and len(value) > max_len:
        raise ValidationError(f"{field_name} must be at most {max_len} characters")
    return value


def _to_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be an integer")
    if isinstance(value, float):
        if not value.is_integer():
            raise ValidationError(f"{field_name} must be an integer")
        return int(value)
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer")


def require_int_range(value: Any, field_name: str, low: int, high: int) -> int:
    number = _to_int(value, field_name)
    if number < low or number > high:
        raise ValidationError(f"{field_name} must be between {low} and {high}")
    return number


def require_non_negative_int(value: Any, field_name: str) -> int:
    number = _to_int(value, field_name)
    if number < 0:
        raise ValidationError(f"{field_name} must not be negative")
    return number


def parse_bool(value: Any, field_name: str) -> bool:
    """Accept real booleans and the strings "true"/"false" in any case."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        text = value.strip().lower()
        if text == "true":
            return True
        if text == "false":
            return False
    raise ValidationError(f"{field_name} must be true or false")


def to_money(value: Any, field_name: str) -> Decimal:
    """Coerce a non-negative amount to Decimal. None counts as zero."""
    if value is None:
        return Decimal("0")
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a number")
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{field_name} must be a number")
    if not amount.is_finite():
        raise ValidationError(f"{field_name} must be a number")
    if amount < 0:
        raise ValidationError(f"{field_name} must not be negative")
    return amount


def parse_enum(enum_cls: Type[E], value: Any, field_name: str) -> E:
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip().upper())
    except (ValueError, AttributeError):
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValidationError(f"{field_name} must be one of: {allowed}")


def parse_optional_enum(enum_cls: Type[E], value: Any, field_name: str) -> Optional[E]:
    if value is None or value == "":
        return None
    return parse_enum(enum_cls, value, field_name)
