from __future__ import annotations

from decimal import Decimal

from ..core.exceptions import ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_min_length(value: str, field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters")
    return value


def require_positive(value: Decimal, field_name: str) -> Decimal:
    if value is None or value <= 0:
        raise ValidationError(f"{field_name} must be greater than zero")
    return value


def optional_text(value: str | None) -> str | None:
    return (value or "").strip() or None
