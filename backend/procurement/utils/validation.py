from __future__ import annotations
"""Reusable validation helpers for request payloads and domain inputs.

All helpers raise ValidationError (400) so callers get one error semantic for
caller mistakes.
"""
from datetime import date, datetime
from typing import Any, Iterable, Optional
from procurement.errors import ValidationError


def validate_choice(value: str, allowed: Iterable[str], field_name: str = 'status') -> str:
    """Validate that value is inside allowed.

    Returns the value (to enable inline usage) or raises.
    """
    if value not in tuple(allowed):
        raise ValidationError(description=f"{field_name} invalid")
    return value


def require_text(value: Any, field_name: str) -> str:
    """Return ``value`` stripped, rejecting None, non-strings and blank text."""
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(description=f"{field_name} required")
    return value.strip()


def parse_iso_date(value: Any, field_name: str) -> date:
    """Accept a date, a datetime (its calendar day) or a YYYY-MM-DD string."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(description=f"{field_name} required")
    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        raise ValidationError(description=f"{field_name} must be YYYY-MM-DD")


def not_before(value: date, floor: date, field_name: str, floor_name: Optional[str] = 'today') -> date:
    if value < floor:
        raise ValidationError(description=f"{field_name} cannot be before {floor_name}")
    return value

__all__ = ['validate_choice', 'require_text', 'parse_iso_date', 'not_before']
