from __future__ import annotations

from datetime import MAXYEAR, MINYEAR
from typing import Optional

from ..core.enums import AttendanceStatus
from ..core.exceptions import ValidationError


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_status(value) -> AttendanceStatus:
    if isinstance(value, AttendanceStatus):
        return value
    try:
        return AttendanceStatus(str(value).strip().capitalize())
    except ValueError:
        allowed = ", ".join(s.value for s in AttendanceStatus)
        raise ValidationError(f"Unknown attendance status {value!r} (expected one of {allowed})")


def require_count(value, field_name: str) -> int:
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a whole number")
    try:
        count = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a whole number")
    if count < 0:
        raise ValidationError(f"{field_name} cannot be negative")
    return count


def require_month(value: int) -> int:
    month = int(value)
    if month < 1 or month > 12:
        raise ValidationError("Month must be between 1 and 12")
    return month


def require_year(value: int) -> int:
    year = int(value)
    if year < MINYEAR or year > MAXYEAR:
        raise ValidationError(f"Year must be between {MINYEAR} and {MAXYEAR}")
    return year
