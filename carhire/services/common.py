"""Shared service helpers."""

import math
from datetime import datetime
from typing import Optional

from carhire.exceptions import ValidationError

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


def overlap(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> bool:
    """
    Check overlap between [a_start, a_end) and [b_start, b_end).
    End is exclusive: a booking ending at 10:00 and one starting at 10:00 do not clash.
    Overlap rule: a_start < b_end and b_start < a_end
    """
    return a_start < b_end and b_start < a_end


def to_float_safe(value) -> Optional[float]:
    """Safely convert to float; return None if invalid."""
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def to_positive_int(value, default: int, name: str) -> int:
    """Parse a positive integer query parameter; None/'' gives the default."""
    if value is None or value == "":
        return default
    try:
        n = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be a positive integer") from None
    if n < 1:
        raise ValidationError(f"{name} must be a positive integer")
    return n


def paginate(items: list, page, limit) -> tuple[list, dict]:
    """Slice a list and describe the page: currentPage, totalPages, totalItems."""
    page = to_positive_int(page, 1, "page")
    limit = min(to_positive_int(limit, DEFAULT_PAGE_SIZE, "limit"), MAX_PAGE_SIZE)
    skip = (page - 1) * limit
    return items[skip:skip + limit], {
        "currentPage": page,
        "totalPages": math.ceil(len(items) / limit),
        "totalItems": len(items),
    }


def _lc(s):
    """Safe lowercase for case-insensitive compare."""
    return (s or "").lower()
