from __future__ import annotations

from collections.abc import Iterable
from datetime import date


def parse_form_date(value: str) -> date | None:
    """Parse a YYYY-MM-DD form value as a local calendar date."""
    try:
        return date.fromisoformat(value.strip())
    except (ValueError, AttributeError):
        return None


def is_business_day(value: str, closed_weekdays: Iterable[int] = (0,)) -> bool:
    """True when the date parses and does not fall on a closed weekday (Monday by default)."""
    parsed = parse_form_date(value)
    if parsed is None:
        return False
    return parsed.weekday() not in set(closed_weekdays)
