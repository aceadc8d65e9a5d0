from __future__ import annotations

import datetime as dt
import math
import re
from typing import Any, Iterable

from .phase_models import Phase

SECONDS_PER_DAY = 24 * 60 * 60

DATE_PATTERN = re.compile(
    r"(\d{4})-(\d{2})-(\d{2})"
    r"(?:[T ]\d{2}:\d{2}(?::\d{2}(?:\.\d+)?)?(?:Z|[+-]\d{2}:?\d{2})?)?",
    re.ASCII,
)


def parse_date(raw: Any) -> dt.date | None:
    """
    Parse a date-only value, returning None instead of raising.

    Accepts dates, datetimes (time of day is dropped), and strings in
    `YYYY-MM-DD` form, optionally followed by a time such as
    `T10:00:00Z` or ` 08:30+02:00`. Other ISO variants (basic `20250131`,
    week dates) are rejected on every interpreter version.
    """

    if raw is None:
        return None
    if isinstance(raw, dt.datetime):
        return raw.date()
    if isinstance(raw, dt.date):
        return raw
    if not isinstance(raw, str):
        return None

    match = DATE_PATTERN.fullmatch(raw.strip())
    if match is None:
        return None
    year, month, day = (int(part) for part in match.groups())
    try:
        return dt.date(year, month, day)
    except ValueError:
        return None


def days_between(start: dt.date, end: dt.date) -> int:
    """Whole days from `start` to `end`, rounded up; negative if `end` precedes `start`."""
    delta = end - start
    return math.ceil(delta.total_seconds() / SECONDS_PER_DAY)


def dates_overlap(start1: dt.date, end1: dt.date, start2: dt.date, end2: dt.date) -> bool:
    """Closed-interval overlap: ranges sharing a single day overlap."""
    return start1 <= end2 and start2 <= end1


def phase_dates(phase: Phase) -> tuple[dt.date, dt.date] | None:
    """Return the parsed (start, end) of a schedulable phase, else None."""
    start = parse_date(phase.start_date)
    end = parse_date(phase.end_date)
    if start is None or end is None or start > end:
        return None
    return start, end


def is_schedulable(phase: Phase) -> bool:
    return phase_dates(phase) is not None


def filter_schedulable(phases: Iterable[Phase]) -> list[Phase]:
    return [phase for phase in phases if is_schedulable(phase)]


def filter_unschedulable(phases: Iterable[Phase]) -> list[Phase]:
    return [phase for phase in phases if not is_schedulable(phase)]


def format_date(raw: Any) -> str:
    """Short human label such as `Jan 5, 2025`."""
    if raw is None or raw == "":
        return "Not set"
    parsed = parse_date(raw)
    if parsed is None:
        return "Invalid date"
    return f"{parsed.strftime('%b')} {parsed.day}, {parsed.year}"


def format_date_range(start: Any, end: Any) -> str:
    missing_start = start is None or start == ""
    missing_end = end is None or end == ""
    if missing_start and missing_end:
        return "No dates set"
    if missing_start:
        return f"Ends {format_date(end)}"
    if missing_end:
        return f"Starts {format_date(start)}"
    return f"{format_date(start)} - {format_date(end)}"
