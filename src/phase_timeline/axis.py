from __future__ import annotations

import datetime as dt

from .metrics import offset_percent
from .phase_models import MonthMarker, TimelineMetrics

MONTH_LABEL_FORMAT = "%b %Y"


def format_month_label(day: dt.date) -> str:
    return day.strftime(MONTH_LABEL_FORMAT)


def _next_month(day: dt.date) -> dt.date:
    if day.month == 12:
        return dt.date(day.year + 1, 1, 1)
    return dt.date(day.year, day.month + 1, 1)


def generate_month_markers(
    window_start: dt.date,
    window_end: dt.date,
    metrics: TimelineMetrics,
) -> list[MonthMarker]:
    """
    One marker per first-of-month, starting with the month containing
    `window_start` and stopping after the last one on or before `window_end`.

    The first marker can sit left of the window (negative position) when the
    window does not begin on the 1st.
    """

    markers: list[MonthMarker] = []
    current = window_start.replace(day=1)
    while current <= window_end:
        markers.append(
            MonthMarker(
                date=current,
                label=format_month_label(current),
                position=offset_percent(metrics, current),
            )
        )
        current = _next_month(current)
    return markers


def today_marker_position(metrics: TimelineMetrics, today: dt.date | dt.datetime | None = None) -> float | None:
    """Percent offset of `today` (default: local date), or None outside the window."""
    if today is None:
        today = dt.date.today()
    elif isinstance(today, dt.datetime):
        today = today.date()

    if today < metrics.window_start or today > metrics.window_end:
        return None
    return offset_percent(metrics, today)
