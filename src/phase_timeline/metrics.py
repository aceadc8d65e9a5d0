from __future__ import annotations

import datetime as dt
import logging
import math
from numbers import Real
from typing import Iterable

from .dates import days_between, phase_dates
from .phase_models import Phase, PhasePosition, TimelineMetrics

logger = logging.getLogger(__name__)

DEFAULT_CONTAINER_WIDTH = 1000
TIMELINE_PAD_DAYS = 7  # breathing room before the first start and after the last end
MIN_DURATION_DAYS = 1  # same-day phases still get a visible span
MIN_WIDTH_PERCENT = 2.0  # keeps very short bars hoverable


class TimelineConfigError(ValueError):
    """Raised when a caller-supplied layout parameter is unusable."""


def validate_container_width(container_width: float) -> float:
    if isinstance(container_width, bool) or not isinstance(container_width, Real):
        raise TimelineConfigError(f"container_width must be a number, got {container_width!r}")
    if not math.isfinite(container_width) or container_width <= 0:
        raise TimelineConfigError(f"container_width must be positive, got {container_width!r}")
    return container_width


def compute_metrics(
    phases: Iterable[Phase],
    container_width: float = DEFAULT_CONTAINER_WIDTH,
) -> TimelineMetrics | None:
    """
    Compute the padded timeline window over all schedulable phases.

    Returns None when no phase has a usable date range; callers should show
    an empty state. Unschedulable phases are ignored, never reported as errors.
    """

    width = validate_container_width(container_width)

    spans: list[tuple[dt.date, dt.date]] = []
    skipped = 0
    for phase in phases:
        dates = phase_dates(phase)
        if dates is None:
            skipped += 1
            continue
        spans.append(dates)

    if skipped:
        logger.debug("Ignoring %d unschedulable phase(s) for timeline metrics", skipped)
    if not spans:
        return None

    earliest = min(start for start, _ in spans)
    latest = max(end for _, end in spans)
    pad = dt.timedelta(days=TIMELINE_PAD_DAYS)
    window_start = earliest - pad
    window_end = latest + pad

    # Padding guarantees at least 14 days; the guard protects downstream division.
    total_days = max(days_between(window_start, window_end), 1)

    return TimelineMetrics(
        window_start=window_start,
        window_end=window_end,
        total_days=total_days,
        scale=width / total_days,
        container_width=width,
    )


def offset_percent(metrics: TimelineMetrics, day: dt.date) -> float:
    """Horizontal offset of `day` as a percentage of the window."""
    return days_between(metrics.window_start, day) / metrics.total_days * 100


def compute_position(phase: Phase, metrics: TimelineMetrics) -> PhasePosition | None:
    """
    Map one phase onto the window. The lane is left at 0 for the caller to fill.

    Durations shorter than a day count as one day and widths below
    MIN_WIDTH_PERCENT are widened; a widened bar at the right edge is shifted
    left so it stays inside the window.
    """

    dates = phase_dates(phase)
    if dates is None:
        return None
    start, end = dates

    duration_days = max(days_between(start, end), MIN_DURATION_DAYS)
    left_percent = offset_percent(metrics, start)
    width_percent = max(duration_days / metrics.total_days * 100, MIN_WIDTH_PERCENT)

    if left_percent + width_percent > 100:
        left_percent = max(100 - width_percent, 0.0)

    return PhasePosition(left_percent=left_percent, width_percent=width_percent)
