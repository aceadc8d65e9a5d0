from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Literal, Union


PhaseStatus = Literal["planned", "in-progress", "completed"]
"""Allowed phase statuses; only the renderer looks at them (for colour)."""

PHASE_STATUSES: tuple[str, ...] = ("planned", "in-progress", "completed")

RawDate = Union[date, str, None]
"""A date as it arrives from the input: a date, an ISO string, or nothing."""


@dataclass(frozen=True)
class Phase:
    """
    Time-ranged sub-unit of a project.

    Dates are kept exactly as supplied so that malformed values can be
    reported as unscheduled instead of failing the whole layout.
    """

    id: str
    name: str
    start_date: RawDate = None
    end_date: RawDate = None
    order: int = 0
    status: PhaseStatus | None = None
    description: str | None = None


@dataclass(frozen=True)
class Project:
    """Root container with ordered phases."""

    name: str
    phases: list[Phase] = field(default_factory=list)
    description: str | None = None


@dataclass(frozen=True)
class TimelineMetrics:
    """Padded visible window shared by every bar, marker and the today line."""

    window_start: date
    window_end: date
    total_days: int
    scale: float
    container_width: float


@dataclass(frozen=True)
class PhasePosition:
    """Horizontal placement (percent of the window) plus the stacking lane."""

    left_percent: float
    width_percent: float
    lane: int = 0


@dataclass(frozen=True)
class MonthMarker:
    date: date
    label: str
    position: float


@dataclass(frozen=True)
class PhaseBar:
    """A schedulable phase with its final draw geometry."""

    phase: Phase
    position: PhasePosition

    @property
    def lane(self) -> int:
        return self.position.lane


@dataclass(frozen=True)
class TimelineLayout:
    """
    Everything a renderer needs for one project.

    `metrics` is None when no phase could be scheduled; in that case `bars`
    and `markers` are empty and only `unscheduled` carries data.
    """

    metrics: TimelineMetrics | None
    bars: list[PhaseBar] = field(default_factory=list)
    unscheduled: list[Phase] = field(default_factory=list)
    markers: list[MonthMarker] = field(default_factory=list)
    today_position: float | None = None
    lane_count: int = 0

    @property
    def is_empty(self) -> bool:
        return self.metrics is None
