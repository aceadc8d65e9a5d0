from __future__ import annotations

import datetime as dt
import logging
from typing import Iterable, Mapping

from .dates import phase_dates
from .phase_models import Phase

logger = logging.getLogger(__name__)


def assign_lanes(phases: Iterable[Phase]) -> dict[str, int]:
    """
    Stack overlapping phases into lanes, reusing a lane once it frees up.

    Greedy interval colouring: phases are visited by start date (ties broken
    by `order`, then by input position) and placed in the lowest lane whose
    last phase ended strictly before this one starts. Dates are inclusive, so
    a phase ending on the day another starts still conflicts with it.
    Unschedulable phases get no entry.
    """

    candidates: list[tuple[dt.date, int, int, dt.date, Phase]] = []
    for index, phase in enumerate(phases):
        dates = phase_dates(phase)
        if dates is None:
            continue
        start, end = dates
        candidates.append((start, phase.order, index, end, phase))

    candidates.sort(key=lambda item: item[:3])

    lane_ends: list[dt.date] = []
    assignments: dict[str, int] = {}

    for start, _, _, end, phase in candidates:
        for lane, lane_end in enumerate(lane_ends):
            if lane_end < start:
                lane_ends[lane] = end
                break
        else:
            lane = len(lane_ends)
            lane_ends.append(end)
        assignments[phase.id] = lane

    logger.debug("Assigned %d phase(s) to %d lane(s)", len(assignments), len(lane_ends))
    return assignments


def lane_count(assignments: Mapping[str, int]) -> int:
    """Number of lanes in use; 0 when nothing was assigned."""
    if not assignments:
        return 0
    return max(assignments.values()) + 1
