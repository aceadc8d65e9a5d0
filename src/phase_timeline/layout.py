from __future__ import annotations

import datetime as dt
import logging
from typing import Iterable

from .axis import generate_month_markers, today_marker_position
from .dates import filter_schedulable, filter_unschedulable
from .lanes import assign_lanes, lane_count
from .metrics import DEFAULT_CONTAINER_WIDTH, compute_metrics, compute_position, validate_container_width
from .phase_models import Phase, PhaseBar, PhasePosition, Project, TimelineLayout

logger = logging.getLogger(__name__)


def build_layout(
    phases: Iterable[Phase],
    container_width: float = DEFAULT_CONTAINER_WIDTH,
    today: dt.date | None = None,
) -> TimelineLayout:
    """
    Lay out all phases of a project in one pass.

    - Phases with missing, malformed, or inverted dates go to `unscheduled`
      in input order; they never reach metrics, positions, or lanes.
    - Bars are ordered by lane, then left edge, then display order.
    - With nothing schedulable the result is an empty layout (metrics None).
    """

    validate_container_width(container_width)
    phase_list = list(phases)

    scheduled = filter_schedulable(phase_list)
    unscheduled = filter_unschedulable(phase_list)

    if unscheduled:
        logger.info(
            "%d phase(s) without a usable date range: %s",
            len(unscheduled),
            ", ".join(phase.id for phase in unscheduled),
        )

    metrics = compute_metrics(scheduled, container_width)
    if metrics is None:
        return TimelineLayout(metrics=None, unscheduled=unscheduled)

    lanes = assign_lanes(scheduled)
    bars: list[PhaseBar] = []
    for phase in scheduled:
        position = compute_position(phase, metrics)
        if position is None:  # pragma: no cover - filtered above
            continue
        bars.append(
            PhaseBar(
                phase=phase,
                position=PhasePosition(
                    left_percent=position.left_percent,
                    width_percent=position.width_percent,
                    lane=lanes.get(phase.id, 0),
                ),
            )
        )
    bars.sort(key=lambda bar: (bar.position.lane, bar.position.left_percent, bar.phase.order))

    return TimelineLayout(
        metrics=metrics,
        bars=bars,
        unscheduled=unscheduled,
        markers=generate_month_markers(metrics.window_start, metrics.window_end, metrics),
        today_position=today_marker_position(metrics, today),
        lane_count=lane_count(lanes),
    )


def build_project_layout(
    project: Project,
    container_width: float = DEFAULT_CONTAINER_WIDTH,
    today: dt.date | None = None,
) -> TimelineLayout:
    return build_layout(project.phases, container_width=container_width, today=today)
