from __future__ import annotations

from typing import Any

import yaml

from .dates import parse_date
from .phase_models import Phase, TimelineLayout


def _phase_ref(phase: Phase) -> dict[str, Any]:
    return {"id": phase.id, "name": phase.name, "order": phase.order, "status": phase.status}


def layout_to_dict(layout: TimelineLayout) -> dict[str, Any]:
    """Plain-data view of a layout: metrics, one entry per bar, markers, today, unscheduled."""

    unscheduled = []
    for phase in layout.unscheduled:
        entry = _phase_ref(phase)
        entry["start_date"] = _date_text(phase.start_date)
        entry["end_date"] = _date_text(phase.end_date)
        unscheduled.append(entry)

    if layout.metrics is None:
        return {
            "metrics": None,
            "lane_count": 0,
            "bars": [],
            "markers": [],
            "today_position": None,
            "unscheduled": unscheduled,
        }

    metrics = layout.metrics
    bars = []
    for bar in layout.bars:
        entry = _phase_ref(bar.phase)
        entry.update(
            {
                "start_date": parse_date(bar.phase.start_date),
                "end_date": parse_date(bar.phase.end_date),
                "left_percent": round(bar.position.left_percent, 4),
                "width_percent": round(bar.position.width_percent, 4),
                "lane": bar.position.lane,
            }
        )
        bars.append(entry)

    return {
        "metrics": {
            "window_start": metrics.window_start,
            "window_end": metrics.window_end,
            "total_days": metrics.total_days,
            "scale": round(metrics.scale, 4),
            "container_width": metrics.container_width,
        },
        "lane_count": layout.lane_count,
        "bars": bars,
        "markers": [
            {"date": marker.date, "label": marker.label, "position": round(marker.position, 4)}
            for marker in layout.markers
        ],
        "today_position": None if layout.today_position is None else round(layout.today_position, 4),
        "unscheduled": unscheduled,
    }


def _date_text(raw: Any) -> str | None:
    if raw is None:
        return None
    parsed = parse_date(raw)
    return parsed.isoformat() if parsed else str(raw)


def dump_layout(layout: TimelineLayout) -> str:
    return yaml.safe_dump(layout_to_dict(layout), sort_keys=False)
