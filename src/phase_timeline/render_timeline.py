from __future__ import annotations

import logging
from importlib import metadata
from pathlib import Path
from typing import Iterable

import matplotlib

matplotlib.use("Agg")  # ensure headless, deterministic output
import matplotlib.pyplot as plt

from .dates import format_date_range
from .phase_models import Phase, PhaseBar, TimelineLayout

logger = logging.getLogger(__name__)

# Layout tuning knobs (inches unless noted).
PIXELS_PER_INCH = 100
MIN_FIG_WIDTH = 8.0
MAX_FIG_WIDTH = 24.0
LANE_HEIGHT = 0.6
BAR_HEIGHT_FRAC = 0.85  # share of the lane the bar fills
HEADER_HEIGHT = 1.2
FOOTER_HEIGHT = 0.8
MIN_BAR_LABEL_PERCENT = 6.0  # narrower bars get their label outside
FONT_SCALE = 1.0
TITLE_FONT = 14 * FONT_SCALE
LABEL_FONT = 9 * FONT_SCALE
AXIS_FONT = 8 * FONT_SCALE
FOOTER_FONT = 8 * FONT_SCALE
GRID_COLOR = "#d1d5db"
TODAY_COLOR = "#f97316"

# status -> (fill, edge, text)
STATUS_COLORS: dict[str | None, tuple[str, str, str]] = {
    "completed": ("#dcfce7", "#22c55e", "#166534"),
    "in-progress": ("#ffedd5", "#f97316", "#9a3412"),
    "planned": ("#f3f4f6", "#9ca3af", "#1f2937"),
    None: ("#eff6ff", "#60a5fa", "#1e40af"),
}


def status_colors(status: str | None) -> tuple[str, str, str]:
    return STATUS_COLORS.get(status, STATUS_COLORS[None])


def render_timeline(
    layout: TimelineLayout,
    out_path: str,
    title: str,
    lane_height: float = LANE_HEIGHT,
) -> None:
    """
    Render a static SVG phase timeline to `out_path`.

    - One horizontal lane per stacking row; bars use percent geometry.
    - Month boundaries draw as grid lines with labels above the lanes.
    - Unscheduled phases are listed in the footer.
    - An empty layout renders a "No timeline data" notice instead of lanes.
    """

    if lane_height <= 0:
        raise ValueError("lane_height must be positive")

    if layout.is_empty:
        fig = _render_empty(layout, title)
    else:
        fig = _render_lanes(layout, title, lane_height)

    Path(out_path).parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(out_path, format="svg", bbox_inches="tight")
    plt.close(fig)
    logger.debug("Wrote timeline SVG to %s", out_path)


def _figure_width(layout: TimelineLayout) -> float:
    container_width = layout.metrics.container_width if layout.metrics else MIN_FIG_WIDTH * PIXELS_PER_INCH
    return max(MIN_FIG_WIDTH, min(MAX_FIG_WIDTH, container_width / PIXELS_PER_INCH))


def _render_lanes(layout: TimelineLayout, title: str, lane_height: float) -> plt.Figure:
    lanes = max(layout.lane_count, 1)
    fig_height = lanes * lane_height + HEADER_HEIGHT + FOOTER_HEIGHT
    fig = plt.figure(figsize=(_figure_width(layout), fig_height))
    ax = fig.add_axes((0.02, FOOTER_HEIGHT / fig_height, 0.96, lanes * lane_height / fig_height))

    ax.set_xlim(0, 100)
    ax.set_ylim(-0.5, lanes - 0.5)
    ax.invert_yaxis()
    ax.set_xticks([])
    ax.set_yticks([])
    for spine in ax.spines.values():
        spine.set_color(GRID_COLOR)
    ax.set_facecolor("#f9fafb")

    for marker in layout.markers:
        if not 0 <= marker.position <= 100:
            continue
        ax.axvline(marker.position, color=GRID_COLOR, linewidth=0.8, zorder=1)
        ax.text(
            marker.position,
            -0.5,
            f" {marker.label}",
            ha="left",
            va="bottom",
            fontsize=AXIS_FONT,
            color="#4b5563",
            clip_on=False,
        )

    for bar in layout.bars:
        _draw_bar(ax, bar)

    if layout.today_position is not None:
        ax.axvline(layout.today_position, color=TODAY_COLOR, linestyle="--", linewidth=1.2, alpha=0.8, zorder=4)
        ax.text(
            layout.today_position,
            lanes - 0.5,
            "Today",
            ha="center",
            va="top",
            fontsize=AXIS_FONT,
            fontweight="bold",
            color=TODAY_COLOR,
            clip_on=False,
        )

    fig.suptitle(title, fontsize=TITLE_FONT, y=1.0 - 0.2 / fig_height, va="top")
    _draw_footer(fig, layout.unscheduled)
    return fig


def _draw_bar(ax: plt.Axes, bar: PhaseBar) -> None:
    fill, edge, text_color = status_colors(bar.phase.status)
    position = bar.position
    ax.barh(
        position.lane,
        width=position.width_percent,
        left=position.left_percent,
        height=BAR_HEIGHT_FRAC,
        color=fill,
        edgecolor=edge,
        linewidth=1.5,
        zorder=3,
    )

    label = f"{bar.phase.order}. {bar.phase.name}"
    x = position.left_percent + 0.5
    if position.width_percent < MIN_BAR_LABEL_PERCENT:
        x += position.width_percent
    text = ax.text(
        x,
        position.lane,
        label,
        ha="left",
        va="center",
        fontsize=LABEL_FONT,
        color=text_color,
        zorder=5,
    )
    text.set_gid(f"phase-{bar.phase.id}")


def _render_empty(layout: TimelineLayout, title: str) -> plt.Figure:
    fig = plt.figure(figsize=(MIN_FIG_WIDTH, 2.5))
    fig.suptitle(title, fontsize=TITLE_FONT)
    fig.text(0.5, 0.62, "No Timeline Data", ha="center", va="center", fontsize=TITLE_FONT * 0.9, fontweight="bold")
    fig.text(
        0.5,
        0.45,
        "Add start and end dates to your phases to see them visualized on a timeline.",
        ha="center",
        va="center",
        fontsize=LABEL_FONT,
        color="#4b5563",
    )
    _draw_footer(fig, layout.unscheduled)
    return fig


def _draw_footer(fig: plt.Figure, unscheduled: Iterable[Phase]) -> None:
    lines = unscheduled_lines(unscheduled)
    if lines:
        fig.text(0.01, 0.01, "\n".join(lines), ha="left", va="bottom", fontsize=FOOTER_FONT, color="#374151")
    fig.text(
        0.99,
        0.01,
        f"Phase timeline v{_tool_version()}",
        ha="right",
        va="bottom",
        fontsize=FOOTER_FONT,
        alpha=0.8,
    )


def unscheduled_lines(unscheduled: Iterable[Phase]) -> list[str]:
    """Footer text: a heading plus one `order. name (dates)` line per phase."""
    phases = list(unscheduled)
    if not phases:
        return []
    lines = [f"Unscheduled phases ({len(phases)}):"]
    for phase in phases:
        lines.append(f"  {phase.order}. {phase.name} ({format_date_range(phase.start_date, phase.end_date)})")
    return lines


def _tool_version() -> str:
    try:
        return metadata.version("phase-timeline")
    except metadata.PackageNotFoundError:
        return "0.0.0"
