import datetime as dt

import pytest

from phase_timeline.metrics import (
    MIN_WIDTH_PERCENT,
    TimelineConfigError,
    compute_metrics,
    compute_position,
)
from phase_timeline.phase_models import Phase


def _phase(phase_id, start, end, order=0):
    return Phase(id=phase_id, name=phase_id.upper(), start_date=start, end_date=end, order=order)


def test_sequential_phases_get_padded_window():
    phases = [
        _phase("p1", "2025-01-01", "2025-01-31"),
        _phase("p2", "2025-02-01", "2025-02-28"),
    ]

    metrics = compute_metrics(phases)

    assert metrics.window_start == dt.date(2024, 12, 25)
    assert metrics.window_end == dt.date(2025, 3, 7)
    assert metrics.total_days == 72
    assert metrics.container_width == 1000
    assert metrics.scale == pytest.approx(1000 / 72)


def test_padding_is_relative_to_extreme_dates_not_input_order():
    phases = [
        _phase("late", dt.date(2025, 6, 1), dt.date(2025, 9, 30)),
        _phase("early", dt.date(2025, 2, 3), dt.date(2025, 2, 4)),
        _phase("middle", dt.date(2025, 3, 1), dt.date(2025, 4, 1)),
    ]

    metrics = compute_metrics(phases, container_width=640)

    assert metrics.window_start == dt.date(2025, 2, 3) - dt.timedelta(days=7)
    assert metrics.window_end == dt.date(2025, 9, 30) + dt.timedelta(days=7)
    assert metrics.scale == pytest.approx(640 / metrics.total_days)


def test_unschedulable_phases_are_ignored_by_metrics():
    phases = [
        _phase("valid", "2025-01-01", "2025-01-31"),
        _phase("no-start", None, "2024-01-01"),
        _phase("inverted", "2026-02-10", "2026-02-01"),
        _phase("garbage", "2023-01-01", "whenever"),
    ]

    metrics = compute_metrics(phases)

    assert metrics.window_start == dt.date(2024, 12, 25)
    assert metrics.window_end == dt.date(2025, 2, 7)


@pytest.mark.parametrize(
    "phases",
    [
        [],
        [_phase("a", None, None), _phase("b", "2025-02-10", "2025-02-01")],
    ],
)
def test_no_schedulable_phases_means_no_metrics(phases):
    assert compute_metrics(phases) is None


@pytest.mark.parametrize("width", [0, -10, float("nan"), float("inf"), "wide", True])
def test_invalid_container_width_is_rejected(width):
    with pytest.raises(TimelineConfigError):
        compute_metrics([_phase("a", "2025-01-01", "2025-01-02")], container_width=width)


def test_position_uses_day_offsets():
    phases = [
        _phase("p1", "2025-01-01", "2025-01-31"),
        _phase("p2", "2025-02-01", "2025-02-28"),
    ]
    metrics = compute_metrics(phases)

    first = compute_position(phases[0], metrics)
    second = compute_position(phases[1], metrics)

    assert first.left_percent == pytest.approx(7 / 72 * 100)
    assert first.width_percent == pytest.approx(30 / 72 * 100)
    assert first.lane == 0
    assert second.left_percent == pytest.approx(38 / 72 * 100)
    assert second.width_percent == pytest.approx(27 / 72 * 100)


def test_same_day_phase_counts_as_one_day():
    phase = _phase("launch", "2025-03-01", "2025-03-01")
    metrics = compute_metrics([phase])

    position = compute_position(phase, metrics)

    assert metrics.total_days == 14
    assert position.left_percent == pytest.approx(50.0)
    assert position.width_percent == pytest.approx(1 / 14 * 100)
    assert position.width_percent >= MIN_WIDTH_PERCENT


def test_short_phase_width_is_clamped_to_minimum():
    year = _phase("year", "2025-01-01", "2025-12-31")
    blip = _phase("blip", "2025-06-01", "2025-06-01")
    metrics = compute_metrics([year, blip])

    position = compute_position(blip, metrics)

    assert position.width_percent == MIN_WIDTH_PERCENT
    assert position.left_percent == pytest.approx(158 / 378 * 100)


def test_clamped_bar_at_right_edge_stays_inside_window():
    long_run = _phase("long", "2023-01-01", "2025-12-31")
    last_day = _phase("last", "2025-12-31", "2025-12-31")
    metrics = compute_metrics([long_run, last_day])

    position = compute_position(last_day, metrics)

    assert position.width_percent == MIN_WIDTH_PERCENT
    assert position.left_percent == pytest.approx(100 - MIN_WIDTH_PERCENT)


def test_positions_are_contained_in_window():
    phases = [
        _phase("a", "2024-01-01", "2024-01-01"),
        _phase("b", "2024-01-01", "2024-12-31"),
        _phase("c", "2024-06-15", "2024-07-01"),
        _phase("d", "2024-12-31", "2024-12-31"),
    ]
    metrics = compute_metrics(phases)

    for phase in phases:
        position = compute_position(phase, metrics)
        assert position.left_percent >= 0
        assert position.left_percent + position.width_percent <= 100 + 1e-9


def test_position_rechecks_phase_even_with_metrics():
    metrics = compute_metrics([_phase("ok", "2025-01-01", "2025-01-31")])

    assert compute_position(_phase("bad", None, "2025-01-10"), metrics) is None
    assert compute_position(_phase("inverted", "2025-01-20", "2025-01-10"), metrics) is None


def test_metrics_and_positions_are_deterministic():
    phases = [
        _phase("a", "2025-01-01", "2025-01-10"),
        _phase("b", "2025-01-05", "2025-03-01"),
    ]

    first = compute_metrics(phases, 800)
    second = compute_metrics(phases, 800)

    assert first == second
    assert [compute_position(p, first) for p in phases] == [compute_position(p, second) for p in phases]
