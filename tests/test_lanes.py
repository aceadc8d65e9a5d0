import datetime as dt
import random
from itertools import combinations

import pytest

from phase_timeline.dates import dates_overlap, parse_date
from phase_timeline.lanes import assign_lanes, lane_count
from phase_timeline.phase_models import Phase


def _phase(phase_id, start, end, order=0):
    return Phase(id=phase_id, name=phase_id.upper(), start_date=start, end_date=end, order=order)


def _random_phases(rng, count):
    base = dt.date(2025, 1, 1)
    phases = []
    for idx in range(count):
        start = base + dt.timedelta(days=rng.randint(0, 60))
        end = start + dt.timedelta(days=rng.randint(0, 20))
        phases.append(_phase(f"p{idx}", start, end, order=rng.randint(1, 5)))
    return phases


def _peak_overlap_by_day(phases):
    counts = {}
    for phase in phases:
        day = parse_date(phase.start_date)
        end = parse_date(phase.end_date)
        while day <= end:
            counts[day] = counts.get(day, 0) + 1
            day += dt.timedelta(days=1)
    return max(counts.values(), default=0)


def test_back_to_back_phases_share_a_lane():
    phases = [
        _phase("p1", "2025-01-01", "2025-01-31"),
        _phase("p2", "2025-02-01", "2025-02-28"),
    ]

    assert assign_lanes(phases) == {"p1": 0, "p2": 0}


def test_overlapping_phases_are_stacked():
    phases = [
        _phase("p1", "2025-01-01", "2025-01-31"),
        _phase("p2", "2025-01-15", "2025-02-15"),
    ]

    assert assign_lanes(phases) == {"p1": 0, "p2": 1}


def test_freed_lane_is_reused():
    phases = [
        _phase("p3", "2025-01-11", "2025-01-25"),
        _phase("p1", "2025-01-01", "2025-01-10"),
        _phase("p2", "2025-01-05", "2025-01-20"),
    ]

    assert assign_lanes(phases) == {"p1": 0, "p2": 1, "p3": 0}


def test_phase_starting_on_previous_end_day_conflicts():
    phases = [
        _phase("p1", "2025-01-01", "2025-01-10"),
        _phase("p2", "2025-01-10", "2025-01-20"),
    ]

    assert assign_lanes(phases) == {"p1": 0, "p2": 1}


def test_equal_starts_are_ordered_by_display_order_then_input_position():
    phases = [
        _phase("second", "2025-01-01", "2025-01-10", order=2),
        _phase("first", "2025-01-01", "2025-01-10", order=1),
        _phase("third", "2025-01-01", "2025-01-10", order=2),
    ]

    assert assign_lanes(phases) == {"first": 0, "second": 1, "third": 2}


def test_unschedulable_phases_get_no_lane():
    phases = [
        _phase("valid", "2025-01-01", "2025-01-31"),
        _phase("no-start", None, "2025-01-15"),
        _phase("inverted", "2025-01-20", "2025-01-02"),
        _phase("garbage", "tbd", "2025-01-15"),
    ]

    assert assign_lanes(phases) == {"valid": 0}


def test_empty_input_has_no_lanes():
    assert assign_lanes([]) == {}
    assert lane_count({}) == 0


@pytest.mark.parametrize("seed", range(25))
def test_lanes_never_collide_and_are_minimal(seed):
    rng = random.Random(seed)
    phases = _random_phases(rng, rng.randint(1, 30))

    lanes = assign_lanes(phases)

    for a, b in combinations(phases, 2):
        if lanes[a.id] != lanes[b.id]:
            continue
        assert not dates_overlap(
            parse_date(a.start_date), parse_date(a.end_date), parse_date(b.start_date), parse_date(b.end_date)
        ), (a, b)

    assert lane_count(lanes) == _peak_overlap_by_day(phases)


def test_assignment_is_deterministic():
    phases = _random_phases(random.Random(7), 40)

    assert assign_lanes(phases) == assign_lanes(phases)
    assert assign_lanes(list(phases)) == assign_lanes(tuple(phases))
