"""
Tests for the rate rule resolver.

Covers:
- Penalty selection: priority, then multiplier, then id
- Overtime tiers from cumulative minutes, including split segments
- Multiplier stacking of overtime on a penalty
- The overtime ledger is never mutated
"""

from datetime import UTC, date, datetime, timedelta
from decimal import Decimal

import pytest

from paytrack_engines.rate_resolver import (
    resolve_segment,
    resolve_segments,
    select_overtime,
    select_penalty,
)
from paytrack_engines.segmentation import TimeSegment, WindowInstance
from paytrack_modules.payroll.models import OvertimeTimeFrame, PenaltyTimeFrame

T0 = datetime(2024, 7, 1, 9, tzinfo=UTC)


def _penalty(tf_id, multiplier, priority=0):
    return PenaltyTimeFrame(
        id=tf_id, name=tf_id.title(), multiplier=Decimal(multiplier), priority=priority
    )


def _overtime(tf_id="ot", first="1.5", after="2", priority=0):
    return OvertimeTimeFrame(
        id=tf_id,
        name="Overtime",
        first_three_hours_mult=Decimal(first),
        after_three_hours_mult=Decimal(after),
        priority=priority,
    )


def _instance(tf, start, end):
    return WindowInstance(time_frame=tf, day=start.date(), start=start, end=end)


def _segment(start_minute, end_minute, penalties=(), overtimes=()):
    start = T0 + timedelta(minutes=start_minute)
    end = T0 + timedelta(minutes=end_minute)
    return TimeSegment(
        start=start,
        end=end,
        local_date=date(2024, 7, 1),
        penalty_windows=tuple(_instance(tf, start, end) for tf in penalties),
        overtime_windows=tuple(_instance(tf, start, end) for tf in overtimes),
    )


class TestPenaltySelection:
    """Exactly one penalty wins per segment."""

    def test_no_window_means_base_rate(self):
        assert select_penalty(()) is None

    def test_priority_beats_multiplier(self):
        seg = _segment(0, 60, [_penalty("weekend", "2.0"), _penalty("night", "1.5", priority=5)])

        assert select_penalty(seg.penalty_windows).id == "night"

    def test_higher_multiplier_breaks_priority_tie(self):
        seg = _segment(0, 60, [_penalty("a", "1.25"), _penalty("b", "1.5")])

        assert select_penalty(seg.penalty_windows).id == "b"

    def test_lower_id_breaks_full_tie_in_any_order(self):
        forward = _segment(0, 60, [_penalty("alpha", "1.5"), _penalty("beta", "1.5")])
        backward = _segment(0, 60, [_penalty("beta", "1.5"), _penalty("alpha", "1.5")])

        assert select_penalty(forward.penalty_windows).id == "alpha"
        assert select_penalty(backward.penalty_windows).id == "alpha"

    def test_overtime_ties_compare_first_then_after_tier(self):
        seg = _segment(
            0, 60, overtimes=[_overtime("x", "1.5", "2"), _overtime("y", "1.5", "2.5")]
        )

        assert select_overtime(seg.overtime_windows).id == "y"


class TestOvertimeTiers:
    """The first 180 minutes per overtime window use the first-tier multiplier."""

    def test_within_first_tier(self):
        result = resolve_segments([_segment(0, 120, overtimes=[_overtime()])])

        assert [r.overtime_tier for r in result.segments] == [1]
        assert result.overtime_minutes == {"ot": 120}

    def test_segment_straddling_boundary_is_split(self):
        ot = _overtime()
        result = resolve_segments([_segment(0, 120, overtimes=[ot]), _segment(120, 240, overtimes=[ot])])

        assert [(r.minutes, r.overtime_tier) for r in result.segments] == [
            (120, 1), (60, 1), (60, 2),
        ]
        assert result.segments[2].overtime_multiplier == Decimal("2")

    def test_minutes_accumulate_across_gaps(self):
        ot = _overtime()
        result = resolve_segments([
            _segment(0, 150, overtimes=[ot]),
            _segment(150, 200),
            _segment(200, 260, overtimes=[ot]),
        ])

        assert [(r.minutes, r.overtime_tier) for r in result.segments] == [
            (150, 1), (50, None), (30, 1), (30, 2),
        ]

    def test_input_order_does_not_matter(self):
        ot = _overtime()
        segments = [_segment(0, 120, overtimes=[ot]), _segment(120, 240, overtimes=[ot])]

        assert resolve_segments(segments) == resolve_segments(list(reversed(segments)))

    def test_custom_tier_length(self):
        result = resolve_segments([_segment(0, 90, overtimes=[_overtime()])], overtime_tier_minutes=60)

        assert [(r.minutes, r.overtime_tier) for r in result.segments] == [(60, 1), (30, 2)]

    def test_non_positive_tier_rejected(self):
        with pytest.raises(ValueError):
            resolve_segments([], overtime_tier_minutes=0)

    def test_ledger_is_not_mutated(self):
        ledger = {"ot": 170}

        pieces, new_ledger = resolve_segment(_segment(0, 30, overtimes=[_overtime()]), ledger)

        assert ledger == {"ot": 170}
        assert new_ledger == {"ot": 200}
        assert [(p.minutes, p.overtime_tier) for p in pieces] == [(10, 1), (20, 2)]


class TestStacking:
    """Overtime multiplies a simultaneous penalty."""

    def test_effective_multiplier_is_product(self):
        pieces, _ = resolve_segment(
            _segment(0, 60, [_penalty("sat", "1.5")], [_overtime()]), {}
        )

        assert pieces[0].effective_multiplier == Decimal("2.25")

    def test_penalty_only(self):
        pieces, _ = resolve_segment(_segment(0, 60, [_penalty("sat", "1.5")]), {})

        assert pieces[0].overtime_multiplier is None
        assert pieces[0].effective_multiplier == Decimal("1.5")

    def test_base_segment_multiplier_is_one(self):
        pieces, _ = resolve_segment(_segment(0, 60), {})

        assert pieces[0].effective_multiplier == Decimal("1")
