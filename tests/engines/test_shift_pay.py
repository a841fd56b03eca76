"""
Tests for the shift pay calculator.

Covers:
- Base, penalty and overtime buckets and their rounding
- Overnight weekend penalties in the guide timezone
- Overtime tiers and overtime stacked on a penalty
- Public holiday penalties
- Pay guide warnings (inactive, effective range, min/max hours)
- Structured log output
"""

from datetime import UTC, date, datetime
from decimal import Decimal
from zoneinfo import ZoneInfo

from paytrack_engines.shift_pay import calculate_shift
from paytrack_modules.payroll.models import (
    BreakPeriod,
    OvertimeTimeFrame,
    PayGuide,
    PenaltyTimeFrame,
    PublicHoliday,
    Shift,
)

MEL = ZoneInfo("Australia/Melbourne")


def _guide(base_rate="25.00", penalties=(), overtimes=(), holidays=(), tz="UTC", **kwargs):
    return PayGuide(
        id="guide-1",
        name="Retail Award",
        base_rate=Decimal(base_rate),
        timezone=tz,
        penalty_time_frames=tuple(penalties),
        overtime_time_frames=tuple(overtimes),
        public_holidays=tuple(holidays),
        **kwargs,
    )


def _shift(start, end, **kwargs):
    return Shift(id="shift-1", pay_guide_id="guide-1", start_time=start, end_time=end, **kwargs)


def _utc(month, day, hour, minute=0):
    return datetime(2024, month, day, hour, minute, tzinfo=UTC)


SATURDAY = PenaltyTimeFrame(
    id="sat", name="Saturday", day_of_week=6, multiplier=Decimal("1.5")
)


class TestBasePay:
    """Shifts with no applicable windows are paid at the base rate."""

    def test_day_shift(self):
        result = calculate_shift(_guide(), (), _shift(_utc(7, 1, 9), _utc(7, 1, 17)))

        assert result.base_pay == Decimal("200.00")
        assert result.penalty_pay == Decimal("0.00")
        assert result.overtime_pay == Decimal("0.00")
        assert result.total_pay == Decimal("200.00")
        assert result.base_minutes == 480
        assert result.total_hours == Decimal("8")
        assert result.warnings == ()

    def test_fully_breaked_shift_pays_nothing(self):
        shift = _shift(
            _utc(7, 1, 9), _utc(7, 1, 10),
            break_periods=(BreakPeriod(_utc(7, 1, 9), _utc(7, 1, 10)),),
        )

        result = calculate_shift(_guide(), (), shift)

        assert result.total_pay == Decimal("0.00")
        assert result.total_minutes == 0
        assert result.break_minutes == 60

    def test_sub_minute_shift_pays_nothing(self):
        """09:00:10 to 09:00:50 Melbourne truncates to no working time."""
        shift = _shift(
            datetime(2024, 7, 1, 9, 0, 10, tzinfo=MEL),
            datetime(2024, 7, 1, 9, 0, 50, tzinfo=MEL),
        )

        result = calculate_shift(_guide(tz="Australia/Melbourne"), (), shift)

        assert result.total_pay == Decimal("0.00")
        assert result.total_minutes == 0
        assert result.total_hours == Decimal("0")
        assert result.applied_penalties == ()

    def test_buckets_round_half_up_to_cents(self):
        """7 minutes at $25.00 is 2.91666... -> 2.92."""
        result = calculate_shift(_guide(), (), _shift(_utc(7, 1, 9), _utc(7, 1, 9, 7)))

        assert result.base_pay == Decimal("2.92")

    def test_multiplier_of_one_counts_as_base(self):
        flat = PenaltyTimeFrame(id="flat", name="Weekday", multiplier=Decimal("1"))

        result = calculate_shift(_guide(penalties=[flat]), (), _shift(_utc(7, 1, 9), _utc(7, 1, 10)))

        assert result.base_minutes == 60
        assert result.penalty_minutes == 0
        assert result.applied_penalties == ()


class TestPenalties:
    """Penalty windows apply their multiplier to the base rate."""

    def test_friday_night_into_saturday(self):
        shift = _shift(
            datetime(2024, 7, 5, 22, tzinfo=MEL), datetime(2024, 7, 6, 6, tzinfo=MEL)
        )

        result = calculate_shift(
            _guide("20.00", penalties=[SATURDAY], tz="Australia/Melbourne"), (), shift
        )

        assert result.base_pay == Decimal("40.00")
        assert result.penalty_pay == Decimal("180.00")
        assert result.total_pay == Decimal("220.00")
        [applied] = result.applied_penalties
        assert applied.time_frame_id == "sat"
        assert applied.minutes == 360
        assert applied.hours == Decimal("6")
        assert applied.pay == Decimal("180.00")
        assert applied.start_time == datetime(2024, 7, 6, 0, tzinfo=MEL)

    def test_public_holiday_rate(self):
        holiday_rate = PenaltyTimeFrame(
            id="ph", name="Public holiday", is_public_holiday=True,
            multiplier=Decimal("2.5"), priority=10,
        )
        christmas = PublicHoliday(id="xmas", date=date(2024, 12, 25), name="Christmas Day")

        result = calculate_shift(
            _guide("20.00", penalties=[holiday_rate], holidays=[christmas]),
            (),
            _shift(_utc(12, 25, 9), _utc(12, 25, 13)),
        )

        assert result.penalty_pay == Decimal("200.00")

    def test_applied_penalty_merges_contiguous_periods(self):
        shift = _shift(
            datetime(2024, 7, 6, 9, tzinfo=MEL),
            datetime(2024, 7, 6, 17, tzinfo=MEL),
            break_periods=(
                BreakPeriod(
                    datetime(2024, 7, 6, 12, tzinfo=MEL), datetime(2024, 7, 6, 12, 30, tzinfo=MEL)
                ),
            ),
        )

        result = calculate_shift(
            _guide("20.00", penalties=[SATURDAY], tz="Australia/Melbourne"), (), shift
        )

        [applied] = result.applied_penalties
        assert len(applied.periods) == 2
        assert applied.minutes == 450


class TestOvertime:
    """Overtime windows pay tiered multipliers on the base rate."""

    def test_first_three_hours_then_after(self):
        ot = OvertimeTimeFrame(
            id="ot", name="Daily overtime",
            first_three_hours_mult=Decimal("1.5"), after_three_hours_mult=Decimal("2"),
        )

        result = calculate_shift(
            _guide("20.00", overtimes=[ot]), (), _shift(_utc(7, 1, 9), _utc(7, 1, 14))
        )

        assert result.overtime_pay == Decimal("170.00")
        assert result.overtime_minutes == 300
        assert result.base_minutes == 0
        [applied] = result.applied_overtimes
        assert applied.first_tier_minutes == 180
        assert applied.after_tier_minutes == 120
        assert applied.first_tier_hours == Decimal("3")

    def test_overtime_stacks_on_penalty(self):
        ot = OvertimeTimeFrame(
            id="sat-ot", name="Saturday overtime", day_of_week=6,
            first_three_hours_mult=Decimal("1.5"), after_three_hours_mult=Decimal("2"),
        )

        result = calculate_shift(
            _guide("20.00", penalties=[SATURDAY], overtimes=[ot]),
            (),
            _shift(_utc(7, 6, 10), _utc(7, 6, 12)),
        )

        assert result.overtime_pay == Decimal("90.00")
        assert result.penalty_pay == Decimal("0.00")
        assert result.penalty_minutes == 0
        assert result.overtime_minutes == 120
        assert result.applied_overtimes[0].stacked_penalty_ids == ("sat",)


class TestWarnings:
    """Guide problems are reported, never raised."""

    def test_minimum_hours_not_reached(self):
        guide = _guide(minimum_shift_hours=Decimal("3"))

        result = calculate_shift(guide, (), _shift(_utc(7, 1, 9), _utc(7, 1, 11)))

        assert result.base_pay == Decimal("50.00")
        assert any("below minimum" in w for w in result.warnings)

    def test_maximum_hours_exceeded_adds_no_overtime(self):
        guide = _guide(maximum_shift_hours=Decimal("10"))

        result = calculate_shift(guide, (), _shift(_utc(7, 1, 6), _utc(7, 1, 18)))

        assert result.overtime_minutes == 0
        assert any("exceed maximum" in w for w in result.warnings)

    def test_inactive_guide_and_effective_range(self):
        guide = _guide(is_active=False, effective_from=date(2025, 1, 1))

        result = calculate_shift(guide, (), _shift(_utc(7, 1, 9), _utc(7, 1, 10)))

        assert any("inactive" in w for w in result.warnings)
        assert any("effective range" in w for w in result.warnings)

    def test_break_minutes_with_break_periods(self):
        shift = _shift(
            _utc(7, 1, 9), _utc(7, 1, 17),
            break_minutes=30,
            break_periods=(BreakPeriod(_utc(7, 1, 12), _utc(7, 1, 12, 30)),),
        )

        result = calculate_shift(_guide(), (), shift)

        assert any("break_minutes ignored" in w for w in result.warnings)


class TestLogging:

    def test_shift_calculated_event_carries_context(self, captured_logs):
        calculate_shift(_guide(), (), _shift(_utc(7, 1, 9), _utc(7, 1, 17)))

        records = [r for r in captured_logs() if r["message"] == "shift_calculated"]
        assert len(records) == 1
        assert records[0]["shift_id"] == "shift-1"
        assert records[0]["pay_guide_id"] == "guide-1"
        assert records[0]["gross_pay"] == "200.00"

    def test_engine_trace_emitted(self, captured_logs):
        calculate_shift(_guide(), (), _shift(_utc(7, 1, 9), _utc(7, 1, 17)))

        traces = [r for r in captured_logs() if r["message"] == "PAYTRACK_ENGINE_TRACE"]
        assert {t["engine_name"] for t in traces} >= {"segmentation", "rate_resolver", "shift_pay"}
        assert all(len(t["input_fingerprint"]) == 16 for t in traces)
