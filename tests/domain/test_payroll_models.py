"""
Tests for the frozen payroll models.

Covers:
- Time frame validation (HH:MM, day of week, multipliers)
- Window placement: wrap past midnight, day-of-week and holiday tests
- Bracket bounds and pay period status rules
"""

from datetime import date
from decimal import Decimal

import pytest

from paytrack_kernel.exceptions import InvalidTimeFrameError
from paytrack_modules.payroll.models import (
    OvertimeTimeFrame,
    PayGuide,
    PayPeriod,
    PayPeriodStatus,
    PenaltyTimeFrame,
    TaxCoefficient,
    TaxSettings,
    TimeFrameKind,
    parse_time_of_day,
)

SUNDAY = date(2024, 7, 7)
MONDAY = date(2024, 7, 8)


def _penalty(**overrides):
    defaults = dict(id="tf-1", name="Evening", multiplier=Decimal("1.25"))
    defaults.update(overrides)
    return PenaltyTimeFrame(**defaults)


class TestTimeOfDay:

    @pytest.mark.parametrize("value,expected", [("00:00", 0), ("09:30", 570), ("23:59", 1439)])
    def test_parses(self, value, expected):
        assert parse_time_of_day(value) == expected

    def test_end_of_day_only_as_end(self):
        assert parse_time_of_day("24:00", allow_end_of_day=True) == 1440
        with pytest.raises(ValueError):
            parse_time_of_day("24:00")

    @pytest.mark.parametrize("value", ["9:30", "09-30", "25:00", "12:60", "", "ab:cd"])
    def test_rejects_malformed(self, value):
        with pytest.raises(ValueError):
            parse_time_of_day(value)


class TestTimeFrameValidation:

    def test_bad_time_raises_invalid_time_frame(self):
        with pytest.raises(InvalidTimeFrameError) as exc_info:
            _penalty(start_time="7pm")

        assert exc_info.value.time_frame_id == "tf-1"
        assert exc_info.value.code == "INVALID_TIME_FRAME"

    def test_day_of_week_range(self):
        with pytest.raises(InvalidTimeFrameError, match="day_of_week"):
            _penalty(day_of_week=7)

    def test_penalty_multiplier_below_one(self):
        with pytest.raises(InvalidTimeFrameError, match="multiplier"):
            _penalty(multiplier=Decimal("0.9"))

    def test_overtime_multipliers_below_one(self):
        with pytest.raises(InvalidTimeFrameError, match="after_three_hours_mult"):
            OvertimeTimeFrame(
                id="ot-1", name="Overtime",
                first_three_hours_mult=Decimal("1.5"), after_three_hours_mult=Decimal("0.5"),
            )

    def test_kind_tags(self):
        assert _penalty().kind is TimeFrameKind.PENALTY
        assert OvertimeTimeFrame(id="ot-1", name="Overtime").kind is TimeFrameKind.OVERTIME


class TestWindowPlacement:

    def test_whole_day_by_default(self):
        window = _penalty()

        assert (window.start_minute, window.end_minute) == (0, 1440)

    def test_wraps_past_midnight(self):
        window = _penalty(start_time="22:00", end_time="06:00")

        assert (window.start_minute, window.end_minute) == (1320, 1800)

    def test_end_of_day(self):
        window = _penalty(start_time="18:00", end_time="24:00")

        assert window.end_minute == 1440

    def test_day_of_week_zero_is_sunday(self):
        window = _penalty(day_of_week=0)

        assert window.applies_on(SUNDAY, frozenset()) is True
        assert window.applies_on(MONDAY, frozenset()) is False

    def test_public_holiday_only(self):
        window = _penalty(is_public_holiday=True)

        assert window.applies_on(MONDAY, frozenset({MONDAY})) is True
        assert window.applies_on(SUNDAY, frozenset({MONDAY})) is False

    def test_inactive_never_applies(self):
        assert _penalty(is_active=False).applies_on(MONDAY, frozenset()) is False


class TestPayGuide:

    def test_effective_range(self):
        guide = PayGuide(
            id="g-1", name="Retail", base_rate=Decimal("25"),
            effective_from=date(2024, 7, 1), effective_to=date(2025, 6, 30),
        )

        assert guide.is_effective_on(date(2024, 7, 1)) is True
        assert guide.is_effective_on(date(2025, 7, 1)) is False

    def test_inverted_range_rejected(self):
        with pytest.raises(ValueError):
            PayGuide(
                id="g-1", name="Retail", base_rate=Decimal("25"),
                effective_from=date(2025, 1, 1), effective_to=date(2024, 1, 1),
            )


class TestBrackets:

    def test_half_open(self):
        row = TaxCoefficient(
            tax_year="2024-25", earnings_from=Decimal("361"), earnings_to=Decimal("500"),
            coefficient_a=Decimal("0.16"), coefficient_b=Decimal("57.8462"),
        )

        assert row.contains(Decimal("361")) is True
        assert row.contains(Decimal("499.99")) is True
        assert row.contains(Decimal("500")) is False

    def test_empty_bracket_rejected(self):
        with pytest.raises(ValueError):
            TaxCoefficient(
                tax_year="2024-25", earnings_from=Decimal("500"), earnings_to=Decimal("500"),
                coefficient_a=Decimal("0"), coefficient_b=Decimal("0"),
            )

    def test_stsl_flag(self):
        assert TaxSettings().withholds_stsl is False
        assert TaxSettings(has_stsl_debt=True).withholds_stsl is True
        assert TaxSettings(hecs_help_rate=Decimal("0.01")).withholds_stsl is True


class TestPayPeriodStatus:

    def test_pending_needs_simplified_workflow(self):
        with pytest.raises(ValueError, match="simplified"):
            PayPeriod(
                id="p-1", start_date=date(2024, 7, 1), end_date=date(2024, 7, 7),
                status=PayPeriodStatus.PENDING,
            )

    def test_simplified_rejects_processing(self):
        with pytest.raises(ValueError):
            PayPeriod(
                id="p-1", start_date=date(2024, 7, 1), end_date=date(2024, 7, 7),
                status=PayPeriodStatus.PROCESSING, simplified_workflow=True,
            )

    def test_only_verified_is_locked(self):
        period = PayPeriod(id="p-1", start_date=date(2024, 7, 1), end_date=date(2024, 7, 7))

        assert period.is_locked is False
        assert PayPeriod(
            id="p-1", start_date=date(2024, 7, 1), end_date=date(2024, 7, 7),
            status=PayPeriodStatus.VERIFIED,
        ).is_locked is True
