"""
Tests for the year-to-date withholding summary.

Covers:
- Totals over the calculated periods of one financial year
- The 1 July boundary on a period's end date
- Uncalculated periods and the verified-only filter
- Order independence and logging
"""

from datetime import date, timedelta
from decimal import Decimal

import pytest

from paytrack_engines.year_to_date import year_to_date
from paytrack_modules.payroll.models import PayPeriod, PayPeriodStatus


def _period(period_id, end, gross="1000.00", payg="150.00", medicare="20.00", stsl="10.00",
            status=PayPeriodStatus.PAID, calculated=True):
    if not calculated:
        return PayPeriod(id=period_id, start_date=end - timedelta(days=6), end_date=end, status=status)
    withheld = Decimal(payg) + Decimal(medicare) + Decimal(stsl)
    return PayPeriod(
        id=period_id,
        start_date=end - timedelta(days=6),
        end_date=end,
        status=status,
        total_pay=Decimal(gross),
        payg_withholding=Decimal(payg),
        medicare_levy=Decimal(medicare),
        hecs_help_amount=Decimal(stsl),
        total_withholdings=withheld,
        net_pay=Decimal(gross) - withheld,
    )


class TestTotals:
    """Each calculated period ending in the year contributes once."""

    def test_sums_every_component(self):
        periods = [
            _period("p1", date(2024, 7, 7)),
            _period("p2", date(2024, 7, 14), gross="500.00", payg="40.00", medicare="0.00", stsl="0.00"),
        ]

        summary = year_to_date(periods, "2024-25")

        assert summary.pay_period_ids == ("p1", "p2")
        assert summary.period_count == 2
        assert summary.gross_income == Decimal("1500.00")
        assert summary.payg_withholding == Decimal("190.00")
        assert summary.medicare_levy == Decimal("20.00")
        assert summary.hecs_help_amount == Decimal("10.00")
        assert summary.total_withholdings == Decimal("220.00")
        assert summary.net_pay == Decimal("1280.00")

    def test_period_belongs_to_year_of_its_end_date(self):
        """A week starting 26 June 2024 and ending 2 July counts in 2024-25."""
        periods = [
            _period("june", date(2024, 6, 30)),
            _period("straddle", date(2024, 7, 2)),
            _period("next-june", date(2025, 6, 30)),
            _period("next-year", date(2025, 7, 1)),
        ]

        summary = year_to_date(periods, "2024-25")

        assert summary.pay_period_ids == ("straddle", "next-june")

    def test_no_periods(self):
        summary = year_to_date([], "2024-25")

        assert summary.period_count == 0
        assert summary.gross_income == Decimal("0")
        assert summary.net_pay == Decimal("0")

    def test_input_order_does_not_matter(self):
        periods = [_period(f"p{i}", date(2024, 7, 7) + timedelta(weeks=i)) for i in range(4)]

        forward = year_to_date(periods, "2024-25")
        backward = year_to_date(list(reversed(periods)), "2024-25")

        assert forward == backward
        assert forward.pay_period_ids == ("p0", "p1", "p2", "p3")

    def test_invalid_label(self):
        with pytest.raises(ValueError):
            year_to_date([], "2024-26")


class TestFiltering:

    def test_uncalculated_periods_skipped(self):
        periods = [
            _period("done", date(2024, 7, 7)),
            _period("open", date(2024, 7, 14), status=PayPeriodStatus.OPEN, calculated=False),
        ]

        summary = year_to_date(periods, "2024-25")

        assert summary.pay_period_ids == ("done",)

    def test_verified_only(self):
        periods = [
            _period("paid", date(2024, 7, 7)),
            _period("verified", date(2024, 7, 14), status=PayPeriodStatus.VERIFIED),
        ]

        summary = year_to_date(periods, "2024-25", verified_only=True)

        assert summary.pay_period_ids == ("verified",)
        assert summary.gross_income == Decimal("1000.00")


class TestLogging:

    def test_summary_logged_with_tax_year(self, captured_logs):
        year_to_date([_period("p1", date(2024, 7, 7))], "2024-25")

        [record] = [r for r in captured_logs() if r["message"] == "year_to_date_summarised"]
        assert record["tax_year"] == "2024-25"
        assert record["period_count"] == 1
        assert record["gross_income"] == "1000.00"
