"""
Tests for money helpers and the clock abstraction.
"""

from datetime import UTC, date, datetime
from decimal import Decimal

import pytest

from paytrack_kernel.domain.clock import DeterministicClock
from paytrack_kernel.domain.money import (
    hours_from_minutes,
    round_money,
    to_decimal,
    truncate_cents,
)


class TestMoney:

    @pytest.mark.parametrize(
        "amount, expected",
        [("2.915", "2.92"), ("2.914", "2.91"), ("-1.005", "-1.01"), ("10", "10.00")],
    )
    def test_round_half_up(self, amount, expected):
        assert round_money(Decimal(amount)) == Decimal(expected)

    def test_truncate_to_whole_dollars(self):
        assert truncate_cents(Decimal("50.99")) == Decimal("50")
        assert truncate_cents(Decimal("-0.5")) == Decimal("0")

    def test_hours_from_minutes(self):
        assert hours_from_minutes(90) == Decimal("1.5")
        assert hours_from_minutes(20) == Decimal("0.333333333")

    def test_to_decimal_refuses_floats(self):
        with pytest.raises(TypeError):
            to_decimal(1.5)
        with pytest.raises(TypeError):
            to_decimal(True)

    def test_to_decimal_parses_strings(self):
        assert to_decimal(" 25.50 ") == Decimal("25.50")
        assert to_decimal(3) == Decimal("3")
        with pytest.raises(ValueError):
            to_decimal("abc")


class TestDeterministicClock:

    def test_fixed_and_advance(self):
        clock = DeterministicClock(datetime(2024, 7, 1, 12, tzinfo=UTC))

        assert clock.now() == clock.now()
        clock.advance(60)
        assert clock.now() == datetime(2024, 7, 1, 12, 1, tzinfo=UTC)

    def test_today_in_timezone(self):
        clock = DeterministicClock(datetime(2024, 6, 30, 15, tzinfo=UTC))

        assert clock.today() == date(2024, 6, 30)
        assert clock.today("Australia/Melbourne") == date(2024, 7, 1)
