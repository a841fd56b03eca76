"""
Pure domain layer.

Value objects and helpers with NO dependencies on:
- ORM (SQLAlchemy)
- Database
- System clock (except the SystemClock boundary itself)
- I/O
"""

from paytrack_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from paytrack_kernel.domain.money import (
    CENT,
    ZERO,
    hours_from_minutes,
    round_money,
    to_decimal,
    truncate_cents,
)
from paytrack_kernel.domain.pay_cycle import pay_period_range
from paytrack_kernel.domain.tax_year import (
    parse_tax_year,
    tax_year_bounds,
    tax_year_for,
    tax_year_for_instant,
    tax_year_sort_key,
)
from paytrack_kernel.domain.workflow import Guard, Transition, Workflow

__all__ = [
    "Clock",
    "DeterministicClock",
    "SystemClock",
    "CENT",
    "ZERO",
    "hours_from_minutes",
    "round_money",
    "to_decimal",
    "truncate_cents",
    "pay_period_range",
    "parse_tax_year",
    "tax_year_bounds",
    "tax_year_for",
    "tax_year_for_instant",
    "tax_year_sort_key",
    "Guard",
    "Transition",
    "Workflow",
]
