"""
Pay cycle -- the pay period containing a date.

Responsibility:
    Map a calendar day (or an instant seen in a timezone) to the inclusive
    first and last day of its weekly, fortnightly or monthly pay period.

    - weekly: Monday to Sunday.
    - fortnightly: 14-day blocks counted from Monday 1970-01-05, so every
      date maps to the same fortnight regardless of year boundaries.
    - monthly: calendar month.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.  The cycle is passed
    as its value (``"weekly"``) or any enum whose ``value`` is one, so the
    kernel does not depend on the payroll models.

Failure modes:
    - ValueError on an unknown pay cycle.
"""

from __future__ import annotations

import calendar
from datetime import date, datetime, timedelta
from enum import Enum
from zoneinfo import ZoneInfo

FORTNIGHT_ANCHOR = date(1970, 1, 5)

WEEKLY = "weekly"
FORTNIGHTLY = "fortnightly"
MONTHLY = "monthly"


def _local_day(value: date | datetime, tz: str | None) -> date:
    if not isinstance(value, datetime):
        return value
    if value.tzinfo is None or tz is None:
        return value.date()
    return value.astimezone(ZoneInfo(tz)).date()


def pay_period_range(
    day: date | datetime,
    pay_period_type: str | Enum,
    tz: str | None = None,
) -> tuple[date, date]:
    """
    Inclusive ``(start, end)`` dates of the pay period containing ``day``.

    An aware ``datetime`` is first converted to its local date in ``tz``;
    naive datetimes and plain dates are used as they are.

    Raises:
        ValueError: ``pay_period_type`` is not weekly, fortnightly or monthly.
    """
    cycle = pay_period_type.value if isinstance(pay_period_type, Enum) else pay_period_type
    local = _local_day(day, tz)

    if cycle == WEEKLY:
        start = local - timedelta(days=local.weekday())
        return start, start + timedelta(days=6)
    if cycle == FORTNIGHTLY:
        offset = (local - FORTNIGHT_ANCHOR).days % 14
        start = local - timedelta(days=offset)
        return start, start + timedelta(days=13)
    if cycle == MONTHLY:
        last = calendar.monthrange(local.year, local.month)[1]
        return local.replace(day=1), local.replace(day=last)
    raise ValueError(f"Unsupported pay period type: {pay_period_type!r}")
