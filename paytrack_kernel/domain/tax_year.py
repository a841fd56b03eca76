"""
Tax year -- Australian financial-year labels.

Responsibility:
    Map dates and instants to the financial-year label used to key tax
    tables ("2024-25" covers 1 July 2024 to 30 June 2025), validate labels,
    and order them for the "most recent year at or before" fallback.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.  Callers pass the
    instant and timezone explicitly; nothing here reads the clock.

Failure modes:
    - ValueError on a malformed label or a label whose halves disagree.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from zoneinfo import ZoneInfo

_LABEL_RE = re.compile(r"^(\d{4})-(\d{2})$")

FINANCIAL_YEAR_START_MONTH = 7


def tax_year_for(day: date) -> str:
    """Financial-year label containing ``day``."""
    start = day.year if day.month >= FINANCIAL_YEAR_START_MONTH else day.year - 1
    return f"{start}-{(start + 1) % 100:02d}"


def parse_tax_year(label: str) -> int:
    """
    Validate a label and return its starting calendar year.

    Raises:
        ValueError: label is not ``YYYY-YY`` with consecutive years.
    """
    match = _LABEL_RE.match(label or "")
    if not match:
        raise ValueError(f"Invalid tax year label: {label!r} (expected e.g. '2024-25')")
    start = int(match.group(1))
    if (start + 1) % 100 != int(match.group(2)):
        raise ValueError(f"Invalid tax year label: {label!r} (years must be consecutive)")
    return start


def tax_year_bounds(label: str) -> tuple[date, date]:
    """Inclusive first and last day of the financial year."""
    start = parse_tax_year(label)
    return date(start, 7, 1), date(start + 1, 6, 30)


def tax_year_for_instant(as_of: datetime, tz: str) -> str:
    """
    Financial-year label for an instant as seen in ``tz``.

    Naive instants are taken to already be local to ``tz``.
    """
    zone = ZoneInfo(tz)
    local = as_of.replace(tzinfo=zone) if as_of.tzinfo is None else as_of.astimezone(zone)
    return tax_year_for(local.date())


def tax_year_sort_key(label: str) -> int:
    """Ordering key so that labels compare chronologically."""
    return parse_tax_year(label)
