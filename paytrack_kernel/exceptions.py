"""
Typed Exception Hierarchy for Paytrack.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Pay and tax errors must be handled precisely. A caller that has to parse
"no bracket" out of a message string breaks the first time the wording
changes. Every error here:
  1. Has its own class (catch by type, not message)
  2. Has a CODE class attribute (machine-readable, API-safe)
  3. Carries structured DATA as attributes (not just a message string)

Example:
    try:
        totals = aggregate(...)
    except NoBracketFoundError as e:
        log.warning("no bracket", extra={"scale": e.scale, "year": e.tax_year})
        api_response(code=e.code, tax_year=e.tax_year)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    PaytrackError (base)
    |
    +-- ShiftError
    |   +-- InvalidShiftRangeError
    |
    +-- PayGuideError
    |   +-- PayGuideNotFoundError
    |   +-- InvalidTimeFrameError
    |
    +-- TaxError
    |   +-- NoBracketFoundError
    |   +-- TaxYearNotConfiguredError
    |   +-- MissingTaxSettingsError
    |
    +-- PayPeriodError
    |   +-- NoShiftsToCalculateError
    |   +-- PeriodLockedError
    |   +-- InvalidPeriodTransitionError
    |   +-- PayPeriodNotFoundError
    |
    +-- NegativeResultGuardError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category   | Code                       | When Raised
-----------|----------------------------|------------------------------------------
Shift      | INVALID_SHIFT_RANGE        | end <= start, bad/overlapping breaks
-----------|----------------------------|------------------------------------------
Pay guide  | PAY_GUIDE_NOT_FOUND        | Shift references an unknown pay guide
           | INVALID_TIME_FRAME         | Bad HH:MM, multiplier < 1, bad weekday
-----------|----------------------------|------------------------------------------
Tax        | NO_BRACKET_FOUND           | No row for (year, scale, earnings)
           | TAX_YEAR_NOT_CONFIGURED    | No rate config at or before the year
           | MISSING_TAX_SETTINGS       | Taxpayer has no settings record
-----------|----------------------------|------------------------------------------
Pay period | NO_SHIFTS_TO_CALCULATE     | Zero shifts and zero extras
           | PERIOD_LOCKED              | Recalculating a verified period
           | INVALID_PERIOD_TRANSITION  | Action not valid from current status
           | PAY_PERIOD_NOT_FOUND       | Pay period ID doesn't exist
-----------|----------------------------|------------------------------------------
Guard      | NEGATIVE_RESULT_GUARD      | Net pay would go negative (strict mode)

===============================================================================
DESIGN DECISIONS
===============================================================================

1. Inherit from Exception, not ValueError: domain errors are catchable as a
   group and never confused with programming errors.
2. ``code`` is a class attribute: available without instantiation and
   stable for API documentation.
3. All context is stored as attributes: exceptions get logged and
   serialized, and structured attributes survive that.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal


class PaytrackError(Exception):
    """
    Base exception for all paytrack errors.

    All subclasses must have a ``code`` class attribute for
    machine-readable error identification.
    """

    code: str = "PAYTRACK_ERROR"


# Shift-related exceptions


class ShiftError(PaytrackError):
    """Base exception for shift-related errors."""

    code: str = "SHIFT_ERROR"


class InvalidShiftRangeError(ShiftError):
    """Shift or break interval is empty, inverted, or out of bounds."""

    code: str = "INVALID_SHIFT_RANGE"

    def __init__(
        self,
        reason: str,
        start_time: datetime | None = None,
        end_time: datetime | None = None,
        shift_id: str | None = None,
    ):
        self.reason = reason
        self.start_time = start_time
        self.end_time = end_time
        self.shift_id = shift_id
        prefix = f"Shift {shift_id}: " if shift_id else ""
        super().__init__(f"{prefix}{reason}")


# Pay guide exceptions


class PayGuideError(PaytrackError):
    """Base exception for pay guide errors."""

    code: str = "PAY_GUIDE_ERROR"


class PayGuideNotFoundError(PayGuideError):
    """A shift references a pay guide that was not supplied."""

    code: str = "PAY_GUIDE_NOT_FOUND"

    def __init__(self, pay_guide_id: str, shift_id: str | None = None):
        self.pay_guide_id = pay_guide_id
        self.shift_id = shift_id
        super().__init__(
            f"Pay guide not found: {pay_guide_id}"
            + (f" (shift {shift_id})" if shift_id else "")
        )


class InvalidTimeFrameError(PayGuideError):
    """Penalty or overtime time frame is malformed."""

    code: str = "INVALID_TIME_FRAME"

    def __init__(self, time_frame_id: str, reason: str):
        self.time_frame_id = time_frame_id
        self.reason = reason
        super().__init__(f"Invalid time frame {time_frame_id}: {reason}")


# Tax exceptions


class TaxError(PaytrackError):
    """Base exception for tax calculation errors."""

    code: str = "TAX_ERROR"


class NoBracketFoundError(TaxError):
    """No coefficient row covers the requested year, scale and earnings."""

    code: str = "NO_BRACKET_FOUND"

    def __init__(
        self,
        tax_year: str,
        scale: str,
        earnings: Decimal | None = None,
        table: str = "payg",
    ):
        self.tax_year = tax_year
        self.scale = scale
        self.earnings = earnings
        self.table = table
        detail = f" for earnings {earnings}" if earnings is not None else ""
        super().__init__(
            f"No {table} bracket for tax year {tax_year}, scale {scale}{detail}"
        )


class TaxYearNotConfiguredError(TaxError):
    """No tax rate configuration exists at or before the requested year."""

    code: str = "TAX_YEAR_NOT_CONFIGURED"

    def __init__(self, tax_year: str):
        self.tax_year = tax_year
        super().__init__(f"No tax configuration found for tax year {tax_year}")


class MissingTaxSettingsError(TaxError):
    """The taxpayer has no tax settings record."""

    code: str = "MISSING_TAX_SETTINGS"

    def __init__(self, pay_period_id: str | None = None):
        self.pay_period_id = pay_period_id
        super().__init__(
            "Tax settings are required to calculate withholding"
            + (f" (pay period {pay_period_id})" if pay_period_id else "")
        )


# Pay period exceptions


class PayPeriodError(PaytrackError):
    """Base exception for pay period errors."""

    code: str = "PAY_PERIOD_ERROR"


class NoShiftsToCalculateError(PayPeriodError):
    """Pay period has neither shifts nor extras."""

    code: str = "NO_SHIFTS_TO_CALCULATE"

    def __init__(self, pay_period_id: str | None = None):
        self.pay_period_id = pay_period_id
        super().__init__(
            "Pay period has no shifts or extras to calculate"
            + (f": {pay_period_id}" if pay_period_id else "")
        )


class PeriodLockedError(PayPeriodError):
    """Pay period is verified and must be reopened before it changes."""

    code: str = "PERIOD_LOCKED"

    def __init__(self, pay_period_id: str | None, status: str):
        self.pay_period_id = pay_period_id
        self.status = status
        super().__init__(
            f"Pay period {pay_period_id} is {status} and locked; reopen it first"
        )


class InvalidPeriodTransitionError(PayPeriodError):
    """Requested workflow action is not valid from the current status."""

    code: str = "INVALID_PERIOD_TRANSITION"

    def __init__(self, pay_period_id: str | None, status: str, action: str):
        self.pay_period_id = pay_period_id
        self.status = status
        self.action = action
        super().__init__(
            f"Cannot {action} pay period {pay_period_id} from status {status}"
        )


class PayPeriodNotFoundError(PayPeriodError):
    """Pay period with given ID was not found."""

    code: str = "PAY_PERIOD_NOT_FOUND"

    def __init__(self, pay_period_id: str):
        self.pay_period_id = pay_period_id
        super().__init__(f"Pay period not found: {pay_period_id}")


# Guard exceptions


class NegativeResultGuardError(PaytrackError):
    """
    An intermediate result would go negative.

    Indicates misconfigured brackets or oversized deductions, never a
    legitimate pay outcome.
    """

    code: str = "NEGATIVE_RESULT_GUARD"

    def __init__(self, field: str, value: Decimal, period_end: date | None = None):
        self.field = field
        self.value = value
        self.period_end = period_end
        super().__init__(f"{field} would be negative: {value}")
