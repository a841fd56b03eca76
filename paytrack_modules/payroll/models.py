"""
Payroll Domain Models (``paytrack_modules.payroll.models``).

Responsibility
--------------
Frozen dataclass value objects representing the nouns of shift pay and
withholding: pay guides with their penalty/overtime windows and public
holidays, shifts with breaks, taxpayer settings, tax reference tables,
and pay periods with their extras.

Architecture position
---------------------
**Modules layer** -- pure data definitions with ZERO I/O.  Built by the
ORM ``to_dto()`` methods and the YAML loader, consumed by the engines in
``paytrack_engines`` and returned to callers.

Invariants enforced
-------------------
* All models are ``frozen=True`` (immutable after construction).
* All monetary fields, rates and multipliers use ``Decimal`` -- NEVER
  ``float``.
* Time frame multipliers are >= 1; day-of-week is 0 (Sunday) to 6.
* Bracket rows have ``earnings_to`` > ``earnings_from`` when bounded.

Failure modes
-------------
* ``InvalidTimeFrameError`` for malformed windows.
* ``ValueError`` for negative rates or inverted bracket bounds.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import ClassVar

from paytrack_kernel.exceptions import InvalidTimeFrameError
from paytrack_kernel.logging_config import get_logger

logger = get_logger("modules.payroll.models")

MINUTES_PER_DAY = 24 * 60


class MedicareExemption(Enum):
    """Medicare levy exemption claimed on the withholding declaration."""
    NONE = "none"
    HALF = "half"
    FULL = "full"


class PayPeriodType(Enum):
    """Pay cycle length; brackets are expressed in weekly earnings."""
    WEEKLY = "weekly"
    FORTNIGHTLY = "fortnightly"
    MONTHLY = "monthly"


class PayPeriodStatus(Enum):
    """Pay period lifecycle states across both workflows."""
    OPEN = "open"
    PROCESSING = "processing"
    PAID = "paid"
    VERIFIED = "verified"
    PENDING = "pending"


class TaxScale(Enum):
    """PAYG withholding scale selected from the taxpayer's declarations."""
    NO_TFN = "no-tfn"
    FOREIGN_RESIDENT = "foreign-resident"
    MEDICARE_EXEMPT_FULL = "medicare-exempt-full"
    MEDICARE_EXEMPT_HALF = "medicare-exempt-half"
    THRESHOLD_CLAIMED = "threshold-claimed"
    THRESHOLD_NOT_CLAIMED = "threshold-not-claimed"

    @property
    def ato_code(self) -> str:
        """Numbered scale as printed in the ATO statement of formulas."""
        return _ATO_SCALE_CODES[self]


_ATO_SCALE_CODES = {
    TaxScale.THRESHOLD_NOT_CLAIMED: "scale1",
    TaxScale.THRESHOLD_CLAIMED: "scale2",
    TaxScale.FOREIGN_RESIDENT: "scale3",
    TaxScale.NO_TFN: "scale4",
    TaxScale.MEDICARE_EXEMPT_FULL: "scale5",
    TaxScale.MEDICARE_EXEMPT_HALF: "scale6",
}


class StslScale(Enum):
    """Study and training support loan schedule."""
    WITH_TFT_OR_FOREIGN_RESIDENT = "with-tft-or-foreign-resident"
    NO_TFT = "no-tft"


class TimeFrameKind(Enum):
    PENALTY = "penalty"
    OVERTIME = "overtime"


def parse_time_of_day(value: str, *, allow_end_of_day: bool = False) -> int:
    """``"HH:MM"`` -> minutes since local midnight.  ``"24:00"`` only as an end."""
    parts = value.split(":") if isinstance(value, str) else []
    if len(parts) != 2 or not all(p.isdigit() and len(p) == 2 for p in parts):
        raise ValueError(f"expected HH:MM, got {value!r}")
    hours, minutes = int(parts[0]), int(parts[1])
    if hours == 24 and minutes == 0 and allow_end_of_day:
        return MINUTES_PER_DAY
    if hours > 23 or minutes > 59:
        raise ValueError(f"time of day out of range: {value!r}")
    return hours * 60 + minutes


# ---------------------------------------------------------------------------
# Pay guide
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TimeFrame:
    """
    Shared windowing trait of penalty and overtime time frames.

    A window is projected onto each local calendar day it applies to.
    ``start_time``/``end_time`` default to the whole day.  A window whose
    end is at or before its start (or is ``24:00``) runs past midnight and
    belongs to the day it starts on.
    """
    id: str
    name: str
    start_time: str | None = None
    end_time: str | None = None
    day_of_week: int | None = None
    is_public_holiday: bool = False
    priority: int = 0
    is_active: bool = True
    description: str | None = None

    kind: ClassVar[TimeFrameKind]

    def __post_init__(self):
        try:
            if self.start_time is not None:
                parse_time_of_day(self.start_time)
            if self.end_time is not None:
                parse_time_of_day(self.end_time, allow_end_of_day=True)
        except ValueError as exc:
            raise InvalidTimeFrameError(self.id, str(exc)) from exc
        if self.day_of_week is not None and not 0 <= self.day_of_week <= 6:
            raise InvalidTimeFrameError(
                self.id, f"day_of_week must be 0 (Sunday) to 6, got {self.day_of_week}"
            )

    @property
    def start_minute(self) -> int:
        return 0 if self.start_time is None else parse_time_of_day(self.start_time)

    @property
    def end_minute(self) -> int:
        """End offset from the owning day's midnight; past 1440 when wrapping."""
        end = (
            MINUTES_PER_DAY
            if self.end_time is None
            else parse_time_of_day(self.end_time, allow_end_of_day=True)
        )
        if end <= self.start_minute:
            end += MINUTES_PER_DAY
        return end

    def applies_on(self, day: date, holidays: frozenset[date]) -> bool:
        """Whether an instance of this window starts on local ``day``."""
        if not self.is_active:
            return False
        if self.day_of_week is not None and (day.weekday() + 1) % 7 != self.day_of_week:
            return False
        if self.is_public_holiday and day not in holidays:
            return False
        return True


@dataclass(frozen=True)
class PenaltyTimeFrame(TimeFrame):
    """Penalty window: a single multiplier on the base rate."""
    multiplier: Decimal = Decimal("1")

    kind: ClassVar[TimeFrameKind] = TimeFrameKind.PENALTY

    def __post_init__(self):
        super().__post_init__()
        if self.multiplier < 1:
            raise InvalidTimeFrameError(
                self.id, f"multiplier must be >= 1, got {self.multiplier}"
            )


@dataclass(frozen=True)
class OvertimeTimeFrame(TimeFrame):
    """Overtime window: one multiplier for the first tier, another after."""
    first_three_hours_mult: Decimal = Decimal("1.5")
    after_three_hours_mult: Decimal = Decimal("2")

    kind: ClassVar[TimeFrameKind] = TimeFrameKind.OVERTIME

    def __post_init__(self):
        super().__post_init__()
        for label, value in (
            ("first_three_hours_mult", self.first_three_hours_mult),
            ("after_three_hours_mult", self.after_three_hours_mult),
        ):
            if value < 1:
                raise InvalidTimeFrameError(self.id, f"{label} must be >= 1, got {value}")


@dataclass(frozen=True)
class PublicHoliday:
    """A public holiday date attached to a pay guide."""
    id: str
    date: date
    name: str
    is_active: bool = True


@dataclass(frozen=True)
class PayGuide:
    """Award or agreement rates for shifts worked under it."""
    id: str
    name: str
    base_rate: Decimal
    timezone: str = "Australia/Melbourne"
    effective_from: date | None = None
    effective_to: date | None = None
    minimum_shift_hours: Decimal | None = None
    maximum_shift_hours: Decimal | None = None
    is_active: bool = True
    penalty_time_frames: tuple[PenaltyTimeFrame, ...] = ()
    overtime_time_frames: tuple[OvertimeTimeFrame, ...] = ()
    public_holidays: tuple[PublicHoliday, ...] = ()

    def __post_init__(self):
        if self.base_rate < 0:
            raise ValueError("base_rate cannot be negative")
        if (
            self.effective_from is not None
            and self.effective_to is not None
            and self.effective_to < self.effective_from
        ):
            raise ValueError("effective_to cannot be before effective_from")

    def is_effective_on(self, day: date) -> bool:
        if self.effective_from is not None and day < self.effective_from:
            return False
        if self.effective_to is not None and day > self.effective_to:
            return False
        return True


# ---------------------------------------------------------------------------
# Shifts
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class BreakPeriod:
    """An unpaid break inside a shift."""
    start_time: datetime
    end_time: datetime
    id: str | None = None


@dataclass(frozen=True)
class Shift:
    """
    A worked shift.

    Structured ``break_periods`` take precedence; ``break_minutes`` is only
    used when no break periods are recorded.  The computed fields are
    ``None`` until a pay period recalculation writes them back.
    """
    id: str
    pay_guide_id: str
    start_time: datetime
    end_time: datetime
    break_periods: tuple[BreakPeriod, ...] = ()
    break_minutes: int = 0
    pay_period_id: str | None = None
    notes: str | None = None
    total_hours: Decimal | None = None
    base_pay: Decimal | None = None
    overtime_pay: Decimal | None = None
    penalty_pay: Decimal | None = None
    total_pay: Decimal | None = None

    def __post_init__(self):
        if self.break_minutes < 0:
            raise ValueError("break_minutes cannot be negative")

    @property
    def has_computed_pay(self) -> bool:
        return self.total_pay is not None


# ---------------------------------------------------------------------------
# Tax
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TaxSettings:
    """Taxpayer declarations that select the withholding scales."""
    claimed_tax_free_threshold: bool = True
    is_foreign_resident: bool = False
    has_tax_file_number: bool = True
    medicare_exemption: MedicareExemption = MedicareExemption.NONE
    hecs_help_rate: Decimal | None = None
    has_stsl_debt: bool = False

    @property
    def withholds_stsl(self) -> bool:
        return self.has_stsl_debt or self.hecs_help_rate is not None


@dataclass(frozen=True)
class _Bracket:
    tax_year: str
    earnings_from: Decimal
    earnings_to: Decimal | None
    coefficient_a: Decimal
    coefficient_b: Decimal
    description: str | None = None

    def __post_init__(self):
        if self.earnings_from < 0:
            raise ValueError("earnings_from cannot be negative")
        if self.earnings_to is not None and self.earnings_to <= self.earnings_from:
            raise ValueError(
                f"bracket upper bound {self.earnings_to} must exceed {self.earnings_from}"
            )

    def contains(self, earnings: Decimal) -> bool:
        """Half-open ``[earnings_from, earnings_to)``; open-ended when no upper bound."""
        if earnings < self.earnings_from:
            return False
        return self.earnings_to is None or earnings < self.earnings_to


@dataclass(frozen=True)
class TaxCoefficient(_Bracket):
    """PAYG bracket row: ``withholding = a * weekly_earnings - b``."""
    scale: TaxScale = TaxScale.THRESHOLD_CLAIMED


@dataclass(frozen=True)
class StslRate(_Bracket):
    """STSL bracket row, same linear shape as PAYG."""
    scale: StslScale = StslScale.WITH_TFT_OR_FOREIGN_RESIDENT


@dataclass(frozen=True)
class TaxRateConfig:
    """Per-year Medicare parameters; its presence marks a year as configured."""
    tax_year: str
    medicare_rate: Decimal
    medicare_low_income_threshold: Decimal
    medicare_high_income_threshold: Decimal


@dataclass(frozen=True)
class TaxTables:
    """Immutable set of tax reference rows across one or more years."""
    coefficients: tuple[TaxCoefficient, ...] = ()
    stsl_rates: tuple[StslRate, ...] = ()
    rate_configs: tuple[TaxRateConfig, ...] = ()

    @property
    def tax_years(self) -> tuple[str, ...]:
        return tuple(sorted({c.tax_year for c in self.rate_configs}))

    def rate_config_for(self, tax_year: str) -> TaxRateConfig | None:
        for config in self.rate_configs:
            if config.tax_year == tax_year:
                return config
        return None


# ---------------------------------------------------------------------------
# Pay periods
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PayPeriodExtra:
    """An ad hoc amount added to a pay period (allowance, bonus, adjustment)."""
    id: str
    description: str
    amount: Decimal
    taxable: bool = True
    extra_type: str | None = None


@dataclass(frozen=True)
class PayPeriod:
    """A pay cycle with its stored aggregates."""
    id: str
    start_date: date
    end_date: date
    status: PayPeriodStatus = PayPeriodStatus.OPEN
    pay_period_type: PayPeriodType = PayPeriodType.WEEKLY
    extras: tuple[PayPeriodExtra, ...] = ()
    total_hours: Decimal | None = None
    total_pay: Decimal | None = None
    payg_withholding: Decimal | None = None
    medicare_levy: Decimal | None = None
    hecs_help_amount: Decimal | None = None
    total_withholdings: Decimal | None = None
    net_pay: Decimal | None = None
    actual_pay: Decimal | None = None
    verified: bool = False
    simplified_workflow: bool = False
    calculated_at: datetime | None = None

    def __post_init__(self):
        if self.end_date < self.start_date:
            raise ValueError("Pay period end_date cannot be before start_date")
        if self.simplified_workflow and self.status not in (
            PayPeriodStatus.PENDING, PayPeriodStatus.VERIFIED
        ):
            raise ValueError(
                f"Status {self.status.value} is not part of the simplified workflow"
            )
        if not self.simplified_workflow and self.status is PayPeriodStatus.PENDING:
            raise ValueError("Status pending is only part of the simplified workflow")

    @property
    def is_locked(self) -> bool:
        return self.status is PayPeriodStatus.VERIFIED
