"""
Payroll Configuration Schema.

Defines the structure and defaults for pay calculation settings.
Actual values are loaded from ``payroll.yaml`` by
``paytrack_config.load_payroll_config`` at runtime.
"""

from dataclasses import dataclass, fields
from typing import Self
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from paytrack_kernel.logging_config import get_logger

logger = get_logger("modules.payroll.config")

VALID_PAY_PERIOD_TYPES = {"weekly", "fortnightly", "monthly"}


@dataclass(frozen=True)
class PayrollConfig:
    """
    Configuration schema for shift pay and withholding.

    Field defaults match a Victorian casual on weekly pay.  Override at
    instantiation or through YAML:

        config = PayrollConfig(
            default_timezone="Australia/Sydney",
            strict_negative_guard=True,
        )
    """

    # Timezone for "today": tax year selection and readiness dates.  Naive
    # shift timestamps are read in their pay guide's timezone instead.
    default_timezone: str = "Australia/Melbourne"

    # Pay cycle assumed when a pay period doesn't declare one
    default_pay_period_type: str = "weekly"

    # Cumulative minutes per overtime window paid at the first-tier multiplier
    overtime_tier_minutes: int = 180

    # Raise NegativeResultGuardError instead of flooring net pay at zero
    strict_negative_guard: bool = False

    # Use the most recent earlier tax year when the requested one is missing
    allow_tax_year_fallback: bool = True

    # Directory of <year>.yaml tax tables for PayPeriodService; None reads the
    # tables stored in the database
    tax_tables_dir: str | None = None

    def __post_init__(self):
        try:
            ZoneInfo(self.default_timezone)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"Unknown timezone: {self.default_timezone!r}") from exc

        if self.default_pay_period_type not in VALID_PAY_PERIOD_TYPES:
            raise ValueError(
                f"default_pay_period_type must be one of {VALID_PAY_PERIOD_TYPES}, "
                f"got '{self.default_pay_period_type}'"
            )

        if self.overtime_tier_minutes <= 0:
            raise ValueError("overtime_tier_minutes must be positive")

        logger.debug(
            "payroll_config_initialized",
            extra={
                "default_timezone": self.default_timezone,
                "default_pay_period_type": self.default_pay_period_type,
                "overtime_tier_minutes": self.overtime_tier_minutes,
                "strict_negative_guard": self.strict_negative_guard,
                "allow_tax_year_fallback": self.allow_tax_year_fallback,
            },
        )

    @classmethod
    def with_defaults(cls) -> Self:
        """Create config with the built-in defaults."""
        return cls()

    @classmethod
    def from_dict(cls, data: dict) -> Self:
        """Create config from a mapping (e.g. a parsed YAML document)."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown payroll config keys: {unknown}")
        logger.info(
            "payroll_config_loading_from_dict",
            extra={"keys": sorted(data.keys())},
        )
        return cls(**data)
