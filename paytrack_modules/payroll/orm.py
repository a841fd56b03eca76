"""
Payroll ORM Persistence Models (``paytrack_modules.payroll.orm``).

Responsibility:
    SQLAlchemy ORM models that persist the frozen dataclass DTOs defined in
    ``paytrack_modules.payroll.models``.  Each ORM class mirrors a DTO and
    provides ``to_dto()`` / ``from_dto()`` conversion.

Architecture position:
    **Modules layer** -- persistence companions to the pure DTO models.
    Inherits from ``TrackedBase`` (kernel DB base) which provides:
    id (UUID PK, auto-generated), created_at, updated_at.

Invariants enforced:
    - All monetary, hour and rate fields use Decimal -- NEVER float.
      Multipliers and tax coefficients use Numeric(38, 18).
    - Enum fields stored as strings containing the enum ``.value``.
    - Timestamps are stored in UTC and always come back timezone-aware,
      including on backends (SQLite) that drop the offset.
    - A pay guide owns its time frames and public holidays; a shift owns
      its break periods; a pay period owns its extras (delete-orphan).

Audit relevance:
    The per-shift and per-period computed columns are written only by
    ``PayPeriodService.recalculate`` inside one SAVEPOINT.
"""

from __future__ import annotations

from datetime import UTC, date, datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import Boolean, Date, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from paytrack_kernel.db.base import TrackedBase
from paytrack_kernel.db.types import (
    Hours,
    LongText,
    Money,
    Rate,
    ShortCode,
    TaxYearLabel,
    TimeOfDay,
)


def as_uuid(value: UUID | str) -> UUID:
    return value if isinstance(value, UUID) else UUID(str(value))


def _to_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        raise ValueError("Timestamps must be timezone-aware to be persisted")
    return value.astimezone(UTC)


def _aware(value: datetime | None) -> datetime | None:
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=UTC)


# ---------------------------------------------------------------------------
# Pay guides
# ---------------------------------------------------------------------------

class PayGuideModel(TrackedBase):
    """
    ORM model for ``PayGuide``.

    Contract:
        Deleting a guide deletes its penalty and overtime windows and its
        public holidays.
    """

    __tablename__ = "paytrack_pay_guides"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    base_rate: Mapped[Money] = mapped_column(nullable=False)
    timezone: Mapped[str] = mapped_column(String(64), nullable=False, default="Australia/Melbourne")
    effective_from: Mapped[date | None] = mapped_column(Date, nullable=True)
    effective_to: Mapped[date | None] = mapped_column(Date, nullable=True)
    minimum_shift_hours: Mapped[Hours | None] = mapped_column(nullable=True)
    maximum_shift_hours: Mapped[Hours | None] = mapped_column(nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    penalty_time_frames: Mapped[list[PenaltyTimeFrameModel]] = relationship(
        back_populates="pay_guide", cascade="all, delete-orphan", lazy="selectin",
    )
    overtime_time_frames: Mapped[list[OvertimeTimeFrameModel]] = relationship(
        back_populates="pay_guide", cascade="all, delete-orphan", lazy="selectin",
    )
    public_holidays: Mapped[list[PublicHolidayModel]] = relationship(
        back_populates="pay_guide", cascade="all, delete-orphan", lazy="selectin",
    )

    __table_args__ = (
        UniqueConstraint("name", name="uq_paytrack_pay_guide_name"),
        Index("idx_paytrack_pay_guide_active", "is_active"),
    )

    def to_dto(self):
        from paytrack_modules.payroll.models import PayGuide
        return PayGuide(
            id=str(self.id),
            name=self.name,
            base_rate=self.base_rate,
            timezone=self.timezone,
            effective_from=self.effective_from,
            effective_to=self.effective_to,
            minimum_shift_hours=self.minimum_shift_hours,
            maximum_shift_hours=self.maximum_shift_hours,
            is_active=self.is_active,
            penalty_time_frames=tuple(tf.to_dto() for tf in self.penalty_time_frames),
            overtime_time_frames=tuple(tf.to_dto() for tf in self.overtime_time_frames),
            public_holidays=tuple(h.to_dto() for h in self.public_holidays),
        )

    @classmethod
    def from_dto(cls, dto) -> PayGuideModel:
        guide_id = as_uuid(dto.id)
        return cls(
            id=guide_id,
            name=dto.name,
            base_rate=dto.base_rate,
            timezone=dto.timezone,
            effective_from=dto.effective_from,
            effective_to=dto.effective_to,
            minimum_shift_hours=dto.minimum_shift_hours,
            maximum_shift_hours=dto.maximum_shift_hours,
            is_active=dto.is_active,
            penalty_time_frames=[
                PenaltyTimeFrameModel.from_dto(tf, guide_id) for tf in dto.penalty_time_frames
            ],
            overtime_time_frames=[
                OvertimeTimeFrameModel.from_dto(tf, guide_id) for tf in dto.overtime_time_frames
            ],
            public_holidays=[
                PublicHolidayModel.from_dto(h, guide_id) for h in dto.public_holidays
            ],
        )

    def __repr__(self) -> str:
        return f"<PayGuideModel {self.name} base={self.base_rate} tz={self.timezone}>"


class _TimeFrameColumns:
    """Columns shared by penalty and overtime windows."""

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[LongText | None] = mapped_column(nullable=True)
    start_time: Mapped[TimeOfDay | None] = mapped_column(nullable=True)
    end_time: Mapped[TimeOfDay | None] = mapped_column(nullable=True)
    day_of_week: Mapped[int | None] = mapped_column(Integer, nullable=True)
    is_public_holiday: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    priority: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    def _window_fields(self) -> dict:
        return {
            "id": str(self.id),
            "name": self.name,
            "description": self.description,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "day_of_week": self.day_of_week,
            "is_public_holiday": self.is_public_holiday,
            "priority": self.priority,
            "is_active": self.is_active,
        }

    @staticmethod
    def _window_columns(dto, pay_guide_id: UUID) -> dict:
        return {
            "id": as_uuid(dto.id),
            "pay_guide_id": pay_guide_id,
            "name": dto.name,
            "description": dto.description,
            "start_time": dto.start_time,
            "end_time": dto.end_time,
            "day_of_week": dto.day_of_week,
            "is_public_holiday": dto.is_public_holiday,
            "priority": dto.priority,
            "is_active": dto.is_active,
        }


class PenaltyTimeFrameModel(_TimeFrameColumns, TrackedBase):
    """ORM model for ``PenaltyTimeFrame``."""

    __tablename__ = "paytrack_penalty_time_frames"

    pay_guide_id: Mapped[UUID] = mapped_column(
        ForeignKey("paytrack_pay_guides.id", ondelete="CASCADE"), nullable=False,
    )
    multiplier: Mapped[Rate] = mapped_column(nullable=False)

    pay_guide: Mapped[PayGuideModel] = relationship(back_populates="penalty_time_frames")

    __table_args__ = (
        Index("idx_paytrack_penalty_guide", "pay_guide_id"),
    )

    def to_dto(self):
        from paytrack_modules.payroll.models import PenaltyTimeFrame
        return PenaltyTimeFrame(multiplier=self.multiplier, **self._window_fields())

    @classmethod
    def from_dto(cls, dto, pay_guide_id: UUID) -> PenaltyTimeFrameModel:
        return cls(multiplier=dto.multiplier, **cls._window_columns(dto, pay_guide_id))


class OvertimeTimeFrameModel(_TimeFrameColumns, TrackedBase):
    """ORM model for ``OvertimeTimeFrame``."""

    __tablename__ = "paytrack_overtime_time_frames"

    pay_guide_id: Mapped[UUID] = mapped_column(
        ForeignKey("paytrack_pay_guides.id", ondelete="CASCADE"), nullable=False,
    )
    first_three_hours_mult: Mapped[Rate] = mapped_column(nullable=False)
    after_three_hours_mult: Mapped[Rate] = mapped_column(nullable=False)

    pay_guide: Mapped[PayGuideModel] = relationship(back_populates="overtime_time_frames")

    __table_args__ = (
        Index("idx_paytrack_overtime_guide", "pay_guide_id"),
    )

    def to_dto(self):
        from paytrack_modules.payroll.models import OvertimeTimeFrame
        return OvertimeTimeFrame(
            first_three_hours_mult=self.first_three_hours_mult,
            after_three_hours_mult=self.after_three_hours_mult,
            **self._window_fields(),
        )

    @classmethod
    def from_dto(cls, dto, pay_guide_id: UUID) -> OvertimeTimeFrameModel:
        return cls(
            first_three_hours_mult=dto.first_three_hours_mult,
            after_three_hours_mult=dto.after_three_hours_mult,
            **cls._window_columns(dto, pay_guide_id),
        )


class PublicHolidayModel(TrackedBase):
    """ORM model for ``PublicHoliday``."""

    __tablename__ = "paytrack_public_holidays"

    pay_guide_id: Mapped[UUID] = mapped_column(
        ForeignKey("paytrack_pay_guides.id", ondelete="CASCADE"), nullable=False,
    )
    date: Mapped[date] = mapped_column(Date, nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    pay_guide: Mapped[PayGuideModel] = relationship(back_populates="public_holidays")

    __table_args__ = (
        UniqueConstraint("pay_guide_id", "date", name="uq_paytrack_holiday_guide_date"),
    )

    def to_dto(self):
        from paytrack_modules.payroll.models import PublicHoliday
        return PublicHoliday(
            id=str(self.id), date=self.date, name=self.name, is_active=self.is_active,
        )

    @classmethod
    def from_dto(cls, dto, pay_guide_id: UUID) -> PublicHolidayModel:
        return cls(
            id=as_uuid(dto.id),
            pay_guide_id=pay_guide_id,
            date=dto.date,
            name=dto.name,
            is_active=dto.is_active,
        )


# ---------------------------------------------------------------------------
# Pay periods, shifts, extras
# ---------------------------------------------------------------------------

class PayPeriodModel(TrackedBase):
    """
    ORM model for ``PayPeriod``.

    Contract:
        Aggregate columns are NULL until the first recalculation.  A
        ``verified`` period is locked until it is reopened.
    """

    __tablename__ = "paytrack_pay_periods"

    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[ShortCode] = mapped_column(nullable=False, default="open")
    pay_period_type: Mapped[ShortCode] = mapped_column(nullable=False, default="weekly")
    simplified_workflow: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    total_hours: Mapped[Hours | None] = mapped_column(nullable=True)
    total_pay: Mapped[Money | None] = mapped_column(nullable=True)
    payg_withholding: Mapped[Money | None] = mapped_column(nullable=True)
    medicare_levy: Mapped[Money | None] = mapped_column(nullable=True)
    hecs_help_amount: Mapped[Money | None] = mapped_column(nullable=True)
    total_withholdings: Mapped[Money | None] = mapped_column(nullable=True)
    net_pay: Mapped[Money | None] = mapped_column(nullable=True)
    actual_pay: Mapped[Money | None] = mapped_column(nullable=True)
    verified: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    calculated_at: Mapped[datetime | None] = mapped_column(nullable=True)

    shifts: Mapped[list[ShiftModel]] = relationship(back_populates="pay_period", lazy="selectin")
    extras: Mapped[list[PayPeriodExtraModel]] = relationship(
        back_populates="pay_period", cascade="all, delete-orphan", lazy="selectin",
    )

    __table_args__ = (
        UniqueConstraint("start_date", "end_date", name="uq_paytrack_pay_period_dates"),
        Index("idx_paytrack_pay_period_status", "status"),
    )

    def to_dto(self):
        from paytrack_modules.payroll.models import PayPeriod, PayPeriodStatus, PayPeriodType
        return PayPeriod(
            id=str(self.id),
            start_date=self.start_date,
            end_date=self.end_date,
            status=PayPeriodStatus(self.status),
            pay_period_type=PayPeriodType(self.pay_period_type),
            extras=tuple(e.to_dto() for e in self.extras),
            total_hours=self.total_hours,
            total_pay=self.total_pay,
            payg_withholding=self.payg_withholding,
            medicare_levy=self.medicare_levy,
            hecs_help_amount=self.hecs_help_amount,
            total_withholdings=self.total_withholdings,
            net_pay=self.net_pay,
            actual_pay=self.actual_pay,
            verified=self.verified,
            simplified_workflow=self.simplified_workflow,
            calculated_at=_aware(self.calculated_at),
        )

    @classmethod
    def from_dto(cls, dto) -> PayPeriodModel:
        period_id = as_uuid(dto.id)
        return cls(
            id=period_id,
            start_date=dto.start_date,
            end_date=dto.end_date,
            status=dto.status.value,
            pay_period_type=dto.pay_period_type.value,
            simplified_workflow=dto.simplified_workflow,
            total_hours=dto.total_hours,
            total_pay=dto.total_pay,
            payg_withholding=dto.payg_withholding,
            medicare_levy=dto.medicare_levy,
            hecs_help_amount=dto.hecs_help_amount,
            total_withholdings=dto.total_withholdings,
            net_pay=dto.net_pay,
            actual_pay=dto.actual_pay,
            verified=dto.verified,
            calculated_at=_to_utc(dto.calculated_at) if dto.calculated_at else None,
            extras=[PayPeriodExtraModel.from_dto(e, period_id) for e in dto.extras],
        )

    def __repr__(self) -> str:
        return f"<PayPeriodModel {self.start_date}..{self.end_date} ({self.status})>"


class ShiftModel(TrackedBase):
    """ORM model for ``Shift``; computed pay columns are NULL until recalculated."""

    __tablename__ = "paytrack_shifts"

    pay_guide_id: Mapped[UUID] = mapped_column(
        ForeignKey("paytrack_pay_guides.id"), nullable=False,
    )
    pay_period_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("paytrack_pay_periods.id"), nullable=True,
    )
    start_time: Mapped[datetime] = mapped_column(nullable=False)
    end_time: Mapped[datetime] = mapped_column(nullable=False)
    break_minutes: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    notes: Mapped[LongText | None] = mapped_column(nullable=True)
    total_hours: Mapped[Hours | None] = mapped_column(nullable=True)
    base_pay: Mapped[Money | None] = mapped_column(nullable=True)
    overtime_pay: Mapped[Money | None] = mapped_column(nullable=True)
    penalty_pay: Mapped[Money | None] = mapped_column(nullable=True)
    total_pay: Mapped[Money | None] = mapped_column(nullable=True)

    pay_period: Mapped[PayPeriodModel | None] = relationship(back_populates="shifts")
    break_periods: Mapped[list[BreakPeriodModel]] = relationship(
        back_populates="shift",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="BreakPeriodModel.start_time",
    )

    __table_args__ = (
        Index("idx_paytrack_shift_period", "pay_period_id"),
        Index("idx_paytrack_shift_start", "start_time"),
    )

    def to_dto(self):
        from paytrack_modules.payroll.models import Shift
        return Shift(
            id=str(self.id),
            pay_guide_id=str(self.pay_guide_id),
            start_time=_aware(self.start_time),
            end_time=_aware(self.end_time),
            break_periods=tuple(b.to_dto() for b in self.break_periods),
            break_minutes=self.break_minutes,
            pay_period_id=str(self.pay_period_id) if self.pay_period_id else None,
            notes=self.notes,
            total_hours=self.total_hours,
            base_pay=self.base_pay,
            overtime_pay=self.overtime_pay,
            penalty_pay=self.penalty_pay,
            total_pay=self.total_pay,
        )

    @classmethod
    def from_dto(cls, dto) -> ShiftModel:
        shift_id = as_uuid(dto.id)
        return cls(
            id=shift_id,
            pay_guide_id=as_uuid(dto.pay_guide_id),
            pay_period_id=as_uuid(dto.pay_period_id) if dto.pay_period_id else None,
            start_time=_to_utc(dto.start_time),
            end_time=_to_utc(dto.end_time),
            break_minutes=dto.break_minutes,
            notes=dto.notes,
            total_hours=dto.total_hours,
            base_pay=dto.base_pay,
            overtime_pay=dto.overtime_pay,
            penalty_pay=dto.penalty_pay,
            total_pay=dto.total_pay,
            break_periods=[BreakPeriodModel.from_dto(b, shift_id) for b in dto.break_periods],
        )


class BreakPeriodModel(TrackedBase):
    """ORM model for ``BreakPeriod``."""

    __tablename__ = "paytrack_break_periods"

    shift_id: Mapped[UUID] = mapped_column(
        ForeignKey("paytrack_shifts.id", ondelete="CASCADE"), nullable=False,
    )
    start_time: Mapped[datetime] = mapped_column(nullable=False)
    end_time: Mapped[datetime] = mapped_column(nullable=False)

    shift: Mapped[ShiftModel] = relationship(back_populates="break_periods")

    def to_dto(self):
        from paytrack_modules.payroll.models import BreakPeriod
        return BreakPeriod(
            id=str(self.id),
            start_time=_aware(self.start_time),
            end_time=_aware(self.end_time),
        )

    @classmethod
    def from_dto(cls, dto, shift_id: UUID) -> BreakPeriodModel:
        kwargs = {"id": as_uuid(dto.id)} if dto.id else {}
        return cls(
            shift_id=shift_id,
            start_time=_to_utc(dto.start_time),
            end_time=_to_utc(dto.end_time),
            **kwargs,
        )


class PayPeriodExtraModel(TrackedBase):
    """ORM model for ``PayPeriodExtra``."""

    __tablename__ = "paytrack_pay_period_extras"

    pay_period_id: Mapped[UUID] = mapped_column(
        ForeignKey("paytrack_pay_periods.id", ondelete="CASCADE"), nullable=False,
    )
    description: Mapped[str] = mapped_column(String(200), nullable=False)
    amount: Mapped[Money] = mapped_column(nullable=False)
    taxable: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    extra_type: Mapped[ShortCode | None] = mapped_column(nullable=True)

    pay_period: Mapped[PayPeriodModel] = relationship(back_populates="extras")

    def to_dto(self):
        from paytrack_modules.payroll.models import PayPeriodExtra
        return PayPeriodExtra(
            id=str(self.id),
            description=self.description,
            amount=self.amount,
            taxable=self.taxable,
            extra_type=self.extra_type,
        )

    @classmethod
    def from_dto(cls, dto, pay_period_id: UUID) -> PayPeriodExtraModel:
        return cls(
            id=as_uuid(dto.id),
            pay_period_id=pay_period_id,
            description=dto.description,
            amount=dto.amount,
            taxable=dto.taxable,
            extra_type=dto.extra_type,
        )


# ---------------------------------------------------------------------------
# Tax
# ---------------------------------------------------------------------------

class TaxSettingsModel(TrackedBase):
    """ORM model for ``TaxSettings`` (one row for the single taxpayer)."""

    __tablename__ = "paytrack_tax_settings"

    claimed_tax_free_threshold: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    is_foreign_resident: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    has_tax_file_number: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    medicare_exemption: Mapped[ShortCode] = mapped_column(nullable=False, default="none")
    hecs_help_rate: Mapped[Rate | None] = mapped_column(nullable=True)
    has_stsl_debt: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    def to_dto(self):
        from paytrack_modules.payroll.models import MedicareExemption, TaxSettings
        return TaxSettings(
            claimed_tax_free_threshold=self.claimed_tax_free_threshold,
            is_foreign_resident=self.is_foreign_resident,
            has_tax_file_number=self.has_tax_file_number,
            medicare_exemption=MedicareExemption(self.medicare_exemption),
            hecs_help_rate=self.hecs_help_rate,
            has_stsl_debt=self.has_stsl_debt,
        )

    @classmethod
    def from_dto(cls, dto) -> TaxSettingsModel:
        return cls(
            claimed_tax_free_threshold=dto.claimed_tax_free_threshold,
            is_foreign_resident=dto.is_foreign_resident,
            has_tax_file_number=dto.has_tax_file_number,
            medicare_exemption=dto.medicare_exemption.value,
            hecs_help_rate=dto.hecs_help_rate,
            has_stsl_debt=dto.has_stsl_debt,
        )


class TaxCoefficientModel(TrackedBase):
    """ORM model for ``TaxCoefficient`` rows."""

    __tablename__ = "paytrack_tax_coefficients"

    tax_year: Mapped[TaxYearLabel] = mapped_column(nullable=False)
    scale: Mapped[ShortCode] = mapped_column(nullable=False)
    earnings_from: Mapped[Money] = mapped_column(nullable=False)
    earnings_to: Mapped[Money | None] = mapped_column(nullable=True)
    coefficient_a: Mapped[Rate] = mapped_column(nullable=False)
    coefficient_b: Mapped[Rate] = mapped_column(nullable=False)
    description: Mapped[LongText | None] = mapped_column(nullable=True)

    __table_args__ = (
        UniqueConstraint("tax_year", "scale", "earnings_from", name="uq_paytrack_coeff_bracket"),
        Index("idx_paytrack_coeff_year_scale", "tax_year", "scale"),
    )

    def to_dto(self):
        from paytrack_modules.payroll.models import TaxCoefficient, TaxScale
        return TaxCoefficient(
            tax_year=self.tax_year,
            scale=TaxScale(self.scale),
            earnings_from=self.earnings_from,
            earnings_to=self.earnings_to,
            coefficient_a=self.coefficient_a,
            coefficient_b=self.coefficient_b,
            description=self.description,
        )

    @classmethod
    def from_dto(cls, dto) -> TaxCoefficientModel:
        return cls(
            tax_year=dto.tax_year,
            scale=dto.scale.value,
            earnings_from=dto.earnings_from,
            earnings_to=dto.earnings_to,
            coefficient_a=dto.coefficient_a,
            coefficient_b=dto.coefficient_b,
            description=dto.description,
        )


class StslRateModel(TrackedBase):
    """ORM model for ``StslRate`` rows."""

    __tablename__ = "paytrack_stsl_rates"

    tax_year: Mapped[TaxYearLabel] = mapped_column(nullable=False)
    scale: Mapped[ShortCode] = mapped_column(nullable=False)
    earnings_from: Mapped[Money] = mapped_column(nullable=False)
    earnings_to: Mapped[Money | None] = mapped_column(nullable=True)
    coefficient_a: Mapped[Rate] = mapped_column(nullable=False)
    coefficient_b: Mapped[Rate] = mapped_column(nullable=False)
    description: Mapped[LongText | None] = mapped_column(nullable=True)

    __table_args__ = (
        UniqueConstraint("tax_year", "scale", "earnings_from", name="uq_paytrack_stsl_bracket"),
        Index("idx_paytrack_stsl_year_scale", "tax_year", "scale"),
    )

    def to_dto(self):
        from paytrack_modules.payroll.models import StslRate, StslScale
        return StslRate(
            tax_year=self.tax_year,
            scale=StslScale(self.scale),
            earnings_from=self.earnings_from,
            earnings_to=self.earnings_to,
            coefficient_a=self.coefficient_a,
            coefficient_b=self.coefficient_b,
            description=self.description,
        )

    @classmethod
    def from_dto(cls, dto) -> StslRateModel:
        return cls(
            tax_year=dto.tax_year,
            scale=dto.scale.value,
            earnings_from=dto.earnings_from,
            earnings_to=dto.earnings_to,
            coefficient_a=dto.coefficient_a,
            coefficient_b=dto.coefficient_b,
            description=dto.description,
        )


class TaxRateConfigModel(TrackedBase):
    """ORM model for ``TaxRateConfig``; one row per tax year."""

    __tablename__ = "paytrack_tax_rate_configs"

    tax_year: Mapped[TaxYearLabel] = mapped_column(nullable=False, unique=True)
    medicare_rate: Mapped[Rate] = mapped_column(nullable=False)
    medicare_low_income_threshold: Mapped[Money] = mapped_column(nullable=False)
    medicare_high_income_threshold: Mapped[Money] = mapped_column(nullable=False)

    def to_dto(self):
        from paytrack_modules.payroll.models import TaxRateConfig
        return TaxRateConfig(
            tax_year=self.tax_year,
            medicare_rate=self.medicare_rate,
            medicare_low_income_threshold=self.medicare_low_income_threshold,
            medicare_high_income_threshold=self.medicare_high_income_threshold,
        )

    @classmethod
    def from_dto(cls, dto) -> TaxRateConfigModel:
        return cls(
            tax_year=dto.tax_year,
            medicare_rate=dto.medicare_rate,
            medicare_low_income_threshold=dto.medicare_low_income_threshold,
            medicare_high_income_threshold=dto.medicare_high_income_threshold,
        )
