"""
Shift Pay Calculator (``paytrack_engines.shift_pay``).

Responsibility
--------------
Turn a shift and its pay guide into base, penalty and overtime hours and
pay, plus an audit breakdown of every window that was applied.

Architecture position
---------------------
**Engines layer** -- pure functional core.  ZERO I/O, ZERO clock reads.
Drives ``segmentation`` and ``rate_resolver``.

Bucketing
---------
* A segment inside an overtime window counts only towards overtime; its
  rate is base x tier multiplier x (penalty multiplier, if one resolved).
* Otherwise a segment with a resolved multiplier above 1 counts towards
  penalty hours.
* Everything else is base time at 1.0x.

Invariants enforced
-------------------
* ``base_minutes + penalty_minutes + overtime_minutes == total_minutes``.
* Applied penalty/overtime minutes sum to the penalty/overtime buckets.
* Pay is accumulated exactly in Decimal and rounded half-up to cents once
  per bucket; ``gross_pay`` is the sum of the rounded buckets.
* A shift fully covered by breaks yields an all-zero result.

Failure modes
-------------
* ``InvalidShiftRangeError`` from segmentation.
* Guide inactive, outside its effective range, or minimum/maximum shift
  hours not respected produce result ``warnings`` only.  No top-up and no
  implicit overtime is applied.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal

from paytrack_kernel.domain.money import ZERO, hours_from_minutes, round_money
from paytrack_kernel.logging_config import LogContext, get_logger
from paytrack_modules.payroll.models import PayGuide, PublicHoliday, Shift

from paytrack_engines.rate_resolver import (
    DEFAULT_OVERTIME_TIER_MINUTES,
    ONE,
    ResolvedSegment,
    resolve_segments,
)
from paytrack_engines.segmentation import segment_shift
from paytrack_engines.tracer import traced_engine

logger = get_logger("engines.shift_pay")

_SIXTY = Decimal("60")


@dataclass(frozen=True)
class AppliedPenalty:
    """Total effect of one penalty window on a shift."""
    time_frame_id: str
    name: str
    multiplier: Decimal
    minutes: int
    hours: Decimal
    pay: Decimal
    start_time: datetime
    end_time: datetime
    periods: tuple[tuple[datetime, datetime], ...]


@dataclass(frozen=True)
class AppliedOvertime:
    """Total effect of one overtime window on a shift, split by tier."""
    time_frame_id: str
    name: str
    first_tier_multiplier: Decimal
    after_tier_multiplier: Decimal
    first_tier_minutes: int
    after_tier_minutes: int
    minutes: int
    hours: Decimal
    pay: Decimal
    start_time: datetime
    end_time: datetime
    periods: tuple[tuple[datetime, datetime], ...]
    stacked_penalty_ids: tuple[str, ...] = ()

    @property
    def first_tier_hours(self) -> Decimal:
        return hours_from_minutes(self.first_tier_minutes)

    @property
    def after_tier_hours(self) -> Decimal:
        return hours_from_minutes(self.after_tier_minutes)


@dataclass(frozen=True)
class ShiftPayResult:
    """Pay breakdown for one shift."""
    shift_id: str
    pay_guide_id: str
    base_rate: Decimal
    base_minutes: int
    penalty_minutes: int
    overtime_minutes: int
    break_minutes: int
    base_pay: Decimal
    penalty_pay: Decimal
    overtime_pay: Decimal
    start_time: datetime | None = None
    end_time: datetime | None = None
    applied_penalties: tuple[AppliedPenalty, ...] = ()
    applied_overtimes: tuple[AppliedOvertime, ...] = ()
    warnings: tuple[str, ...] = ()

    @property
    def total_minutes(self) -> int:
        return self.base_minutes + self.penalty_minutes + self.overtime_minutes

    @property
    def base_hours(self) -> Decimal:
        return hours_from_minutes(self.base_minutes)

    @property
    def penalty_hours(self) -> Decimal:
        return hours_from_minutes(self.penalty_minutes)

    @property
    def overtime_hours(self) -> Decimal:
        return hours_from_minutes(self.overtime_minutes)

    @property
    def total_hours(self) -> Decimal:
        return hours_from_minutes(self.total_minutes)

    @property
    def gross_pay(self) -> Decimal:
        return self.base_pay + self.penalty_pay + self.overtime_pay

    @property
    def total_pay(self) -> Decimal:
        return self.gross_pay


@dataclass
class _WindowTally:
    """Mutable accumulator local to one calculate_shift call."""
    name: str
    minutes: int = 0
    first_tier_minutes: int = 0
    pay: Decimal = ZERO
    periods: list[list[datetime]] = field(default_factory=list)
    stacked: set[str] = field(default_factory=set)

    def add(self, r: ResolvedSegment, pay: Decimal) -> None:
        self.minutes += r.minutes
        self.pay += pay
        seg = r.segment
        if self.periods and self.periods[-1][1] == seg.start:
            self.periods[-1][1] = seg.end
        else:
            self.periods.append([seg.start, seg.end])

    def frozen_periods(self) -> tuple[tuple[datetime, datetime], ...]:
        return tuple((a, b) for a, b in self.periods)


def _segment_pay(r: ResolvedSegment, base_rate: Decimal) -> Decimal:
    return Decimal(r.minutes) / _SIXTY * base_rate * r.effective_multiplier


def _guide_warnings(
    pay_guide: PayGuide, shift: Shift, local_start: date, total_minutes: int
) -> list[str]:
    warnings: list[str] = []
    if not pay_guide.is_active:
        warnings.append(f"Pay guide {pay_guide.id} is inactive")
    if not pay_guide.is_effective_on(local_start):
        warnings.append(
            f"Shift date {local_start.isoformat()} is outside pay guide "
            f"{pay_guide.id} effective range"
        )
    if shift.break_periods and shift.break_minutes:
        warnings.append("break_minutes ignored because break periods are recorded")
    total_hours = Decimal(total_minutes) / _SIXTY
    if pay_guide.minimum_shift_hours is not None and total_hours < pay_guide.minimum_shift_hours:
        warnings.append(
            f"Worked hours {hours_from_minutes(total_minutes).normalize()} below minimum "
            f"shift hours {pay_guide.minimum_shift_hours}; no top-up applied"
        )
    if pay_guide.maximum_shift_hours is not None and total_hours > pay_guide.maximum_shift_hours:
        warnings.append(
            f"Worked hours {hours_from_minutes(total_minutes).normalize()} exceed maximum "
            f"shift hours {pay_guide.maximum_shift_hours}"
        )
    return warnings


@traced_engine("shift_pay", "1.0", fingerprint_fields=("pay_guide", "shift", "overtime_tier_minutes"))
def calculate_shift(
    pay_guide: PayGuide,
    public_holidays: Iterable[PublicHoliday],
    shift: Shift,
    overtime_tier_minutes: int = DEFAULT_OVERTIME_TIER_MINUTES,
) -> ShiftPayResult:
    """
    Calculate base, penalty and overtime pay for one shift.

    Args:
        pay_guide: Guide the shift is worked under.
        public_holidays: Holidays to honour in addition to the guide's own.
        shift: The shift.
        overtime_tier_minutes: Minutes per overtime window at the first tier.

    Returns:
        ShiftPayResult.

    Raises:
        InvalidShiftRangeError: malformed shift or breaks.
    """
    with LogContext.bind(shift_id=shift.id, pay_guide_id=pay_guide.id):
        segmentation = segment_shift(pay_guide, public_holidays, shift)
        resolution = resolve_segments(segmentation.segments, overtime_tier_minutes)
        base_rate = pay_guide.base_rate

        base_minutes = penalty_minutes = overtime_minutes = 0
        base_exact = penalty_exact = overtime_exact = ZERO
        penalties: dict[str, _WindowTally] = {}
        overtimes: dict[str, _WindowTally] = {}

        for r in resolution.segments:
            pay = _segment_pay(r, base_rate)
            if r.overtime is not None:
                overtime_minutes += r.minutes
                overtime_exact += pay
                tally = overtimes.setdefault(r.overtime.id, _WindowTally(r.overtime.name))
                tally.add(r, pay)
                if r.overtime_tier == 1:
                    tally.first_tier_minutes += r.minutes
                if r.penalty is not None and r.penalty_multiplier != ONE:
                    tally.stacked.add(r.penalty.id)
            elif r.penalty is not None and r.penalty_multiplier != ONE:
                penalty_minutes += r.minutes
                penalty_exact += pay
                penalties.setdefault(r.penalty.id, _WindowTally(r.penalty.name)).add(r, pay)
            else:
                base_minutes += r.minutes
                base_exact += pay

        penalty_frames = {tf.id: tf for tf in pay_guide.penalty_time_frames}
        overtime_frames = {tf.id: tf for tf in pay_guide.overtime_time_frames}

        applied_penalties = tuple(
            AppliedPenalty(
                time_frame_id=tf_id,
                name=t.name,
                multiplier=penalty_frames[tf_id].multiplier,
                minutes=t.minutes,
                hours=hours_from_minutes(t.minutes),
                pay=round_money(t.pay),
                start_time=t.periods[0][0],
                end_time=t.periods[-1][1],
                periods=t.frozen_periods(),
            )
            for tf_id, t in sorted(penalties.items(), key=lambda kv: kv[1].periods[0][0])
        )
        applied_overtimes = tuple(
            AppliedOvertime(
                time_frame_id=tf_id,
                name=t.name,
                first_tier_multiplier=overtime_frames[tf_id].first_three_hours_mult,
                after_tier_multiplier=overtime_frames[tf_id].after_three_hours_mult,
                first_tier_minutes=t.first_tier_minutes,
                after_tier_minutes=t.minutes - t.first_tier_minutes,
                minutes=t.minutes,
                hours=hours_from_minutes(t.minutes),
                pay=round_money(t.pay),
                start_time=t.periods[0][0],
                end_time=t.periods[-1][1],
                periods=t.frozen_periods(),
                stacked_penalty_ids=tuple(sorted(t.stacked)),
            )
            for tf_id, t in sorted(overtimes.items(), key=lambda kv: kv[1].periods[0][0])
        )

        total_minutes = base_minutes + penalty_minutes + overtime_minutes
        warnings = _guide_warnings(
            pay_guide, shift, segmentation.local_start_date, total_minutes
        )

        result = ShiftPayResult(
            shift_id=shift.id,
            pay_guide_id=pay_guide.id,
            base_rate=base_rate,
            base_minutes=base_minutes,
            penalty_minutes=penalty_minutes,
            overtime_minutes=overtime_minutes,
            break_minutes=segmentation.break_minutes,
            base_pay=round_money(base_exact),
            penalty_pay=round_money(penalty_exact),
            overtime_pay=round_money(overtime_exact),
            start_time=segmentation.start,
            end_time=segmentation.end,
            applied_penalties=applied_penalties,
            applied_overtimes=applied_overtimes,
            warnings=tuple(warnings),
        )

        for w in warnings:
            logger.warning("shift_calculation_warning", extra={"warning": w})

        logger.info(
            "shift_calculated",
            extra={
                "total_minutes": total_minutes,
                "base_pay": result.base_pay,
                "penalty_pay": result.penalty_pay,
                "overtime_pay": result.overtime_pay,
                "gross_pay": result.gross_pay,
                "applied_penalty_ids": [p.time_frame_id for p in applied_penalties],
                "applied_overtime_ids": [o.time_frame_id for o in applied_overtimes],
            },
        )
        return result
