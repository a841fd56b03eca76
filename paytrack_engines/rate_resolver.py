"""
Rate Rule Resolver (``paytrack_engines.rate_resolver``).

Responsibility
--------------
Pick exactly one penalty window and at most one overtime window for each
segment, and assign the overtime tier from cumulative minutes already
spent in that overtime window earlier in the same shift.

Architecture position
---------------------
**Engines layer** -- pure functional core.  ZERO I/O.

Resolution rules
----------------
* Highest ``priority`` wins.  On a tie the higher multiplier wins; on a
  further tie the lower time frame id wins, so the choice never depends
  on configuration order.
* A segment with no penalty window is paid at the base rate (multiplier 1).
* Overtime windows use the same ordering, comparing the first-tier then
  the after-tier multiplier.
* The first ``overtime_tier_minutes`` (default 180) minutes spent in an
  overtime window, cumulative across the shift and not necessarily
  contiguous, use ``first_three_hours_mult``; later minutes use
  ``after_three_hours_mult``.  A segment straddling the tier boundary is
  split in two.

Invariants enforced
-------------------
* The cumulative minutes are an explicit ledger (window id -> minutes)
  threaded through the fold over chronologically sorted segments; no
  state survives between calls.
* Resolved segments cover exactly the input segments.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, replace
from datetime import timedelta
from decimal import Decimal

from paytrack_kernel.logging_config import get_logger
from paytrack_modules.payroll.models import OvertimeTimeFrame, PenaltyTimeFrame

from paytrack_engines.segmentation import TimeSegment, WindowInstance
from paytrack_engines.tracer import traced_engine

logger = get_logger("engines.rate_resolver")

ONE = Decimal("1")
DEFAULT_OVERTIME_TIER_MINUTES = 180

OvertimeLedger = Mapping[str, int]


@dataclass(frozen=True)
class ResolvedSegment:
    """A segment with its winning penalty and overtime rules."""
    segment: TimeSegment
    penalty: PenaltyTimeFrame | None = None
    overtime: OvertimeTimeFrame | None = None
    overtime_tier: int | None = None

    @property
    def minutes(self) -> int:
        return self.segment.minutes

    @property
    def penalty_multiplier(self) -> Decimal:
        return self.penalty.multiplier if self.penalty is not None else ONE

    @property
    def overtime_multiplier(self) -> Decimal | None:
        if self.overtime is None:
            return None
        if self.overtime_tier == 1:
            return self.overtime.first_three_hours_mult
        return self.overtime.after_three_hours_mult

    @property
    def effective_multiplier(self) -> Decimal:
        """Overtime stacks on top of a simultaneous penalty by multiplication."""
        ot = self.overtime_multiplier
        return self.penalty_multiplier * ot if ot is not None else self.penalty_multiplier


@dataclass(frozen=True)
class ResolutionResult:
    segments: tuple[ResolvedSegment, ...]
    overtime_minutes: Mapping[str, int]


def _penalty_key(w: WindowInstance) -> tuple:
    tf = w.time_frame
    return (-tf.priority, -tf.multiplier, tf.id)


def _overtime_key(w: WindowInstance) -> tuple:
    tf = w.time_frame
    return (-tf.priority, -tf.first_three_hours_mult, -tf.after_three_hours_mult, tf.id)


def select_penalty(windows: Sequence[WindowInstance]) -> PenaltyTimeFrame | None:
    """Winning penalty window, or None for base rate."""
    if not windows:
        return None
    return min(windows, key=_penalty_key).time_frame


def select_overtime(windows: Sequence[WindowInstance]) -> OvertimeTimeFrame | None:
    if not windows:
        return None
    return min(windows, key=_overtime_key).time_frame


def _split(segment: TimeSegment, minutes: int) -> tuple[TimeSegment, TimeSegment]:
    cut = segment.start + timedelta(minutes=minutes)
    return replace(segment, end=cut), replace(segment, start=cut)


def resolve_segment(
    segment: TimeSegment,
    ledger: OvertimeLedger,
    tier_minutes: int = DEFAULT_OVERTIME_TIER_MINUTES,
) -> tuple[tuple[ResolvedSegment, ...], OvertimeLedger]:
    """
    Resolve one segment against the overtime ledger.

    Returns the resolved piece(s) and a new ledger; ``ledger`` is not
    modified.
    """
    penalty = select_penalty(segment.penalty_windows)
    overtime = select_overtime(segment.overtime_windows)
    if overtime is None:
        return (ResolvedSegment(segment, penalty=penalty),), ledger

    used = ledger.get(overtime.id, 0)
    new_ledger = {**ledger, overtime.id: used + segment.minutes}

    if used >= tier_minutes:
        pieces = (ResolvedSegment(segment, penalty, overtime, overtime_tier=2),)
    elif used + segment.minutes <= tier_minutes:
        pieces = (ResolvedSegment(segment, penalty, overtime, overtime_tier=1),)
    else:
        first, rest = _split(segment, tier_minutes - used)
        pieces = (
            ResolvedSegment(first, penalty, overtime, overtime_tier=1),
            ResolvedSegment(rest, penalty, overtime, overtime_tier=2),
        )
    return pieces, new_ledger


@traced_engine("rate_resolver", "1.0", fingerprint_fields=("segments", "overtime_tier_minutes"))
def resolve_segments(
    segments: Sequence[TimeSegment],
    overtime_tier_minutes: int = DEFAULT_OVERTIME_TIER_MINUTES,
) -> ResolutionResult:
    """Resolve all segments of one shift in chronological order."""
    if overtime_tier_minutes <= 0:
        raise ValueError("overtime_tier_minutes must be positive")

    ledger: OvertimeLedger = {}
    resolved: list[ResolvedSegment] = []
    for segment in sorted(segments, key=lambda s: s.start):
        pieces, ledger = resolve_segment(segment, ledger, overtime_tier_minutes)
        resolved.extend(pieces)

    return ResolutionResult(segments=tuple(resolved), overtime_minutes=dict(ledger))
