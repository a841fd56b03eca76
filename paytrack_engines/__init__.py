"""
Module: paytrack_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    calculation engines.  This is the import surface for the payroll
    module's service layer and for callers embedding the engines directly.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May import paytrack_kernel and the frozen payroll models/config.
    MUST NOT import the payroll ORM or service.

Invariants enforced:
    - Purity: engines NEVER call ``datetime.now()`` or ``date.today()``.
      Tax years, "as of" dates and timezones are explicit parameters.
    - Decimal-only arithmetic: floats are forbidden.
    - Determinism: identical inputs always produce identical outputs.

Audit relevance:
    Every engine invocation is traced via ``@traced_engine`` (see
    ``paytrack_engines.tracer``), emitting PAYTRACK_ENGINE_TRACE records
    with engine name, version, input fingerprint and duration.

Usage:
    from paytrack_engines import calculate_shift, aggregate, compute_withholding
"""

from paytrack_engines.pay_period import (
    PayPeriodTotals,
    ReadinessBlocker,
    ReadinessReport,
    aggregate,
    assess_readiness,
)
from paytrack_engines.rate_resolver import (
    ResolutionResult,
    ResolvedSegment,
    resolve_segment,
    resolve_segments,
    select_overtime,
    select_penalty,
)
from paytrack_engines.segmentation import (
    SegmentationResult,
    TimeSegment,
    WindowInstance,
    segment_shift,
)
from paytrack_engines.shift_pay import (
    AppliedOvertime,
    AppliedPenalty,
    ShiftPayResult,
    calculate_shift,
)
from paytrack_engines.tax_brackets import (
    BracketLookup,
    lookup_coefficient,
    resolve_rate_config,
    resolve_scale,
    resolve_stsl_scale,
)
from paytrack_engines.tracer import traced_engine
from paytrack_engines.withholding import (
    WithholdingResult,
    compute_withholding,
    from_weekly,
    to_weekly,
)
from paytrack_engines.year_to_date import YearToDateSummary, year_to_date

__all__ = [
    "segment_shift",
    "SegmentationResult",
    "TimeSegment",
    "WindowInstance",
    "resolve_segment",
    "resolve_segments",
    "select_penalty",
    "select_overtime",
    "ResolvedSegment",
    "ResolutionResult",
    "calculate_shift",
    "ShiftPayResult",
    "AppliedPenalty",
    "AppliedOvertime",
    "resolve_scale",
    "resolve_stsl_scale",
    "resolve_rate_config",
    "lookup_coefficient",
    "BracketLookup",
    "compute_withholding",
    "WithholdingResult",
    "to_weekly",
    "from_weekly",
    "aggregate",
    "assess_readiness",
    "PayPeriodTotals",
    "ReadinessReport",
    "ReadinessBlocker",
    "year_to_date",
    "YearToDateSummary",
    "traced_engine",
]
