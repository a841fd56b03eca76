"""
Time Segmentation Engine (``paytrack_engines.segmentation``).

Responsibility
--------------
Split a shift's working time into ordered, disjoint, minute-granular
segments and tag each segment with the penalty and overtime window
instances that cover it.

Architecture position
---------------------
**Engines layer** -- pure functional core.  ZERO I/O, ZERO database,
ZERO clock reads.  Imports only the kernel and the frozen payroll models.

Algorithm
---------
1. Normalise shift and break timestamps: naive values are read in the pay
   guide timezone, everything is converted to UTC and truncated to the
   minute.
2. Remove breaks.  Structured break periods are cut out where they sit;
   a bare ``break_minutes`` count is taken off the tail of the shift.
3. Project every active window onto each local day the shift touches
   (plus the day before, for windows that wrap past midnight).  A window
   applies on a day when its day-of-week matches (0 = Sunday) or is unset
   and, for public-holiday windows, the day is a holiday.
4. Collect boundaries (working interval edges, window instance edges and
   local midnights), sort, dedupe, and emit one segment per working
   elementary interval with the window instances that contain it.

Invariants enforced
-------------------
* Segments are disjoint, chronological, non-empty, and their minutes sum
  to the working minutes of the shift.
* Each segment lies inside a single local calendar day.
* Window tags are ordered by time frame id, so the output does not depend
  on the order windows were configured in.

Failure modes
-------------
* ``InvalidShiftRangeError`` -- end <= start (compared before truncation), a
  break inverted, outside the shift or overlapping another break, or
  ``break_minutes`` longer than the shift.  A shift shorter than a minute
  after truncation yields no segments, not an error.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import UTC, date, datetime, time, timedelta
from zoneinfo import ZoneInfo

from paytrack_kernel.exceptions import InvalidShiftRangeError
from paytrack_kernel.logging_config import get_logger
from paytrack_modules.payroll.models import (
    MINUTES_PER_DAY,
    OvertimeTimeFrame,
    PayGuide,
    PenaltyTimeFrame,
    PublicHoliday,
    Shift,
    TimeFrame,
)

from paytrack_engines.tracer import traced_engine

logger = get_logger("engines.segmentation")

Interval = tuple[datetime, datetime]


@dataclass(frozen=True)
class WindowInstance:
    """One time frame projected onto one local day, clipped to the shift."""
    time_frame: TimeFrame
    day: date
    start: datetime
    end: datetime


@dataclass(frozen=True)
class TimeSegment:
    """A maximal run of working time with a constant set of covering windows."""
    start: datetime
    end: datetime
    local_date: date
    penalty_windows: tuple[WindowInstance, ...] = ()
    overtime_windows: tuple[WindowInstance, ...] = ()

    @property
    def minutes(self) -> int:
        return _minutes_between(self.start, self.end)

    @property
    def day_of_week(self) -> int:
        """0 = Sunday ... 6 = Saturday."""
        return (self.local_date.weekday() + 1) % 7


@dataclass(frozen=True)
class SegmentationResult:
    """Segments of one shift plus the normalised shift geometry."""
    shift_id: str
    start: datetime
    end: datetime
    timezone: str
    segments: tuple[TimeSegment, ...]
    elapsed_minutes: int
    break_minutes: int

    @property
    def working_minutes(self) -> int:
        return self.elapsed_minutes - self.break_minutes

    @property
    def local_start_date(self) -> date:
        return self.start.astimezone(ZoneInfo(self.timezone)).date()


def _minutes_between(start: datetime, end: datetime) -> int:
    return int((end - start).total_seconds()) // 60


def _to_utc(value: datetime, zone: ZoneInfo) -> datetime:
    if value.tzinfo is None:
        value = value.replace(tzinfo=zone)
    return value.astimezone(UTC)


def normalize_instant(value: datetime, zone: ZoneInfo) -> datetime:
    """Aware UTC instant truncated to the minute; naive values are local to ``zone``."""
    return _to_utc(value, zone).replace(second=0, microsecond=0)


def holiday_dates(
    pay_guide: PayGuide,
    public_holidays: Iterable[PublicHoliday] = (),
) -> frozenset[date]:
    """Active holiday dates from the guide and any extra holidays supplied."""
    return frozenset(
        h.date
        for h in (*pay_guide.public_holidays, *public_holidays)
        if h.is_active
    )


def _validate_breaks(shift: Shift, zone: ZoneInfo, start: datetime, end: datetime) -> list[Interval]:
    """Exact (untruncated) break intervals, sorted, checked against the shift."""
    breaks = sorted(
        (_to_utc(b.start_time, zone), _to_utc(b.end_time, zone))
        for b in shift.break_periods
    )
    cursor = start
    for b_start, b_end in breaks:
        if b_end <= b_start:
            raise InvalidShiftRangeError(
                "break end must be after break start",
                start_time=b_start,
                end_time=b_end,
                shift_id=shift.id,
            )
        if b_start < start or b_end > end:
            raise InvalidShiftRangeError(
                "break lies outside the shift",
                start_time=b_start,
                end_time=b_end,
                shift_id=shift.id,
            )
        if b_start < cursor:
            raise InvalidShiftRangeError(
                "break periods overlap",
                start_time=b_start,
                end_time=b_end,
                shift_id=shift.id,
            )
        cursor = b_end
    return breaks


def working_intervals(shift: Shift, zone: ZoneInfo) -> tuple[Interval, tuple[Interval, ...]]:
    """
    Normalised shift span and the working intervals left after breaks.

    Ranges are validated on the exact instants, then truncated to the
    minute.  A shift or break shorter than a minute may truncate to
    nothing; it then contributes no working time instead of failing.

    Raises:
        InvalidShiftRangeError: see module docstring.
    """
    exact_start = _to_utc(shift.start_time, zone)
    exact_end = _to_utc(shift.end_time, zone)
    if exact_end <= exact_start:
        raise InvalidShiftRangeError(
            "end time must be after start time",
            start_time=shift.start_time,
            end_time=shift.end_time,
            shift_id=shift.id,
        )
    breaks = _validate_breaks(shift, zone, exact_start, exact_end)

    start = normalize_instant(exact_start, zone)
    end = normalize_instant(exact_end, zone)

    if not breaks:
        total = _minutes_between(start, end)
        if shift.break_minutes > total:
            raise InvalidShiftRangeError(
                f"break minutes ({shift.break_minutes}) exceed shift length ({total})",
                start_time=shift.start_time,
                end_time=shift.end_time,
                shift_id=shift.id,
            )
        cut = end - timedelta(minutes=shift.break_minutes)
        return (start, end), (((start, cut),) if cut > start else ())

    intervals: list[Interval] = []
    cursor = start
    for b_start, b_end in breaks:
        b_start = normalize_instant(b_start, zone)
        b_end = normalize_instant(b_end, zone)
        if b_end <= b_start:
            continue
        if b_start > cursor:
            intervals.append((cursor, b_start))
        cursor = max(cursor, b_end)
    if cursor < end:
        intervals.append((cursor, end))
    return (start, end), tuple(intervals)


def _local_instant(day: date, minute_of_day: int, zone: ZoneInfo) -> datetime:
    """UTC instant of ``minute_of_day`` minutes after local midnight of ``day``."""
    d = day + timedelta(days=minute_of_day // MINUTES_PER_DAY)
    m = minute_of_day % MINUTES_PER_DAY
    return datetime.combine(d, time(m // 60, m % 60), tzinfo=zone).astimezone(UTC)


def _local_days(span_start: datetime, span_end: datetime, zone: ZoneInfo) -> list[date]:
    first = span_start.astimezone(zone).date()
    last = span_end.astimezone(zone).date()
    return [first + timedelta(days=i) for i in range((last - first).days + 1)]


def project_windows(
    time_frames: Sequence[TimeFrame],
    span: Interval,
    zone: ZoneInfo,
    holidays: frozenset[date],
) -> tuple[WindowInstance, ...]:
    """Window instances overlapping ``span``, clipped to it."""
    span_start, span_end = span
    days = _local_days(span_start, span_end, zone)
    # A window starting the day before can wrap into the shift.
    days.insert(0, days[0] - timedelta(days=1))

    out: list[WindowInstance] = []
    for day in days:
        for tf in time_frames:
            if not tf.applies_on(day, holidays):
                continue
            w_start = _local_instant(day, tf.start_minute, zone)
            w_end = _local_instant(day, tf.end_minute, zone)
            if w_start < span_end and w_end > span_start and w_end > w_start:
                out.append(
                    WindowInstance(
                        time_frame=tf,
                        day=day,
                        start=max(w_start, span_start),
                        end=min(w_end, span_end),
                    )
                )
    return tuple(out)


def _covering(
    instances: Sequence[WindowInstance], start: datetime, end: datetime
) -> tuple[WindowInstance, ...]:
    hits = [w for w in instances if w.start <= start and end <= w.end]
    return tuple(sorted(hits, key=lambda w: (w.time_frame.id, w.day)))


@traced_engine("segmentation", "1.0", fingerprint_fields=("pay_guide", "shift"))
def segment_shift(
    pay_guide: PayGuide,
    public_holidays: Iterable[PublicHoliday],
    shift: Shift,
) -> SegmentationResult:
    """
    Partition the shift's working time into window-tagged segments.

    Args:
        pay_guide: Guide supplying timezone, windows and its own holidays.
        public_holidays: Additional holidays to honour (merged with the guide's).
        shift: The shift to segment.

    Returns:
        SegmentationResult whose segments cover exactly the working time.

    Raises:
        InvalidShiftRangeError: malformed shift or breaks.
    """
    zone = ZoneInfo(pay_guide.timezone)
    span, intervals = working_intervals(shift, zone)
    span_start, span_end = span
    elapsed = _minutes_between(span_start, span_end)
    worked = sum(_minutes_between(a, b) for a, b in intervals)

    holidays = holiday_dates(pay_guide, public_holidays)
    penalties = project_windows(
        [tf for tf in pay_guide.penalty_time_frames if isinstance(tf, PenaltyTimeFrame)],
        span, zone, holidays,
    )
    overtimes = project_windows(
        [tf for tf in pay_guide.overtime_time_frames if isinstance(tf, OvertimeTimeFrame)],
        span, zone, holidays,
    )

    boundaries: set[datetime] = {span_start, span_end}
    for a, b in intervals:
        boundaries.update((a, b))
    for w in (*penalties, *overtimes):
        boundaries.update((w.start, w.end))
    for day in _local_days(span_start, span_end, zone)[1:]:
        boundaries.add(_local_instant(day, 0, zone))
    ordered = sorted(b for b in boundaries if span_start <= b <= span_end)

    segments: list[TimeSegment] = []
    for a, b in zip(ordered, ordered[1:]):
        if _minutes_between(a, b) <= 0:
            continue
        if not any(ws <= a and b <= we for ws, we in intervals):
            continue
        segments.append(
            TimeSegment(
                start=a,
                end=b,
                local_date=a.astimezone(zone).date(),
                penalty_windows=_covering(penalties, a, b),
                overtime_windows=_covering(overtimes, a, b),
            )
        )

    logger.debug(
        "shift_segmented",
        extra={
            "shift_id": shift.id,
            "segment_count": len(segments),
            "working_minutes": worked,
            "penalty_instances": len(penalties),
            "overtime_instances": len(overtimes),
        },
    )

    return SegmentationResult(
        shift_id=shift.id,
        start=span_start,
        end=span_end,
        timezone=pay_guide.timezone,
        segments=tuple(segments),
        elapsed_minutes=elapsed,
        break_minutes=elapsed - worked,
    )
