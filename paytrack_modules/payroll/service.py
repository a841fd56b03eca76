"""
Pay Period Service (``paytrack_modules.payroll.service``).

Responsibility
--------------
Loads a pay period and everything its calculation needs from the
database, runs the pure pay period aggregator, and writes the per-shift
and per-period results back.  Also answers readiness questions and
applies workflow actions (process, mark_paid, verify, reopen).

Architecture position
---------------------
**Modules layer** -- thin glue.  ``PayPeriodService`` composes the pure
engines in ``paytrack_engines`` with the ORM models in
``paytrack_modules.payroll.orm``.  It reads the clock once per call and
passes dates into the engines explicitly.

Invariants enforced
-------------------
* The writeback of one recalculation runs inside a single SAVEPOINT
  (``session.begin_nested()``): either every shift and the period row are
  updated, or none are.
* A verified period is never recalculated (``PeriodLockedError``).
* Status changes only follow a transition of the period's workflow.

Failure modes
-------------
* ``PayPeriodNotFoundError`` -- unknown period id.
* ``InvalidPeriodTransitionError`` -- action not allowed from the current
  status, or its guard is not satisfied.
* Anything raised by the aggregator propagates after the SAVEPOINT has
  been rolled back.

Audit relevance
---------------
``pay_period_recalculated`` and ``pay_period_transitioned`` events carry
the period id, totals and statuses.  The service never commits; the
outer transaction belongs to the caller (``session_scope``).

Usage::

    with session_scope() as session:
        service = PayPeriodService(session, tax_tables=get_tax_tables())
        totals = service.recalculate(period_id)
"""

from __future__ import annotations

from concurrent.futures import Executor
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from paytrack_config import get_tax_tables
from paytrack_engines.pay_period import (
    PayPeriodTotals,
    ReadinessReport,
    aggregate,
    assess_readiness,
)
from paytrack_engines.year_to_date import YearToDateSummary, year_to_date
from paytrack_kernel.domain.clock import Clock, SystemClock
from paytrack_kernel.domain.tax_year import tax_year_bounds, tax_year_for
from paytrack_kernel.exceptions import (
    InvalidPeriodTransitionError,
    PayPeriodNotFoundError,
    PeriodLockedError,
)
from paytrack_kernel.logging_config import LogContext, get_logger
from paytrack_modules.payroll.config import PayrollConfig
from paytrack_modules.payroll.models import PayPeriodStatus, TaxTables
from paytrack_modules.payroll.orm import (
    PayGuideModel,
    PayPeriodModel,
    ShiftModel,
    TaxSettingsModel,
    as_uuid,
)
from paytrack_modules.payroll.tax_tables import TaxTableRepository
from paytrack_modules.payroll.workflows import workflow_for

logger = get_logger("modules.payroll.service")


class PayPeriodService:
    """
    Recalculate, assess and transition stored pay periods.

    ``tax_tables`` defaults to the YAML tables in ``config.tax_tables_dir``
    when that is set, otherwise to the tables stored in the database
    (``TaxTableRepository``).  Pass ``paytrack_config.get_tax_tables()``
    to use the bundled ones.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        tax_tables: TaxTables | None = None,
        config: PayrollConfig | None = None,
        executor: Executor | None = None,
    ):
        self._session = session
        self._clock = clock or SystemClock()
        self._tax_tables = tax_tables
        self._config = config or PayrollConfig()
        self._executor = executor

    # =========================================================================
    # Loading
    # =========================================================================

    def _get_period(self, pay_period_id: UUID | str) -> PayPeriodModel:
        period = self._session.get(PayPeriodModel, as_uuid(pay_period_id))
        if period is None:
            raise PayPeriodNotFoundError(str(pay_period_id))
        return period

    def _shift_models(self, period: PayPeriodModel) -> list[ShiftModel]:
        stmt = (
            select(ShiftModel)
            .where(ShiftModel.pay_period_id == period.id)
            .order_by(ShiftModel.start_time, ShiftModel.id)
        )
        return list(self._session.scalars(stmt))

    def _tax_tables_for_run(self) -> TaxTables:
        if self._tax_tables is None:
            if self._config.tax_tables_dir is not None:
                self._tax_tables = get_tax_tables(self._config.tax_tables_dir)
            else:
                self._tax_tables = TaxTableRepository(self._session).load()
        return self._tax_tables

    def _tax_settings(self):
        row = self._session.scalars(
            select(TaxSettingsModel).order_by(TaxSettingsModel.created_at).limit(1)
        ).first()
        return row.to_dto() if row is not None else None

    # =========================================================================
    # Recalculation
    # =========================================================================

    def recalculate(self, pay_period_id: UUID | str) -> PayPeriodTotals:
        """
        Recompute every shift in the period and the period's totals.

        Raises:
            PayPeriodNotFoundError: Unknown period.
            PeriodLockedError: The period is verified.
        """
        period = self._get_period(pay_period_id)
        with LogContext.bind(pay_period_id=period.id):
            return self._recalculate(period)

    def _recalculate(self, period: PayPeriodModel) -> PayPeriodTotals:
        period_dto = period.to_dto()
        if period_dto.is_locked:
            raise PeriodLockedError(period_dto.id, period_dto.status.value)

        shift_models = self._shift_models(period)
        shifts = [m.to_dto() for m in shift_models]
        guide_ids = {as_uuid(s.pay_guide_id) for s in shifts}
        guides = {}
        if guide_ids:
            stmt = select(PayGuideModel).where(PayGuideModel.id.in_(guide_ids))
            guides = {str(g.id): g.to_dto() for g in self._session.scalars(stmt)}

        totals = aggregate(
            shifts,
            period_dto.extras,
            guides,
            (),
            self._tax_settings(),
            self._tax_tables_for_run(),
            pay_period_id=period_dto.id,
            period_status=period_dto.status,
            pay_period_type=period_dto.pay_period_type,
            period_end=period_dto.end_date,
            actual_pay=period_dto.actual_pay,
            executor=self._executor,
            config=self._config,
        )

        results = totals.results_by_shift_id
        with self._session.begin_nested():
            for model in shift_models:
                result = results[str(model.id)]
                model.total_hours = result.total_hours
                model.base_pay = result.base_pay
                model.penalty_pay = result.penalty_pay
                model.overtime_pay = result.overtime_pay
                model.total_pay = result.total_pay
            period.total_hours = totals.total_hours
            period.total_pay = totals.total_pay
            period.payg_withholding = totals.payg_withholding
            period.medicare_levy = totals.medicare_levy
            period.hecs_help_amount = totals.hecs_help_amount
            period.total_withholdings = totals.total_withholdings
            period.net_pay = totals.net_pay
            period.calculated_at = self._clock.now_utc()
            self._session.flush()

        logger.info(
            "pay_period_recalculated",
            extra={
                "shift_count": len(shift_models),
                "total_pay": totals.total_pay,
                "total_withholdings": totals.total_withholdings,
                "net_pay": totals.net_pay,
                "tax_year": totals.tax_year,
                "tax_year_fallback": totals.tax_year_fallback,
                "warning_count": len(totals.warnings),
            },
        )
        return totals

    # =========================================================================
    # Readiness and workflow
    # =========================================================================

    def readiness(self, pay_period_id: UUID | str) -> ReadinessReport:
        """Whether the period can be verified today (default timezone)."""
        period = self._get_period(pay_period_id)
        return self._readiness(period)

    def _readiness(self, period: PayPeriodModel) -> ReadinessReport:
        shifts = [m.to_dto() for m in self._shift_models(period)]
        return assess_readiness(
            period.to_dto(),
            shifts,
            self._clock.today(self._config.default_timezone),
        )

    def year_to_date(
        self, tax_year: str | None = None, verified_only: bool = False
    ) -> YearToDateSummary:
        """Totals of the calculated periods ending in ``tax_year`` (default: the current one)."""
        if tax_year is None:
            tax_year = tax_year_for(self._clock.today(self._config.default_timezone))
        first, last = tax_year_bounds(tax_year)
        stmt = (
            select(PayPeriodModel)
            .where(PayPeriodModel.end_date >= first, PayPeriodModel.end_date <= last)
            .order_by(PayPeriodModel.end_date)
        )
        periods = [m.to_dto() for m in self._session.scalars(stmt)]
        return year_to_date(periods, tax_year, verified_only=verified_only)

    def transition(self, pay_period_id: UUID | str, action: str) -> PayPeriodStatus:
        """
        Apply a workflow ``action`` to the period and return its new status.

        ``process`` recalculates first and only moves the period when the
        calculation succeeds.  ``verify`` requires a ready period.

        Raises:
            PayPeriodNotFoundError: Unknown period.
            InvalidPeriodTransitionError: Action not allowed from the current
                status, or the period is not ready to be verified.
        """
        period = self._get_period(pay_period_id)
        workflow = workflow_for(period.simplified_workflow)
        current = period.status
        step = workflow.find_transition(current, action)
        if step is None:
            raise InvalidPeriodTransitionError(str(period.id), current, action)

        with LogContext.bind(pay_period_id=period.id):
            if step.recalculates:
                self._recalculate(period)
            if step.to_state == PayPeriodStatus.VERIFIED.value:
                report = self._readiness(period)
                if not report.ready:
                    logger.warning(
                        "pay_period_not_ready",
                        extra={"blockers": list(report.blocker_codes)},
                    )
                    raise InvalidPeriodTransitionError(str(period.id), current, action)

            with self._session.begin_nested():
                period.status = step.to_state
                period.verified = step.to_state == PayPeriodStatus.VERIFIED.value
                self._session.flush()

            logger.info(
                "pay_period_transitioned",
                extra={
                    "workflow": workflow.name,
                    "action": action,
                    "from_status": current,
                    "to_status": step.to_state,
                },
            )
        return PayPeriodStatus(step.to_state)
