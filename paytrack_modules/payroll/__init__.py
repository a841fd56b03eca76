"""
Payroll Module (``paytrack_modules.payroll``).

Responsibility
--------------
Shift pay and pay period bookkeeping: pay guides and their penalty and
overtime windows, shifts with breaks, taxpayer settings, tax reference
tables, pay periods with extras, and the workflows pay periods follow.

Architecture position
---------------------
**Modules layer** -- frozen models, workflows and config schema are
exported here.  The ORM models, ``PayPeriodService`` and
``TaxTableRepository`` are imported from their own submodules because
they depend on ``paytrack_engines``, which itself imports these models.

Invariants enforced
-------------------
* Models are immutable and Decimal-only.
* ``verified`` is the only locked pay period status.

Failure modes
-------------
* ``InvalidTimeFrameError`` / ``ValueError`` on malformed model values.
"""

from paytrack_modules.payroll.config import PayrollConfig
from paytrack_modules.payroll.models import (
    BreakPeriod,
    MedicareExemption,
    OvertimeTimeFrame,
    PayGuide,
    PayPeriod,
    PayPeriodExtra,
    PayPeriodStatus,
    PayPeriodType,
    PenaltyTimeFrame,
    PublicHoliday,
    Shift,
    StslRate,
    StslScale,
    TaxCoefficient,
    TaxRateConfig,
    TaxScale,
    TaxSettings,
    TaxTables,
)
from paytrack_modules.payroll.workflows import (
    PAY_PERIOD_WORKFLOW,
    SIMPLE_PAY_PERIOD_WORKFLOW,
    workflow_for,
)

__all__ = [
    "BreakPeriod",
    "MedicareExemption",
    "OvertimeTimeFrame",
    "PayGuide",
    "PayPeriod",
    "PayPeriodExtra",
    "PayPeriodStatus",
    "PayPeriodType",
    "PenaltyTimeFrame",
    "PublicHoliday",
    "Shift",
    "StslRate",
    "StslScale",
    "TaxCoefficient",
    "TaxRateConfig",
    "TaxScale",
    "TaxSettings",
    "TaxTables",
    "PAY_PERIOD_WORKFLOW",
    "SIMPLE_PAY_PERIOD_WORKFLOW",
    "workflow_for",
    "PayrollConfig",
]
