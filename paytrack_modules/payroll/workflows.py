"""Pay Period Workflows.

State machines for pay period status.  Two lifecycles are supported:

* standard:   open -> processing -> paid -> verified
* simplified: pending -> verified

``verified`` is the only locked status in both; an explicit ``reopen``
is the way back.
"""

from paytrack_kernel.domain.workflow import Guard, Transition, Workflow
from paytrack_kernel.logging_config import get_logger
from paytrack_modules.payroll.models import PayPeriodStatus

logger = get_logger("modules.payroll.workflows")


# -----------------------------------------------------------------------------
# Guards
# -----------------------------------------------------------------------------

CALCULATION_SUCCEEDS = Guard(
    name="calculation_succeeds",
    description="Pay period recalculates without error",
)

READY_FOR_VERIFICATION = Guard(
    name="ready_for_verification",
    description="Period has ended, has shifts, and every shift has calculated pay",
)

OPEN = PayPeriodStatus.OPEN.value
PROCESSING = PayPeriodStatus.PROCESSING.value
PAID = PayPeriodStatus.PAID.value
VERIFIED = PayPeriodStatus.VERIFIED.value
PENDING = PayPeriodStatus.PENDING.value


# -----------------------------------------------------------------------------
# Standard workflow
# -----------------------------------------------------------------------------

PAY_PERIOD_WORKFLOW = Workflow(
    name="pay_period",
    description="Pay period lifecycle from open to verified",
    initial_state=OPEN,
    states=(OPEN, PROCESSING, PAID, VERIFIED),
    transitions=(
        Transition(OPEN, PROCESSING, action="process", guard=CALCULATION_SUCCEEDS, recalculates=True),
        Transition(PROCESSING, PAID, action="mark_paid"),
        Transition(PROCESSING, OPEN, action="reopen"),
        Transition(PAID, VERIFIED, action="verify", guard=READY_FOR_VERIFICATION),
        Transition(VERIFIED, OPEN, action="reopen"),
    ),
    locked_states=(VERIFIED,),
)


# -----------------------------------------------------------------------------
# Simplified workflow
# -----------------------------------------------------------------------------

SIMPLE_PAY_PERIOD_WORKFLOW = Workflow(
    name="pay_period_simple",
    description="Pay period lifecycle with a single pending status",
    initial_state=PENDING,
    states=(PENDING, VERIFIED),
    transitions=(
        Transition(PENDING, VERIFIED, action="verify", guard=READY_FOR_VERIFICATION),
        Transition(VERIFIED, PENDING, action="reopen"),
    ),
    locked_states=(VERIFIED,),
)


def workflow_for(simplified: bool) -> Workflow:
    """Workflow governing a period on the simplified or standard lifecycle."""
    return SIMPLE_PAY_PERIOD_WORKFLOW if simplified else PAY_PERIOD_WORKFLOW


for _wf in (PAY_PERIOD_WORKFLOW, SIMPLE_PAY_PERIOD_WORKFLOW):
    logger.debug(
        "pay_period_workflow_registered",
        extra={
            "workflow_name": _wf.name,
            "state_count": len(_wf.states),
            "transition_count": len(_wf.transitions),
            "initial_state": _wf.initial_state,
        },
    )
