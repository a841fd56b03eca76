"""
Tests for workflow value objects and the pay period lifecycles.

Covers:
- Workflow construction validation
- Transition lookup and locked states
- The standard and simplified pay period workflows
"""

import pytest

from paytrack_kernel.domain.workflow import Guard, Transition, Workflow
from paytrack_modules.payroll.workflows import (
    PAY_PERIOD_WORKFLOW,
    SIMPLE_PAY_PERIOD_WORKFLOW,
    workflow_for,
)


class TestWorkflowValidation:

    def test_initial_state_must_exist(self):
        with pytest.raises(ValueError, match="initial state"):
            Workflow(name="w", description="", initial_state="x", states=("a",), transitions=())

    def test_transition_states_must_exist(self):
        with pytest.raises(ValueError, match="unknown state"):
            Workflow(
                name="w", description="", initial_state="a", states=("a",),
                transitions=(Transition("a", "b", action="go"),),
            )

    def test_duplicate_action_rejected(self):
        with pytest.raises(ValueError, match="duplicate action"):
            Workflow(
                name="w", description="", initial_state="a", states=("a", "b", "c"),
                transitions=(Transition("a", "b", action="go"), Transition("a", "c", action="go")),
            )

    def test_locked_state_must_exist(self):
        with pytest.raises(ValueError):
            Workflow(
                name="w", description="", initial_state="a", states=("a",),
                transitions=(), locked_states=("z",),
            )


class TestStandardWorkflow:
    """open -> processing -> paid -> verified, with reopen."""

    @pytest.mark.parametrize(
        "from_state, action, to_state",
        [
            ("open", "process", "processing"),
            ("processing", "mark_paid", "paid"),
            ("processing", "reopen", "open"),
            ("paid", "verify", "verified"),
            ("verified", "reopen", "open"),
        ],
    )
    def test_transitions(self, from_state, action, to_state):
        assert PAY_PERIOD_WORKFLOW.find_transition(from_state, action).to_state == to_state

    def test_no_shortcut_to_verified(self):
        assert PAY_PERIOD_WORKFLOW.find_transition("open", "verify") is None

    def test_process_recalculates(self):
        step = PAY_PERIOD_WORKFLOW.find_transition("open", "process")

        assert step.recalculates is True
        assert step.guard.name == "calculation_succeeds"

    def test_verify_is_guarded(self):
        assert PAY_PERIOD_WORKFLOW.find_transition("paid", "verify").guard.name == "ready_for_verification"

    def test_only_verified_is_locked(self):
        assert [s for s in PAY_PERIOD_WORKFLOW.states if PAY_PERIOD_WORKFLOW.is_locked(s)] == ["verified"]

    def test_actions_from(self):
        assert PAY_PERIOD_WORKFLOW.actions_from("processing") == ("mark_paid", "reopen")


class TestSimplifiedWorkflow:

    def test_pending_to_verified_and_back(self):
        assert SIMPLE_PAY_PERIOD_WORKFLOW.initial_state == "pending"
        assert SIMPLE_PAY_PERIOD_WORKFLOW.find_transition("pending", "verify").to_state == "verified"
        assert SIMPLE_PAY_PERIOD_WORKFLOW.find_transition("verified", "reopen").to_state == "pending"
        assert SIMPLE_PAY_PERIOD_WORKFLOW.find_transition("pending", "process") is None

    def test_workflow_for(self):
        assert workflow_for(True) is SIMPLE_PAY_PERIOD_WORKFLOW
        assert workflow_for(False) is PAY_PERIOD_WORKFLOW


class TestGuard:

    def test_guard_is_frozen(self):
        guard = Guard(name="g", description="d")

        with pytest.raises(AttributeError):
            guard.name = "other"
