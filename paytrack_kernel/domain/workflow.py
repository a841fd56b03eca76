"""
Canonical workflow types (``paytrack_kernel.domain.workflow``).

Responsibility
--------------
Pure value objects for status state machines.  The pay period module
declares its standard and simplified lifecycles with these so that
Guard, Transition and Workflow are defined once.

Architecture position
---------------------
**Kernel domain layer** -- pure value objects.  ZERO I/O.  No imports
from ``db/``, modules, or engines.

Invariants enforced
-------------------
* Transitions reference only states in ``Workflow.states``.
* ``initial_state`` is a member of ``states``.
* At most one transition per (from_state, action) pair.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Guard:
    """A condition that must be satisfied before a transition fires.

    Contract: frozen, descriptive only.
    Non-goals: does not evaluate the condition -- the owning service does.
    """
    name: str
    description: str


@dataclass(frozen=True)
class Transition:
    """A valid status transition.

    ``recalculates=True`` marks a transition whose owner must rerun the
    pay calculation before the status changes.
    """
    from_state: str
    to_state: str
    action: str
    guard: Guard | None = None
    recalculates: bool = False


@dataclass(frozen=True)
class Workflow:
    """A state machine definition for a record lifecycle.

    ``locked_states`` are statuses in which the record's computed values
    must not change; only an explicit transition out of them unlocks it.
    """
    name: str
    description: str
    initial_state: str
    states: tuple[str, ...]
    transitions: tuple[Transition, ...]
    terminal_states: tuple[str, ...] = ()
    locked_states: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.initial_state not in self.states:
            raise ValueError(
                f"Workflow {self.name}: initial state {self.initial_state!r} not in states"
            )
        seen: set[tuple[str, str]] = set()
        for t in self.transitions:
            if t.from_state not in self.states or t.to_state not in self.states:
                raise ValueError(
                    f"Workflow {self.name}: transition {t.action!r} references unknown state"
                )
            key = (t.from_state, t.action)
            if key in seen:
                raise ValueError(
                    f"Workflow {self.name}: duplicate action {t.action!r} from {t.from_state!r}"
                )
            seen.add(key)
        for s in self.locked_states + self.terminal_states:
            if s not in self.states:
                raise ValueError(f"Workflow {self.name}: unknown state {s!r}")

    def find_transition(self, from_state: str, action: str) -> Transition | None:
        """The transition for ``action`` out of ``from_state``, if any."""
        for t in self.transitions:
            if t.from_state == from_state and t.action == action:
                return t
        return None

    def actions_from(self, state: str) -> tuple[str, ...]:
        """Actions available from ``state``, in declaration order."""
        return tuple(t.action for t in self.transitions if t.from_state == state)

    def is_locked(self, state: str) -> bool:
        return state in self.locked_states
