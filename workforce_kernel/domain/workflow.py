"""
Canonical workflow types (``workforce_kernel.domain.workflow``).

Responsibility
--------------
Pure value objects for record lifecycle state machines.  Leave requests,
payroll runs and company assets declare their lifecycles with Guard,
Transition and Workflow so that every status change goes through
``apply_transition``.

Architecture position
---------------------
**Kernel domain layer** -- pure value objects.  ZERO I/O.

Invariants enforced
-------------------
* Transitions reference only states in ``Workflow.states``.
* ``initial_state`` is a member of ``states``.
* Terminal states have no outgoing transitions; any action from a
  terminal state raises ``InvalidTransitionError``.
"""

from __future__ import annotations

from dataclasses import dataclass

from workforce_kernel.exceptions import InvalidTransitionError


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
    """A valid state transition in a workflow."""
    from_state: str
    to_state: str
    action: str
    guard: Guard | None = None


@dataclass(frozen=True)
class Workflow:
    """A state machine definition for a record lifecycle.

    Contract: frozen; ``transitions`` reference only states in ``states``.
    ``terminal_states`` are states with no outgoing transitions.
    """
    name: str
    description: str
    initial_state: str
    states: tuple[str, ...]
    transitions: tuple[Transition, ...]
    terminal_states: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.initial_state not in self.states:
            raise ValueError(
                f"Workflow {self.name}: initial state "
                f"'{self.initial_state}' not in states"
            )
        for t in self.transitions:
            if t.from_state not in self.states or t.to_state not in self.states:
                raise ValueError(
                    f"Workflow {self.name}: transition {t.action} references "
                    f"unknown state"
                )
            if t.from_state in self.terminal_states:
                raise ValueError(
                    f"Workflow {self.name}: terminal state "
                    f"'{t.from_state}' has outgoing transition {t.action}"
                )


def apply_transition(workflow: Workflow, current_state: str, action: str) -> Transition:
    """Resolve the transition for ``action`` from ``current_state``.

    Raises:
        InvalidTransitionError: no such transition exists.
    """
    for transition in workflow.transitions:
        if transition.from_state == current_state and transition.action == action:
            return transition
    raise InvalidTransitionError(workflow.name, current_state, action)
