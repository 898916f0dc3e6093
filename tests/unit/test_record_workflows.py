"""
Lifecycle state machines.

Exhaustive checks over every declared workflow: only declared transitions
resolve, terminal states are dead ends, and the definitions are closed
over their own states.
"""

import pytest

from workforce_kernel.domain.workflow import Transition, Workflow, apply_transition
from workforce_kernel.exceptions import InvalidTransitionError
from workforce_modules.assets.workflows import ASSET_WORKFLOW
from workforce_modules.leave.workflows import LEAVE_REQUEST_WORKFLOW
from workforce_modules.payroll.workflows import PAYROLL_RUN_WORKFLOW

ALL_WORKFLOWS = [
    ("Leave Request", LEAVE_REQUEST_WORKFLOW),
    ("Payroll Run", PAYROLL_RUN_WORKFLOW),
    ("Company Asset", ASSET_WORKFLOW),
]


def _actions(workflow) -> set[str]:
    return {t.action for t in workflow.transitions}


@pytest.mark.parametrize("label,workflow", ALL_WORKFLOWS)
class TestWorkflowDefinitions:
    def test_initial_state_declared(self, label, workflow):
        assert workflow.initial_state in workflow.states

    def test_transitions_reference_known_states(self, label, workflow):
        for t in workflow.transitions:
            assert t.from_state in workflow.states
            assert t.to_state in workflow.states

    def test_terminal_states_have_no_outgoing_actions(self, label, workflow):
        for state in workflow.terminal_states:
            for action in _actions(workflow):
                with pytest.raises(InvalidTransitionError):
                    apply_transition(workflow, state, action)

    def test_every_declared_transition_resolves(self, label, workflow):
        for t in workflow.transitions:
            assert apply_transition(workflow, t.from_state, t.action) == t

    def test_undeclared_pairs_rejected(self, label, workflow):
        declared = {(t.from_state, t.action) for t in workflow.transitions}
        for state in workflow.states:
            for action in _actions(workflow):
                if (state, action) in declared:
                    continue
                with pytest.raises(InvalidTransitionError) as exc_info:
                    apply_transition(workflow, state, action)
                assert exc_info.value.workflow == workflow.name
                assert exc_info.value.current_state == state


class TestLeaveRequestWorkflow:
    def test_pending_to_approved(self):
        assert apply_transition(LEAVE_REQUEST_WORKFLOW, "Pending", "approve").to_state == "Approved"

    def test_no_path_back_to_pending(self):
        assert all(t.to_state != "Pending" for t in LEAVE_REQUEST_WORKFLOW.transitions)


class TestAssetWorkflow:
    def test_assigned_asset_cannot_be_retired_directly(self):
        with pytest.raises(InvalidTransitionError):
            apply_transition(ASSET_WORKFLOW, "Assigned", "retire")

    def test_assigned_asset_can_go_to_repair(self):
        assert apply_transition(ASSET_WORKFLOW, "Assigned", "send_to_repair").to_state == "In Repair"


class TestWorkflowValidation:
    def test_unknown_initial_state_rejected(self):
        with pytest.raises(ValueError):
            Workflow(
                name="bad",
                description="",
                initial_state="Nowhere",
                states=("A",),
                transitions=(),
            )

    def test_transition_to_unknown_state_rejected(self):
        with pytest.raises(ValueError):
            Workflow(
                name="bad",
                description="",
                initial_state="A",
                states=("A",),
                transitions=(Transition("A", "B", action="go"),),
            )

    def test_terminal_state_with_outgoing_transition_rejected(self):
        with pytest.raises(ValueError):
            Workflow(
                name="bad",
                description="",
                initial_state="A",
                states=("A", "B"),
                transitions=(Transition("B", "A", action="reopen"),),
                terminal_states=("B",),
            )
