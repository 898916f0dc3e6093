"""Leave Workflows.

State machine for leave requests.  APPROVED and REJECTED are terminal:
there is no path back to PENDING.
"""

from workforce_kernel.domain.records import LeaveStatus
from workforce_kernel.domain.workflow import Guard, Transition, Workflow
from workforce_kernel.logging_config import get_logger

logger = get_logger("modules.leave.workflows")


BALANCE_AVAILABLE = Guard(
    name="balance_available",
    description="Employee ledger has the leave type and enough remaining days",
)

LEAVE_REQUEST_WORKFLOW = Workflow(
    name="leave_request",
    description="Leave request approval lifecycle",
    initial_state=LeaveStatus.PENDING.value,
    states=(
        LeaveStatus.PENDING.value,
        LeaveStatus.APPROVED.value,
        LeaveStatus.REJECTED.value,
    ),
    transitions=(
        Transition(
            LeaveStatus.PENDING.value,
            LeaveStatus.APPROVED.value,
            action="approve",
            guard=BALANCE_AVAILABLE,
        ),
        Transition(LeaveStatus.PENDING.value, LeaveStatus.REJECTED.value, action="reject"),
    ),
    terminal_states=(LeaveStatus.APPROVED.value, LeaveStatus.REJECTED.value),
)

logger.info(
    "leave_request_workflow_registered",
    extra={
        "workflow_name": LEAVE_REQUEST_WORKFLOW.name,
        "state_count": len(LEAVE_REQUEST_WORKFLOW.states),
        "transition_count": len(LEAVE_REQUEST_WORKFLOW.transitions),
    },
)
