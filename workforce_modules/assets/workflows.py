"""
Asset Workflows.

State machine for company asset custody.  RETIRED is terminal.
"""

from workforce_kernel.domain.records import AssetStatus
from workforce_kernel.domain.workflow import Guard, Transition, Workflow
from workforce_kernel.logging_config import get_logger

logger = get_logger("modules.assets.workflows")

_AVAILABLE = AssetStatus.AVAILABLE.value
_ASSIGNED = AssetStatus.ASSIGNED.value
_IN_REPAIR = AssetStatus.IN_REPAIR.value
_RETIRED = AssetStatus.RETIRED.value


EMPLOYEE_ACTIVE = Guard(
    name="employee_active",
    description="Assignee exists and is not offboarded",
)

ASSET_WORKFLOW = Workflow(
    name="company_asset",
    description="Company asset custody lifecycle",
    initial_state=_AVAILABLE,
    states=(_AVAILABLE, _ASSIGNED, _IN_REPAIR, _RETIRED),
    transitions=(
        Transition(_AVAILABLE, _ASSIGNED, action="assign", guard=EMPLOYEE_ACTIVE),
        Transition(_ASSIGNED, _AVAILABLE, action="return"),
        Transition(_AVAILABLE, _IN_REPAIR, action="send_to_repair"),
        Transition(_ASSIGNED, _IN_REPAIR, action="send_to_repair"),
        Transition(_IN_REPAIR, _AVAILABLE, action="complete_repair"),
        Transition(_AVAILABLE, _RETIRED, action="retire"),
        Transition(_IN_REPAIR, _RETIRED, action="retire"),
    ),
    terminal_states=(_RETIRED,),
)

logger.info(
    "asset_workflow_registered",
    extra={
        "workflow_name": ASSET_WORKFLOW.name,
        "state_count": len(ASSET_WORKFLOW.states),
        "transition_count": len(ASSET_WORKFLOW.transitions),
    },
)
