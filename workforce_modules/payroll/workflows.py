"""Payroll Workflows.

State machine for payroll run processing.  A run is PENDING only while it
is being assembled in memory; it is persisted once, as COMPLETED, and has
no outgoing transitions after that.
"""

from workforce_kernel.domain.records import PayrollRunStatus
from workforce_kernel.domain.workflow import Guard, Transition, Workflow
from workforce_kernel.logging_config import get_logger

logger = get_logger("modules.payroll.workflows")


COMPLIANCE_SETTINGS_CONFIGURED = Guard(
    name="compliance_settings_configured",
    description="Tenant has an establishment id and bank details on file",
)

PAYROLL_RUN_WORKFLOW = Workflow(
    name="payroll_run",
    description="Payroll run lifecycle",
    initial_state=PayrollRunStatus.PENDING.value,
    states=(PayrollRunStatus.PENDING.value, PayrollRunStatus.COMPLETED.value),
    transitions=(
        Transition(
            PayrollRunStatus.PENDING.value,
            PayrollRunStatus.COMPLETED.value,
            action="complete",
            guard=COMPLIANCE_SETTINGS_CONFIGURED,
        ),
    ),
    terminal_states=(PayrollRunStatus.COMPLETED.value,),
)

logger.info(
    "payroll_run_workflow_registered",
    extra={
        "workflow_name": PAYROLL_RUN_WORKFLOW.name,
        "state_count": len(PAYROLL_RUN_WORKFLOW.states),
        "transition_count": len(PAYROLL_RUN_WORKFLOW.transitions),
    },
)
