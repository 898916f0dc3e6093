"""Leave Module -- leave requests and the per-employee day ledger."""

from workforce_modules.leave.service import (
    DEFAULT_ALLOTMENTS,
    DEFAULT_UNCAPPED_LEAVE_TYPES,
    LeaveService,
)
from workforce_modules.leave.workflows import LEAVE_REQUEST_WORKFLOW

__all__ = [
    "DEFAULT_ALLOTMENTS",
    "DEFAULT_UNCAPPED_LEAVE_TYPES",
    "LeaveService",
    "LEAVE_REQUEST_WORKFLOW",
]
