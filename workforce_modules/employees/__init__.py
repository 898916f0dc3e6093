"""Employees Module -- employee records, contracts and lifecycle checklists."""

from workforce_modules.employees.service import (
    EmployeeRemoval,
    EmployeeService,
    RemovalOutcome,
)
from workforce_modules.employees.tasks import offboarding_tasks, onboarding_tasks

__all__ = [
    "EmployeeRemoval",
    "EmployeeService",
    "RemovalOutcome",
    "offboarding_tasks",
    "onboarding_tasks",
]
