"""
Module: workforce_modules.employees.tasks
Responsibility: Standard onboarding and offboarding checklists attached to
    every new employee.  Task ids embed the employee id so they stay unique
    within the tenant.
"""

from __future__ import annotations

from datetime import date, timedelta

from workforce_kernel.domain.records import OffboardingTask, OnboardingTask, TaskOwner

# (description, days after join)
ONBOARDING_CHECKLIST = (
    ("Sign Employment Contract", 1),
    ("IT Equipment Setup", 2),
    ("Bank Account Setup", 5),
)

OFFBOARDING_CHECKLIST = (
    ("Return Company Assets", TaskOwner.EMPLOYEE),
    ("Knowledge Transfer Session", TaskOwner.MANAGER),
    ("Conduct Exit Interview", TaskOwner.HR),
)


def onboarding_tasks(
    employee_id: str,
    join_date: date,
    completed: frozenset[int] = frozenset(),
) -> tuple[OnboardingTask, ...]:
    """``completed`` holds the 1-based positions already done."""
    return tuple(
        OnboardingTask(
            id=f"ontask-{employee_id}-{position}",
            description=description,
            completed=position in completed,
            due_date=join_date + timedelta(days=offset),
        )
        for position, (description, offset) in enumerate(ONBOARDING_CHECKLIST, start=1)
    )


def offboarding_tasks(employee_id: str) -> tuple[OffboardingTask, ...]:
    return tuple(
        OffboardingTask(
            id=f"offtask-{employee_id}-{position}",
            description=description,
            completed=False,
            responsible=owner,
        )
        for position, (description, owner) in enumerate(OFFBOARDING_CHECKLIST, start=1)
    )
