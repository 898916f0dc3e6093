"""
Module: workforce_modules.tenancy.permissions
Responsibility: The global permission catalog and the three roles every
    tenant starts with (Owner, HR Manager, Employee).
Architecture position: Modules layer, static data.  Read by the tenancy
    service and the demo bootstrap.
"""

from __future__ import annotations

from workforce_kernel.domain.records import Permission, Role

PERMISSIONS: tuple[Permission, ...] = (
    Permission(id="dashboard:view", name="View Dashboard", group="Dashboard"),
    Permission(id="employees:read", name="View Employees", group="Employees"),
    Permission(id="employees:create", name="Create Employees", group="Employees"),
    Permission(id="employees:update", name="Update Employees", group="Employees"),
    Permission(id="employees:delete", name="Delete Employees", group="Employees"),
    Permission(id="payroll:run", name="Run Payroll", group="Payroll"),
    Permission(id="payroll:read", name="View Payroll History", group="Payroll"),
    Permission(id="recruitment:manage", name="Manage Recruitment", group="Recruitment"),
    Permission(id="settings:manage", name="Manage Company Settings", group="Settings"),
    Permission(id="roles:manage", name="Manage Roles & Permissions", group="Settings"),
    Permission(id="users:manage", name="Manage Users", group="Settings"),
    Permission(id="reports:view", name="View Analytics & Reports", group="Reports"),
)

PERMISSION_IDS: frozenset[str] = frozenset(p.id for p in PERMISSIONS)

HR_MANAGER_PERMISSIONS: tuple[str, ...] = (
    "dashboard:view",
    "employees:read",
    "employees:create",
    "employees:update",
    "recruitment:manage",
    "reports:view",
    "settings:manage",
)


def owner_role_id(tenant_id: str) -> str:
    return f"role-{tenant_id}-owner"


def hr_role_id(tenant_id: str) -> str:
    return f"role-{tenant_id}-hr"


def employee_role_id(tenant_id: str) -> str:
    return f"role-{tenant_id}-employee"


def default_roles(tenant_id: str) -> tuple[Role, ...]:
    """Owner holds every permission; Employee holds none."""
    return (
        Role(
            id=owner_role_id(tenant_id),
            name="Owner",
            permissions=tuple(p.id for p in PERMISSIONS),
        ),
        Role(id=hr_role_id(tenant_id), name="HR Manager", permissions=HR_MANAGER_PERMISSIONS),
        Role(id=employee_role_id(tenant_id), name="Employee", permissions=()),
    )
