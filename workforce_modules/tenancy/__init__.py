"""Tenancy module: registration, compliance settings, roles, users, demo bootstrap."""

from workforce_modules.tenancy.bootstrap import DemoTenant, bootstrap_demo_tenants
from workforce_modules.tenancy.permissions import PERMISSIONS, default_roles
from workforce_modules.tenancy.service import (
    Registration,
    TenancyService,
    default_company_settings,
)

__all__ = [
    "DemoTenant",
    "PERMISSIONS",
    "Registration",
    "TenancyService",
    "bootstrap_demo_tenants",
    "default_company_settings",
    "default_roles",
]
