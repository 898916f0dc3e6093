"""
Demo tenant bootstrap (``workforce_modules.tenancy.bootstrap``).

Seeds each configured demo tenant through the normal registration path,
with the demo workforce attached.  A tenant id that already exists is
skipped, so running the bootstrap on every start is safe.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from workforce_kernel.logging_config import get_logger
from workforce_kernel.services.tenant_store import TenantRecordStore
from workforce_modules.tenancy.service import TenancyService

logger = get_logger("modules.tenancy.bootstrap")


@dataclass(frozen=True)
class DemoTenant:
    tenant_id: str
    company_name: str
    owner_name: str
    owner_email: str
    hr_email: str | None = None


def bootstrap_demo_tenants(
    store: TenantRecordStore,
    tenancy: TenancyService,
    demo_tenants: Iterable[DemoTenant],
) -> tuple[str, ...]:
    """Register any missing demo tenants.  Returns the ids seeded by this call."""
    seeded = []
    for demo in demo_tenants:
        if store.has_tenant(demo.tenant_id):
            logger.debug("demo_tenant_exists", extra={"tenant_id": demo.tenant_id})
            continue
        tenancy.register_company(
            demo.company_name,
            demo.owner_name,
            demo.owner_email,
            tenant_id=demo.tenant_id,
            with_demo_data=True,
            hr_email=demo.hr_email,
        )
        seeded.append(demo.tenant_id)

    logger.info("demo_tenants_bootstrapped", extra={"seeded": seeded})
    return tuple(seeded)
