"""
Tenancy Module Service (``workforce_modules.tenancy.service``).

Responsibility
--------------
Company registration, compliance settings, subscription tier, roles and
user accounts.  Registration creates the tenant together with its three
default roles, the owner account and default WPS settings in a single
store commit, optionally with the demo workforce.

Architecture position
---------------------
**Modules layer** -- service facade over the kernel record store.

Invariants enforced
-------------------
* Usernames (emails) are unique across all tenants, compared
  case-insensitively.  The lookup is the one read that spans tenants and
  it never returns another tenant's records to a tenant-scoped caller.
* A role only carries permission ids from ``PERMISSIONS``.
* A user always references an existing role of its own tenant.

Failure modes
-------------
* ``UserAlreadyExistsError`` -- registration or invite with a taken email.
* ``TenantAlreadyExistsError`` -- explicit tenant id already registered.
* ``RoleNotFoundError`` / ``UserNotFoundError`` -- unknown references.
* ``UnknownPermissionError`` -- permission id outside the catalog.
"""

from __future__ import annotations

import threading
import zlib
from collections.abc import Iterable
from dataclasses import dataclass, replace

from workforce_kernel.domain.clock import Clock, SystemClock
from workforce_kernel.domain.records import (
    Actor,
    Collection,
    CompanySettings,
    Permission,
    Role,
    SubscriptionTier,
    Tenant,
    User,
    new_id,
)
from workforce_kernel.exceptions import (
    RoleNotFoundError,
    UnknownPermissionError,
    UserAlreadyExistsError,
    UserNotFoundError,
)
from workforce_kernel.logging_config import get_logger
from workforce_kernel.services.audit_trail import AuditAction, AuditTrail
from workforce_kernel.services.tenant_store import TenantRecordStore
from workforce_modules.tenancy.demo_data import demo_collections
from workforce_modules.tenancy.permissions import (
    PERMISSION_IDS,
    PERMISSIONS,
    default_roles,
    owner_role_id,
)

logger = get_logger("modules.tenancy.service")

DEFAULT_BANK_NAME = "Qatar National Bank"


@dataclass(frozen=True)
class Registration:
    tenant: Tenant
    owner: User
    settings: CompanySettings


def default_company_settings(tenant_id: str, company_name: str) -> CompanySettings:
    """Placeholder WPS settings derived from the tenant id."""
    seed = zlib.crc32(tenant_id.encode("utf-8"))
    return CompanySettings(
        id=f"settings-{tenant_id}",
        tenant_id=tenant_id,
        company_name=company_name,
        establishment_id=f"EST-{seed % 100000:05d}",
        bank_name=DEFAULT_BANK_NAME,
        corporate_account_number=f"QA58QNBA000000000000{seed % 10**10:010d}",
    )


def _validate_permissions(permissions: Iterable[str]) -> tuple[str, ...]:
    permissions = tuple(dict.fromkeys(permissions))
    unknown = tuple(p for p in permissions if p not in PERMISSION_IDS)
    if unknown:
        raise UnknownPermissionError(unknown)
    return permissions


class TenancyService:
    """Tenants, compliance settings, roles and users."""

    def __init__(
        self,
        store: TenantRecordStore,
        audit: AuditTrail,
        clock: Clock | None = None,
    ):
        self._store = store
        self._audit = audit
        self._clock = clock or SystemClock()
        # Serializes the cross-tenant username check with the write.
        self._identity_lock = threading.Lock()

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register_company(
        self,
        company_name: str,
        owner_name: str,
        owner_email: str,
        tenant_id: str | None = None,
        with_demo_data: bool = False,
        hr_email: str | None = None,
    ) -> Registration:
        """
        Create a tenant, its default roles and settings, and the owner.

        Preconditions: no user anywhere has ``owner_email`` (or
            ``hr_email``) as username.
        Postconditions: one commit holds every initial collection; one
            ``Tenant Registered`` audit entry follows it.
        """
        tenant_id = tenant_id or new_id("tenant")
        with self._identity_lock:
            for email in (owner_email, hr_email):
                if email and self.find_user_by_username(email) is not None:
                    raise UserAlreadyExistsError(email)

            tenant = Tenant(id=tenant_id, name=company_name, created_at=self._clock.now())
            owner = User(
                id=f"user-{tenant_id}-owner",
                tenant_id=tenant_id,
                username=owner_email,
                name=owner_name,
                role_id=owner_role_id(tenant_id),
            )
            settings = default_company_settings(tenant_id, company_name)
            initial: dict[Collection, tuple] = {}
            if with_demo_data:
                initial.update(
                    demo_collections(tenant_id, settings, owner, self._clock.today(), hr_email)
                )
            initial[Collection.ROLES] = default_roles(tenant_id)
            initial[Collection.USERS] = (owner,) + initial.get(Collection.USERS, ())
            initial[Collection.COMPANY_SETTINGS] = (settings,)
            self._store.create_tenant(tenant, initial)

        logger.info(
            "tenant_registered",
            extra={
                "tenant_id": tenant_id,
                "owner_id": owner.id,
                "with_demo_data": with_demo_data,
            },
        )
        self._audit.record(
            tenant_id,
            Actor(id=owner.id, name=owner.name),
            AuditAction.TENANT_REGISTERED,
            f"Registered {company_name} with owner {owner_email}.",
        )
        return Registration(tenant=tenant, owner=owner, settings=settings)

    def find_user_by_username(self, username: str) -> User | None:
        """Case-insensitive username lookup across all tenants."""
        wanted = username.strip().lower()
        for tenant in self._store.list_tenants():
            for user in self._store.get(tenant.id, Collection.USERS):
                if user.username.lower() == wanted:
                    return user
        return None

    # ------------------------------------------------------------------
    # Tenant and compliance settings
    # ------------------------------------------------------------------

    def get_tenant(self, tenant_id: str) -> Tenant:
        return self._store.get_tenant(tenant_id)

    def set_subscription_tier(
        self, tenant_id: str, tier: SubscriptionTier, actor: Actor
    ) -> Tenant:
        current = self._store.get_tenant(tenant_id)
        updated = self._store.update_tenant(replace(current, tier=tier))
        logger.info(
            "subscription_tier_changed",
            extra={"tenant_id": tenant_id, "from_tier": current.tier.value, "to_tier": tier.value},
        )
        self._audit.record(
            tenant_id,
            actor,
            AuditAction.SUBSCRIPTION_CHANGED,
            f"Subscription changed from {current.tier.value} to {tier.value}.",
        )
        return updated

    def get_settings(self, tenant_id: str) -> CompanySettings | None:
        settings = self._store.get(tenant_id, Collection.COMPANY_SETTINGS)
        return settings[0] if settings else None

    def update_settings(
        self, tenant_id: str, settings: CompanySettings, actor: Actor
    ) -> CompanySettings:
        """Replace the tenant's settings.  Id and tenant are forced to the tenant's own."""
        settings = replace(settings, id=f"settings-{tenant_id}", tenant_id=tenant_id)
        with self._store.transaction(tenant_id) as txn:
            txn.replace(Collection.COMPANY_SETTINGS, (settings,))

        logger.info(
            "company_settings_updated",
            extra={"tenant_id": tenant_id, "establishment_id": settings.establishment_id},
        )
        self._audit.record(
            tenant_id,
            actor,
            AuditAction.COMPANY_SETTINGS_UPDATED,
            f"Updated company settings for {settings.company_name}.",
        )
        return settings

    # ------------------------------------------------------------------
    # Roles
    # ------------------------------------------------------------------

    @staticmethod
    def list_permissions() -> tuple[Permission, ...]:
        return PERMISSIONS

    def list_roles(self, tenant_id: str) -> tuple[Role, ...]:
        return self._store.get(tenant_id, Collection.ROLES)

    def get_role(self, tenant_id: str, role_id: str) -> Role:
        return self._store.require(
            tenant_id, Collection.ROLES, role_id, lambda: RoleNotFoundError(tenant_id, role_id)
        )

    def create_role(
        self, tenant_id: str, name: str, permissions: Iterable[str], actor: Actor
    ) -> Role:
        role = Role(id=new_id("role"), name=name, permissions=_validate_permissions(permissions))
        with self._store.transaction(tenant_id) as txn:
            txn.append(Collection.ROLES, role)

        logger.info("role_created", extra={"tenant_id": tenant_id, "role_id": role.id})
        self._audit.record(tenant_id, actor, AuditAction.ROLE_CREATED, f"Created role {name}.")
        return role

    def update_role(self, tenant_id: str, role: Role, actor: Actor) -> Role:
        role = replace(role, permissions=_validate_permissions(role.permissions))
        with self._store.transaction(tenant_id) as txn:
            txn.require(
                Collection.ROLES, role.id, lambda: RoleNotFoundError(tenant_id, role.id)
            )
            txn.upsert(Collection.ROLES, role)

        logger.info(
            "role_updated",
            extra={
                "tenant_id": tenant_id,
                "role_id": role.id,
                "permission_count": len(role.permissions),
            },
        )
        self._audit.record(tenant_id, actor, AuditAction.ROLE_UPDATED, f"Updated role {role.name}.")
        return role

    def permissions_for(self, tenant_id: str, user_id: str) -> frozenset[str]:
        user = self.get_user(tenant_id, user_id)
        role = self._store.find(tenant_id, Collection.ROLES, user.role_id)
        return frozenset(role.permissions) if role is not None else frozenset()

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    def list_users(self, tenant_id: str) -> tuple[User, ...]:
        return self._store.get(tenant_id, Collection.USERS)

    def get_user(self, tenant_id: str, user_id: str) -> User:
        return self._store.require(
            tenant_id, Collection.USERS, user_id, lambda: UserNotFoundError(tenant_id, user_id)
        )

    def invite_user(
        self,
        tenant_id: str,
        username: str,
        name: str,
        role_id: str,
        actor: Actor,
        employee_id: str | None = None,
    ) -> User:
        with self._identity_lock:
            if self.find_user_by_username(username) is not None:
                raise UserAlreadyExistsError(username)
            user = User(
                id=new_id("user"),
                tenant_id=tenant_id,
                username=username,
                name=name,
                role_id=role_id,
                employee_id=employee_id,
            )
            with self._store.transaction(tenant_id) as txn:
                txn.require(
                    Collection.ROLES, role_id, lambda: RoleNotFoundError(tenant_id, role_id)
                )
                txn.append(Collection.USERS, user)

        logger.info(
            "user_invited",
            extra={"tenant_id": tenant_id, "user_id": user.id, "role_id": role_id},
        )
        self._audit.record(
            tenant_id, actor, AuditAction.USER_CREATED, f"Invited {name} ({username})."
        )
        return user

    def update_user(
        self, tenant_id: str, user_id: str, name: str, role_id: str, actor: Actor
    ) -> User:
        """Change a user's display name and role."""
        with self._store.transaction(tenant_id) as txn:
            current = txn.require(
                Collection.USERS, user_id, lambda: UserNotFoundError(tenant_id, user_id)
            )
            txn.require(Collection.ROLES, role_id, lambda: RoleNotFoundError(tenant_id, role_id))
            updated = replace(current, name=name, role_id=role_id)
            txn.upsert(Collection.USERS, updated)

        logger.info(
            "user_updated",
            extra={"tenant_id": tenant_id, "user_id": user_id, "role_id": role_id},
        )
        self._audit.record(tenant_id, actor, AuditAction.USER_UPDATED, f"Updated user {name}.")
        return updated
