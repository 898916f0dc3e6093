"""
AuditTrail -- append-only "who did what" log per tenant.

Responsibility:
    Records one AuditLog entry per business mutation, newest first, and
    serves read and search queries over a tenant's entries.

Architecture position:
    Kernel > Services -- called by every module service AFTER its own
    tenant transaction has committed.

Invariants enforced:
    APPEND_ONLY_AUDIT -- there is no update or delete operation.  Entries
        are prepended in their own tenant transaction.
    Log-after-commit  -- a failure to record never rolls back the business
        mutation; it degrades to a WARNING log and ``record`` returns None.

Failure modes:
    - None propagate from ``record``.
    - TenantNotFoundError from the read operations.
"""

from enum import Enum

from workforce_kernel.domain.clock import Clock, SystemClock
from workforce_kernel.domain.records import Actor, AuditLog, Collection, new_id
from workforce_kernel.logging_config import get_logger
from workforce_kernel.services.tenant_store import TenantRecordStore

logger = get_logger("services.audit_trail")


class AuditAction(str, Enum):
    """Action labels shown on the audit trail."""

    TENANT_REGISTERED = "Tenant Registered"
    SUBSCRIPTION_CHANGED = "Subscription Changed"
    COMPANY_SETTINGS_UPDATED = "Company Settings Updated"
    ROLE_CREATED = "Role Created"
    ROLE_UPDATED = "Role Updated"
    USER_CREATED = "User Created"
    USER_UPDATED = "User Updated"
    EMPLOYEE_CREATED = "Employee Created"
    EMPLOYEE_UPDATED = "Employee Updated"
    EMPLOYEE_DELETED = "Employee Deleted"
    EMPLOYEE_OFFBOARDED = "Employee Offboarded"
    LEAVE_REQUESTED = "Leave Requested"
    LEAVE_APPROVED = "Leave Approved"
    LEAVE_REJECTED = "Leave Rejected"
    LEAVE_BALANCE_UPDATED = "Leave Balance Updated"
    PAYROLL_RUN = "Payroll Run"
    DOCUMENT_ADDED = "Document Added"
    DOCUMENT_DELETED = "Document Deleted"
    ASSET_ADDED = "Asset Added"
    ASSET_UPDATED = "Asset Updated"
    MAINTENANCE_LOGGED = "Maintenance Logged"
    MAINTENANCE_UPDATED = "Maintenance Updated"
    ATTENDANCE_RECORDED = "Attendance Recorded"
    JOB_OPENING_POSTED = "Job Opening Posted"
    CANDIDATE_ADDED = "Candidate Added"
    CANDIDATE_STATUS_CHANGED = "Candidate Status Changed"
    CANDIDATE_CONVERTED = "Candidate Converted"


class AuditTrail:
    """Append-only audit log backed by the tenant record store."""

    def __init__(self, store: TenantRecordStore, clock: Clock | None = None):
        self._store = store
        self._clock = clock or SystemClock()

    def record(
        self,
        tenant_id: str,
        actor: Actor,
        action: AuditAction | str,
        details: str,
    ) -> AuditLog | None:
        """
        Prepend one entry.  Returns the entry, or None if recording failed.

        Call only after the mutation being described has committed.
        """
        label = action.value if isinstance(action, AuditAction) else action
        try:
            entry = AuditLog(
                id=new_id("log"),
                tenant_id=tenant_id,
                actor_id=actor.id,
                actor_name=actor.name,
                action=label,
                details=details,
                timestamp=self._clock.now(),
            )
            with self._store.transaction(tenant_id) as txn:
                txn.prepend(Collection.AUDIT_LOGS, entry)
        except Exception:
            logger.warning(
                "audit_record_failed",
                extra={"tenant_id": tenant_id, "action": label, "actor_id": actor.id},
                exc_info=True,
            )
            return None
        logger.debug(
            "audit_recorded",
            extra={"tenant_id": tenant_id, "action": label, "entry_id": entry.id},
        )
        return entry

    def entries(self, tenant_id: str) -> tuple[AuditLog, ...]:
        """All entries, newest first."""
        return self._store.get(tenant_id, Collection.AUDIT_LOGS)

    def search(self, tenant_id: str, term: str) -> tuple[AuditLog, ...]:
        """Case-insensitive match on actor name, action and details."""
        needle = term.strip().lower()
        if not needle:
            return self.entries(tenant_id)
        return tuple(
            entry
            for entry in self.entries(tenant_id)
            if needle in entry.actor_name.lower()
            or needle in entry.action.lower()
            or needle in entry.details.lower()
        )
