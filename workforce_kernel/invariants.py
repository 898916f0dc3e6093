"""
Kernel Invariants Contract.

These invariants are structural law. They are hardcoded in the record
store, the leave ledger and the persistence codec. No EngineConfig value
may override them.

This module exists solely to declare these invariants explicitly. The
enforcement is distributed across TenantRecordStore, AuditTrail,
LeaveService, PayrollService and the codec.
"""

from enum import Enum, unique


@unique
class KernelInvariant(str, Enum):
    """Non-configurable invariants enforced by the kernel.

    Configuration may influence *what* gets stored (allotments, duplicate
    run policy), but never *whether* these rules apply.
    """

    TENANT_ISOLATION = "tenant_isolation"
    """Every collection is partitioned by tenant id. No business operation
    reads or writes another tenant's partition. Enforced by
    TenantRecordStore keying every collection by tenant."""

    SNAPSHOT_READS = "snapshot_reads"
    """Reads return immutable snapshots, never the live backing collection.
    Enforced by frozen records held in tuples."""

    ATOMIC_TENANT_COMMIT = "atomic_tenant_commit"
    """All collections staged in one tenant transaction become visible
    together or not at all. Enforced by TenantTransaction."""

    SERIALIZED_TENANT_MUTATION = "serialized_tenant_mutation"
    """Mutations against one tenant are serialized. Enforced by the
    per-tenant lock held across read-modify-write."""

    APPEND_ONLY_AUDIT = "append_only_audit"
    """Audit entries are never updated or deleted, and are written only
    after the mutation they describe committed. Enforced by AuditTrail."""

    LEAVE_APPROVAL_CONSISTENCY = "leave_approval_consistency"
    """A request is Approved if and only if its balance was incremented by
    the inclusive day count. Enforced by LeaveService.approve."""

    IMMUTABLE_PAYROLL_RUNS = "immutable_payroll_runs"
    """Completed payroll runs are append-only history. No update path
    exists."""


# All invariants as a frozenset for programmatic checks.
ALL_KERNEL_INVARIANTS: frozenset[KernelInvariant] = frozenset(KernelInvariant)

# The kernel package may not import from these packages.
# This is enforced by tests/architecture/test_kernel_boundary.py.
FORBIDDEN_KERNEL_IMPORTS: tuple[str, ...] = (
    "workforce_services",
    "workforce_config",
    "workforce_modules",
)
