"""Kernel services - record store, audit trail, persistence."""

from workforce_kernel.services.audit_trail import AuditAction, AuditTrail
from workforce_kernel.services.flush_scheduler import FlushScheduler
from workforce_kernel.services.persistence_service import PersistenceService
from workforce_kernel.services.tenant_store import TenantRecordStore, TenantTransaction

__all__ = [
    "AuditAction",
    "AuditTrail",
    "FlushScheduler",
    "PersistenceService",
    "TenantRecordStore",
    "TenantTransaction",
]
