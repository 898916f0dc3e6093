"""
Documents Module Service (``workforce_modules.documents.service``).

Responsibility
--------------
Employee compliance documents (QID, passport, visa, labour contract) and
the dashboard alerts query: documents expiring inside the alert window,
already-expired documents, and leave requests awaiting a decision.

Architecture position
---------------------
**Modules layer** -- service facade over the kernel record store.  File
bytes live elsewhere; a document only carries its ``storage_key``.

Failure modes
-------------
* ``EmployeeNotFoundError`` -- document for an unknown employee.
* ``DocumentNotFoundError`` -- unknown document id.
* ``InvalidDateRangeError`` -- expiry before issue.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta

from workforce_kernel.domain.clock import Clock, SystemClock
from workforce_kernel.domain.dates import DateLike, to_date
from workforce_kernel.domain.records import (
    Actor,
    Collection,
    DocumentType,
    EmployeeDocument,
    LeaveRequest,
    LeaveStatus,
    new_id,
)
from workforce_kernel.exceptions import DocumentNotFoundError, EmployeeNotFoundError
from workforce_kernel.logging_config import get_logger
from workforce_kernel.services.audit_trail import AuditAction, AuditTrail
from workforce_kernel.services.tenant_store import TenantRecordStore

logger = get_logger("modules.documents.service")

DEFAULT_EXPIRY_WINDOW_DAYS = 30


@dataclass(frozen=True)
class DashboardAlerts:
    expiring_documents: tuple[EmployeeDocument, ...]
    pending_leave_requests: tuple[LeaveRequest, ...]

    @property
    def count(self) -> int:
        return len(self.expiring_documents) + len(self.pending_leave_requests)


class DocumentService:
    """Employee documents and expiry alerts."""

    def __init__(
        self,
        store: TenantRecordStore,
        audit: AuditTrail,
        clock: Clock | None = None,
        expiry_window_days: int = DEFAULT_EXPIRY_WINDOW_DAYS,
    ):
        if expiry_window_days < 0:
            raise ValueError(f"expiry_window_days must be >= 0, got {expiry_window_days}")
        self._store = store
        self._audit = audit
        self._clock = clock or SystemClock()
        self._expiry_window_days = expiry_window_days

    def list_documents(self, tenant_id: str) -> tuple[EmployeeDocument, ...]:
        return self._store.get(tenant_id, Collection.DOCUMENTS)

    def employee_documents(self, tenant_id: str, employee_id: str) -> tuple[EmployeeDocument, ...]:
        return tuple(d for d in self.list_documents(tenant_id) if d.employee_id == employee_id)

    def get_document(self, tenant_id: str, document_id: str) -> EmployeeDocument:
        return self._store.require(
            tenant_id,
            Collection.DOCUMENTS,
            document_id,
            lambda: DocumentNotFoundError(tenant_id, document_id),
        )

    def add_document(
        self,
        tenant_id: str,
        employee_id: str,
        document_type: DocumentType,
        issue_date: DateLike,
        expiry_date: DateLike,
        storage_key: str,
        actor: Actor,
        version: int = 1,
    ) -> EmployeeDocument:
        issued = to_date(issue_date, "issue_date")
        expires = to_date(expiry_date, "expiry_date")
        with self._store.transaction(tenant_id) as txn:
            employee = txn.require(
                Collection.EMPLOYEES,
                employee_id,
                lambda: EmployeeNotFoundError(tenant_id, employee_id),
            )
            document = EmployeeDocument(
                id=new_id("doc"),
                tenant_id=tenant_id,
                employee_id=employee.id,
                employee_name=employee.name,
                document_type=document_type,
                issue_date=issued,
                expiry_date=expires,
                storage_key=storage_key,
                version=version,
            )
            txn.append(Collection.DOCUMENTS, document)

        logger.info(
            "document_added",
            extra={
                "tenant_id": tenant_id,
                "document_id": document.id,
                "document_type": document_type.value,
                "expiry_date": expires.isoformat(),
            },
        )
        self._audit.record(
            tenant_id,
            actor,
            AuditAction.DOCUMENT_ADDED,
            f"Added {document_type.value} for {employee.name}, expiring {expires.isoformat()}.",
        )
        return document

    def delete_document(self, tenant_id: str, document_id: str, actor: Actor) -> EmployeeDocument:
        with self._store.transaction(tenant_id) as txn:
            document = txn.remove(Collection.DOCUMENTS, document_id)
            if document is None:
                raise DocumentNotFoundError(tenant_id, document_id)

        logger.info(
            "document_deleted",
            extra={"tenant_id": tenant_id, "document_id": document_id},
        )
        self._audit.record(
            tenant_id,
            actor,
            AuditAction.DOCUMENT_DELETED,
            f"Deleted {document.document_type.value} for {document.employee_name}.",
        )
        return document

    def alerts(self, tenant_id: str, as_of: date | None = None) -> DashboardAlerts:
        """
        Documents whose expiry falls before ``as_of`` plus the window
        (already expired included), and Pending leave requests.
        """
        today = as_of or self._clock.today()
        cutoff = today + timedelta(days=self._expiry_window_days)
        expiring = tuple(
            sorted(
                (d for d in self.list_documents(tenant_id) if d.expiry_date < cutoff),
                key=lambda d: d.expiry_date,
            )
        )
        pending = tuple(
            r for r in self._store.get(tenant_id, Collection.LEAVE_REQUESTS)
            if r.status is LeaveStatus.PENDING
        )
        return DashboardAlerts(expiring_documents=expiring, pending_leave_requests=pending)
