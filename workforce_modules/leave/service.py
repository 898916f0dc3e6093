"""
Leave Balance Ledger (``workforce_modules.leave.service``).

Responsibility
--------------
Leave requests and the allotted-vs-used day counters behind them.
Approving a request debits the employee's ledger by the inclusive
calendar-day span of the request.

Architecture position
---------------------
**Modules layer** -- service facade over the kernel record store.  Uses
``LEAVE_REQUEST_WORKFLOW`` for every status change.

Invariants enforced
-------------------
* LEAVE_APPROVAL_CONSISTENCY -- the request status change and the balance
  increment are staged in one tenant transaction: an observer sees both
  or neither.
* ``used_days <= total_days`` for capped leave types.  Uncapped types
  (Unpaid by default) may exceed their allotment.
* Rejection never touches the ledger.
* Approved and Rejected are terminal.

Failure modes
-------------
* ``LeaveRequestNotFoundError`` -- unknown request id.
* ``LeaveRequestAlreadyDecidedError`` -- request is not Pending.
* ``LeaveBalanceNotFoundError`` -- employee has no ledger record.
* ``LeaveTypeNotInLedgerError`` -- ledger has no entry for the leave type.
* ``LeaveBalanceExceededError`` -- approval would overdraw a capped type.
* ``InvalidDateRangeError`` -- request end precedes start.

Audit relevance
---------------
Submission, approval, rejection and balance edits each record one audit
entry after commit, and log ``leave_request_*`` events with the day count.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import replace

from workforce_kernel.domain.clock import Clock, SystemClock
from workforce_kernel.domain.dates import DateLike, days_between, to_date
from workforce_kernel.domain.records import (
    Actor,
    Collection,
    Employee,
    LeaveBalance,
    LeaveBalanceDetail,
    LeaveRequest,
    LeaveStatus,
    LeaveType,
    new_id,
)
from workforce_kernel.domain.workflow import apply_transition
from workforce_kernel.exceptions import (
    EmployeeNotFoundError,
    InvalidLeaveBalanceError,
    LeaveBalanceExceededError,
    LeaveBalanceNotFoundError,
    LeaveBalanceRecordNotFoundError,
    LeaveRequestAlreadyDecidedError,
    LeaveRequestNotFoundError,
    LeaveTypeNotInLedgerError,
)
from workforce_kernel.logging_config import LogContext, get_logger
from workforce_kernel.services.audit_trail import AuditAction, AuditTrail
from workforce_kernel.services.tenant_store import TenantRecordStore, TenantTransaction
from workforce_modules.leave.workflows import LEAVE_REQUEST_WORKFLOW

logger = get_logger("modules.leave.service")

DEFAULT_ALLOTMENTS: Mapping[LeaveType, float] = {
    LeaveType.ANNUAL: 21,
    LeaveType.SICK: 14,
    LeaveType.UNPAID: 0,
    LeaveType.MATERNITY: 50,
}
DEFAULT_UNCAPPED_LEAVE_TYPES: frozenset[LeaveType] = frozenset({LeaveType.UNPAID})


class LeaveService:
    """Leave requests, approvals and the per-employee day ledger."""

    def __init__(
        self,
        store: TenantRecordStore,
        audit: AuditTrail,
        clock: Clock | None = None,
        default_allotments: Mapping[LeaveType, float] | None = None,
        uncapped_leave_types: Iterable[LeaveType] | None = None,
    ):
        self._store = store
        self._audit = audit
        self._clock = clock or SystemClock()
        self._default_allotments = dict(
            DEFAULT_ALLOTMENTS if default_allotments is None else default_allotments
        )
        self._uncapped = frozenset(
            DEFAULT_UNCAPPED_LEAVE_TYPES if uncapped_leave_types is None else uncapped_leave_types
        )

    def is_capped(self, leave_type: LeaveType) -> bool:
        return leave_type not in self._uncapped

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------

    def submit_request(
        self,
        tenant_id: str,
        employee_id: str,
        start_date: DateLike,
        end_date: DateLike,
        leave_type: LeaveType,
        reason: str,
        actor: Actor,
    ) -> LeaveRequest:
        start = to_date(start_date, "start_date")
        end = to_date(end_date, "end_date")
        with self._store.transaction(tenant_id) as txn:
            employee = txn.require(
                Collection.EMPLOYEES,
                employee_id,
                lambda: EmployeeNotFoundError(tenant_id, employee_id),
            )
            request = LeaveRequest(
                id=new_id("leave"),
                tenant_id=tenant_id,
                employee_id=employee.id,
                employee_name=employee.name,
                start_date=start,
                end_date=end,
                leave_type=leave_type,
                reason=reason,
                status=LeaveStatus(LEAVE_REQUEST_WORKFLOW.initial_state),
            )
            txn.prepend(Collection.LEAVE_REQUESTS, request)

        logger.info(
            "leave_request_submitted",
            extra={
                "tenant_id": tenant_id,
                "request_id": request.id,
                "employee_id": employee_id,
                "leave_type": leave_type.value,
                "days": days_between(start, end),
            },
        )
        self._audit.record(
            tenant_id,
            actor,
            AuditAction.LEAVE_REQUESTED,
            f"{employee.name} requested {leave_type.value} leave from "
            f"{start.isoformat()} to {end.isoformat()}.",
        )
        return request

    def approve(self, tenant_id: str, request_id: str, actor: Actor) -> LeaveRequest:
        """
        Approve a Pending request and debit the employee's ledger.

        Preconditions: request is Pending; employee has a ledger record with
            an entry for the request's leave type.
        Postconditions: request is Approved and ``used_days`` grew by the
            inclusive day span, committed together.
        """
        with LogContext.bind(tenant_id=tenant_id, actor_id=actor.id):
            with self._store.transaction(tenant_id) as txn:
                request = self._pending_request(txn, tenant_id, request_id)
                transition = apply_transition(
                    LEAVE_REQUEST_WORKFLOW, request.status.value, "approve"
                )
                days = days_between(request.start_date, request.end_date)

                balance = self._balance_in(txn, request.employee_id)
                if balance is None:
                    raise LeaveBalanceNotFoundError(tenant_id, request.employee_id)
                detail = balance.detail(request.leave_type)
                if detail is None:
                    raise LeaveTypeNotInLedgerError(
                        request.employee_id, request.leave_type.value
                    )
                new_used = detail.used_days + days
                if self.is_capped(request.leave_type) and new_used > detail.total_days:
                    raise LeaveBalanceExceededError(
                        request.employee_id,
                        request.leave_type.value,
                        detail.total_days,
                        detail.used_days,
                        days,
                    )

                updated_balance = replace(
                    balance,
                    balances=tuple(
                        replace(entry, used_days=new_used)
                        if entry.leave_type is request.leave_type
                        else entry
                        for entry in balance.balances
                    ),
                )
                approved = replace(request, status=LeaveStatus(transition.to_state))
                txn.upsert(Collection.LEAVE_BALANCES, updated_balance)
                txn.upsert(Collection.LEAVE_REQUESTS, approved)

            logger.info(
                "leave_request_approved",
                extra={
                    "request_id": request_id,
                    "employee_id": request.employee_id,
                    "leave_type": request.leave_type.value,
                    "days": days,
                    "used_days": new_used,
                    "total_days": detail.total_days,
                },
            )

        self._audit.record(
            tenant_id,
            actor,
            AuditAction.LEAVE_APPROVED,
            f"Approved {days} day(s) of {request.leave_type.value} leave for "
            f"{request.employee_name}.",
        )
        return approved

    def reject(self, tenant_id: str, request_id: str, actor: Actor) -> LeaveRequest:
        with self._store.transaction(tenant_id) as txn:
            request = self._pending_request(txn, tenant_id, request_id)
            transition = apply_transition(LEAVE_REQUEST_WORKFLOW, request.status.value, "reject")
            rejected = replace(request, status=LeaveStatus(transition.to_state))
            txn.upsert(Collection.LEAVE_REQUESTS, rejected)

        logger.info(
            "leave_request_rejected",
            extra={"tenant_id": tenant_id, "request_id": request_id},
        )
        self._audit.record(
            tenant_id,
            actor,
            AuditAction.LEAVE_REJECTED,
            f"Rejected {request.leave_type.value} leave request for {request.employee_name}.",
        )
        return rejected

    def _pending_request(
        self, txn: TenantTransaction, tenant_id: str, request_id: str
    ) -> LeaveRequest:
        request = txn.require(
            Collection.LEAVE_REQUESTS,
            request_id,
            lambda: LeaveRequestNotFoundError(tenant_id, request_id),
        )
        if request.status is not LeaveStatus.PENDING:
            raise LeaveRequestAlreadyDecidedError(request_id, request.status.value)
        return request

    # ------------------------------------------------------------------
    # Ledger
    # ------------------------------------------------------------------

    def create_default_balance(self, employee: Employee) -> LeaveBalance:
        """A fresh ledger record with the configured allotments, nothing used."""
        return LeaveBalance(
            id=new_id("lb"),
            tenant_id=employee.tenant_id,
            employee_id=employee.id,
            employee_name=employee.name,
            balances=tuple(
                LeaveBalanceDetail(leave_type=leave_type, total_days=days, used_days=0)
                for leave_type, days in self._default_allotments.items()
            ),
        )

    def update_balance(self, tenant_id: str, balance: LeaveBalance, actor: Actor) -> LeaveBalance:
        """Replace a ledger record after an HR edit."""
        self._validate_balance(balance)
        with self._store.transaction(tenant_id) as txn:
            existing = txn.find(Collection.LEAVE_BALANCES, balance.id)
            if existing is None or balance.tenant_id != tenant_id:
                raise LeaveBalanceRecordNotFoundError(tenant_id, balance.id)
            txn.upsert(Collection.LEAVE_BALANCES, balance)

        logger.info(
            "leave_balance_updated",
            extra={
                "tenant_id": tenant_id,
                "balance_id": balance.id,
                "employee_id": balance.employee_id,
            },
        )
        self._audit.record(
            tenant_id,
            actor,
            AuditAction.LEAVE_BALANCE_UPDATED,
            f"Updated leave balances for {balance.employee_name}.",
        )
        return balance

    def _validate_balance(self, balance: LeaveBalance) -> None:
        seen: set[LeaveType] = set()
        for entry in balance.balances:
            if entry.leave_type in seen:
                raise InvalidLeaveBalanceError(entry.leave_type.value, "duplicate entry")
            seen.add(entry.leave_type)
            if self.is_capped(entry.leave_type) and entry.used_days > entry.total_days:
                raise InvalidLeaveBalanceError(
                    entry.leave_type.value, "used_days exceeds total_days"
                )

    @staticmethod
    def _balance_in(txn: TenantTransaction, employee_id: str) -> LeaveBalance | None:
        for balance in txn.get(Collection.LEAVE_BALANCES):
            if balance.employee_id == employee_id:
                return balance
        return None

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list_requests(
        self,
        tenant_id: str,
        status: LeaveStatus | None = None,
        employee_id: str | None = None,
    ) -> tuple[LeaveRequest, ...]:
        return tuple(
            r
            for r in self._store.get(tenant_id, Collection.LEAVE_REQUESTS)
            if (status is None or r.status is status)
            and (employee_id is None or r.employee_id == employee_id)
        )

    def get_request(self, tenant_id: str, request_id: str) -> LeaveRequest:
        return self._store.require(
            tenant_id,
            Collection.LEAVE_REQUESTS,
            request_id,
            lambda: LeaveRequestNotFoundError(tenant_id, request_id),
        )

    def list_balances(self, tenant_id: str) -> tuple[LeaveBalance, ...]:
        return self._store.get(tenant_id, Collection.LEAVE_BALANCES)

    def balance_for(self, tenant_id: str, employee_id: str) -> LeaveBalance | None:
        for balance in self.list_balances(tenant_id):
            if balance.employee_id == employee_id:
                return balance
        return None
