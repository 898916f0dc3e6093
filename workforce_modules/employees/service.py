"""
Employee Module Service (``workforce_modules.employees.service``).

Responsibility
--------------
Employee master data: onboarding a new hire (with a fresh leave ledger),
HR edits, contract details, lifecycle checklists, and removal.

Architecture position
---------------------
**Modules layer** -- service facade over the kernel record store.  Uses
``LeaveService.create_default_balance`` so a new employee and their
ledger record are committed together.

Invariants enforced
-------------------
* An employee referenced by a payroll run or a payslip is never hard
  deleted.  Removal marks them Offboarded instead, which also excludes
  them from future payroll runs.
* An unreferenced employee is removed together with their ledger record.
* ``Employee.tenant_id`` always equals the tenant the record lives in.

Failure modes
-------------
* ``EmployeeNotFoundError`` -- unknown employee id.
* ``LifecycleTaskNotFoundError`` -- task id not on the employee.
* ``NegativeAmountError`` / ``InvalidDateRangeError`` -- invalid values.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum

from workforce_kernel.domain.dates import DateLike, to_date
from workforce_kernel.domain.records import (
    Actor,
    Collection,
    ContractDetails,
    Department,
    Employee,
    EmployeeStatus,
    OffboardingTask,
    OnboardingTask,
    VisaDetails,
    new_id,
)
from workforce_kernel.exceptions import EmployeeNotFoundError, LifecycleTaskNotFoundError
from workforce_kernel.logging_config import get_logger
from workforce_kernel.services.audit_trail import AuditAction, AuditTrail
from workforce_kernel.services.tenant_store import TenantRecordStore, TenantTransaction
from workforce_modules.employees.tasks import offboarding_tasks, onboarding_tasks
from workforce_modules.leave.service import LeaveService

logger = get_logger("modules.employees.service")


class RemovalOutcome(Enum):
    DELETED = "deleted"
    OFFBOARDED = "offboarded"


@dataclass(frozen=True)
class EmployeeRemoval:
    employee_id: str
    outcome: RemovalOutcome


class EmployeeService:
    """Employee records and their lifecycle."""

    def __init__(
        self,
        store: TenantRecordStore,
        audit: AuditTrail,
        leave: LeaveService,
    ):
        self._store = store
        self._audit = audit
        self._leave = leave

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list_employees(
        self, tenant_id: str, include_offboarded: bool = True
    ) -> tuple[Employee, ...]:
        employees = self._store.get(tenant_id, Collection.EMPLOYEES)
        if include_offboarded:
            return employees
        return tuple(e for e in employees if e.is_active)

    def get_employee(self, tenant_id: str, employee_id: str) -> Employee:
        return self._store.require(
            tenant_id,
            Collection.EMPLOYEES,
            employee_id,
            lambda: EmployeeNotFoundError(tenant_id, employee_id),
        )

    # ------------------------------------------------------------------
    # Create / update
    # ------------------------------------------------------------------

    def add_employee(
        self,
        tenant_id: str,
        actor: Actor,
        *,
        name: str,
        qid: str,
        position: str,
        department: Department,
        basic_salary: float,
        allowances: float,
        deductions: float,
        bank_name: str,
        iban: str,
        join_date: DateLike,
        manager_id: str | None = None,
        name_ar: str | None = None,
        visa: VisaDetails | None = None,
        contract: ContractDetails | None = None,
    ) -> Employee:
        """
        Onboard a new hire.

        The employee gets the standard lifecycle checklists and a leave
        ledger record with the default allotments, in the same commit.
        """
        joined = to_date(join_date, "join_date")
        employee_id = new_id("emp")
        employee = Employee(
            id=employee_id,
            tenant_id=tenant_id,
            name=name,
            qid=qid,
            position=position,
            department=department,
            basic_salary=float(basic_salary),
            allowances=float(allowances),
            deductions=float(deductions),
            bank_name=bank_name,
            iban=iban,
            join_date=joined,
            manager_id=manager_id,
            name_ar=name_ar,
            visa=visa,
            contract=contract,
            onboarding_tasks=onboarding_tasks(employee_id, joined),
            offboarding_tasks=offboarding_tasks(employee_id),
        )
        balance = self._leave.create_default_balance(employee)
        with self._store.transaction(tenant_id) as txn:
            txn.append(Collection.EMPLOYEES, employee)
            txn.append(Collection.LEAVE_BALANCES, balance)

        logger.info(
            "employee_added",
            extra={
                "tenant_id": tenant_id,
                "employee_id": employee.id,
                "department": department.value,
                "balance_id": balance.id,
            },
        )
        self._audit.record(
            tenant_id,
            actor,
            AuditAction.EMPLOYEE_CREATED,
            f"Added employee {name} ({position}).",
        )
        return employee

    def update_employee(self, tenant_id: str, employee: Employee, actor: Actor) -> Employee:
        """Replace an employee record.  A rename is carried onto the ledger record."""
        if employee.tenant_id != tenant_id:
            raise EmployeeNotFoundError(tenant_id, employee.id)
        with self._store.transaction(tenant_id) as txn:
            current = self._require(txn, tenant_id, employee.id)
            txn.upsert(Collection.EMPLOYEES, employee)
            if current.name != employee.name:
                self._rename_in_ledger(txn, employee)

        logger.info(
            "employee_updated",
            extra={"tenant_id": tenant_id, "employee_id": employee.id},
        )
        self._audit.record(
            tenant_id,
            actor,
            AuditAction.EMPLOYEE_UPDATED,
            f"Updated employee {employee.name}.",
        )
        return employee

    @staticmethod
    def _rename_in_ledger(txn: TenantTransaction, employee: Employee) -> None:
        txn.replace(
            Collection.LEAVE_BALANCES,
            (
                replace(b, employee_name=employee.name) if b.employee_id == employee.id else b
                for b in txn.get(Collection.LEAVE_BALANCES)
            ),
        )

    def update_contract(
        self,
        tenant_id: str,
        employee_id: str,
        contract: ContractDetails,
        actor: Actor,
    ) -> ContractDetails:
        with self._store.transaction(tenant_id) as txn:
            employee = self._require(txn, tenant_id, employee_id)
            txn.upsert(Collection.EMPLOYEES, replace(employee, contract=contract))

        logger.info(
            "employee_contract_updated",
            extra={
                "tenant_id": tenant_id,
                "employee_id": employee_id,
                "end_date": contract.end_date.isoformat(),
            },
        )
        self._audit.record(
            tenant_id,
            actor,
            AuditAction.EMPLOYEE_UPDATED,
            f"Updated contract details for {employee.name}.",
        )
        return contract

    # ------------------------------------------------------------------
    # Lifecycle checklists
    # ------------------------------------------------------------------

    def update_onboarding_task(
        self,
        tenant_id: str,
        employee_id: str,
        task_id: str,
        completed: bool,
        actor: Actor,
    ) -> tuple[OnboardingTask, ...]:
        return self._update_task(
            tenant_id, employee_id, task_id, completed, actor, "onboarding_tasks"
        )

    def update_offboarding_task(
        self,
        tenant_id: str,
        employee_id: str,
        task_id: str,
        completed: bool,
        actor: Actor,
    ) -> tuple[OffboardingTask, ...]:
        return self._update_task(
            tenant_id, employee_id, task_id, completed, actor, "offboarding_tasks"
        )

    def _update_task(
        self,
        tenant_id: str,
        employee_id: str,
        task_id: str,
        completed: bool,
        actor: Actor,
        checklist: str,
    ) -> tuple:
        with self._store.transaction(tenant_id) as txn:
            employee = self._require(txn, tenant_id, employee_id)
            tasks = getattr(employee, checklist)
            if not any(task.id == task_id for task in tasks):
                raise LifecycleTaskNotFoundError(employee_id, task_id)
            updated = tuple(
                replace(task, completed=completed) if task.id == task_id else task
                for task in tasks
            )
            txn.upsert(Collection.EMPLOYEES, replace(employee, **{checklist: updated}))

        logger.info(
            "employee_task_updated",
            extra={
                "tenant_id": tenant_id,
                "employee_id": employee_id,
                "task_id": task_id,
                "checklist": checklist,
                "completed": completed,
            },
        )
        task = next(t for t in updated if t.id == task_id)
        state = "completed" if completed else "reopened"
        self._audit.record(
            tenant_id,
            actor,
            AuditAction.EMPLOYEE_UPDATED,
            f"Task '{task.description}' {state} for {employee.name}.",
        )
        return updated

    # ------------------------------------------------------------------
    # Removal
    # ------------------------------------------------------------------

    def delete_employee(self, tenant_id: str, employee_id: str, actor: Actor) -> EmployeeRemoval:
        """
        Remove an employee.

        Postconditions: if any payroll run or payslip references the
            employee they remain stored with status Offboarded; otherwise
            the employee and their ledger record are gone.
        """
        with self._store.transaction(tenant_id) as txn:
            employee = self._require(txn, tenant_id, employee_id)
            if self._is_referenced(txn, employee_id):
                outcome = RemovalOutcome.OFFBOARDED
                txn.upsert(
                    Collection.EMPLOYEES, replace(employee, status=EmployeeStatus.OFFBOARDED)
                )
            else:
                outcome = RemovalOutcome.DELETED
                txn.remove(Collection.EMPLOYEES, employee_id)
                txn.replace(
                    Collection.LEAVE_BALANCES,
                    (
                        b for b in txn.get(Collection.LEAVE_BALANCES)
                        if b.employee_id != employee_id
                    ),
                )

        logger.info(
            "employee_removed",
            extra={
                "tenant_id": tenant_id,
                "employee_id": employee_id,
                "outcome": outcome.value,
            },
        )
        if outcome is RemovalOutcome.OFFBOARDED:
            self._audit.record(
                tenant_id,
                actor,
                AuditAction.EMPLOYEE_OFFBOARDED,
                f"Offboarded {employee.name}; payroll history retained.",
            )
        else:
            self._audit.record(
                tenant_id,
                actor,
                AuditAction.EMPLOYEE_DELETED,
                f"Deleted employee {employee.name}.",
            )
        return EmployeeRemoval(employee_id=employee_id, outcome=outcome)

    @staticmethod
    def _is_referenced(txn: TenantTransaction, employee_id: str) -> bool:
        if any(p.employee_id == employee_id for p in txn.get(Collection.PAYSLIPS)):
            return True
        return any(employee_id in run.employee_ids for run in txn.get(Collection.PAYROLL_RUNS))

    @staticmethod
    def _require(txn: TenantTransaction, tenant_id: str, employee_id: str) -> Employee:
        return txn.require(
            Collection.EMPLOYEES,
            employee_id,
            lambda: EmployeeNotFoundError(tenant_id, employee_id),
        )
