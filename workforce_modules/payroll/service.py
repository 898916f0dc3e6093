"""
Payroll Module Service (``workforce_modules.payroll.service``).

Responsibility
--------------
Orchestrates a payroll cycle for one tenant: snapshots the active
employees, checks compliance settings, totals net pay, encodes the WPS
file, and persists the completed run with one payslip per employee.
Also produces monthly, leave-salary and final-settlement payslips from
stored records.

Architecture position
---------------------
**Modules layer** -- thin glue.  ``PayrollService`` is the sole public
entry point for payroll operations.  It composes the pure settlement
calculator (``helpers.py``), the pure WPS encoder (``wps.py``), the
kernel ``TenantRecordStore`` and the ``AuditTrail``.

Invariants enforced
-------------------
* IMMUTABLE_PAYROLL_RUNS -- runs are prepended once and never updated.
* ATOMIC_TENANT_COMMIT -- the run and its payslips are committed in one
  tenant transaction; a failure leaves neither behind.
* Offboarded employees are excluded from runs.
* Audit is recorded after commit; audit failure never fails the run.

Failure modes
-------------
* ``ComplianceSettingsMissingError`` -- no settings or blank establishment id.
* ``InvalidPeriodError`` -- unknown month or bad year.
* ``InvalidSifFieldError`` -- employee data that would corrupt the file.
* ``DuplicatePayrollRunError`` -- period already run and the policy is
  ``reject``.
* ``TenantNotFoundError`` / ``EmployeeNotFoundError`` /
  ``PayrollRunNotFoundError`` -- unknown references.

Audit relevance
---------------
One ``Payroll Run`` audit entry per completed run, and structured
``payroll_run_started`` / ``payroll_run_completed`` log events carrying
the run id, period, employee count and total.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import date

from workforce_kernel.domain.clock import Clock, SystemClock
from workforce_kernel.domain.dates import DateLike, month_name, month_number
from workforce_kernel.domain.money import format_amount, net_amount
from workforce_kernel.domain.records import (
    Actor,
    Collection,
    CompanySettings,
    Employee,
    LeaveBalance,
    Payslip,
    PayrollRun,
    PayrollRunStatus,
    new_id,
)
from workforce_kernel.domain.workflow import apply_transition
from workforce_kernel.exceptions import (
    ComplianceSettingsMissingError,
    DuplicatePayrollRunError,
    EmployeeNotFoundError,
    PayrollRunNotFoundError,
)
from workforce_kernel.logging_config import LogContext, get_logger
from workforce_kernel.services.audit_trail import AuditAction, AuditTrail
from workforce_kernel.services.tenant_store import TenantRecordStore, TenantTransaction
from workforce_modules.payroll.helpers import (
    calculate_final_settlement_payslip,
    calculate_leave_salary_payslip,
    calculate_monthly_payslip,
)
from workforce_modules.payroll.models import PayrollRunResult, PayslipData
from workforce_modules.payroll.workflows import PAYROLL_RUN_WORKFLOW
from workforce_modules.payroll.wps import (
    generate_sif_content,
    payroll_period_code,
    sif_filename,
    total_net_amount,
)

logger = get_logger("modules.payroll.service")

DUPLICATE_PERIOD_ALLOW = "allow"
DUPLICATE_PERIOD_REJECT = "reject"
DUPLICATE_PERIOD_POLICIES = frozenset({DUPLICATE_PERIOD_ALLOW, DUPLICATE_PERIOD_REJECT})


def company_settings_of(txn: TenantTransaction) -> CompanySettings | None:
    """The tenant's compliance settings, if configured."""
    settings = txn.get(Collection.COMPANY_SETTINGS)
    return settings[0] if settings else None


class PayrollService:
    """
    Payroll runs and payslips for tenants.

    Usage::

        service = PayrollService(store, audit, clock=clock)
        result = service.run("tenant-1", "June", 2024, actor)
        result.filename          # "WPS_JUNE_2024.sif"
        result.wps_file_content  # header + detail records
    """

    def __init__(
        self,
        store: TenantRecordStore,
        audit: AuditTrail,
        clock: Clock | None = None,
        duplicate_period_policy: str = DUPLICATE_PERIOD_ALLOW,
    ):
        if duplicate_period_policy not in DUPLICATE_PERIOD_POLICIES:
            raise ValueError(
                f"duplicate_period_policy must be one of "
                f"{sorted(DUPLICATE_PERIOD_POLICIES)}, got '{duplicate_period_policy}'"
            )
        self._store = store
        self._audit = audit
        self._clock = clock or SystemClock()
        self._duplicate_period_policy = duplicate_period_policy

    # ------------------------------------------------------------------
    # Payroll run
    # ------------------------------------------------------------------

    def run(self, tenant_id: str, month: str, year: int, actor: Actor) -> PayrollRunResult:
        """
        Execute one payroll cycle and persist it as a completed run.

        Returns the run, the raw SIF payload and its filename.  Offering the
        payload as a download is the caller's concern.
        """
        payroll_period_code(month, year)
        period_month = month_name(month_number(month))
        filename = sif_filename(period_month, year)

        with LogContext.bind(tenant_id=tenant_id, actor_id=actor.id):
            with self._store.transaction(tenant_id) as txn:
                employees = tuple(e for e in txn.get(Collection.EMPLOYEES) if e.is_active)

                settings = company_settings_of(txn)
                if settings is None:
                    raise ComplianceSettingsMissingError(tenant_id)
                if not (settings.establishment_id or "").strip():
                    raise ComplianceSettingsMissingError(tenant_id, "establishment_id")

                if self._duplicate_period_policy == DUPLICATE_PERIOD_REJECT:
                    self._reject_duplicate(txn, tenant_id, period_month, year)

                run_id = new_id("run")
                logger.info(
                    "payroll_run_started",
                    extra={
                        "run_id": run_id,
                        "month": period_month,
                        "year": year,
                        "employee_count": len(employees),
                    },
                )

                total = total_net_amount(employees)
                content = generate_sif_content(settings, employees, period_month, year)
                transition = apply_transition(
                    PAYROLL_RUN_WORKFLOW, PayrollRunStatus.PENDING.value, "complete"
                )

                now = self._clock.now()
                run = PayrollRun(
                    id=run_id,
                    tenant_id=tenant_id,
                    month=period_month,
                    year=year,
                    run_date=now,
                    total_amount=total,
                    employee_count=len(employees),
                    status=PayrollRunStatus(transition.to_state),
                    wps_file_content=content,
                    employee_ids=tuple(e.id for e in employees),
                )
                payslips = tuple(
                    self._payslip_for(employee, run, now) for employee in employees
                )
                txn.prepend(Collection.PAYROLL_RUNS, run)
                txn.replace(Collection.PAYSLIPS, payslips + txn.get(Collection.PAYSLIPS))

            logger.info(
                "payroll_run_completed",
                extra={
                    "run_id": run.id,
                    "month": run.month,
                    "year": run.year,
                    "employee_count": run.employee_count,
                    "total_amount": format_amount(run.total_amount),
                    "wps_filename": filename,
                },
            )

        self._audit.record(
            tenant_id,
            actor,
            AuditAction.PAYROLL_RUN,
            f"Ran payroll for {run.month} {run.year}: {run.employee_count} employees, "
            f"total {format_amount(run.total_amount)}.",
        )
        return PayrollRunResult(
            payroll_run=run,
            wps_file_content=content,
            filename=filename,
            payslips=payslips,
        )

    def _reject_duplicate(
        self, txn: TenantTransaction, tenant_id: str, period_month: str, year: int
    ) -> None:
        for existing in txn.get(Collection.PAYROLL_RUNS):
            if existing.year == year and month_number(existing.month) == month_number(period_month):
                logger.warning(
                    "payroll_run_duplicate_rejected",
                    extra={"existing_run_id": existing.id, "month": period_month, "year": year},
                )
                raise DuplicatePayrollRunError(tenant_id, period_month, year, existing.id)

    @staticmethod
    def _payslip_for(employee: Employee, run: PayrollRun, created_at) -> Payslip:
        return Payslip(
            id=new_id("ps"),
            tenant_id=run.tenant_id,
            employee_id=employee.id,
            payroll_run_id=run.id,
            period=f"{run.month} {run.year}",
            gross_salary=employee.basic_salary + employee.allowances,
            net_salary=net_amount(
                employee.basic_salary, employee.allowances, employee.deductions
            ),
            created_at=created_at,
        )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list_runs(self, tenant_id: str) -> tuple[PayrollRun, ...]:
        """All runs, newest first."""
        return self._store.get(tenant_id, Collection.PAYROLL_RUNS)

    def latest_run(self, tenant_id: str) -> PayrollRun | None:
        runs = self.list_runs(tenant_id)
        return runs[0] if runs else None

    def get_run(self, tenant_id: str, run_id: str) -> PayrollRun:
        return self._store.require(
            tenant_id,
            Collection.PAYROLL_RUNS,
            run_id,
            lambda: PayrollRunNotFoundError(tenant_id, run_id),
        )

    def run_payslips(self, tenant_id: str, run_id: str) -> tuple[Payslip, ...]:
        self.get_run(tenant_id, run_id)
        return tuple(
            p for p in self._store.get(tenant_id, Collection.PAYSLIPS)
            if p.payroll_run_id == run_id
        )

    def employee_payslips(self, tenant_id: str, employee_id: str) -> tuple[Payslip, ...]:
        """Payslips for one employee, newest first."""
        payslips = [
            p for p in self._store.get(tenant_id, Collection.PAYSLIPS)
            if p.employee_id == employee_id
        ]
        payslips.sort(key=lambda p: p.created_at, reverse=True)
        return tuple(payslips)

    # ------------------------------------------------------------------
    # Payslip generation
    # ------------------------------------------------------------------

    def monthly_payslip(
        self, tenant_id: str, employee_id: str, as_of: date | None = None
    ) -> PayslipData:
        employee = self._employee(tenant_id, employee_id)
        payslip = calculate_monthly_payslip(employee, as_of or self._clock.today())
        return self._with_settings(tenant_id, payslip)

    def leave_payslip(
        self,
        tenant_id: str,
        employee_id: str,
        leave_start: DateLike,
        leave_end: DateLike,
        as_of: date | None = None,
    ) -> PayslipData:
        employee = self._employee(tenant_id, employee_id)
        payslip = calculate_leave_salary_payslip(
            employee, leave_start, leave_end, as_of or self._clock.today()
        )
        return self._with_settings(tenant_id, payslip)

    def final_settlement(
        self,
        tenant_id: str,
        employee_id: str,
        last_working_day: DateLike,
        as_of: date | None = None,
    ) -> PayslipData:
        employee = self._employee(tenant_id, employee_id)
        balance = self._leave_balance(tenant_id, employee_id)
        payslip = calculate_final_settlement_payslip(
            employee, last_working_day, balance, as_of or self._clock.today()
        )
        logger.info(
            "final_settlement_calculated",
            extra={
                "tenant_id": tenant_id,
                "employee_id": employee_id,
                "net_pay": format_amount(payslip.net_pay),
            },
        )
        return self._with_settings(tenant_id, payslip)

    def _employee(self, tenant_id: str, employee_id: str) -> Employee:
        return self._store.require(
            tenant_id,
            Collection.EMPLOYEES,
            employee_id,
            lambda: EmployeeNotFoundError(tenant_id, employee_id),
        )

    def _leave_balance(self, tenant_id: str, employee_id: str) -> LeaveBalance | None:
        for balance in self._store.get(tenant_id, Collection.LEAVE_BALANCES):
            if balance.employee_id == employee_id:
                return balance
        return None

    def _with_settings(self, tenant_id: str, payslip: PayslipData) -> PayslipData:
        settings = self._store.get(tenant_id, Collection.COMPANY_SETTINGS)
        if not settings:
            return payslip
        return replace(payslip, company_settings=settings[0])
