"""
Payroll Domain Models (``workforce_modules.payroll.models``).

Responsibility
--------------
Derived payroll value objects: payslip breakdowns (monthly, leave salary,
final settlement), gratuity results, and the result of a payroll run.
Persisted payroll records (``PayrollRun``, ``Payslip``) live in
``workforce_kernel.domain.records``.

Architecture position
---------------------
**Modules layer** -- pure data definitions with ZERO I/O.  Produced by
the settlement calculator and ``PayrollService``.

Invariants enforced
-------------------
* All models are ``frozen=True``.
* ``net_pay == sum(earnings) - sum(deductions)`` at full float precision.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum

from workforce_kernel.domain.records import CompanySettings, Employee, Payslip, PayrollRun


class PayslipType(Enum):
    MONTHLY = "Monthly"
    LEAVE = "Leave"
    FINAL_SETTLEMENT = "Final Settlement"


# Earnings / deduction categories
BASIC_SALARY = "basic_salary"
ALLOWANCES = "allowances"
LEAVE_ENCASHMENT = "leave_encashment"
GRATUITY = "gratuity"
STANDARD_DEDUCTIONS = "standard_deductions"


@dataclass(frozen=True)
class GratuityResult:
    """End-of-service gratuity for one employee."""
    years_of_service: float
    gratuity_amount: float


@dataclass(frozen=True)
class PayslipData:
    """A derived payslip.  Not a stored record."""
    payslip_type: PayslipType
    employee: Employee
    period: str
    pay_date: date
    earnings: dict[str, float]
    deductions: dict[str, float]
    calculation_details: tuple[str, ...] = ()
    company_settings: CompanySettings | None = None

    @property
    def gross_pay(self) -> float:
        return sum(self.earnings.values())

    @property
    def total_deductions(self) -> float:
        return sum(self.deductions.values())

    @property
    def net_pay(self) -> float:
        return self.gross_pay - self.total_deductions


@dataclass(frozen=True)
class PayrollRunResult:
    """What ``PayrollService.run`` hands back to the caller."""
    payroll_run: PayrollRun
    wps_file_content: str
    filename: str
    payslips: tuple[Payslip, ...] = field(default=())
