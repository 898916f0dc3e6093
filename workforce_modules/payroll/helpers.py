"""
Settlement Calculator (``workforce_modules.payroll.helpers``).

Responsibility
--------------
Pure calculation functions for monthly payslips, leave-salary payslips,
final settlements (pro-rated salary, leave encashment, end-of-service
gratuity), and the gratuity figures on their own.

Architecture position
---------------------
**Modules layer** -- pure helper functions.  No I/O, no store, no clock:
the pay date is passed in as ``as_of``.  Called by ``PayrollService``
or from tests.

Invariants enforced
-------------------
* Monetary arithmetic is float at full precision.  Nothing is rounded
  here except the figures embedded in human-readable notes.
* Daily rate for encashment and gratuity is ``basic_salary / 30``
  regardless of the calendar month length.
* Gratuity is zero for less than one year of service.
* Only the Annual leave entry counts toward encashment.

Failure modes
-------------
* ``InvalidDateRangeError`` -- final settlement with a last working day
  before the join date, or a leave payslip whose end precedes its start.
* ``ValidationFailedError`` -- unparseable date strings.

Audit relevance
---------------
Final settlement notes are reproduced verbatim so that the paid figures
can be traced back to worked days, unused leave and years of service.
"""

from __future__ import annotations

from datetime import date

from workforce_kernel.domain.dates import (
    DateLike,
    days_in_month,
    month_name,
    period_label,
    to_date,
)
from workforce_kernel.domain.money import format_amount
from workforce_kernel.domain.records import Employee, LeaveBalance, LeaveType
from workforce_kernel.exceptions import InvalidDateRangeError
from workforce_modules.payroll.models import (
    ALLOWANCES,
    BASIC_SALARY,
    GRATUITY,
    LEAVE_ENCASHMENT,
    STANDARD_DEDUCTIONS,
    GratuityResult,
    PayslipData,
    PayslipType,
)

DAYS_PER_YEAR = 365.25
DAILY_RATE_DIVISOR = 30
GRATUITY_WEEKS_PER_YEAR = 3


def calculate_years_of_service(join_date: DateLike, last_working_day: DateLike) -> float:
    """Fractional years between two dates, or 0 if the end precedes the start."""
    start = to_date(join_date, "join_date")
    end = to_date(last_working_day, "last_working_day")
    if end < start:
        return 0.0
    return (end - start).days / DAYS_PER_YEAR


def calculate_gratuity_amount(basic_salary: float, years_of_service: float) -> float:
    """
    Three weeks' wage per year of service.

    Weekly wage is seven times the 30-day daily rate.  Less than one year
    of service earns nothing.
    """
    if years_of_service < 1:
        return 0.0
    daily_wage = basic_salary / DAILY_RATE_DIVISOR
    weekly_wage = daily_wage * 7
    return weekly_wage * GRATUITY_WEEKS_PER_YEAR * years_of_service


def calculate_gratuity(employee: Employee, last_working_day: DateLike) -> GratuityResult:
    years = calculate_years_of_service(employee.join_date, last_working_day)
    return GratuityResult(
        years_of_service=years,
        gratuity_amount=calculate_gratuity_amount(employee.basic_salary, years),
    )


def unused_annual_leave(leave_balance: LeaveBalance | None) -> float:
    if leave_balance is None:
        return 0.0
    annual = leave_balance.detail(LeaveType.ANNUAL)
    if annual is None:
        return 0.0
    return max(0.0, annual.total_days - annual.used_days)


def _standard_components(employee: Employee) -> tuple[dict[str, float], dict[str, float]]:
    earnings = {
        BASIC_SALARY: employee.basic_salary,
        ALLOWANCES: employee.allowances,
    }
    deductions = {STANDARD_DEDUCTIONS: employee.deductions}
    return earnings, deductions


def calculate_monthly_payslip(employee: Employee, as_of: date) -> PayslipData:
    earnings, deductions = _standard_components(employee)
    return PayslipData(
        payslip_type=PayslipType.MONTHLY,
        employee=employee,
        period=period_label(as_of),
        pay_date=as_of,
        earnings=earnings,
        deductions=deductions,
    )


def calculate_leave_salary_payslip(
    employee: Employee,
    leave_start: DateLike,
    leave_end: DateLike,
    as_of: date,
) -> PayslipData:
    """
    Salary paid ahead of a leave period.

    Same composition as the monthly payslip; the leave window is only
    annotated, not pro-rated.
    """
    start = to_date(leave_start, "leave_start")
    end = to_date(leave_end, "leave_end")
    if end < start:
        raise InvalidDateRangeError(start.isoformat(), end.isoformat(), "leave_dates")
    earnings, deductions = _standard_components(employee)
    return PayslipData(
        payslip_type=PayslipType.LEAVE,
        employee=employee,
        period=f"Leave Salary: {start.isoformat()} to {end.isoformat()}",
        pay_date=as_of,
        earnings=earnings,
        deductions=deductions,
        calculation_details=(
            "This payslip reflects the salary paid for an upcoming leave period.",
        ),
    )


def calculate_final_settlement_payslip(
    employee: Employee,
    last_working_day: DateLike,
    leave_balance: LeaveBalance | None,
    as_of: date,
) -> PayslipData:
    """
    Final settlement on exit.

    Earnings: pro-rated basic and allowances for the final month, annual
    leave encashment and gratuity.  Deductions: pro-rated standard
    deductions.
    """
    end = to_date(last_working_day, "last_working_day")
    if end < employee.join_date:
        raise InvalidDateRangeError(
            employee.join_date.isoformat(), end.isoformat(), "last_working_day"
        )

    month_days = days_in_month(end)
    worked_days = end.day

    pro_rata_basic = (employee.basic_salary / month_days) * worked_days
    pro_rata_allowances = (employee.allowances / month_days) * worked_days
    pro_rata_deductions = (employee.deductions / month_days) * worked_days

    unused_days = unused_annual_leave(leave_balance)
    daily_rate = employee.basic_salary / DAILY_RATE_DIVISOR
    leave_encashment = daily_rate * unused_days

    gratuity = calculate_gratuity(employee, end)

    return PayslipData(
        payslip_type=PayslipType.FINAL_SETTLEMENT,
        employee=employee,
        period=f"Final Settlement as of {end.isoformat()}",
        pay_date=as_of,
        earnings={
            BASIC_SALARY: pro_rata_basic,
            ALLOWANCES: pro_rata_allowances,
            LEAVE_ENCASHMENT: leave_encashment,
            GRATUITY: gratuity.gratuity_amount,
        },
        deductions={STANDARD_DEDUCTIONS: pro_rata_deductions},
        calculation_details=(
            f"Pro-rated salary for {worked_days} days in {month_name(end.month)}.",
            f"Encashment for {format_amount(unused_days)} unused annual leave days.",
            f"End-of-service gratuity for {format_amount(gratuity.years_of_service)} years of service.",
        ),
    )
