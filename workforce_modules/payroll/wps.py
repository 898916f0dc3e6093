"""
WPS Salary Information File encoder (``workforce_modules.payroll.wps``).

Responsibility
--------------
Serializes a payroll run into the Wage Protection System SIF format that
the bank ingests: one header record followed by one detail record per
employee, comma separated, joined with a single ``\\n``.

Architecture position
---------------------
**Modules layer** -- pure functions.  No I/O.  Called once per run by
``PayrollService``.

Wire format
-----------
Header (4 fields)::

    establishment_id,YYYYMM,total_net.2f,employee_count

Detail (10 fields)::

    qid,iban,name,basic.2f,allowances.2f,deductions.2f,net.2f,qid,SAL,Salary for {month} {year}

* IBAN has all whitespace removed.
* The QID is repeated as the employee reference number.
* ``SAL`` is the fixed payment-type literal.
* Output is ``header + "\\n" + "\\n".join(details)``; a run with no
  employees therefore ends in a bare ``\\n``.

This layout is a fixed bank protocol.  Do not reorder or reformat fields.

Failure modes
-------------
* ``ComplianceSettingsMissingError`` -- blank establishment id.
* ``InvalidPeriodError`` -- unknown month name or out-of-range year.
* ``InvalidSifFieldError`` -- a text field contains a comma or line break.
"""

from __future__ import annotations

import re
from collections.abc import Sequence

from workforce_kernel.domain.dates import month_number
from workforce_kernel.domain.money import format_amount, net_amount
from workforce_kernel.domain.records import CompanySettings, Employee
from workforce_kernel.exceptions import (
    ComplianceSettingsMissingError,
    InvalidPeriodError,
    InvalidSifFieldError,
)

SIF_CONTENT_TYPE = "text/plain"
PAYMENT_TYPE_SALARY = "SAL"
HEADER_FIELD_COUNT = 4
DETAIL_FIELD_COUNT = 10

_WHITESPACE = re.compile(r"\s")
_SEPARATORS = (",", "\n", "\r")


def payroll_period_code(month: str, year: int) -> str:
    """``("June", 2024) -> "202406"``."""
    number = month_number(month)
    if number is None or isinstance(year, bool) or not isinstance(year, int):
        raise InvalidPeriodError(month, year)
    if not 1 <= year <= 9999:
        raise InvalidPeriodError(month, year)
    return f"{year}{number:02d}"


def sif_filename(month: str, year: int) -> str:
    """``WPS_{MONTH_UPPER}_{YEAR}.sif``."""
    payroll_period_code(month, year)
    return f"WPS_{month.strip().upper()}_{year}.sif"


def total_net_amount(employees: Sequence[Employee]) -> float:
    total = 0.0
    for employee in employees:
        total += net_amount(employee.basic_salary, employee.allowances, employee.deductions)
    return total


def _checked(field: str, value: str, employee_id: str | None = None) -> str:
    if any(sep in value for sep in _SEPARATORS):
        raise InvalidSifFieldError(field, value, employee_id)
    return value


def encode_header(
    settings: CompanySettings,
    employees: Sequence[Employee],
    month: str,
    year: int,
) -> str:
    establishment_id = (settings.establishment_id or "").strip()
    if not establishment_id:
        raise ComplianceSettingsMissingError(settings.tenant_id, "establishment_id")
    return ",".join(
        (
            _checked("establishment_id", establishment_id),
            payroll_period_code(month, year),
            format_amount(total_net_amount(employees)),
            str(len(employees)),
        )
    )


def encode_detail(employee: Employee, month: str, year: int) -> str:
    net = net_amount(employee.basic_salary, employee.allowances, employee.deductions)
    qid = _checked("qid", employee.qid, employee.id)
    return ",".join(
        (
            qid,
            _checked("iban", _WHITESPACE.sub("", employee.iban), employee.id),
            _checked("name", employee.name, employee.id),
            format_amount(employee.basic_salary),
            format_amount(employee.allowances),
            format_amount(employee.deductions),
            format_amount(net),
            qid,
            PAYMENT_TYPE_SALARY,
            _checked("narration", f"Salary for {month} {year}", employee.id),
        )
    )


def generate_sif_content(
    settings: CompanySettings,
    employees: Sequence[Employee],
    month: str,
    year: int,
) -> str:
    """Encode the full SIF payload for one payroll run."""
    header = encode_header(settings, employees, month, year)
    details = [encode_detail(employee, month, year) for employee in employees]
    return f"{header}\n" + "\n".join(details)
