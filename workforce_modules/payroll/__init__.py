"""
Payroll Module (``workforce_modules.payroll``).

Responsibility
--------------
Payroll runs with WPS/SIF file generation, payslips, and the settlement
calculator (monthly, leave salary, final settlement with gratuity and
leave encashment).

Architecture position
---------------------
**Modules layer** -- pure helpers (``helpers.py``, ``wps.py``), value
objects (``models.py``), the run lifecycle (``workflows.py``) and a
service facade over the kernel record store (``service.py``).
"""

from workforce_modules.payroll.models import (
    GratuityResult,
    PayrollRunResult,
    PayslipData,
    PayslipType,
)
from workforce_modules.payroll.service import PayrollService
from workforce_modules.payroll.workflows import PAYROLL_RUN_WORKFLOW

__all__ = [
    "GratuityResult",
    "PayrollRunResult",
    "PayslipData",
    "PayslipType",
    "PayrollService",
    "PAYROLL_RUN_WORKFLOW",
]
