"""
Monetary presentation helpers.

Amounts are plain floats accumulated at full precision.  Rounding to two
decimals happens only here, at presentation time (payslip display, SIF
fields, calculation notes).
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

_CENTS = Decimal("0.01")


def format_amount(value: float, places: int = 2) -> str:
    """Fixed-point string with ``places`` decimals.

    Matches the bank-side reference formatter: the exact binary value of
    the float is rounded, ties away from zero, and a leading ``-`` is
    written only for negative inputs (``-0.0`` formats as ``0.00``).
    """
    quantum = _CENTS if places == 2 else Decimal(1).scaleb(-places)
    magnitude = abs(Decimal(value)).quantize(quantum, rounding=ROUND_HALF_UP)
    if value < 0:
        return f"-{magnitude}"
    return str(magnitude)


def net_amount(basic_salary: float, allowances: float, deductions: float) -> float:
    """Net pay for one compensation row: basic + allowances - deductions."""
    return basic_salary + allowances - deductions
