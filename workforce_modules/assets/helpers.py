"""
Asset helper functions -- pure depreciation arithmetic.

Straight-line only: the cost less residual value is spread evenly over
``useful_life_months``.  Amounts are floats like every other figure in
the workforce records; nothing is rounded here.
"""

from __future__ import annotations

from datetime import date

from workforce_kernel.domain.records import CompanyAsset


def months_elapsed(start: date, as_of: date) -> int:
    """Whole months from ``start`` to ``as_of``; 0 if ``as_of`` is earlier."""
    if as_of <= start:
        return 0
    months = (as_of.year - start.year) * 12 + (as_of.month - start.month)
    if as_of.day < start.day:
        months -= 1
    return max(months, 0)


def straight_line(cost: float, residual_value: float, useful_life_months: int) -> float:
    """
    Monthly straight-line depreciation.

    Returns 0.0 when ``useful_life_months`` is not positive or the
    residual value is at or above cost.
    """
    if useful_life_months <= 0:
        return 0.0
    return max(cost - residual_value, 0.0) / useful_life_months


def book_value(asset: CompanyAsset, as_of: date) -> float:
    """Carrying amount on ``as_of``, never below the residual value."""
    monthly = straight_line(asset.purchase_cost, asset.residual_value, asset.useful_life_months)
    months = min(months_elapsed(asset.purchase_date, as_of), asset.useful_life_months)
    return max(asset.purchase_cost - monthly * months, min(asset.residual_value, asset.purchase_cost))
