"""Allowance calculation."""

from __future__ import annotations

from collections.abc import Iterable
from decimal import Decimal

from shiftpay_engine.calculators.rules import AllowanceItem
from shiftpay_engine.calculators.types import ZERO, AllowanceUnit


class AllowanceCalculator:
    """Sums configured allowances for one calculation.

    ``perShift`` and ``perDay`` add their value once per calculation,
    ``perHour`` adds value x total hours. Other units add nothing.
    """

    @staticmethod
    def item_amount(item: AllowanceItem, total_hours: Decimal) -> Decimal:
        if item.unit in (AllowanceUnit.PER_SHIFT, AllowanceUnit.PER_DAY):
            return item.value
        if item.unit is AllowanceUnit.PER_HOUR:
            return item.value * total_hours
        return ZERO

    @classmethod
    def compute(cls, items: Iterable[AllowanceItem], total_hours: Decimal) -> Decimal:
        return sum((cls.item_amount(item, total_hours) for item in items), ZERO)
