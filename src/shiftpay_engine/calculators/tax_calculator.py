"""Tax and national insurance deductions."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from shiftpay_engine.calculators.rules import NIRule, TaxRule
from shiftpay_engine.calculators.types import ZERO

HUNDRED = Decimal("100")


@dataclass(frozen=True)
class Deductions:
    """Unrounded tax and NI for one gross amount."""

    tax: Decimal
    ni: Decimal

    @property
    def total(self) -> Decimal:
        return self.tax + self.ni


class DeductionCalculator:
    """Flat-percentage deductions.

    tax = percentage/100 x max(0, gross - personal allowance)
    ni  = percentage/100 x max(0, gross - threshold)

    A rule that is absent or explicitly disabled deducts nothing. There is no
    banded structure: each deduction is a single flat rate.
    """

    @staticmethod
    def _flat(gross: Decimal, percentage: Decimal | None, deductible: Decimal | None) -> Decimal:
        if not percentage:
            return ZERO
        chargeable = max(ZERO, gross - (deductible or ZERO))
        return percentage / HUNDRED * chargeable

    @classmethod
    def tax(cls, gross: Decimal, rule: TaxRule | None) -> Decimal:
        if rule is None or rule.enabled is False:
            return ZERO
        return cls._flat(gross, rule.percentage, rule.personal_allowance)

    @classmethod
    def ni(cls, gross: Decimal, rule: NIRule | None) -> Decimal:
        if rule is None or rule.enabled is False:
            return ZERO
        return cls._flat(gross, rule.percentage, rule.threshold)

    @classmethod
    def compute(cls, gross: Decimal, tax_rule: TaxRule | None, ni_rule: NIRule | None) -> Deductions:
        return Deductions(tax=cls.tax(gross, tax_rule), ni=cls.ni(gross, ni_rule))
