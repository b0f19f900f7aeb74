"""Stacking policy between overtime, weekend and night uplifts."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from shiftpay_engine.calculators.rules import NightRule, WeekendRule
from shiftpay_engine.calculators.types import ZERO, StackingRule, UpliftType
from shiftpay_engine.calculators.weekend import HUNDRED, WeekendUpliftCalculator


class StackingPolicyResolver:
    """Combines overlapping uplifts per the stacking preference.

    ``stack`` adds every applicable uplift. ``highestOnly`` pays whichever
    single premium is larger and never both.
    """

    def __init__(self, weekend: WeekendUpliftCalculator | None = None):
        self.weekend = weekend or WeekendUpliftCalculator()

    def final_overtime_rate(
        self,
        overtime_per_hour_base: Decimal,
        base_rate_value: Decimal,
        work_date: date,
        weekend_rule: WeekendRule | None,
        stacking_rule: StackingRule,
    ) -> Decimal:
        """Per-hour rate paid for every overtime hour of the calculation."""
        if not self.weekend.is_applicable(work_date, weekend_rule):
            return overtime_per_hour_base

        if stacking_rule is StackingRule.HIGHEST_ONLY:
            weekend_rate = self.weekend.apply_weekend_to_rate(
                base_rate_value, work_date, weekend_rule
            )
            return max(overtime_per_hour_base, weekend_rate or ZERO)

        stacked = self.weekend.apply_weekend_to_rate(
            overtime_per_hour_base, work_date, weekend_rule
        )
        return stacked if stacked is not None else overtime_per_hour_base

    @staticmethod
    def night_uplift_per_hour(rule: NightRule | None, base_rate_value: Decimal) -> Decimal:
        """Night uplift for one hour: a percentage of base or a fixed amount."""
        if rule is None or rule.enabled is False or rule.value is None:
            return ZERO
        if rule.type is UpliftType.PERCENTAGE:
            return base_rate_value * rule.value / HUNDRED
        if rule.type is UpliftType.FIXED:
            return rule.value
        return ZERO

    @staticmethod
    def night_uplift(
        night_uplift_per_hour: Decimal,
        night_base_hours: Decimal,
        night_overtime_hours: Decimal,
        final_overtime_per_hour: Decimal,
        base_rate_value: Decimal,
        stacking_rule: StackingRule,
    ) -> Decimal:
        """Night premium added on top of base and overtime pay.

        Night base hours always receive the full uplift. Under
        ``highestOnly`` a night overtime hour is topped up only to the better
        of the overtime rate and base + night uplift.
        """
        amount = night_uplift_per_hour * night_base_hours
        if night_overtime_hours <= 0:
            return amount

        if stacking_rule is StackingRule.HIGHEST_ONLY:
            better = max(final_overtime_per_hour, base_rate_value + night_uplift_per_hour)
            delta = better - final_overtime_per_hour
            if delta > 0:
                amount += delta * night_overtime_hours
            return amount

        return amount + night_uplift_per_hour * night_overtime_hours
