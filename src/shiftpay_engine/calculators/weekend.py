"""Weekend uplift calculation."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from shiftpay_engine.calculators.rules import DEFAULT_WEEKEND_DAYS, WEEKDAY_NAMES, WeekendRule
from shiftpay_engine.calculators.types import UpliftMode, UpliftType, parse_date

HUNDRED = Decimal("100")


class WeekendUpliftCalculator:
    """Decides weekend days and applies the weekend uplift to a per-hour rate.

    Uplift precedence:
    1. ``mode == "multiplier"``: rate x multiplier
    2. ``mode == "fixed"``: rate + uplift
    3. legacy ``{type, value}``: percentage -> rate x (1 + value/100), fixed -> rate + value
    4. otherwise the rate is returned unchanged
    """

    @staticmethod
    def is_weekend(work_date: date | str | None, rule: WeekendRule | None) -> bool:
        """Whether ``work_date`` falls on one of the rule's weekend days."""
        parsed = parse_date(work_date)
        if parsed is None:
            return False
        days = rule.days if rule is not None else DEFAULT_WEEKEND_DAYS
        return WEEKDAY_NAMES[parsed.weekday()] in days

    @classmethod
    def is_applicable(cls, work_date: date | str | None, rule: WeekendRule | None) -> bool:
        """Weekend day under a present, not explicitly disabled rule."""
        if rule is None or rule.enabled is False:
            return False
        return cls.is_weekend(work_date, rule)

    @classmethod
    def apply_weekend_to_rate(
        cls,
        rate: Decimal | None,
        work_date: date | str | None,
        rule: WeekendRule | None,
    ) -> Decimal | None:
        """Return ``rate`` with the weekend uplift applied, if applicable."""
        if not rate or rule is None or not cls.is_applicable(work_date, rule):
            return rate

        if rule.mode is UpliftMode.MULTIPLIER:
            if rule.multiplier is None:
                return rate
            return rate * rule.multiplier
        if rule.mode is UpliftMode.FIXED:
            if rule.uplift is None:
                return rate
            return rate + rule.uplift

        legacy = rule.legacy
        if legacy is not None:
            if legacy.type is UpliftType.PERCENTAGE:
                return rate * (1 + legacy.value / HUNDRED)
            if legacy.type is UpliftType.FIXED:
                return rate + legacy.value
        return rate
