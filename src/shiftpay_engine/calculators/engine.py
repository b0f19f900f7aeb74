"""Pay calculation engine - main orchestrator."""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from uuid import uuid4

from shiftpay_engine.calculators.allowances import AllowanceCalculator
from shiftpay_engine.calculators.line_builder import BreakdownBuilder, PayComponents
from shiftpay_engine.calculators.overtime import OvertimeTierSelector
from shiftpay_engine.calculators.rate_resolver import RateResolver
from shiftpay_engine.calculators.rules import AppSettings
from shiftpay_engine.calculators.stacking import StackingPolicyResolver
from shiftpay_engine.calculators.tax_calculator import DeductionCalculator
from shiftpay_engine.calculators.types import (
    ZERO,
    CalculationMode,
    PayBreakdown,
    PayCalculationEntry,
    PayCalculationInput,
    RateSnapshot,
)
from shiftpay_engine.calculators.weekend import WeekendUpliftCalculator

logger = logging.getLogger(__name__)

_ROUNDING_STEPS = {"5min": 5, "15min": 15}


class PayCalculator:
    """Pay calculation orchestrator.

    Calculation pipeline (stable order):
    1) Resolve base and overtime rates (manual overrides win)
    2) Convert hours; tracker-mode daily trim; hours rounding preference
    3) Select the overtime tier and price an overtime hour
    4) Resolve weekend vs overtime per the stacking rule
    5) Base pay, overtime pay, weekend uplift on base hours
    6) Night uplift on night base/overtime hours per the stacking rule
    7) Allowances
    8) Tax and NI on gross
    9) Round each field; total from unrounded gross - tax - ni

    The calculator is pure: it never reads storage and never raises for
    missing or malformed configuration. A configuration that resolves no
    rates yields a breakdown with ``total == 0``.
    """

    def __init__(self) -> None:
        self.weekend = WeekendUpliftCalculator()
        self.overtime_selector = OvertimeTierSelector()
        self.stacking = StackingPolicyResolver(self.weekend)
        self.allowances = AllowanceCalculator()
        self.deductions = DeductionCalculator()

    def compute_pay(self, calc_input: PayCalculationInput, settings: AppSettings) -> PayBreakdown:
        """Compute the breakdown for one day."""
        return BreakdownBuilder.build(self.compute_components(calc_input, settings))

    def compute_components(
        self, calc_input: PayCalculationInput, settings: AppSettings
    ) -> PayComponents:
        """Unrounded components; ``compute_pay`` rounds these for display."""
        rules = settings.pay_rules
        prefs = settings.preferences

        # 1) Rates
        base_rate_value, overtime_rate_value = self.resolve_rates(calc_input, settings)

        # 2) Hours
        base_hours_raw = calc_input.hours_worked.to_hours()
        overtime_hours_raw = calc_input.overtime_worked.to_hours()
        trimmed_base_hours, trimmed_overtime_hours = self._tracker_daily_split(
            calc_input, settings, base_hours_raw, overtime_hours_raw
        )
        base_hours = self.round_hours(trimmed_base_hours, prefs.rounding_rule)
        overtime_hours = self.round_hours(trimmed_overtime_hours, prefs.rounding_rule)

        # 3) Overtime tier, compared before rounding so only a trim counts
        tier = self.overtime_selector.select(rules.overtime, trimmed_base_hours, base_hours_raw)
        overtime_per_hour_base = self.overtime_selector.overtime_rate(
            tier, base_rate_value, overtime_rate_value
        )

        # 4) Weekend vs overtime
        final_overtime_per_hour = self.stacking.final_overtime_rate(
            overtime_per_hour_base,
            base_rate_value,
            calc_input.work_date,
            rules.weekend,
            prefs.stacking_rule,
        )

        # 5) Base, overtime and weekend premium on base hours
        base_pay = base_rate_value * base_hours
        overtime_pay = final_overtime_per_hour * overtime_hours
        weekend_base_rate = self.weekend.apply_weekend_to_rate(
            base_rate_value, calc_input.work_date, rules.weekend
        )
        weekend_uplift = ((weekend_base_rate or ZERO) - base_rate_value) * base_hours

        # 6) Night
        night_per_hour = self.stacking.night_uplift_per_hour(rules.night, base_rate_value)
        night_uplift = self.stacking.night_uplift(
            night_per_hour,
            calc_input.night_base_hours.to_hours() if calc_input.night_base_hours else ZERO,
            calc_input.night_overtime_hours.to_hours() if calc_input.night_overtime_hours else ZERO,
            final_overtime_per_hour,
            base_rate_value,
            prefs.stacking_rule,
        )

        # 7) Allowances
        allowances = self.allowances.compute(rules.allowances, base_hours + overtime_hours)

        # 8) Deductions on unrounded gross
        partial = PayComponents(
            base=base_pay,
            overtime=overtime_pay,
            weekend_uplift=weekend_uplift,
            night_uplift=night_uplift,
            allowances=allowances,
        )
        deductions = self.deductions.compute(partial.gross, rules.tax, rules.ni)
        components = PayComponents(
            base=base_pay,
            overtime=overtime_pay,
            weekend_uplift=weekend_uplift,
            night_uplift=night_uplift,
            allowances=allowances,
            tax=deductions.tax,
            ni=deductions.ni,
        )

        for problem in BreakdownBuilder.validate_components(components):
            logger.debug("Calculation for %s: %s", calc_input.work_date, problem)
        if components.gross == 0 and (base_hours or overtime_hours):
            logger.debug(
                "Calculation for %s produced zero gross from %s worked hours",
                calc_input.work_date,
                base_hours + overtime_hours,
            )
        return components

    def resolve_rates(
        self, calc_input: PayCalculationInput, settings: AppSettings
    ) -> tuple[Decimal, Decimal]:
        """Base and overtime rate values; unresolved overtime falls back to base."""
        resolver = RateResolver(settings.pay_rates)

        if calc_input.manual_base_rate is not None and calc_input.manual_base_rate > 0:
            base_rate_value = calc_input.manual_base_rate
        else:
            base_rate_value = resolver.resolve_base_rate(calc_input.base_rate_id) or ZERO

        if calc_input.manual_overtime_rate is not None and calc_input.manual_overtime_rate > 0:
            overtime_rate_value = calc_input.manual_overtime_rate
        else:
            resolved = resolver.resolve_overtime_rate(calc_input.overtime_rate_id)
            overtime_rate_value = resolved if resolved is not None else base_rate_value

        return base_rate_value, overtime_rate_value

    @staticmethod
    def _tracker_daily_split(
        calc_input: PayCalculationInput,
        settings: AppSettings,
        base_hours: Decimal,
        overtime_hours: Decimal,
    ) -> tuple[Decimal, Decimal]:
        """Move hours above the daily threshold into overtime in tracker mode.

        Applies only when no overtime was supplied.
        """
        if calc_input.mode is not CalculationMode.TRACKER or overtime_hours != 0:
            return base_hours, overtime_hours
        overtime_rules = settings.pay_rules.overtime
        daily = overtime_rules.daily if overtime_rules else None
        threshold = daily.threshold if daily else None
        if not threshold or base_hours <= threshold:
            return base_hours, overtime_hours
        return threshold, base_hours - threshold

    @staticmethod
    def round_hours(hours: Decimal, rounding_rule: str | None) -> Decimal:
        """Round hours to the nearest step of the rounding preference."""
        if not rounding_rule or rounding_rule == "none":
            return hours
        step = _ROUNDING_STEPS.get(rounding_rule)
        if step is None:
            digits = re.sub(r"\D", "", rounding_rule)
            step = int(digits) if digits and int(digits) > 0 else 1
        steps = (hours * 60 / step).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
        return steps * step / Decimal(60)

    @staticmethod
    def compute_settings_version(settings: AppSettings) -> str:
        return BreakdownBuilder.compute_settings_version(settings)

    def build_entry(
        self,
        calc_input: PayCalculationInput,
        settings: AppSettings,
        rate_snapshot: RateSnapshot | None = None,
    ) -> PayCalculationEntry:
        """Compute and package the durable record handed to storage."""
        return PayCalculationEntry(
            id=uuid4(),
            input=calc_input,
            calculated_pay=self.compute_pay(calc_input, settings),
            settings_version=self.compute_settings_version(settings),
            created_at=datetime.now(timezone.utc),
            rate_snapshot=rate_snapshot,
        )

    @staticmethod
    def is_entry_stale(entry_version: str | None, current_version: str | None) -> bool:
        """An entry is stale when saved under different deduction rules."""
        if entry_version:
            return entry_version != current_version
        return bool(current_version)


def compute_pay(calc_input: PayCalculationInput, settings: AppSettings) -> PayBreakdown:
    """Compute a breakdown with a default calculator."""
    return PayCalculator().compute_pay(calc_input, settings)
