"""Pay calculation engine."""

from shiftpay_engine.calculators.allowances import AllowanceCalculator
from shiftpay_engine.calculators.engine import PayCalculator, compute_pay
from shiftpay_engine.calculators.line_builder import BreakdownBuilder, PayComponents
from shiftpay_engine.calculators.night import NightUpliftAllocator
from shiftpay_engine.calculators.overtime import OvertimeTierSelector
from shiftpay_engine.calculators.rate_resolver import RateResolver
from shiftpay_engine.calculators.rules import AppSettings
from shiftpay_engine.calculators.stacking import StackingPolicyResolver
from shiftpay_engine.calculators.tax_calculator import DeductionCalculator
from shiftpay_engine.calculators.weekend import WeekendUpliftCalculator

__all__ = [
    "AllowanceCalculator",
    "AppSettings",
    "BreakdownBuilder",
    "DeductionCalculator",
    "NightUpliftAllocator",
    "OvertimeTierSelector",
    "PayCalculator",
    "PayComponents",
    "RateResolver",
    "StackingPolicyResolver",
    "WeekendUpliftCalculator",
    "compute_pay",
]
