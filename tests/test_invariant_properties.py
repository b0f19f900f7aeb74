"""Property-based tests for breakdown invariants.

These tests use hypothesis to generate rate, rule and hour combinations and
verify that the breakdown invariants hold for all of them.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from hypothesis import given, settings, strategies as st

from shiftpay_engine.calculators.engine import PayCalculator
from shiftpay_engine.calculators.types import HoursAndMinutes, PayCalculationInput
from tests.factories import MONDAY, SATURDAY, build_settings

CENTS = Decimal("0.01")

money = st.decimals(min_value=Decimal("0"), max_value=Decimal("200"), places=2)
hours = st.integers(min_value=0, max_value=16)
minutes = st.integers(min_value=0, max_value=59)
percentage = st.decimals(min_value=Decimal("0"), max_value=Decimal("50"), places=1)
at_least_one = st.decimals(min_value=Decimal("1"), max_value=Decimal("3"), places=2)


@st.composite
def scenarios(draw) -> tuple[dict[str, Any], dict[str, Any], PayCalculationInput]:
    """A pay rules document, preferences and an input with uplifts >= 0."""
    overtime_mode = draw(st.sampled_from(["multiplier", "fixed"]))
    overtime_tier: dict[str, Any] = {"threshold": 8, "mode": overtime_mode}
    if overtime_mode == "multiplier":
        overtime_tier["multiplier"] = str(draw(at_least_one))
    else:
        overtime_tier["uplift"] = str(draw(money))

    weekend_mode = draw(st.sampled_from(["multiplier", "fixed"]))
    weekend: dict[str, Any] = {"days": ["Sat", "Sun"], "mode": weekend_mode}
    if weekend_mode == "multiplier":
        weekend["multiplier"] = str(draw(at_least_one))
    else:
        weekend["uplift"] = str(draw(money))

    pay_rules = {
        "overtime": {"active": draw(st.sampled_from(["daily", "weekly"])),
                     "daily": overtime_tier, "weekly": overtime_tier},
        "weekend": weekend,
        "night": {
            "start": "22:00",
            "end": "06:00",
            "type": draw(st.sampled_from(["fixed", "percentage"])),
            "value": str(draw(money)),
        },
        "allowances": [
            {"id": "meal", "type": "Meal", "value": str(draw(money)), "unit": "perShift"},
            {"id": "tool", "type": "Tools", "value": str(draw(money)), "unit": "perHour"},
        ],
        "tax": {"enabled": draw(st.booleans()), "percentage": str(draw(percentage)),
                "personalAllowance": str(draw(money))},
        "ni": {"enabled": draw(st.booleans()), "percentage": str(draw(percentage)),
               "threshold": str(draw(money))},
    }
    rates = [{"id": "base", "label": "Standard", "value": str(draw(money))}]
    preferences = {"roundingRule": draw(st.sampled_from(["none", "5min", "15min"]))}

    calc_input = PayCalculationInput(
        work_date=draw(st.sampled_from([MONDAY, SATURDAY])),
        base_rate_id="base",
        hours_worked=HoursAndMinutes(draw(hours), draw(minutes)),
        overtime_worked=HoursAndMinutes(draw(hours), draw(minutes)),
        night_base_hours=HoursAndMinutes(draw(hours), draw(minutes)),
        night_overtime_hours=HoursAndMinutes(draw(hours), draw(minutes)),
    )
    return {"pay_rules": pay_rules, "pay_rates": rates}, preferences, calc_input


class TestBreakdownInvariants:
    """Invariants of every computed breakdown."""

    @given(scenarios(), st.sampled_from(["stack", "highestOnly"]))
    @settings(max_examples=200, deadline=None)
    def test_fields_non_negative_except_total(self, scenario, stacking):
        """Every field except total is >= 0."""
        document, preferences, calc_input = scenario
        app_settings = build_settings(
            preferences={**preferences, "stackingRule": stacking}, **document
        )
        result = PayCalculator().compute_pay(calc_input, app_settings)
        for name in ("base", "overtime", "uplifts", "allowances", "gross", "tax", "ni"):
            assert getattr(result, name) >= 0, name

    @given(scenarios(), st.sampled_from(["stack", "highestOnly"]))
    @settings(max_examples=200, deadline=None)
    def test_total_rounded_from_unrounded_gross(self, scenario, stacking):
        """total == round(gross - tax - ni) over the unrounded components."""
        document, preferences, calc_input = scenario
        app_settings = build_settings(
            preferences={**preferences, "stackingRule": stacking}, **document
        )
        calculator = PayCalculator()
        components = calculator.compute_components(calc_input, app_settings)
        result = calculator.compute_pay(calc_input, app_settings)
        expected = (components.gross - components.tax - components.ni).quantize(
            CENTS, rounding=ROUND_HALF_UP
        )
        assert result.total == expected

    @given(scenarios())
    @settings(max_examples=200, deadline=None)
    def test_stack_pays_at_least_highest_only(self, scenario):
        """With uplifts >= 0 and deductions <= 50%, stacking never pays less.

        Overtime is always tier-priced here, so its rate is at least the base
        rate. A configured overtime rate below the base rate with no tier is
        left out: there highestOnly can pay more than stack.
        """
        document, preferences, calc_input = scenario
        calculator = PayCalculator()
        stacked = calculator.compute_pay(
            calc_input,
            build_settings(preferences={**preferences, "stackingRule": "stack"}, **document),
        )
        highest = calculator.compute_pay(
            calc_input,
            build_settings(preferences={**preferences, "stackingRule": "highestOnly"}, **document),
        )
        assert stacked.gross >= highest.gross
        assert stacked.total >= highest.total

    @given(scenarios())
    @settings(max_examples=100, deadline=None)
    def test_deterministic(self, scenario):
        """Identical inputs and settings give identical breakdowns."""
        document, preferences, calc_input = scenario
        app_settings = build_settings(preferences=preferences, **document)
        assert PayCalculator().compute_pay(calc_input, app_settings) == PayCalculator().compute_pay(
            calc_input, app_settings
        )
