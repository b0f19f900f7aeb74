"""Tests for overtime tier selection and overtime pricing."""

from decimal import Decimal

from shiftpay_engine.calculators.overtime import OvertimeTierSelector, SelectedTier
from shiftpay_engine.calculators.rules import OvertimeRules, OvertimeTierRule
from shiftpay_engine.calculators.types import OvertimeBasis, UpliftMode

DAILY = OvertimeTierRule(
    threshold=Decimal("8"), mode=UpliftMode.MULTIPLIER, multiplier=Decimal("2")
)
WEEKLY = OvertimeTierRule(
    threshold=Decimal("38"), mode=UpliftMode.MULTIPLIER, multiplier=Decimal("1.25")
)
EIGHT = Decimal("8")


class TestTierSelection:
    """Selection order of the overtime tier."""

    def test_disabled_selects_nothing(self):
        rules = OvertimeRules(enabled=False, active=OvertimeBasis.DAILY, daily=DAILY)
        assert OvertimeTierSelector.select(rules, EIGHT, EIGHT) is None

    def test_absent_rules_select_nothing(self):
        assert OvertimeTierSelector.select(None, EIGHT, EIGHT) is None

    def test_active_basis_wins(self):
        rules = OvertimeRules(active=OvertimeBasis.WEEKLY, daily=DAILY, weekly=WEEKLY)
        selected = OvertimeTierSelector.select(rules, EIGHT, EIGHT)
        assert selected == SelectedTier(basis=OvertimeBasis.WEEKLY, rule=WEEKLY)

    def test_active_basis_without_mode_falls_through(self):
        rules = OvertimeRules(
            active=OvertimeBasis.DAILY,
            daily=OvertimeTierRule(threshold=EIGHT),
            weekly=WEEKLY,
        )
        selected = OvertimeTierSelector.select(rules, EIGHT, EIGHT)
        assert selected.basis is OvertimeBasis.WEEKLY

    def test_daily_preferred_when_base_hours_trimmed(self):
        rules = OvertimeRules(daily=DAILY, weekly=WEEKLY)
        selected = OvertimeTierSelector.select(rules, EIGHT, Decimal("10"))
        assert selected.basis is OvertimeBasis.DAILY

    def test_untrimmed_hours_prefer_weekly(self):
        rules = OvertimeRules(daily=DAILY, weekly=WEEKLY)
        selected = OvertimeTierSelector.select(rules, EIGHT, EIGHT)
        assert selected.basis is OvertimeBasis.WEEKLY

    def test_untrimmed_daily_only_selects_nothing(self):
        rules = OvertimeRules(daily=DAILY)
        assert OvertimeTierSelector.select(rules, EIGHT, EIGHT) is None


class TestOvertimeRate:
    """Per-hour price of the selected tier."""

    def test_multiplier_mode(self):
        tier = SelectedTier(basis=OvertimeBasis.DAILY, rule=DAILY)
        assert OvertimeTierSelector.overtime_rate(tier, Decimal("20"), Decimal("20")) == Decimal("40")

    def test_fixed_mode(self):
        rule = OvertimeTierRule(mode=UpliftMode.FIXED, uplift=Decimal("0.5"))
        tier = SelectedTier(basis=OvertimeBasis.WEEKLY, rule=rule)
        assert OvertimeTierSelector.overtime_rate(tier, Decimal("20"), Decimal("20")) == Decimal("20.5")

    def test_no_tier_uses_fallback(self):
        assert OvertimeTierSelector.overtime_rate(None, Decimal("20"), Decimal("27")) == Decimal("27")

    def test_missing_multiplier_uses_fallback(self):
        rule = OvertimeTierRule(mode=UpliftMode.MULTIPLIER)
        tier = SelectedTier(basis=OvertimeBasis.DAILY, rule=rule)
        assert OvertimeTierSelector.overtime_rate(tier, Decimal("20"), Decimal("20")) == Decimal("20")
