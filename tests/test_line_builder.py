"""Tests for the breakdown builder and settings fingerprints."""

from decimal import Decimal

from shiftpay_engine.calculators.line_builder import BreakdownBuilder, PayComponents
from tests.factories import build_settings


class TestRounding:
    """Per-field rounding."""

    def test_round_to_cents(self):
        """Half-up rounding to 2 decimal places."""
        assert BreakdownBuilder.round_to_cents(Decimal("10.125")) == Decimal("10.13")
        assert BreakdownBuilder.round_to_cents(Decimal("10.124")) == Decimal("10.12")
        assert BreakdownBuilder.round_to_cents(Decimal("10.135")) == Decimal("10.14")

    def test_total_rounded_from_unrounded_gross(self):
        """Fields round independently; total is not the sum of rounded fields."""
        components = PayComponents(
            base=Decimal("10.004"),
            overtime=Decimal("10.004"),
            tax=Decimal("0"),
        )
        breakdown = BreakdownBuilder.build(components)
        assert breakdown.base == Decimal("10.00")
        assert breakdown.overtime == Decimal("10.00")
        assert breakdown.gross == Decimal("20.01")
        assert breakdown.total == Decimal("20.01")
        assert breakdown.base + breakdown.overtime != breakdown.total

    def test_uplifts_combine_weekend_and_night(self):
        breakdown = BreakdownBuilder.build(
            PayComponents(weekend_uplift=Decimal("1.5"), night_uplift=Decimal("2.25"))
        )
        assert breakdown.uplifts == Decimal("3.75")
        assert breakdown.weekend_uplift == Decimal("1.50")
        assert breakdown.night_uplift == Decimal("2.25")

    def test_total_may_go_negative(self):
        """Deductions above gross are not clamped."""
        breakdown = BreakdownBuilder.build(
            PayComponents(base=Decimal("10"), tax=Decimal("8"), ni=Decimal("4"))
        )
        assert breakdown.total == Decimal("-2.00")

    def test_validate_components_reports_negatives(self):
        errors = BreakdownBuilder.validate_components(PayComponents(base=Decimal("-1")))
        assert errors == ["base is negative: -1"]


class TestSettingsVersion:
    """Fingerprint of the tax/NI configuration."""

    def test_is_32_hex_chars(self):
        version = BreakdownBuilder.compute_settings_version(build_settings())
        assert len(version) == 32
        int(version, 16)

    def test_ignores_non_deduction_settings(self):
        """Rates, overtime and preferences do not change the version."""
        a = build_settings(pay_rules={"tax": {"enabled": True, "percentage": 20}})
        b = build_settings(
            pay_rules={
                "tax": {"enabled": True, "percentage": 20},
                "overtime": {"active": "weekly", "weekly": {"threshold": 38, "mode": "fixed", "uplift": 2}},
            },
            preferences={"stackingRule": "highestOnly"},
            pay_rates=[{"id": "base", "label": "New", "value": 35}],
        )
        assert BreakdownBuilder.compute_settings_version(a) == BreakdownBuilder.compute_settings_version(b)

    def test_changes_with_tax_rules(self):
        a = build_settings(pay_rules={"tax": {"enabled": True, "percentage": 20}})
        b = build_settings(pay_rules={"tax": {"enabled": True, "percentage": 21}})
        assert BreakdownBuilder.compute_settings_version(a) != BreakdownBuilder.compute_settings_version(b)

    def test_changes_with_ni_threshold(self):
        a = build_settings(pay_rules={"ni": {"percentage": 12, "threshold": 100}})
        b = build_settings(pay_rules={"ni": {"percentage": 12, "threshold": 120}})
        assert BreakdownBuilder.compute_settings_version(a) != BreakdownBuilder.compute_settings_version(b)

    def test_equivalent_numbers_share_a_version(self):
        """20, 20.0 and "20.00" fingerprint identically."""
        versions = {
            BreakdownBuilder.compute_settings_version(
                build_settings(pay_rules={"tax": {"enabled": True, "percentage": value}})
            )
            for value in (20, 20.0, "20.00")
        }
        assert len(versions) == 1
