"""Breakdown builder with per-field rounding and settings fingerprints."""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from shiftpay_engine.calculators.rules import AppSettings
from shiftpay_engine.calculators.types import ZERO, PayBreakdown


@dataclass(frozen=True)
class PayComponents:
    """Unrounded monetary components of one calculation."""

    base: Decimal = ZERO
    overtime: Decimal = ZERO
    weekend_uplift: Decimal = ZERO
    night_uplift: Decimal = ZERO
    allowances: Decimal = ZERO
    tax: Decimal = ZERO
    ni: Decimal = ZERO

    @property
    def uplifts(self) -> Decimal:
        return self.weekend_uplift + self.night_uplift

    @property
    def gross(self) -> Decimal:
        return self.base + self.overtime + self.uplifts + self.allowances

    @property
    def total(self) -> Decimal:
        return self.gross - self.tax - self.ni


class BreakdownBuilder:
    """Builds the displayed breakdown from unrounded components.

    Rounding:
    - every field is rounded to 2 decimals (half-up) on its own
    - ``total`` is rounded once from the unrounded ``gross - tax - ni``
    - no rounding line reconciles the difference; the rounded fields are
      not guaranteed to sum to the rounded total
    """

    OUTPUT_PRECISION = Decimal("0.01")

    @staticmethod
    def round_to_cents(amount: Decimal) -> Decimal:
        """Round amount to 2 decimal places."""
        return amount.quantize(BreakdownBuilder.OUTPUT_PRECISION, rounding=ROUND_HALF_UP)

    @classmethod
    def build(cls, components: PayComponents) -> PayBreakdown:
        money = cls.round_to_cents
        return PayBreakdown(
            base=money(components.base),
            overtime=money(components.overtime),
            uplifts=money(components.uplifts),
            allowances=money(components.allowances),
            gross=money(components.gross),
            tax=money(components.tax),
            ni=money(components.ni),
            total=money(components.total),
            weekend_uplift=money(components.weekend_uplift),
            night_uplift=money(components.night_uplift),
        )

    @staticmethod
    def validate_components(components: PayComponents) -> list[str]:
        """Report components that went negative (only ``total`` may)."""
        errors = []
        for name in ("base", "overtime", "weekend_uplift", "night_uplift", "allowances", "tax", "ni"):
            value = getattr(components, name)
            if value < 0:
                errors.append(f"{name} is negative: {value}")
        return errors

    @staticmethod
    def deduction_rules_document(settings: AppSettings) -> dict[str, Any]:
        """Canonical document of the deduction-affecting rules only."""
        tax = settings.pay_rules.tax
        ni = settings.pay_rules.ni
        return {
            "tax": {
                "enabled": tax.enabled,
                "percentage": _canonical_number(tax.percentage),
                "personalAllowance": _canonical_number(tax.personal_allowance),
            } if tax else None,
            "ni": {
                "enabled": ni.enabled,
                "percentage": _canonical_number(ni.percentage),
                "threshold": _canonical_number(ni.threshold),
            } if ni else None,
        }

    @classmethod
    def compute_settings_version(cls, settings: AppSettings) -> str:
        """Stable fingerprint of the tax/NI configuration.

        Entries saved under a different fingerprint are stale once those
        rules change.
        """
        canonical = cls.deduction_rules_document(settings)
        json_str = json.dumps(canonical, sort_keys=True)
        return hashlib.sha256(json_str.encode()).hexdigest()[:32]


def _canonical_number(value: Decimal | None) -> str | None:
    """20, 20.0 and "20.00" all fingerprint as "20"."""
    if value is None:
        return None
    return format(value.normalize(), "f")
