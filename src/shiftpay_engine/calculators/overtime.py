"""Overtime tier selection."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal

from shiftpay_engine.calculators.rules import OvertimeRules, OvertimeTierRule
from shiftpay_engine.calculators.types import OvertimeBasis, UpliftMode

logger = logging.getLogger(__name__)

# Base hours count as trimmed only when they drop by more than this.
TRIM_TOLERANCE = Decimal("0.000001")


@dataclass(frozen=True)
class SelectedTier:
    """The overtime tier chosen for a calculation."""

    basis: OvertimeBasis
    rule: OvertimeTierRule


class OvertimeTierSelector:
    """Chooses the daily or weekly overtime tier and prices an overtime hour.

    Selection order:
    1. overtime explicitly disabled -> no tier
    2. explicit ``active`` basis whose tier has a mode -> that tier
    3. daily tier with a mode, if the base hours were trimmed below the raw
       base hours supplied by the caller
    4. weekly tier with a mode
    """

    @staticmethod
    def select(
        rules: OvertimeRules | None,
        base_hours: Decimal,
        base_hours_raw: Decimal,
    ) -> SelectedTier | None:
        if rules is None or rules.enabled is False:
            return None

        active_tier = rules.tier(rules.active)
        if rules.active is not None and active_tier is not None and active_tier.mode is not None:
            return SelectedTier(basis=rules.active, rule=active_tier)

        # Only reachable when the hours were trimmed before tier selection,
        # e.g. the tracker-mode daily split in PayCalculator.
        daily = rules.daily
        if daily is not None and daily.mode is not None:
            if base_hours_raw - base_hours > TRIM_TOLERANCE:
                logger.debug("Selected daily overtime tier from trimmed base hours")
                return SelectedTier(basis=OvertimeBasis.DAILY, rule=daily)

        weekly = rules.weekly
        if weekly is not None and weekly.mode is not None:
            return SelectedTier(basis=OvertimeBasis.WEEKLY, rule=weekly)
        return None

    @staticmethod
    def overtime_rate(
        tier: SelectedTier | None,
        base_rate_value: Decimal,
        fallback_rate_value: Decimal,
    ) -> Decimal:
        """Per-hour overtime rate before any weekend adjustment.

        ``fallback_rate_value`` is the resolved overtime rate (or the base
        rate when none resolved); it applies when no tier prices the hour.
        """
        if tier is None:
            return fallback_rate_value
        rule = tier.rule
        if rule.mode is UpliftMode.MULTIPLIER and rule.multiplier is not None:
            return base_rate_value * rule.multiplier
        if rule.mode is UpliftMode.FIXED and rule.uplift is not None:
            return base_rate_value + rule.uplift
        return fallback_rate_value
