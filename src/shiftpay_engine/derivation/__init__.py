"""Tracker-mode derivation of worked hours from recorded shift intervals."""

from shiftpay_engine.derivation.engine import (
    DerivationResult,
    SubmittedDaySource,
    TrackerDerivationEngine,
    WorkedIntervalSource,
)

__all__ = [
    "DerivationResult",
    "SubmittedDaySource",
    "TrackerDerivationEngine",
    "WorkedIntervalSource",
]
