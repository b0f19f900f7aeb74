"""Pay rate resolution by identifier."""

from __future__ import annotations

from collections.abc import Iterable
from decimal import Decimal

from shiftpay_engine.calculators.rules import PayRate
from shiftpay_engine.calculators.types import RateKind


class RateResolver:
    """Resolves configured pay rates from a settings snapshot.

    Resolution never raises: an unknown or null id yields None, which callers
    read as "use 0" or "fall back to the base rate".
    """

    def __init__(self, rates: Iterable[PayRate]):
        self.rates = tuple(rates)

    def find(self, rate_id: str | None, exclude_kind: RateKind | None = None) -> PayRate | None:
        """Return the first rate with a matching id, skipping ``exclude_kind``."""
        if rate_id is None:
            return None
        for rate in self.rates:
            if rate.id != rate_id:
                continue
            if exclude_kind is not None and rate.kind is exclude_kind:
                continue
            return rate
        return None

    def resolve_value(
        self, rate_id: str | None, exclude_kind: RateKind | None = None
    ) -> Decimal | None:
        """Numeric value of the matching rate, or None if absent."""
        rate = self.find(rate_id, exclude_kind)
        return rate.value if rate is not None else None

    def resolve_base_rate(self, rate_id: str | None) -> Decimal | None:
        """Resolve a rate usable as the base rate (any kind but overtime)."""
        return self.resolve_value(rate_id, exclude_kind=RateKind.OVERTIME)

    def resolve_overtime_rate(self, rate_id: str | None) -> Decimal | None:
        """Resolve a rate usable as the overtime rate (any kind but base)."""
        return self.resolve_value(rate_id, exclude_kind=RateKind.BASE)
