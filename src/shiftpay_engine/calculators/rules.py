"""Pay rate and pay rule configuration snapshot.

The settings collaborator stores a camelCase JSON document. ``AppSettings.from_dict``
reads that document, migrating legacy shapes at read time:

- flat overtime fields (``dailyThreshold``, ``dailyMultiplier``, ...) become
  multiplier-mode ``daily``/``weekly`` tiers
- a weekend rule without ``mode`` keeps its ``{type, value}`` as a
  ``LegacyUplift`` which is consulted only as a fallback and never written back
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any

from shiftpay_engine.calculators.types import (
    ZERO,
    AllowanceUnit,
    OvertimeBasis,
    PayCycle,
    RateKind,
    StackingRule,
    UpliftMode,
    UpliftType,
    to_decimal,
    to_enum,
)

WEEKDAY_NAMES = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
FULL_WEEKDAY_NAMES = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)
DEFAULT_WEEKEND_DAYS = frozenset({"Sat", "Sun"})


def normalize_day_name(name: Any) -> str | None:
    """Map "sat", "Saturday" or "SAT" to the short form "Sat"."""
    if not isinstance(name, str):
        return None
    prefix = name.strip()[:3].capitalize()
    return prefix if prefix in WEEKDAY_NAMES else None


def _optional_bool(value: Any) -> bool | None:
    return value if isinstance(value, bool) else None


def _section(data: Any, key: str) -> dict[str, Any] | None:
    if not isinstance(data, dict):
        return None
    value = data.get(key)
    return value if isinstance(value, dict) else None


@dataclass(frozen=True)
class PayRate:
    """A configured per-hour rate."""

    id: str
    label: str
    value: Decimal
    kind: RateKind = RateKind.BASE
    created_at: int = 0
    updated_at: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PayRate:
        return cls(
            id=str(data.get("id", "")),
            label=str(data.get("label", "Rate")),
            value=to_decimal(data.get("value")) or ZERO,
            kind=to_enum(RateKind, data.get("type", data.get("kind"))) or RateKind.BASE,
            created_at=int(to_decimal(data.get("createdAt")) or 0),
            updated_at=int(to_decimal(data.get("updatedAt")) or 0),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "label": self.label,
            "value": str(self.value),
            "type": self.kind.value,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }


@dataclass(frozen=True)
class OvertimeTierRule:
    """Daily or weekly overtime tier."""

    threshold: Decimal | None = None  # hours
    mode: UpliftMode | None = None
    multiplier: Decimal | None = None
    uplift: Decimal | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> OvertimeTierRule:
        return cls(
            threshold=to_decimal(data.get("threshold")),
            mode=to_enum(UpliftMode, data.get("mode")),
            multiplier=to_decimal(data.get("multiplier")),
            uplift=to_decimal(data.get("uplift", data.get("upliftAmount"))),
        )

    def to_dict(self) -> dict[str, Any]:
        return _compact({
            "threshold": self.threshold,
            "mode": self.mode,
            "multiplier": self.multiplier,
            "uplift": self.uplift,
        })


@dataclass(frozen=True)
class OvertimeRules:
    """Overtime configuration: two tiers and the active basis."""

    enabled: bool | None = None
    active: OvertimeBasis | None = None
    daily: OvertimeTierRule | None = None
    weekly: OvertimeTierRule | None = None

    def tier(self, basis: OvertimeBasis | None) -> OvertimeTierRule | None:
        if basis is OvertimeBasis.DAILY:
            return self.daily
        if basis is OvertimeBasis.WEEKLY:
            return self.weekly
        return None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> OvertimeRules:
        daily_raw = _section(data, "daily")
        weekly_raw = _section(data, "weekly")
        daily = OvertimeTierRule.from_dict(daily_raw) if daily_raw is not None else None
        weekly = OvertimeTierRule.from_dict(weekly_raw) if weekly_raw is not None else None

        # Legacy flat fields
        if daily is None:
            daily = _legacy_tier(data.get("dailyThreshold"), data.get("dailyMultiplier"))
        if weekly is None:
            weekly = _legacy_tier(data.get("weeklyThreshold"), data.get("weeklyMultiplier"))

        return cls(
            enabled=_optional_bool(data.get("enabled")),
            active=to_enum(OvertimeBasis, data.get("active")),
            daily=daily,
            weekly=weekly,
        )

    def to_dict(self) -> dict[str, Any]:
        return _compact({
            "enabled": self.enabled,
            "active": self.active,
            "daily": self.daily.to_dict() if self.daily else None,
            "weekly": self.weekly.to_dict() if self.weekly else None,
        })


def _legacy_tier(threshold: Any, multiplier: Any) -> OvertimeTierRule | None:
    threshold_value = to_decimal(threshold)
    multiplier_value = to_decimal(multiplier)
    if threshold_value is None and multiplier_value is None:
        return None
    return OvertimeTierRule(
        threshold=threshold_value,
        mode=UpliftMode.MULTIPLIER if multiplier_value is not None else None,
        multiplier=multiplier_value,
    )


@dataclass(frozen=True)
class LegacyUplift:
    """Read-only ``{type, value}`` weekend shape."""

    type: UpliftType
    value: Decimal


@dataclass(frozen=True)
class WeekendRule:
    """Weekend uplift configuration."""

    enabled: bool | None = None
    days: frozenset[str] = DEFAULT_WEEKEND_DAYS
    mode: UpliftMode | None = None
    multiplier: Decimal | None = None
    uplift: Decimal | None = None
    legacy: LegacyUplift | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> WeekendRule:
        raw_days = data.get("days")
        if isinstance(raw_days, (list, tuple, set, frozenset)):
            days = frozenset(d for d in map(normalize_day_name, raw_days) if d)
        else:
            days = DEFAULT_WEEKEND_DAYS

        mode = to_enum(UpliftMode, data.get("mode"))
        legacy = None
        if mode is None:
            legacy_type = to_enum(UpliftType, data.get("type"))
            legacy_value = to_decimal(data.get("value"))
            if legacy_type is not None and legacy_value is not None:
                legacy = LegacyUplift(type=legacy_type, value=legacy_value)

        return cls(
            enabled=_optional_bool(data.get("enabled")),
            days=days,
            mode=mode,
            multiplier=to_decimal(data.get("multiplier")),
            uplift=to_decimal(data.get("uplift", data.get("upliftAmount"))),
            legacy=legacy,
        )

    def to_dict(self) -> dict[str, Any]:
        return _compact({
            "enabled": self.enabled,
            "days": [d for d in WEEKDAY_NAMES if d in self.days],
            "mode": self.mode,
            "multiplier": self.multiplier,
            "uplift": self.uplift,
        })


@dataclass(frozen=True)
class NightRule:
    """Night window uplift configuration."""

    enabled: bool | None = None
    start: str | None = None  # "HH:MM"
    end: str | None = None  # "HH:MM", may wrap past midnight
    type: UpliftType | None = None
    value: Decimal | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> NightRule:
        start = data.get("start")
        end = data.get("end")
        return cls(
            enabled=_optional_bool(data.get("enabled")),
            start=start if isinstance(start, str) else None,
            end=end if isinstance(end, str) else None,
            type=to_enum(UpliftType, data.get("type")),
            value=to_decimal(data.get("value")),
        )

    def to_dict(self) -> dict[str, Any]:
        return _compact({
            "enabled": self.enabled,
            "start": self.start,
            "end": self.end,
            "type": self.type,
            "value": self.value,
        })


@dataclass(frozen=True)
class AllowanceItem:
    """A flat or per-hour allowance."""

    id: str
    type: str
    value: Decimal
    unit: AllowanceUnit | None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AllowanceItem:
        return cls(
            id=str(data.get("id", "")),
            type=str(data.get("type", "")),
            value=to_decimal(data.get("value")) or ZERO,
            unit=to_enum(AllowanceUnit, data.get("unit")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "value": str(self.value),
            "unit": self.unit.value if self.unit else None,
        }


@dataclass(frozen=True)
class TaxRule:
    """Flat-rate income tax above a personal allowance."""

    enabled: bool | None = None
    percentage: Decimal | None = None
    personal_allowance: Decimal | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TaxRule:
        return cls(
            enabled=_optional_bool(data.get("enabled")),
            percentage=to_decimal(data.get("percentage")),
            personal_allowance=to_decimal(data.get("personalAllowance")),
        )

    def to_dict(self) -> dict[str, Any]:
        return _compact({
            "enabled": self.enabled,
            "percentage": self.percentage,
            "personalAllowance": self.personal_allowance,
        })


@dataclass(frozen=True)
class NIRule:
    """Flat-rate national insurance above a threshold."""

    enabled: bool | None = None
    percentage: Decimal | None = None
    threshold: Decimal | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> NIRule:
        return cls(
            enabled=_optional_bool(data.get("enabled")),
            percentage=to_decimal(data.get("percentage")),
            threshold=to_decimal(data.get("threshold")),
        )

    def to_dict(self) -> dict[str, Any]:
        return _compact({
            "enabled": self.enabled,
            "percentage": self.percentage,
            "threshold": self.threshold,
        })


@dataclass(frozen=True)
class PayPeriodConfig:
    """Pay period cycle."""

    cycle: PayCycle = PayCycle.WEEKLY
    start_day: str = "Mon"
    start_date: int = 1  # day of month for monthly cycles

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PayPeriodConfig:
        start_date = int(to_decimal(data.get("startDate")) or 1)
        return cls(
            cycle=to_enum(PayCycle, data.get("cycle")) or PayCycle.WEEKLY,
            start_day=normalize_day_name(data.get("startDay")) or "Mon",
            start_date=min(31, max(1, start_date)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "cycle": self.cycle.value,
            "startDay": FULL_WEEKDAY_NAMES[WEEKDAY_NAMES.index(self.start_day)],
            "startDate": self.start_date,
        }


@dataclass(frozen=True)
class PayRules:
    """All rule sub-objects; any may be absent."""

    overtime: OvertimeRules | None = None
    night: NightRule | None = None
    weekend: WeekendRule | None = None
    allowances: tuple[AllowanceItem, ...] = ()
    pay_period: PayPeriodConfig = field(default_factory=PayPeriodConfig)
    tax: TaxRule | None = None
    ni: NIRule | None = None

    @classmethod
    def from_dict(cls, data: Any) -> PayRules:
        data = data if isinstance(data, dict) else {}
        overtime = _section(data, "overtime")
        night = _section(data, "night")
        weekend = _section(data, "weekend")
        pay_period = _section(data, "payPeriod")
        tax = _section(data, "tax")
        ni = _section(data, "ni")
        raw_allowances = data.get("allowances")
        allowances = tuple(
            AllowanceItem.from_dict(item)
            for item in (raw_allowances if isinstance(raw_allowances, list) else [])
            if isinstance(item, dict)
        )
        return cls(
            overtime=OvertimeRules.from_dict(overtime) if overtime is not None else None,
            night=NightRule.from_dict(night) if night is not None else None,
            weekend=WeekendRule.from_dict(weekend) if weekend is not None else WeekendRule(),
            allowances=allowances,
            pay_period=PayPeriodConfig.from_dict(pay_period) if pay_period else PayPeriodConfig(),
            tax=TaxRule.from_dict(tax) if tax is not None else None,
            ni=NIRule.from_dict(ni) if ni is not None else None,
        )

    def to_dict(self) -> dict[str, Any]:
        return _compact({
            "overtime": self.overtime.to_dict() if self.overtime else None,
            "night": self.night.to_dict() if self.night else None,
            "weekend": self.weekend.to_dict() if self.weekend else None,
            "allowances": [a.to_dict() for a in self.allowances],
            "payPeriod": self.pay_period.to_dict(),
            "tax": self.tax.to_dict() if self.tax else None,
            "ni": self.ni.to_dict() if self.ni else None,
        })


@dataclass(frozen=True)
class Preferences:
    """Calculation-relevant user preferences."""

    stacking_rule: StackingRule = StackingRule.STACK
    rounding_rule: str = "none"
    currency: str = "GBP"

    @classmethod
    def from_dict(cls, data: Any) -> Preferences:
        data = data if isinstance(data, dict) else {}
        rounding = data.get("roundingRule")
        return cls(
            stacking_rule=to_enum(StackingRule, data.get("stackingRule")) or StackingRule.STACK,
            rounding_rule=rounding if isinstance(rounding, str) else "none",
            currency=str(data.get("currency") or "GBP"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "stackingRule": self.stacking_rule.value,
            "roundingRule": self.rounding_rule,
            "currency": self.currency,
        }


@dataclass(frozen=True)
class AppSettings:
    """Configuration snapshot passed to every calculation."""

    pay_rates: tuple[PayRate, ...] = ()
    pay_rules: PayRules = field(default_factory=PayRules)
    preferences: Preferences = field(default_factory=Preferences)

    @classmethod
    def from_dict(cls, data: Any) -> AppSettings:
        data = data if isinstance(data, dict) else {}
        raw_rates = data.get("payRates")
        rates = tuple(
            PayRate.from_dict(r)
            for r in (raw_rates if isinstance(raw_rates, list) else [])
            if isinstance(r, dict)
        )
        return cls(
            pay_rates=rates,
            pay_rules=PayRules.from_dict(data.get("payRules")),
            preferences=Preferences.from_dict(data.get("preferences")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "payRates": [r.to_dict() for r in self.pay_rates],
            "payRules": self.pay_rules.to_dict(),
            "preferences": self.preferences.to_dict(),
        }


def _compact(values: dict[str, Any]) -> dict[str, Any]:
    """Drop unset keys and serialize enums/decimals for JSON."""
    result: dict[str, Any] = {}
    for key, value in values.items():
        if value is None:
            continue
        if isinstance(value, Decimal):
            value = str(value)
        elif isinstance(value, Enum):
            value = value.value
        result[key] = value
    return result
