"""Type definitions for the calculation pipeline."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any
from uuid import UUID

ZERO = Decimal("0")
MINUTES_PER_HOUR = 60


class RateKind(str, Enum):
    """Pay rate kinds."""

    BASE = "base"
    OVERTIME = "overtime"
    PREMIUM = "premium"


class UpliftMode(str, Enum):
    """How an overtime or weekend uplift is applied to a per-hour rate."""

    FIXED = "fixed"
    MULTIPLIER = "multiplier"


class UpliftType(str, Enum):
    """Legacy weekend shape and night rule uplift type."""

    PERCENTAGE = "percentage"
    FIXED = "fixed"


class OvertimeBasis(str, Enum):
    """Overtime tier basis."""

    DAILY = "daily"
    WEEKLY = "weekly"


class StackingRule(str, Enum):
    """Policy for combining overlapping uplifts."""

    STACK = "stack"
    HIGHEST_ONLY = "highestOnly"


class AllowanceUnit(str, Enum):
    """Allowance application units."""

    PER_SHIFT = "perShift"
    PER_HOUR = "perHour"
    PER_DAY = "perDay"


class CalculationMode(str, Enum):
    """Whether hours were typed in or derived from recorded shifts."""

    MANUAL = "manual"
    TRACKER = "tracker"


class PayCycle(str, Enum):
    """Pay period cycles."""

    WEEKLY = "weekly"
    FORTNIGHTLY = "fortnightly"
    MONTHLY = "monthly"


def to_decimal(value: Any) -> Decimal | None:
    """Coerce a configuration value to Decimal.

    Returns None for missing, boolean, unparseable or non-finite values.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return value if value.is_finite() else None
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        if not math.isfinite(value):
            return None
        return Decimal(str(value))
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            parsed = Decimal(text)
        except InvalidOperation:
            return None
        return parsed if parsed.is_finite() else None
    return None


def to_enum(enum_cls: type[Enum], value: Any) -> Any:
    """Coerce a raw value to a member of ``enum_cls`` or None."""
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        return None


def parse_date(value: Any) -> date | None:
    """Parse a YYYY-MM-DD string (or pass through a date); None if invalid."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError:
            return None
    return None


@dataclass(frozen=True)
class HoursAndMinutes:
    """A duration entered or derived as hours plus minutes."""

    hours: int = 0
    minutes: int = 0

    @property
    def total_minutes(self) -> int:
        return max(0, self.hours * MINUTES_PER_HOUR + self.minutes)

    def to_hours(self) -> Decimal:
        """Decimal hours (``hours + minutes / 60``), never negative."""
        return Decimal(self.total_minutes) / MINUTES_PER_HOUR

    @classmethod
    def from_minutes(cls, total: int) -> HoursAndMinutes:
        total = max(0, int(total))
        return cls(hours=total // MINUTES_PER_HOUR, minutes=total % MINUTES_PER_HOUR)

    @classmethod
    def from_dict(cls, data: Any) -> HoursAndMinutes:
        if not isinstance(data, dict):
            return cls()
        hours = to_decimal(data.get("hours")) or ZERO
        minutes = to_decimal(data.get("minutes")) or ZERO
        return cls.from_minutes(int(hours * MINUTES_PER_HOUR + minutes))

    def to_dict(self) -> dict[str, int]:
        return {"hours": self.hours, "minutes": self.minutes}


@dataclass
class PayCalculationInput:
    """A single day's calculation request."""

    work_date: date
    base_rate_id: str | None = None
    overtime_rate_id: str | None = None
    hours_worked: HoursAndMinutes = field(default_factory=HoursAndMinutes)
    overtime_worked: HoursAndMinutes = field(default_factory=HoursAndMinutes)
    night_base_hours: HoursAndMinutes | None = None
    night_overtime_hours: HoursAndMinutes | None = None
    mode: CalculationMode = CalculationMode.MANUAL
    manual_base_rate: Decimal | None = None
    manual_overtime_rate: Decimal | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PayCalculationInput:
        """Build from the camelCase document used by callers and storage."""
        work_date = parse_date(data.get("date"))
        if work_date is None:
            raise ValueError(f"Invalid calculation date: {data.get('date')!r}")

        def optional_hm(key: str) -> HoursAndMinutes | None:
            raw = data.get(key)
            return HoursAndMinutes.from_dict(raw) if raw is not None else None

        return cls(
            work_date=work_date,
            base_rate_id=data.get("baseRateId", data.get("hourlyRateId")),
            overtime_rate_id=data.get("overtimeRateId"),
            hours_worked=HoursAndMinutes.from_dict(data.get("hoursWorked")),
            overtime_worked=HoursAndMinutes.from_dict(data.get("overtimeWorked")),
            night_base_hours=optional_hm("nightBaseHours"),
            night_overtime_hours=optional_hm("nightOvertimeHours"),
            mode=to_enum(CalculationMode, data.get("mode")) or CalculationMode.MANUAL,
            manual_base_rate=to_decimal(data.get("manualBaseRate")),
            manual_overtime_rate=to_decimal(data.get("manualOvertimeRate")),
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "mode": self.mode.value,
            "date": self.work_date.isoformat(),
            "baseRateId": self.base_rate_id,
            "overtimeRateId": self.overtime_rate_id,
            "hoursWorked": self.hours_worked.to_dict(),
            "overtimeWorked": self.overtime_worked.to_dict(),
        }
        if self.night_base_hours is not None:
            data["nightBaseHours"] = self.night_base_hours.to_dict()
        if self.night_overtime_hours is not None:
            data["nightOvertimeHours"] = self.night_overtime_hours.to_dict()
        if self.manual_base_rate is not None:
            data["manualBaseRate"] = str(self.manual_base_rate)
        if self.manual_overtime_rate is not None:
            data["manualOvertimeRate"] = str(self.manual_overtime_rate)
        return data


@dataclass(frozen=True)
class PayBreakdown:
    """Monetary breakdown of one calculation.

    Every field is rounded to cents independently. ``total`` is rounded from
    the unrounded ``gross - tax - ni``, so the displayed components need not
    sum exactly to the displayed total.
    """

    base: Decimal
    overtime: Decimal
    uplifts: Decimal
    allowances: Decimal
    gross: Decimal
    tax: Decimal
    ni: Decimal
    total: Decimal
    weekend_uplift: Decimal = ZERO
    night_uplift: Decimal = ZERO

    def to_dict(self) -> dict[str, str]:
        return {
            "base": str(self.base),
            "overtime": str(self.overtime),
            "uplifts": str(self.uplifts),
            "allowances": str(self.allowances),
            "gross": str(self.gross),
            "tax": str(self.tax),
            "ni": str(self.ni),
            "total": str(self.total),
            "weekendUplift": str(self.weekend_uplift),
            "nightUplift": str(self.night_uplift),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PayBreakdown:
        def money(key: str) -> Decimal:
            return to_decimal(data.get(key)) or ZERO

        return cls(
            base=money("base"),
            overtime=money("overtime"),
            uplifts=money("uplifts"),
            allowances=money("allowances"),
            gross=money("gross"),
            tax=money("tax"),
            ni=money("ni"),
            total=money("total"),
            weekend_uplift=money("weekendUplift"),
            night_uplift=money("nightUplift"),
        )


@dataclass(frozen=True)
class RateSnapshot:
    """Numeric rates recorded alongside an entry."""

    base: Decimal | None = None
    overtime: Decimal | None = None

    def to_dict(self) -> dict[str, str | None]:
        return {
            "base": str(self.base) if self.base is not None else None,
            "overtime": str(self.overtime) if self.overtime is not None else None,
        }

    @classmethod
    def from_dict(cls, data: Any) -> RateSnapshot | None:
        if not isinstance(data, dict):
            return None
        return cls(base=to_decimal(data.get("base")), overtime=to_decimal(data.get("overtime")))


@dataclass
class PayCalculationEntry:
    """Persisted pairing of an input, its breakdown and the settings version."""

    id: UUID
    input: PayCalculationInput
    calculated_pay: PayBreakdown
    settings_version: str
    created_at: datetime
    rate_snapshot: RateSnapshot | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": str(self.id),
            "input": self.input.to_dict(),
            "calculatedPay": self.calculated_pay.to_dict(),
            "rateSnapshot": self.rate_snapshot.to_dict() if self.rate_snapshot else None,
            "settingsVersion": self.settings_version,
            "createdAt": self.created_at.isoformat(),
        }


# ===== Tracker collaborator data =====


@dataclass(frozen=True)
class WorkedInterval:
    """A recorded shift interval in clock time."""

    start: str  # "HH:MM"
    end: str  # "HH:MM"
    duration_minutes: int


@dataclass
class Submission:
    """A batch of intervals submitted together for a date."""

    id: str
    shifts: list[WorkedInterval]
    total_minutes: int
    submitted_at: datetime | None = None


@dataclass
class SubmittedDay:
    """All submissions recorded for one date."""

    date: date
    total_minutes: int
    submissions: list[Submission] = field(default_factory=list)

    @property
    def shifts(self) -> list[WorkedInterval]:
        return [shift for sub in self.submissions for shift in sub.shifts]


@dataclass(frozen=True)
class HistoryFilter:
    """Inclusive date-range filter for submitted days (None = unbounded)."""

    start_date: date | None = None
    end_date: date | None = None

    def includes(self, day: date) -> bool:
        if self.start_date is not None and day < self.start_date:
            return False
        if self.end_date is not None and day > self.end_date:
            return False
        return True


@dataclass(frozen=True)
class OvertimeSplit:
    """Derived base/overtime split for a date."""

    base: HoursAndMinutes
    overtime: HoursAndMinutes

    def to_dict(self) -> dict[str, Any]:
        return {"base": self.base.to_dict(), "overtime": self.overtime.to_dict()}


@dataclass(frozen=True)
class NightAllocation:
    """Derived night minutes split between base and overtime tiers."""

    night_base: HoursAndMinutes
    night_overtime: HoursAndMinutes

    def to_dict(self) -> dict[str, Any]:
        return {
            "nightBase": self.night_base.to_dict(),
            "nightOvertime": self.night_overtime.to_dict(),
        }
