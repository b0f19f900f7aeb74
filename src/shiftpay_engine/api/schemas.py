"""Pydantic schemas for API request/response models."""

from datetime import date, datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from shiftpay_engine.calculators.types import (
    HoursAndMinutes,
    NightAllocation,
    OvertimeSplit,
    PayBreakdown,
    PayCalculationEntry,
    SubmittedDay,
)


class CamelModel(BaseModel):
    """Base schema exchanging camelCase JSON."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ============================================================================
# Pay calculation schemas
# ============================================================================


class ComputeRequest(CamelModel):
    """A calculation input document and the settings snapshot to price it."""

    input: dict[str, Any]
    settings: dict[str, Any] = Field(default_factory=dict)


class SettingsVersionRequest(CamelModel):
    settings: dict[str, Any] = Field(default_factory=dict)


class SettingsVersionResponse(CamelModel):
    settings_version: str


class SaveEntryRequest(CamelModel):
    """Compute and persist a calculation."""

    input: dict[str, Any]
    settings: dict[str, Any] = Field(default_factory=dict)
    rate_snapshot: dict[str, Any] | None = None


class PayBreakdownResponse(CamelModel):
    """Rounded monetary breakdown."""

    base: Decimal
    overtime: Decimal
    uplifts: Decimal
    allowances: Decimal
    gross: Decimal
    tax: Decimal
    ni: Decimal
    total: Decimal
    weekend_uplift: Decimal
    night_uplift: Decimal

    @classmethod
    def from_breakdown(cls, breakdown: PayBreakdown) -> "PayBreakdownResponse":
        return cls(
            base=breakdown.base,
            overtime=breakdown.overtime,
            uplifts=breakdown.uplifts,
            allowances=breakdown.allowances,
            gross=breakdown.gross,
            tax=breakdown.tax,
            ni=breakdown.ni,
            total=breakdown.total,
            weekend_uplift=breakdown.weekend_uplift,
            night_uplift=breakdown.night_uplift,
        )


class PayEntryResponse(CamelModel):
    """A persisted calculation entry."""

    id: UUID
    input: dict[str, Any]
    calculated_pay: PayBreakdownResponse
    rate_snapshot: dict[str, Any] | None = None
    settings_version: str
    created_at: datetime
    stale: bool = False

    @classmethod
    def from_entry(cls, entry: PayCalculationEntry, stale: bool = False) -> "PayEntryResponse":
        return cls(
            id=entry.id,
            input=entry.input.to_dict(),
            calculated_pay=PayBreakdownResponse.from_breakdown(entry.calculated_pay),
            rate_snapshot=entry.rate_snapshot.to_dict() if entry.rate_snapshot else None,
            settings_version=entry.settings_version,
            created_at=entry.created_at,
            stale=stale,
        )


class PayEntryListResponse(CamelModel):
    items: list[PayEntryResponse]
    total: int


# ============================================================================
# Tracker schemas
# ============================================================================


class HoursMinutesResponse(CamelModel):
    hours: int
    minutes: int

    @classmethod
    def from_value(cls, value: HoursAndMinutes) -> "HoursMinutesResponse":
        return cls(hours=value.hours, minutes=value.minutes)


class OvertimeSplitResponse(CamelModel):
    base: HoursMinutesResponse
    overtime: HoursMinutesResponse

    @classmethod
    def from_split(cls, split: OvertimeSplit) -> "OvertimeSplitResponse":
        return cls(
            base=HoursMinutesResponse.from_value(split.base),
            overtime=HoursMinutesResponse.from_value(split.overtime),
        )


class NightAllocationResponse(CamelModel):
    night_base: HoursMinutesResponse
    night_overtime: HoursMinutesResponse

    @classmethod
    def from_allocation(cls, night: NightAllocation) -> "NightAllocationResponse":
        return cls(
            night_base=HoursMinutesResponse.from_value(night.night_base),
            night_overtime=HoursMinutesResponse.from_value(night.night_overtime),
        )


class DeriveRequest(CamelModel):
    settings: dict[str, Any] = Field(default_factory=dict)


class DeriveResponse(CamelModel):
    """Derived split and night allocation for one date."""

    date: date
    total_minutes: int
    split: OvertimeSplitResponse
    night: NightAllocationResponse


# ============================================================================
# Shift schemas
# ============================================================================


class ShiftCreate(CamelModel):
    """Schema for recording a pending shift."""

    date: date
    start: str = Field(examples=["22:00"])
    end: str = Field(examples=["06:00"])
    note: str | None = None


class ShiftResponse(CamelModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )

    shift_id: UUID
    work_date: date
    start_time: str
    end_time: str
    duration_minutes: int
    note: str | None = None
    submission_id: UUID | None = None


class IntervalResponse(CamelModel):
    start: str
    end: str
    duration_minutes: int


class SubmissionResponse(CamelModel):
    id: str
    shifts: list[IntervalResponse]
    total_minutes: int
    submitted_at: datetime | None = None


class SubmittedDayResponse(CamelModel):
    """All submissions for one date."""

    date: date
    total_minutes: int
    submissions: list[SubmissionResponse]

    @classmethod
    def from_day(cls, day: SubmittedDay) -> "SubmittedDayResponse":
        return cls(
            date=day.date,
            total_minutes=day.total_minutes,
            submissions=[
                SubmissionResponse(
                    id=sub.id,
                    shifts=[
                        IntervalResponse(
                            start=s.start, end=s.end, duration_minutes=s.duration_minutes
                        )
                        for s in sub.shifts
                    ],
                    total_minutes=sub.total_minutes,
                    submitted_at=sub.submitted_at,
                )
                for sub in day.submissions
            ],
        )


# ============================================================================
# Error schemas
# ============================================================================


class ErrorResponse(BaseModel):
    """Error response schema."""

    detail: str
    code: str | None = None
