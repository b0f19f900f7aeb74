"""Shift recording and submission endpoints."""

from datetime import date
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path, Query, status

from shiftpay_engine.api.dependencies import ShiftStore
from shiftpay_engine.api.schemas import (
    ErrorResponse,
    ShiftCreate,
    ShiftResponse,
    SubmittedDayResponse,
)
from shiftpay_engine.calculators.rules import PayPeriodConfig, normalize_day_name
from shiftpay_engine.calculators.types import HistoryFilter, PayCycle
from shiftpay_engine.timeutils import pay_period_bounds

router = APIRouter(tags=["shifts"])


# ============================================================================
# Pending shifts
# ============================================================================


@router.post(
    "/shifts",
    response_model=ShiftResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
)
async def add_shift(payload: ShiftCreate, store: ShiftStore) -> ShiftResponse:
    """Record a pending shift."""
    shift = await store.add_shift(payload.date, payload.start, payload.end, payload.note)
    return ShiftResponse.model_validate(shift)


@router.get("/shifts/{work_date}", response_model=list[ShiftResponse])
async def list_pending_shifts(
    work_date: Annotated[date, Path()],
    store: ShiftStore,
) -> list[ShiftResponse]:
    """Pending shifts for a date, earliest first."""
    return [ShiftResponse.model_validate(s) for s in await store.list_pending(work_date)]


@router.delete(
    "/shifts/{work_date}/{shift_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}},
)
async def remove_shift(
    work_date: Annotated[date, Path()],
    shift_id: Annotated[UUID, Path()],
    store: ShiftStore,
) -> None:
    """Delete a pending shift."""
    await store.remove_shift(work_date, shift_id)


@router.post(
    "/shifts/{work_date}/submit",
    response_model=SubmittedDayResponse,
    responses={404: {"model": ErrorResponse}},
)
async def submit_day(
    work_date: Annotated[date, Path()],
    store: ShiftStore,
) -> SubmittedDayResponse:
    """Move the date's pending shifts into a new submission."""
    return SubmittedDayResponse.from_day(await store.submit_day(work_date))


# ============================================================================
# Submitted days
# ============================================================================


@router.get("/days", response_model=list[SubmittedDayResponse])
async def list_submitted_days(
    store: ShiftStore,
    start: date | None = None,
    end: date | None = None,
    period_of: Annotated[date | None, Query(alias="periodOf")] = None,
    cycle: PayCycle = PayCycle.WEEKLY,
    start_day: Annotated[str, Query(alias="startDay")] = "Mon",
    start_date: Annotated[int, Query(alias="startDate", ge=1, le=31)] = 1,
) -> list[SubmittedDayResponse]:
    """Submitted days, newest first.

    ``periodOf`` selects the whole pay period containing that date and takes
    precedence over an explicit ``start``/``end`` range.
    """
    if period_of is not None:
        config = PayPeriodConfig(
            cycle=cycle,
            start_day=normalize_day_name(start_day) or "Mon",
            start_date=start_date,
        )
        start, end = pay_period_bounds(period_of, config)
    days = await store.get_submitted_days(HistoryFilter(start_date=start, end_date=end))
    return [SubmittedDayResponse.from_day(day) for day in days]
