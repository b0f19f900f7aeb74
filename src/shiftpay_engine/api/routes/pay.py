"""Pay calculation and history endpoints."""

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Query, status

from shiftpay_engine.api.dependencies import HistoryService, parse_input, parse_settings
from shiftpay_engine.api.schemas import (
    ComputeRequest,
    ErrorResponse,
    PayBreakdownResponse,
    PayEntryListResponse,
    PayEntryResponse,
    SaveEntryRequest,
    SettingsVersionRequest,
    SettingsVersionResponse,
)
from shiftpay_engine.calculators.engine import PayCalculator
from shiftpay_engine.calculators.types import RateSnapshot

router = APIRouter(prefix="/pay", tags=["pay"])


# ============================================================================
# Calculation
# ============================================================================


@router.post(
    "/compute",
    response_model=PayBreakdownResponse,
    responses={422: {"model": ErrorResponse}},
)
async def compute_pay(payload: ComputeRequest) -> PayBreakdownResponse:
    """Compute a breakdown for one day without saving it."""
    calc_input = parse_input(payload.input)
    settings = parse_settings(payload.settings)
    breakdown = PayCalculator().compute_pay(calc_input, settings)
    return PayBreakdownResponse.from_breakdown(breakdown)


@router.post("/settings-version", response_model=SettingsVersionResponse)
async def settings_version(payload: SettingsVersionRequest) -> SettingsVersionResponse:
    """Fingerprint of the deduction rules in a settings snapshot."""
    settings = parse_settings(payload.settings)
    return SettingsVersionResponse(
        settings_version=PayCalculator.compute_settings_version(settings)
    )


# ============================================================================
# History
# ============================================================================


@router.post(
    "/entries",
    response_model=PayEntryResponse,
    status_code=status.HTTP_201_CREATED,
    responses={422: {"model": ErrorResponse}},
)
async def save_entry(payload: SaveEntryRequest, history: HistoryService) -> PayEntryResponse:
    """Compute a breakdown and store it with the current settings version."""
    calc_input = parse_input(payload.input)
    settings = parse_settings(payload.settings)
    entry = PayCalculator().build_entry(
        calc_input, settings, RateSnapshot.from_dict(payload.rate_snapshot)
    )
    await history.save_entry(entry)
    return PayEntryResponse.from_entry(entry)


@router.get("/entries", response_model=PayEntryListResponse)
async def list_entries(
    history: HistoryService,
    current_version: Annotated[str | None, Query(alias="currentVersion")] = None,
    start: date | None = None,
    end: date | None = None,
) -> PayEntryListResponse:
    """Saved entries, newest first, flagged stale against ``currentVersion``."""
    items = await history.list_entries(current_version, start, end)
    return PayEntryListResponse(
        items=[PayEntryResponse.from_entry(item.entry, item.stale) for item in items],
        total=len(items),
    )
