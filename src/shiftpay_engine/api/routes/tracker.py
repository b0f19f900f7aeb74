"""Tracker derivation endpoints."""

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Path

from shiftpay_engine.api.dependencies import DerivationEngine, parse_settings
from shiftpay_engine.api.schemas import (
    DeriveRequest,
    DeriveResponse,
    NightAllocationResponse,
    OvertimeSplitResponse,
)

router = APIRouter(prefix="/tracker", tags=["tracker"])


@router.post("/{work_date}/derive", response_model=DeriveResponse)
async def derive(
    work_date: Annotated[date, Path()],
    payload: DeriveRequest,
    engine: DerivationEngine,
) -> DeriveResponse:
    """Derive the base/overtime split and night allocation from recorded shifts."""
    result = await engine.derive_all(work_date, parse_settings(payload.settings))
    return DeriveResponse(
        date=work_date,
        total_minutes=result.total_minutes,
        split=OvertimeSplitResponse.from_split(result.split),
        night=NightAllocationResponse.from_allocation(result.night),
    )
