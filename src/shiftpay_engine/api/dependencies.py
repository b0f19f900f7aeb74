"""FastAPI dependencies for dependency injection."""

from collections.abc import AsyncGenerator
from typing import Annotated, Any

from fastapi import Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from shiftpay_engine.calculators.rules import AppSettings
from shiftpay_engine.calculators.types import PayCalculationInput
from shiftpay_engine.derivation import TrackerDerivationEngine
from shiftpay_engine.services.history_service import PayHistoryService
from shiftpay_engine.services.shift_store import SqlShiftStore


def get_session_factory(request: Request) -> async_sessionmaker[AsyncSession]:
    """Session factory created by the application lifespan."""
    return request.app.state.session_factory


SessionFactory = Annotated[async_sessionmaker[AsyncSession], Depends(get_session_factory)]


async def get_db_session(factory: SessionFactory) -> AsyncGenerator[AsyncSession, None]:
    """Get database session dependency."""
    async with factory() as session:
        try:
            yield session
        finally:
            await session.close()


def get_shift_store(factory: SessionFactory) -> SqlShiftStore:
    return SqlShiftStore(factory)


def get_history_service(factory: SessionFactory) -> PayHistoryService:
    return PayHistoryService(factory)


# Type aliases for cleaner dependency injection
DbSession = Annotated[AsyncSession, Depends(get_db_session)]
ShiftStore = Annotated[SqlShiftStore, Depends(get_shift_store)]
HistoryService = Annotated[PayHistoryService, Depends(get_history_service)]


def get_derivation_engine(store: ShiftStore) -> TrackerDerivationEngine:
    """The SQL store serves both the pending and the submitted reads."""
    return TrackerDerivationEngine(pending=store, history=store)


DerivationEngine = Annotated[TrackerDerivationEngine, Depends(get_derivation_engine)]


def parse_settings(payload: dict[str, Any]) -> AppSettings:
    return AppSettings.from_dict(payload)


def parse_input(payload: dict[str, Any]) -> PayCalculationInput:
    """Parse a calculation input document, rejecting an unusable date."""
    try:
        return PayCalculationInput.from_dict(payload)
    except ValueError as exc:
        raise HTTPException(
            status_code=422,
            detail=str(exc),
        ) from exc
