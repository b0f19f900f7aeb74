"""Pytest fixtures for shift pay engine tests."""

from __future__ import annotations

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from shiftpay_engine.calculators.rules import AppSettings
from shiftpay_engine.database import create_session_factory, create_tables, get_engine
from tests.factories import build_settings


@pytest.fixture
def base_settings() -> AppSettings:
    """£20 base rate, daily overtime x1.5 after 8h, Sat/Sun weekend, stacking."""
    return build_settings()


@pytest_asyncio.fixture
async def session_factory(tmp_path) -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """Session factory bound to a fresh SQLite database file per test."""
    engine = get_engine(f"sqlite+aiosqlite:///{tmp_path / 'shiftpay_test.db'}")
    await create_tables(engine)
    yield create_session_factory(engine)
    await engine.dispose()
