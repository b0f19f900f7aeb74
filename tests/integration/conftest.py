"""Integration test fixtures: the API against a temporary SQLite database."""

from collections.abc import AsyncGenerator
from typing import Any

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from shiftpay_engine.api.app import create_app
from tests.factories import settings_document


@pytest_asyncio.fixture
async def app(tmp_path) -> AsyncGenerator[FastAPI, None]:
    """Application with its lifespan running against a fresh database."""
    application = create_app(database_url=f"sqlite+aiosqlite:///{tmp_path / 'api_test.db'}")
    async with application.router.lifespan_context(application):
        yield application


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Create async HTTP client for API testing."""
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def settings_payload() -> dict[str, Any]:
    """Settings document with tax and NI configured."""
    return settings_document(pay_rules={
        "tax": {"enabled": True, "percentage": 20, "personalAllowance": 0},
        "ni": {"enabled": True, "percentage": 10, "threshold": 100},
        "night": {"start": "22:00", "end": "06:00", "type": "fixed", "value": 1},
    })
