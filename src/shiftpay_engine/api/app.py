"""FastAPI application factory."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from shiftpay_engine import __version__
from shiftpay_engine.api.routes import health_router, pay_router, shifts_router, tracker_router
from shiftpay_engine.config import get_settings
from shiftpay_engine.database import create_session_factory, create_tables, get_engine
from shiftpay_engine.services.shift_store import InvalidShiftError, ShiftNotFoundError

logger = logging.getLogger(__name__)


def create_app(database_url: str | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Application lifespan handler."""
        # Startup
        engine: AsyncEngine = get_engine(database_url)
        await create_tables(engine)
        factory: async_sessionmaker[AsyncSession] = create_session_factory(engine)
        app.state.engine = engine
        app.state.session_factory = factory
        logger.info("Shift pay engine %s started", settings.engine_version)
        yield
        # Shutdown
        await engine.dispose()

    app = FastAPI(
        title="Shift Pay Engine API",
        description="Per-day shift pay calculation and tracker derivation",
        version=__version__,
        debug=settings.debug,
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Exception handlers
    @app.exception_handler(InvalidShiftError)
    async def invalid_shift_handler(request: Request, exc: InvalidShiftError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": str(exc), "code": "INVALID_SHIFT"},
        )

    @app.exception_handler(ShiftNotFoundError)
    async def shift_not_found_handler(request: Request, exc: ShiftNotFoundError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"detail": str(exc), "code": "SHIFT_NOT_FOUND"},
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Handle unexpected exceptions."""
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "detail": "An unexpected error occurred",
                "code": "INTERNAL_ERROR",
            },
        )

    # Include routers
    app.include_router(health_router)
    app.include_router(pay_router, prefix="/api/v1")
    app.include_router(tracker_router, prefix="/api/v1")
    app.include_router(shifts_router, prefix="/api/v1")

    return app


# Default app instance for uvicorn
app = create_app()
