"""API routes."""

from shiftpay_engine.api.routes.health import router as health_router
from shiftpay_engine.api.routes.pay import router as pay_router
from shiftpay_engine.api.routes.shifts import router as shifts_router
from shiftpay_engine.api.routes.tracker import router as tracker_router

__all__ = ["health_router", "pay_router", "shifts_router", "tracker_router"]
