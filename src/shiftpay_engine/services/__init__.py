"""SQL-backed shift tracking and pay history services."""

from shiftpay_engine.services.history_service import HistoryItem, PayHistoryService
from shiftpay_engine.services.shift_store import (
    InvalidShiftError,
    ShiftNotFoundError,
    SqlShiftStore,
)

__all__ = [
    "HistoryItem",
    "InvalidShiftError",
    "PayHistoryService",
    "ShiftNotFoundError",
    "SqlShiftStore",
]
