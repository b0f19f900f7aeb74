"""ORM models for the shift and pay history stores."""

from shiftpay_engine.models.base import Base, TimestampMixin
from shiftpay_engine.models.history import PayHistoryEntry
from shiftpay_engine.models.tracking import DaySubmission, Shift

__all__ = [
    "Base",
    "DaySubmission",
    "PayHistoryEntry",
    "Shift",
    "TimestampMixin",
]
