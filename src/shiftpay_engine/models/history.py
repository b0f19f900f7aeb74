"""Persisted pay calculation entries."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any
from uuid import UUID

from sqlalchemy import JSON, Date, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from shiftpay_engine.models.base import Base


class PayHistoryEntry(Base):
    """A saved calculation: input, breakdown and deduction settings version."""

    __tablename__ = "pay_history_entry"

    entry_id: Mapped[UUID] = mapped_column(primary_key=True)
    work_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    input_json: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    breakdown_json: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    rate_snapshot_json: Mapped[dict[str, Any] | None] = mapped_column(JSON)
    settings_version: Mapped[str] = mapped_column(String(64), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
