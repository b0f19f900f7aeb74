"""Pay calculation history storage with staleness detection."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from shiftpay_engine.calculators.engine import PayCalculator
from shiftpay_engine.calculators.types import (
    PayBreakdown,
    PayCalculationEntry,
    PayCalculationInput,
    RateSnapshot,
)
from shiftpay_engine.models import PayHistoryEntry

logger = logging.getLogger(__name__)


@dataclass
class HistoryItem:
    """A saved entry and whether its deduction rules have since changed."""

    entry: PayCalculationEntry
    stale: bool


def _from_row(row: PayHistoryEntry) -> PayCalculationEntry:
    return PayCalculationEntry(
        id=row.entry_id,
        input=PayCalculationInput.from_dict(row.input_json),
        calculated_pay=PayBreakdown.from_dict(row.breakdown_json),
        settings_version=row.settings_version,
        created_at=row.created_at,
        rate_snapshot=RateSnapshot.from_dict(row.rate_snapshot_json),
    )


class PayHistoryService:
    """Saves and lists PayCalculationEntry records."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def save_entry(self, entry: PayCalculationEntry) -> PayCalculationEntry:
        row = PayHistoryEntry(
            entry_id=entry.id,
            work_date=entry.input.work_date,
            input_json=entry.input.to_dict(),
            breakdown_json=entry.calculated_pay.to_dict(),
            rate_snapshot_json=entry.rate_snapshot.to_dict() if entry.rate_snapshot else None,
            settings_version=entry.settings_version,
            created_at=entry.created_at,
        )
        async with self.session_factory() as session:
            session.add(row)
            await session.commit()
        logger.info(
            "Saved pay entry %s for %s (total %s, settings %s)",
            entry.id,
            entry.input.work_date,
            entry.calculated_pay.total,
            entry.settings_version,
        )
        return entry

    async def list_entries(
        self,
        current_version: str | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> list[HistoryItem]:
        """Entries newest first, flagged stale against ``current_version``."""
        query = select(PayHistoryEntry)
        if start_date is not None:
            query = query.where(PayHistoryEntry.work_date >= start_date)
        if end_date is not None:
            query = query.where(PayHistoryEntry.work_date <= end_date)
        query = query.order_by(PayHistoryEntry.created_at.desc())

        async with self.session_factory() as session:
            result = await session.execute(query)
            rows = list(result.scalars().all())

        return [
            HistoryItem(
                entry=_from_row(row),
                stale=PayCalculator.is_entry_stale(row.settings_version, current_version),
            )
            for row in rows
        ]
