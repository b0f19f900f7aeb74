"""Tracker derivation: base/overtime split and night allocation from recorded shifts."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Protocol

from shiftpay_engine.calculators.night import NightMinutes, NightUpliftAllocator
from shiftpay_engine.calculators.rules import AppSettings, OvertimeRules
from shiftpay_engine.calculators.types import (
    HistoryFilter,
    HoursAndMinutes,
    NightAllocation,
    OvertimeBasis,
    OvertimeSplit,
    SubmittedDay,
    WorkedInterval,
)
from shiftpay_engine.timeutils import week_start

logger = logging.getLogger(__name__)


class WorkedIntervalSource(Protocol):
    """Pending (not yet submitted) intervals store."""

    async def get_worked_intervals_for_date(self, work_date: date) -> list[WorkedInterval]:
        ...


class SubmittedDaySource(Protocol):
    """Submitted history store."""

    async def get_submitted_days(self, day_filter: HistoryFilter) -> list[SubmittedDay]:
        ...


@dataclass(frozen=True)
class DaySnapshot:
    """Intervals recorded for one date, read from both stores together."""

    work_date: date
    intervals: list[WorkedInterval]

    @property
    def total_minutes(self) -> int:
        return sum(max(0, i.duration_minutes) for i in self.intervals)


@dataclass(frozen=True)
class MinuteSplit:
    base: int
    overtime: int


@dataclass(frozen=True)
class DerivationResult:
    """Split and night allocation derived from one snapshot."""

    total_minutes: int
    split: OvertimeSplit
    night: NightAllocation


def _threshold_minutes(hours: Decimal | None) -> int | None:
    if hours is None or hours < 0:
        return None
    return int((hours * 60).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def active_basis(rules: OvertimeRules | None) -> OvertimeBasis | None:
    """The basis derivation splits on; None when overtime is off or unset."""
    if rules is None or rules.enabled is False:
        return None
    return rules.active


class TrackerDerivationEngine:
    """Derives calculation inputs from recorded shift intervals.

    The engine is an async pre-step for the pure calculator: it gathers a
    snapshot from the pending and submitted stores, then derives plain data.
    It holds no lock and never retries; callers re-derive if the underlying
    intervals change before the calculator consumes the result.
    """

    def __init__(
        self,
        pending: WorkedIntervalSource,
        history: SubmittedDaySource,
        allocator: NightUpliftAllocator | None = None,
    ):
        self.pending = pending
        self.history = history
        self.allocator = allocator or NightUpliftAllocator()

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    async def derive_overtime_split(self, work_date: date, settings: AppSettings) -> OvertimeSplit:
        snapshot = await self.gather(work_date)
        minutes = await self._split_minutes(snapshot, settings)
        return self._to_split(minutes)

    async def derive_night_allocation(
        self, work_date: date, settings: AppSettings
    ) -> NightAllocation:
        snapshot = await self.gather(work_date)
        return await self._night_allocation(snapshot, settings)

    async def derive_tracker_hours(self, work_date: date) -> HoursAndMinutes:
        """Total recorded time for the date (pending plus submitted)."""
        snapshot = await self.gather(work_date)
        return HoursAndMinutes.from_minutes(snapshot.total_minutes)

    async def derive_all(self, work_date: date, settings: AppSettings) -> DerivationResult:
        """Split and night allocation from a single read of both stores."""
        snapshot = await self.gather(work_date)
        minutes = await self._split_minutes(snapshot, settings)
        night = await self._night_allocation(snapshot, settings, minutes)
        return DerivationResult(
            total_minutes=snapshot.total_minutes,
            split=self._to_split(minutes),
            night=night,
        )

    # ------------------------------------------------------------------
    # Snapshot
    # ------------------------------------------------------------------

    async def gather(self, work_date: date) -> DaySnapshot:
        """Read pending and submitted intervals for the date concurrently.

        A submitted interval is removed from the pending store, so the two
        sources are summed without double counting.
        """
        pending, submitted_days = await asyncio.gather(
            self.pending.get_worked_intervals_for_date(work_date),
            self.history.get_submitted_days(
                HistoryFilter(start_date=work_date, end_date=work_date)
            ),
        )
        intervals = list(pending)
        for day in submitted_days:
            if day.date == work_date:
                intervals.extend(day.shifts)
        logger.debug(
            "Gathered %d pending and %d submitted intervals for %s",
            len(pending),
            len(intervals) - len(pending),
            work_date,
        )
        return DaySnapshot(work_date=work_date, intervals=intervals)

    # ------------------------------------------------------------------
    # Split
    # ------------------------------------------------------------------

    async def _split_minutes(self, snapshot: DaySnapshot, settings: AppSettings) -> MinuteSplit:
        total = snapshot.total_minutes
        rules = settings.pay_rules.overtime
        basis = active_basis(rules)
        tier = rules.tier(basis) if rules is not None else None
        threshold = _threshold_minutes(tier.threshold) if tier is not None else None

        if basis is None or threshold is None:
            return MinuteSplit(base=total, overtime=0)

        if basis is OvertimeBasis.DAILY:
            base = min(total, threshold)
            return MinuteSplit(base=base, overtime=total - base)

        prior = await self._prior_period_minutes(snapshot.work_date, settings)
        headroom = max(0, threshold - prior)
        if headroom == 0:
            return MinuteSplit(base=0, overtime=total)
        if headroom >= total:
            return MinuteSplit(base=total, overtime=0)
        return MinuteSplit(base=headroom, overtime=total - headroom)

    async def _prior_period_minutes(self, work_date: date, settings: AppSettings) -> int:
        """Submitted minutes earlier in the week containing ``work_date``."""
        period_start = week_start(work_date, settings.pay_rules.pay_period.start_day)
        if period_start >= work_date:
            return 0
        day_filter = HistoryFilter(
            start_date=period_start, end_date=work_date - timedelta(days=1)
        )
        days = await self.history.get_submitted_days(day_filter)
        prior = sum(
            max(0, day.total_minutes)
            for day in days
            if period_start <= day.date < work_date
        )
        logger.debug(
            "Weekly accumulation for %s since %s: %d minutes", work_date, period_start, prior
        )
        return prior

    # ------------------------------------------------------------------
    # Night
    # ------------------------------------------------------------------

    async def _night_allocation(
        self,
        snapshot: DaySnapshot,
        settings: AppSettings,
        minutes: MinuteSplit | None = None,
    ) -> NightAllocation:
        window = self.allocator.night_window(settings.pay_rules.night)
        if window is None:
            return self._to_night(NightMinutes(base=0, overtime=0))

        intervals = self.allocator.intervals_from_shifts(snapshot.intervals)
        night_minutes = self.allocator.total_night_minutes(intervals, window)

        rules = settings.pay_rules.overtime
        basis = active_basis(rules)
        daily_threshold = (
            _threshold_minutes(rules.daily.threshold)
            if rules is not None and rules.daily is not None
            else None
        )
        if basis is OvertimeBasis.DAILY and daily_threshold is not None:
            allocated = self.allocator.allocate_chronologically(
                intervals, window, daily_threshold
            )
        else:
            if minutes is None:
                minutes = await self._split_minutes(snapshot, settings)
            allocated = self.allocator.allocate_proportionally(
                night_minutes, minutes.base, minutes.overtime
            )
        return self._to_night(allocated)

    @staticmethod
    def _to_split(minutes: MinuteSplit) -> OvertimeSplit:
        return OvertimeSplit(
            base=HoursAndMinutes.from_minutes(minutes.base),
            overtime=HoursAndMinutes.from_minutes(minutes.overtime),
        )

    @staticmethod
    def _to_night(minutes: NightMinutes) -> NightAllocation:
        return NightAllocation(
            night_base=HoursAndMinutes.from_minutes(minutes.base),
            night_overtime=HoursAndMinutes.from_minutes(minutes.overtime),
        )
