"""Night window overlap and base/overtime allocation of night minutes."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from shiftpay_engine.calculators.rules import NightRule
from shiftpay_engine.calculators.types import WorkedInterval
from shiftpay_engine.timeutils import MINUTES_PER_DAY, time_to_minutes

ClockInterval = tuple[int, int]


@dataclass(frozen=True)
class NightMinutes:
    """Night minutes split between the base and overtime tiers."""

    base: int
    overtime: int

    @property
    def total(self) -> int:
        return self.base + self.overtime


def to_clock_interval(start: str | None, end: str | None) -> ClockInterval | None:
    """Parse "HH:MM" bounds into minutes; an end at or before start wraps midnight."""
    start_minutes = time_to_minutes(start)
    end_minutes = time_to_minutes(end)
    if start_minutes is None or end_minutes is None:
        return None
    if end_minutes <= start_minutes:
        end_minutes += MINUTES_PER_DAY
    return start_minutes, end_minutes


class NightUpliftAllocator:
    """Measures night overlap of worked intervals and allocates it to tiers.

    The daily basis uses a chronological minute walk so that a shift crossing
    the overtime threshold splits its night minutes exactly at the crossing
    point. Other bases split night minutes proportionally.
    """

    @staticmethod
    def night_window(rule: NightRule | None) -> ClockInterval | None:
        """The configured window, or None when disabled or unparseable."""
        if rule is None or rule.enabled is False:
            return None
        return to_clock_interval(rule.start, rule.end)

    @staticmethod
    def intervals_from_shifts(shifts: Iterable[WorkedInterval]) -> list[ClockInterval]:
        intervals = []
        for shift in shifts:
            # Zero-length records count as no work, not as a full day.
            if shift.duration_minutes <= 0:
                continue
            interval = to_clock_interval(shift.start, shift.end)
            if interval is not None:
                intervals.append(interval)
        return intervals

    @staticmethod
    def overlap_minutes(interval: ClockInterval, window: ClockInterval) -> int:
        """Overlap of an interval with every 24h-shifted occurrence of the window."""
        start, end = interval
        window_start, window_end = window
        total = 0
        for shift in (-MINUTES_PER_DAY, 0, MINUTES_PER_DAY):
            overlap = min(end, window_end + shift) - max(start, window_start + shift)
            if overlap > 0:
                total += overlap
        return total

    @classmethod
    def total_night_minutes(
        cls, intervals: Iterable[ClockInterval], window: ClockInterval
    ) -> int:
        return sum(cls.overlap_minutes(interval, window) for interval in intervals)

    @staticmethod
    def minute_mask(intervals: Iterable[ClockInterval]) -> list[bool]:
        """One slot per minute of day, True where any interval covers it."""
        mask = [False] * MINUTES_PER_DAY
        for start, end in intervals:
            for minute in range(start, end):
                mask[minute % MINUTES_PER_DAY] = True
        return mask

    @classmethod
    def allocate_chronologically(
        cls,
        intervals: Iterable[ClockInterval],
        window: ClockInterval,
        threshold_minutes: int,
    ) -> NightMinutes:
        """Walk minutes 00:00..23:59 classifying each worked minute by tier.

        A worked minute is base tier while the worked minutes counted before
        it are below ``threshold_minutes``, overtime tier afterwards.
        """
        occupied = cls.minute_mask(intervals)
        night = cls.minute_mask([window])

        worked = 0
        night_base = 0
        night_overtime = 0
        for minute in range(MINUTES_PER_DAY):
            if not occupied[minute]:
                continue
            is_base = worked < threshold_minutes
            worked += 1
            if night[minute]:
                if is_base:
                    night_base += 1
                else:
                    night_overtime += 1
        return NightMinutes(base=night_base, overtime=night_overtime)

    @staticmethod
    def allocate_proportionally(
        night_minutes: int, base_minutes: int, overtime_minutes: int
    ) -> NightMinutes:
        """Split night minutes in the ratio of base to overtime minutes."""
        total = base_minutes + overtime_minutes
        if total <= 0 or night_minutes <= 0:
            return NightMinutes(base=0, overtime=0)
        share = Decimal(night_minutes * base_minutes) / Decimal(total)
        night_base = int(share.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
        return NightMinutes(base=night_base, overtime=night_minutes - night_base)
