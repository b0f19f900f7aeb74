"""Clock-time and calendar helpers."""

from __future__ import annotations

import calendar
import re
from datetime import date, timedelta

from shiftpay_engine.calculators.rules import WEEKDAY_NAMES, PayPeriodConfig
from shiftpay_engine.calculators.types import PayCycle

MINUTES_PER_DAY = 24 * 60

_TIME_RE = re.compile(r"^([01]?[0-9]|2[0-3]):([0-5][0-9])$")

# Fortnightly periods are counted from the first configured start day on or after this date.
FORTNIGHT_ANCHOR = date(2024, 1, 1)


def is_valid_time(value: object) -> bool:
    """Validate an "HH:MM" string."""
    return isinstance(value, str) and _TIME_RE.match(value.strip()) is not None


def time_to_minutes(value: object) -> int | None:
    """Minutes since midnight for "HH:MM", or None if invalid."""
    if not isinstance(value, str):
        return None
    match = _TIME_RE.match(value.strip())
    if match is None:
        return None
    return int(match.group(1)) * 60 + int(match.group(2))


def calculate_duration(start: str, end: str) -> int:
    """Minutes between two clock times; an earlier end is on the next day."""
    start_minutes = time_to_minutes(start)
    end_minutes = time_to_minutes(end)
    if start_minutes is None or end_minutes is None:
        raise ValueError(f"Invalid time range {start!r}-{end!r}")
    if end_minutes < start_minutes:
        return MINUTES_PER_DAY - start_minutes + end_minutes
    return end_minutes - start_minutes


def format_duration(minutes: int) -> str:
    """Human-readable duration, e.g. "1h 10m"."""
    hours, mins = divmod(max(0, minutes), 60)
    if hours == 0:
        return f"{mins}m"
    if mins == 0:
        return f"{hours}h"
    return f"{hours}h {mins}m"


def week_start(day: date, start_day: str = "Mon") -> date:
    """Most recent ``start_day`` on or before ``day``."""
    start_index = WEEKDAY_NAMES.index(start_day) if start_day in WEEKDAY_NAMES else 0
    return day - timedelta(days=(day.weekday() - start_index) % 7)


def pay_period_bounds(day: date, config: PayPeriodConfig) -> tuple[date, date]:
    """Inclusive first and last date of the pay period containing ``day``."""
    if config.cycle is PayCycle.MONTHLY:
        start = _monthly_start(day.year, day.month, config.start_date)
        if start > day:
            year, month = (day.year - 1, 12) if day.month == 1 else (day.year, day.month - 1)
            start = _monthly_start(year, month, config.start_date)
        year, month = (start.year + 1, 1) if start.month == 12 else (start.year, start.month + 1)
        return start, _monthly_start(year, month, config.start_date) - timedelta(days=1)

    if config.cycle is PayCycle.FORTNIGHTLY:
        anchor = week_start(FORTNIGHT_ANCHOR + timedelta(days=6), config.start_day)
        offset = (day - anchor).days // 14
        start = anchor + timedelta(days=offset * 14)
        return start, start + timedelta(days=13)

    start = week_start(day, config.start_day)
    return start, start + timedelta(days=6)


def _monthly_start(year: int, month: int, start_date: int) -> date:
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(start_date, last_day))
