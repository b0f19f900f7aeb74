"""Tests for the SQL shift store and pay history service."""

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal
from uuid import uuid4

import pytest

from shiftpay_engine.calculators.engine import PayCalculator
from shiftpay_engine.calculators.types import HistoryFilter, HoursAndMinutes, RateSnapshot
from shiftpay_engine.derivation import TrackerDerivationEngine
from shiftpay_engine.services import (
    InvalidShiftError,
    PayHistoryService,
    ShiftNotFoundError,
    SqlShiftStore,
)
from tests.factories import MONDAY, TUESDAY, WEDNESDAY, build_settings, make_input


class TestPendingShifts:
    """Recording and removing pending shifts."""

    @pytest.mark.asyncio
    async def test_add_shift_computes_duration(self, session_factory):
        store = SqlShiftStore(session_factory)
        shift = await store.add_shift(MONDAY, "22:00", "06:00", note="nights")
        assert shift.duration_minutes == 480
        assert shift.is_pending
        assert shift.note == "nights"

    @pytest.mark.asyncio
    async def test_invalid_times_rejected(self, session_factory):
        store = SqlShiftStore(session_factory)
        with pytest.raises(InvalidShiftError) as exc_info:
            await store.add_shift(MONDAY, "25:00", "06:00")
        assert exc_info.value.start == "25:00"
        assert await store.list_pending(MONDAY) == []

    @pytest.mark.asyncio
    async def test_equal_start_and_end_rejected(self, session_factory):
        store = SqlShiftStore(session_factory)
        with pytest.raises(InvalidShiftError) as exc_info:
            await store.add_shift(MONDAY, "22:00", "22:00")
        assert exc_info.value.reason == "start and end are equal"

        engine = TrackerDerivationEngine(pending=store, history=store)
        result = await engine.derive_all(MONDAY, build_settings(pay_rules={
            "night": {"start": "22:00", "end": "06:00", "type": "fixed", "value": 1}
        }))
        assert result.total_minutes == 0
        assert result.night.night_base == HoursAndMinutes(0, 0)
        assert result.night.night_overtime == HoursAndMinutes(0, 0)

    @pytest.mark.asyncio
    async def test_intervals_for_date_ordered(self, session_factory):
        store = SqlShiftStore(session_factory)
        await store.add_shift(MONDAY, "13:00", "17:00")
        await store.add_shift(MONDAY, "08:00", "12:00")
        await store.add_shift(TUESDAY, "08:00", "12:00")
        intervals = await store.get_worked_intervals_for_date(MONDAY)
        assert [(i.start, i.end, i.duration_minutes) for i in intervals] == [
            ("08:00", "12:00", 240),
            ("13:00", "17:00", 240),
        ]

    @pytest.mark.asyncio
    async def test_remove_shift(self, session_factory):
        store = SqlShiftStore(session_factory)
        shift = await store.add_shift(MONDAY, "08:00", "12:00")
        await store.remove_shift(MONDAY, shift.shift_id)
        assert await store.list_pending(MONDAY) == []

    @pytest.mark.asyncio
    async def test_remove_unknown_shift(self, session_factory):
        store = SqlShiftStore(session_factory)
        with pytest.raises(ShiftNotFoundError):
            await store.remove_shift(MONDAY, uuid4())

    @pytest.mark.asyncio
    async def test_remove_shift_wrong_date(self, session_factory):
        store = SqlShiftStore(session_factory)
        shift = await store.add_shift(MONDAY, "08:00", "12:00")
        with pytest.raises(ShiftNotFoundError):
            await store.remove_shift(TUESDAY, shift.shift_id)


class TestSubmission:
    """Submitting a day moves pending shifts into history."""

    @pytest.mark.asyncio
    async def test_submit_moves_shifts(self, session_factory):
        store = SqlShiftStore(session_factory)
        await store.add_shift(MONDAY, "08:00", "12:00")
        await store.add_shift(MONDAY, "13:00", "18:00")
        day = await store.submit_day(MONDAY)

        assert day.date == MONDAY
        assert day.total_minutes == 540
        assert len(day.submissions) == 1
        assert [s.start for s in day.shifts] == ["08:00", "13:00"]
        assert await store.get_worked_intervals_for_date(MONDAY) == []

    @pytest.mark.asyncio
    async def test_submit_without_pending_shifts(self, session_factory):
        store = SqlShiftStore(session_factory)
        with pytest.raises(ShiftNotFoundError):
            await store.submit_day(MONDAY)

    @pytest.mark.asyncio
    async def test_multiple_submissions_grouped_by_day(self, session_factory):
        store = SqlShiftStore(session_factory)
        await store.add_shift(MONDAY, "08:00", "12:00")
        await store.submit_day(MONDAY)
        await store.add_shift(MONDAY, "18:00", "20:00")
        day = await store.submit_day(MONDAY)
        assert day.total_minutes == 360
        assert len(day.submissions) == 2

    @pytest.mark.asyncio
    async def test_submitted_days_filtered_newest_first(self, session_factory):
        store = SqlShiftStore(session_factory)
        for work_date in (MONDAY, TUESDAY, WEDNESDAY):
            await store.add_shift(work_date, "09:00", "17:00")
            await store.submit_day(work_date)

        days = await store.get_submitted_days(HistoryFilter(start_date=TUESDAY))
        assert [d.date for d in days] == [WEDNESDAY, TUESDAY]
        everything = await store.get_submitted_days()
        assert [d.date for d in everything] == [WEDNESDAY, TUESDAY, MONDAY]


class TestDerivationOverSql:
    """The SQL store serves both derivation reads."""

    @pytest.mark.asyncio
    async def test_pending_and_submitted_combined(self, session_factory):
        store = SqlShiftStore(session_factory)
        await store.add_shift(MONDAY, "06:00", "12:00")
        await store.submit_day(MONDAY)
        await store.add_shift(MONDAY, "13:00", "17:30")

        engine = TrackerDerivationEngine(pending=store, history=store)
        result = await engine.derive_all(MONDAY, build_settings())
        assert result.total_minutes == 630
        assert result.split.base == HoursAndMinutes(8, 0)
        assert result.split.overtime == HoursAndMinutes(2, 30)

    @pytest.mark.asyncio
    async def test_weekly_headroom_from_submitted_days(self, session_factory):
        store = SqlShiftStore(session_factory)
        for offset in range(2):
            work_date = MONDAY + timedelta(days=offset)
            await store.add_shift(work_date, "04:00", "22:00")
            await store.submit_day(work_date)
        await store.add_shift(WEDNESDAY, "09:00", "17:00")

        settings = build_settings(pay_rules={
            "overtime": {"active": "weekly",
                         "weekly": {"threshold": 38, "mode": "multiplier", "multiplier": 1.5}}
        })
        engine = TrackerDerivationEngine(pending=store, history=store)
        split = await engine.derive_overtime_split(WEDNESDAY, settings)
        assert split.base == HoursAndMinutes(2, 0)
        assert split.overtime == HoursAndMinutes(6, 0)


class TestPayHistory:
    """Saved entries and stale flags."""

    @pytest.mark.asyncio
    async def test_save_and_list(self, session_factory):
        history = PayHistoryService(session_factory)
        settings = build_settings()
        entry = PayCalculator().build_entry(
            make_input(MONDAY, 8, 2),
            settings,
            RateSnapshot(base=Decimal("20"), overtime=Decimal("30")),
        )
        await history.save_entry(entry)

        items = await history.list_entries(entry.settings_version)
        assert len(items) == 1
        loaded = items[0].entry
        assert items[0].stale is False
        assert loaded.id == entry.id
        assert loaded.input == entry.input
        assert loaded.calculated_pay == entry.calculated_pay
        assert loaded.rate_snapshot == entry.rate_snapshot

    @pytest.mark.asyncio
    async def test_entries_stale_after_tax_change(self, session_factory):
        history = PayHistoryService(session_factory)
        calculator = PayCalculator()
        old_settings = build_settings(pay_rules={"tax": {"percentage": 20}})
        new_settings = build_settings(pay_rules={"tax": {"percentage": 25}})
        await history.save_entry(calculator.build_entry(make_input(MONDAY, 8, 0), old_settings))

        current = calculator.compute_settings_version(new_settings)
        items = await history.list_entries(current)
        assert [item.stale for item in items] == [True]

    @pytest.mark.asyncio
    async def test_list_filters_by_date(self, session_factory):
        history = PayHistoryService(session_factory)
        calculator = PayCalculator()
        settings = build_settings()
        for work_date in (MONDAY, TUESDAY, WEDNESDAY):
            await history.save_entry(calculator.build_entry(make_input(work_date, 8, 0), settings))

        items = await history.list_entries(None, start_date=TUESDAY, end_date=TUESDAY)
        assert [item.entry.input.work_date for item in items] == [TUESDAY]
