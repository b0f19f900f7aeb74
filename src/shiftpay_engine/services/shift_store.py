"""SQL-backed pending shift and submitted day stores."""

from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date, datetime, timezone
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import selectinload

from shiftpay_engine.calculators.types import (
    HistoryFilter,
    Submission,
    SubmittedDay,
    WorkedInterval,
)
from shiftpay_engine.models import DaySubmission, Shift
from shiftpay_engine.timeutils import (
    calculate_duration,
    format_duration,
    is_valid_time,
    time_to_minutes,
)

logger = logging.getLogger(__name__)


class InvalidShiftError(Exception):
    """Raised when a shift has malformed or zero-length clock times."""

    def __init__(self, start: str, end: str, reason: str = "expected HH:MM"):
        self.start = start
        self.end = end
        self.reason = reason
        super().__init__(f"Invalid shift times: start={start!r} end={end!r} ({reason})")


class ShiftNotFoundError(Exception):
    """Raised when a pending shift does not exist."""

    def __init__(self, work_date: date, shift_id: UUID | None = None):
        self.work_date = work_date
        self.shift_id = shift_id
        if shift_id is None:
            msg = f"No pending shifts for {work_date}"
        else:
            msg = f"Pending shift {shift_id} not found for {work_date}"
        super().__init__(msg)


def to_interval(shift: Shift) -> WorkedInterval:
    return WorkedInterval(
        start=shift.start_time,
        end=shift.end_time,
        duration_minutes=shift.duration_minutes,
    )


class SqlShiftStore:
    """Pending shifts and submitted days in one database.

    Implements both collaborator reads used by the derivation engine. Each
    operation opens its own session, so the two reads can run concurrently.
    Submitting a day moves its pending shifts into a new submission, so no
    interval is ever both pending and submitted.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def add_shift(
        self, work_date: date, start: str, end: str, note: str | None = None
    ) -> Shift:
        """Record a pending shift; an end before start finishes the next day.

        A shift must have non-zero length, so equal start and end are rejected.
        """
        if not is_valid_time(start) or not is_valid_time(end):
            raise InvalidShiftError(start, end)
        start, end = start.strip(), end.strip()
        if time_to_minutes(start) == time_to_minutes(end):
            raise InvalidShiftError(start, end, "start and end are equal")

        shift = Shift(
            work_date=work_date,
            start_time=start,
            end_time=end,
            duration_minutes=calculate_duration(start, end),
            note=note,
        )
        async with self.session_factory() as session:
            session.add(shift)
            await session.commit()
        logger.info(
            "Recorded shift %s on %s (%s-%s, %s)",
            shift.shift_id,
            work_date,
            start,
            end,
            format_duration(shift.duration_minutes),
        )
        return shift

    async def remove_shift(self, work_date: date, shift_id: UUID) -> None:
        async with self.session_factory() as session:
            shift = await session.get(Shift, shift_id)
            if shift is None or shift.work_date != work_date or not shift.is_pending:
                raise ShiftNotFoundError(work_date, shift_id)
            await session.delete(shift)
            await session.commit()
        logger.info("Removed pending shift %s on %s", shift_id, work_date)

    async def list_pending(self, work_date: date) -> list[Shift]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(Shift)
                .where(Shift.work_date == work_date, Shift.submission_id.is_(None))
                .order_by(Shift.start_time)
            )
            return list(result.scalars().all())

    async def get_worked_intervals_for_date(self, work_date: date) -> list[WorkedInterval]:
        """Pending intervals for the date."""
        return [to_interval(shift) for shift in await self.list_pending(work_date)]

    async def submit_day(self, work_date: date) -> SubmittedDay:
        """Move every pending shift of the date into a new submission."""
        async with self.session_factory() as session:
            result = await session.execute(
                select(Shift).where(
                    Shift.work_date == work_date, Shift.submission_id.is_(None)
                )
            )
            shifts = list(result.scalars().all())
            if not shifts:
                raise ShiftNotFoundError(work_date)

            submission = DaySubmission(
                work_date=work_date,
                total_minutes=sum(s.duration_minutes for s in shifts),
                submitted_at=datetime.now(timezone.utc),
            )
            session.add(submission)
            await session.flush()
            for shift in shifts:
                shift.submission_id = submission.submission_id
            await session.commit()
            logger.info(
                "Submitted %d shifts for %s as %s (%d min)",
                len(shifts),
                work_date,
                submission.submission_id,
                submission.total_minutes,
            )

        days = await self.get_submitted_days(HistoryFilter(start_date=work_date, end_date=work_date))
        return days[0]

    async def get_submitted_days(self, day_filter: HistoryFilter | None = None) -> list[SubmittedDay]:
        """Submitted days within the filter, newest first."""
        day_filter = day_filter or HistoryFilter()
        query = select(DaySubmission).options(selectinload(DaySubmission.shifts))
        if day_filter.start_date is not None:
            query = query.where(DaySubmission.work_date >= day_filter.start_date)
        if day_filter.end_date is not None:
            query = query.where(DaySubmission.work_date <= day_filter.end_date)
        query = query.order_by(DaySubmission.work_date.desc(), DaySubmission.submitted_at.desc())

        async with self.session_factory() as session:
            result = await session.execute(query)
            submissions = list(result.scalars().all())

        by_date: dict[date, list[Submission]] = defaultdict(list)
        for sub in submissions:
            by_date[sub.work_date].append(
                Submission(
                    id=str(sub.submission_id),
                    shifts=[to_interval(s) for s in sub.shifts],
                    total_minutes=sub.total_minutes,
                    submitted_at=sub.submitted_at,
                )
            )
        return [
            SubmittedDay(
                date=day,
                total_minutes=sum(s.total_minutes for s in subs),
                submissions=subs,
            )
            for day, subs in by_date.items()
        ]
