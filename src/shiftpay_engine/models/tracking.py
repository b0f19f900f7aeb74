"""Recorded shift and day submission models."""

from __future__ import annotations

from datetime import date, datetime
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint, Date, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shiftpay_engine.models.base import Base, TimestampMixin, utcnow


class DaySubmission(Base, TimestampMixin):
    """A batch of shifts submitted together for one date."""

    __tablename__ = "day_submission"

    submission_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    work_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    total_minutes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    submitted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    __table_args__ = (
        CheckConstraint("total_minutes >= 0", name="total_minutes_non_negative"),
    )

    # Relationships
    shifts: Mapped[list[Shift]] = relationship(
        back_populates="submission",
        order_by="Shift.start_time",
    )


class Shift(Base, TimestampMixin):
    """A recorded worked interval; pending while ``submission_id`` is NULL."""

    __tablename__ = "shift"

    shift_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    work_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    start_time: Mapped[str] = mapped_column(String(5), nullable=False)
    end_time: Mapped[str] = mapped_column(String(5), nullable=False)
    duration_minutes: Mapped[int] = mapped_column(Integer, nullable=False)
    note: Mapped[str | None] = mapped_column(Text)
    submission_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("day_submission.submission_id", ondelete="CASCADE"),
        index=True,
    )

    __table_args__ = (
        CheckConstraint("duration_minutes >= 0", name="duration_non_negative"),
    )

    # Relationships
    submission: Mapped[DaySubmission | None] = relationship(back_populates="shifts")

    @property
    def is_pending(self) -> bool:
        return self.submission_id is None
