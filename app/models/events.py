import uuid
from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import (
    Column, Integer, String, Text, Boolean, Numeric, JSON,
    DateTime, ForeignKey, UniqueConstraint, Date, Index,
)
from app.core.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_event_id() -> str:
    # Canonical event id; mirrored stores must reuse it, never mint their own
    return uuid.uuid4().hex


class EventStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class EventType(str, Enum):
    FREE = "free"
    PAID = "paid"


class Event(Base):
    __tablename__ = "events"
    __table_args__ = (
        Index("ix_events_date_venue", "date", "venue"),
    )

    id = Column(String(32), primary_key=True, default=new_event_id)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)

    date = Column(Date, nullable=False)
    start_time = Column(String(5), nullable=False)   # "HH:MM"
    end_time = Column(String(5), nullable=False)     # "HH:MM"
    venue = Column(String(255), nullable=False)

    organizer_id = Column(String(128), nullable=False)
    organizer_name = Column(String(255), nullable=False)

    status = Column(String(20), nullable=False, default=EventStatus.PENDING.value)
    event_type = Column(String(20), nullable=False, default=EventType.FREE.value)
    entry_fee = Column(Numeric(10, 2), nullable=True)

    poster_base64 = Column(Text, nullable=True)
    certificate_template_base64 = Column(Text, nullable=True)
    template_config = Column(JSON, nullable=True)   # field -> {x, y, fontSize, color}

    participant_count = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)


class VenueDayLock(Base):
    """
    One row per (date, venue). Event creation locks it FOR UPDATE so the
    conflict scan and the insert happen atomically per venue-day.
    """
    __tablename__ = "venue_day_locks"

    id = Column(Integer, primary_key=True)
    date = Column(Date, nullable=False)
    venue = Column(String(255), nullable=False)

    __table_args__ = (
        UniqueConstraint("date", "venue", name="uq_venue_day"),
    )


class EventAttendance(Base):
    __tablename__ = "event_attendance"

    id = Column(Integer, primary_key=True)
    event_id = Column(String(32), ForeignKey("events.id", ondelete="CASCADE"), nullable=False)
    student_id = Column(String(128), ForeignKey("students.id", ondelete="CASCADE"), nullable=False)
    attended = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), default=_utcnow)

    __table_args__ = (
        UniqueConstraint("event_id", "student_id", name="uq_attendance_event_student"),
    )
