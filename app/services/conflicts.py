"""
Venue/time conflict detection.

`find_conflicts` is the pure check over a flat list of events.
`scan_conflicts` feeds it the same-day, same-venue rows from the database;
both the create path and the advisory check-conflicts endpoint go through
it, so they always agree.
"""
from __future__ import annotations

import logging
from datetime import date as date_type
from typing import Iterable, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.intervals import TimeInterval, overlaps, overlap_minutes
from app.models.events import Event

logger = logging.getLogger(__name__)


def find_conflicts(
    events: Iterable,
    date: date_type,
    venue: str,
    start: str,
    end: str,
    exclude_event_id: Optional[str] = None,
) -> list:
    candidate = TimeInterval.of(start, end)

    out = []
    for ev in events:
        if ev.date != date or ev.venue != venue:
            continue
        if exclude_event_id is not None and ev.id == exclude_event_id:
            continue
        if overlaps(candidate, TimeInterval(ev.start_time, ev.end_time)):
            out.append(ev)
    return out


def conflict_detail(ev, start: str, end: str) -> dict:
    """Public shape of one colliding event."""
    return {
        "eventId": ev.id,
        "name": ev.title,
        "venue": ev.venue,
        "startTime": ev.start_time,
        "endTime": ev.end_time,
        "overlapMinutes": overlap_minutes(
            TimeInterval.of(start, end),
            TimeInterval(ev.start_time, ev.end_time),
        ),
    }


async def scan_conflicts(
    db: AsyncSession,
    date: date_type,
    venue: str,
    start: str,
    end: str,
    exclude_event_id: Optional[str] = None,
) -> Sequence[Event]:
    res = await db.execute(
        select(Event)
        .where(Event.date == date, Event.venue == venue)
        .order_by(Event.start_time)
    )
    same_slot = res.scalars().all()

    conflicts = find_conflicts(same_slot, date, venue, start, end, exclude_event_id)
    if conflicts:
        logger.info(
            "Venue %r on %s %s-%s collides with %d event(s)",
            venue, date, start, end, len(conflicts),
        )
    return conflicts
