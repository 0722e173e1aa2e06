# app/controllers/events_controller.py
from __future__ import annotations

import logging
from datetime import date as date_type
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import insert_or_ignore
from app.core.errors import ConflictError, NotFoundError
from app.core.intervals import TimeInterval
from app.models.events import Event, EventStatus, VenueDayLock
from app.models.certificate import CertificateTemplate
from app.schemas.certificate import FieldPlacement
from app.schemas.events import ConflictCheckIn, EventCreateIn
from app.services.conflicts import conflict_detail, scan_conflicts

logger = logging.getLogger(__name__)


# =========================================================
# ---------------------- LOCKING ---------------------------
# =========================================================

async def _lock_venue_day(db: AsyncSession, date: date_type, venue: str) -> None:
    """
    Serializes check-then-insert for one (date, venue).

    The lock row is created on first use, then held FOR UPDATE until the
    request transaction ends. A concurrent create for the same venue-day
    waits here and re-scans after the first one commits.
    """
    await insert_or_ignore(db, VenueDayLock, {"date": date, "venue": venue})
    await db.execute(
        select(VenueDayLock.id)
        .where(VenueDayLock.date == date, VenueDayLock.venue == venue)
        .with_for_update()
    )


def _dump_config(config: Optional[dict[str, FieldPlacement]]) -> Optional[dict]:
    if config is None:
        return None
    return {k: v.model_dump(by_alias=True, exclude_none=True) for k, v in config.items()}


# =========================================================
# ---------------------- EVENTS ----------------------------
# =========================================================

async def create_event(db: AsyncSession, payload: EventCreateIn) -> Event:
    slot = TimeInterval.of(payload.start_time, payload.end_time)

    await _lock_venue_day(db, payload.date, payload.venue)

    conflicts = await scan_conflicts(db, payload.date, payload.venue, slot.start, slot.end)
    if conflicts:
        logger.warning(
            "Rejected event %r: %s %s-%s at %r is already booked",
            payload.title, payload.date, slot.start, slot.end, payload.venue,
        )
        raise ConflictError([conflict_detail(ev, slot.start, slot.end) for ev in conflicts])

    ev = Event(
        title=payload.title,
        description=payload.description or None,
        date=payload.date,
        start_time=slot.start,
        end_time=slot.end,
        venue=payload.venue,
        organizer_id=payload.organizer_id,
        organizer_name=payload.organizer_name,
        status=(payload.status or EventStatus.PENDING).value,
        event_type=payload.event_type.value,
        entry_fee=payload.entry_fee,
        poster_base64=payload.poster_base64,
        certificate_template_base64=payload.certificate_template_base64,
        template_config=_dump_config(payload.template_config),
        participant_count=0,
    )
    db.add(ev)
    await db.commit()
    await db.refresh(ev)

    logger.info("Event %s created: %r at %r on %s %s-%s",
                ev.id, ev.title, ev.venue, ev.date, ev.start_time, ev.end_time)
    return ev


async def delete_event(db: AsyncSession, event_id: str) -> None:
    """
    Deletes by canonical id only. An id minted by some other system will
    not be found here; that is reported as 404, never guessed at.
    """
    ev = await db.get(Event, event_id)
    if not ev:
        raise NotFoundError("Event not found", f"No event with id {event_id}")

    await db.delete(ev)
    await db.commit()
    logger.info("Event %s deleted", event_id)


async def check_conflicts(db: AsyncSession, payload: ConflictCheckIn) -> dict:
    slot = TimeInterval.of(payload.start_time, payload.end_time)

    conflicts = await scan_conflicts(
        db, payload.date, payload.venue, slot.start, slot.end,
        exclude_event_id=payload.exclude_event_id,
    )

    report = {
        "hasConflict": bool(conflicts),
        "conflictingEvents": [conflict_detail(ev, slot.start, slot.end) for ev in conflicts],
        "suggestions": [],
    }
    if conflicts:
        report["conflictType"] = "venue_booked"
    return report


async def list_events(db: AsyncSession) -> list[Event]:
    res = await db.execute(select(Event).order_by(Event.date.desc(), Event.created_at.desc()))
    return list(res.scalars().all())


async def get_event_or_404(db: AsyncSession, event_id: str) -> Event:
    ev = await db.get(Event, event_id)
    if not ev:
        raise NotFoundError("Event not found", f"No event with id {event_id}")
    return ev


async def attach_template(
    db: AsyncSession,
    event_id: str,
    template_path: str,
    config: Optional[dict[str, FieldPlacement]],
) -> CertificateTemplate:
    """
    The one update an event takes after creation: point it at a certificate
    template and, when given, its placement config.
    """
    ev = await get_event_or_404(db, event_id)

    res = await db.execute(select(CertificateTemplate).where(CertificateTemplate.event_id == event_id))
    tpl = res.scalar_one_or_none()
    if tpl is None:
        tpl = CertificateTemplate(event_id=event_id, template_path=template_path)
        db.add(tpl)
    else:
        tpl.template_path = template_path

    if config is not None:
        ev.template_config = _dump_config(config)

    await db.commit()
    await db.refresh(tpl)
    return tpl
