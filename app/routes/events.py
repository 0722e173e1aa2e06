# app/routes/events.py
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.dependencies import get_auth_subject

from app.schemas.events import (
    ConflictCheckIn,
    ConflictReportOut,
    EventCreateIn,
    EventCreatedOut,
    EventOut,
)

from app.controllers.events_controller import (
    check_conflicts,
    create_event,
    delete_event,
    list_events,
)

router = APIRouter(tags=["Events"])


# =========================================================
# ---------------------- EVENTS ----------------------------
# =========================================================

@router.post("/events", response_model=EventCreatedOut, status_code=201)
async def create_event_api(
    payload: EventCreateIn,
    db: AsyncSession = Depends(get_db),
    subject: str = Depends(get_auth_subject),
):
    ev = await create_event(db, payload)
    return {"success": True, "message": "Event created successfully", "data": ev}


@router.delete("/events/{event_id}")
async def delete_event_api(
    event_id: str,
    db: AsyncSession = Depends(get_db),
    subject: str = Depends(get_auth_subject),
):
    await delete_event(db, event_id)
    return {"success": True, "message": "Event deleted successfully"}


@router.post("/events/check-conflicts", response_model=ConflictReportOut, response_model_exclude_none=True)
async def check_conflicts_api(
    payload: ConflictCheckIn,
    db: AsyncSession = Depends(get_db),
    subject: str = Depends(get_auth_subject),
):
    return {"success": True, "data": await check_conflicts(db, payload)}


# =========================================================
# ---------------------- ADMIN -----------------------------
# =========================================================

@router.get("/admin/events", response_model=list[EventOut])
async def admin_list_events_api(
    db: AsyncSession = Depends(get_db),
    subject: str = Depends(get_auth_subject),
):
    return await list_events(db)
