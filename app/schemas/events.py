# =========================================================
# app/schemas/events.py
# =========================================================

from typing import Optional, List, Any
from datetime import datetime, date as date_type
from decimal import Decimal

from pydantic import BaseModel, Field, field_validator
from pydantic.config import ConfigDict

from app.models.events import EventStatus, EventType
from app.schemas.certificate import FieldPlacement


# ------------------ EVENTS ------------------

class EventCreateIn(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, str_strip_whitespace=True)

    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    date: date_type
    start_time: str = Field(..., alias="startTime", min_length=1)
    end_time: str = Field(..., alias="endTime", min_length=1)
    venue: str = Field(..., min_length=1)
    organizer_id: str = Field(..., alias="organizerId", min_length=1)
    organizer_name: str = Field(..., alias="organizerName", min_length=1)
    status: Optional[EventStatus] = None
    event_type: EventType = Field(..., alias="eventType")
    entry_fee: Optional[Decimal] = Field(None, alias="entryFee", ge=0)
    poster_base64: Optional[str] = Field(None, alias="posterBase64")
    certificate_template_base64: Optional[str] = Field(None, alias="certificateTemplateBase64")
    template_config: Optional[dict[str, FieldPlacement]] = Field(None, alias="templateConfig")

    # "Paid" / "FREE" from older clients
    @field_validator("event_type", "status", mode="before")
    @classmethod
    def _lower_enum(cls, v: Any):
        return v.strip().lower() if isinstance(v, str) else v


class ConflictCheckIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    date: date_type
    start_time: str = Field(..., alias="startTime", min_length=1)
    end_time: str = Field(..., alias="endTime", min_length=1)
    venue: str = Field(..., min_length=1)
    exclude_event_id: Optional[str] = Field(None, alias="excludeEventId")


class ConflictingEventOut(BaseModel):
    eventId: str
    name: str
    venue: str
    startTime: str
    endTime: str
    overlapMinutes: int


class ConflictReport(BaseModel):
    hasConflict: bool
    conflictType: Optional[str] = None
    conflictingEvents: List[ConflictingEventOut] = Field(default_factory=list)
    # alternative slots are not computed; always empty
    suggestions: List[Any] = Field(default_factory=list)


class ConflictReportOut(BaseModel):
    success: bool = True
    data: ConflictReport


class EventOut(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    date: date_type
    start_time: str
    end_time: str
    venue: str
    organizer_id: str
    organizer_name: str
    status: str
    event_type: str
    entry_fee: Optional[float] = None
    poster_base64: Optional[str] = None
    certificate_template_base64: Optional[str] = None
    template_config: Optional[dict] = None
    participant_count: int = 0
    created_at: Optional[datetime] = None

    @field_validator("entry_fee", mode="before")
    @classmethod
    def _decimal_to_float(cls, v: Any):
        return float(v) if isinstance(v, Decimal) else v

    class Config:
        from_attributes = True


class EventCreatedOut(BaseModel):
    success: bool = True
    message: str = "Event created successfully"
    data: EventOut
