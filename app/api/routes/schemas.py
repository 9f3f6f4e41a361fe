from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from app.verification.state import VerificationOutcome, VerificationState


class StampResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    verified: bool
    verification_date: str | None
    verification_time: str | None
    verified_by: str | None


class TicketViewResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    ticket_id: str
    event_id: str
    event_name: str
    attendee_name: str
    attendee_email: str
    ticket_type: str
    purchase_date: str
    purchase_time: str
    ticket_reference: str
    is_verified: bool


class VerificationRequest(BaseModel):
    ticket_id: str = Field(..., min_length=1, max_length=512)


class VerificationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    outcome: VerificationOutcome
    state: VerificationState
    message: str
    ticket: TicketViewResponse | None = None
    stamp: StampResponse | None = None


class EventResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    event_id: str
    event_name: str
    event_date: str | None
    event_venue: str | None
    created_at: datetime


class EventOverviewResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    event: EventResponse
    attendee_count: int
    verified_count: int
    pending_count: int


class AttendeeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    ticket_id: str
    attendee_uid: str | None
    full_name: str | None
    email: str | None
    ticket_type: str | None
    purchase_date: str | None
    purchase_time: str | None
    ticket_reference: str | None
    stamp: StampResponse


class TicketHistoryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    ticket_id: str
    event_id: str
    event_name: str | None
    ticket_type: str | None
    ticket_reference: str | None
    purchase_date: str | None
    purchase_time: str | None
    created_at: datetime | None
    stamp: StampResponse
