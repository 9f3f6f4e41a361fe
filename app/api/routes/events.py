from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query

from app.dependencies.services import BookerUser, get_event_service, get_verification_service
from app.events.service import EventNotFoundError, EventService
from app.verification.service import AttendeeNotFoundError, TicketVerificationService, VerificationRequestError

from .schemas import AttendeeResponse, EventOverviewResponse, EventResponse, TicketViewResponse

router = APIRouter(prefix="/events", tags=["events"])

EventServiceDep = Annotated[EventService, Depends(get_event_service)]
VerificationServiceDep = Annotated[TicketVerificationService, Depends(get_verification_service)]


@router.get("", response_model=list[EventResponse])
async def list_events(service: EventServiceDep, user: BookerUser) -> list[EventResponse]:
    events = await service.list_events(user.uid)
    return [EventResponse.model_validate(event) for event in events]


@router.get("/{event_id}", response_model=EventOverviewResponse)
async def get_event(event_id: str, service: EventServiceDep, user: BookerUser) -> EventOverviewResponse:
    try:
        overview = await service.get_event_overview(user.uid, event_id)
    except EventNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return EventOverviewResponse.model_validate(overview)


@router.get("/{event_id}/attendees", response_model=list[AttendeeResponse])
async def list_attendees(
    event_id: str,
    service: EventServiceDep,
    user: BookerUser,
    verified: bool | None = Query(default=None),
    search: str | None = Query(default=None, max_length=255),
) -> list[AttendeeResponse]:
    try:
        attendees = await service.list_attendees(user.uid, event_id, verified=verified, search=search)
    except EventNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return [AttendeeResponse.model_validate(attendee) for attendee in attendees]


@router.get("/{event_id}/attendees/{ticket_id}", response_model=TicketViewResponse)
async def preview_ticket(
    event_id: str,
    ticket_id: str,
    service: VerificationServiceDep,
    user: BookerUser,
) -> TicketViewResponse:
    try:
        ticket = await service.preview_ticket(organizer_uid=user.uid, event_id=event_id, ticket_id=ticket_id)
    except AttendeeNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except VerificationRequestError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return TicketViewResponse.model_validate(ticket)
