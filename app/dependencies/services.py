from __future__ import annotations

from typing import Annotated

from fastapi import Depends, HTTPException, Request

from app.dependencies.auth import Role, User, role_required
from app.events.service import EventService
from app.services.postgres import PostgresConnectionTester
from app.verification.service import TicketVerificationService

require_admin = role_required(Role.ADMIN)
require_booker = role_required(Role.BOOKER)
require_attendee = role_required(Role.ATTENDEE)

AdminUser = Annotated[User, Depends(require_admin)]
BookerUser = Annotated[User, Depends(require_booker)]
AttendeeUser = Annotated[User, Depends(require_attendee)]


def _from_state(request: Request, name: str, label: str):
    service = getattr(request.app.state, name, None)
    if service is None:
        raise HTTPException(status_code=503, detail=f"{label} is not configured")
    return service


async def get_verification_service(request: Request) -> TicketVerificationService:
    return _from_state(request, "verification_service", "Ticket verification service")


async def get_event_service(request: Request) -> EventService:
    return _from_state(request, "event_service", "Event service")


async def get_postgres_tester(request: Request) -> PostgresConnectionTester:
    return _from_state(request, "postgres_tester", "Database connection")
