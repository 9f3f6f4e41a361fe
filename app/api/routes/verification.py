from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException

from app.dependencies.services import BookerUser, get_verification_service
from app.verification.service import TicketVerificationService, VerificationRequestError

from .schemas import VerificationRequest, VerificationResponse

router = APIRouter(prefix="/events", tags=["verification"])

VerificationServiceDep = Annotated[TicketVerificationService, Depends(get_verification_service)]


@router.post("/{event_id}/verifications", response_model=VerificationResponse)
async def verify_ticket(
    event_id: str,
    payload: VerificationRequest,
    service: VerificationServiceDep,
    user: BookerUser,
) -> VerificationResponse:
    """Verify a scanned or typed ticket for one of the booker's events.

    Every protocol outcome, including not-found and store failures, is a 200
    response; the ``outcome`` field tells them apart.
    """

    try:
        result = await service.verify_ticket(
            organizer_uid=user.uid,
            event_id=event_id,
            ticket_id=payload.ticket_id,
            actor_uid=user.uid,
        )
    except VerificationRequestError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return VerificationResponse.model_validate(result)
