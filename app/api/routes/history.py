from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from app.dependencies.services import AttendeeUser, get_verification_service
from app.verification.service import TicketVerificationService

from .schemas import TicketHistoryResponse

router = APIRouter(prefix="/ticket-history", tags=["ticket-history"])


@router.get("", response_model=list[TicketHistoryResponse])
async def list_my_tickets(
    service: Annotated[TicketVerificationService, Depends(get_verification_service)],
    user: AttendeeUser,
) -> list[TicketHistoryResponse]:
    records = await service.list_ticket_history(user.uid)
    return [TicketHistoryResponse.model_validate(record) for record in records]
