from __future__ import annotations

from datetime import timedelta
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from turnqueue.dependencies.tickets import get_turn_service
from turnqueue.tickets.errors import TurnNotFoundError, TurnStateError, TurnValidationError
from turnqueue.tickets.models import Ticket
from turnqueue.tickets.service import Err, Outcome, TurnService
from turnqueue.tickets.state import Priority, TicketStatus

router = APIRouter(prefix="/turns", tags=["turns"])

_STATUS_BY_CODE: dict[str, int] = {
    TurnValidationError.code: status.HTTP_400_BAD_REQUEST,
    TurnNotFoundError.code: status.HTTP_404_NOT_FOUND,
    TurnStateError.code: status.HTTP_409_CONFLICT,
}
MAX_AGE_MILLIS = timedelta.max // timedelta(milliseconds=1)


class TurnRequestError(Exception):
    """Refused queue operation, rendered with the response envelope."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message


async def turn_error_handler(request: Request, exc: TurnRequestError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"success": False, "message": exc.message})


class TurnCreateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    # Type checks happen in the engine so every bad registration is a 400.
    customer_name: Any = Field(default=None, alias="customerName")
    priority: Any = Field(default=None)


class TurnPruneRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    max_age_millis: int = Field(..., alias="maxAgeMillis", ge=0, le=MAX_AGE_MILLIS)


class TicketPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    customer_name: str = Field(alias="customerName")
    priority: Priority
    status: TicketStatus
    timestamp: int


class TicketEnvelope(BaseModel):
    success: bool = True
    message: str | None = None
    data: TicketPayload | None = None


class TicketListEnvelope(BaseModel):
    success: bool = True
    data: list[TicketPayload]
    count: int


class PruneResponse(BaseModel):
    success: bool = True
    removed: int


TurnServiceDep = Annotated[TurnService, Depends(get_turn_service)]


def _to_payload(ticket: Ticket) -> TicketPayload:
    return TicketPayload.model_validate(ticket.to_wire())


def _to_list(tickets: list[Ticket]) -> TicketListEnvelope:
    return TicketListEnvelope(data=[_to_payload(ticket) for ticket in tickets], count=len(tickets))


def _unwrap(outcome: Outcome[Ticket]) -> Ticket:
    if isinstance(outcome, Err):
        raise TurnRequestError(_STATUS_BY_CODE.get(outcome.code, status.HTTP_400_BAD_REQUEST), outcome.message)
    return outcome.value


@router.post("", response_model=TicketEnvelope, status_code=status.HTTP_201_CREATED)
async def register_turn(payload: TurnCreateRequest, service: TurnServiceDep) -> TicketEnvelope:
    priority = payload.priority if payload.priority is not None else Priority.NORMAL
    ticket = _unwrap(service.register(payload.customer_name, priority))
    return TicketEnvelope(message=f"Turn #{ticket.id} registered", data=_to_payload(ticket))


@router.get("", response_model=TicketListEnvelope)
async def list_pending_turns(service: TurnServiceDep) -> TicketListEnvelope:
    return _to_list(service.list_pending())


@router.get("/next", response_model=TicketEnvelope)
async def get_next_turn(service: TurnServiceDep) -> TicketEnvelope:
    ticket = service.peek_next()
    if ticket is None:
        return TicketEnvelope(message="No pending turns", data=None)
    return TicketEnvelope(data=_to_payload(ticket))


@router.get("/all", response_model=TicketListEnvelope)
async def list_all_turns(service: TurnServiceDep) -> TicketListEnvelope:
    return _to_list(service.list_all())


@router.put("/attend", response_model=TicketEnvelope)
async def attend_next_turn(service: TurnServiceDep) -> TicketEnvelope:
    ticket = _unwrap(service.attend_next())
    return TicketEnvelope(message=f"Turn #{ticket.id} attended", data=_to_payload(ticket))


@router.post("/prune", response_model=PruneResponse)
async def prune_turns(payload: TurnPruneRequest, service: TurnServiceDep) -> PruneResponse:
    return PruneResponse(removed=service.prune(payload.max_age_millis))


@router.get("/{ticket_id}", response_model=TicketEnvelope)
async def get_turn(ticket_id: int, service: TurnServiceDep) -> TicketEnvelope:
    ticket = _unwrap(service.get(ticket_id))
    return TicketEnvelope(data=_to_payload(ticket))


@router.delete("/{ticket_id}", response_model=TicketEnvelope)
async def cancel_turn(ticket_id: int, service: TurnServiceDep) -> TicketEnvelope:
    ticket = _unwrap(service.cancel(ticket_id))
    return TicketEnvelope(message=f"Turn #{ticket.id} cancelled", data=_to_payload(ticket))
