from __future__ import annotations

from fastapi import HTTPException, Request

from turnqueue.tickets.service import TurnService


async def get_turn_service(request: Request) -> TurnService:
    service = getattr(request.app.state, "turn_service", None)
    if service is None:
        raise HTTPException(status_code=503, detail="Turn service is not configured")
    return service
