from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from turnqueue.dependencies.tickets import get_turn_service
from turnqueue.metrics import PrometheusExporter
from turnqueue.tickets.service import TurnService

router = APIRouter(tags=["metrics"])


@router.get("/metrics", response_class=PlainTextResponse, summary="Prometheus metrics")
async def metrics(service: Annotated[TurnService, Depends(get_turn_service)]) -> str:
    return PrometheusExporter(service.metrics).build_payload()
