"""REST routes: health, chat command relay and event intake."""

from __future__ import annotations

from fastapi import APIRouter, Request

from kubeherald import __version__
from kubeherald.api.schemas import (
    CommandRequest,
    CommandResponse,
    EventRequest,
    EventResponse,
    HealthResponse,
)
from kubeherald.models.events import Event

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health(request: Request) -> HealthResponse:
    state = request.app.state
    return HealthResponse(
        status="ok",
        version=__version__,
        cluster=state.cluster_name,
        notifications_enabled=state.notifier_state.enabled,
    )


@router.post("/commands", response_model=CommandResponse)
async def run_command(body: CommandRequest, request: Request) -> CommandResponse:
    executor = request.app.state.executor
    ctx = executor.context(channel=body.channel)
    response = await executor.execute(body.message, ctx)
    return CommandResponse(response=response)


@router.post("/events", response_model=EventResponse)
async def ingest_event(body: EventRequest, request: Request) -> EventResponse:
    state = request.app.state
    event = Event(cluster=state.cluster_name, **body.event.model_dump())
    await state.event_handler.handle(body.object, event)
    return EventResponse(**event.to_dict())
