"""Request and response bodies for the REST intake."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from kubeherald.models.events import EventType, Level


class ErrorResponse(BaseModel):
    error: str
    detail: str


class HealthResponse(BaseModel):
    status: str
    version: str
    cluster: str
    notifications_enabled: bool


class CommandRequest(BaseModel):
    """A chat message relayed by a chat bridge."""

    message: str = Field(max_length=4096)
    channel: str = Field(default="", max_length=256)


class CommandResponse(BaseModel):
    response: str


class EventBody(BaseModel):
    kind: str = Field(min_length=1, max_length=128)
    type: EventType
    name: str = Field(min_length=1, max_length=253)
    namespace: str = Field(default="", max_length=253)
    channel: str = ""
    title: str = ""
    reason: str = ""
    action: str = ""
    messages: list[str] = Field(default_factory=list)
    level: Level | None = None


class EventRequest(BaseModel):
    """An event together with the resource object it refers to."""

    event: EventBody
    object: dict[str, Any] = Field(default_factory=dict)


class EventResponse(BaseModel):
    kind: str
    type: str
    name: str
    namespace: str
    cluster: str
    channel: str
    title: str
    reason: str
    action: str
    messages: list[str]
    recommendations: list[str]
    warnings: list[str]
    timestamp: str
    level: str | None
