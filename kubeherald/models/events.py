"""Core event data structures and enumerations."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum


class EventType(StrEnum):
    """Lifecycle or status type of a Kubernetes event."""

    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"
    NORMAL = "normal"


class Level(StrEnum):
    """Notification severity level."""

    INFO = "info"
    WARN = "warn"
    DEBUG = "debug"
    ERROR = "error"
    CRITICAL = "critical"


_LIFECYCLE_TYPES = frozenset({EventType.CREATE, EventType.UPDATE, EventType.DELETE})

_DEFAULT_LEVEL: dict[EventType, Level] = {
    EventType.ERROR: Level.ERROR,
    EventType.WARNING: Level.WARN,
}


@dataclass
class Event:
    """A cluster resource occurrence on its way to the notifiers.

    Produced by the watch layer, enriched by the filter pipeline.  The
    advisory fields (``recommendations`` and ``warnings``) are append-only:
    filters extend them through ``add_recommendation`` / ``add_warning`` and
    never remove or reorder existing entries.
    """

    kind: str
    type: EventType
    name: str
    namespace: str = ""
    cluster: str = ""
    channel: str = ""  # non-empty redirects delivery to another channel
    title: str = ""
    reason: str = ""
    action: str = ""
    messages: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    timestamp: datetime = field(default_factory=lambda: datetime.now(tz=UTC))
    level: Level | None = None

    def __post_init__(self) -> None:
        self.type = EventType(self.type)
        if self.level is None:
            self.level = _DEFAULT_LEVEL.get(self.type, Level.INFO)
        else:
            self.level = Level(self.level)
        if not self.title:
            if self.type in _LIFECYCLE_TYPES:
                self.title = f"{self.kind} {self.type.value}d"
            else:
                self.title = f"{self.kind} {self.type.value}"

    def add_recommendation(self, text: str) -> None:
        self.recommendations.append(text)

    def add_warning(self, text: str) -> None:
        self.warnings.append(text)

    def to_dict(self) -> dict[str, object]:
        """Serialise to a plain dict for JSON encoding."""
        return {
            "kind": self.kind,
            "type": self.type.value,
            "name": self.name,
            "namespace": self.namespace,
            "cluster": self.cluster,
            "channel": self.channel,
            "title": self.title,
            "reason": self.reason,
            "action": self.action,
            "messages": list(self.messages),
            "recommendations": list(self.recommendations),
            "warnings": list(self.warnings),
            "timestamp": self.timestamp.isoformat(),
            "level": self.level.value if self.level is not None else None,
        }
