"""Event handling entry point used by the watch layer.

raw object + event -> FilterPipeline -> NotificationDispatcher, gated by
the shared NotifierState.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from kubeherald.execute.handlers import NotifierState
from kubeherald.filters.pipeline import FilterPipeline
from kubeherald.models.events import Event
from kubeherald.models.resources import ResourceView
from kubeherald.notifications.manager import NotificationDispatcher
from kubeherald.observability.logging import get_logger

_logger = get_logger("controller")


class EventHandler:
    """Enriches events and hands them to the notifiers."""

    def __init__(
        self,
        pipeline: FilterPipeline,
        dispatcher: NotificationDispatcher,
        notifier_state: NotifierState,
    ) -> None:
        self._pipeline = pipeline
        self._dispatcher = dispatcher
        self._state = notifier_state

    async def handle(self, obj: Mapping[str, Any] | ResourceView | None, event: Event) -> Event:
        """Run the filter pipeline on *event* and dispatch it if notifications are on."""
        self._pipeline.run(obj, event)
        if not self._state.enabled:
            _logger.debug("notification_suppressed", kind=event.kind, name=event.name)
            return event
        await self._dispatcher.send_event(event)
        return event
