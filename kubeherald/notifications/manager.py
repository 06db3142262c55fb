"""Notifier contract and fan-out dispatcher.

Notifier             -- ABC every delivery backend implements.
NotificationDispatcher -- Sends an event or message to every registered
                          notifier; a failure in one never blocks the others.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod

import structlog

from kubeherald.models.events import Event
from kubeherald.observability.metrics import notifications_total

_log = structlog.get_logger(component="notifications.manager")


class Notifier(ABC):
    """Abstract base class for notification backends.

    Implementations must not raise; return ``False`` on delivery failure.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Identifier used in metrics and logs."""

    @abstractmethod
    async def send_event(self, event: Event) -> bool:
        """Deliver an enriched event."""

    @abstractmethod
    async def send_message(self, text: str) -> bool:
        """Deliver a plain text message."""


class NotificationDispatcher:
    """Fan-out over every registered notifier.

    ``send_event`` and ``send_message`` return True when at least one
    notifier accepted the delivery.
    """

    def __init__(self, notifiers: list[Notifier]) -> None:
        self._notifiers = notifiers

    @property
    def notifiers(self) -> list[Notifier]:
        return list(self._notifiers)

    async def send_event(self, event: Event) -> bool:
        results = await asyncio.gather(*(self._send_one(n, event) for n in self._notifiers))
        return any(results)

    async def send_message(self, text: str) -> bool:
        results = await asyncio.gather(*(self._send_one(n, text) for n in self._notifiers))
        return any(results)

    async def _send_one(self, notifier: Notifier, payload: Event | str) -> bool:
        try:
            if isinstance(payload, Event):
                success = await notifier.send_event(payload)
            else:
                success = await notifier.send_message(payload)
        except Exception as exc:  # noqa: BLE001
            _log.error("notifier_unexpected_error", notifier=notifier.name, error=str(exc))
            success = False

        notifications_total.labels(notifier=notifier.name, success="true" if success else "false").inc()
        if success:
            _log.debug("notification_sent", notifier=notifier.name)
        else:
            _log.warning("notification_failed", notifier=notifier.name)
        return success
