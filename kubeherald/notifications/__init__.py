"""Notification delivery for kubeherald.

Exports:
    Notifier               -- Abstract base for all notifiers.
    NotificationDispatcher -- Fans events and messages out to every notifier.
    WebhookNotifier        -- Generic JSON POST notifier.
    build_dispatcher       -- Factory used by the application bootstrap.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from kubeherald.notifications.manager import NotificationDispatcher, Notifier
from kubeherald.notifications.webhook import WebhookNotifier

if TYPE_CHECKING:
    from kubeherald.models.config import CommunicationsConfig

_log = structlog.get_logger(component="notifications")

__all__ = [
    "NotificationDispatcher",
    "Notifier",
    "WebhookNotifier",
    "build_dispatcher",
]


def build_dispatcher(config: CommunicationsConfig, cluster_name: str = "") -> NotificationDispatcher:
    """Build a NotificationDispatcher from the communications config.

    Only the webhook backend is delivered by kubeherald itself; chat backends
    subscribe through their own bridge behind a webhook.
    """
    notifiers: list[Notifier] = []

    webhook = config.webhook
    if webhook.enabled:
        try:
            notifiers.append(WebhookNotifier(url=webhook.url, cluster_name=cluster_name))
            _log.info("webhook_notifier_enabled")
        except ValueError as exc:
            _log.warning("webhook_notifier_disabled", reason=str(exc))

    if not notifiers:
        _log.info("no_notifiers_configured")

    return NotificationDispatcher(notifiers=notifiers)
