"""Generic JSON webhook notifier.

Every POST body is an envelope tagged with its payload type::

    {"type": "event",   "cluster": "prod", "event": {...Event.to_dict()...}}
    {"type": "message", "cluster": "prod", "text": "..."}

Rendering for chat backends is left to whatever sits behind the webhook.
An event with a non-empty ``channel`` carries it inside ``event`` so the
receiver can redirect delivery.
"""

from __future__ import annotations

import httpx
import structlog

from kubeherald.models.events import Event
from kubeherald.notifications.manager import Notifier

_log = structlog.get_logger(component="notifications.webhook")

_BODY_PREVIEW_CHARS = 200


class WebhookNotifier(Notifier):
    """Delivers events and messages by POSTing JSON envelopes to a URL.

    Args:
        url:          Full endpoint URL.
        cluster_name: Local cluster identity stamped on every envelope.
        headers:      Optional extra headers (e.g. Authorization).
        timeout:      HTTP request timeout in seconds. Defaults to 10.
    """

    def __init__(
        self,
        url: str,
        cluster_name: str = "",
        headers: dict[str, str] | None = None,
        timeout: float = 10.0,
    ) -> None:
        if not url:
            raise ValueError("Webhook url must not be empty")
        self._url = url
        self._cluster = cluster_name
        self._headers = headers or {}
        self._timeout = timeout

    @property
    def name(self) -> str:
        return "webhook"

    async def send_event(self, event: Event) -> bool:
        envelope = {"type": "event", "cluster": event.cluster or self._cluster, "event": event.to_dict()}
        return await self._deliver(envelope, kind=event.kind, resource=event.name)

    async def send_message(self, text: str) -> bool:
        return await self._deliver({"type": "message", "cluster": self._cluster, "text": text})

    async def _deliver(self, envelope: dict[str, object], **log_ctx: str) -> bool:
        log = _log.bind(payload_type=envelope["type"], **log_ctx)
        try:
            async with httpx.AsyncClient(timeout=self._timeout, headers=self._headers) as client:
                response = await client.post(self._url, json=envelope)
        except httpx.TimeoutException:
            log.warning("webhook_request_timeout", timeout=self._timeout)
            return False
        except httpx.HTTPError as exc:
            log.warning("webhook_http_error", error=str(exc))
            return False

        if not response.is_success:
            log.warning(
                "webhook_rejected",
                status_code=response.status_code,
                body=response.text[:_BODY_PREVIEW_CHARS],
            )
            return False
        return True
