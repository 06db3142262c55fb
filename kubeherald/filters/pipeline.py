"""Event filter pipeline.

Runs every enabled filter, in registration order, against the resource view
selected for the event's kind.  A filter that raises is logged and skipped;
the remaining filters still run against the event as enriched so far.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from kubeherald.filters.base import FilterRegistry
from kubeherald.models.events import Event
from kubeherald.models.resources import ResourceView, build_resource_view
from kubeherald.observability.logging import get_logger
from kubeherald.observability.metrics import filter_errors_total, filter_runs_total

_logger = get_logger("filters.pipeline")


class FilterPipeline:
    """Applies the registry's enabled filters to events."""

    def __init__(self, registry: FilterRegistry) -> None:
        self._registry = registry

    @property
    def registry(self) -> FilterRegistry:
        return self._registry

    def run(self, obj: Mapping[str, Any] | ResourceView | None, event: Event) -> Event:
        """Enrich *event* in place from *obj* and return it."""
        resource = build_resource_view(event.kind, obj)
        # The lock is held only for the snapshot, not while filters run.
        filters = self._registry.enabled_filters()

        for flt in filters:
            filter_runs_total.labels(filter_id=flt.filter_id).inc()
            try:
                flt.run(resource, event)
            except Exception as exc:
                filter_errors_total.labels(filter_id=flt.filter_id).inc()
                _logger.error(
                    "filter_failed",
                    filter_id=flt.filter_id,
                    kind=event.kind,
                    name=event.name,
                    namespace=event.namespace,
                    error=str(exc),
                )

        _logger.debug(
            "pipeline_complete",
            kind=event.kind,
            name=event.name,
            filters_run=len(filters),
            recommendations=len(event.recommendations),
            warnings=len(event.warnings),
        )
        return event
