"""Recommend labelling Pods at creation time."""

from __future__ import annotations

from kubeherald.filters.base import Filter
from kubeherald.models.events import Event, EventType
from kubeherald.models.resources import PodView, ResourceView


class PodLabelChecker(Filter):
    """Adds a recommendation when a Pod is created without labels."""

    filter_id = "pod_label_checker"
    description = "Checks and adds recommendations if labels are missing in the pod specs."

    def run(self, resource: ResourceView, event: Event) -> None:
        if event.kind != "Pod" or event.type != EventType.CREATE:
            return
        if isinstance(resource, PodView) and not resource.labels:
            event.add_recommendation(f"pod '{resource.name}' creation without labels should be avoided.")
