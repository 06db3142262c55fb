"""Recommend against untagged and ``:latest`` container images on new Pods."""

from __future__ import annotations

from kubeherald.filters.base import Filter
from kubeherald.models.events import Event, EventType
from kubeherald.models.resources import ContainerView, PodView, ResourceView
from kubeherald.observability.logging import get_logger

_logger = get_logger("filter.image_tag_checker")


def image_tag(image: str) -> str | None:
    """Return the tag of an image reference, or None when it has no tag.

    A digest-pinned reference (``name@sha256:...``) returns the digest.  A
    registry port (``registry:5000/nginx``) is not mistaken for a tag.
    """
    name, sep, digest = image.partition("@")
    if sep:
        return digest
    last_segment = name.rsplit("/", 1)[-1]
    if ":" not in last_segment:
        return None
    return last_segment.rsplit(":", 1)[1]


def uses_latest_tag(image: str) -> bool:
    tag = image_tag(image)
    return tag is None or tag == "" or tag == "latest"


class ImageTagChecker(Filter):
    """Adds a recommendation for each container image using the latest tag."""

    filter_id = "image_tag_checker"
    description = "Checks and adds recommendation if 'latest' image tag is used for container image."

    def run(self, resource: ResourceView, event: Event) -> None:
        if event.kind != "Pod" or event.type != EventType.CREATE:
            return
        if not isinstance(resource, PodView):
            return

        self._check(resource.init_containers, "initContainer", event)
        self._check(resource.containers, "Container", event)
        _logger.debug("image_tag_check_done", pod=resource.name, namespace=resource.namespace)

    @staticmethod
    def _check(containers: tuple[ContainerView, ...], label: str, event: Event) -> None:
        for c in containers:
            if uses_latest_tag(c.image):
                event.add_recommendation(
                    f":latest tag used in image '{c.image}' of {label} '{c.name}' should be avoided."
                )
