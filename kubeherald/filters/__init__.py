"""Event filter engine for kubeherald.

Exports:
    Filter               -- Abstract base for all filters.
    FilterRegistry       -- Ordered, lock-guarded enable/disable registry.
    FilterPipeline       -- Runs enabled filters against an event.
    build_filter_registry -- Factory registering the built-in filters.
"""

from __future__ import annotations

from kubeherald.filters.base import Filter, FilterInfo, FilterNotFoundError, FilterRegistry
from kubeherald.filters.image_tag_checker import ImageTagChecker
from kubeherald.filters.pipeline import FilterPipeline
from kubeherald.filters.pod_label_checker import PodLabelChecker

__all__ = [
    "Filter",
    "FilterInfo",
    "FilterNotFoundError",
    "FilterPipeline",
    "FilterRegistry",
    "ImageTagChecker",
    "PodLabelChecker",
    "build_filter_registry",
]


def build_filter_registry() -> FilterRegistry:
    """Return a registry with every built-in filter registered and enabled."""
    registry = FilterRegistry()
    registry.register(ImageTagChecker())
    registry.register(PodLabelChecker())
    return registry
