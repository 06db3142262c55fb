"""Typed read-only views over raw Kubernetes objects.

Filters never inspect the raw watch payload directly.  The pipeline selects
a view from the event's kind at entry, so each filter only has to check for
the view type it understands.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any


@dataclass(frozen=True)
class ContainerView:
    """Name and image reference of a single container."""

    name: str
    image: str


@dataclass(frozen=True)
class PodView:
    """Fields of a Pod that filters are allowed to read."""

    name: str
    namespace: str
    labels: Mapping[str, str] = field(default_factory=dict)
    annotations: Mapping[str, str] = field(default_factory=dict)
    init_containers: tuple[ContainerView, ...] = ()
    containers: tuple[ContainerView, ...] = ()
    kind: str = "Pod"

    def __post_init__(self) -> None:
        object.__setattr__(self, "labels", _read_only(self.labels))
        object.__setattr__(self, "annotations", _read_only(self.annotations))


@dataclass(frozen=True)
class GenericResourceView:
    """Fallback view for every kind without a dedicated view."""

    kind: str
    name: str
    namespace: str
    labels: Mapping[str, str] = field(default_factory=dict)
    annotations: Mapping[str, str] = field(default_factory=dict)
    raw: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "labels", _read_only(self.labels))
        object.__setattr__(self, "annotations", _read_only(self.annotations))
        # Nested objects are copied too; the caller's payload is never shared.
        object.__setattr__(self, "raw", MappingProxyType(copy.deepcopy(dict(self.raw))))


ResourceView = PodView | GenericResourceView


def _read_only(value: Mapping[str, str]) -> Mapping[str, str]:
    return MappingProxyType(dict(value))


def _mapping(value: object) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def _str_dict(value: object) -> dict[str, str]:
    return {str(k): str(v) for k, v in _mapping(value).items()}


def _containers(items: object) -> tuple[ContainerView, ...]:
    if not isinstance(items, list):
        return ()
    return tuple(
        ContainerView(name=str(c.get("name", "")), image=str(c.get("image", "")))
        for c in items
        if isinstance(c, Mapping)
    )


def build_resource_view(kind: str, obj: Mapping[str, Any] | ResourceView | None) -> ResourceView:
    """Select the view for *kind* and populate it from a raw object mapping.

    Already-built views are returned unchanged.  Missing keys produce empty
    fields instead of raising.
    """
    if isinstance(obj, (PodView, GenericResourceView)):
        return obj

    raw = _mapping(obj)
    metadata = _mapping(raw.get("metadata"))
    name = str(metadata.get("name", ""))
    namespace = str(metadata.get("namespace", ""))
    labels = _str_dict(metadata.get("labels"))
    annotations = _str_dict(metadata.get("annotations"))

    if kind == "Pod":
        spec = _mapping(raw.get("spec"))
        return PodView(
            name=name,
            namespace=namespace,
            labels=labels,
            annotations=annotations,
            init_containers=_containers(spec.get("initContainers")),
            containers=_containers(spec.get("containers")),
        )

    return GenericResourceView(
        kind=kind,
        name=name,
        namespace=namespace,
        labels=labels,
        annotations=annotations,
        raw=raw,
    )
