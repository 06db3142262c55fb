"""Filter base class and the thread-safe filter registry."""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass

from kubeherald.models.events import Event
from kubeherald.models.resources import ResourceView
from kubeherald.observability.logging import get_logger

_logger = get_logger("filters.registry")


class FilterNotFoundError(KeyError):
    """Raised when a filter id is not present in the registry."""

    def __init__(self, filter_id: str) -> None:
        super().__init__(filter_id)
        self.filter_id = filter_id

    def __str__(self) -> str:
        return f"Filter '{self.filter_id}' not found"


class Filter(ABC):
    """Base class for event filters.

    Subclasses set ``filter_id`` and ``description`` and implement ``run``.
    ``run`` must treat the resource view as read-only, only append to the
    event's advisory fields, and return quickly without external calls.
    """

    filter_id: str = ""
    description: str = ""

    @abstractmethod
    def run(self, resource: ResourceView, event: Event) -> None:
        """Inspect *resource* and append advisory text to *event*."""

    def describe(self) -> str:
        return self.description


@dataclass(frozen=True)
class FilterInfo:
    """One row of the filter listing."""

    filter_id: str
    enabled: bool
    description: str


class FilterRegistry:
    """Insertion-ordered collection of filters with per-filter enabled flags.

    Owned by the application for the lifetime of the process and shared
    between the event pipeline and the chat command handlers.  Every read
    and write goes through a single lock.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: dict[str, tuple[Filter, bool]] = {}

    def register(self, flt: Filter) -> None:
        """Add *flt* enabled, replacing any filter with the same id in place."""
        if not flt.filter_id:
            raise ValueError(f"{type(flt).__name__} has no filter_id")
        with self._lock:
            replaced = flt.filter_id in self._entries
            self._entries[flt.filter_id] = (flt, True)
        _logger.debug("filter_registered", filter_id=flt.filter_id, replaced=replaced)

    def set_enabled(self, filter_id: str, enabled: bool) -> None:
        """Enable or disable a filter by id.

        Raises:
            FilterNotFoundError: if no filter is registered under *filter_id*.
        """
        with self._lock:
            entry = self._entries.get(filter_id)
            if entry is None:
                raise FilterNotFoundError(filter_id)
            self._entries[filter_id] = (entry[0], enabled)
        _logger.info("filter_toggled", filter_id=filter_id, enabled=enabled)

    def is_enabled(self, filter_id: str) -> bool:
        with self._lock:
            entry = self._entries.get(filter_id)
            if entry is None:
                raise FilterNotFoundError(filter_id)
            return entry[1]

    def list_filters(self) -> tuple[FilterInfo, ...]:
        """Return every filter with its state, sorted by filter id."""
        with self._lock:
            rows = [FilterInfo(fid, enabled, flt.describe()) for fid, (flt, enabled) in self._entries.items()]
        return tuple(sorted(rows, key=lambda r: r.filter_id))

    def enabled_filters(self) -> list[Filter]:
        """Snapshot of enabled filters in registration order."""
        with self._lock:
            return [flt for flt, enabled in self._entries.values() if enabled]

    def names(self) -> list[str]:
        with self._lock:
            return sorted(self._entries)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, filter_id: object) -> bool:
        with self._lock:
            return filter_id in self._entries
