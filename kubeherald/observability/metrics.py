"""Prometheus counters exported by kubeherald.

All counters live in the default registry so the REST app can expose them
without extra wiring.
"""

from __future__ import annotations

from prometheus_client import Counter

filter_runs_total = Counter(
    "kubeherald_filter_runs_total",
    "Filter invocations by the event pipeline.",
    ["filter_id"],
)

filter_errors_total = Counter(
    "kubeherald_filter_errors_total",
    "Filter invocations that raised and were skipped.",
    ["filter_id"],
)

commands_total = Counter(
    "kubeherald_commands_total",
    "Chat commands handled, by command kind and outcome.",
    ["kind", "outcome"],
)

notifications_total = Counter(
    "kubeherald_notifications_total",
    "Notification deliveries, by notifier and success.",
    ["notifier", "success"],
)
