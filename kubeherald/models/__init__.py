"""Core data structures for kubeherald."""

from kubeherald.models.config import (
    APIConfig,
    CommunicationsConfig,
    ElasticsearchConfig,
    HeraldConfig,
    LogConfig,
    SettingsConfig,
    SlackConfig,
    WebhookConfig,
)
from kubeherald.models.events import Event, EventType, Level
from kubeherald.models.resources import (
    ContainerView,
    GenericResourceView,
    PodView,
    ResourceView,
    build_resource_view,
)

__all__ = [
    "APIConfig",
    "CommunicationsConfig",
    "ContainerView",
    "ElasticsearchConfig",
    "Event",
    "EventType",
    "GenericResourceView",
    "HeraldConfig",
    "Level",
    "LogConfig",
    "PodView",
    "ResourceView",
    "SettingsConfig",
    "SlackConfig",
    "WebhookConfig",
    "build_resource_view",
]
