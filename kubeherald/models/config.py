"""Configuration data structures.

Credential fields carry ``metadata={"sensitive": True}``; the show-config
handler relies on that marker to redact them.
"""

from __future__ import annotations

from dataclasses import dataclass, field

_SENSITIVE = {"sensitive": True}


@dataclass
class SlackConfig:
    """Slack chat backend configuration."""

    enabled: bool = False
    channel: str = ""
    token: str = field(default="", metadata=_SENSITIVE)
    notif_type: str = "short"


@dataclass
class ElasticsearchConfig:
    """Search backend configuration."""

    enabled: bool = False
    server: str = ""
    username: str = ""
    password: str = field(default="", metadata=_SENSITIVE)
    index: str = "kubeherald"


@dataclass
class WebhookConfig:
    """Generic JSON webhook sink."""

    enabled: bool = False
    url: str = ""


@dataclass
class CommunicationsConfig:
    """Notification backends."""

    slack: SlackConfig = field(default_factory=SlackConfig)
    elasticsearch: ElasticsearchConfig = field(default_factory=ElasticsearchConfig)
    webhook: WebhookConfig = field(default_factory=WebhookConfig)


@dataclass
class SettingsConfig:
    """Cluster identity and command passthrough settings."""

    cluster_name: str = ""
    allow_kubectl: bool = False
    kubectl_binary: str = "/usr/local/bin/kubectl"
    kubectl_timeout_seconds: int = 30
    default_namespace: str = "default"


@dataclass
class APIConfig:
    """REST API configuration."""

    port: int = 8080


@dataclass
class LogConfig:
    """Logging configuration."""

    level: str = "info"


@dataclass
class HeraldConfig:
    """Top-level kubeherald configuration."""

    communications: CommunicationsConfig = field(default_factory=CommunicationsConfig)
    settings: SettingsConfig = field(default_factory=SettingsConfig)
    api: APIConfig = field(default_factory=APIConfig)
    log: LogConfig = field(default_factory=LogConfig)
