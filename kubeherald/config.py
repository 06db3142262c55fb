"""Configuration loading from a YAML document and environment variables.

The document lives at ``$KUBEHERALD_CONFIG_PATH/config.yaml``.  Any
``KUBEHERALD_*`` environment variable set on top of it wins.
"""

from __future__ import annotations

import copy
import dataclasses
import os
from pathlib import Path
from typing import Any

import yaml

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

CONFIG_FILE_NAME = "config.yaml"


class ConfigError(ValueError):
    """Raised when the configuration document or an override is invalid."""


def _env(key: str, default: str | None = None) -> str | None:
    return os.environ.get(f"KUBEHERALD_{key}", default)


def _env_bool(key: str, default: bool) -> bool:
    val = _env(key)
    if val is None:
        return default
    return val.lower() in ("true", "1", "yes")


def _env_int(key: str, default: int, min_val: int | None = None, max_val: int | None = None) -> int:
    raw = _env(key)
    if raw is None:
        val = default
    else:
        try:
            val = int(raw)
        except ValueError as exc:
            raise ConfigError(f"KUBEHERALD_{key} must be an integer, got {raw!r}") from exc
    if min_val is not None:
        val = max(val, min_val)
    if max_val is not None:
        val = min(val, max_val)
    return val


def _validate_log_level(value: str) -> str:
    valid = {"debug", "info", "warning", "error"}
    if value.lower() not in valid:
        raise ConfigError(f"Invalid log level: {value}. Must be one of {valid}")
    return value.lower()


def config_file_path() -> Path:
    """Return the path of the configuration document."""
    return Path(_env("CONFIG_PATH", "") or ".") / CONFIG_FILE_NAME


def _section(doc: dict[str, Any], key: str) -> dict[str, Any]:
    value = doc.get(key) or {}
    if not isinstance(value, dict):
        raise ConfigError(f"Config section '{key}' must be a mapping")
    return value


def _build(cls: type, values: dict[str, Any]) -> Any:
    """Instantiate a flat config dataclass, ignoring unknown keys."""
    known = {f.name for f in dataclasses.fields(cls)}
    return cls(**{k: v for k, v in values.items() if k in known})


def parse_config(doc: dict[str, Any] | None) -> HeraldConfig:
    """Build a HeraldConfig from a parsed YAML document."""
    doc = doc or {}
    if not isinstance(doc, dict):
        raise ConfigError("Config document must be a mapping")
    comms = _section(doc, "communications")
    return HeraldConfig(
        communications=CommunicationsConfig(
            slack=_build(SlackConfig, _section(comms, "slack")),
            elasticsearch=_build(ElasticsearchConfig, _section(comms, "elasticsearch")),
            webhook=_build(WebhookConfig, _section(comms, "webhook")),
        ),
        settings=_build(SettingsConfig, _section(doc, "settings")),
        api=_build(APIConfig, _section(doc, "api")),
        log=_build(LogConfig, _section(doc, "log")),
    )


def load_config(path: Path | None = None) -> HeraldConfig:
    """Load the configuration document, then apply KUBEHERALD_* overrides."""
    path = path or config_file_path()
    doc: dict[str, Any] = {}
    if path.exists():
        try:
            doc = yaml.safe_load(path.read_text()) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Cannot parse {path}: {exc}") from exc
    cfg = parse_config(doc)

    settings = cfg.settings
    settings.cluster_name = _env("CLUSTER_NAME", settings.cluster_name) or ""
    settings.allow_kubectl = _env_bool("ALLOW_KUBECTL", settings.allow_kubectl)
    settings.kubectl_binary = _env("KUBECTL_BINARY", settings.kubectl_binary) or settings.kubectl_binary
    settings.kubectl_timeout_seconds = _env_int(
        "KUBECTL_TIMEOUT", settings.kubectl_timeout_seconds, min_val=1, max_val=300
    )
    settings.default_namespace = _env("DEFAULT_NAMESPACE", settings.default_namespace) or "default"

    comms = cfg.communications
    comms.slack.token = _env("SLACK_TOKEN", comms.slack.token) or ""
    comms.elasticsearch.password = _env("ELASTICSEARCH_PASSWORD", comms.elasticsearch.password) or ""
    webhook_url = _env("WEBHOOK_URL")
    if webhook_url:
        comms.webhook.url = webhook_url
        comms.webhook.enabled = True

    cfg.api.port = _env_int("API_PORT", cfg.api.port, min_val=1024, max_val=65535)
    cfg.log.level = _validate_log_level(_env("LOG_LEVEL", cfg.log.level) or "info")
    return cfg


def _redact(obj: Any) -> None:
    for f in dataclasses.fields(obj):
        value = getattr(obj, f.name)
        if f.metadata.get("sensitive"):
            setattr(obj, f.name, type(value)())
        elif dataclasses.is_dataclass(value):
            _redact(value)


def redact_config(cfg: HeraldConfig) -> HeraldConfig:
    """Return a deep copy of *cfg* with every sensitive field zeroed.

    Fields are zeroed unconditionally, including ones that are already empty.
    """
    redacted = copy.deepcopy(cfg)
    _redact(redacted)
    return redacted


def dump_config(cfg: HeraldConfig) -> str:
    """Render *cfg* as a YAML document."""
    return yaml.safe_dump(dataclasses.asdict(cfg), sort_keys=False, default_flow_style=False)
