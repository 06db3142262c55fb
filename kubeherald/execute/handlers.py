"""Handlers for the notifier, filters, ping and version chat commands."""

from __future__ import annotations

import threading
from collections.abc import Callable, Sequence
from enum import StrEnum

from kubeherald.config import dump_config, load_config, redact_config
from kubeherald.execute.kubectl import CLUSTER_FLAG, trim_quotes
from kubeherald.execute.messages import (
    FILTER_DISABLED_MSG,
    FILTER_ENABLED_MSG,
    FILTER_NAME_MISSING_MSG,
    INCOMPLETE_COMMAND_MSG,
    NOTIFIER_START_MSG,
    NOTIFIER_STATUS_OFF_MSG,
    NOTIFIER_STATUS_ON_MSG,
    NOTIFIER_STOP_MSG,
    SHOW_CONFIG_ERROR_MSG,
    SHOW_CONFIG_MSG,
    UNKNOWN_SERVER_VERSION,
    UNSUPPORTED_COMMAND_MSG,
    VERSION_MSG,
)
from kubeherald.execute.parser import ParsedCommand
from kubeherald.execute.runner import ProcessRunner
from kubeherald.filters.base import FilterNotFoundError, FilterRegistry
from kubeherald.models.config import HeraldConfig
from kubeherald.observability.logging import get_logger

_logger = get_logger("execute.handlers")


class NotifierAction(StrEnum):
    START = "start"
    STOP = "stop"
    STATUS = "status"
    SHOW_CONFIG = "showconfig"


class FiltersAction(StrEnum):
    LIST = "list"
    ENABLE = "enable"
    DISABLE = "disable"


class NotifierState:
    """Process-wide "send notifications" switch.

    Created once by the application and injected into both the command
    executor and the event handler.
    """

    def __init__(self, enabled: bool = True) -> None:
        self._lock = threading.Lock()
        self._enabled = enabled

    @property
    def enabled(self) -> bool:
        with self._lock:
            return self._enabled

    def enable(self) -> None:
        with self._lock:
            self._enabled = True

    def disable(self) -> None:
        with self._lock:
            self._enabled = False


class NotifierCommand:
    """``notifier start|stop|status|showconfig``."""

    def __init__(
        self,
        state: NotifierState,
        config_reader: Callable[[], HeraldConfig] = load_config,
    ) -> None:
        self._state = state
        self._config_reader = config_reader

    def handle(self, cmd: ParsedCommand, cluster_name: str) -> str:
        action = cmd.arg(0)
        if not action:
            return INCOMPLETE_COMMAND_MSG

        if action == NotifierAction.START:
            self._state.enable()
            _logger.info("notifier_enabled")
            return NOTIFIER_START_MSG.format(cluster=cluster_name)
        if action == NotifierAction.STOP:
            self._state.disable()
            _logger.info("notifier_disabled")
            return NOTIFIER_STOP_MSG.format(cluster=cluster_name)
        if action == NotifierAction.STATUS:
            msg = NOTIFIER_STATUS_ON_MSG if self._state.enabled else NOTIFIER_STATUS_OFF_MSG
            return msg.format(cluster=cluster_name)
        if action == NotifierAction.SHOW_CONFIG:
            return self._show_config(cluster_name)
        return UNSUPPORTED_COMMAND_MSG

    def _show_config(self, cluster_name: str) -> str:
        try:
            rendered = dump_config(redact_config(self._config_reader()))
        except Exception as exc:
            _logger.error("show_config_failed", error=str(exc))
            return SHOW_CONFIG_ERROR_MSG
        return SHOW_CONFIG_MSG.format(cluster=cluster_name, config=rendered)


def format_filter_table(registry: FilterRegistry) -> str:
    """Render the registry as an aligned FILTER / ENABLED / DESCRIPTION table."""
    rows = [("FILTER", "ENABLED", "DESCRIPTION")]
    rows += [(r.filter_id, str(r.enabled).lower(), r.description) for r in registry.list_filters()]
    id_width = max(len(r[0]) for r in rows) + 1
    state_width = max(len(r[1]) for r in rows) + 1
    return "".join(f"{fid:<{id_width}}{state:<{state_width}}{desc}\n" for fid, state, desc in rows)


class FiltersCommand:
    """``filters list|enable <id>|disable <id>``."""

    def __init__(self, registry: FilterRegistry) -> None:
        self._registry = registry

    def handle(self, cmd: ParsedCommand, cluster_name: str) -> str:
        action = cmd.arg(0)
        if not action:
            return INCOMPLETE_COMMAND_MSG

        if action == FiltersAction.LIST:
            _logger.debug("filters_list")
            return format_filter_table(self._registry)

        if action in (FiltersAction.ENABLE, FiltersAction.DISABLE):
            filter_id = cmd.arg(1)
            if not filter_id:
                return FILTER_NAME_MISSING_MSG.format(filters=format_filter_table(self._registry))
            enable = action == FiltersAction.ENABLE
            try:
                self._registry.set_enabled(filter_id, enable)
            except FilterNotFoundError as exc:
                return str(exc)
            msg = FILTER_ENABLED_MSG if enable else FILTER_DISABLED_MSG
            return msg.format(filter_id=filter_id, cluster=cluster_name)

        return UNSUPPORTED_COMMAND_MSG


def targets_cluster(args: Sequence[str], cluster_name: str) -> bool:
    """Return False if any ``--cluster-name`` in *args* names another cluster."""
    for index, arg in enumerate(args):
        if arg == CLUSTER_FLAG:
            if index == len(args) - 1 or trim_quotes(args[index + 1]) != cluster_name:
                return False
        elif arg.startswith(CLUSTER_FLAG + "="):
            if trim_quotes(arg[len(CLUSTER_FLAG) + 1 :]) != cluster_name:
                return False
    return True


class VersionCommand:
    """``version`` and ``ping``: report Kubernetes server and kubeherald versions."""

    def __init__(self, runner: ProcessRunner, binary: str, herald_version: str) -> None:
        self._runner = runner
        self._binary = binary
        self._herald_version = herald_version

    async def handle(self, cmd: ParsedCommand, cluster_name: str) -> str:
        if not targets_cluster(cmd.args, cluster_name):
            return ""
        return VERSION_MSG.format(server_version=await self._server_version(), version=self._herald_version)

    async def _server_version(self) -> str:
        result = await self._runner.run(self._binary, ["version"])
        if result.ok:
            for line in result.output.splitlines():
                if line.strip().startswith("Server Version"):
                    return line.strip()
        _logger.warning("server_version_unavailable", error=result.error)
        return UNKNOWN_SERVER_VERSION
