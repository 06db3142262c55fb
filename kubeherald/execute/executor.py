"""Chat command router.

Tokenizes a message, looks the verb up in ``COMMAND_TABLE`` and dispatches
to the matching handler.  Every outcome is response text; an empty string
means "say nothing".
"""

from __future__ import annotations

from collections.abc import Callable

from kubeherald import __version__
from kubeherald.config import load_config
from kubeherald.execute.handlers import FiltersCommand, NotifierCommand, NotifierState, VersionCommand
from kubeherald.execute.kubectl import AuthorizationContext, KubectlGate
from kubeherald.execute.messages import PONG_MSG, UNSUPPORTED_COMMAND_MSG
from kubeherald.execute.parser import CommandKind, EmptyCommandError, ParsedCommand, parse_command
from kubeherald.execute.runner import ProcessRunner
from kubeherald.filters.base import FilterRegistry
from kubeherald.models.config import HeraldConfig, SettingsConfig
from kubeherald.observability.logging import get_logger
from kubeherald.observability.metrics import commands_total

_logger = get_logger("execute.executor")


class CommandExecutor:
    """Routes chat messages to command handlers.

    Args:
        settings:       Cluster identity and passthrough settings.
        registry:       Shared filter registry (for ``filters``).
        notifier_state: Shared notifications switch (for ``notifier``).
        runner:         Process runner for kubectl invocations.
        config_reader:  Returns the active configuration for ``showconfig``.
        auth_channel:   The one chat channel trusted with admin commands and
                        passthrough without a cluster flag.  Empty means none.
    """

    def __init__(
        self,
        settings: SettingsConfig,
        registry: FilterRegistry,
        notifier_state: NotifierState,
        runner: ProcessRunner,
        config_reader: Callable[[], HeraldConfig] = load_config,
        auth_channel: str = "",
    ) -> None:
        self._settings = settings
        self._auth_channel = auth_channel
        self._kubectl = KubectlGate(runner, settings.kubectl_binary, settings.default_namespace)
        self._notifier = NotifierCommand(notifier_state, config_reader)
        self._filters = FiltersCommand(registry)
        self._version = VersionCommand(runner, settings.kubectl_binary, __version__)

    def context(self, channel: str = "") -> AuthorizationContext:
        """Build the authorization context for a message from *channel*.

        Only the configured auth channel is trusted; callers cannot claim it.
        """
        return AuthorizationContext(
            cluster_name=self._settings.cluster_name,
            channel=channel,
            is_auth_channel=bool(self._auth_channel) and channel == self._auth_channel,
            allow_kubectl=self._settings.allow_kubectl,
        )

    async def execute(self, message: str, ctx: AuthorizationContext) -> str:
        """Handle one chat message and return the response text."""
        try:
            cmd = parse_command(message)
        except EmptyCommandError:
            commands_total.labels(kind="empty", outcome="ignored").inc()
            return ""

        kind = cmd.kind
        response = await self._dispatch(kind, cmd, ctx)
        commands_total.labels(kind=kind.value, outcome="responded" if response else "silent").inc()
        _logger.debug("command_handled", verb=cmd.verb, kind=kind.value, channel=ctx.channel, silent=not response)
        return response

    async def _dispatch(self, kind: CommandKind, cmd: ParsedCommand, ctx: AuthorizationContext) -> str:
        cluster = ctx.cluster_name

        if kind == CommandKind.KUBECTL:
            return await self._kubectl.run(cmd.tokens, ctx)
        if kind == CommandKind.NOTIFIER:
            return self._notifier.handle(cmd, cluster) if ctx.is_auth_channel else ""
        if kind == CommandKind.FILTERS:
            return self._filters.handle(cmd, cluster) if ctx.is_auth_channel else ""
        if kind == CommandKind.PING:
            version = await self._version.handle(cmd, cluster)
            return PONG_MSG.format(cluster=cluster, version=version) if version else ""
        if kind == CommandKind.VERSION:
            return await self._version.handle(cmd, cluster)

        return UNSUPPORTED_COMMAND_MSG if ctx.is_auth_channel else ""
