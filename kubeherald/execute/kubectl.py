"""kubectl passthrough: authorization, flag sanitizing and execution.

Decision table over (allow_kubectl, is_auth_channel, cluster flag present,
cluster flag matches):

    allow_kubectl false                    -> "not permitted" message
    cluster flag present and mismatched    -> "" (silent)
    no auth channel and no matching flag   -> "" (silent)
    otherwise                              -> forwarded to kubectl

Rejections are silent so that other clusters' names are never confirmed or
denied.  Only follow/watch flags are stripped and only ``--cluster-name`` is
validated; every other kubectl flag is forwarded unchanged.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from kubeherald.execute.messages import KUBECTL_DISABLED_MSG, KUBECTL_OUTPUT_MSG
from kubeherald.execute.runner import ProcessRunner
from kubeherald.observability.logging import get_logger

_logger = get_logger("execute.kubectl")

CLUSTER_FLAG = "--cluster-name"
FOLLOW_FLAG = "--follow"
ABBR_FOLLOW_FLAG = "-f"
WATCH_FLAG = "--watch"
ABBR_WATCH_FLAG = "-w"

_QUOTES = "'\""

# kubectl shorthands that consume the rest of a combined token as their value.
_VALUE_SHORTHANDS = frozenset("cklLnos")
_STREAM_SHORTHANDS = frozenset((ABBR_FOLLOW_FLAG[1], ABBR_WATCH_FLAG[1]))


@dataclass(frozen=True)
class AuthorizationContext:
    """Who is asking, and what this deployment allows."""

    cluster_name: str
    channel: str = ""
    is_auth_channel: bool = False
    allow_kubectl: bool = False


@dataclass(frozen=True)
class SanitizedArgs:
    """Outcome of the sanitizing pass."""

    args: tuple[str, ...]
    authorized: bool
    rejected: bool = False


def trim_quotes(value: str) -> str:
    """Strip one layer of surrounding single or double quotes."""
    if len(value) >= 2 and value[0] == value[-1] and value[0] in _QUOTES:
        return value[1:-1]
    return value


def _is_stream_flag(arg: str) -> bool:
    if arg.startswith(FOLLOW_FLAG) or arg.startswith(WATCH_FLAG):
        return True
    if not arg.startswith("-") or arg.startswith("--"):
        return False
    # Combined shorthands such as "-pf" or "-Aw", read left to right the way
    # pflag does until a value-taking letter swallows the remainder.
    for letter in arg[1:].split("=", 1)[0]:
        if letter in _STREAM_SHORTHANDS:
            return True
        if letter in _VALUE_SHORTHANDS:
            return False
    return False


def sanitize_kubectl_args(
    args: Sequence[str],
    cluster_name: str,
    authorized: bool,
    default_namespace: str = "default",
) -> SanitizedArgs:
    """Scope, filter and authorize a kubectl argument list.

    ``-n <default_namespace>`` is always prepended, even when the caller
    passes a namespace of their own.  A ``--cluster-name`` whose value
    matches *cluster_name* authorizes the call; any other value, or a
    trailing flag without a value, rejects it.
    """
    tokens = ["-n", default_namespace, *(a for a in args if a.strip())]
    final: list[str] = []
    skip_next = False

    for index, arg in enumerate(tokens):
        if skip_next:
            skip_next = False
            continue
        if _is_stream_flag(arg):
            continue
        if arg == CLUSTER_FLAG:
            if index == len(tokens) - 1 or trim_quotes(tokens[index + 1]) != cluster_name:
                return SanitizedArgs(args=(), authorized=False, rejected=True)
            skip_next = True
            authorized = True
            continue
        if arg.startswith(CLUSTER_FLAG + "="):
            if trim_quotes(arg[len(CLUSTER_FLAG) + 1 :]) != cluster_name:
                return SanitizedArgs(args=(), authorized=False, rejected=True)
            authorized = True
            continue
        final.append(arg)

    return SanitizedArgs(args=tuple(final), authorized=authorized)


class KubectlGate:
    """Runs sanitized kubectl commands for authorized callers.

    Args:
        runner:            Process runner used for execution.
        binary:            Path of the kubectl binary (from configuration).
        default_namespace: Namespace prepended to every command.
    """

    def __init__(self, runner: ProcessRunner, binary: str, default_namespace: str = "default") -> None:
        self._runner = runner
        self._binary = binary
        self._default_namespace = default_namespace

    async def run(self, tokens: Sequence[str], ctx: AuthorizationContext) -> str:
        """Handle a kubectl verb and its arguments; return response text."""
        if not ctx.allow_kubectl:
            return KUBECTL_DISABLED_MSG.format(cluster=ctx.cluster_name)

        sanitized = sanitize_kubectl_args(
            tokens,
            cluster_name=ctx.cluster_name,
            authorized=ctx.is_auth_channel,
            default_namespace=self._default_namespace,
        )
        if sanitized.rejected or not sanitized.authorized:
            _logger.debug("kubectl_command_ignored", channel=ctx.channel, rejected=sanitized.rejected)
            return ""

        result = await self._runner.run(self._binary, sanitized.args)
        if not result.ok:
            _logger.error(
                "kubectl_command_failed",
                args=list(sanitized.args),
                channel=ctx.channel,
                error=result.error,
            )
            return KUBECTL_OUTPUT_MSG.format(cluster=ctx.cluster_name, output=result.output + (result.error or ""))
        return KUBECTL_OUTPUT_MSG.format(cluster=ctx.cluster_name, output=result.output)
