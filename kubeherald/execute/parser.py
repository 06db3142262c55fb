"""Chat message tokenizer and the declarative verb table."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class EmptyCommandError(ValueError):
    """Raised when a chat message contains no tokens."""


class CommandKind(StrEnum):
    """Handler family a verb dispatches to."""

    KUBECTL = "kubectl"
    NOTIFIER = "notifier"
    FILTERS = "filters"
    PING = "ping"
    VERSION = "version"
    UNKNOWN = "unknown"


KUBECTL_VERBS = frozenset(
    {
        "api-resources",
        "api-versions",
        "cluster-info",
        "describe",
        "diff",
        "explain",
        "get",
        "logs",
        "top",
        "auth",
    }
)

COMMAND_TABLE: dict[str, CommandKind] = {
    **{verb: CommandKind.KUBECTL for verb in KUBECTL_VERBS},
    "notifier": CommandKind.NOTIFIER,
    "filters": CommandKind.FILTERS,
    "ping": CommandKind.PING,
    "version": CommandKind.VERSION,
}


@dataclass(frozen=True)
class ParsedCommand:
    """Whitespace-delimited tokens of a chat message; token 0 is the verb."""

    tokens: tuple[str, ...]

    @property
    def verb(self) -> str:
        return self.tokens[0]

    @property
    def args(self) -> tuple[str, ...]:
        return self.tokens[1:]

    @property
    def kind(self) -> CommandKind:
        return COMMAND_TABLE.get(self.verb, CommandKind.UNKNOWN)

    def arg(self, index: int, default: str = "") -> str:
        """Return argument *index* (0 is the token after the verb) or *default*."""
        if 0 <= index < len(self.args):
            return self.args[index]
        return default


def parse_command(message: str) -> ParsedCommand:
    """Split *message* on runs of whitespace.

    Raises:
        EmptyCommandError: if the message is empty or only whitespace.
    """
    tokens = tuple(message.split())
    if not tokens:
        raise EmptyCommandError("empty command")
    return ParsedCommand(tokens=tokens)
