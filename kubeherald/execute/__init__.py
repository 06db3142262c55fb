"""Chat command gateway.

Submodules:
    parser    -- Tokenizer, ParsedCommand and the declarative verb table.
    kubectl   -- Authorization and flag sanitizing for kubectl passthrough.
    handlers  -- notifier / filters / ping / version handlers.
    runner    -- Bounded external process runner.
    executor  -- CommandExecutor, the router tying them together.
"""

from kubeherald.execute.executor import CommandExecutor
from kubeherald.execute.handlers import NotifierState
from kubeherald.execute.kubectl import AuthorizationContext, KubectlGate, sanitize_kubectl_args
from kubeherald.execute.parser import CommandKind, EmptyCommandError, ParsedCommand, parse_command
from kubeherald.execute.runner import ProcessResult, ProcessRunner, SubprocessRunner

__all__ = [
    "AuthorizationContext",
    "CommandExecutor",
    "CommandKind",
    "EmptyCommandError",
    "KubectlGate",
    "NotifierState",
    "ParsedCommand",
    "ProcessResult",
    "ProcessRunner",
    "SubprocessRunner",
    "parse_command",
    "sanitize_kubectl_args",
]
