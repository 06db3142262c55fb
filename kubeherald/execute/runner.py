"""Bounded external process runner.

The runner never goes through a shell; the binary path always comes from
configuration.  A run that exceeds its timeout, or whose calling task is
cancelled, kills the child process before returning; output read before a
timeout is kept.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass

from kubeherald.observability.logging import get_logger

_logger = get_logger("execute.runner")

_DEFAULT_TIMEOUT_SECONDS = 30.0
_READ_CHUNK = 64 * 1024


@dataclass(frozen=True)
class ProcessResult:
    """Captured output of one process invocation."""

    binary: str
    args: tuple[str, ...]
    output: str = ""
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class ProcessRunner(ABC):
    """Executes a binary with arguments and returns its captured output."""

    @abstractmethod
    async def run(self, binary: str, args: Sequence[str]) -> ProcessResult:
        """Run *binary* with *args*.  Must not raise for process failures."""


class SubprocessRunner(ProcessRunner):
    """Runs processes with ``asyncio.create_subprocess_exec``.

    Args:
        timeout_seconds: Wall-clock limit per invocation. Defaults to 30.
    """

    def __init__(self, timeout_seconds: float = _DEFAULT_TIMEOUT_SECONDS) -> None:
        if timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be positive")
        self._timeout = timeout_seconds

    @property
    def timeout_seconds(self) -> float:
        return self._timeout

    async def run(self, binary: str, args: Sequence[str]) -> ProcessResult:
        argv = tuple(args)
        _logger.debug("process_start", binary=binary, args=list(argv))
        try:
            proc = await asyncio.create_subprocess_exec(
                binary,
                *argv,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
            )
        except OSError as exc:
            _logger.error("process_spawn_failed", binary=binary, error=str(exc))
            return ProcessResult(binary=binary, args=argv, error=str(exc))

        stdout = bytearray()
        try:
            await asyncio.wait_for(_collect(proc, stdout), timeout=self._timeout)
        except TimeoutError:
            await _kill(proc)
            _logger.warning("process_timeout", binary=binary, timeout=self._timeout, partial_bytes=len(stdout))
            return ProcessResult(
                binary=binary,
                args=argv,
                output=_decode(stdout),
                error=f"command timed out after {self._timeout:g}s",
            )
        except asyncio.CancelledError:
            await _kill(proc)
            _logger.info("process_cancelled", binary=binary)
            raise

        output = _decode(stdout)
        if proc.returncode != 0:
            return ProcessResult(binary=binary, args=argv, output=output, error=f"exit status {proc.returncode}")
        return ProcessResult(binary=binary, args=argv, output=output)


async def _collect(proc: asyncio.subprocess.Process, sink: bytearray) -> None:
    """Read stdout into *sink* as it arrives, then reap the process."""
    assert proc.stdout is not None
    while True:
        chunk = await proc.stdout.read(_READ_CHUNK)
        if not chunk:
            break
        sink.extend(chunk)
    await proc.wait()


def _decode(data: bytes | bytearray) -> str:
    return bytes(data).decode("utf-8", errors="replace")


async def _kill(proc: asyncio.subprocess.Process) -> None:
    if proc.returncode is None:
        try:
            proc.kill()
        except ProcessLookupError:
            pass
    await proc.wait()
