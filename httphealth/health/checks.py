"""Check capabilities — the units of work a CheckEntry invokes.

Two variants share the same ``run()`` contract:
  FunctionCheck — calls an in-process zero-argument callable
  CommandCheck  — runs a shell command and maps its exit code to a status
"""

from __future__ import annotations

import logging
import subprocess
import time
from collections.abc import Callable
from typing import Protocol, runtime_checkable

from .models import CheckResponse, Status

logger = logging.getLogger(__name__)

CheckFunc = Callable[[], CheckResponse]


@runtime_checkable
class Check(Protocol):
    """Anything that synchronously produces a CheckResponse."""

    def run(self) -> CheckResponse: ...


class FunctionCheck:
    """Adapts a plain callable to the Check protocol."""

    def __init__(self, fn: CheckFunc) -> None:
        self.fn = fn

    def run(self) -> CheckResponse:
        return self.fn()

    def __repr__(self) -> str:
        return f"FunctionCheck({getattr(self.fn, '__name__', self.fn)!r})"


class CommandCheck:
    """Runs ``command`` through ``sh -c``.

    stdout and stderr are captured together as the response text. A nonzero
    exit is CRITICAL, zero is OK. ``timeout`` (seconds) is enforced here, not
    by the engine; without one a hung command hangs its request.
    """

    def __init__(self, command: str, timeout: float | None = None) -> None:
        self.command = command
        self.timeout = timeout

    def run(self) -> CheckResponse:
        logger.info("Running command: %s", self.command)
        t0 = time.perf_counter()
        try:
            result = subprocess.run(
                ["sh", "-c", self.command],
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                timeout=self.timeout,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except subprocess.TimeoutExpired as e:
            output = e.output or ""
            if isinstance(output, bytes):
                output = output.decode("utf-8", errors="replace")
            return CheckResponse(
                status=Status.CRITICAL,
                text=f"{output}Command timed out after {self.timeout}s",
            )

        logger.debug(
            "Command %r exited %d (%dms)",
            self.command, result.returncode, (time.perf_counter() - t0) * 1000,
        )
        status = Status.OK if result.returncode == 0 else Status.CRITICAL
        return CheckResponse(status=status, text=result.stdout)

    def __repr__(self) -> str:
        return f"CommandCheck({self.command!r})"
