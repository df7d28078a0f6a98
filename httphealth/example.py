"""Example daemon embedding httphealth with in-process checks.

Registers:
  pidactive — OK while the watched PID is alive
  failing   — always CRITICAL
  cachethis — WARN, cached for 300 seconds
"""

from __future__ import annotations

import os

from httphealth.health.models import CheckResponse, critical, ok, warn
from httphealth.health.registry import CheckRegistry
from httphealth.main import main as run_daemon

WATCHED_PID = int(os.environ.get("HTTPHEALTH_EXAMPLE_PID", os.getpid()))


def is_pid_active(pid: int = WATCHED_PID) -> CheckResponse:
    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return critical(f"process {pid} not running")
    except PermissionError:
        pass  # exists, owned by someone else
    return ok(str(pid))


def failing_check() -> CheckResponse:
    return critical("Some error message")


def some_check() -> CheckResponse:
    return warn("this failed and is cached for 300 seconds")


def build_example_registry() -> CheckRegistry:
    registry = CheckRegistry()
    registry.register_check("pidactive", is_pid_active)
    registry.register_check("failing", failing_check)
    registry.register_caching_check("cachethis", some_check, 300)
    return registry


def main() -> None:
    run_daemon(registry=build_example_registry())


if __name__ == "__main__":
    main()
