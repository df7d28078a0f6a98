"""Check registry — named entries, cached execution and aggregation.

A CheckEntry decides per run whether to consult the shared Cache. There is
no single-flight guard: concurrent misses on the same name each invoke the
check and race to overwrite the cache entry, last write wins.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field, replace

from .cache import Cache
from .checks import Check, CheckFunc, FunctionCheck
from .models import CheckResponse, Status

logger = logging.getLogger(__name__)


class UnknownCheckError(LookupError):
    """Raised when a requested check name is not registered."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unknown check: {name}")


# ── Entries ──────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class CheckEntry:
    """A registered check bound to its name and cache TTL (0 = never cache)."""

    name: str
    check: Check
    cache_ttl: int
    cache: Cache

    def run(self) -> CheckResponse:
        if self.cache_ttl == 0:
            return self._invoke()[0]

        hit = self.cache.get(self.name)
        if hit is not None:
            resp, valid_for = hit
            return replace(resp, from_cache=True, cache_ttl=valid_for)

        resp, faulted = self._invoke()
        # faults are retried on the next request instead of being memoized
        if not faulted:
            self.cache.set(self.name, resp, self.cache_ttl)
        return resp

    def _invoke(self) -> tuple[CheckResponse, bool]:
        """Run the check, converting any crash into an UNKNOWN response."""
        try:
            resp = self.check.run()
        except Exception as e:
            logger.exception("Check %s raised", self.name)
            return CheckResponse(
                status=Status.UNKNOWN,
                text=f"Check raised {type(e).__name__}: {e}",
            ), True

        if not isinstance(resp, CheckResponse):
            logger.error(
                "Check %s returned %s instead of a CheckResponse",
                self.name, type(resp).__name__,
            )
            return CheckResponse(
                status=Status.UNKNOWN,
                text=f"Check returned {type(resp).__name__}, expected CheckResponse",
            ), True

        return replace(resp, from_cache=False, cache_ttl=0), False


@dataclass
class RunResult:
    """Results of a run over every registered check."""

    results: dict[str, CheckResponse] = field(default_factory=dict)

    @property
    def passed(self) -> bool:
        # any non-OK fails the aggregate, regardless of severity
        return all(r.is_ok() for r in self.results.values())

    def to_dict(self) -> dict[str, dict]:
        return {name: r.to_dict() for name, r in self.results.items()}


# ── Registry ─────────────────────────────────────────────────────────────────


class CheckRegistry:
    """Maps names to CheckEntries; safe to read and write while serving."""

    def __init__(self, cache: Cache | None = None) -> None:
        self.cache = cache if cache is not None else Cache()
        self._entries: dict[str, CheckEntry] = {}
        self._lock = threading.RLock()

    def register(self, name: str, check: Check, cache_ttl: int = 0) -> CheckEntry:
        """Register ``check`` under ``name``, replacing any existing entry."""
        if not isinstance(cache_ttl, int) or isinstance(cache_ttl, bool):
            raise ValueError(
                f"Cache TTL for {name!r} must be whole seconds, got {cache_ttl!r}"
            )
        if cache_ttl < 0:
            raise ValueError(f"Cache TTL for {name!r} must be >= 0, got {cache_ttl}")

        entry = CheckEntry(name=name, check=check, cache_ttl=cache_ttl, cache=self.cache)
        with self._lock:
            replaced = name in self._entries
            self._entries[name] = entry
            # the old entry's memoized result must not outlive it
            self.cache.delete(name)

        logger.info(
            "%s check %s (cache ttl %ds)",
            "Re-registered" if replaced else "Registered", name, entry.cache_ttl,
        )
        return entry

    def register_check(self, name: str, fn: CheckFunc) -> CheckEntry:
        """Register a check that runs on every request."""
        return self.register(name, FunctionCheck(fn), 0)

    def register_caching_check(self, name: str, fn: CheckFunc, ttl: int) -> CheckEntry:
        """Register a check whose result is reused for ``ttl`` seconds."""
        return self.register(name, FunctionCheck(fn), ttl)

    def get(self, name: str) -> CheckEntry | None:
        with self._lock:
            return self._entries.get(name)

    def names(self) -> list[str]:
        with self._lock:
            return sorted(self._entries)

    def run_one(self, name: str) -> CheckResponse:
        entry = self.get(name)
        if entry is None:
            raise UnknownCheckError(name)
        logger.debug("Running check: %s", name)
        return entry.run()

    def run_all(self) -> RunResult:
        """Run every registered check, in name order."""
        with self._lock:
            entries = sorted(self._entries.values(), key=lambda e: e.name)

        result = RunResult()
        for entry in entries:
            result.results[entry.name] = entry.run()
        return result

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
