"""Check result model — status codes and the JSON wire shape."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Any


class Status(IntEnum):
    OK = 0
    WARN = 1
    CRITICAL = 2
    UNKNOWN = 3


_STATUS_TEXT = {
    Status.OK: "ok",
    Status.WARN: "warning",
    Status.CRITICAL: "critical",
    Status.UNKNOWN: "unknown",
}


@dataclass
class CheckResponse:
    """Result of a single check run.

    ``status`` is kept as a plain int so that codes outside ``Status`` still
    round-trip to the client (they render as "critical").
    """

    status: int = Status.OK
    text: str = ""
    from_cache: bool = False
    cache_ttl: int = 0  # seconds of validity left, 0 when not cached

    def is_ok(self) -> bool:
        return self.status == Status.OK

    def is_warn(self) -> bool:
        return self.status == Status.WARN

    def is_critical(self) -> bool:
        return self.status == Status.CRITICAL

    def is_unknown(self) -> bool:
        return self.status == Status.UNKNOWN

    def status_text(self) -> str:
        return _STATUS_TEXT.get(self.status, "critical")

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the fixed JSON field names served over HTTP."""
        return {
            "text": self.text,
            "status_code": int(self.status),
            "status": self.status_text(),
            "cache_used": self.from_cache,
            "cache_ttl": self.cache_ttl,
        }


# ── Constructors for check authors ───────────────────────────────────────────


def ok(text: str = "") -> CheckResponse:
    return CheckResponse(status=Status.OK, text=text)


def warn(text: str = "") -> CheckResponse:
    return CheckResponse(status=Status.WARN, text=text)


def critical(text: str = "") -> CheckResponse:
    return CheckResponse(status=Status.CRITICAL, text=text)


def unknown(text: str = "") -> CheckResponse:
    return CheckResponse(status=Status.UNKNOWN, text=text)
