"""Declarative config — listen settings and ad-hoc command checks from YAML.

Example:

    listen:
      address: 0.0.0.0
      port: 8000
    checks:
      disk:
        command: "df -h /"
        cache: 5m
        timeout: 30s
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .checks import CommandCheck
from .duration import parse_duration
from .registry import CheckRegistry

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATHS = (
    Path("/etc/httphealth.yaml"),
    Path("/httphealth.yaml"),
    Path("config.yaml"),
)


class ConfigError(Exception):
    """Raised when a config file is missing, malformed or has invalid values."""


# ── Data models ──────────────────────────────────────────────────────────────


@dataclass
class ListenConfig:
    address: str | None = None
    port: int | None = None


@dataclass
class CommandCheckDef:
    """A shell command check declared in the config file."""

    name: str
    command: str
    cache: str = ""  # duration string, empty = never cache
    timeout: str = ""  # duration string, empty = no timeout

    def cache_seconds(self) -> int:
        return parse_duration(self.cache) if self.cache else 0

    def timeout_seconds(self) -> int | None:
        return parse_duration(self.timeout) if self.timeout else None


@dataclass
class HealthConfig:
    listen: ListenConfig = field(default_factory=ListenConfig)
    checks: dict[str, CommandCheckDef] = field(default_factory=dict)


# ── Loading ──────────────────────────────────────────────────────────────────


def find_config(explicit: str | Path | None = None) -> Path | None:
    """Return the config file to load, or None if no default exists."""
    if explicit:
        path = Path(explicit)
        if not path.exists():
            raise ConfigError(f"Config file not found: {path}")
        return path

    for path in DEFAULT_CONFIG_PATHS:
        logger.debug("Checking for config in %s", path)
        if path.exists():
            return path
    return None


def load_config(path: str | Path) -> HealthConfig:
    """Parse a YAML config file into a HealthConfig."""
    path = Path(path)
    logger.info("Parsing config file: %s", path)
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Failed to read {path}: {e}") from e

    if raw is None:
        return HealthConfig()
    if not isinstance(raw, dict):
        raise ConfigError(f"{path}: top level must be a mapping")
    return _parse_config(raw, path)


def _parse_config(raw: dict[str, Any], path: Path) -> HealthConfig:
    config = HealthConfig()

    listen = raw.get("listen") or {}
    if not isinstance(listen, dict):
        raise ConfigError(f"{path}: 'listen' must be a mapping")
    port = listen.get("port")
    if port is not None and (not isinstance(port, int) or isinstance(port, bool)):
        raise ConfigError(f"{path}: listen.port must be an integer, got {port!r}")
    config.listen = ListenConfig(address=listen.get("address"), port=port)

    checks = raw.get("checks") or {}
    if not isinstance(checks, dict):
        raise ConfigError(f"{path}: 'checks' must be a mapping of name to check")

    for name, entry in checks.items():
        if not isinstance(entry, dict) or not entry.get("command"):
            raise ConfigError(f"{path}: check {name!r} needs a 'command'")
        config.checks[str(name)] = CommandCheckDef(
            name=str(name),
            command=str(entry["command"]),
            cache=_duration_field(entry, "cache", name),
            timeout=_duration_field(entry, "timeout", name),
        )
    return config


def _duration_field(entry: dict[str, Any], key: str, name: str) -> str:
    value = entry.get(key)
    if value is None or value == "":
        return ""
    try:
        parse_duration(value)
    except ValueError as e:
        raise ConfigError(f"check {name!r}: invalid {key}: {e}") from e
    return value


def register_config_checks(registry: CheckRegistry, config: HealthConfig) -> None:
    """Register every declared command check on ``registry``."""
    for name, check_def in config.checks.items():
        check = CommandCheck(check_def.command, timeout=check_def.timeout_seconds())
        ttl = check_def.cache_seconds()
        if ttl:
            logger.info("Check %s has cache %s (%d)", name, check_def.cache, ttl)
        registry.register(name, check, ttl)
