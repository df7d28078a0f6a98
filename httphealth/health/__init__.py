"""Health subsystem — check capabilities, TTL cache, registry, config loader."""

from .cache import Cache, CacheEntry
from .checks import Check, CommandCheck, FunctionCheck
from .duration import parse_duration
from .loader import ConfigError, HealthConfig, load_config, register_config_checks
from .models import CheckResponse, Status, critical, ok, unknown, warn
from .registry import CheckEntry, CheckRegistry, RunResult, UnknownCheckError
