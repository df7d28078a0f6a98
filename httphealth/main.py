"""Entry point for the httphealth daemon — `httphealthd` console script."""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import dataclass

import uvicorn
from rich.console import Console
from rich.panel import Panel

from httphealth.api.server import create_app
from httphealth.config import settings
from httphealth.health.loader import (
    ConfigError,
    find_config,
    load_config,
    register_config_checks,
)
from httphealth.health.registry import CheckRegistry

console = Console()
LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")
logger = logging.getLogger(__name__)


@dataclass
class Listen:
    address: str
    port: int


def setup_logging(level: str | None = None) -> None:
    logging.basicConfig(
        level=getattr(logging, (level or settings.log_level).upper()),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )


def build_registry(
    config_file: str | None = None,
    address: str | None = None,
    port: int | None = None,
    registry: CheckRegistry | None = None,
) -> tuple[CheckRegistry, Listen]:
    """Load the config file (if any) and register its command checks.

    Listen precedence: explicit arguments > config file > settings.
    """
    registry = registry if registry is not None else CheckRegistry()
    listen = Listen(address=settings.listen_address, port=settings.listen_port)

    path = find_config(config_file or settings.config_file or None)
    if path is not None:
        config = load_config(path)
        listen.address = config.listen.address or listen.address
        listen.port = config.listen.port or listen.port
        register_config_checks(registry, config)
    else:
        logger.info("No config file found — serving in-process checks only")

    if address:
        listen.address = address
    if port:
        listen.port = port
    return registry, listen


def serve(
    registry: CheckRegistry, address: str, port: int, log_level: str | None = None,
) -> None:
    """Serve ``registry`` until interrupted."""
    console.print(
        Panel.fit(
            f"[bold]httphealth[/bold]\n"
            f"Bind:   {address}:{port}\n"
            f"Checks: {', '.join(registry.names()) or '(none)'}",
            title="httphealthd",
            border_style="green",
        )
    )
    uvicorn.run(
        create_app(registry),
        host=address,
        port=port,
        log_level=(log_level or settings.log_level).lower(),
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Aggregate health checks over HTTP")
    parser.add_argument("-l", "--listen", default="", help="Interface to listen on")
    parser.add_argument("-p", "--port", type=int, default=0, help="Port to listen on")
    parser.add_argument("-c", "--config", default="", help="Configuration file")
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default=None,
        help="Logging level (default from settings)",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None, registry: CheckRegistry | None = None) -> None:
    """Parse flags, load checks and serve. Pass ``registry`` to embed."""
    args = parse_args(argv)
    setup_logging(args.log_level)

    try:
        registry, listen = build_registry(args.config, args.listen, args.port, registry)
    except ConfigError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)

    serve(registry, listen.address, listen.port, args.log_level)


if __name__ == "__main__":
    main()
