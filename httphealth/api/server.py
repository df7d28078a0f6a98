"""FastAPI server exposing a CheckRegistry over HTTP."""

from __future__ import annotations

import logging

from fastapi import FastAPI

from httphealth import __version__
from httphealth.api.routes import health_router
from httphealth.health.registry import CheckRegistry

logger = logging.getLogger(__name__)


def create_app(registry: CheckRegistry | None = None) -> FastAPI:
    """Build the app around ``registry`` (a fresh empty one if omitted)."""
    app = FastAPI(
        title="httphealth",
        version=__version__,
        redirect_slashes=False,
    )
    app.state.registry = registry if registry is not None else CheckRegistry()
    app.include_router(health_router)

    logger.info("Serving %d checks", len(app.state.registry))
    return app
