"""HTTP surface for the check registry.

Endpoints:
  GET /                — run all checks; 200 if every check is OK, else 503
  GET /checks          — registered check names, one per line
  GET /checks/{name}   — run one check; 200 if OK, 503 if not, 404 if unknown

Routes are plain ``def`` handlers, so the server runs each request in its own
worker thread and a slow check only blocks the request that triggered it.
"""

from __future__ import annotations

import json
import logging

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import PlainTextResponse, Response

from httphealth.health.models import CheckResponse
from httphealth.health.registry import CheckRegistry, RunResult, UnknownCheckError

logger = logging.getLogger(__name__)

health_router = APIRouter()

SERIALIZATION_ERROR = "Cannot produce JSON response"


def _registry(request: Request) -> CheckRegistry:
    return request.app.state.registry


def _json_response(result: RunResult | CheckResponse, passed: bool) -> Response:
    """Encode ``result``; failures and degraded results share one shape."""
    try:
        body = json.dumps(result.to_dict())
    except (TypeError, ValueError):
        logger.exception("Cannot encode check results as JSON")
        return PlainTextResponse(SERIALIZATION_ERROR, status_code=503)
    return Response(
        content=body,
        status_code=200 if passed else 503,
        media_type="application/json",
    )


@health_router.get("/")
def run_all_checks(request: Request) -> Response:
    """Run every registered check and report the aggregate."""
    result = _registry(request).run_all()
    return _json_response(result, result.passed)


@health_router.get("/checks", response_class=PlainTextResponse)
@health_router.get("/checks/", response_class=PlainTextResponse)
def list_checks(request: Request) -> str:
    return "".join(f"{name}\n" for name in _registry(request).names())


@health_router.get("/checks/{name}")
def run_check(name: str, request: Request) -> Response:
    """Run a single named check."""
    try:
        resp = _registry(request).run_one(name)
    except UnknownCheckError:
        raise HTTPException(status_code=404, detail=f"Unknown check: {name}")
    return _json_response(resp, resp.is_ok())
