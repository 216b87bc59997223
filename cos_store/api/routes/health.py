"""
Health check endpoints.

- /health: Basic liveness check (is the process running?)
- /health/ready: Readiness check (is the adapter configured?)

Neither endpoint calls COS; readiness only inspects configuration, including
whether the endpoint and asset host resolve to usable URLs.
"""

import logging
from typing import Any, Optional
from urllib.parse import urlparse

from fastapi import APIRouter, Response, status
from pydantic import BaseModel

from ... import __version__
from ...config.settings import CosSettings
from ..dependencies import StoreDep

logger = logging.getLogger(__name__)

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    version: str
    details: dict[str, Any] = {}


class ReadinessCheck(BaseModel):
    """Individual readiness check result."""
    name: str
    status: str  # "ok" or "error"
    error: str | None = None


class ReadinessResponse(BaseModel):
    """Readiness check response with details."""
    status: str  # "ready" or "not_ready"
    version: str
    checks: list[ReadinessCheck]


def _storage_config_error(settings: CosSettings) -> Optional[str]:
    """
    Check that the API endpoint and public host resolve to usable URLs.

    An empty region yields "cos..myqcloud.com", which only fails once
    boto3 tries to connect.
    """
    if settings.mock_mode:
        return None

    urls = {"endpoint": settings.endpoint}
    if settings.host is not None:
        urls["host"] = settings.host

    for name, url in urls.items():
        parsed = urlparse(url)
        hostname = parsed.hostname or ""
        if parsed.scheme not in ("http", "https") or not hostname or ".." in hostname or hostname.startswith("."):
            return f"Invalid {name} URL: {url}"

    return None


@router.get(
    "",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Basic health check",
    description="Returns 200 if the service is running. Does not check dependencies.",
)
async def health_check(store: StoreDep) -> HealthResponse:
    """Liveness check - is the process alive?"""
    return HealthResponse(
        status="ok",
        version=__version__,
        details={
            "mock_mode": store.settings.mock_mode,
            "private_storage": store.settings.private_storage,
        }
    )


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    status_code=status.HTTP_200_OK,
    summary="Readiness check",
    description="Returns 200 if the adapter is fully configured, 503 otherwise.",
    responses={
        503: {
            "description": "Service not ready",
            "model": ReadinessResponse,
        }
    },
)
async def readiness_check(store: StoreDep, response: Response) -> ReadinessResponse:
    """
    Readiness check - can we serve traffic?

    Missing credentials would only show up as auth failures on the first
    upload, so surface them here instead.
    """
    checks: list[ReadinessCheck] = []

    missing_fields = store.settings.validate_required_fields()
    if missing_fields:
        checks.append(ReadinessCheck(
            name="configuration",
            status="error",
            error=f"Missing required fields: {', '.join(missing_fields)}"
        ))
    else:
        checks.append(ReadinessCheck(name="configuration", status="ok"))

    storage_error = _storage_config_error(store.settings)
    checks.append(ReadinessCheck(
        name="storage",
        status="error" if storage_error else "ok",
        error=storage_error,
    ))

    all_ok = all(check.status == "ok" for check in checks)
    if not all_ok:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        logger.warning(
            "Readiness check failed",
            extra={
                "checks": [
                    {"name": c.name, "status": c.status, "error": c.error}
                    for c in checks
                ]
            }
        )

    return ReadinessResponse(
        status="ready" if all_ok else "not_ready",
        version=__version__,
        checks=checks,
    )
