"""
FastAPI dependency injection.

Route handlers receive the adapter and settings through dependencies
rather than building them, so tests can swap in an adapter backed by the
in-memory client.
"""

import logging
from functools import lru_cache
from typing import Annotated

from fastapi import Depends, HTTPException, Request, Security, status
from fastapi.security import APIKeyHeader

from ..config.settings import Settings, get_cos_settings, get_settings
from ..core.store import COSStore

logger = logging.getLogger(__name__)

# API Key security scheme
api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------

async def verify_api_key(
    settings: Annotated[Settings, Depends(get_settings)],
    api_key: str = Security(api_key_header),
) -> str:
    """
    Validate API key from request header.

    Raises 403 if key is invalid or missing.
    """
    if not api_key:
        logger.warning("Request missing API key")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="API key required. Provide X-API-Key header.",
        )

    if api_key not in settings.api_keys_list:
        logger.warning(
            "Invalid API key attempt",
            extra={"key_prefix": api_key[:8]}
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid API key",
        )

    return api_key


# ---------------------------------------------------------------------------
# Storage
# ---------------------------------------------------------------------------

@lru_cache()
def get_default_store() -> COSStore:
    """
    Process-wide adapter built from environment settings.

    One adapter (and so one COS client) serves every request.
    """
    return COSStore(get_cos_settings())


def get_store(request: Request) -> COSStore:
    """
    Adapter the application was created with.

    create_app() stores it on app.state because serve() binds its handler
    to that same instance at startup.
    """
    return request.app.state.store


# ---------------------------------------------------------------------------
# Convenience Type Aliases
# ---------------------------------------------------------------------------

AuthenticatedUser = Annotated[str, Depends(verify_api_key)]
StoreDep = Annotated[COSStore, Depends(get_store)]
SettingsDep = Annotated[Settings, Depends(get_settings)]
