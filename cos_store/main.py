"""
FastAPI application entry point.

The application hosts the COS adapter the way a CMS would: an upload
endpoint that calls save(), a delete endpoint, and the adapter's serve()
handler mounted where private-storage URLs point.

For local development:
    GHOST_STORAGE_ADAPTER_COS_MOCK_MODE=true uvicorn cos_store.main:app --reload
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .api.dependencies import get_default_store
from .api.routes import health, images
from .config.settings import get_settings
from .core.exceptions import NotFoundError, StorageError
from .core.store import COSStore

# Configure logging
logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=get_settings().log_level.upper(),
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log startup state and flag incomplete adapter configuration."""
    store: COSStore = app.state.store

    logger.info(
        "COS storage adapter starting",
        extra={
            "version": __version__,
            "mock_mode": store.settings.mock_mode,
            "private_storage": store.settings.private_storage,
        }
    )

    missing_fields = store.settings.validate_required_fields()
    if missing_fields:
        # Uploads will fail with auth errors until these are set
        logger.error(
            "Missing required configuration",
            extra={"missing_fields": missing_fields}
        )

    yield

    logger.info("COS storage adapter shutting down")


def create_app(store: Optional[COSStore] = None) -> FastAPI:
    """
    Application factory.

    Args:
        store: Adapter to host. Defaults to one built from environment
            settings; tests pass an adapter with the in-memory client.
    """
    settings = get_settings()
    store = store or get_default_store()

    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        description="""
        Tencent COS storage adapter.

        - `POST /api/v1/images/upload`: store an image, get its URL back
        - `DELETE /api/v1/images/{path}`: delete an image
        - `GET /{path_prefix}/{path}`: files in private storage, proxied from COS

        Upload and delete require an API key in the `X-API-Key` header.
        """,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.store = store

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(
        health.router,
        prefix="/health",
        tags=["Health"],
    )

    app.include_router(
        images.router,
        prefix="/api/v1/images",
        tags=["Images"],
    )

    # Registered last: with no path prefix this route catches everything
    app.add_api_route(
        f"{store.serve_mount_path}/{{path:path}}",
        store.serve(),
        methods=["GET"],
        include_in_schema=False,
    )

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError):
        logger.info(
            "File not found",
            extra={
                "path": request.url.path,
                "error": str(exc),
                "cause": str(exc.__cause__) if exc.__cause__ else None,
            }
        )
        return JSONResponse(status_code=404, content={"detail": "File not found"})

    @app.exception_handler(StorageError)
    async def storage_error_handler(request: Request, exc: StorageError):
        logger.error(
            "Storage operation failed",
            extra={
                "path": request.url.path,
                "method": request.method,
                "error": str(exc),
            },
        )
        return JSONResponse(
            status_code=502,
            content={"detail": "Storage backend error"}
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """
        Catch-all exception handler.

        Stack traces stay in the server log, clients get a generic message.
        """
        logger.error(
            "Unhandled exception",
            extra={
                "path": request.url.path,
                "method": request.method,
                "error": str(exc),
            },
            exc_info=exc,
        )

        return JSONResponse(
            status_code=500,
            content={
                "detail": "Internal server error. Please contact support if this persists."
            }
        )

    logger.info(
        "FastAPI application created",
        extra={
            "title": settings.api_title,
            "serve_mount_path": store.serve_mount_path or "/",
        }
    )

    return app


# Create the application instance
# This is what uvicorn/gunicorn will import
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "cos_store.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level=get_settings().log_level.lower(),
    )
