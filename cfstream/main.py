"""
FastAPI application entry point.

For local development:
    CFSTREAM_MOCK_MODE=true uvicorn cfstream.main:app --reload

For production:
    gunicorn cfstream.main:app -w 4 -k uvicorn.workers.UvicornWorker
"""

import logging
from contextlib import asynccontextmanager

import requests
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api.routes import health, videos
from .config.settings import get_settings
from .core.errors import InvalidCredentials, InvalidFile, InvalidOrigins, OperationFailed

logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=get_settings().log_level.upper(),
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log startup configuration and shutdown."""
    settings = get_settings()

    logger.info(
        "cfstream API starting",
        extra={
            "version": settings.api_version,
            "mock_mode": settings.cfstream_mock_mode,
        }
    )

    missing_fields = settings.validate_required_fields()
    if missing_fields:
        # Requests touching Stream will fail with 503 until this is fixed
        logger.error(
            "Missing required configuration",
            extra={"missing_fields": missing_fields}
        )

    yield

    logger.info("cfstream API shutting down")


def register_exception_handlers(app: FastAPI) -> None:
    """Translate Stream client errors into HTTP responses."""

    @app.exception_handler(InvalidFile)
    @app.exception_handler(InvalidOrigins)
    async def invalid_input_handler(request: Request, exc: Exception):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": str(exc)},
        )

    @app.exception_handler(OperationFailed)
    async def operation_failed_handler(request: Request, exc: OperationFailed):
        logger.warning(
            "Stream operation failed",
            extra={
                "path": request.url.path,
                "operation": exc.operation,
                "status_code": exc.status_code,
            }
        )
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY,
            content={
                "detail": str(exc),
                "upstream_status": exc.status_code,
            },
        )

    @app.exception_handler(requests.RequestException)
    async def transport_error_handler(request: Request, exc: requests.RequestException):
        logger.warning(
            "Cloudflare request failed",
            extra={"path": request.url.path, "error": str(exc)}
        )
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY,
            content={"detail": "Cloudflare Stream request failed"},
        )

    @app.exception_handler(InvalidCredentials)
    async def invalid_credentials_handler(request: Request, exc: InvalidCredentials):
        logger.error("Stream credentials not configured", extra={"error": str(exc)})
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"detail": "Cloudflare Stream is not configured"},
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Log the full error server-side, return a generic message."""
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
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "detail": "Internal server error. Please contact support if this persists."
            }
        )


def create_app() -> FastAPI:
    """
    Application factory.

    Called once at startup in production, and once per configuration
    in tests.
    """
    settings = get_settings()

    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        description="""
        Manage videos on Cloudflare Stream.

        ## Authentication

        All video endpoints require an API key provided in the `X-API-Key` header.

        ## Workflow

        1. **Upload**: `POST /api/v1/videos/upload` returns a `resource_url`
        2. **Check processing**: `GET /api/v1/videos/status?resource_url=...`
        3. **Restrict playback**: `POST /api/v1/videos/allowed-origins`
           or `POST /api/v1/videos/require-signed-urls`
        4. **Embed**: `GET /api/v1/videos/embed?resource_url=...`
        """,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

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
        videos.router,
        prefix="/api/v1/videos",
        tags=["Videos"],
    )

    @app.get("/", include_in_schema=False)
    async def root():
        return {
            "message": settings.api_title,
            "version": settings.api_version,
            "docs": "/docs",
            "health": "/health",
        }

    register_exception_handlers(app)

    logger.info(
        "FastAPI application created",
        extra={
            "title": settings.api_title,
            "version": settings.api_version,
        }
    )

    return app


# This is what uvicorn/gunicorn will import
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "cfstream.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level=settings.log_level.lower(),
    )
