"""
FastAPI application for the R2 object gateway.

Run locally with:
    uvicorn src.main:app --reload

create_app() builds a fresh application, which is what the tests use.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api.routes import buckets, health, objects
from .config.settings import get_settings
from .core.objects.errors import (
    InvalidArgumentError,
    ObjectGatewayError,
    ObjectNotFoundError,
    StorageOperationFailed,
)

logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=get_settings().log_level.upper(),
)

logger = logging.getLogger(__name__)

API_DESCRIPTION = """
Tool-callable access to S3-compatible object storage (Cloudflare R2).

## Operations

- List, create and delete buckets; list objects by prefix
- Upload objects from text, base64 data or a local file path
- Download objects inline as text or to a local file
- Read object metadata, delete objects

## Authentication

All `/api/v1` endpoints require an API key in the `X-API-Key` header.
"""

# Most specific first; ObjectNotFoundError is a StorageOperationFailed
ERROR_STATUS_CODES: list[tuple[type[ObjectGatewayError], int]] = [
    (InvalidArgumentError, status.HTTP_400_BAD_REQUEST),
    (ObjectNotFoundError, status.HTTP_404_NOT_FOUND),
    (StorageOperationFailed, status.HTTP_502_BAD_GATEWAY),
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    logger.info(
        "Object gateway starting",
        extra={"version": settings.api_version, "r2_mock_mode": settings.r2_mock_mode},
    )

    missing_fields = settings.validate_required_fields()
    if missing_fields:
        # Startup continues; /health/ready reports not_ready
        logger.error(
            "Missing required configuration",
            extra={"missing_fields": missing_fields},
        )

    yield

    logger.info("Object gateway shutting down")


def _status_for(exc: ObjectGatewayError) -> int:
    for error_type, status_code in ERROR_STATUS_CODES:
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def gateway_error_handler(request: Request, exc: ObjectGatewayError) -> JSONResponse:
    """Turn a gateway error into a JSON error body with a matching status."""
    status_code = _status_for(exc)
    log = logger.warning if status_code < 500 else logger.error
    log(
        "Request failed",
        extra={
            "path": request.url.path,
            "status_code": status_code,
            "error": str(exc),
            "cause": repr(exc.__cause__) if exc.__cause__ else None,
        },
    )
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log anything unexpected in full but keep the response generic."""
    logger.error(
        "Unhandled exception",
        extra={"path": request.url.path, "method": request.method},
        exc_info=exc,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


def create_app() -> FastAPI:
    """Build the application: middleware, routers and error handlers."""
    settings = get_settings()

    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        description=API_DESCRIPTION,
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

    app.include_router(health.router, prefix="/health", tags=["Health"])
    app.include_router(buckets.router, prefix="/api/v1/buckets", tags=["Buckets"])
    app.include_router(objects.router, prefix="/api/v1/objects", tags=["Objects"])

    app.add_exception_handler(ObjectGatewayError, gateway_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    @app.get("/", include_in_schema=False)
    async def root():
        return {
            "message": settings.api_title,
            "version": settings.api_version,
            "docs": "/docs",
            "health": "/health",
        }

    logger.info("FastAPI application created", extra={"title": settings.api_title})
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "src.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level=get_settings().log_level.lower(),
    )
