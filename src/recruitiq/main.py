"""RecruitIQ tenant isolation - FastAPI application

This module creates and configures the FastAPI application, including:
- Middleware (request ID correlation, tenant context for logging)
- Exception handlers translating tenancy errors to HTTP responses
- Health and metrics endpoints
"""

import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from sqlalchemy.exc import SQLAlchemyError

from .config import get_settings
from .observability.logging_config import configure_logging
from .observability.middleware import RequestIDMiddleware
from .tenancy.errors import (
    AuthenticationRequired,
    NotFoundOrForbidden,
    TenantMismatch,
    UnsupportedTenantOperation,
)
from .tenancy.middleware import TenantContextMiddleware
from .tenancy.router import router as tenancy_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    logger.info("RecruitIQ API starting up...")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    yield
    logger.info("RecruitIQ API shutting down...")


# =============================================================================
# EXCEPTION HANDLERS
# =============================================================================

async def authentication_required_handler(request: Request, exc: AuthenticationRequired) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content={"error": "authentication_required", "message": str(exc)},
        headers={"WWW-Authenticate": "Bearer"},
    )


async def not_found_handler(request: Request, exc: NotFoundOrForbidden) -> JSONResponse:
    """Missing and foreign records are indistinguishable to the client."""
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"error": "not_found", "message": str(exc)},
    )


async def tenant_mismatch_handler(request: Request, exc: TenantMismatch) -> JSONResponse:
    # Tenant ids stay in the logs, never in the response body
    return JSONResponse(
        status_code=status.HTTP_403_FORBIDDEN,
        content={"error": "tenant_mismatch", "message": "Operation not permitted for this organization"},
    )


async def unsupported_operation_handler(request: Request, exc: UnsupportedTenantOperation) -> JSONResponse:
    logger.error(f"Unsupported tenant operation on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "internal_error", "message": "An unexpected error occurred. Please try again later."},
    )


async def database_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Log the full database error but return a generic message."""
    logger.error(f"Database error on {request.method} {request.url.path}", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "database_error", "message": "A database error occurred. Please try again later."},
    )


# =============================================================================
# APPLICATION FACTORY
# =============================================================================

def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()
    configure_logging(level=settings.LOG_LEVEL, json_format=settings.LOG_JSON)

    app = FastAPI(
        title="RecruitIQ API",
        description="Multi-tenant applicant tracking with row-level tenant isolation",
        version="0.1.0",
        docs_url="/docs" if settings.ENVIRONMENT != "production" else None,
        redoc_url=None,
        lifespan=lifespan,
    )

    # Added last, runs first: the request id must exist before tenant logging
    app.add_middleware(TenantContextMiddleware)
    app.add_middleware(RequestIDMiddleware)

    app.add_exception_handler(AuthenticationRequired, authentication_required_handler)
    app.add_exception_handler(NotFoundOrForbidden, not_found_handler)
    app.add_exception_handler(TenantMismatch, tenant_mismatch_handler)
    app.add_exception_handler(UnsupportedTenantOperation, unsupported_operation_handler)
    app.add_exception_handler(SQLAlchemyError, database_exception_handler)

    app.include_router(tenancy_router, prefix="/api/v1")

    @app.get("/health", tags=["Observability"])
    async def health() -> dict[str, Any]:
        return {"status": "ok", "environment": settings.ENVIRONMENT}

    @app.get("/metrics", include_in_schema=False)
    async def metrics() -> Response:
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "recruitiq.main:app",
        host="0.0.0.0",
        port=8000,
        log_level=get_settings().LOG_LEVEL.lower(),
    )
