"""FastAPI application entry point."""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncGenerator
from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from audit_ai.api.v1.endpoints import health
from audit_ai.api.v1.router import api_router
from audit_ai.core.config import settings
from audit_ai.core.database import close_database, init_database
from audit_ai.core.exceptions import AppError
from audit_ai.utils.logging import get_logger
from audit_ai.utils.responses import create_error_detail

LOGGER = get_logger(__name__, level=settings.log_level)

DB_INIT_TIMEOUT_SECONDS = 30.0
GENERIC_ERROR_DETAIL = "An internal error occurred while processing the request"


class RootResponse(BaseModel):
    """Root endpoint response payload."""

    message: str = Field(..., description="Service status message")
    version: str = Field(..., description="Running application version")
    docs: str = Field(..., description="Path to the interactive API docs")
    health: str = Field(..., description="Path to the health check endpoint")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    LOGGER.info(
        "Starting application",
        extra={
            "app_name": settings.app_name,
            "version": settings.app_version,
            "environment": settings.environment,
        },
    )
    if not settings.document_intelligence.endpoint:
        LOGGER.error("AZURE_FORM_RECOGNIZER_ENDPOINT is missing, document analysis will fail")
    if not settings.supabase_jwt_secret:
        LOGGER.error("SUPABASE_JWT_SECRET is missing, every authenticated request will be rejected")

    try:
        await asyncio.wait_for(
            init_database(auto_migrate=not settings.is_production),
            timeout=DB_INIT_TIMEOUT_SECONDS,
        )
        LOGGER.info("Database initialized successfully")
    except asyncio.TimeoutError:
        LOGGER.error(f"Database initialization timed out after {DB_INIT_TIMEOUT_SECONDS}s")
    except Exception as e:
        LOGGER.error(f"Database initialization failed: {e}", exc_info=True)

    yield

    LOGGER.info("Shutting down application")
    await close_database()


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="AI-assisted document analysis and audit assistant",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)


@app.middleware("http")
async def add_request_id(request: Request, call_next):
    request_id = request.headers.get("X-Request-ID", str(uuid4()))
    request.state.request_id = request_id
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID"],
)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Map application errors onto RFC 7807 bodies."""
    context = {
        "path": request.url.path,
        "method": request.method,
        "request_id": getattr(request.state, "request_id", None),
        "error_type": type(exc).__name__,
        "status_code": exc.status_code,
    }
    if exc.original_error is not None:
        context["original_error"] = repr(exc.original_error)

    if exc.status_code >= 500:
        LOGGER.error(f"Request failed: {exc.message}", exc_info=exc, extra=context)
    else:
        LOGGER.warning(f"Request rejected: {exc.message}", extra=context)

    detail = exc.message
    if settings.is_production and exc.status_code >= 500:
        detail = GENERIC_ERROR_DETAIL

    error = create_error_detail(
        title=exc.title,
        status=exc.status_code,
        detail=detail,
        request=request,
    )
    return JSONResponse(status_code=exc.status_code, content=error.model_dump(mode="json"))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    LOGGER.error(
        f"Unhandled error: {exc}",
        exc_info=exc,
        extra={"path": request.url.path, "method": request.method},
    )
    error = create_error_detail(
        title="Internal Server Error",
        status=500,
        detail=GENERIC_ERROR_DETAIL if settings.is_production else str(exc),
        request=request,
    )
    return JSONResponse(status_code=500, content=error.model_dump(mode="json"))


app.include_router(api_router, prefix=settings.api_v1_prefix)
app.include_router(health.router, prefix="/health", tags=["Health"])


@app.get(
    "/",
    response_model=RootResponse,
    tags=["Root"],
    summary="Root endpoint",
    operation_id="get_public_root_metadata",
)
async def root() -> RootResponse:
    return RootResponse(
        message="Server is running",
        version=settings.app_version,
        docs="/docs",
        health="/health",
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "audit_ai.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
