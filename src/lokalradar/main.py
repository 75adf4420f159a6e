"""
Lokalradar - relocation risk from yearly company registry extracts.

FastAPI application entry point.
"""

import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from lokalradar import __version__
from lokalradar.api.state import AnalysisState
from lokalradar.config import settings
from lokalradar.exceptions import AnalysisError, FailureReason

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


STATUS_BY_REASON = {
    FailureReason.NO_USABLE_FILES: 422,
    FailureReason.NOT_ENOUGH_DATA: 422,
    FailureReason.NO_DATASET: 409,
    FailureReason.UNKNOWN_COMPANY: 404,
}


class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    """Reject request bodies larger than the configured upload limit."""

    async def dispatch(self, request: Request, call_next) -> Response:
        max_size = settings.max_upload_bytes

        content_length = request.headers.get("content-length")
        if content_length:
            try:
                if int(content_length) > max_size:
                    return JSONResponse(
                        status_code=413,
                        content={
                            "error": "Request entity too large",
                            "message": f"Request body exceeds maximum size of {max_size // 1024}KB",
                            "max_size_bytes": max_size,
                        },
                    )
            except ValueError:
                return JSONResponse(
                    status_code=400,
                    content={
                        "error": "Bad request",
                        "message": "Invalid Content-Length header",
                    },
                )

        return await call_next(request)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log each request with its status and duration."""

    async def dispatch(self, request: Request, call_next) -> Response:
        start_time = time.time()

        request_id = request.headers.get("X-Request-ID", f"req_{int(time.time() * 1000)}")

        logger.info(
            f"Request: {request.method} {request.url.path} "
            f"[{request_id}] from {request.client.host if request.client else 'unknown'}"
        )

        response = await call_next(request)

        process_time = time.time() - start_time
        response.headers["X-Request-ID"] = request_id
        response.headers["X-Process-Time"] = str(process_time)

        logger.info(
            f"Response: {request.method} {request.url.path} "
            f"[{request_id}] status={response.status_code} time={process_time:.3f}s"
        )

        return response


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    logger.info("Starting lokalradar...")

    # Analysis state is process-local and starts empty
    app.state.analysis = AnalysisState.from_settings(settings)

    logger.info(
        f"lokalradar started (k={settings.cluster_count}, windows={settings.move_windows}, "
        f"reference year policy={settings.reference_year_policy})"
    )

    yield

    logger.info("Shutting down lokalradar...")
    app.state.analysis = None
    logger.info("lokalradar shutdown complete")


app = FastAPI(
    title="Lokalradar",
    description="Relocation risk analysis over yearly company registry extracts",
    version=__version__,
    lifespan=lifespan,
    # Disable docs in production
    docs_url="/docs" if not settings.is_production else None,
    redoc_url="/redoc" if not settings.is_production else None,
    openapi_url="/openapi.json" if not settings.is_production else None,
)

# Request size limit middleware
app.add_middleware(RequestSizeLimitMiddleware)

# Request logging middleware
app.add_middleware(RequestLoggingMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=False,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "X-Request-ID"],
    expose_headers=["X-Request-ID", "X-Process-Time"],
    max_age=600,
)


@app.exception_handler(AnalysisError)
async def analysis_error_handler(request: Request, exc: AnalysisError) -> JSONResponse:
    """Map typed analysis failures to HTTP status codes."""
    status_code = STATUS_BY_REASON.get(exc.reason, 422)
    logger.warning(f"{request.method} {request.url.path} failed: {exc}")
    return JSONResponse(status_code=status_code, content=exc.to_dict())


@app.get("/health")
async def health_check(request: Request) -> dict[str, Any]:
    """Liveness check, including whether a dataset is loaded."""
    state: AnalysisState = request.app.state.analysis
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": __version__,
        "dataset_loaded": state.has_dataset,
        "ingested_at": state.ingested_at.isoformat() if state.ingested_at else None,
        "clustering_available": state.clustering is not None,
    }


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with API information."""
    return {
        "name": "Lokalradar",
        "description": "Relocation risk analysis over yearly company registry extracts",
        "version": __version__,
        "docs": "/docs",
        "health": "/health",
    }


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle uncaught exceptions without leaking internals in production."""
    logger.exception(f"Unhandled exception: {exc}")

    if settings.is_production:
        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal server error",
                "message": "An unexpected error occurred.",
            },
        )

    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "message": str(exc),
            "type": type(exc).__name__,
        },
    )


# Import and include routers
from lokalradar.api.routes import (  # noqa: E402
    changes_router,
    clusters_router,
    datasets_router,
)

app.include_router(datasets_router, prefix="/api/v1", tags=["datasets"])
app.include_router(changes_router, prefix="/api/v1", tags=["changes"])
app.include_router(clusters_router, prefix="/api/v1", tags=["clusters"])


def run() -> None:
    """Serve the API with uvicorn."""
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)


if __name__ == "__main__":
    run()
