"""
Middleware configuration for the lifegrid server.

Centralizes CORS configuration, request logging, and global exception handlers.
"""

import json
import logging
import time

from fastapi import FastAPI, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from lifegrid.config.infra_settings import get_infra_settings
from lifegrid.exceptions import LifegridError

logger = logging.getLogger(__name__)
request_logger = logging.getLogger("api.requests")


def _get_cors_origins_from_config() -> list[str]:
    """
    Get CORS origins.

    Priority:
    1. OmegaConf security.cors_origins (from config_settings.yaml or config.defaults.yaml)
    2. CORS_ORIGINS environment variable (fallback, defaults to '*')
    """
    try:
        from lifegrid.config.omegaconf_settings import get_settings_store
        settings = get_settings_store()
        cors_origins = settings.get_sync("security.cors_origins", "")

        if cors_origins and str(cors_origins).strip():
            origins = [o.strip() for o in str(cors_origins).split(",") if o.strip()]
            if origins:
                return origins
    except Exception as e:
        logger.warning(f"Could not read CORS from OmegaConf: {e}")

    return list(get_infra_settings().CORS_ORIGINS) or ["*"]


def setup_cors_middleware(app: FastAPI) -> None:
    """Configure CORS middleware for the FastAPI application."""
    allowed_origins = _get_cors_origins_from_config()
    logger.info(f"CORS configured with origins: {allowed_origins}")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        # Credentials cannot be combined with a wildcard origin
        allow_credentials="*" not in allowed_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware to log API requests and JSON responses.

    Only /api paths are logged. Excludes:
    - The SSE frame stream
    - Binary responses (raw cell buffers)
    """

    # Paths to exclude from logging
    EXCLUDED_PATHS = {
        "/api/universe/events",
    }

    # Binary content types to exclude
    BINARY_CONTENT_TYPES = {
        "image/",
        "application/octet-stream",
        "text/event-stream",
    }

    MAX_BODY_CHARS = 500

    def should_log_request(self, path: str) -> bool:
        """Determine if request should be logged."""
        if not path.startswith("/api"):
            return False
        for excluded in self.EXCLUDED_PATHS:
            if path.startswith(excluded):
                return False
        return True

    def should_log_response_body(self, content_type: str) -> bool:
        """Determine if response body should be logged."""
        if not content_type:
            return True
        for binary_type in self.BINARY_CONTENT_TYPES:
            if content_type.startswith(binary_type):
                return False
        return True

    async def dispatch(self, request: Request, call_next):
        """Process request and log request/response information."""
        path = request.url.path

        if not self.should_log_request(path):
            return await call_next(request)

        start_time = time.time()
        request_logger.info(f"-> {request.method} {path}")

        response = await call_next(request)

        duration_ms = (time.time() - start_time) * 1000
        content_type = response.headers.get("content-type", "")

        if not self.should_log_response_body(content_type) or response.status_code == 204:
            request_logger.info(
                f"<- {request.method} {path} - {response.status_code} - {duration_ms:.2f}ms"
            )
            return response

        try:
            response_body = b""
            async for chunk in response.body_iterator:
                response_body += chunk
        except Exception as e:
            request_logger.warning(
                f"<- {request.method} {path} - {response.status_code} - {duration_ms:.2f}ms "
                f"(error reading response: {e})"
            )
            raise

        try:
            compact_json = json.dumps(json.loads(response_body), separators=(',', ':'))
            if len(compact_json) > self.MAX_BODY_CHARS:
                compact_json = compact_json[:self.MAX_BODY_CHARS] + "..."
            request_logger.info(
                f"<- {request.method} {path} - {response.status_code} - {duration_ms:.2f}ms | {compact_json}"
            )
        except (json.JSONDecodeError, UnicodeDecodeError):
            request_logger.info(
                f"<- {request.method} {path} - {response.status_code} - {duration_ms:.2f}ms "
                f"(non-JSON response)"
            )

        # Recreate response with the body we consumed
        return Response(
            content=response_body,
            status_code=response.status_code,
            headers=dict(response.headers),
            media_type=response.media_type,
        )


def setup_exception_handlers(app: FastAPI) -> None:
    """Configure global exception handlers for the FastAPI application."""

    @app.exception_handler(LifegridError)
    async def lifegrid_exception_handler(request: Request, exc: LifegridError):
        """Map domain errors to structured error responses."""
        logger.warning(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc}")
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "detail": str(exc),
                "error_type": exc.error_type,
                "error_category": "universe",
            }
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Return request validation failures in the same structured shape."""
        return JSONResponse(
            status_code=422,
            content={
                "detail": jsonable_encoder(exc.errors()),
                "error_type": "validation_error",
                "error_category": "request",
            }
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        """Handle HTTP exceptions with structured error response."""
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail}
        )


def setup_middleware(app: FastAPI) -> None:
    """Set up all middleware for the FastAPI application."""
    app.add_middleware(RequestLoggingMiddleware)
    logger.info("Request logging middleware enabled")

    setup_cors_middleware(app)

    setup_exception_handlers(app)
    logger.info("Middleware and exception handlers configured")
