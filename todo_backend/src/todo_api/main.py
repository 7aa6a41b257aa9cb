from __future__ import annotations

import logging
import uuid
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional, Sequence

from fastapi import Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .auth import get_basic_auth_dependency
from .exceptions import NotFoundError, StoreError
from .logging_utils import configure_logging, reset_request_id, set_request_id
from .repositories import Stores, build_stores
from .routers import secrets as secrets_router
from .routers import todos as todos_router
from .settings import Settings, get_settings
from .utils import error_response

logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "health", "description": "Service health and status endpoints."},
    {"name": "todos", "description": "CRUD operations for Todo items."},
    {"name": "secrets", "description": "Write-only storage of opaque secret keys."},
]

_HTTP_ERROR_KINDS = {
    status.HTTP_401_UNAUTHORIZED: "Unauthorized",
    status.HTTP_404_NOT_FOUND: "NotFound",
}


def _summarize_errors(errors: Sequence[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Keep type/loc/msg only; the rejected input may not be encodable as JSON."""
    return [{key: err[key] for key in ("type", "loc", "msg") if key in err} for err in errors]


def _install_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """
        Malformed bodies and non-integer path ids are client errors (400).

        Response format:
            {
                "object": "error",
                "error": "ValidationError",
                "message": "Request validation failed",
                "detail": [... pydantic/fastapi error details ...]
            }
        """
        logger.info("Rejected %s %s: validation failed", request.method, request.url.path)
        return error_response(
            status.HTTP_400_BAD_REQUEST,
            "ValidationError",
            "Request validation failed",
            detail=_summarize_errors(exc.errors()),
        )

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
        return error_response(status.HTTP_404_NOT_FOUND, "NotFound", str(exc))

    @app.exception_handler(StoreError)
    async def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
        logger.error("Store failure on %s %s", request.method, request.url.path, exc_info=exc)
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "StoreError", str(exc))

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return error_response(
            exc.status_code,
            _HTTP_ERROR_KINDS.get(exc.status_code, "HTTPError"),
            str(exc.detail),
            headers=exc.headers,
        )

    # Runs in ServerErrorMiddleware, which re-raises the exception after sending this response
    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "InternalError", "Internal server error")


# PUBLIC_INTERFACE
def create_app(settings: Optional[Settings] = None, stores: Optional[Stores] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Configuration; read from the environment when omitted.
        stores: Pre-built stores. When omitted they are built from settings at
            startup (lifespan), which also bootstraps the database schema.

    Returns:
        The configured FastAPI instance.
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if getattr(app.state, "stores", None) is None:
            app.state.stores = build_stores(settings)
        logger.info(
            "Todo backend started (backend=%s, basic_auth=%s, secrets=%s)",
            settings.persistence_backend,
            settings.enable_basic_auth,
            settings.enable_secrets,
        )
        yield

    app = FastAPI(
        title="Todo Backend",
        description="Backend API service for managing todos backed by a relational table.",
        version="0.2.0",
        openapi_tags=openapi_tags,
        lifespan=lifespan,
        dependencies=[Depends(get_basic_auth_dependency(settings))],
    )
    app.state.settings = settings
    app.state.stores = stores

    # Configure CORS based on settings (.env -> CORS_ALLOW_ORIGINS), with '*' fallback
    allow_all = (settings.cors_allow_origins == ["*"]) or (len(settings.cors_allow_origins) == 0)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if allow_all else settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def request_id_middleware(request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        token = set_request_id(request_id)
        try:
            response = await call_next(request)
        finally:
            reset_request_id(token)
        response.headers["X-Request-ID"] = request_id
        return response

    _install_exception_handlers(app)

    # PUBLIC_INTERFACE
    @app.get("/", summary="Health Check", tags=["health"])
    def health_check():
        """
        Health check endpoint.

        Returns:
            A JSON object indicating service health.
        """
        return {"message": "Healthy", "backend": settings.persistence_backend}

    app.include_router(todos_router.router)
    if settings.enable_secrets:
        app.include_router(secrets_router.router)
    return app


app = create_app()
