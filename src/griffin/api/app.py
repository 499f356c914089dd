"""FastAPI application factory."""

import logging
import time
import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from griffin import __version__
from griffin.api.contracts import ErrorBody, ErrorResponse
from griffin.api.dependencies import Services, build_services
from griffin.config import Settings, get_settings
from griffin.errors import AppError, ErrorCode

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    services: Services = app.state.services
    await services.tokens.initialize(services.token_sources)
    logger.info(f"Griffin orchestrator ready (dry_run={services.settings.dry_run})")
    yield
    # Shutdown
    logger.info("Griffin orchestrator stopped")


def error_response(
    request: Request,
    status_code: int,
    code: str,
    message: str,
    details: Optional[dict[str, Any]] = None,
) -> JSONResponse:
    """Build the uniform error envelope."""
    body = ErrorResponse(
        error=ErrorBody(
            code=code,
            message=message,
            details=details,
            timestamp=datetime.now(timezone.utc),
            request_id=getattr(request.state, "request_id", None),
        )
    )
    response = JSONResponse(
        status_code=status_code,
        content=body.model_dump(mode="json", by_alias=True, exclude_none=True),
    )
    if body.error.request_id:
        response.headers[REQUEST_ID_HEADER] = body.error.request_id
    return response


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def handle_app_error(request: Request, exc: AppError):
        logger.info(f"Request error: {exc.code.value} {exc.status_code} {exc.message}")
        return error_response(request, exc.status_code, exc.code.value, exc.message, exc.details)

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        errors = [
            {"loc": list(e.get("loc", ())), "msg": e.get("msg"), "type": e.get("type")}
            for e in exc.errors()
        ]
        return error_response(
            request, 400, ErrorCode.VALIDATION_ERROR.value, "Validation failed", {"errors": errors}
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            return error_response(request, 404, ErrorCode.NOT_FOUND.value, "Endpoint not found")
        code = "METHOD_NOT_ALLOWED" if exc.status_code == 405 else f"HTTP_{exc.status_code}"
        return error_response(request, exc.status_code, code, str(exc.detail))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return error_response(
            request, 500, ErrorCode.INTERNAL_SERVER_ERROR.value, "An unexpected error occurred"
        )


def register_request_logging(app: FastAPI) -> None:
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id
        started = time.monotonic()

        logger.info(f"Incoming request {request_id}: {request.method} {request.url.path}")
        response = await call_next(request)
        duration = (time.monotonic() - started) * 1000

        response.headers[REQUEST_ID_HEADER] = request_id
        logger.info(
            f"Request completed {request_id}: {request.method} {request.url.path} "
            f"-> {response.status_code} ({duration:.0f}ms)"
        )
        return response


def create_app(
    settings: Optional[Settings] = None,
    services: Optional[Services] = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or (services.settings if services else get_settings())
    services = services or build_services(settings)

    app = FastAPI(
        title="Griffin Orchestrator API",
        description="Cross-chain payment intents with route discovery",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.services = services

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_request_logging(app)
    register_exception_handlers(app)

    # Register routes
    from griffin.api.routes import chains, health, intents, quotes

    app.include_router(intents.router, prefix="/api/v1")
    app.include_router(quotes.router, prefix="/api/v1")
    app.include_router(chains.router, prefix="/api/v1")
    app.include_router(health.router, prefix="/api/v1")

    return app
