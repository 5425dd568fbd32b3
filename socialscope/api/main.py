"""FastAPI application entry point."""
from contextlib import asynccontextmanager
from collections.abc import AsyncGenerator

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from socialscope.api.routes import health, profiles, scrape, webhooks
from socialscope.application.errors import (
    MalformedWebhookError,
    ProfileNotFoundError,
    ScrapeLaunchError,
    ScrapeValidationError,
    WebhookAuthError,
)
from socialscope.domain.state_machine.scrape_state_machine import InvalidStateTransitionError
from socialscope.infrastructure.logging.setup import configure_logging

logger = structlog.get_logger(__name__)

# Every error leaves the API as {"error": message}.
ERROR_STATUS_CODES: dict[type[Exception], int] = {
    ScrapeValidationError: status.HTTP_400_BAD_REQUEST,
    MalformedWebhookError: status.HTTP_400_BAD_REQUEST,
    WebhookAuthError: status.HTTP_401_UNAUTHORIZED,
    ProfileNotFoundError: status.HTTP_404_NOT_FOUND,
    InvalidStateTransitionError: status.HTTP_409_CONFLICT,
    ScrapeLaunchError: status.HTTP_502_BAD_GATEWAY,
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    configure_logging()
    logger.info("socialscope_starting")
    yield
    logger.info("socialscope_stopping")


async def _application_error_handler(request: Request, exc: Exception) -> JSONResponse:
    status_code = ERROR_STATUS_CODES.get(type(exc), status.HTTP_500_INTERNAL_SERVER_ERROR)
    logger.warning(
        "request_failed",
        path=request.url.path,
        status_code=status_code,
        error_type=type(exc).__name__,
        error=str(exc),
    )
    return JSONResponse(status_code=status_code, content={"error": str(exc)})


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    first = exc.errors()[0] if exc.errors() else {}
    location = ".".join(str(part) for part in first.get("loc", ()))
    message = f"{location}: {first.get('msg', 'Invalid request')}" if location else "Invalid request"
    logger.warning("request_validation_failed", path=request.url.path, error=message)
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": message})


async def _http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


def create_app() -> FastAPI:
    app = FastAPI(
        title="SocialScope",
        description="Asynchronous scrape orchestration for social media profiles.",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    for error_type in ERROR_STATUS_CODES:
        app.add_exception_handler(error_type, _application_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, _http_error_handler)

    app.include_router(health.router)
    app.include_router(scrape.router)
    app.include_router(webhooks.router)
    app.include_router(profiles.router)

    return app


app = create_app()
