"""Blue Carbon registry FastAPI application."""

import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from bluecarbon.api.auth import request_logging_middleware
from bluecarbon.config import get_config
from bluecarbon.utils import (
    BlueCarbonError,
    CollaboratorUnavailable,
    ConflictError,
    InvalidInput,
    InvalidStateTransition,
    NotFound,
    PermissionDenied,
    WorkflowFailed,
)

logger = logging.getLogger(__name__)

# Most specific first; the first isinstance match wins
_ERROR_STATUS: list[tuple[type[BlueCarbonError], int]] = [
    (InvalidInput, 422),
    (NotFound, 404),
    (PermissionDenied, 403),
    (InvalidStateTransition, 409),
    (ConflictError, 409),
    (CollaboratorUnavailable, 503),
    (WorkflowFailed, 503),
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown lifecycle handler."""
    config = get_config()

    if not config.demo_mode and not config.api_key:
        logger.critical("BLUECARBON_API_KEY is not set. Set it in .env or export it. Use BLUECARBON_DEMO_MODE=true to skip.")
        sys.exit(1)

    logger.info(
        "Blue Carbon API starting - demo_mode=%s, ledger_chain=%d",
        config.demo_mode, config.ledger_chain_id,
    )
    yield
    logger.info("Blue Carbon API shutdown")


async def domain_error_handler(request: Request, exc: BlueCarbonError) -> JSONResponse:
    """Translate domain errors into HTTP responses."""
    status_code = next((code for cls, code in _ERROR_STATUS if isinstance(exc, cls)), 500)
    body: dict = {"detail": str(exc), "error": type(exc).__name__}
    if isinstance(exc, WorkflowFailed) and exc.ledger_transactions:
        body["ledger_transactions"] = exc.ledger_transactions
    if status_code >= 500:
        logger.error("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc)
    return JSONResponse(status_code=status_code, content=body)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """422 for malformed request bodies, without echoing rejected input values.

    Rejected values can be NaN or Infinity, which a JSON response cannot carry.
    """
    errors = [{k: v for k, v in err.items() if k in ("type", "loc", "msg")} for err in exc.errors()]
    return JSONResponse(status_code=422, content={"detail": jsonable_encoder(errors)})


def create_app() -> FastAPI:
    """Build and configure the FastAPI application."""
    app = FastAPI(
        title="Blue Carbon Registry API",
        description="Coastal blue carbon project registry - sequestration calculator, credibility scoring and verification",
        version="1.0.0",
        lifespan=lifespan,
    )

    config = get_config()

    # CORS - restricted to configured origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-User-Id"],
    )

    # Request logging and X-Request-ID middleware
    app.add_middleware(BaseHTTPMiddleware, dispatch=request_logging_middleware)

    app.add_exception_handler(BlueCarbonError, domain_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)

    # Import and include routers
    from bluecarbon.api.routes.calculator import router as calculator_router
    from bluecarbon.api.routes.health import router as health_router
    from bluecarbon.api.routes.projects import router as projects_router

    app.include_router(calculator_router)
    app.include_router(projects_router)
    app.include_router(health_router)

    return app


app = create_app()
