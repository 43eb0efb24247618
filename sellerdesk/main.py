"""SellerDesk engine main application module.

This module initializes the FastAPI application and configures
core middleware, routers, exception handlers and startup/shutdown events.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from sellerdesk.api.health import router as health_router
from sellerdesk.api.middleware import setup_middleware
from sellerdesk.api.pos import router as pos_router
from sellerdesk.api.products import router as products_router
from sellerdesk.domain.exceptions import (
    CartLineNotFoundError,
    ConstraintViolationError,
    DomainError,
    EmptyCartError,
    NotFoundError,
    SaleFailedError,
    StockLimitError,
    ValidationError,
)
from sellerdesk.infrastructure.config import settings
from sellerdesk.infrastructure.logging import configure_logging

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup and shutdown events.

    Args:
        app: The FastAPI application instance.

    Yields:
        None after startup, cleanup happens after yield.
    """
    # Startup
    configure_logging()
    logger.info(
        "Starting SellerDesk engine",
        version=settings.api_version,
        debug=settings.debug,
    )

    yield

    # Shutdown
    scan_logger = getattr(app.state, "scan_logger", None)
    if scan_logger is not None:
        await scan_logger.drain()
    logger.info("Shutting down SellerDesk engine")


app = FastAPI(
    title="SellerDesk Engine",
    description="Catalog submission and point-of-sale backend for sellers",
    version=settings.api_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS middleware (must be added before custom middleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Setup custom middleware (request context)
setup_middleware(app)

# Include routers
app.include_router(health_router, tags=["Health"])
app.include_router(products_router)
app.include_router(pos_router)


# ============================================================================
# Custom Exception Handlers
# ============================================================================


# Most specific first; the first matching class wins.
DOMAIN_ERROR_STATUS: list[tuple[type[DomainError], int, str]] = [
    (ValidationError, status.HTTP_422_UNPROCESSABLE_ENTITY, "VALIDATION_ERROR"),
    (StockLimitError, status.HTTP_409_CONFLICT, "STOCK_LIMIT_EXCEEDED"),
    (CartLineNotFoundError, status.HTTP_404_NOT_FOUND, "CART_LINE_NOT_FOUND"),
    (EmptyCartError, status.HTTP_422_UNPROCESSABLE_ENTITY, "EMPTY_CART"),
    (SaleFailedError, status.HTTP_502_BAD_GATEWAY, "SALE_FAILED"),
    (ConstraintViolationError, status.HTTP_409_CONFLICT, "CONSTRAINT_VIOLATION"),
    (NotFoundError, status.HTTP_404_NOT_FOUND, "NOT_FOUND"),
]


def error_response(
    request: Request,
    status_code: int,
    error_code: str,
    message: str,
    details: dict | None = None,
    retryable: bool = False,
) -> JSONResponse:
    """Build the standard error envelope."""
    return JSONResponse(
        status_code=status_code,
        content={
            "error_code": error_code,
            "message": message,
            "details": details or {},
            "retryable": retryable,
            "request_id": getattr(request.state, "request_id", None),
        },
    )


@app.exception_handler(DomainError)
async def domain_exception_handler(request: Request, exc: DomainError) -> JSONResponse:
    """Map domain errors to HTTP responses."""
    status_code, error_code = status.HTTP_400_BAD_REQUEST, "DOMAIN_ERROR"
    for error_type, mapped_status, mapped_code in DOMAIN_ERROR_STATUS:
        if isinstance(exc, error_type):
            status_code, error_code = mapped_status, mapped_code
            break

    logger.info(
        "Domain error",
        path=request.url.path,
        error_code=error_code,
        error=exc.message,
    )

    return error_response(
        request,
        status_code,
        error_code,
        exc.message,
        details=exc.details,
        retryable=getattr(exc, "retryable", False),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle malformed request bodies with the standard envelope."""
    return error_response(
        request,
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "VALIDATION_ERROR",
        "Request validation failed",
        details={"errors": jsonable_errors(exc)},
    )


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    """Reduce pydantic errors to JSON-safe location/message pairs."""
    return [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg", "")}
        for error in exc.errors()
    ]


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handle HTTP exceptions with consistent format."""
    detail = exc.detail
    if isinstance(detail, dict):
        error_code = detail.get("error_code", "ERROR")
        message = detail.get("message", str(detail))
        details = detail.get("details", {})
    else:
        error_code = "ERROR"
        message = str(detail)
        details = {}

    return error_response(request, exc.status_code, error_code, message, details=details)


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle uncaught exceptions with consistent format."""
    logger.exception(
        "Unhandled exception in handler",
        path=request.url.path,
        method=request.method,
        error=str(exc),
    )

    return error_response(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "INTERNAL_ERROR",
        "An internal error occurred",
    )
