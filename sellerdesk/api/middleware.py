"""API middleware for SellerDesk.

Binds per-request log context: the correlation id every response echoes
and, for seller-scoped routes, the seller id taken from the path.
"""

import re
import time
from typing import Callable
from uuid import uuid4

import structlog
from fastapi import FastAPI, Request, Response

logger = structlog.get_logger()

_SELLER_PATH = re.compile(r"^/sellers/([^/]+)")


def seller_id_from_path(path: str) -> str | None:
    """Extract the seller id of a ``/sellers/{seller_id}/...`` route."""
    match = _SELLER_PATH.match(path)
    return match.group(1) if match else None


# ============================================================================
# Request Context Middleware
# ============================================================================


class RequestContextMiddleware:
    """Bind request id and seller id to the structlog context.

    The request id comes from the ``X-Request-ID`` header or is generated,
    is stored on ``request.state`` for the error envelope and is echoed on
    the response.
    """

    HEADER_NAME = "X-Request-ID"

    async def __call__(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(self.HEADER_NAME) or str(uuid4())
        request.state.request_id = request_id

        context = {"request_id": request_id}
        seller_id = seller_id_from_path(request.url.path)
        if seller_id:
            context["seller_id"] = seller_id
        structlog.contextvars.bind_contextvars(**context)

        started = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
        finally:
            log = logger.warning if status_code >= 500 else logger.info
            log(
                "Request completed",
                method=request.method,
                path=request.url.path,
                status_code=status_code,
                duration_ms=round((time.perf_counter() - started) * 1000, 2),
            )
            structlog.contextvars.unbind_contextvars(*context)

        response.headers[self.HEADER_NAME] = request_id
        return response


# ============================================================================
# Middleware Setup
# ============================================================================


def setup_middleware(app: FastAPI) -> None:
    """Configure custom middleware for the application.

    Args:
        app: FastAPI application instance.
    """
    app.middleware("http")(RequestContextMiddleware())
