"""API layer module.

Contains FastAPI routers and request/response schemas.
"""

from sellerdesk.api.health import router as health_router
from sellerdesk.api.pos import router as pos_router
from sellerdesk.api.products import router as products_router

__all__ = [
    "health_router",
    "pos_router",
    "products_router",
]
