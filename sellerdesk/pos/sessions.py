"""POS sessions.

A session binds one seller's cart to the settings read when the session
opened. Sessions live in process memory; a restart drops open carts.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from uuid import uuid4

import structlog

from sellerdesk.domain.base import Entity
from sellerdesk.domain.exceptions import PosSessionNotFoundError
from sellerdesk.pos.cart import POSCartEngine
from sellerdesk.pos.settings import POSSettings

logger = structlog.get_logger()


@dataclass(eq=False)
class PosSession(Entity[str]):
    """Open POS session.

    Attributes:
        id: Session ID.
        seller_id: Operating seller.
        cart: Session cart (holds the session's settings).
        opened_at: When the session opened.
    """

    seller_id: str
    cart: POSCartEngine
    opened_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def settings(self) -> POSSettings:
        return self.cart.settings


class PosSessionRegistry:
    """In-memory registry of open POS sessions."""

    def __init__(self) -> None:
        self._sessions: dict[str, PosSession] = {}

    def open(self, seller_id: str, settings: POSSettings) -> PosSession:
        """Open a session with an empty cart."""
        session = PosSession(
            id=str(uuid4()),
            seller_id=seller_id,
            cart=POSCartEngine(seller_id, settings),
        )
        self._sessions[session.id] = session
        logger.info("POS session opened", session_id=session.id, seller_id=seller_id)
        return session

    def get(self, session_id: str) -> PosSession:
        """Get a session.

        Raises:
            PosSessionNotFoundError: If no such session is open.
        """
        session = self._sessions.get(session_id)
        if session is None:
            raise PosSessionNotFoundError(session_id)
        return session

    def close(self, session_id: str) -> PosSession:
        """Close and forget a session.

        Raises:
            PosSessionNotFoundError: If no such session is open.
        """
        session = self.get(session_id)
        del self._sessions[session_id]
        logger.info("POS session closed", session_id=session_id)
        return session

    def apply_settings(self, seller_id: str, settings: POSSettings) -> int:
        """Push saved settings into the seller's open sessions.

        Returns:
            Number of sessions updated.
        """
        updated = 0
        for session in self._sessions.values():
            if session.seller_id == seller_id:
                session.cart.apply_settings(settings)
                updated += 1
        return updated


# Global registry instance
_registry: PosSessionRegistry | None = None


def get_pos_session_registry() -> PosSessionRegistry:
    """Get POS session registry singleton."""
    global _registry
    if _registry is None:
        _registry = PosSessionRegistry()
    return _registry
