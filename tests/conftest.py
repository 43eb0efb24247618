"""Shared fixtures for database-backed tests.

Every test gets its own SQLite database file, so sessions opened by the
code under test (background scan logging, API requests) see the same
committed data as the test itself.
"""

from collections.abc import AsyncGenerator
from datetime import datetime, timezone
from decimal import Decimal

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

import sellerdesk.catalog.models  # noqa: F401
import sellerdesk.pos.barcode  # noqa: F401
import sellerdesk.pos.sales  # noqa: F401
import sellerdesk.pos.settings  # noqa: F401
from sellerdesk.catalog.models import Product, ProductVariant
from sellerdesk.infrastructure.database import Base


# ============================================================================
# Database Fixtures
# ============================================================================


@pytest.fixture
async def engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    """Create a fresh SQLite database with all tables."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'sellerdesk.db'}",
        poolclass=NullPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the test database."""
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Database session for the test body."""
    async with session_factory() as session:
        yield session


# ============================================================================
# Sample Data Fixtures
# ============================================================================


@pytest.fixture
def make_product(session_factory: async_sessionmaker[AsyncSession]):
    """Insert a product with variants directly, bypassing submission.

    Each variant spec is ``(sku, option1, option2, price, stock)``; ``barcodes``
    maps SKUs to barcodes.
    """

    async def _make(
        seller_id: str,
        name: str,
        variants: list[tuple[str, str | None, str | None, str, int]],
        barcodes: dict[str, str] | None = None,
        deleted: bool = False,
    ) -> Product:
        barcodes = barcodes or {}
        async with session_factory() as session:
            product = Product(
                seller_id=seller_id,
                name=name,
                price=Decimal(variants[0][3]),
                deleted_at=datetime.now(timezone.utc) if deleted else None,
            )
            session.add(product)
            await session.flush()
            for sku, option1, option2, price, stock in variants:
                session.add(
                    ProductVariant(
                        product_id=product.id,
                        sku=sku,
                        barcode=barcodes.get(sku),
                        option1_value=option1,
                        option2_value=option2,
                        variant_name=" / ".join(o for o in (option1, option2) if o)
                        or "Default",
                        price=Decimal(price),
                        stock=stock,
                    )
                )
            await session.commit()
            return product

    return _make
