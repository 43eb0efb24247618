"""Tests for database sale recording."""

from decimal import Decimal

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from sellerdesk.catalog.models import ProductVariant
from sellerdesk.catalog.repository import CatalogRepository
from sellerdesk.domain.exceptions import ConstraintViolationError, SaleFailedError
from sellerdesk.domain.statuses import PaymentMethod
from sellerdesk.domain.value_objects import TaxSettings
from sellerdesk.pos.cart import POSCartEngine
from sellerdesk.pos.sales import DatabaseSaleRecorder, PosSaleModel
from sellerdesk.pos.settings import POSSettings

SELLER_ID = "seller-1"


async def _stock(session_factory: async_sessionmaker[AsyncSession], sku: str) -> int:
    async with session_factory() as session:
        result = await session.execute(select(ProductVariant.stock).where(ProductVariant.sku == sku))
        return result.scalar_one()


async def _sales(session_factory: async_sessionmaker[AsyncSession]) -> int:
    async with session_factory() as session:
        result = await session.execute(select(func.count()).select_from(PosSaleModel))
        return result.scalar_one()


class TestDatabaseSaleRecorder:
    """Tests for DatabaseSaleRecorder."""

    @pytest.mark.asyncio
    async def test_records_sale_and_decrements_stock(
        self,
        session: AsyncSession,
        session_factory: async_sessionmaker[AsyncSession],
        make_product,
    ) -> None:
        """A completed sale is stored and variant stock goes down."""
        product = await make_product(
            SELLER_ID, "Shirt", [("SKU-RED-M", "Red", "M", "120", 4), ("SKU-BLUE-M", "Blue", "M", "100", 2)]
        )
        settings = POSSettings(tax=TaxSettings(enable_tax=True, tax_included_in_price=False))
        cart = POSCartEngine(SELLER_ID, settings)
        cart_product = await CatalogRepository(session).get_cart_product(product.id)
        cart.add_line(cart_product, "Red", "M")
        cart.add_line(cart_product, "Red", "M")
        cart.add_line(cart_product, "Blue", "M")

        receipt = await cart.complete_sale(DatabaseSaleRecorder(session), PaymentMethod.CASH)

        assert receipt.totals.tax == Decimal("40.80")
        assert receipt.totals.total == Decimal("380.80")
        assert cart.is_empty
        assert await _stock(session_factory, "SKU-RED-M") == 2
        assert await _stock(session_factory, "SKU-BLUE-M") == 1

        async with session_factory() as check:
            sale = (await check.execute(select(PosSaleModel))).scalar_one()
        assert sale.seller_id == SELLER_ID
        assert sale.payment_method == "cash"
        assert sale.subtotal == Decimal("340.00")
        assert [line["quantity"] for line in sale.lines] == [2, 1]

    @pytest.mark.asyncio
    async def test_oversell_records_nothing(
        self,
        session: AsyncSession,
        session_factory: async_sessionmaker[AsyncSession],
        make_product,
    ) -> None:
        """Selling more than storage holds rolls everything back."""
        product = await make_product(
            SELLER_ID, "Shirt", [("SKU-RED-M", "Red", "M", "120", 3), ("SKU-BLUE-M", "Blue", "M", "100", 2)]
        )
        cart = POSCartEngine(SELLER_ID)
        cart_product = await CatalogRepository(session).get_cart_product(product.id)
        cart.add_line(cart_product, "Blue", "M")
        cart.add_line(cart_product, "Red", "M")
        cart.add_line(cart_product, "Red", "M")

        # Another till sold two Red/M in the meantime.
        await CatalogRepository(session).patch_variant(
            cart.get_line(f"{product.id}-Red-M").variant_id, stock=1
        )

        with pytest.raises(SaleFailedError) as exc_info:
            await cart.complete_sale(DatabaseSaleRecorder(session), PaymentMethod.CASH)

        assert isinstance(exc_info.value.__cause__, ConstraintViolationError)
        assert exc_info.value.__cause__.constraint == "ck_product_variants_stock"
        assert cart.item_count == 3
        assert await _sales(session_factory) == 0
        assert await _stock(session_factory, "SKU-BLUE-M") == 2
        assert await _stock(session_factory, "SKU-RED-M") == 1
