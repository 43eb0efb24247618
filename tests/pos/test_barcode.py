"""Tests for barcode resolution, scan logging and barcode generation."""

from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from sellerdesk.catalog.repository import CatalogRepository
from sellerdesk.domain.exceptions import StockLimitError
from sellerdesk.domain.statuses import ScanSource
from sellerdesk.pos.barcode import (
    BarcodeLookupResult,
    BarcodeResolver,
    BarcodeScanModel,
    ScanLogger,
    ean13_check_digit,
    generate_product_barcode,
    normalize_code,
    scan_into_cart,
)
from sellerdesk.pos.cart import POSCartEngine
from sellerdesk.pos.settings import POSSettings

SELLER_ID = "seller-1"


@pytest.fixture
async def shirt(make_product):
    """Shirt with two sized variants; Red/M carries a barcode."""
    return await make_product(
        SELLER_ID,
        "Shirt",
        [("ABCD1234-SHIRT-RED-M", "Red", "M", "120", 2), ("ABCD1234-SHIRT-BLUE-M", "Blue", "M", "100", 5)],
        barcodes={"ABCD1234-SHIRT-RED-M": "4800016644504"},
    )


@pytest.fixture
async def mug(make_product):
    """Mug with a single attribute-less variant."""
    return await make_product(SELLER_ID, "Mug", [("EF567890-MUG", None, None, "150", 3)])


class TestNormalizeCode:
    """Tests for scan code normalization."""

    def test_trim_and_uppercase(self) -> None:
        """Codes are trimmed and uppercased."""
        assert normalize_code("  abcd-12 \n") == "ABCD-12"
        assert normalize_code(None) == ""


class TestBarcodeResolver:
    """Tests for BarcodeResolver."""

    @pytest.mark.asyncio
    async def test_lookup_by_barcode(self, session: AsyncSession, shirt) -> None:
        """Variant barcodes are matched first."""
        result = await BarcodeResolver(CatalogRepository(session)).lookup(
            SELLER_ID, " 4800016644504 "
        )
        assert result.is_found
        assert result.product_id == shirt.id
        assert (result.color, result.size) == ("Red", "M")
        assert result.name == "Shirt"
        assert result.price == Decimal("120")

    @pytest.mark.asyncio
    async def test_lookup_by_sku_case_insensitive(self, session: AsyncSession, shirt) -> None:
        """SKUs match after uppercasing the scanned code."""
        result = await BarcodeResolver(CatalogRepository(session)).lookup(
            SELLER_ID, "abcd1234-shirt-blue-m"
        )
        assert result.is_found
        assert result.color == "Blue"
        assert result.sku == "ABCD1234-SHIRT-BLUE-M"

    @pytest.mark.asyncio
    async def test_other_sellers_never_match(self, session: AsyncSession, shirt) -> None:
        """Lookups are scoped to the scanning seller."""
        result = await BarcodeResolver(CatalogRepository(session)).lookup(
            "seller-2", "4800016644504"
        )
        assert not result.is_found
        assert result.code == "4800016644504"

    @pytest.mark.asyncio
    async def test_deleted_products_never_match(self, session: AsyncSession, make_product) -> None:
        """Soft-deleted products are not scannable."""
        await make_product(SELLER_ID, "Old", [("OLD-1", None, None, "10", 1)], deleted=True)
        result = await BarcodeResolver(CatalogRepository(session)).lookup(SELLER_ID, "OLD-1")
        assert not result.is_found

    @pytest.mark.asyncio
    async def test_blank_code_skips_io(self) -> None:
        """Blank codes are not found without touching storage."""
        repository = MagicMock()
        repository.find_variant_by_code = AsyncMock()

        result = await BarcodeResolver(repository).lookup(SELLER_ID, "   ")

        assert result == BarcodeLookupResult(is_found=False)
        repository.find_variant_by_code.assert_not_called()


class TestScanLogger:
    """Tests for the background scan log."""

    @pytest.mark.asyncio
    async def test_writes_scan_row(
        self,
        session_factory: async_sessionmaker[AsyncSession],
    ) -> None:
        """Scan outcomes are written in the background."""
        scan_logger = ScanLogger(session_factory)
        result = BarcodeLookupResult(is_found=False, code="UNKNOWN-1")

        scan_logger.log(SELLER_ID, result, scan_source=ScanSource.MANUAL, scanner_type="manual")
        await scan_logger.drain()

        async with session_factory() as check:
            row = (await check.execute(select(BarcodeScanModel))).scalar_one()
        assert row.vendor_id == SELLER_ID
        assert row.barcode_value == "UNKNOWN-1"
        assert row.is_successful is False
        assert row.error_message == "Barcode not found"
        assert row.scan_source == "manual"

    @pytest.mark.asyncio
    async def test_write_failure_is_swallowed(self) -> None:
        """A failing log write never reaches the caller."""
        broken_factory = MagicMock(side_effect=RuntimeError("database down"))
        scan_logger = ScanLogger(broken_factory)

        task = scan_logger.log(SELLER_ID, BarcodeLookupResult(is_found=False, code="X"))
        await scan_logger.drain()

        assert task.done()
        assert task.exception() is None


class TestScanIntoCart:
    """Tests for scan_into_cart."""

    @pytest.mark.asyncio
    async def test_variant_scan_adds_variant_line(
        self,
        session: AsyncSession,
        session_factory: async_sessionmaker[AsyncSession],
        shirt,
    ) -> None:
        """A matched variant is added with its color and size."""
        cart = POSCartEngine(SELLER_ID)
        scan_logger = ScanLogger(session_factory)

        outcome = await scan_into_cart(
            BarcodeResolver(CatalogRepository(session)), cart, "4800016644504", scan_logger
        )
        await session.commit()
        await scan_logger.drain()

        assert outcome.line is not None
        assert outcome.line.variant_key == f"{shirt.id}-Red-M"
        assert outcome.offer_quick_create is False
        assert cart.item_count == 1

        async with session_factory() as check:
            row = (await check.execute(select(BarcodeScanModel))).scalar_one()
        assert row.is_successful is True
        assert row.product_id == shirt.id

    @pytest.mark.asyncio
    async def test_plain_scan_adds_product(self, session: AsyncSession, mug) -> None:
        """A matched attribute-less variant adds the product itself."""
        cart = POSCartEngine(SELLER_ID)
        resolver = BarcodeResolver(CatalogRepository(session))

        await scan_into_cart(resolver, cart, "ef567890-mug")
        await scan_into_cart(resolver, cart, "EF567890-MUG")

        assert [(line.variant_key, line.quantity) for line in cart.lines] == [(mug.id, 2)]

    @pytest.mark.asyncio
    async def test_unknown_code_offers_quick_create(self, session: AsyncSession) -> None:
        """Unknown codes add nothing."""
        cart = POSCartEngine(SELLER_ID)
        outcome = await scan_into_cart(
            BarcodeResolver(CatalogRepository(session)), cart, "NOPE"
        )
        assert outcome.line is None
        assert outcome.offer_quick_create is True
        assert cart.is_empty

    @pytest.mark.asyncio
    async def test_auto_add_off(self, session: AsyncSession, shirt) -> None:
        """With auto-add off a resolved scan only reports the match."""
        cart = POSCartEngine(SELLER_ID, POSSettings(auto_add_on_scan=False))
        outcome = await scan_into_cart(
            BarcodeResolver(CatalogRepository(session)), cart, "4800016644504"
        )
        assert outcome.lookup.is_found
        assert outcome.line is None
        assert cart.is_empty

    @pytest.mark.asyncio
    async def test_stock_limit_propagates(self, session: AsyncSession, shirt) -> None:
        """Scanning past the stock snapshot raises StockLimitError."""
        cart = POSCartEngine(SELLER_ID)
        resolver = BarcodeResolver(CatalogRepository(session))
        await scan_into_cart(resolver, cart, "4800016644504")
        await scan_into_cart(resolver, cart, "4800016644504")

        with pytest.raises(StockLimitError):
            await scan_into_cart(resolver, cart, "4800016644504")
        assert cart.item_count == 2


class TestGenerateProductBarcode:
    """Tests for barcode generation."""

    def test_ean13_check_digit(self) -> None:
        """Check digits follow the EAN-13 weighting."""
        assert ean13_check_digit("400638133393") == "1"
        assert ean13_check_digit("480001664450") == "4"

    def test_code128(self) -> None:
        """CODE128 codes combine seller and variant id characters."""
        code = generate_product_barcode("ab12cd34-0000", "9f8e7d6c-5b4a-3210")
        assert code == "BCAB129F8E7D6C"

    def test_ean13(self) -> None:
        """EAN-13 codes are 13 digits ending in a valid check digit."""
        code = generate_product_barcode("ab12cd34", "9f8e7d6c-5b4a", fmt="EAN-13")
        assert len(code) == 13
        assert code.isdigit()
        assert code[-1] == ean13_check_digit(code[:12])
