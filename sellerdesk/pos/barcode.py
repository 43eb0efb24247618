"""Barcode resolution for the POS scan loop.

Lookups are read-only: a scanned code is matched against the seller's
variant barcodes, then variant SKUs. Scan outcomes go to the
``barcode_scans`` log through ``ScanLogger``, which writes in a background
task; a failing log write is reported and dropped, and never slows down or
fails the scan itself.
"""

import asyncio
import re
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from uuid import uuid4

import structlog
from sqlalchemy import Boolean, DateTime, Integer, String, Text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import Mapped, mapped_column

from sellerdesk.catalog.repository import CatalogRepository
from sellerdesk.domain.statuses import ScanSource
from sellerdesk.domain.value_objects import to_decimal
from sellerdesk.infrastructure.database import Base, async_session_factory
from sellerdesk.pos.cart import CartLine, POSCartEngine

logger = structlog.get_logger()

BARCODE_PREFIX = "BC"
CODE128 = "CODE128"
EAN13 = "EAN-13"

_NON_DIGIT = re.compile(r"[^0-9]")


# ============================================================================
# Scan Log Model
# ============================================================================


class BarcodeScanModel(Base):
    """One scan attempt."""

    __tablename__ = "barcode_scans"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))
    vendor_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    barcode_value: Mapped[str] = mapped_column(String(100), nullable=False)
    product_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    variant_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    is_successful: Mapped[bool] = mapped_column(Boolean, nullable=False)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    scan_source: Mapped[str] = mapped_column(String(20), nullable=False, default="pos")
    scanner_type: Mapped[str] = mapped_column(String(20), nullable=False, default="hardware")
    scan_duration_ms: Mapped[int | None] = mapped_column(Integer, nullable=True)
    scan_timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc)
    )


# ============================================================================
# Lookup
# ============================================================================


@dataclass(frozen=True)
class BarcodeLookupResult:
    """Outcome of a barcode lookup.

    Attributes:
        is_found: Whether the code matched.
        code: Normalized code that was looked up.
        product_id: Matched product.
        variant_id: Matched variant.
        color: Variant dimension 1 value (None when unused).
        size: Variant dimension 2 value (None when unused).
        name: Product name.
        variant_name: Variant display name.
        price: Variant price.
        stock: Variant stock.
        sku: Variant SKU.
    """

    is_found: bool
    code: str = ""
    product_id: str | None = None
    variant_id: str | None = None
    color: str | None = None
    size: str | None = None
    name: str | None = None
    variant_name: str | None = None
    price: Decimal | None = None
    stock: int | None = None
    sku: str | None = None

    @property
    def has_variant_dimensions(self) -> bool:
        return bool(self.color or self.size)


def normalize_code(code: str | None) -> str:
    """Trim and uppercase a scanned code."""
    return (code or "").strip().upper()


class BarcodeResolver:
    """Resolves scanned codes to a seller's products and variants.

    Example usage:
        resolver = BarcodeResolver(CatalogRepository(session))
        result = await resolver.lookup(seller_id, "TSHIR-RED-M")
    """

    def __init__(self, repository: CatalogRepository) -> None:
        """Initialize resolver.

        Args:
            repository: Catalog repository used for read-only lookups.
        """
        self.repository = repository

    async def lookup(self, seller_id: str, code: str | None) -> BarcodeLookupResult:
        """Look a code up by variant barcode, then variant SKU.

        Args:
            seller_id: Seller scope; other sellers' products never match.
            code: Raw scanned code.

        Returns:
            Lookup result; blank codes are not found without any query.
        """
        normalized = normalize_code(code)
        if not normalized:
            return BarcodeLookupResult(is_found=False)

        match = await self.repository.find_variant_by_code(seller_id, normalized)
        if match is None:
            return BarcodeLookupResult(is_found=False, code=normalized)

        product, variant = match
        return BarcodeLookupResult(
            is_found=True,
            code=normalized,
            product_id=product.id,
            variant_id=variant.id,
            color=variant.option1_value,
            size=variant.option2_value,
            name=product.name,
            variant_name=variant.variant_name,
            price=to_decimal(variant.price),
            stock=variant.stock,
            sku=variant.sku,
        )


# ============================================================================
# Scan Log
# ============================================================================


class ScanLogger:
    """Fire-and-forget writer for the ``barcode_scans`` log.

    Example usage:
        scan_logger = ScanLogger()
        scan_logger.log(seller_id, result)
        await scan_logger.drain()   # on shutdown or in tests
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession] | None = None) -> None:
        """Initialize scan logger.

        Args:
            session_factory: Factory for the sessions log writes use.
        """
        self.session_factory = session_factory or async_session_factory
        self._tasks: set[asyncio.Task] = set()

    def log(
        self,
        seller_id: str,
        result: BarcodeLookupResult,
        raw_code: str | None = None,
        scan_source: ScanSource | str = ScanSource.POS,
        scanner_type: str = "hardware",
        duration_ms: int | None = None,
    ) -> asyncio.Task:
        """Schedule a scan log write and return immediately.

        Args:
            seller_id: Scanning seller.
            result: Lookup outcome.
            raw_code: Code as scanned (defaults to the normalized one).
            scan_source: Where the scan came from.
            scanner_type: Scanner kind (hardware, camera, manual).
            duration_ms: Lookup duration.

        Returns:
            The background task.
        """
        row = BarcodeScanModel(
            vendor_id=seller_id,
            barcode_value=raw_code if raw_code is not None else result.code,
            product_id=result.product_id,
            variant_id=result.variant_id,
            is_successful=result.is_found,
            error_message=None if result.is_found else "Barcode not found",
            scan_source=ScanSource(scan_source).value,
            scanner_type=scanner_type,
            scan_duration_ms=duration_ms,
        )
        task = asyncio.create_task(self._write(row))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def drain(self) -> None:
        """Wait for pending log writes."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def _write(self, row: BarcodeScanModel) -> None:
        try:
            async with self.session_factory() as session:
                session.add(row)
                await session.commit()
        except Exception as exc:
            logger.warning(
                "Failed to log barcode scan",
                vendor_id=row.vendor_id,
                barcode_value=row.barcode_value,
                error=str(exc),
            )


# ============================================================================
# Scan Into Cart
# ============================================================================


@dataclass(frozen=True)
class ScanOutcome:
    """Result of scanning into a cart.

    Attributes:
        lookup: Lookup result.
        line: Cart line added to, or None when nothing was added.
    """

    lookup: BarcodeLookupResult
    line: CartLine | None = None

    @property
    def offer_quick_create(self) -> bool:
        """Whether the caller should offer to create a product for the code."""
        return not self.lookup.is_found


async def scan_into_cart(
    resolver: BarcodeResolver,
    cart: POSCartEngine,
    code: str | None,
    scan_logger: ScanLogger | None = None,
    scan_source: ScanSource | str = ScanSource.POS,
    scanner_type: str = "hardware",
) -> ScanOutcome:
    """Resolve a scan and add the match to the cart.

    A matched variant with option values is added as that (color, size);
    a matched attribute-less variant adds the product itself. Nothing is
    added when the code is unknown or the seller turned auto-add off.

    Args:
        resolver: Barcode resolver.
        cart: Seller's POS cart.
        code: Raw scanned code.
        scan_logger: Optional scan log sink.
        scan_source: Where the scan came from.
        scanner_type: Scanner kind.

    Returns:
        Scan outcome.

    Raises:
        StockLimitError: If the matched line is already at its stock limit.
    """
    started = time.monotonic()
    result = await resolver.lookup(cart.seller_id, code)
    duration_ms = int((time.monotonic() - started) * 1000)

    if scan_logger is not None and result.code:
        scan_logger.log(
            cart.seller_id,
            result,
            raw_code=code,
            scan_source=scan_source,
            scanner_type=scanner_type,
            duration_ms=duration_ms,
        )

    logger.info(
        "Barcode scanned",
        seller_id=cart.seller_id,
        code=result.code,
        found=result.is_found,
        variant_id=result.variant_id,
    )

    if not result.is_found or not cart.settings.auto_add_on_scan:
        return ScanOutcome(lookup=result)

    product = await resolver.repository.get_cart_product(result.product_id)
    if result.has_variant_dimensions:
        line = cart.add_line(product, result.color, result.size)
    else:
        line = cart.add_line(product)
    return ScanOutcome(lookup=result, line=line)


# ============================================================================
# Barcode Generation
# ============================================================================


def ean13_check_digit(digits: str) -> str:
    """Check digit for a 12-digit EAN-13 body."""
    total = sum(int(d) if i % 2 == 0 else int(d) * 3 for i, d in enumerate(digits[:12]))
    return str((10 - total % 10) % 10)


def generate_product_barcode(seller_id: str, variant_id: str, fmt: str = CODE128) -> str:
    """Derive a barcode for a variant.

    ``CODE128``: ``BC`` + 4 seller id characters + 8 variant id characters.
    ``EAN-13``: the digits of the same characters, padded to 12, plus a
    check digit.

    Args:
        seller_id: Owning seller.
        variant_id: Variant to label.
        fmt: ``CODE128`` or ``EAN-13``.

    Returns:
        Barcode text.
    """
    seller_part = seller_id.replace("-", "")[:4].upper()
    variant_part = variant_id.replace("-", "")[:8].upper()

    if fmt == EAN13:
        body = _NON_DIGIT.sub("", seller_part + variant_part)[:12].rjust(12, "0")
        return body + ean13_check_digit(body)

    return f"{BARCODE_PREFIX}{seller_part}{variant_part}"
