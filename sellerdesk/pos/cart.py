"""Point-of-sale cart engine.

Keeps the ordered cart lines of one POS session. Each line snapshots the
stock of its variant when it is created; the snapshot caps the line's
quantity for the rest of the session. Subtotal, item count and tax are
always derived from the lines and the current settings, never stored.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from decimal import Decimal

import structlog

from sellerdesk.domain.base import Entity
from sellerdesk.domain.exceptions import (
    CartLineNotFoundError,
    EmptyCartError,
    SaleFailedError,
    StockLimitError,
    ValidationError,
)
from sellerdesk.domain.statuses import PaymentMethod
from sellerdesk.domain.value_objects import CartProduct
from sellerdesk.pos.settings import POSSettings
from sellerdesk.pos.tax import TaxBreakdown, calculate_tax

logger = structlog.get_logger()


def variant_key(product: CartProduct, color: str | None = None, size: str | None = None) -> str:
    """Cart line key for a product and (color, size) selection.

    Args:
        product: Product snapshot.
        color: Dimension 1 value.
        size: Dimension 2 value.

    Returns:
        ``"<id>-<color|none>-<size|none>"`` for products with variant
        dimensions, else the product id.
    """
    if product.has_variant_dimensions:
        return f"{product.id}-{color or 'none'}-{size or 'none'}"
    return product.id


# ============================================================================
# Cart Line
# ============================================================================


@dataclass(eq=False)
class CartLine(Entity[str]):
    """One line of the POS cart, identified by its variant key.

    Attributes:
        id: Variant key.
        product_id: Product ID.
        name: Display name.
        unit_price: Price per unit.
        max_stock: Stock snapshot taken when the line was created.
        quantity: Units, always within [1, max_stock].
        color: Dimension 1 value.
        size: Dimension 2 value.
        variant_id: Persisted variant, when known.
        sku: Variant SKU, when known.
    """

    product_id: str
    name: str
    unit_price: Decimal
    max_stock: int
    quantity: int = 1
    color: str | None = None
    size: str | None = None
    variant_id: str | None = None
    sku: str | None = None

    @property
    def variant_key(self) -> str:
        return self.id

    @property
    def line_total(self) -> Decimal:
        """Unit price multiplied by quantity."""
        return self.unit_price * self.quantity


# ============================================================================
# Sale Recording
# ============================================================================


@dataclass(frozen=True)
class SaleReceipt:
    """Completed POS sale.

    Attributes:
        sale_id: Recorded sale ID.
        seller_id: Selling seller.
        lines: Lines as sold.
        payment_method: How the customer paid.
        totals: Rounded tax breakdown.
        note: Optional cashier note.
        created_at: When the sale was recorded.
    """

    sale_id: str
    seller_id: str
    lines: tuple[CartLine, ...]
    payment_method: PaymentMethod
    totals: TaxBreakdown
    note: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class SaleRecorder(ABC):
    """Order sink for completed POS sales."""

    @abstractmethod
    async def record(
        self,
        seller_id: str,
        lines: Sequence[CartLine],
        totals: TaxBreakdown,
        payment_method: PaymentMethod,
        note: str | None = None,
    ) -> SaleReceipt:
        """Persist a sale.

        Implementations are all-or-nothing: either the sale is fully
        recorded or an exception is raised and nothing is written.
        """


# ============================================================================
# Cart Engine
# ============================================================================


class POSCartEngine:
    """POS cart for one seller session.

    Example usage:
        cart = POSCartEngine(seller_id, settings)
        cart.add_line(product, color="Red", size="M")
        cart.totals().rounded()
        receipt = await cart.complete_sale(recorder, PaymentMethod.CASH)
    """

    def __init__(self, seller_id: str, settings: POSSettings | None = None) -> None:
        """Initialize an empty cart.

        Args:
            seller_id: Seller operating the POS.
            settings: POS settings read when the session opened.
        """
        self.seller_id = seller_id
        self.settings = settings or POSSettings()
        self._lines: dict[str, CartLine] = {}

    # ------------------------------------------------------------------------
    # Derived state
    # ------------------------------------------------------------------------

    @property
    def lines(self) -> list[CartLine]:
        """Lines in insertion order."""
        return list(self._lines.values())

    @property
    def is_empty(self) -> bool:
        return not self._lines

    @property
    def item_count(self) -> int:
        """Total units across all lines."""
        return sum(line.quantity for line in self._lines.values())

    @property
    def subtotal(self) -> Decimal:
        """Sum of line totals."""
        return sum((line.line_total for line in self._lines.values()), Decimal("0"))

    def totals(self) -> TaxBreakdown:
        """Unrounded tax breakdown under the current settings."""
        return calculate_tax(self.subtotal, self.settings.tax)

    def get_line(self, key: str) -> CartLine:
        """Get a line by variant key.

        Raises:
            CartLineNotFoundError: If the key is not in the cart.
        """
        line = self._lines.get(key)
        if line is None:
            raise CartLineNotFoundError(key)
        return line

    def apply_settings(self, settings: POSSettings) -> None:
        """Swap settings; lines are untouched and totals follow at once."""
        self.settings = settings

    # ------------------------------------------------------------------------
    # Line operations
    # ------------------------------------------------------------------------

    def add_line(
        self,
        product: CartProduct,
        color: str | None = None,
        size: str | None = None,
    ) -> CartLine:
        """Add one unit of a product (variant) to the cart.

        Args:
            product: Product snapshot.
            color: Dimension 1 value.
            size: Dimension 2 value.

        Returns:
            The new or incremented line.

        Raises:
            StockLimitError: If the line is already at its stock snapshot,
                or the variant is out of stock. The cart is unchanged.
        """
        key = variant_key(product, color, size)

        existing = self._lines.get(key)
        if existing is not None:
            if existing.quantity + 1 > existing.max_stock:
                logger.info("Stock limit reached", variant_key=key, max_stock=existing.max_stock)
                raise StockLimitError(key, existing.max_stock)
            existing.quantity += 1
            return existing

        variant_id = None
        sku = None
        if product.has_variant_dimensions:
            variant = product.find_variant(color, size)
            stock = variant.stock if variant else 0
            price = variant.price if variant else product.price
            if variant is not None:
                variant_id, sku = variant.variant_id, variant.sku
        else:
            stock = product.stock
            price = product.price
            if len(product.variants) == 1:
                variant_id = product.variants[0].variant_id
                sku = product.variants[0].sku

        if stock <= 0:
            logger.info("Out of stock", variant_key=key)
            raise StockLimitError(key, max(stock, 0))

        line = CartLine(
            id=key,
            product_id=product.id,
            name=product.name,
            unit_price=price,
            max_stock=stock,
            color=color or None,
            size=size or None,
            variant_id=variant_id,
            sku=sku,
        )
        self._lines[key] = line
        return line

    def update_quantity(self, key: str, delta: int) -> CartLine | None:
        """Change a line's quantity by ``delta``.

        The result is clamped to ``max_stock``; reaching 0 or less removes
        the line.

        Args:
            key: Variant key.
            delta: Units to add (negative to remove).

        Returns:
            The updated line, or None if it was removed.

        Raises:
            CartLineNotFoundError: If the key is not in the cart.
        """
        line = self.get_line(key)
        quantity = line.quantity + delta
        if quantity <= 0:
            del self._lines[key]
            return None
        line.quantity = min(quantity, line.max_stock)
        return line

    def remove_line(self, key: str) -> CartLine:
        """Remove a line.

        Raises:
            CartLineNotFoundError: If the key is not in the cart.
        """
        line = self.get_line(key)
        del self._lines[key]
        return line

    def clear(self) -> int:
        """Remove all lines; returns how many were removed."""
        count = len(self._lines)
        self._lines.clear()
        return count

    # ------------------------------------------------------------------------
    # Sale completion
    # ------------------------------------------------------------------------

    async def complete_sale(
        self,
        recorder: SaleRecorder,
        payment_method: PaymentMethod | str,
        note: str | None = None,
    ) -> SaleReceipt:
        """Record the cart as a sale and clear it.

        Args:
            recorder: Order sink.
            payment_method: How the customer paid.
            note: Optional cashier note.

        Returns:
            Receipt from the recorder.

        Raises:
            EmptyCartError: If the cart has no lines.
            ValidationError: If the payment method is unknown or disabled.
            SaleFailedError: If the recorder fails; the cart is untouched.
        """
        if self.is_empty:
            raise EmptyCartError()

        try:
            method = PaymentMethod(payment_method)
        except ValueError:
            raise ValidationError("payment_method", "unknown payment method", value=payment_method)
        if not self.settings.accepts(method):
            raise ValidationError(
                "payment_method", f"{method.value} is not enabled", value=method.value
            )

        lines = tuple(replace(line) for line in self._lines.values())
        totals = self.totals()

        try:
            receipt = await recorder.record(self.seller_id, lines, totals, method, note)
        except Exception as exc:
            logger.warning(
                "Sale failed, cart kept",
                seller_id=self.seller_id,
                lines=len(lines),
                error=str(exc),
            )
            raise SaleFailedError(getattr(exc, "message", None) or str(exc)) from exc

        self._lines.clear()
        logger.info(
            "Sale completed",
            seller_id=self.seller_id,
            sale_id=receipt.sale_id,
            payment_method=method.value,
            total=str(receipt.totals.total),
        )
        return receipt
