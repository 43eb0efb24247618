"""Sale recording.

``DatabaseSaleRecorder`` writes one ``pos_sales`` row per completed sale
and decrements the stock of every sold variant in the same transaction.
If any decrement would take stock below zero the CHECK constraint fails,
the transaction rolls back and nothing is recorded.
"""

from collections.abc import Sequence
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any
from uuid import uuid4

import structlog
from sqlalchemy import JSON, DateTime, Numeric, String, Text, update
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Mapped, mapped_column

from sellerdesk.catalog.models import ProductVariant
from sellerdesk.catalog.repository import constraint_from_error
from sellerdesk.domain.exceptions import ConstraintViolationError, VariantNotFoundError
from sellerdesk.domain.statuses import PaymentMethod
from sellerdesk.domain.value_objects import round_money
from sellerdesk.infrastructure.database import Base
from sellerdesk.pos.cart import CartLine, SaleReceipt, SaleRecorder
from sellerdesk.pos.tax import TaxBreakdown

logger = structlog.get_logger()


class PosSaleModel(Base):
    """Completed POS sale."""

    __tablename__ = "pos_sales"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))
    seller_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    payment_method: Mapped[str] = mapped_column(String(20), nullable=False)
    subtotal: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    tax: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    total: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    lines: Mapped[list[dict[str, Any]]] = mapped_column(
        JSON().with_variant(JSONB(), "postgresql"), nullable=False
    )
    note: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc)
    )


def line_payload(line: CartLine) -> dict[str, Any]:
    """JSON form of a sold line."""
    return {
        "variant_key": line.variant_key,
        "product_id": line.product_id,
        "variant_id": line.variant_id,
        "sku": line.sku,
        "name": line.name,
        "color": line.color,
        "size": line.size,
        "quantity": line.quantity,
        "unit_price": str(line.unit_price),
    }


class DatabaseSaleRecorder(SaleRecorder):
    """Records POS sales in the database.

    Example usage:
        recorder = DatabaseSaleRecorder(session)
        receipt = await cart.complete_sale(recorder, PaymentMethod.CASH)
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize recorder with database session.

        Args:
            session: Async SQLAlchemy session.
        """
        self.session = session

    async def record(
        self,
        seller_id: str,
        lines: Sequence[CartLine],
        totals: TaxBreakdown,
        payment_method: PaymentMethod,
        note: str | None = None,
    ) -> SaleReceipt:
        """Write the sale and decrement variant stock atomically.

        Raises:
            VariantNotFoundError: If a sold variant no longer exists.
            ConstraintViolationError: If a decrement would make stock
                negative.
        """
        rounded = totals.rounded()
        sale = PosSaleModel(
            id=str(uuid4()),
            seller_id=seller_id,
            payment_method=PaymentMethod(payment_method).value,
            subtotal=round_money(_subtotal(lines)),
            tax=rounded.tax,
            total=rounded.total,
            lines=[line_payload(line) for line in lines],
            note=note,
            created_at=datetime.now(timezone.utc),
        )

        try:
            for line in lines:
                if line.variant_id is None:
                    continue
                result = await self.session.execute(
                    update(ProductVariant)
                    .where(ProductVariant.id == line.variant_id)
                    .values(stock=ProductVariant.stock - line.quantity)
                )
                if not result.rowcount:
                    raise VariantNotFoundError(line.variant_id)
            self.session.add(sale)
            await self.session.commit()
        except IntegrityError as exc:
            await self.session.rollback()
            raise ConstraintViolationError(
                "Storage rejected sale",
                constraint=constraint_from_error(exc),
                details={"action": "sale record"},
            ) from exc
        except Exception:
            await self.session.rollback()
            raise

        logger.info("Sale recorded", sale_id=sale.id, seller_id=seller_id, lines=len(lines))
        return SaleReceipt(
            sale_id=sale.id,
            seller_id=seller_id,
            lines=tuple(lines),
            payment_method=PaymentMethod(payment_method),
            totals=rounded,
            note=note,
            created_at=sale.created_at,
        )


def _subtotal(lines: Sequence[CartLine]) -> Decimal:
    return sum((line.line_total for line in lines), Decimal("0"))
