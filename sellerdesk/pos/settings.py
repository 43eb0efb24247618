"""POS settings provider.

Each seller has at most one ``pos_settings`` row. Sellers without one get
the defaults below. A POS session reads settings once when it opens and
picks up changes only through an explicit save.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from uuid import uuid4

import structlog
from sqlalchemy import Boolean, DateTime, Integer, Numeric, String, Text, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Mapped, mapped_column

from sellerdesk.domain.base import ValueObject
from sellerdesk.domain.statuses import PaymentMethod
from sellerdesk.domain.value_objects import TaxSettings, to_decimal
from sellerdesk.infrastructure.database import Base

logger = structlog.get_logger()

DEFAULT_PAYMENT_METHODS: tuple[PaymentMethod, ...] = (
    PaymentMethod.CASH,
    PaymentMethod.CARD,
    PaymentMethod.EWALLET,
)


# ============================================================================
# Settings Value Object
# ============================================================================


@dataclass(frozen=True)
class POSSettings(ValueObject):
    """Seller POS configuration.

    Attributes:
        tax: Tax configuration consumed by the tax engine.
        tax_label: Label printed next to the tax amount.
        accepted_payment_methods: Enabled payment methods.
        receipt_header: Receipt header line.
        receipt_footer: Receipt footer line.
        auto_add_on_scan: Whether a resolved scan adds to the cart.
        enable_low_stock_alert: Whether low stock lines are flagged.
        low_stock_threshold: Stock at or below which a line is low.
    """

    tax: TaxSettings = field(default_factory=TaxSettings)
    tax_label: str = "VAT"
    accepted_payment_methods: tuple[PaymentMethod, ...] = DEFAULT_PAYMENT_METHODS
    receipt_header: str = "Thank you for shopping with us!"
    receipt_footer: str = "Please come again!"
    auto_add_on_scan: bool = True
    enable_low_stock_alert: bool = True
    low_stock_threshold: int = 10

    def __post_init__(self) -> None:
        """Normalize payment methods to enum members."""
        methods = tuple(PaymentMethod(m) for m in self.accepted_payment_methods)
        object.__setattr__(self, "accepted_payment_methods", methods)

    def accepts(self, method: PaymentMethod | str) -> bool:
        """Check whether a payment method is enabled."""
        return PaymentMethod(method) in self.accepted_payment_methods

    def is_low_stock(self, stock: int) -> bool:
        """Check a stock figure against the low stock threshold."""
        return self.enable_low_stock_alert and stock <= self.low_stock_threshold


# ============================================================================
# Storage Model
# ============================================================================


class POSSettingsModel(Base):
    """POS settings row, one per seller."""

    __tablename__ = "pos_settings"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))
    seller_id: Mapped[str] = mapped_column(String(36), nullable=False, unique=True)
    tax_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    tax_rate: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False, default=Decimal("12"))
    tax_name: Mapped[str] = mapped_column(String(50), nullable=False, default="VAT")
    tax_inclusive: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    accept_cash: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    accept_card: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    accept_ewallet: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    accept_bank_transfer: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    receipt_header: Mapped[str | None] = mapped_column(Text, nullable=True)
    receipt_footer: Mapped[str | None] = mapped_column(Text, nullable=True)
    auto_add_on_scan: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    enable_low_stock_alert: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    low_stock_threshold: Mapped[int] = mapped_column(Integer, nullable=False, default=10)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )


_METHOD_COLUMNS: dict[PaymentMethod, str] = {
    PaymentMethod.CASH: "accept_cash",
    PaymentMethod.CARD: "accept_card",
    PaymentMethod.EWALLET: "accept_ewallet",
    PaymentMethod.BANK_TRANSFER: "accept_bank_transfer",
}


def settings_from_row(row: POSSettingsModel) -> POSSettings:
    """Convert a stored row into settings."""
    return POSSettings(
        tax=TaxSettings(
            enable_tax=row.tax_enabled,
            tax_rate=to_decimal(row.tax_rate),
            tax_included_in_price=row.tax_inclusive,
        ),
        tax_label=row.tax_name,
        accepted_payment_methods=tuple(
            method for method, column in _METHOD_COLUMNS.items() if getattr(row, column)
        ),
        receipt_header=row.receipt_header or "",
        receipt_footer=row.receipt_footer or "",
        auto_add_on_scan=row.auto_add_on_scan,
        enable_low_stock_alert=row.enable_low_stock_alert,
        low_stock_threshold=row.low_stock_threshold,
    )


def row_values(settings: POSSettings) -> dict:
    """Column values for storing settings."""
    values = {
        "tax_enabled": settings.tax.enable_tax,
        "tax_rate": settings.tax.tax_rate,
        "tax_name": settings.tax_label,
        "tax_inclusive": settings.tax.tax_included_in_price,
        "receipt_header": settings.receipt_header,
        "receipt_footer": settings.receipt_footer,
        "auto_add_on_scan": settings.auto_add_on_scan,
        "enable_low_stock_alert": settings.enable_low_stock_alert,
        "low_stock_threshold": settings.low_stock_threshold,
    }
    for method, column in _METHOD_COLUMNS.items():
        values[column] = method in settings.accepted_payment_methods
    return values


# ============================================================================
# Repository
# ============================================================================


class POSSettingsRepository:
    """Reads and upserts per-seller POS settings.

    Example usage:
        repo = POSSettingsRepository(session)
        settings = await repo.get(seller_id)
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: Async SQLAlchemy session.
        """
        self.session = session

    async def get(self, seller_id: str) -> POSSettings:
        """Get a seller's settings, or the defaults when none are stored.

        Args:
            seller_id: Seller ID.

        Returns:
            POS settings.
        """
        result = await self.session.execute(
            select(POSSettingsModel).where(POSSettingsModel.seller_id == seller_id)
        )
        row = result.scalar_one_or_none()
        if row is None:
            return POSSettings()
        return settings_from_row(row)

    async def save(self, seller_id: str, settings: POSSettings) -> POSSettings:
        """Insert or update a seller's settings.

        Args:
            seller_id: Seller ID.
            settings: Settings to store.

        Returns:
            Stored settings.
        """
        values = row_values(settings)
        now = datetime.now(timezone.utc)
        dialect = self.session.get_bind().dialect.name
        insert = sqlite.insert if dialect == "sqlite" else postgresql.insert
        stmt = insert(POSSettingsModel).values(
            id=str(uuid4()),
            seller_id=seller_id,
            created_at=now,
            updated_at=now,
            **values,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["seller_id"],
            set_={**values, "updated_at": now},
        )
        await self.session.execute(stmt)
        await self.session.commit()
        logger.info("POS settings saved", seller_id=seller_id)
        return settings
