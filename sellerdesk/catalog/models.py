"""SQLAlchemy models for the seller catalog.

Defines categories, products, product images, product variants and the
QA assessment row created for every submitted product. The CHECK and
UNIQUE constraints here are the source of truth for catalog integrity;
client-side filtering only saves round trips.
"""

from datetime import datetime, timezone
from decimal import Decimal
from uuid import uuid4

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from sellerdesk.domain.statuses import ApprovalStatus, QAStatus
from sellerdesk.infrastructure.database import Base

SKU_UNIQUE_CONSTRAINT = "uq_product_variants_sku"
IMAGE_URL_CONSTRAINT = "ck_product_images_url"
ASSESSMENT_UNIQUE_CONSTRAINT = "uq_product_assessments_product_id"

_APPROVAL_VALUES = ", ".join(f"'{value}'" for value in ApprovalStatus.values())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _uuid() -> str:
    return str(uuid4())


class Category(Base):
    """Product category.

    Attributes:
        id: Category identifier (UUID string).
        name: Display name, unique.
    """

    __tablename__ = "categories"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )


class Product(Base):
    """Product listed by a seller.

    Attributes:
        id: Unique product identifier (UUID string). Its first eight
            characters prefix every variant SKU.
        seller_id: Owning seller.
        category_id: Resolved category id.
        name: Product name.
        description: Free-form description.
        price: Base price.
        approval_status: QA-owned approval state, created as pending.
        variant_label_1: Dimension 1 label (e.g. "Color").
        variant_label_2: Dimension 2 label (e.g. "Size").
        disabled_at: Set when the seller hides the product.
        deleted_at: Soft-delete timestamp.
    """

    __tablename__ = "products"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    seller_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    category_id: Mapped[str | None] = mapped_column(String(36), nullable=True, index=True)
    name: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    approval_status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=ApprovalStatus.PENDING.value, index=True
    )
    variant_label_1: Mapped[str | None] = mapped_column(String(50), nullable=True)
    variant_label_2: Mapped[str | None] = mapped_column(String(50), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow
    )
    disabled_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # Relationships
    images: Mapped[list["ProductImage"]] = relationship(
        "ProductImage",
        back_populates="product",
        order_by="ProductImage.sort_order",
        passive_deletes=True,
    )
    variants: Mapped[list["ProductVariant"]] = relationship(
        "ProductVariant",
        back_populates="product",
        passive_deletes=True,
    )

    __table_args__ = (
        CheckConstraint(
            f"approval_status IN ({_APPROVAL_VALUES})", name="ck_products_approval_status"
        ),
        CheckConstraint("price >= 0", name="ck_products_price"),
    )


class ProductImage(Base):
    """Product image.

    Attributes:
        image_url: Remote URL; must start with http:// or https://.
        sort_order: Position from 0.
        is_primary: True only for sort_order 0.
    """

    __tablename__ = "product_images"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    product_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    image_url: Mapped[str] = mapped_column(String(1000), nullable=False)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_primary: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )

    product: Mapped["Product"] = relationship("Product", back_populates="images")

    __table_args__ = (
        CheckConstraint(
            "image_url LIKE 'http://%' OR image_url LIKE 'https://%'",
            name=IMAGE_URL_CONSTRAINT,
        ),
    )


class ProductVariant(Base):
    """Sellable variant of a product.

    Created once at submission; afterwards only price and stock change.
    Unused option dimensions are stored as NULL.

    Attributes:
        sku: Globally unique SKU (``<product id prefix>-<token>``).
        barcode: Optional scannable code.
        option1_value: Dimension 1 value.
        option2_value: Dimension 2 value.
        variant_name: Display name (e.g. "Red / XL").
        price: Unit price (>= 0).
        stock: Units on hand (>= 0).
        thumbnail_url: Optional variant image.
    """

    __tablename__ = "product_variants"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    product_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    sku: Mapped[str] = mapped_column(String(100), nullable=False)
    barcode: Mapped[str | None] = mapped_column(String(100), nullable=True, index=True)
    option1_value: Mapped[str | None] = mapped_column(String(100), nullable=True)
    option2_value: Mapped[str | None] = mapped_column(String(100), nullable=True)
    variant_name: Mapped[str] = mapped_column(String(255), nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    stock: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    thumbnail_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow
    )

    product: Mapped["Product"] = relationship("Product", back_populates="variants")

    __table_args__ = (
        UniqueConstraint("sku", name=SKU_UNIQUE_CONSTRAINT),
        CheckConstraint("price >= 0", name="ck_product_variants_price"),
        CheckConstraint("stock >= 0", name="ck_product_variants_stock"),
    )


class ProductAssessment(Base):
    """QA assessment row, exactly one per product.

    Attributes:
        product_id: Assessed product (unique).
        status: QA status, created as pending_digital_review.
        submitted_at: When the product entered QA.
        created_by: Seller that submitted the product.
    """

    __tablename__ = "product_assessments"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    product_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
    )
    status: Mapped[str] = mapped_column(
        String(40), nullable=False, default=QAStatus.PENDING_DIGITAL_REVIEW.value
    )
    submitted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )
    created_by: Mapped[str | None] = mapped_column(String(36), nullable=True)

    __table_args__ = (
        UniqueConstraint("product_id", name=ASSESSMENT_UNIQUE_CONSTRAINT),
    )
