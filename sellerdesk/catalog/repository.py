"""Catalog repository for database operations.

Provides the inserts, compensating deletes and lookups the submission
coordinator, stock reads, variant patches and barcode resolution need.
Storage integrity errors are translated into ``ConstraintViolationError``
here so callers only deal with domain exceptions.
"""

from collections.abc import Iterable, Sequence
from datetime import datetime, timezone
from decimal import Decimal
from uuid import uuid4

from sqlalchemy import and_, delete, func, or_, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from sellerdesk.catalog.composer import VariantDraft
from sellerdesk.catalog.images import ImageRow, normalize_remote_url
from sellerdesk.catalog.models import (
    ASSESSMENT_UNIQUE_CONSTRAINT,
    IMAGE_URL_CONSTRAINT,
    SKU_UNIQUE_CONSTRAINT,
    Product,
    ProductAssessment,
    ProductImage,
    ProductVariant,
)
from sellerdesk.domain.exceptions import (
    ConstraintViolationError,
    ProductNotFoundError,
    ValidationError,
    VariantNotFoundError,
)
from sellerdesk.domain.statuses import ApprovalStatus, QAStatus
from sellerdesk.domain.value_objects import (
    CartProduct,
    CartVariant,
    option_or_none,
    to_decimal,
)

# Substrings identifying which constraint a driver error message is about.
# PostgreSQL reports the constraint name, SQLite the column or CHECK text.
_CONSTRAINT_HINTS: tuple[tuple[str, str], ...] = (
    (SKU_UNIQUE_CONSTRAINT, SKU_UNIQUE_CONSTRAINT),
    ("product_variants.sku", SKU_UNIQUE_CONSTRAINT),
    (IMAGE_URL_CONSTRAINT, IMAGE_URL_CONSTRAINT),
    (ASSESSMENT_UNIQUE_CONSTRAINT, ASSESSMENT_UNIQUE_CONSTRAINT),
    ("product_assessments.product_id", ASSESSMENT_UNIQUE_CONSTRAINT),
    ("ck_product_variants_stock", "ck_product_variants_stock"),
    ("ck_product_variants_price", "ck_product_variants_price"),
    ("ck_products_approval_status", "ck_products_approval_status"),
    ("ck_products_price", "ck_products_price"),
)


def constraint_from_error(exc: IntegrityError) -> str | None:
    """Best-effort name of the constraint behind an IntegrityError."""
    message = str(exc.orig) if exc.orig is not None else str(exc)
    for needle, name in _CONSTRAINT_HINTS:
        if needle in message:
            return name
    return None


class CatalogRepository:
    """Repository for catalog database operations.

    Every write method commits on its own: each submission step is
    durable before the next one starts, and compensation deletes what was
    committed when a later step fails.

    Example usage:
        repo = CatalogRepository(session)
        product = await repo.insert_product(seller_id, category_id, "Mug", price)
        total = await repo.get_total_stock(product.id)
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: Async SQLAlchemy session.
        """
        self.session = session

    # ========================================================================
    # Writes
    # ========================================================================

    async def _commit(self, action: str) -> None:
        try:
            await self.session.commit()
        except IntegrityError as exc:
            await self.session.rollback()
            constraint = constraint_from_error(exc)
            raise ConstraintViolationError(
                f"Storage rejected {action}",
                constraint=constraint,
                details={"action": action},
            ) from exc

    async def insert_product(
        self,
        seller_id: str,
        category_id: str | None,
        name: str,
        price: Decimal,
        description: str | None = None,
        variant_label_1: str | None = None,
        variant_label_2: str | None = None,
        product_id: str | None = None,
    ) -> Product:
        """Insert a product in ``pending`` approval state.

        Args:
            seller_id: Owning seller.
            category_id: Resolved category id.
            name: Product name.
            price: Base price.
            description: Optional description.
            variant_label_1: Dimension 1 label.
            variant_label_2: Dimension 2 label.
            product_id: Pre-minted id; generated when omitted.

        Returns:
            Committed product.
        """
        product = Product(
            seller_id=seller_id,
            category_id=category_id,
            name=name,
            description=description,
            price=price,
            approval_status=ApprovalStatus.PENDING.value,
            variant_label_1=variant_label_1,
            variant_label_2=variant_label_2,
        )
        if product_id is not None:
            product.id = product_id
        self.session.add(product)
        await self._commit("product insert")
        return product

    async def insert_images(self, product_id: str, rows: Sequence[ImageRow]) -> list[ProductImage]:
        """Insert image rows for a product.

        Args:
            product_id: Owning product.
            rows: Filtered image rows.

        Returns:
            Committed images.
        """
        images = [
            ProductImage(
                product_id=product_id,
                image_url=row.image_url,
                sort_order=row.sort_order,
                is_primary=row.is_primary,
            )
            for row in rows
        ]
        self.session.add_all(images)
        await self._commit("image insert")
        return images

    async def insert_variants(
        self,
        product_id: str,
        drafts: Sequence[VariantDraft],
        skus: Sequence[str],
        default_price: Decimal,
    ) -> list[ProductVariant]:
        """Insert variant rows.

        Args:
            product_id: Owning product.
            drafts: Final variant drafts.
            skus: Allocated SKUs aligned with ``drafts``.
            default_price: Price for drafts without one.

        Returns:
            Committed variants.
        """
        variants = [
            ProductVariant(
                product_id=product_id,
                sku=sku,
                option1_value=option_or_none(draft.option1),
                option2_value=option_or_none(draft.option2),
                variant_name=draft.variant_name,
                price=draft.price if draft.price is not None else default_price,
                stock=draft.stock or 0,
                thumbnail_url=normalize_remote_url(draft.image),
            )
            for draft, sku in zip(drafts, skus, strict=True)
        ]
        self.session.add_all(variants)
        await self._commit("variant insert")
        return variants

    async def upsert_assessment(
        self,
        product_id: str,
        status: str = QAStatus.PENDING_DIGITAL_REVIEW.value,
        created_by: str | None = None,
    ) -> bool:
        """Create the QA row for a product unless it already exists.

        ``INSERT ... ON CONFLICT (product_id) DO NOTHING``; repeating the
        call is a no-op.

        Args:
            product_id: Assessed product.
            status: Initial QA status.
            created_by: Submitting seller.

        Returns:
            True if a row was inserted, False if one already existed.
        """
        dialect = self.session.get_bind().dialect.name
        insert = sqlite.insert if dialect == "sqlite" else postgresql.insert
        stmt = (
            insert(ProductAssessment)
            .values(
                id=str(uuid4()),
                product_id=product_id,
                status=status,
                submitted_at=datetime.now(timezone.utc),
                created_by=created_by,
            )
            .on_conflict_do_nothing(index_elements=["product_id"])
        )
        result = await self.session.execute(stmt)
        await self._commit("QA assessment upsert")
        return bool(result.rowcount)

    async def patch_variant(
        self,
        variant_id: str,
        price: Decimal | int | float | str | None = None,
        stock: int | None = None,
    ) -> ProductVariant:
        """Update a variant's price and/or stock.

        This is the only mutation variants get after creation.

        Args:
            variant_id: Variant to patch.
            price: New price (>= 0).
            stock: New stock (>= 0).

        Returns:
            Updated variant.

        Raises:
            ValidationError: On negative values.
            VariantNotFoundError: If the variant does not exist.
        """
        if price is not None and to_decimal(price) < 0:
            raise ValidationError("price", "cannot be negative", value=str(price))
        if stock is not None and stock < 0:
            raise ValidationError("stock", "cannot be negative", value=stock)

        variant = await self.get_variant(variant_id)
        if variant is None:
            raise VariantNotFoundError(variant_id)

        if price is not None:
            variant.price = to_decimal(price)
        if stock is not None:
            variant.stock = stock
        await self._commit("variant patch")
        return variant

    async def set_variant_barcode(self, variant_id: str, barcode: str) -> ProductVariant:
        """Store a barcode on a variant.

        Raises:
            VariantNotFoundError: If the variant does not exist.
        """
        variant = await self.get_variant(variant_id)
        if variant is None:
            raise VariantNotFoundError(variant_id)
        variant.barcode = barcode
        await self._commit("variant barcode update")
        return variant

    # ========================================================================
    # Compensation
    # ========================================================================

    async def delete_variants(self, product_id: str) -> int:
        """Delete all variants of a product; returns the number deleted."""
        result = await self.session.execute(
            delete(ProductVariant).where(ProductVariant.product_id == product_id)
        )
        await self.session.commit()
        return result.rowcount or 0

    async def delete_images(self, product_id: str) -> int:
        """Delete all images of a product; returns the number deleted."""
        result = await self.session.execute(
            delete(ProductImage).where(ProductImage.product_id == product_id)
        )
        await self.session.commit()
        return result.rowcount or 0

    async def delete_product(self, product_id: str) -> int:
        """Delete a product row; returns the number deleted."""
        result = await self.session.execute(delete(Product).where(Product.id == product_id))
        await self.session.commit()
        return result.rowcount or 0

    # ========================================================================
    # Reads
    # ========================================================================

    async def existing_skus(self, candidates: Iterable[str]) -> set[str]:
        """Return the SKUs among ``candidates`` (and their suffixed forms)
        that storage already holds.

        Args:
            candidates: Unsuffixed final SKUs.

        Returns:
            Taken SKUs.
        """
        candidates = list(candidates)
        if not candidates:
            return set()
        prefixes = sorted({candidate.split("-", 1)[0] for candidate in candidates})
        query = select(ProductVariant.sku).where(
            or_(*(ProductVariant.sku.like(f"{prefix}-%") for prefix in prefixes))
        )
        result = await self.session.execute(query)
        return set(result.scalars().all())

    async def get_product(self, product_id: str, include_children: bool = True) -> Product | None:
        """Get product by ID.

        Args:
            product_id: Product ID.
            include_children: Whether to eagerly load images and variants.

        Returns:
            Product if found, None otherwise.
        """
        query = select(Product).where(Product.id == product_id)
        if include_children:
            query = query.options(selectinload(Product.images), selectinload(Product.variants))
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def get_variant(self, variant_id: str) -> ProductVariant | None:
        """Get variant by ID."""
        result = await self.session.execute(
            select(ProductVariant).where(ProductVariant.id == variant_id)
        )
        return result.scalar_one_or_none()

    async def get_seller_variant(self, seller_id: str, variant_id: str) -> ProductVariant | None:
        """Get a variant of one of the seller's non-deleted products.

        Args:
            seller_id: Owning seller.
            variant_id: Variant ID.

        Returns:
            Variant if found and owned by the seller, None otherwise.
        """
        result = await self.session.execute(
            select(ProductVariant)
            .join(Product, Product.id == ProductVariant.product_id)
            .where(
                ProductVariant.id == variant_id,
                Product.seller_id == seller_id,
                Product.deleted_at.is_(None),
            )
        )
        return result.scalar_one_or_none()

    async def get_total_stock(self, product_id: str) -> int:
        """Sum of the product's variant stock.

        Raises:
            ProductNotFoundError: If the product does not exist.
        """
        product = await self.get_product(product_id, include_children=False)
        if product is None:
            raise ProductNotFoundError(product_id)
        result = await self.session.execute(
            select(func.coalesce(func.sum(ProductVariant.stock), 0)).where(
                ProductVariant.product_id == product_id
            )
        )
        return int(result.scalar_one())

    async def find_variant_by_code(
        self,
        seller_id: str,
        code: str,
    ) -> tuple[Product, ProductVariant] | None:
        """Find a seller's variant by barcode, then by SKU.

        Only products that are not soft-deleted are searched.

        Args:
            seller_id: Seller scope.
            code: Normalized (trimmed, uppercased) scan code.

        Returns:
            (product, variant) or None.
        """
        for column in (ProductVariant.barcode, ProductVariant.sku):
            query = (
                select(Product, ProductVariant)
                .join(ProductVariant, ProductVariant.product_id == Product.id)
                .where(
                    and_(
                        column == code,
                        Product.seller_id == seller_id,
                        Product.deleted_at.is_(None),
                    )
                )
                .limit(1)
            )
            result = await self.session.execute(query)
            row = result.first()
            if row is not None:
                return row[0], row[1]
        return None

    async def get_cart_product(self, product_id: str) -> CartProduct:
        """Build the POS snapshot of a product.

        Raises:
            ProductNotFoundError: If the product does not exist or is deleted.
        """
        product = await self.get_product(product_id)
        if product is None or product.deleted_at is not None:
            raise ProductNotFoundError(product_id)
        return to_cart_product(product)


def to_cart_product(product: Product) -> CartProduct:
    """Convert a loaded product (with variants) into its POS snapshot."""
    variants = tuple(
        CartVariant(
            color=variant.option1_value,
            size=variant.option2_value,
            price=to_decimal(variant.price),
            stock=variant.stock,
            variant_id=variant.id,
            sku=variant.sku,
        )
        for variant in product.variants
    )
    return CartProduct(
        id=product.id,
        name=product.name,
        price=to_decimal(product.price),
        stock=sum(v.stock for v in variants),
        variants=variants,
    )
