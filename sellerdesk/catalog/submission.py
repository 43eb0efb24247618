"""Catalog submission coordinator.

Persists a seller's product form as product, image, variant and QA rows.
Steps run strictly in order, each awaited and committed before the next,
because every later step needs the product id minted for the product row.
A failure after the product row exists deletes whatever was inserted and
re-raises.

Cancellation is not a failure: a task cancelled mid-submission leaves the
rows committed so far in place.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any
from uuid import uuid4

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from sellerdesk.catalog.categories import CategoryResolver, category_name
from sellerdesk.catalog.composer import VariantDraft
from sellerdesk.catalog.images import build_image_rows
from sellerdesk.catalog.repository import CatalogRepository
from sellerdesk.catalog.sku import SkuAllocator, draft_sku
from sellerdesk.catalog.stock import compute_total_stock, finalize_variants, parse_base_stock
from sellerdesk.domain.exceptions import ValidationError
from sellerdesk.domain.value_objects import to_decimal
from sellerdesk.infrastructure.config import settings

logger = structlog.get_logger()


@dataclass
class ProductSubmission:
    """Product form as submitted by a seller.

    Attributes:
        seller_id: Owning seller.
        name: Product name.
        price: Base price (> 0).
        category: Category name (or object with a ``name``).
        description: Optional description.
        image_uris: Raw image URIs of any shape.
        variants_enabled: Whether the seller switched the variant system on.
        drafts: Composed variant drafts.
        base_stock: Attribute-less stock; blank means 0.
        variant_label_1: Dimension 1 label.
        variant_label_2: Dimension 2 label.
    """

    seller_id: str
    name: str
    price: Decimal | int | float | str | None
    category: Any
    description: str | None = None
    image_uris: Sequence[str | None] = field(default_factory=list)
    variants_enabled: bool = False
    drafts: Sequence[VariantDraft] = field(default_factory=list)
    base_stock: int | str | None = 0
    variant_label_1: str | None = None
    variant_label_2: str | None = None


@dataclass
class SubmissionResult:
    """Outcome of a successful submission.

    Attributes:
        product_id: Minted product id.
        category_id: Resolved category id.
        category_from_fallback: Whether the static list supplied the id.
        image_urls: Persisted image URLs in sort order.
        skus: Persisted variant SKUs in insertion order.
        total_stock: Sum of persisted variant stock.
        qa_created: Whether this call created the QA row.
    """

    product_id: str
    category_id: str
    category_from_fallback: bool
    image_urls: list[str]
    skus: list[str]
    total_stock: int
    qa_created: bool


class CatalogSubmissionCoordinator:
    """Runs the ordered catalog submission steps with compensation.

    Example usage:
        coordinator = CatalogSubmissionCoordinator(session)
        result = await coordinator.submit(ProductSubmission(...))
    """

    def __init__(
        self,
        session: AsyncSession,
        repository: CatalogRepository | None = None,
        resolver: CategoryResolver | None = None,
        allocator: SkuAllocator | None = None,
        placeholder_image_url: str | None = None,
        qa_initial_status: str | None = None,
    ) -> None:
        """Initialize coordinator.

        Args:
            session: Async SQLAlchemy session.
            repository: Catalog repository (defaults to one on ``session``).
            resolver: Category resolver (defaults to one on ``session``).
            allocator: SKU allocator (defaults to configured max attempts).
            placeholder_image_url: Image used when no URI survives filtering.
            qa_initial_status: Status of newly created QA rows.
        """
        self.session = session
        self.repository = repository or CatalogRepository(session)
        self.resolver = resolver or CategoryResolver(session)
        self.allocator = allocator or SkuAllocator(settings.sku_max_attempts)
        self.placeholder_image_url = placeholder_image_url or settings.placeholder_image_url
        self.qa_initial_status = qa_initial_status or settings.qa_initial_status

    # ========================================================================
    # Validation
    # ========================================================================

    def validate(self, submission: ProductSubmission) -> tuple[Decimal, list[VariantDraft]]:
        """Validate a submission without any I/O.

        Args:
            submission: Product form.

        Returns:
            (base price, final variant rows).

        Raises:
            ValidationError: On empty name, non-positive price, missing
                category, drafts without stock or non-positive total stock.
        """
        if not submission.name or not submission.name.strip():
            raise ValidationError("name", "product name is required")

        if submission.price is None or str(submission.price).strip() == "":
            raise ValidationError("price", "price is required")
        try:
            price = to_decimal(submission.price)
        except (ArithmeticError, ValueError):
            raise ValidationError("price", "must be a number", value=str(submission.price))
        if not price.is_finite() or price <= 0:
            raise ValidationError("price", "must be greater than 0", value=str(price))

        if not category_name(submission.category):
            raise ValidationError("category", "category is required")

        rows = finalize_variants(
            submission.drafts,
            variants_enabled=submission.variants_enabled,
            base_price=price,
            name_prefix=submission.name,
            base_stock=parse_base_stock(submission.base_stock),
        )
        return price, rows

    # ========================================================================
    # Submission
    # ========================================================================

    async def submit(self, submission: ProductSubmission) -> SubmissionResult:
        """Persist a product with its images, variants and QA row.

        Args:
            submission: Product form.

        Returns:
            Submission outcome.

        Raises:
            ValidationError: If the form is invalid (nothing is written).
            ConstraintViolationError: If storage rejects a row; everything
                inserted for the product has been deleted.
            DuplicateSkuError: If a variant SKU could not be allocated.
        """
        price, rows = self.validate(submission)
        name = submission.name.strip()
        log = logger.bind(seller_id=submission.seller_id, product_name=name)

        # 1. Category
        category = await self.resolver.resolve(submission.category)
        log.info("Category resolved", category_id=category.id, fallback=category.from_fallback)

        # 2. Product
        product_id = str(uuid4())
        await self.repository.insert_product(
            seller_id=submission.seller_id,
            category_id=category.id,
            name=name,
            price=price,
            description=submission.description,
            variant_label_1=submission.variant_label_1,
            variant_label_2=submission.variant_label_2,
            product_id=product_id,
        )
        log = log.bind(product_id=product_id)
        log.info("Product inserted")

        try:
            # 3. Images
            image_rows = build_image_rows(submission.image_uris, self.placeholder_image_url)
            await self.repository.insert_images(product_id, image_rows)
            log.info("Images inserted", count=len(image_rows))

            # 4. Variants
            candidates = [
                self.allocator.final_sku(
                    product_id, row.sku, draft_sku(name, row.option1, row.option2)
                )
                for row in rows
            ]
            reserved = await self.repository.existing_skus(candidates)
            skus = self.allocator.allocate(product_id, rows, reserved=reserved, name_prefix=name)
            await self.repository.insert_variants(product_id, rows, skus, default_price=price)
            log.info("Variants inserted", count=len(rows))

            # 5. QA assessment
            qa_created = await self.ensure_qa_assessment(product_id, submission.seller_id)
        except Exception as exc:
            log.warning("Submission failed, rolling back", error=str(exc))
            await self._compensate(product_id)
            raise

        total_stock = compute_total_stock(0, rows)
        log.info("Product submitted", total_stock=total_stock, variants=len(skus))
        return SubmissionResult(
            product_id=product_id,
            category_id=category.id,
            category_from_fallback=category.from_fallback,
            image_urls=[row.image_url for row in image_rows],
            skus=skus,
            total_stock=total_stock,
            qa_created=qa_created,
        )

    async def ensure_qa_assessment(self, product_id: str, created_by: str | None = None) -> bool:
        """Create the product's QA row if it does not exist yet.

        Safe to call repeatedly; the second call leaves the single row as is.

        Args:
            product_id: Product to assess.
            created_by: Submitting seller.

        Returns:
            True if this call created the row.
        """
        created = await self.repository.upsert_assessment(
            product_id, status=self.qa_initial_status, created_by=created_by
        )
        logger.info("QA assessment ensured", product_id=product_id, created=created)
        return created

    async def _compensate(self, product_id: str) -> None:
        """Delete variants, images and the product, in that order."""
        await self.session.rollback()
        try:
            variants = await self.repository.delete_variants(product_id)
            images = await self.repository.delete_images(product_id)
            products = await self.repository.delete_product(product_id)
        except Exception:
            logger.exception("Rollback failed", product_id=product_id)
            return
        logger.info(
            "Submission rolled back",
            product_id=product_id,
            variants_deleted=variants,
            images_deleted=images,
            products_deleted=products,
        )
