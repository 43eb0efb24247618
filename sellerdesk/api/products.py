"""Catalog API endpoints.

Provides endpoints for variant preview, product submission, stock reads,
variant price/stock patches and variant barcode assignment.
"""

from decimal import Decimal
from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from sellerdesk.api.schemas import (
    BarcodeAssignRequest,
    ErrorResponse,
    ProductCreateRequest,
    ProductCreateResponse,
    StockResponse,
    VariantDraftSchema,
    VariantEditSchema,
    VariantOptionsSchema,
    VariantPatchRequest,
    VariantPreviewRequest,
    VariantPreviewResponse,
    VariantResponse,
)
from sellerdesk.catalog.composer import VariantDraft, VariantEditCache, compose_variants
from sellerdesk.catalog.models import ProductVariant
from sellerdesk.catalog.options import OptionValueStore
from sellerdesk.catalog.repository import CatalogRepository
from sellerdesk.catalog.submission import CatalogSubmissionCoordinator, ProductSubmission
from sellerdesk.domain.exceptions import VariantNotFoundError
from sellerdesk.domain.statuses import ApprovalStatus
from sellerdesk.domain.value_objects import combo_key
from sellerdesk.infrastructure.database import get_session
from sellerdesk.pos.barcode import generate_product_barcode, normalize_code

router = APIRouter(tags=["Catalog"])


# ============================================================================
# Dependencies
# ============================================================================


def get_repository(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> CatalogRepository:
    """Get catalog repository bound to the request session."""
    return CatalogRepository(session)


def get_coordinator(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> CatalogSubmissionCoordinator:
    """Get submission coordinator bound to the request session."""
    return CatalogSubmissionCoordinator(session)


# ============================================================================
# Converters
# ============================================================================


def build_drafts(
    name: str,
    price: Decimal | None,
    options: VariantOptionsSchema,
    edits: list[VariantEditSchema],
) -> list[VariantDraft]:
    """Compose drafts from the form's options and seller edits.

    Edits for combos that are not part of the current composition are
    ignored.
    """
    values_1 = OptionValueStore(options.label_1 or "", options.values_1).values
    values_2 = OptionValueStore(options.label_2 or "", options.values_2).values

    fresh = compose_variants(
        values_1, values_2, options.dimension_2_active, VariantEditCache(), price, name
    )
    by_key = {draft.key: draft for draft in fresh}

    cache = VariantEditCache()
    for edit in edits:
        draft = by_key.get(combo_key(edit.option1, edit.option2))
        if draft is None:
            continue
        changes = edit.model_dump(include={"price", "stock", "sku", "image"}, exclude_none=True)
        cache = cache.with_edit(draft, **changes)

    return compose_variants(
        values_1, values_2, options.dimension_2_active, cache, price, name
    )


def draft_to_schema(draft: VariantDraft) -> VariantDraftSchema:
    """Convert a draft to its response schema."""
    return VariantDraftSchema(
        key=draft.key,
        option1=draft.option1,
        option2=draft.option2,
        variant_name=draft.variant_name,
        price=draft.price,
        stock=draft.stock,
        sku=draft.sku,
        image=draft.image,
    )


def variant_to_response(variant: ProductVariant) -> VariantResponse:
    """Convert a variant model to its response schema."""
    return VariantResponse(
        id=variant.id,
        product_id=variant.product_id,
        sku=variant.sku,
        barcode=variant.barcode,
        option1_value=variant.option1_value,
        option2_value=variant.option2_value,
        variant_name=variant.variant_name,
        price=variant.price,
        stock=variant.stock,
    )


# ============================================================================
# Endpoints
# ============================================================================


@router.post(
    "/sellers/{seller_id}/products/variant-preview",
    response_model=VariantPreviewResponse,
    summary="Preview variant drafts",
    description="Compose variant drafts from option values and seller edits without persisting.",
)
async def preview_variants(
    seller_id: str,
    request: VariantPreviewRequest,
) -> VariantPreviewResponse:
    """Compose variant drafts.

    Args:
        seller_id: Seller ID.
        request: Options and edits.

    Returns:
        Ordered drafts.
    """
    drafts = build_drafts(request.name, request.price, request.options, request.variant_edits)
    return VariantPreviewResponse(
        drafts=[draft_to_schema(d) for d in drafts],
        count=len(drafts),
    )


@router.post(
    "/sellers/{seller_id}/products",
    response_model=ProductCreateResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        409: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
    },
    summary="Submit a product",
    description="Persist a product with images, variants and its QA assessment.",
)
async def create_product(
    seller_id: str,
    request: ProductCreateRequest,
    coordinator: Annotated[CatalogSubmissionCoordinator, Depends(get_coordinator)],
) -> ProductCreateResponse:
    """Submit a product.

    Args:
        seller_id: Seller ID.
        request: Product form.
        coordinator: Submission coordinator.

    Returns:
        Submission result.
    """
    drafts = (
        build_drafts(request.name.strip(), request.price, request.options, request.variant_edits)
        if request.variants_enabled
        else []
    )
    result = await coordinator.submit(
        ProductSubmission(
            seller_id=seller_id,
            name=request.name,
            price=request.price,
            category=request.category,
            description=request.description,
            image_uris=request.image_urls,
            variants_enabled=request.variants_enabled,
            drafts=drafts,
            base_stock=request.base_stock,
            variant_label_1=request.options.label_1 if request.variants_enabled else None,
            variant_label_2=(
                request.options.label_2
                if request.variants_enabled and request.options.dimension_2_active
                else None
            ),
        )
    )
    return ProductCreateResponse(
        product_id=result.product_id,
        approval_status=ApprovalStatus.PENDING.value,
        category_id=result.category_id,
        category_from_fallback=result.category_from_fallback,
        image_urls=result.image_urls,
        skus=result.skus,
        total_stock=result.total_stock,
        qa_created=result.qa_created,
    )


@router.get(
    "/products/{product_id}/stock",
    response_model=StockResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Get total stock",
)
async def get_stock(
    product_id: str,
    repository: Annotated[CatalogRepository, Depends(get_repository)],
) -> StockResponse:
    """Get a product's total stock (sum of its variants)."""
    total = await repository.get_total_stock(product_id)
    return StockResponse(product_id=product_id, total_stock=total)


@router.patch(
    "/variants/{variant_id}",
    response_model=VariantResponse,
    responses={404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
    summary="Patch variant price/stock",
)
async def patch_variant(
    variant_id: str,
    request: VariantPatchRequest,
    repository: Annotated[CatalogRepository, Depends(get_repository)],
) -> VariantResponse:
    """Update a variant's price and/or stock."""
    variant = await repository.patch_variant(variant_id, price=request.price, stock=request.stock)
    return variant_to_response(variant)


@router.post(
    "/sellers/{seller_id}/variants/{variant_id}/barcode",
    response_model=VariantResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
    summary="Assign a barcode to a variant",
)
async def assign_barcode(
    seller_id: str,
    variant_id: str,
    request: BarcodeAssignRequest,
    repository: Annotated[CatalogRepository, Depends(get_repository)],
) -> VariantResponse:
    """Store an explicit or generated barcode on one of the seller's variants."""
    variant = await repository.get_seller_variant(seller_id, variant_id)
    if variant is None:
        raise VariantNotFoundError(variant_id)
    barcode = normalize_code(request.barcode) or generate_product_barcode(
        seller_id, variant_id, request.format
    )
    variant = await repository.set_variant_barcode(variant_id, barcode)
    return variant_to_response(variant)
