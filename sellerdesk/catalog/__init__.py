"""Seller Catalog.

Provides variant composition, SKU allocation, stock aggregation and the
catalog submission coordinator that persists a product with its images,
variants and QA assessment.
"""

from sellerdesk.catalog.categories import CategoryRef, CategoryResolver, StaticCategoryList
from sellerdesk.catalog.composer import (
    VariantDraft,
    VariantEditCache,
    VariantEditor,
    compose_variants,
)
from sellerdesk.catalog.images import ImageRow, build_image_rows, filter_image_urls
from sellerdesk.catalog.models import (
    Category,
    Product,
    ProductAssessment,
    ProductImage,
    ProductVariant,
)
from sellerdesk.catalog.options import OptionValueStore
from sellerdesk.catalog.repository import CatalogRepository
from sellerdesk.catalog.sku import SkuAllocator, draft_sku, sanitize_sku
from sellerdesk.catalog.stock import (
    build_base_variant,
    compute_total_stock,
    finalize_variants,
)
from sellerdesk.catalog.submission import (
    CatalogSubmissionCoordinator,
    ProductSubmission,
    SubmissionResult,
)

__all__ = [
    # Options / composition
    "OptionValueStore",
    "VariantDraft",
    "VariantEditCache",
    "VariantEditor",
    "compose_variants",
    # SKU
    "SkuAllocator",
    "draft_sku",
    "sanitize_sku",
    # Stock
    "build_base_variant",
    "compute_total_stock",
    "finalize_variants",
    # Images
    "ImageRow",
    "build_image_rows",
    "filter_image_urls",
    # Categories
    "CategoryRef",
    "CategoryResolver",
    "StaticCategoryList",
    # Models
    "Category",
    "Product",
    "ProductAssessment",
    "ProductImage",
    "ProductVariant",
    # Repository
    "CatalogRepository",
    # Submission
    "CatalogSubmissionCoordinator",
    "ProductSubmission",
    "SubmissionResult",
]
