"""API schemas for SellerDesk.

Pydantic models for request/response validation and serialization.
Money fields are Decimals quantized to cents and serialize as strings.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field

from sellerdesk.domain.statuses import PaymentMethod, ScanSource


# ============================================================================
# Common Schemas
# ============================================================================


class ErrorResponse(BaseModel):
    """Standard error response.

    All API errors follow this format for consistency.
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: dict[str, Any] = Field(
        default_factory=dict, description="Additional error details"
    )
    retryable: bool = Field(
        default=False, description="Whether retrying after fixing input can succeed"
    )
    request_id: str | None = Field(
        default=None, description="Request ID for correlation"
    )


# ============================================================================
# Catalog Schemas
# ============================================================================


class VariantOptionsSchema(BaseModel):
    """Option values of the two variant dimensions."""

    label_1: str | None = Field(default="Color", description="Dimension 1 label")
    values_1: list[str] = Field(default_factory=list, description="Dimension 1 values")
    label_2: str | None = Field(default="Size", description="Dimension 2 label")
    values_2: list[str] = Field(default_factory=list, description="Dimension 2 values")
    dimension_2_active: bool = Field(
        default=False, description="Whether dimension 2 is enabled"
    )


class VariantEditSchema(BaseModel):
    """Seller edit of one variant combo."""

    option1: str = Field(..., description="Dimension 1 value")
    option2: str = Field(default="-", description="Dimension 2 value, '-' when unused")
    price: Decimal | None = Field(default=None, description="Edited price")
    stock: int | None = Field(default=None, description="Entered stock")
    sku: str | None = Field(default=None, description="Edited SKU text")
    image: str | None = Field(default=None, description="Variant image URL")


class VariantPreviewRequest(BaseModel):
    """Request to compose variant drafts."""

    name: str = Field(default="", description="Product name (SKU prefix source)")
    price: Decimal | None = Field(default=None, description="Base price")
    options: VariantOptionsSchema = Field(default_factory=VariantOptionsSchema)
    variant_edits: list[VariantEditSchema] = Field(default_factory=list)


class VariantDraftSchema(BaseModel):
    """Composed, unpersisted variant."""

    key: str = Field(..., description="Combo key")
    option1: str
    option2: str
    variant_name: str
    price: Decimal | None
    stock: int | None
    sku: str
    image: str | None = None


class VariantPreviewResponse(BaseModel):
    """Composed variant drafts."""

    drafts: list[VariantDraftSchema]
    count: int


class ProductCreateRequest(BaseModel):
    """Product form submitted by a seller."""

    name: str = Field(default="", max_length=500, description="Product name")
    description: str | None = Field(default=None, description="Product description")
    price: Decimal | None = Field(default=None, description="Base price")
    category: str = Field(default="", description="Category name")
    image_urls: list[str | None] = Field(
        default_factory=list, description="Image URIs; only http(s) URLs are kept"
    )
    variants_enabled: bool = Field(default=False, description="Whether variants are used")
    options: VariantOptionsSchema = Field(default_factory=VariantOptionsSchema)
    variant_edits: list[VariantEditSchema] = Field(default_factory=list)
    base_stock: int | str | None = Field(
        default=None, description="Stock without attributes; blank means 0"
    )


class ProductCreateResponse(BaseModel):
    """Result of a catalog submission."""

    product_id: str
    approval_status: str
    category_id: str
    category_from_fallback: bool
    image_urls: list[str]
    skus: list[str]
    total_stock: int
    qa_created: bool


class StockResponse(BaseModel):
    """Total stock of a product."""

    product_id: str
    total_stock: int


class VariantPatchRequest(BaseModel):
    """Price/stock patch of a persisted variant."""

    price: Decimal | None = Field(default=None, description="New price (>= 0)")
    stock: int | None = Field(default=None, description="New stock (>= 0)")


class BarcodeAssignRequest(BaseModel):
    """Barcode assignment for a variant."""

    barcode: str | None = Field(
        default=None, description="Explicit barcode; generated when omitted"
    )
    format: str = Field(default="CODE128", description="CODE128 or EAN-13")


class VariantResponse(BaseModel):
    """Persisted variant."""

    id: str
    product_id: str
    sku: str
    barcode: str | None = None
    option1_value: str | None = None
    option2_value: str | None = None
    variant_name: str
    price: Decimal
    stock: int


# ============================================================================
# POS Schemas
# ============================================================================


class POSSettingsSchema(BaseModel):
    """Seller POS settings."""

    enable_tax: bool = False
    tax_rate: Decimal = Field(default=Decimal("12"), ge=0, description="Percent")
    tax_included_in_price: bool = True
    tax_label: str = "VAT"
    accepted_payment_methods: list[PaymentMethod] = Field(
        default_factory=lambda: [PaymentMethod.CASH, PaymentMethod.CARD, PaymentMethod.EWALLET]
    )
    receipt_header: str = "Thank you for shopping with us!"
    receipt_footer: str = "Please come again!"
    auto_add_on_scan: bool = True
    enable_low_stock_alert: bool = True
    low_stock_threshold: int = Field(default=10, ge=0)


class CartLineSchema(BaseModel):
    """Cart line."""

    variant_key: str
    product_id: str
    variant_id: str | None = None
    sku: str | None = None
    name: str
    color: str | None = None
    size: str | None = None
    quantity: int
    max_stock: int
    unit_price: Decimal
    line_total: Decimal
    low_stock: bool = False


class CartTotalsSchema(BaseModel):
    """Derived cart totals, rounded for display."""

    subtotal: Decimal
    net: Decimal
    tax: Decimal
    total: Decimal
    tax_label: str
    item_count: int


class PosSessionResponse(BaseModel):
    """Open POS session with its cart."""

    id: str
    seller_id: str
    opened_at: datetime
    settings: POSSettingsSchema
    lines: list[CartLineSchema]
    totals: CartTotalsSchema


class AddLineRequest(BaseModel):
    """Add one unit of a product (variant) to the cart."""

    product_id: str = Field(..., description="Product ID")
    color: str | None = Field(default=None, description="Dimension 1 value")
    size: str | None = Field(default=None, description="Dimension 2 value")


class QuantityUpdateRequest(BaseModel):
    """Change a line's quantity."""

    delta: int = Field(..., description="Units to add (negative to remove)")


class ScanRequest(BaseModel):
    """Scanned code."""

    code: str = Field(..., description="Raw scanned code")
    scan_source: ScanSource = Field(default=ScanSource.POS)
    scanner_type: str = Field(default="hardware", description="hardware, camera or manual")


class BarcodeLookupSchema(BaseModel):
    """Barcode lookup result."""

    is_found: bool
    code: str
    product_id: str | None = None
    variant_id: str | None = None
    color: str | None = None
    size: str | None = None
    name: str | None = None
    variant_name: str | None = None
    price: Decimal | None = None
    stock: int | None = None
    sku: str | None = None


class ScanResponse(BaseModel):
    """Scan outcome with the updated session."""

    lookup: BarcodeLookupSchema
    added: bool
    offer_quick_create: bool
    session: PosSessionResponse


class CompleteSaleRequest(BaseModel):
    """Complete the session's sale."""

    payment_method: PaymentMethod = Field(..., description="How the customer paid")
    note: str | None = Field(default=None, description="Cashier note")


class SaleReceiptResponse(BaseModel):
    """Completed sale."""

    sale_id: str
    seller_id: str
    payment_method: PaymentMethod
    lines: list[CartLineSchema]
    subtotal: Decimal
    tax: Decimal
    total: Decimal
    note: str | None = None
    created_at: datetime
