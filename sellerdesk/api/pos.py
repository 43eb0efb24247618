"""POS API endpoints.

Provides endpoints for POS settings, POS sessions and their carts,
barcode scans and sale completion.
"""

from decimal import Decimal
from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from sellerdesk.api.schemas import (
    AddLineRequest,
    BarcodeLookupSchema,
    CartLineSchema,
    CartTotalsSchema,
    CompleteSaleRequest,
    ErrorResponse,
    POSSettingsSchema,
    PosSessionResponse,
    QuantityUpdateRequest,
    SaleReceiptResponse,
    ScanRequest,
    ScanResponse,
)
from sellerdesk.catalog.repository import CatalogRepository
from sellerdesk.domain.value_objects import TaxSettings, round_money
from sellerdesk.infrastructure.database import get_session
from sellerdesk.pos.barcode import BarcodeResolver, ScanLogger, scan_into_cart
from sellerdesk.pos.cart import CartLine, SaleReceipt
from sellerdesk.pos.sales import DatabaseSaleRecorder
from sellerdesk.pos.sessions import PosSession, PosSessionRegistry, get_pos_session_registry
from sellerdesk.pos.settings import POSSettings, POSSettingsRepository

router = APIRouter(tags=["POS"])


# ============================================================================
# Dependencies
# ============================================================================


def get_registry() -> PosSessionRegistry:
    """Get POS session registry."""
    return get_pos_session_registry()


def get_scan_logger(request: Request) -> ScanLogger:
    """Get the application's scan logger."""
    scan_logger = getattr(request.app.state, "scan_logger", None)
    if scan_logger is None:
        scan_logger = ScanLogger()
        request.app.state.scan_logger = scan_logger
    return scan_logger


# ============================================================================
# Converters
# ============================================================================


def settings_to_schema(settings: POSSettings) -> POSSettingsSchema:
    """Convert POS settings to their schema."""
    return POSSettingsSchema(
        enable_tax=settings.tax.enable_tax,
        tax_rate=settings.tax.tax_rate,
        tax_included_in_price=settings.tax.tax_included_in_price,
        tax_label=settings.tax_label,
        accepted_payment_methods=list(settings.accepted_payment_methods),
        receipt_header=settings.receipt_header,
        receipt_footer=settings.receipt_footer,
        auto_add_on_scan=settings.auto_add_on_scan,
        enable_low_stock_alert=settings.enable_low_stock_alert,
        low_stock_threshold=settings.low_stock_threshold,
    )


def schema_to_settings(schema: POSSettingsSchema) -> POSSettings:
    """Convert a settings schema to POS settings."""
    return POSSettings(
        tax=TaxSettings(
            enable_tax=schema.enable_tax,
            tax_rate=schema.tax_rate,
            tax_included_in_price=schema.tax_included_in_price,
        ),
        tax_label=schema.tax_label,
        accepted_payment_methods=tuple(schema.accepted_payment_methods),
        receipt_header=schema.receipt_header,
        receipt_footer=schema.receipt_footer,
        auto_add_on_scan=schema.auto_add_on_scan,
        enable_low_stock_alert=schema.enable_low_stock_alert,
        low_stock_threshold=schema.low_stock_threshold,
    )


def line_to_schema(line: CartLine, settings: POSSettings) -> CartLineSchema:
    """Convert a cart line to its schema."""
    return CartLineSchema(
        variant_key=line.variant_key,
        product_id=line.product_id,
        variant_id=line.variant_id,
        sku=line.sku,
        name=line.name,
        color=line.color,
        size=line.size,
        quantity=line.quantity,
        max_stock=line.max_stock,
        unit_price=round_money(line.unit_price),
        line_total=round_money(line.line_total),
        low_stock=settings.is_low_stock(line.max_stock),
    )


def session_to_response(session: PosSession) -> PosSessionResponse:
    """Convert a POS session to its response schema."""
    cart = session.cart
    totals = cart.totals().rounded()
    return PosSessionResponse(
        id=session.id,
        seller_id=session.seller_id,
        opened_at=session.opened_at,
        settings=settings_to_schema(cart.settings),
        lines=[line_to_schema(line, cart.settings) for line in cart.lines],
        totals=CartTotalsSchema(
            subtotal=round_money(cart.subtotal),
            net=totals.net,
            tax=totals.tax,
            total=totals.total,
            tax_label=cart.settings.tax_label,
            item_count=cart.item_count,
        ),
    )


def receipt_to_response(receipt: SaleReceipt, settings: POSSettings) -> SaleReceiptResponse:
    """Convert a sale receipt to its response schema."""
    subtotal = sum((line.line_total for line in receipt.lines), Decimal("0"))
    return SaleReceiptResponse(
        sale_id=receipt.sale_id,
        seller_id=receipt.seller_id,
        payment_method=receipt.payment_method,
        lines=[line_to_schema(line, settings) for line in receipt.lines],
        subtotal=round_money(subtotal),
        tax=receipt.totals.tax,
        total=receipt.totals.total,
        note=receipt.note,
        created_at=receipt.created_at,
    )


# ============================================================================
# Settings Endpoints
# ============================================================================


@router.get(
    "/sellers/{seller_id}/pos/settings",
    response_model=POSSettingsSchema,
    summary="Get POS settings",
)
async def get_settings(
    seller_id: str,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> POSSettingsSchema:
    """Get a seller's POS settings (defaults when none are stored)."""
    settings = await POSSettingsRepository(session).get(seller_id)
    return settings_to_schema(settings)


@router.put(
    "/sellers/{seller_id}/pos/settings",
    response_model=POSSettingsSchema,
    summary="Save POS settings",
)
async def save_settings(
    seller_id: str,
    request: POSSettingsSchema,
    session: Annotated[AsyncSession, Depends(get_session)],
    registry: Annotated[PosSessionRegistry, Depends(get_registry)],
) -> POSSettingsSchema:
    """Save a seller's POS settings and refresh their open sessions."""
    settings = await POSSettingsRepository(session).save(seller_id, schema_to_settings(request))
    registry.apply_settings(seller_id, settings)
    return settings_to_schema(settings)


# ============================================================================
# Session Endpoints
# ============================================================================


@router.post(
    "/sellers/{seller_id}/pos/session",
    response_model=PosSessionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Open a POS session",
)
async def open_session(
    seller_id: str,
    session: Annotated[AsyncSession, Depends(get_session)],
    registry: Annotated[PosSessionRegistry, Depends(get_registry)],
) -> PosSessionResponse:
    """Open a POS session; settings are read once, here."""
    settings = await POSSettingsRepository(session).get(seller_id)
    pos_session = registry.open(seller_id, settings)
    return session_to_response(pos_session)


@router.get(
    "/pos/sessions/{session_id}",
    response_model=PosSessionResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Get a POS session",
)
async def get_pos_session(
    session_id: str,
    registry: Annotated[PosSessionRegistry, Depends(get_registry)],
) -> PosSessionResponse:
    """Get a POS session with its cart and totals."""
    return session_to_response(registry.get(session_id))


@router.post(
    "/pos/sessions/{session_id}/lines",
    response_model=PosSessionResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
    summary="Add to cart",
)
async def add_line(
    session_id: str,
    request: AddLineRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
    registry: Annotated[PosSessionRegistry, Depends(get_registry)],
) -> PosSessionResponse:
    """Add one unit of a product (variant) to the session cart."""
    pos_session = registry.get(session_id)
    product = await CatalogRepository(session).get_cart_product(request.product_id)
    pos_session.cart.add_line(product, request.color, request.size)
    return session_to_response(pos_session)


@router.post(
    "/pos/sessions/{session_id}/scan",
    response_model=ScanResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
    summary="Scan a barcode into the cart",
)
async def scan(
    session_id: str,
    request: ScanRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
    registry: Annotated[PosSessionRegistry, Depends(get_registry)],
    scan_logger: Annotated[ScanLogger, Depends(get_scan_logger)],
) -> ScanResponse:
    """Resolve a scanned code and add the match to the cart."""
    pos_session = registry.get(session_id)
    outcome = await scan_into_cart(
        BarcodeResolver(CatalogRepository(session)),
        pos_session.cart,
        request.code,
        scan_logger=scan_logger,
        scan_source=request.scan_source,
        scanner_type=request.scanner_type,
    )
    lookup = outcome.lookup
    return ScanResponse(
        lookup=BarcodeLookupSchema(
            is_found=lookup.is_found,
            code=lookup.code,
            product_id=lookup.product_id,
            variant_id=lookup.variant_id,
            color=lookup.color,
            size=lookup.size,
            name=lookup.name,
            variant_name=lookup.variant_name,
            price=lookup.price,
            stock=lookup.stock,
            sku=lookup.sku,
        ),
        added=outcome.line is not None,
        offer_quick_create=outcome.offer_quick_create,
        session=session_to_response(pos_session),
    )


@router.patch(
    "/pos/sessions/{session_id}/lines/{variant_key}",
    response_model=PosSessionResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Change a line's quantity",
)
async def update_line(
    session_id: str,
    variant_key: str,
    request: QuantityUpdateRequest,
    registry: Annotated[PosSessionRegistry, Depends(get_registry)],
) -> PosSessionResponse:
    """Change a cart line's quantity; reaching 0 removes it."""
    pos_session = registry.get(session_id)
    pos_session.cart.update_quantity(variant_key, request.delta)
    return session_to_response(pos_session)


@router.delete(
    "/pos/sessions/{session_id}/lines/{variant_key}",
    response_model=PosSessionResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Remove a line",
)
async def remove_line(
    session_id: str,
    variant_key: str,
    registry: Annotated[PosSessionRegistry, Depends(get_registry)],
) -> PosSessionResponse:
    """Remove one line from the session cart."""
    pos_session = registry.get(session_id)
    pos_session.cart.remove_line(variant_key)
    return session_to_response(pos_session)


@router.delete(
    "/pos/sessions/{session_id}/lines",
    response_model=PosSessionResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Clear the cart",
)
async def clear_lines(
    session_id: str,
    registry: Annotated[PosSessionRegistry, Depends(get_registry)],
) -> PosSessionResponse:
    """Remove every line from the session cart."""
    pos_session = registry.get(session_id)
    pos_session.cart.clear()
    return session_to_response(pos_session)


@router.post(
    "/pos/sessions/{session_id}/complete",
    response_model=SaleReceiptResponse,
    responses={
        404: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
    },
    summary="Complete the sale",
)
async def complete_sale(
    session_id: str,
    request: CompleteSaleRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
    registry: Annotated[PosSessionRegistry, Depends(get_registry)],
) -> SaleReceiptResponse:
    """Record the cart as a sale; the cart clears only on success."""
    pos_session = registry.get(session_id)
    receipt = await pos_session.cart.complete_sale(
        DatabaseSaleRecorder(session), request.payment_method, request.note
    )
    return receipt_to_response(receipt, pos_session.settings)
