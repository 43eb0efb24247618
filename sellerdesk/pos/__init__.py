"""Point of Sale.

Provides the POS cart engine, tax engine, seller POS settings, barcode
resolution with scan logging, and sale recording.
"""

from sellerdesk.pos.barcode import (
    BarcodeLookupResult,
    BarcodeResolver,
    ScanLogger,
    ScanOutcome,
    generate_product_barcode,
    scan_into_cart,
)
from sellerdesk.pos.cart import CartLine, POSCartEngine, SaleReceipt, SaleRecorder, variant_key
from sellerdesk.pos.sales import DatabaseSaleRecorder
from sellerdesk.pos.sessions import PosSession, PosSessionRegistry, get_pos_session_registry
from sellerdesk.pos.settings import POSSettings, POSSettingsRepository
from sellerdesk.pos.tax import TaxBreakdown, calculate_tax

__all__ = [
    # Cart
    "CartLine",
    "POSCartEngine",
    "variant_key",
    # Tax
    "TaxBreakdown",
    "calculate_tax",
    # Settings
    "POSSettings",
    "POSSettingsRepository",
    # Barcode
    "BarcodeLookupResult",
    "BarcodeResolver",
    "ScanLogger",
    "ScanOutcome",
    "generate_product_barcode",
    "scan_into_cart",
    # Sales
    "DatabaseSaleRecorder",
    "SaleReceipt",
    "SaleRecorder",
    # Sessions
    "PosSession",
    "PosSessionRegistry",
    "get_pos_session_registry",
]
