"""Domain layer - value objects, statuses and exceptions.

This module exports the core domain building blocks:

- **Value Objects**: Immutable objects compared by value (TaxSettings, CartProduct)
- **Statuses**: Approval, QA, payment and scan enumerations
- **Exceptions**: Domain-specific errors and invariant violations

Example usage:
    from sellerdesk.domain import CartProduct, TaxSettings

    product = CartProduct(id="p-1", name="Mug", price=Decimal("150"), stock=5)
    settings = TaxSettings(enable_tax=True, tax_rate=Decimal("12"))
"""

# Base classes
from sellerdesk.domain.base import Entity, ValueObject

# Exceptions
from sellerdesk.domain.exceptions import (
    CartError,
    CartLineNotFoundError,
    CategoryNotFoundError,
    ConstraintViolationError,
    DomainError,
    DuplicateSkuError,
    EmptyCartError,
    NotFoundError,
    PosSessionNotFoundError,
    ProductNotFoundError,
    SaleFailedError,
    StockLimitError,
    ValidationError,
    VariantNotFoundError,
)

# Statuses
from sellerdesk.domain.statuses import ApprovalStatus, PaymentMethod, QAStatus, ScanSource

# Value Objects
from sellerdesk.domain.value_objects import (
    SENTINEL,
    CartProduct,
    CartVariant,
    TaxSettings,
    combo_key,
    option_or_none,
    round_money,
    to_decimal,
)

__all__ = [
    # Base
    "Entity",
    "ValueObject",
    # Exceptions
    "CartError",
    "CartLineNotFoundError",
    "CategoryNotFoundError",
    "ConstraintViolationError",
    "DomainError",
    "DuplicateSkuError",
    "EmptyCartError",
    "NotFoundError",
    "PosSessionNotFoundError",
    "ProductNotFoundError",
    "SaleFailedError",
    "StockLimitError",
    "ValidationError",
    "VariantNotFoundError",
    # Statuses
    "ApprovalStatus",
    "PaymentMethod",
    "QAStatus",
    "ScanSource",
    # Value Objects
    "SENTINEL",
    "CartProduct",
    "CartVariant",
    "TaxSettings",
    "combo_key",
    "option_or_none",
    "round_money",
    "to_decimal",
]
