"""Domain exceptions.

All domain-level errors that represent business rule violations.
Pure components (composer, allocator, cart, tax) raise them directly;
the submission coordinator translates storage failures into them so that
callers only ever handle this hierarchy.
"""

from typing import Any


class DomainError(Exception):
    """Base class for all domain exceptions.

    All domain errors should inherit from this class to allow
    catching domain-specific errors at the application layer.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize domain error.

        Args:
            message: Human-readable error message.
            details: Optional dictionary with additional error context.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


# ============================================================================
# Validation Errors
# ============================================================================


class ValidationError(DomainError):
    """Raised for client-detectable input problems (no I/O involved).

    Examples: empty product name, non-positive price, non-positive total
    stock, missing category, a variant whose stock was never entered.
    """

    def __init__(self, field: str, reason: str, **details: Any) -> None:
        """Initialize validation error.

        Args:
            field: Name of the offending field.
            reason: Explanation of why the value is invalid.
            **details: Extra context merged into ``details``.
        """
        super().__init__(
            f"Invalid {field}: {reason}",
            details={"field": field, "reason": reason, **details},
        )
        self.field = field
        self.reason = reason


# ============================================================================
# Storage Errors
# ============================================================================


class ConstraintViolationError(DomainError):
    """Raised when the storage layer rejects a write.

    The storage constraints (unique SKU, image URL check, non-negative
    price/stock, unique QA row) are the source of truth; client-side
    filtering only avoids the round trip. The error is retryable from the
    seller's point of view once the offending input is fixed.
    """

    retryable = True

    def __init__(
        self,
        message: str,
        constraint: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize constraint violation error.

        Args:
            message: Human-readable error message.
            constraint: Name of the violated constraint, when known.
            details: Optional additional context.
        """
        merged = {"constraint": constraint, **(details or {})}
        super().__init__(message, details=merged)
        self.constraint = constraint


class DuplicateSkuError(ConstraintViolationError):
    """Raised when no free SKU could be allocated for a variant combo."""

    def __init__(self, combo_key: str, sku: str, attempts: int) -> None:
        """Initialize duplicate SKU error.

        Args:
            combo_key: Combo key of the variant that could not be allocated.
            sku: Last SKU candidate that collided.
            attempts: Number of candidates tried.
        """
        super().__init__(
            f"Could not allocate a unique SKU for variant '{combo_key}' "
            f"after {attempts} attempts (last tried '{sku}')",
            constraint="uq_product_variants_sku",
            details={"combo_key": combo_key, "sku": sku, "attempts": attempts},
        )
        self.combo_key = combo_key


# ============================================================================
# Not Found Errors
# ============================================================================


class NotFoundError(DomainError):
    """Base class for lookups that found nothing."""

    def __init__(self, entity_type: str, key: str) -> None:
        """Initialize not found error.

        Args:
            entity_type: Type of entity (e.g., "Product", "Category").
            key: Identifier or name that was looked up.
        """
        super().__init__(
            f"{entity_type} '{key}' not found",
            details={"entity_type": entity_type, "key": key},
        )
        self.entity_type = entity_type
        self.key = key


class CategoryNotFoundError(NotFoundError):
    """Raised when a category name cannot be resolved.

    The submission coordinator recovers from it with the static fallback
    list; it is never fatal to a submission.
    """

    def __init__(self, name: str) -> None:
        super().__init__("Category", name)


class ProductNotFoundError(NotFoundError):
    """Raised when a product is not found."""

    def __init__(self, product_id: str) -> None:
        super().__init__("Product", product_id)


class VariantNotFoundError(NotFoundError):
    """Raised when a product variant is not found."""

    def __init__(self, variant_id: str) -> None:
        super().__init__("Variant", variant_id)


class PosSessionNotFoundError(NotFoundError):
    """Raised when a POS session is not found."""

    def __init__(self, session_id: str) -> None:
        super().__init__("POS session", session_id)


# ============================================================================
# Cart Errors
# ============================================================================


class CartError(DomainError):
    """Base class for POS cart errors."""

    pass


class StockLimitError(CartError):
    """Raised when adding to a cart line would exceed its stock snapshot.

    Non-fatal: the cart is left exactly as it was.
    """

    def __init__(self, variant_key: str, max_stock: int) -> None:
        """Initialize stock limit error.

        Args:
            variant_key: Cart line key that hit the limit.
            max_stock: Stock snapshot taken when the line was created.
        """
        super().__init__(
            f"Only {max_stock} units available for '{variant_key}'",
            details={"variant_key": variant_key, "max_stock": max_stock},
        )
        self.variant_key = variant_key
        self.max_stock = max_stock


class CartLineNotFoundError(CartError):
    """Raised when a cart line key is not in the cart."""

    def __init__(self, variant_key: str) -> None:
        super().__init__(
            f"Cart line '{variant_key}' not found",
            details={"variant_key": variant_key},
        )


class EmptyCartError(CartError):
    """Raised when trying to complete a sale with an empty cart."""

    def __init__(self) -> None:
        super().__init__("Cannot complete a sale with an empty cart")


class SaleFailedError(CartError):
    """Raised when the order sink rejects a sale.

    The cart is left untouched so the sale can be retried.
    """

    def __init__(self, reason: str) -> None:
        super().__init__(
            f"Sale could not be completed: {reason}",
            details={"reason": reason},
        )
