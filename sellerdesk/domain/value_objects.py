"""Value Objects for the domain layer.

Value objects are immutable objects that are defined by their attributes
rather than identity. They are interchangeable when their values are equal.
"""

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal

from sellerdesk.domain.base import ValueObject

# Placeholder for an unused option dimension in combo keys and drafts.
SENTINEL = "-"

TWO_PLACES = Decimal("0.01")


# ============================================================================
# Money Helpers
# ============================================================================


def to_decimal(value: Decimal | int | float | str) -> Decimal:
    """Convert a numeric value to Decimal without binary float noise.

    Args:
        value: Amount in major units.

    Returns:
        Decimal amount.
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def round_money(amount: Decimal) -> Decimal:
    """Quantize an amount to cents.

    Only display and serialization boundaries call this; intermediate
    arithmetic always works on unrounded values.

    Args:
        amount: Exact amount.

    Returns:
        Amount rounded half-up to two decimal places.
    """
    return amount.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


# ============================================================================
# Combo Keys
# ============================================================================


def combo_key(option1: str, option2: str) -> str:
    """Build the key identifying one (option1, option2) pair.

    Args:
        option1: Dimension 1 value or the sentinel.
        option2: Dimension 2 value or the sentinel.

    Returns:
        Key of the form ``"<option1>-<option2>"``.
    """
    return f"{option1}-{option2}"


def option_or_none(value: str | None) -> str | None:
    """Map the sentinel (or a blank) to None for persistence."""
    if value is None or value == SENTINEL or not value.strip():
        return None
    return value


# ============================================================================
# Tax Settings
# ============================================================================


@dataclass(frozen=True)
class TaxSettings(ValueObject):
    """Seller tax configuration consumed by the tax engine.

    Attributes:
        enable_tax: Whether tax applies at all.
        tax_rate: Percentage rate (12 means 12%).
        tax_included_in_price: Whether prices already embed the tax.
    """

    enable_tax: bool = False
    tax_rate: Decimal = Decimal("12")
    tax_included_in_price: bool = True

    def __post_init__(self) -> None:
        """Validate and normalize the rate."""
        rate = to_decimal(self.tax_rate)
        if rate < 0:
            raise ValueError("Tax rate cannot be negative")
        object.__setattr__(self, "tax_rate", rate)


# ============================================================================
# POS Product Snapshot
# ============================================================================


@dataclass(frozen=True)
class CartVariant(ValueObject):
    """One sellable variant of a product as seen by the POS.

    Attributes:
        color: Dimension 1 value, None when unused.
        size: Dimension 2 value, None when unused.
        price: Unit price.
        stock: Stock on hand when the snapshot was taken.
        variant_id: Persisted variant id, when known.
        sku: Variant SKU, when known.
    """

    color: str | None
    size: str | None
    price: Decimal
    stock: int
    variant_id: str | None = None
    sku: str | None = None

    def matches(self, color: str | None, size: str | None) -> bool:
        """Check whether this variant is the (color, size) combination."""
        return (self.color or None) == (color or None) and (self.size or None) == (
            size or None
        )


@dataclass(frozen=True)
class CartProduct(ValueObject):
    """Product snapshot the POS cart adds lines from.

    Attributes:
        id: Product id.
        name: Display name.
        price: Base unit price.
        stock: Total stock (used when the product has no variant dimensions).
        variants: Sellable variants.
    """

    id: str
    name: str
    price: Decimal
    stock: int
    variants: tuple[CartVariant, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        """Validate product snapshot."""
        if not self.id or not self.id.strip():
            raise ValueError("Product ID cannot be empty")
        object.__setattr__(self, "price", to_decimal(self.price))

    @property
    def has_variant_dimensions(self) -> bool:
        """Whether any variant carries a color or size value."""
        return any(v.color or v.size for v in self.variants)

    def find_variant(self, color: str | None, size: str | None) -> CartVariant | None:
        """Find the variant for a (color, size) combination.

        Args:
            color: Dimension 1 value.
            size: Dimension 2 value.

        Returns:
            Matching variant or None.
        """
        for variant in self.variants:
            if variant.matches(color, size):
                return variant
        return None
