"""Stock aggregation and final variant row assembly.

The persisted variants of a product always sum to its displayed total
stock. Attribute-less inventory entered next to real variants is carried
by a hidden base variant.
"""

from collections.abc import Iterable, Sequence
from decimal import Decimal

from sellerdesk.catalog.composer import VariantDraft
from sellerdesk.catalog.sku import base_sku, draft_sku
from sellerdesk.domain.exceptions import ValidationError
from sellerdesk.domain.value_objects import SENTINEL, to_decimal

DEFAULT_VARIANT_NAME = "Default"


def parse_base_stock(value: int | str | None) -> int:
    """Read the base stock field; a blank field means 0.

    Args:
        value: Raw field value.

    Returns:
        Non-negative stock figure.

    Raises:
        ValidationError: If the value is not a non-negative integer.
    """
    if value is None:
        return 0
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return 0
        try:
            value = int(value)
        except ValueError:
            raise ValidationError("base_stock", "must be a whole number", value=value)
    if value < 0:
        raise ValidationError("base_stock", "cannot be negative", value=value)
    return value


def compute_total_stock(base_stock: int, variants: Iterable[VariantDraft]) -> int:
    """Total stock = base stock + sum of variant stock.

    Drafts whose stock was never entered count as 0 here; submission
    validation rejects them separately.

    Args:
        base_stock: Attribute-less stock (>= 0).
        variants: Composed drafts.

    Returns:
        Total units on hand.
    """
    if base_stock < 0:
        raise ValidationError("base_stock", "cannot be negative", value=base_stock)
    return base_stock + sum(v.stock or 0 for v in variants)


def build_base_variant(
    base_price: Decimal | int | float | str | None,
    name_prefix: str | None,
    base_stock: int,
) -> VariantDraft | None:
    """Synthesize the hidden base variant, if one is needed.

    Args:
        base_price: Product base price.
        name_prefix: Product name.
        base_stock: Attribute-less stock.

    Returns:
        Base draft (both options sentinel, SKU ending in ``-BASE``) when
        ``base_stock > 0``, else None.
    """
    if base_stock <= 0:
        return None
    return VariantDraft(
        option1=SENTINEL,
        option2=SENTINEL,
        price=to_decimal(base_price) if base_price is not None else None,
        stock=base_stock,
        sku=base_sku(name_prefix),
    )


def build_default_variant(
    base_price: Decimal | int | float | str | None,
    name_prefix: str | None,
    stock: int,
) -> VariantDraft:
    """Single row used when the variant system is off or produced nothing."""
    return VariantDraft(
        option1=SENTINEL,
        option2=SENTINEL,
        price=to_decimal(base_price) if base_price is not None else None,
        stock=stock,
        sku=draft_sku(name_prefix, SENTINEL, SENTINEL),
    )


def validate_drafts(drafts: Sequence[VariantDraft]) -> None:
    """Check that every draft is persistable.

    Raises:
        ValidationError: If a draft has no stock entered or a negative
            price or stock.
    """
    for draft in drafts:
        if draft.stock is None:
            raise ValidationError(
                "variants",
                f"stock not entered for variant '{draft.key}'",
                combo_key=draft.key,
            )
        if draft.stock < 0:
            raise ValidationError(
                "variants",
                f"stock cannot be negative for variant '{draft.key}'",
                combo_key=draft.key,
            )
        if draft.price is not None and draft.price < 0:
            raise ValidationError(
                "variants",
                f"price cannot be negative for variant '{draft.key}'",
                combo_key=draft.key,
            )


def finalize_variants(
    drafts: Sequence[VariantDraft],
    variants_enabled: bool,
    base_price: Decimal | int | float | str | None,
    name_prefix: str | None,
    base_stock: int = 0,
) -> list[VariantDraft]:
    """Assemble the variant rows to persist.

    Args:
        drafts: Composed drafts.
        variants_enabled: Whether the seller switched the variant system on.
        base_price: Product base price (price of base/default rows).
        name_prefix: Product name.
        base_stock: Attribute-less stock. With variants on it becomes the
            hidden base row; with variants off it is the product's stock.

    Returns:
        Base row (if any) followed by the drafts, or a single ``Default``
        row when the variant system is off or produced no drafts.

    Raises:
        ValidationError: On drafts without stock or a non-positive total.
    """
    if variants_enabled and drafts:
        validate_drafts(drafts)
        rows = list(drafts)
        base = build_base_variant(base_price, name_prefix, base_stock)
        if base is not None:
            rows.insert(0, base)
    else:
        rows = [build_default_variant(base_price, name_prefix, base_stock)]

    total = compute_total_stock(0, rows)
    if total <= 0:
        raise ValidationError("stock", "total stock must be greater than 0", total=total)
    return rows
