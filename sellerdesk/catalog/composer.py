"""Variant draft composition.

Derives the ordered list of variant drafts from the two option value
stores. Seller edits survive regeneration through a combo-keyed edit cache
that the caller owns and threads through every call; the composer itself
is a pure function.
"""

from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Any

from sellerdesk.catalog.options import OptionValueStore
from sellerdesk.catalog.sku import draft_sku
from sellerdesk.domain.value_objects import SENTINEL, combo_key, to_decimal

_EDITABLE_FIELDS = frozenset({"price", "stock", "sku", "image"})


@dataclass(frozen=True)
class VariantDraft:
    """In-memory, unpersisted candidate variant.

    Attributes:
        option1: Dimension 1 value or the sentinel.
        option2: Dimension 2 value or the sentinel.
        price: Unit price (None until known).
        stock: Units on hand; None means the seller has not entered it yet.
        sku: Draft or seller-edited SKU text.
        image: Optional variant image URI.
    """

    option1: str
    option2: str
    price: Decimal | None
    stock: int | None
    sku: str
    image: str | None = None

    @property
    def key(self) -> str:
        """Combo key, e.g. ``"Red-XL"`` or ``"Red--"``."""
        return combo_key(self.option1, self.option2)

    @property
    def variant_name(self) -> str:
        """Human readable name, e.g. ``"Red / XL"``."""
        parts = [o for o in (self.option1, self.option2) if o and o != SENTINEL]
        return " / ".join(parts) or "Default"


class VariantEditCache(Mapping[str, VariantDraft]):
    """Immutable combo key -> edited draft map.

    The cache is keyed by option value text, so a combo that disappears
    and later comes back picks its old edits up again.

    Example usage:
        cache = VariantEditCache()
        cache = cache.with_edit(drafts[0], price=Decimal("150"))
    """

    def __init__(self, entries: Mapping[str, VariantDraft] | None = None) -> None:
        self._entries: dict[str, VariantDraft] = dict(entries or {})

    def __getitem__(self, key: str) -> VariantDraft:
        return self._entries[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"VariantEditCache({sorted(self._entries)})"

    def with_edit(self, draft: VariantDraft, **changes: Any) -> "VariantEditCache":
        """Return a new cache holding ``draft`` with ``changes`` applied.

        Args:
            draft: Draft being edited (usually from the last composition).
            **changes: Any of price, stock, sku, image.

        Returns:
            New cache; this one is left untouched.

        Raises:
            ValueError: If a non-editable field is passed.
        """
        unknown = set(changes) - _EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"Non-editable variant fields: {sorted(unknown)}")
        if changes.get("price") is not None:
            changes["price"] = to_decimal(changes["price"])
        entries = dict(self._entries)
        entries[draft.key] = replace(draft, **changes)
        return VariantEditCache(entries)

    def without(self, key: str) -> "VariantEditCache":
        """Return a new cache with ``key`` dropped."""
        entries = {k: v for k, v in self._entries.items() if k != key}
        return VariantEditCache(entries)


def _draft_for(
    option1: str,
    option2: str,
    edit_cache: Mapping[str, VariantDraft],
    base_price: Decimal | None,
    name_prefix: str | None,
) -> VariantDraft:
    cached = edit_cache.get(combo_key(option1, option2))
    if cached is not None:
        return VariantDraft(
            option1=option1,
            option2=option2,
            price=cached.price,
            stock=cached.stock,
            sku=cached.sku,
            image=cached.image,
        )
    return VariantDraft(
        option1=option1,
        option2=option2,
        price=base_price,
        stock=None,
        sku=draft_sku(name_prefix, option1, option2),
        image=None,
    )


def compose_variants(
    opt1_values: Sequence[str],
    opt2_values: Sequence[str],
    opt2_active: bool,
    edit_cache: Mapping[str, VariantDraft],
    base_price: Decimal | int | float | str | None,
    name_prefix: str | None,
) -> list[VariantDraft]:
    """Compose variant drafts from the option sets.

    Rules:
        - dimension 2 active and both lists non-empty: cross join, outer
          loop over option 1, inner loop over option 2;
        - otherwise, option 1 non-empty: one draft per option 1 value with
          option 2 set to the sentinel;
        - otherwise: no drafts (submission falls back to a "Default" row).

    Args:
        opt1_values: Dimension 1 values in display order.
        opt2_values: Dimension 2 values in display order.
        opt2_active: Whether the seller enabled dimension 2.
        edit_cache: Caller-owned combo key -> edited draft map.
        base_price: Default price for combos without edits.
        name_prefix: Product name used for draft SKUs.

    Returns:
        Ordered list of drafts.
    """
    price = to_decimal(base_price) if base_price is not None else None

    if opt2_active and opt1_values and opt2_values:
        return [
            _draft_for(o1, o2, edit_cache, price, name_prefix)
            for o1 in opt1_values
            for o2 in opt2_values
        ]

    if opt1_values:
        return [
            _draft_for(o1, SENTINEL, edit_cache, price, name_prefix)
            for o1 in opt1_values
        ]

    return []


class VariantEditor:
    """Editing session for one product's variants.

    Holds the two option stores, the dimension 2 toggle, base price, name
    and the edit cache, and recomposes drafts whenever an input changes.
    It replaces any notion of module-level "current variant data": each
    product form owns its own editor.

    Example usage:
        editor = VariantEditor(name="T-Shirt", base_price=Decimal("100"))
        editor.option1.add("Red")
        editor.edit("Red--", price=Decimal("150"))
        editor.option1.add("Green")
        [d.price for d in editor.drafts]   # [150, 100]
    """

    def __init__(
        self,
        name: str = "",
        base_price: Decimal | int | float | str | None = None,
        option1: OptionValueStore | None = None,
        option2: OptionValueStore | None = None,
        opt2_active: bool = False,
        edit_cache: VariantEditCache | None = None,
    ) -> None:
        self.name = name
        self.base_price = to_decimal(base_price) if base_price is not None else None
        self.option1 = option1 or OptionValueStore("Color")
        self.option2 = option2 or OptionValueStore("Size")
        self._opt2_active = opt2_active
        self.edit_cache = edit_cache or VariantEditCache()
        self._drafts: list[VariantDraft] = []

        self.option1.subscribe(self._on_options_changed)
        self.option2.subscribe(self._on_options_changed)
        self.regenerate()

    @property
    def drafts(self) -> list[VariantDraft]:
        """Drafts from the latest composition."""
        return list(self._drafts)

    @property
    def opt2_active(self) -> bool:
        return self._opt2_active

    @opt2_active.setter
    def opt2_active(self, value: bool) -> None:
        self._opt2_active = value
        self.regenerate()

    def set_base_price(self, price: Decimal | int | float | str | None) -> None:
        """Change the default price used for unedited combos."""
        self.base_price = to_decimal(price) if price is not None else None
        self.regenerate()

    def edit(self, key: str, **changes: Any) -> VariantDraft:
        """Record a seller edit for the draft with ``key``.

        Args:
            key: Combo key of a current draft.
            **changes: Any of price, stock, sku, image.

        Returns:
            The updated draft.

        Raises:
            KeyError: If no current draft has ``key``.
        """
        for draft in self._drafts:
            if draft.key == key:
                self.edit_cache = self.edit_cache.with_edit(draft, **changes)
                self.regenerate()
                return self.edit_cache[key]
        raise KeyError(key)

    def regenerate(self) -> list[VariantDraft]:
        """Recompose drafts from the current inputs."""
        self._drafts = compose_variants(
            self.option1.values,
            self.option2.values,
            self._opt2_active,
            self.edit_cache,
            self.base_price,
            self.name,
        )
        return self.drafts

    def _on_options_changed(self, _store: OptionValueStore) -> None:
        self.regenerate()
