"""Tests for variant draft composition and the edit cache."""

from decimal import Decimal

import pytest

from sellerdesk.catalog.composer import (
    VariantDraft,
    VariantEditCache,
    VariantEditor,
    compose_variants,
)


class TestComposeVariants:
    """Tests for compose_variants."""

    def test_single_dimension(self) -> None:
        """One draft per option 1 value, option 2 set to the sentinel."""
        drafts = compose_variants(
            ["Red", "Blue"], [], False, VariantEditCache(), Decimal("100"), "T-Shirt"
        )
        assert [d.key for d in drafts] == ["Red--", "Blue--"]
        assert all(d.price == Decimal("100") for d in drafts)
        assert all(d.stock is None for d in drafts)
        assert [d.sku for d in drafts] == ["TSHIR-RED", "TSHIR-BLUE"]

    def test_cross_join_order(self) -> None:
        """Active dimension 2 cross joins, option 1 outer, option 2 inner."""
        drafts = compose_variants(
            ["Red", "Blue"], ["S", "M", "L"], True, VariantEditCache(), 100, "Shirt"
        )
        assert len(drafts) == 6
        assert [d.key for d in drafts] == [
            "Red-S", "Red-M", "Red-L", "Blue-S", "Blue-M", "Blue-L",
        ]
        assert drafts[0].variant_name == "Red / S"

    def test_inactive_dimension_2_ignored(self) -> None:
        """Option 2 values are ignored while dimension 2 is off."""
        drafts = compose_variants(["Red"], ["S", "M"], False, VariantEditCache(), 100, "Shirt")
        assert [d.key for d in drafts] == ["Red--"]
        assert drafts[0].variant_name == "Red"

    def test_active_dimension_2_without_values(self) -> None:
        """An active but empty dimension 2 behaves like a single dimension."""
        drafts = compose_variants(["Red"], [], True, VariantEditCache(), 100, "Shirt")
        assert [d.key for d in drafts] == ["Red--"]

    def test_no_option_values(self) -> None:
        """No option 1 values, no drafts."""
        assert compose_variants([], ["S"], True, VariantEditCache(), 100, "Shirt") == []

    def test_edit_survives_regeneration(self) -> None:
        """An edited combo keeps its edit after another value is added."""
        cache = VariantEditCache()
        drafts = compose_variants(["Red"], [], False, cache, Decimal("100"), "Shirt")
        cache = cache.with_edit(drafts[0], price=Decimal("150"), stock=4)

        drafts = compose_variants(["Red", "Green"], [], False, cache, Decimal("100"), "Shirt")

        assert [(d.key, d.price, d.stock) for d in drafts] == [
            ("Red--", Decimal("150"), 4),
            ("Green--", Decimal("100"), None),
        ]

    def test_removed_combo_resurrects_edit(self) -> None:
        """A combo that comes back picks up its cached edit."""
        cache = VariantEditCache()
        drafts = compose_variants(["Red"], [], False, cache, 100, "Shirt")
        cache = cache.with_edit(drafts[0], sku="MY-RED")

        assert compose_variants([], [], False, cache, 100, "Shirt") == []
        drafts = compose_variants(["Red"], [], False, cache, 100, "Shirt")
        assert drafts[0].sku == "MY-RED"


class TestVariantEditCache:
    """Tests for the immutable edit cache."""

    def test_with_edit_returns_new_cache(self) -> None:
        """Editing never mutates the original cache."""
        draft = VariantDraft("Red", "-", Decimal("100"), None, "SHIRT-RED")
        cache = VariantEditCache()
        edited = cache.with_edit(draft, stock=3)

        assert len(cache) == 0
        assert edited["Red--"].stock == 3

    def test_price_normalized(self) -> None:
        """Edited prices become Decimals."""
        draft = VariantDraft("Red", "-", None, None, "SHIRT-RED")
        edited = VariantEditCache().with_edit(draft, price="19.90")
        assert edited["Red--"].price == Decimal("19.90")

    def test_non_editable_field_rejected(self) -> None:
        """Option values cannot be edited through the cache."""
        draft = VariantDraft("Red", "-", None, None, "SHIRT-RED")
        with pytest.raises(ValueError):
            VariantEditCache().with_edit(draft, option1="Blue")

    def test_without(self) -> None:
        """Entries can be pruned explicitly."""
        draft = VariantDraft("Red", "-", None, None, "SHIRT-RED")
        cache = VariantEditCache().with_edit(draft, stock=1)
        assert "Red--" not in cache.without("Red--")


class TestVariantEditor:
    """Tests for the per-product editing session."""

    def test_regenerates_on_option_change(self) -> None:
        """Adding option values recomposes drafts."""
        editor = VariantEditor(name="T-Shirt", base_price=Decimal("100"))
        editor.option1.add("Red")
        editor.edit("Red--", price=Decimal("150"))
        editor.option1.add("Green")

        assert [d.price for d in editor.drafts] == [Decimal("150"), Decimal("100")]

    def test_toggle_dimension_2(self) -> None:
        """Turning dimension 2 on cross joins the existing values."""
        editor = VariantEditor(name="Shirt", base_price=100)
        editor.option1.add("Red")
        editor.option2.add("M")
        assert [d.key for d in editor.drafts] == ["Red--"]

        editor.opt2_active = True
        assert [d.key for d in editor.drafts] == ["Red-M"]

    def test_base_price_change_spares_edits(self) -> None:
        """A new base price only applies to unedited combos."""
        editor = VariantEditor(name="Shirt", base_price=100)
        editor.option1.add("Red")
        editor.option1.add("Blue")
        editor.edit("Red--", price=120)

        editor.set_base_price(90)

        assert [d.price for d in editor.drafts] == [Decimal("120"), Decimal("90")]

    def test_edit_unknown_key(self) -> None:
        """Editing a combo that is not composed raises KeyError."""
        editor = VariantEditor(name="Shirt")
        with pytest.raises(KeyError):
            editor.edit("Red--", stock=1)
