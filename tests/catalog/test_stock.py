"""Tests for stock aggregation and final variant rows."""

from decimal import Decimal

import pytest

from sellerdesk.catalog.composer import VariantDraft
from sellerdesk.catalog.stock import (
    build_base_variant,
    compute_total_stock,
    finalize_variants,
    parse_base_stock,
)
from sellerdesk.domain.exceptions import ValidationError


def _draft(option1: str, stock: int | None, price: str = "100") -> VariantDraft:
    return VariantDraft(option1, "-", Decimal(price), stock, f"SHIRT-{option1.upper()}")


class TestParseBaseStock:
    """Tests for the base stock field."""

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_blank_means_zero(self, value) -> None:
        """A blank field is zero stock."""
        assert parse_base_stock(value) == 0

    def test_numeric_text(self) -> None:
        """Numeric text is parsed."""
        assert parse_base_stock(" 7 ") == 7

    def test_negative_rejected(self) -> None:
        """Negative stock is invalid."""
        with pytest.raises(ValidationError):
            parse_base_stock(-1)

    def test_non_numeric_rejected(self) -> None:
        """Non-numeric text is invalid."""
        with pytest.raises(ValidationError):
            parse_base_stock("a lot")


class TestComputeTotalStock:
    """Tests for compute_total_stock."""

    def test_sum_with_base(self) -> None:
        """Total is base stock plus variant stock."""
        assert compute_total_stock(3, [_draft("Red", 4), _draft("Blue", 5)]) == 12

    def test_unentered_stock_counts_as_zero(self) -> None:
        """Drafts without stock add nothing."""
        assert compute_total_stock(0, [_draft("Red", None), _draft("Blue", 2)]) == 2


class TestBuildBaseVariant:
    """Tests for the hidden base variant."""

    def test_none_without_base_stock(self) -> None:
        """No base stock, no base row."""
        assert build_base_variant(Decimal("100"), "Shirt", 0) is None

    def test_base_row(self) -> None:
        """The base row has sentinel options and a BASE SKU."""
        base = build_base_variant(Decimal("100"), "Shirt", 3)
        assert base.option1 == "-" and base.option2 == "-"
        assert base.stock == 3
        assert base.sku == "SHIRT-BASE"
        assert base.variant_name == "Default"


class TestFinalizeVariants:
    """Tests for finalize_variants."""

    def test_base_row_prepended(self) -> None:
        """Base stock becomes a leading base row next to real variants."""
        rows = finalize_variants(
            [_draft("Red", 4), _draft("Blue", 5)], True, Decimal("100"), "Shirt", base_stock=3
        )
        assert [r.key for r in rows] == ["---", "Red--", "Blue--"]
        assert sum(r.stock for r in rows) == 12

    def test_variants_disabled_gives_default_row(self) -> None:
        """Without variants the base stock is the single default row."""
        rows = finalize_variants([_draft("Red", 4)], False, Decimal("100"), "Shirt", base_stock=6)
        assert len(rows) == 1
        assert rows[0].variant_name == "Default"
        assert rows[0].stock == 6
        assert rows[0].sku == "SHIRT"

    def test_enabled_without_drafts_gives_default_row(self) -> None:
        """An enabled variant system that produced nothing falls back too."""
        rows = finalize_variants([], True, Decimal("100"), "Shirt", base_stock=2)
        assert [r.variant_name for r in rows] == ["Default"]

    def test_unentered_variant_stock_rejected(self) -> None:
        """Every draft needs its stock entered."""
        with pytest.raises(ValidationError) as exc_info:
            finalize_variants([_draft("Red", None)], True, Decimal("100"), "Shirt", base_stock=5)
        assert exc_info.value.details["combo_key"] == "Red--"

    def test_negative_variant_price_rejected(self) -> None:
        """Negative variant prices are rejected before any I/O."""
        with pytest.raises(ValidationError):
            finalize_variants([_draft("Red", 1, price="-1")], True, Decimal("100"), "Shirt")

    def test_zero_total_rejected(self) -> None:
        """A product must have some stock."""
        with pytest.raises(ValidationError) as exc_info:
            finalize_variants([_draft("Red", 0)], True, Decimal("100"), "Shirt")
        assert exc_info.value.field == "stock"
