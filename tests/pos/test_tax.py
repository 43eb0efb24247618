"""Tests for the tax engine."""

from decimal import Decimal

from sellerdesk.domain.value_objects import TaxSettings
from sellerdesk.pos.tax import calculate_tax


class TestCalculateTax:
    """Tests for calculate_tax."""

    def test_disabled(self) -> None:
        """No tax when tax is disabled."""
        breakdown = calculate_tax(Decimal("1000"), TaxSettings(enable_tax=False))
        assert breakdown.tax == Decimal("0")
        assert breakdown.total == Decimal("1000")

    def test_zero_rate(self) -> None:
        """A zero rate behaves like disabled tax."""
        breakdown = calculate_tax(
            Decimal("1000"), TaxSettings(enable_tax=True, tax_rate=Decimal("0"))
        )
        assert breakdown.tax == 0
        assert breakdown.total == Decimal("1000")

    def test_exclusive(self) -> None:
        """Exclusive tax is added on top."""
        breakdown = calculate_tax(
            Decimal("1000"),
            TaxSettings(enable_tax=True, tax_rate=Decimal("12"), tax_included_in_price=False),
        ).rounded()
        assert breakdown.net == Decimal("1000.00")
        assert breakdown.tax == Decimal("120.00")
        assert breakdown.total == Decimal("1120.00")

    def test_inclusive(self) -> None:
        """Inclusive tax is back-derived; the total does not change."""
        breakdown = calculate_tax(
            Decimal("1000"),
            TaxSettings(enable_tax=True, tax_rate=Decimal("12"), tax_included_in_price=True),
        ).rounded()
        assert breakdown.net == Decimal("892.86")
        assert breakdown.tax == Decimal("107.14")
        assert breakdown.total == Decimal("1000.00")

    def test_inclusive_parts_add_up_before_rounding(self) -> None:
        """Unrounded net plus tax equals the subtotal exactly."""
        breakdown = calculate_tax(
            Decimal("99.99"), TaxSettings(enable_tax=True, tax_rate=Decimal("12"))
        )
        assert breakdown.net + breakdown.tax == Decimal("99.99")

    def test_accepts_plain_numbers(self) -> None:
        """Ints and floats are converted to Decimal."""
        breakdown = calculate_tax(
            250, TaxSettings(enable_tax=True, tax_rate=10, tax_included_in_price=False)
        )
        assert breakdown.total == Decimal("275.0")
