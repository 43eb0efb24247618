"""Tax engine.

All arithmetic is exact Decimal; rounding to cents happens once, in
``TaxBreakdown.rounded()``, at the display boundary.
"""

from dataclasses import dataclass
from decimal import Decimal

from sellerdesk.domain.value_objects import TaxSettings, round_money, to_decimal

_ZERO = Decimal("0")
_HUNDRED = Decimal("100")


@dataclass(frozen=True)
class TaxBreakdown:
    """Net, tax and gross amounts for a subtotal.

    Attributes:
        net: Amount before tax.
        tax: Tax amount.
        total: Amount the customer pays.
    """

    net: Decimal
    tax: Decimal
    total: Decimal

    def rounded(self) -> "TaxBreakdown":
        """Quantize every amount to cents (half-up)."""
        return TaxBreakdown(
            net=round_money(self.net),
            tax=round_money(self.tax),
            total=round_money(self.total),
        )


def calculate_tax(subtotal: Decimal | int | float | str, settings: TaxSettings) -> TaxBreakdown:
    """Split a subtotal into net, tax and total.

    - Tax disabled (or a zero rate): no tax, total is the subtotal.
    - Tax included in price: the subtotal already embeds the tax, which is
      back-derived for reporting; the total does not change.
    - Tax exclusive: tax is added on top of the subtotal.

    Args:
        subtotal: Sum of line amounts.
        settings: Seller tax configuration.

    Returns:
        Unrounded breakdown.
    """
    amount = to_decimal(subtotal)

    if not settings.enable_tax or not settings.tax_rate:
        return TaxBreakdown(net=amount, tax=_ZERO, total=amount)

    rate = settings.tax_rate / _HUNDRED

    if settings.tax_included_in_price:
        net = amount / (1 + rate)
        return TaxBreakdown(net=net, tax=amount - net, total=amount)

    tax = amount * rate
    return TaxBreakdown(net=amount, tax=tax, total=amount + tax)
