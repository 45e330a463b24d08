"""
Annualized cost calculation.

Prices are monthly. For a quantity q and a monthly price p the total is
q x p x 12, rounded half away from zero once, on the final product.
"""

import re
from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Any, Optional

from license_calculator.models.item import DisplayMode, Item, Quote, format_price


MONTHS_PER_YEAR = 12

_NON_DIGITS = re.compile(r"\D")


def parse_quantity(value: Any) -> int:
    """
    Coerce quantity input to a non-negative integer.

    Non-digit characters are stripped first ("1,000" -> 1000, "-3" -> 3);
    anything left without digits is 0.
    """
    if value is None:
        return 0
    if isinstance(value, int) and not isinstance(value, bool):
        return max(0, value)
    digits = _NON_DIGITS.sub("", str(value))
    return int(digits) if digits else 0


def _annual_total(price: Decimal, count: int) -> int:
    # Precision covers every digit of the exact product, whole part included.
    _, digits, exponent = price.as_tuple()
    precision = len(str(count)) + len(digits) + max(0, exponent) + 4
    with localcontext() as ctx:
        ctx.prec = max(28, precision)
        product = Decimal(count) * price * MONTHS_PER_YEAR
        return int(product.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def display_mode(item: Item) -> DisplayMode:
    """Display mode a non-blank quote for `item` takes."""
    if item.price > 0:
        return DisplayMode.PRICED_WITH_LINK if item.source_url else DisplayMode.PRICED
    if item.source_url:
        return DisplayMode.LINK_ONLY
    return DisplayMode.PRICED


def compute_total(
    item: Optional[Item],
    quantity: Any,
    currency_symbol: str = "$",
) -> Quote:
    """
    Compute the annual total for `quantity` units of `item`.

    No item, or empty quantity input, gives the blank rest state.
    """
    if item is None or quantity is None or str(quantity).strip() == "":
        return Quote()

    count = parse_quantity(quantity)
    total = _annual_total(item.price, count)

    breakdown = (
        f"{currency_symbol}{format_price(item.price)} x {MONTHS_PER_YEAR} months x {count} ="
    )

    return Quote(
        breakdown=breakdown,
        total=total,
        source_url=item.source_url,
        mode=display_mode(item),
    )
