from typing import Iterable, Sequence

from discount_app.pricing.engine import match_candidates, select_best
from discount_app.pricing.errors import CartValidationError
from discount_app.pricing.ids import normalize_product_id
from discount_app.pricing.types import (
    CartLine,
    CartPricingResult,
    DiscountRule,
    PricedLine,
)


def price_cart(lines: Sequence[CartLine], rules: Iterable[DiscountRule]) -> CartPricingResult:
    """Resolve the best discount for every line and total the cart.

    Discounts are rounded once per unit and then multiplied by quantity.
    Any invalid line fails the whole call; no partial result is returned.
    Output lines keep the input order.
    """
    for index, line in enumerate(lines):
        validate_line(line, index)

    rules = tuple(rules)
    priced_lines = []
    subtotal = 0
    total_discount = 0

    for line in lines:
        product_id = normalize_product_id(line.product_id)
        discount = select_best(
            match_candidates(product_id, rules),
            line.unit_price,
            line.quantity,
        )

        line_subtotal = line.unit_price * line.quantity
        line_amount = discount.line_amount if discount else 0

        priced_lines.append(
            PricedLine(
                line=line,
                discount=discount,
                line_subtotal=line_subtotal,
                line_total=line_subtotal - line_amount,
            )
        )
        subtotal += line_subtotal
        total_discount += line_amount

    return CartPricingResult(
        lines=tuple(priced_lines),
        subtotal=subtotal,
        total_discount=total_discount,
        grand_total=subtotal - total_discount,
    )


def validate_line(line: CartLine, index: int = 0) -> None:
    if not line.product_id or not normalize_product_id(line.product_id):
        raise CartValidationError(f"Item {index} is missing productId")

    if not _is_int(line.quantity):
        raise CartValidationError(f"Item {index} is missing quantity")
    if line.quantity <= 0:
        raise CartValidationError(f"Item {index} quantity must be positive")

    if not _is_int(line.unit_price):
        raise CartValidationError(f"Item {index} is missing unitPrice")
    if line.unit_price < 0:
        raise CartValidationError(f"Item {index} unitPrice must not be negative")


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)
