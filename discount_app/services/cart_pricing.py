import logging
from typing import List, Sequence

from discount_app.config import settings
from discount_app.pricing import CartLine, CartValidationError, DiscountRule, price_cart
from discount_app.pricing.money import to_minor_units
from discount_app.schemas.cart_schemas import CartItemRequest

logger = logging.getLogger(__name__)


def build_cart_lines(items: Sequence[CartItemRequest]) -> List[CartLine]:
    """Turn request items into engine lines, converting prices to minor units."""
    if not items:
        raise CartValidationError("items array is required and must not be empty")

    lines = []
    for index, item in enumerate(items):
        if item.productId is None or str(item.productId).strip() == "":
            raise CartValidationError(f"Item {index} is missing productId")
        if item.quantity is None:
            raise CartValidationError(f"Item {index} is missing quantity")
        if item.unitPrice is None:
            raise CartValidationError(f"Item {index} is missing unitPrice")

        lines.append(
            CartLine(
                line_id=item.lineId if item.lineId is not None else str(index),
                product_id=str(item.productId),
                quantity=item.quantity,
                unit_price=to_minor_units(item.unitPrice),
            )
        )
    return lines


def price_cart_items(items: Sequence[CartItemRequest], rules: Sequence[DiscountRule]) -> dict:
    lines = build_cart_lines(items)
    result = price_cart(lines, rules)

    logger.info(
        f"Priced cart: {len(lines)} lines, {result.discounts_applied} discounted, "
        f"subtotal {result.subtotal}, discount {result.total_discount}"
    )

    cart = result.to_dict()
    cart["currency"] = settings.currency
    return cart
