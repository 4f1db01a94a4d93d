from discount_app.pricing import CartLine, DiscountKind, DiscountRule


def pct(id, magnitude, product_ids=(), name=None):
    return DiscountRule(
        id=id,
        name=name or f"{magnitude}% off",
        kind=DiscountKind.PERCENTAGE,
        magnitude=magnitude,
        product_ids=frozenset(product_ids),
    )


def fixed(id, magnitude, product_ids=(), name=None):
    return DiscountRule(
        id=id,
        name=name or f"{magnitude} off",
        kind=DiscountKind.FIXED,
        magnitude=magnitude,
        product_ids=frozenset(product_ids),
    )


def line(product_id, unit_price, quantity=1, line_id=None):
    return CartLine(
        line_id=line_id or f"line-{product_id}",
        product_id=product_id,
        quantity=quantity,
        unit_price=unit_price,
    )
