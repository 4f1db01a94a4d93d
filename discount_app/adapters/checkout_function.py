"""Checkout-time discount function.

The commerce platform calls ``run`` inside a network-isolated sandbox
with the cart lines and a rule blob prepared ahead of time by
``build_rule_config``. Nothing here may perform I/O.

The platform only accepts a percentage adjustment per cart line, so the
engine's absolute per-unit discount is re-expressed as a percentage of
the unit price. That conversion uses floats and is rounded to
``PERCENTAGE_PRECISION`` places, which is the one point where checkout
can drift from the cart API, by at most a fraction of a minor unit per
unit.
"""
import json
import logging
from typing import Iterable, List

from discount_app.pricing import (
    CartLine,
    CartValidationError,
    DiscountKind,
    DiscountRule,
    RuleConfigError,
    normalize_product_id,
    price_cart,
)
from discount_app.pricing.money import to_minor_units

logger = logging.getLogger(__name__)

PERCENTAGE_PRECISION = 4
DEFAULT_MESSAGE = "Product Discount"
PRODUCT_VARIANT = "ProductVariant"


def run(input: dict) -> dict:
    try:
        rules = parse_rule_config(input.get("ruleConfig"))
    except RuleConfigError as e:
        logger.error(f"Discount function configuration rejected: {e}")
        return _no_discounts()

    if not rules:
        logger.info("No discounts configured")
        return _no_discounts()

    try:
        lines = extract_cart_lines(input.get("cartLines") or [])
        result = price_cart(lines, rules)
    except CartValidationError as e:
        logger.error(f"Discount function input rejected: {e}")
        return _no_discounts()

    discounts = []
    for priced in result.lines:
        discount = priced.discount
        if discount is None or discount.per_unit_amount <= 0:
            continue

        discounts.append({
            "targets": [{"cartLine": {"id": priced.line.line_id}}],
            "value": {
                "percentage": percentage_string(
                    discount.per_unit_amount, priced.line.unit_price
                ),
            },
            "message": discount.name or DEFAULT_MESSAGE,
        })

    return {"discounts": discounts}


def parse_rule_config(blob) -> List[DiscountRule]:
    if blob is None or blob == "":
        raise RuleConfigError("rule configuration is missing")
    if not isinstance(blob, (str, bytes)):
        raise RuleConfigError("rule configuration must be serialized JSON")

    try:
        configuration = json.loads(blob)
    except ValueError as e:
        raise RuleConfigError(f"rule configuration is not valid JSON: {e}")

    if not isinstance(configuration, dict):
        raise RuleConfigError("rule configuration must be a JSON object")

    entries = configuration.get("discounts") or []
    if not isinstance(entries, list):
        raise RuleConfigError("'discounts' must be a list")

    rules = [DiscountRule.from_dict(entry) for entry in entries]
    for rule in rules:
        if not isinstance(rule.kind, DiscountKind):
            logger.warning(f"Discount {rule.id} has unsupported type '{rule.kind}'")
    return rules


def extract_cart_lines(cart_lines: Iterable[dict]) -> List[CartLine]:
    """Map platform cart lines to engine lines, skipping non-variant merchandise."""
    if not isinstance(cart_lines, list):
        raise CartValidationError("cartLines must be a list")

    lines = []
    for index, line in enumerate(cart_lines):
        try:
            merchandise = line["merchandise"]
            if merchandise.get("__typename", PRODUCT_VARIANT) != PRODUCT_VARIANT:
                continue

            lines.append(
                CartLine(
                    line_id=str(line["id"]),
                    product_id=normalize_product_id(merchandise["product"]["id"]),
                    quantity=line["quantity"],
                    unit_price=to_minor_units(merchandise["price"]["amount"]),
                )
            )
        except (KeyError, TypeError, AttributeError):
            raise CartValidationError(f"cart line {index} is malformed")
    return lines


def build_rule_config(rules: Iterable[DiscountRule]) -> str:
    """Serialize rules into the blob the checkout function reads."""
    configuration = {
        "discounts": [rule.to_dict() for rule in sorted(rules, key=lambda r: r.id)],
    }
    return json.dumps(configuration, sort_keys=True, separators=(",", ":"))


def percentage_string(per_unit_amount: int, unit_price: int) -> str:
    if unit_price <= 0:
        return "0"
    percentage = round(per_unit_amount / unit_price * 100, PERCENTAGE_PRECISION)
    text = f"{percentage:.{PERCENTAGE_PRECISION}f}".rstrip("0").rstrip(".")
    return text or "0"


def _no_discounts() -> dict:
    return {"discounts": []}
