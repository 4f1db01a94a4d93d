"""Discount resolution.

Everything here is pure and synchronous: no I/O, no logging, no shared
state. The cart API, the checkout function and the storefront preview
all resolve discounts through these functions so their numbers agree.
"""
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Iterable, List, Optional

from discount_app.pricing.ids import normalize_product_id
from discount_app.pricing.types import DiscountKind, DiscountRule, ResolvedDiscount

HUNDRED = Decimal(100)


def match_candidates(product_id: str, rules: Iterable[DiscountRule]) -> List[DiscountRule]:
    """Rules that apply to ``product_id``, in their original order."""
    return [
        rule for rule in rules
        if rule.applies_to_all or product_id in rule.product_ids
    ]


def discount_amount(unit_price: int, rule: DiscountRule) -> int:
    """Per-unit discount in minor units, always within ``[0, unit_price]``.

    Percentages round half-up to the nearest minor unit. Fixed amounts are
    capped at the unit price. Unknown kinds give 0.
    """
    magnitude = _as_decimal(rule.magnitude)
    if magnitude is None or magnitude < 0 or unit_price <= 0:
        return 0

    if rule.kind == DiscountKind.PERCENTAGE:
        amount = round_half_up(Decimal(unit_price) * magnitude / HUNDRED)
    elif rule.kind == DiscountKind.FIXED:
        amount = round_half_up(magnitude)
    else:
        return 0

    return max(0, min(amount, unit_price))


def select_best(
    candidates: Iterable[DiscountRule],
    unit_price: int,
    quantity: int = 1,
) -> Optional[ResolvedDiscount]:
    """Pick the candidate with the largest per-unit discount.

    Equal amounts go to the rule with the smaller id, so the choice never
    depends on the order rules were fetched in. Candidates worth nothing
    are dropped; if none remain the result is None.
    """
    best_rule = None
    best_amount = 0

    for rule in candidates:
        amount = discount_amount(unit_price, rule)
        if amount <= 0:
            continue
        if (
            best_rule is None
            or amount > best_amount
            or (amount == best_amount and rule.id < best_rule.id)
        ):
            best_rule = rule
            best_amount = amount

    if best_rule is None:
        return None

    return ResolvedDiscount(
        rule_id=best_rule.id,
        name=best_rule.name,
        kind=best_rule.kind,
        magnitude=best_rule.magnitude,
        per_unit_amount=best_amount,
        line_amount=best_amount * quantity,
    )


def resolve(
    product_id: str,
    unit_price: int,
    rules: Iterable[DiscountRule],
    quantity: int = 1,
) -> Optional[ResolvedDiscount]:
    product_id = normalize_product_id(product_id)
    return select_best(match_candidates(product_id, rules), unit_price, quantity)


def round_half_up(value: Decimal) -> int:
    return int(value.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def _as_decimal(value) -> Optional[Decimal]:
    if isinstance(value, bool):
        return None
    try:
        result = Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        return None
    if not result.is_finite():
        return None
    return result
