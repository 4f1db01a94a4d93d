"""Storefront price preview.

Fetches the rules for one product from the preview proxy and recomputes
the discount locally through the shared pricing engine, for a single
unit. The preview is best effort: any failure hides the discount and
shows the regular price.
"""
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional

import requests

from discount_app.config import settings
from discount_app.pricing import (
    CartLine,
    DiscountKind,
    DiscountRule,
    PricingError,
    ResolvedDiscount,
    RuleConfigError,
    price_cart,
)
from discount_app.pricing.engine import round_half_up
from discount_app.pricing.money import format_money

logger = logging.getLogger(__name__)

PREVIEW_LINE_ID = "preview"


class PreviewUnavailable(Exception):
    """The proxy could not be reached or did not answer usefully."""


@dataclass(frozen=True)
class DiscountPreview:
    product_id: str
    original_price: int
    discounted_price: int
    discount: Optional[ResolvedDiscount] = None
    message: str = ""
    badge: str = ""
    savings_percentage: int = 0

    @property
    def show_discount(self) -> bool:
        return self.discount is not None


def fetch_discount_data(
    product_id: str,
    base_url: Optional[str] = None,
    session: Optional[requests.Session] = None,
    timeout: Optional[float] = None,
) -> dict:
    if not product_id:
        raise ValueError("productId is required")

    url = f"{(base_url or settings.preview_proxy_url).rstrip('/')}/product-discount"
    http = session or requests

    try:
        response = http.get(
            url,
            params={"productId": product_id},
            timeout=timeout or settings.preview_timeout_seconds,
        )
    except requests.RequestException as e:
        raise PreviewUnavailable(f"request to {url} failed: {e}")

    if response.status_code >= 400:
        raise PreviewUnavailable(f"HTTP error! status: {response.status_code}")

    try:
        data = response.json()
    except ValueError:
        raise PreviewUnavailable("proxy returned a non-JSON body")

    if not isinstance(data, dict):
        raise PreviewUnavailable("proxy returned a non-object body")
    return data


def rules_from_payload(data: dict) -> List[DiscountRule]:
    """Candidate rules from a proxy response.

    Prefers the full ``rules`` list; falls back to the single resolved
    ``discount`` the proxy picked for this product.
    """
    entries = data.get("rules")
    if entries is not None and not isinstance(entries, list):
        raise RuleConfigError("'rules' must be a list")
    if entries:
        return [DiscountRule.from_dict(entry) for entry in entries]

    resolved = data.get("discount")
    if not resolved:
        return []
    if not isinstance(resolved, dict):
        raise RuleConfigError("'discount' must be an object")

    return [
        DiscountRule.from_dict({
            "id": resolved.get("ruleId"),
            "name": resolved.get("name"),
            "type": resolved.get("kind"),
            "value": resolved.get("magnitude"),
        })
    ]


def build_preview(product_id: str, unit_price: int, data: Optional[dict]) -> DiscountPreview:
    if not isinstance(data, dict) or not data.get("success"):
        return hidden_preview(product_id, unit_price)

    rules = rules_from_payload(data)
    if not rules:
        return hidden_preview(product_id, unit_price)

    line = CartLine(
        line_id=PREVIEW_LINE_ID,
        product_id=product_id,
        quantity=1,
        unit_price=unit_price,
    )
    priced = price_cart([line], rules).lines[0]
    discount = priced.discount
    if discount is None:
        return hidden_preview(product_id, unit_price)

    return DiscountPreview(
        product_id=product_id,
        original_price=unit_price,
        discounted_price=priced.line_total,
        discount=discount,
        message=discount_message(discount),
        badge=discount_badge(discount),
        savings_percentage=savings_percentage(discount.per_unit_amount, unit_price),
    )


def preview_product(
    product_id: str,
    unit_price: int,
    base_url: Optional[str] = None,
    session: Optional[requests.Session] = None,
) -> DiscountPreview:
    """Fetch and compute the preview for one product. Never raises."""
    try:
        data = fetch_discount_data(product_id, base_url=base_url, session=session)
        return build_preview(product_id, unit_price, data)
    except PreviewUnavailable as e:
        logger.warning(f"Discount preview unavailable for {product_id}: {e}")
    except (PricingError, ValueError) as e:
        logger.warning(f"Discount preview rejected for {product_id}: {e}")
    return hidden_preview(product_id, unit_price)


def hidden_preview(product_id: str, unit_price: int) -> DiscountPreview:
    return DiscountPreview(
        product_id=product_id,
        original_price=unit_price,
        discounted_price=unit_price,
    )


def discount_message(discount: ResolvedDiscount) -> str:
    if discount.kind == DiscountKind.PERCENTAGE:
        return f"Save {format_percent(discount.magnitude)}% today!"
    return f"Save {format_money(discount.per_unit_amount)} today!"


def discount_badge(discount: ResolvedDiscount) -> str:
    if discount.kind == DiscountKind.PERCENTAGE:
        return f"-{format_percent(discount.magnitude)}%"
    return f"-{format_money(discount.per_unit_amount)}"


def format_percent(magnitude) -> str:
    # 20.0 -> "20", 12.50 -> "12.5"
    return format(Decimal(str(magnitude)).normalize(), "f")


def savings_percentage(per_unit_amount: int, unit_price: int) -> int:
    if unit_price <= 0:
        return 0
    return round_half_up(Decimal(per_unit_amount) * 100 / Decimal(unit_price))
