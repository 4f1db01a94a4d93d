import logging
import time
from functools import lru_cache
from typing import Optional, Tuple

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from discount_app.config import settings
from discount_app.database import get_session
from discount_app.pricing import DiscountRule, normalize_product_id, resolve
from discount_app.services.rule_store import fetch_rules_for_product

logger = logging.getLogger(__name__)

router = APIRouter()


def _ttl_bucket() -> int:
    """Changes every proxy_cache_seconds, which expires the cache."""
    return int(time.time() // max(settings.proxy_cache_seconds, 1))


@lru_cache(maxsize=512)
def _cached_rules_for_product(product_id: str, bucket: int) -> Tuple[DiscountRule, ...]:
    with next(get_session()) as session:
        return tuple(fetch_rules_for_product(session, product_id))


def clear_proxy_cache():
    _cached_rules_for_product.cache_clear()


@router.get("/product-discount")
def product_discount(
    productId: Optional[str] = Query(None),
    unitPrice: Optional[int] = Query(None, ge=0, description="Unit price in minor units"),
):
    """Storefront lookup of the discount for one product."""
    if not productId:
        return JSONResponse(
            status_code=400,
            content={"success": False, "error": "Product ID is required"},
        )

    product_id = normalize_product_id(productId)

    try:
        rules = _cached_rules_for_product(product_id, _ttl_bucket())
    except SQLAlchemyError:
        logger.exception(f"Error fetching product discount for {product_id}")
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": "Failed to fetch discount data"},
        )

    discount = resolve(product_id, unitPrice or 0, rules)

    return JSONResponse(
        content={
            "success": True,
            "productId": product_id,
            "discount": discount.to_dict() if discount else None,
            "rules": [rule.to_dict() for rule in rules],
        },
        headers={"Cache-Control": f"public, max-age={settings.proxy_cache_seconds}"},
    )
