import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from discount_app.database import get_session
from discount_app.pricing import CartValidationError
from discount_app.schemas.cart_schemas import CartPricingRequest
from discount_app.services.cart_pricing import price_cart_items
from discount_app.services.rule_store import fetch_active_rules

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/apply-discount")
def apply_cart_discounts(
    data: CartPricingRequest,
    session: Session = Depends(get_session),
):
    """Resolve the best discount for every cart line and total the cart.

    Prices come in as major units and every amount in the response is in
    minor units.
    """
    if not data.items:
        return JSONResponse(
            status_code=400,
            content={
                "success": False,
                "error": "Invalid request",
                "message": "items array is required and must not be empty",
            },
        )

    try:
        rules = fetch_active_rules(session)
    except SQLAlchemyError:
        logger.exception("Error loading discount rules")
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": "Failed to apply discounts"},
        )

    try:
        cart = price_cart_items(data.items, rules)
    except CartValidationError as e:
        return JSONResponse(
            status_code=400,
            content={"success": False, "error": "Invalid request", "message": str(e)},
        )

    return {"success": True, "cart": cart}
