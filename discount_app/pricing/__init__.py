from discount_app.pricing.cart import price_cart
from discount_app.pricing.engine import discount_amount, match_candidates, resolve, select_best
from discount_app.pricing.errors import CartValidationError, PricingError, RuleConfigError
from discount_app.pricing.ids import normalize_product_id
from discount_app.pricing.types import (
    CartLine,
    CartPricingResult,
    DiscountKind,
    DiscountRule,
    PricedLine,
    ResolvedDiscount,
)
