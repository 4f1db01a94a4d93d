class PricingError(Exception):
    """Base class for discount pricing failures."""


class CartValidationError(PricingError):
    """A cart line is missing data or carries values that cannot be priced."""


class RuleConfigError(PricingError):
    """The serialized rule configuration cannot be trusted."""
