from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from discount_app.pricing.errors import CartValidationError

MINOR_UNITS_PER_MAJOR = 100


def to_minor_units(value) -> int:
    """Convert a major-unit amount (``29.99`` or ``"29.99"``) to minor units.

    Only adapters call this; the engine works in minor units throughout.
    """
    if value is None or isinstance(value, bool):
        raise CartValidationError(f"Invalid price: {value!r}")
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise CartValidationError(f"Invalid price: {value!r}")

    if not amount.is_finite() or amount < 0:
        raise CartValidationError(f"Invalid price: {value!r}")

    minor = amount * MINOR_UNITS_PER_MAJOR
    return int(minor.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def format_money(minor: int, symbol: str = "$") -> str:
    if not isinstance(minor, int) or isinstance(minor, bool):
        raise TypeError("minor must be an int")
    sign = "-" if minor < 0 else ""
    whole, cents = divmod(abs(minor), MINOR_UNITS_PER_MAJOR)
    return f"{sign}{symbol}{whole}.{cents:02d}"
