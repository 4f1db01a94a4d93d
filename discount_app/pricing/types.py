from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Optional, Tuple, Union

from discount_app.pricing.errors import RuleConfigError
from discount_app.pricing.ids import normalize_product_id


class DiscountKind(str, Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


@dataclass(frozen=True)
class DiscountRule:
    """A merchant rule as the engine sees it.

    ``kind`` is normally a DiscountKind, but rules read from a newer
    schema may carry any other string; those resolve to no discount.
    An empty ``product_ids`` set means the rule applies to every product.
    """
    id: str
    name: str
    kind: Union[DiscountKind, str]
    magnitude: Union[int, float]
    product_ids: FrozenSet[str] = field(default_factory=frozenset)

    @property
    def applies_to_all(self) -> bool:
        return not self.product_ids

    @classmethod
    def from_dict(cls, entry) -> "DiscountRule":
        """Build a rule from its serialized form (see ``to_dict``).

        Raises RuleConfigError for entries that could not have passed
        rule authoring. Unknown types are kept as plain strings.
        """
        if not isinstance(entry, dict):
            raise RuleConfigError("discount entry is not an object")

        for key in ("id", "type", "value"):
            if entry.get(key) is None:
                raise RuleConfigError(f"discount entry is missing '{key}'")

        value = entry["value"]
        if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
            raise RuleConfigError(f"discount {entry['id']} has an invalid value")

        kind = entry["type"]
        if kind == DiscountKind.PERCENTAGE.value:
            if value > 100:
                raise RuleConfigError(f"discount {entry['id']} percentage exceeds 100")
            kind = DiscountKind.PERCENTAGE
        elif kind == DiscountKind.FIXED.value:
            kind = DiscountKind.FIXED

        product_ids = entry.get("productIds") or []
        if not isinstance(product_ids, list):
            raise RuleConfigError(f"discount {entry['id']} productIds must be a list")

        return cls(
            id=str(entry["id"]),
            name=str(entry.get("name") or ""),
            kind=kind,
            magnitude=value,
            product_ids=frozenset(normalize_product_id(p) for p in product_ids),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "type": _kind_value(self.kind),
            "value": self.magnitude,
            "productIds": sorted(self.product_ids),
        }


@dataclass(frozen=True)
class CartLine:
    line_id: str
    product_id: str
    quantity: int
    unit_price: int  # minor units


@dataclass(frozen=True)
class ResolvedDiscount:
    rule_id: str
    name: str
    kind: Union[DiscountKind, str]
    magnitude: Union[int, float]
    per_unit_amount: int
    line_amount: int

    def to_dict(self) -> dict:
        return {
            "ruleId": self.rule_id,
            "name": self.name,
            "kind": _kind_value(self.kind),
            "magnitude": self.magnitude,
            "perUnitAmount": self.per_unit_amount,
            "lineAmount": self.line_amount,
        }


@dataclass(frozen=True)
class PricedLine:
    line: CartLine
    discount: Optional[ResolvedDiscount]
    line_subtotal: int
    line_total: int

    @property
    def line_amount(self) -> int:
        return self.discount.line_amount if self.discount else 0

    def to_dict(self) -> dict:
        return {
            "lineId": self.line.line_id,
            "productId": self.line.product_id,
            "quantity": self.line.quantity,
            "unitPrice": self.line.unit_price,
            "lineSubtotal": self.line_subtotal,
            "discount": self.discount.to_dict() if self.discount else None,
            "lineTotal": self.line_total,
        }


@dataclass(frozen=True)
class CartPricingResult:
    lines: Tuple[PricedLine, ...]
    subtotal: int
    total_discount: int
    grand_total: int

    @property
    def discounts_applied(self) -> int:
        return sum(1 for priced in self.lines if priced.discount is not None)

    def to_dict(self) -> dict:
        return {
            "items": [priced.to_dict() for priced in self.lines],
            "subtotal": self.subtotal,
            "totalDiscount": self.total_discount,
            "total": self.grand_total,
            "discountsApplied": self.discounts_applied,
        }


def _kind_value(kind) -> str:
    return kind.value if isinstance(kind, DiscountKind) else str(kind)
