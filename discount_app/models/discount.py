from sqlmodel import SQLModel, Field
from sqlalchemy import DateTime
from typing import List
from datetime import datetime, timezone
import json
import uuid


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DiscountRuleRecord(SQLModel, table=True):
    __tablename__ = "discount_rule"

    id: str = Field(default_factory=lambda: uuid.uuid4().hex, primary_key=True)
    name: str
    type: str = Field(index=True)   # "percentage" | "fixed"
    value: float                    # percent, or minor units for fixed
    product_ids: str = "[]"         # JSON list, empty = all products
    active: bool = Field(default=True, index=True)

    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))

    @property
    def product_id_list(self) -> List[str]:
        try:
            ids = json.loads(self.product_ids or "[]")
        except ValueError:
            return []
        if not isinstance(ids, list):
            return []
        return [str(product_id) for product_id in ids]
