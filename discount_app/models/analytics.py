from sqlmodel import SQLModel, Field
from sqlalchemy import DateTime
from typing import Optional
from datetime import datetime

from discount_app.models.discount import utcnow


class ProductAnalytics(SQLModel, table=True):
    """Debounced storefront view counter, one row per product."""
    __tablename__ = "product_analytics"

    id: Optional[int] = Field(default=None, primary_key=True)
    product_id: str = Field(unique=True, index=True)
    view_count: int = 0
    last_viewed_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
