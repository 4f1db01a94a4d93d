from pydantic import BaseModel
from typing import List, Optional, Union

# Fields are optional so missing values reach the pricing validation
# and fail the whole request with a 400 instead of a schema error.
class CartItemRequest(BaseModel):
    productId: Optional[Union[str, int]] = None
    quantity: Optional[int] = None
    unitPrice: Optional[float] = None     # major units, e.g. 29.99
    lineId: Optional[str] = None

class CartPricingRequest(BaseModel):
    items: List[CartItemRequest] = []
