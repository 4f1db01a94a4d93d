from pydantic import BaseModel
from typing import Optional, Union

class TrackViewRequest(BaseModel):
    productId: Optional[Union[str, int]] = None
