from pydantic import BaseModel
from typing import List, Optional


class WishlistItemIn(BaseModel):
    productId: int


class WishlistItemOut(BaseModel):
    productId: int
    name: str
    unitPrice: float
    image: Optional[str] = None
    category: Optional[str] = None
    subCategory: Optional[str] = None


class WishlistOut(BaseModel):
    items: List[WishlistItemOut]
    itemCount: int
