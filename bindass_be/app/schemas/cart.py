from pydantic import BaseModel, Field
from typing import List, Optional


class CartItemIn(BaseModel):
    productId: int
    quantity: int = Field(default=1, gt=0)
    selectedSize: Optional[str] = None
    selectedColor: Optional[str] = None


class CartQuantityUpdate(BaseModel):
    productId: int
    # Out-of-range values are clamped by the cart, not rejected
    quantity: int
    selectedSize: Optional[str] = None
    selectedColor: Optional[str] = None


class CartItemOut(BaseModel):
    productId: int
    name: str
    unitPrice: float
    image: Optional[str] = None
    quantity: int
    selectedSize: Optional[str] = None
    selectedColor: Optional[str] = None
    maxQuantity: int


class CartOut(BaseModel):
    items: List[CartItemOut]
    totalItems: int
    totalAmount: float
    isOpen: bool = False
