from pydantic import BaseModel, ConfigDict
from typing import List, Optional


class ProductVariant(BaseModel):
    size: Optional[str] = None
    color: Optional[str] = None
    stock: int = 0


class ProductOut(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    price: float
    comparePrice: Optional[float] = None
    discountPercent: int = 0
    category: Optional[str] = None
    subCategory: Optional[str] = None
    images: List[str] = []
    sizes: List[str] = []
    colors: List[str] = []
    variants: List[ProductVariant] = []
    stock: int
    inStock: bool
    featured: bool = False

    # Pydantic v2 config
    model_config = ConfigDict(from_attributes=True)
