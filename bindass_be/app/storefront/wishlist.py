from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field


class WishlistEntry(BaseModel):
    productId: int
    name: str
    unitPrice: Decimal = Field(ge=0)
    image: Optional[str] = None
    category: Optional[str] = None
    subCategory: Optional[str] = None


class WishlistState(BaseModel):
    items: List[WishlistEntry] = Field(default_factory=list)


class WishlistStore:
    """Unique-by-product collection with toggle semantics."""

    def __init__(self, state: Optional[WishlistState] = None):
        self._state = state.model_copy(deep=True) if state else WishlistState()

    @classmethod
    def from_snapshot(cls, data: Optional[dict]) -> "WishlistStore":
        return cls(WishlistState.model_validate(data or {}))

    def snapshot(self) -> dict:
        return self._state.model_dump(mode="json")

    @property
    def items(self) -> List[WishlistEntry]:
        return [i.model_copy() for i in self._state.items]

    @property
    def item_count(self) -> int:
        return len(self._state.items)

    def contains(self, product_id: int) -> bool:
        return any(i.productId == product_id for i in self._state.items)

    def add(self, item) -> bool:
        entry = item if isinstance(item, WishlistEntry) else WishlistEntry.model_validate(item)
        if self.contains(entry.productId):
            return False
        self._state.items.append(entry.model_copy())
        return True

    def remove(self, product_id: int) -> bool:
        before = len(self._state.items)
        self._state.items = [i for i in self._state.items if i.productId != product_id]
        return len(self._state.items) != before

    def toggle(self, item) -> bool:
        """Flip membership; returns True when the item is now in the wishlist."""
        entry = item if isinstance(item, WishlistEntry) else WishlistEntry.model_validate(item)
        if self.remove(entry.productId):
            return False
        self._state.items.append(entry.model_copy())
        return True

    def clear(self) -> None:
        self._state.items = []
