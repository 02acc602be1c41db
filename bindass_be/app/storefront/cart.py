"""Shopping cart state container.

Line items are keyed by ``(productId, selectedSize, selectedColor)``. Every
mutation clamps quantities into ``[1, maxQuantity]`` and recomputes the
aggregate totals from the line items, so totals can never drift from them.
"""
from decimal import Decimal
from typing import List, Optional, Tuple

from pydantic import BaseModel, Field

DEFAULT_MAX_QUANTITY = 99


class CartLine(BaseModel):
    productId: int
    name: str
    unitPrice: Decimal = Field(ge=0)
    image: Optional[str] = None
    quantity: int = 1
    selectedSize: Optional[str] = None
    selectedColor: Optional[str] = None
    maxQuantity: int = DEFAULT_MAX_QUANTITY

    @property
    def key(self) -> Tuple[int, Optional[str], Optional[str]]:
        return (self.productId, self.selectedSize, self.selectedColor)

    @property
    def line_total(self) -> Decimal:
        return self.unitPrice * self.quantity


class CartState(BaseModel):
    items: List[CartLine] = Field(default_factory=list)
    totalItems: int = 0
    totalAmount: Decimal = Decimal("0")
    isOpen: bool = False


def _clamp(quantity: int, max_quantity: int) -> int:
    return min(max(1, int(quantity)), max(1, int(max_quantity)))


class CartStore:
    def __init__(self, state: Optional[CartState] = None):
        self._state = state.model_copy(deep=True) if state else CartState()
        self._recalculate()

    @classmethod
    def from_snapshot(cls, data: Optional[dict]) -> "CartStore":
        return cls(CartState.model_validate(data or {}))

    def snapshot(self) -> dict:
        return self._state.model_dump(mode="json")

    @property
    def state(self) -> CartState:
        return self._state.model_copy(deep=True)

    @property
    def items(self) -> List[CartLine]:
        return [i.model_copy() for i in self._state.items]

    @property
    def total_items(self) -> int:
        return self._state.totalItems

    @property
    def total_amount(self) -> Decimal:
        return self._state.totalAmount

    @property
    def is_open(self) -> bool:
        return self._state.isOpen

    @property
    def is_empty(self) -> bool:
        return not self._state.items

    def find(self, product_id: int, size: Optional[str] = None, color: Optional[str] = None) -> Optional[CartLine]:
        for item in self._state.items:
            if item.key == (product_id, size, color):
                return item
        return None

    def add_item(self, item, quantity: int = 1, max_quantity: int = DEFAULT_MAX_QUANTITY) -> CartLine:
        """Add ``quantity`` of a product variant, merging into an existing line.

        ``item`` is a CartLine or a mapping with the same fields; its own
        quantity/maxQuantity are ignored in favour of the arguments.
        """
        line = item if isinstance(item, CartLine) else CartLine.model_validate(item)
        existing = self.find(*line.key)
        if existing:
            existing.quantity = _clamp(existing.quantity + quantity, existing.maxQuantity)
            result = existing
        else:
            result = line.model_copy(update={
                "maxQuantity": max(1, int(max_quantity)),
                "quantity": _clamp(quantity, max_quantity),
            })
            self._state.items.append(result)
        self._recalculate()
        return result.model_copy()

    def remove_item(self, product_id: int, size: Optional[str] = None, color: Optional[str] = None) -> bool:
        before = len(self._state.items)
        self._state.items = [i for i in self._state.items if i.key != (product_id, size, color)]
        self._recalculate()
        return len(self._state.items) != before

    def update_quantity(
        self,
        product_id: int,
        quantity: int,
        size: Optional[str] = None,
        color: Optional[str] = None,
    ) -> Optional[CartLine]:
        item = self.find(product_id, size, color)
        if item:
            item.quantity = _clamp(quantity, item.maxQuantity)
        self._recalculate()
        return item.model_copy() if item else None

    def clear(self) -> None:
        self._state.items = []
        self._recalculate()

    def toggle_open(self) -> bool:
        self._state.isOpen = not self._state.isOpen
        return self._state.isOpen

    def set_open(self, is_open: bool) -> None:
        self._state.isOpen = bool(is_open)

    def _recalculate(self) -> None:
        self._state.totalItems = sum(i.quantity for i in self._state.items)
        self._state.totalAmount = sum((i.line_total for i in self._state.items), Decimal("0"))
