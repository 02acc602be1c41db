import json
import logging
from pathlib import Path
from typing import Optional

from app.storefront.cart import CartStore
from app.storefront.wishlist import WishlistStore

logger = logging.getLogger(__name__)

PERSISTED_SLICES = ("cart", "wishlist", "currency")


class SnapshotStorage:
    """Persist whitelisted storefront slices as one JSON document.

    Each save overwrites the whole document (last write wins).
    """

    def __init__(self, path, key: str = "root"):
        self.path = Path(path)
        self.key = key

    def load(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable storefront snapshot %s: %s", self.path, e)
            return {}
        root = data.get(self.key) if isinstance(data, dict) else None
        if root is None:
            return {}
        if not isinstance(root, dict):
            logger.warning("Ignoring unreadable storefront snapshot %s: unexpected %s", self.path, type(root).__name__)
            return {}
        return {k: v for k, v in root.items() if k in PERSISTED_SLICES}

    def save(self, cart: Optional[CartStore] = None, wishlist: Optional[WishlistStore] = None, currency: Optional[str] = None) -> None:
        current = self.load()
        if cart is not None:
            current["cart"] = cart.snapshot()
        if wishlist is not None:
            current["wishlist"] = wishlist.snapshot()
        if currency is not None:
            current["currency"] = currency
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps({self.key: current}), encoding="utf-8")

    def rehydrate(self):
        """Return ``(cart, wishlist, currency_code)`` restored from disk."""
        data = self.load()
        return (
            CartStore.from_snapshot(data.get("cart")),
            WishlistStore.from_snapshot(data.get("wishlist")),
            data.get("currency"),
        )
