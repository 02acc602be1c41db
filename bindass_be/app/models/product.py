from sqlalchemy import Column, Integer, String, Numeric, Boolean, JSON, DateTime
from sqlalchemy.dialects.postgresql import JSONB
from datetime import datetime
from app.models.user import Base

# JSONB on Postgres, plain JSON elsewhere (sqlite in tests)
JSONType = JSON().with_variant(JSONB(), "postgresql")

MAX_CART_QUANTITY = 99


class Product(Base):
    __tablename__ = "products"
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    description = Column(String(2000))
    price = Column(Numeric(10, 2), nullable=False)
    compare_price = Column(Numeric(10, 2))
    category = Column(String(100), index=True)
    sub_category = Column(String(100), index=True)
    images = Column(JSONType)  # List of URLs
    sizes = Column(JSONType)  # e.g. ["S", "M", "L"]
    colors = Column(JSONType)  # e.g. ["Black", "Crimson"]
    # Optional per-variant inventory, e.g. [{"size": "M", "color": "Black", "stock": 4}]
    variants = Column(JSONType)
    stock = Column(Integer, default=0)
    track_quantity = Column(Boolean, default=True)
    status = Column(String(20), default="active")  # active, draft, archived
    featured = Column(Boolean, default=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @property
    def main_image(self):
        return (self.images or [None])[0]

    def find_variant(self, size, color):
        for v in self.variants or []:
            if v.get("size") == size and v.get("color") == color:
                return v
        return None

    def available_quantity(self, size=None, color=None):
        """Stock available for the given selection, or None when the variant doesn't exist."""
        if self.variants:
            variant = self.find_variant(size, color)
            if variant is None:
                return None
            return int(variant.get("stock", 0) or 0)
        return int(self.stock or 0)

    def max_cart_quantity(self, size=None, color=None) -> int:
        if not self.track_quantity:
            return MAX_CART_QUANTITY
        available = self.available_quantity(size, color) or 0
        return min(available, MAX_CART_QUANTITY)

    def adjust_stock(self, delta: int, size=None, color=None) -> None:
        """Add ``delta`` (negative to reserve) to the matching variant or to total stock."""
        if not self.track_quantity:
            return
        if self.variants:
            # Reassign the JSON list to ensure SQLAlchemy change tracking
            variants = [dict(v) for v in self.variants]
            for v in variants:
                if v.get("size") == size and v.get("color") == color:
                    v["stock"] = max(0, int(v.get("stock", 0) or 0) + delta)
            self.variants = variants
            self.stock = sum(int(v.get("stock", 0) or 0) for v in variants)
        else:
            self.stock = max(0, int(self.stock or 0) + delta)
