from sqlalchemy import Column, Integer, ForeignKey, DateTime
from datetime import datetime
from app.models.user import Base
from app.models.product import JSONType


class Wishlist(Base):
    __tablename__ = "wishlists"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True, unique=True)
    # Serialized WishlistStore snapshot
    state = Column(JSONType)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
