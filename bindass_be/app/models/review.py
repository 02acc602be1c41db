from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, DateTime, UniqueConstraint
from datetime import datetime
from app.models.user import Base
from app.models.product import JSONType


class Review(Base):
    __tablename__ = "reviews"
    __table_args__ = (
        # product_id is NULL for general order reviews; NULLs never collide
        UniqueConstraint("user_id", "product_id", name="uq_review_user_product"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=True, index=True)
    rating = Column(Integer, nullable=False)
    title = Column(String(100), nullable=False)
    comment = Column(String(1000), nullable=False)
    images = Column(JSONType)
    is_verified_purchase = Column(Boolean, default=True)
    is_approved = Column(Boolean, default=False)  # reviews need admin approval
    is_featured = Column(Boolean, default=False)
    helpful_votes = Column(Integer, default=0)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
