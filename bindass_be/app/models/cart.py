from sqlalchemy import Column, Integer, ForeignKey, DateTime
from datetime import datetime
from app.models.user import Base
from app.models.product import JSONType


class Cart(Base):
    __tablename__ = "carts"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True, unique=True)
    # Serialized CartStore snapshot; overwritten as a whole on every mutation
    state = Column(JSONType)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
