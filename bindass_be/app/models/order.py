from sqlalchemy import Column, Integer, String, Numeric, ForeignKey, DateTime
from sqlalchemy.orm import relationship
from datetime import datetime
from app.models.user import Base

ORDER_STATUSES = ("PENDING", "CONFIRMED", "PROCESSING", "SHIPPED", "DELIVERED", "COMPLETED", "CANCELLED")
PAYMENT_STATUSES = ("PENDING", "PAID", "FAILED", "REFUNDED")
# Orders in these states are fulfilled; only they may be reviewed
FULFILLED_STATUSES = ("DELIVERED", "COMPLETED")


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    order_number = Column(String(64), unique=True, index=True, nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    # shipping address fields
    shipping_first_name = Column(String(100))
    shipping_last_name = Column(String(100))
    shipping_email = Column(String(255))
    shipping_phone = Column(String(50))
    shipping_address = Column(String(255))
    shipping_city = Column(String(100))
    shipping_state = Column(String(100))
    shipping_zip_code = Column(String(20))
    shipping_country = Column(String(100))

    payment_method = Column(String(20))  # online, cashOnDelivery
    payment_status = Column(String(20), default="PENDING")  # PENDING, PAID, FAILED, REFUNDED
    gateway_order_id = Column(String(100), index=True)
    gateway_payment_id = Column(String(100))
    gateway_signature = Column(String(255))

    # pricing snapshot at checkout time; never recomputed afterwards
    subtotal = Column(Numeric(12, 2), default=0)
    shipping_cost = Column(Numeric(12, 2), default=0)
    tax = Column(Numeric(12, 2), default=0)
    total_amount = Column(Numeric(12, 2), default=0)
    currency = Column(String(3), default="INR")

    status = Column(String(20), default="PENDING")

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan")

    def has_product(self, product_id: int) -> bool:
        return any(i.product_id == product_id for i in self.items)


class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)
    name = Column(String(255))
    image = Column(String(500))
    quantity = Column(Integer, nullable=False)
    selected_size = Column(String(50))
    selected_color = Column(String(50))
    price = Column(Numeric(10, 2), nullable=False)  # unit price at time of order
    total = Column(Numeric(12, 2), nullable=False)

    order = relationship("Order", back_populates="items")
