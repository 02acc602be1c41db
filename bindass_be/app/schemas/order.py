from pydantic import BaseModel, ConfigDict, EmailStr, Field
from typing import List, Optional, Literal


PaymentMethod = Literal["online", "cashOnDelivery"]


class OrderItemIn(BaseModel):
    productId: int
    quantity: int = Field(gt=0)
    selectedSize: Optional[str] = None
    selectedColor: Optional[str] = None
    unitPrice: float = Field(ge=0)
    name: Optional[str] = None
    image: Optional[str] = None


class ShippingAddress(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    firstName: str = Field(min_length=1)
    lastName: str = Field(min_length=1)
    email: EmailStr
    phone: str = Field(min_length=1)
    address: str = Field(min_length=1)
    city: str = Field(min_length=1)
    state: str = Field(min_length=1)
    zipCode: str = Field(min_length=1)
    country: str = "India"


class Pricing(BaseModel):
    subtotal: float = Field(ge=0)
    shipping: float = Field(ge=0)
    tax: float = Field(ge=0)
    total: float = Field(ge=0)


class OrderCreate(BaseModel):
    items: List[OrderItemIn]
    shippingAddress: ShippingAddress
    paymentMethod: PaymentMethod
    pricing: Pricing


OrderStatus = Literal["PENDING", "CONFIRMED", "PROCESSING", "SHIPPED", "DELIVERED", "COMPLETED", "CANCELLED"]
PaymentStatus = Literal["PENDING", "PAID", "FAILED", "REFUNDED"]


class OrderStatusUpdate(BaseModel):
    status: OrderStatus


class OrderPaymentStatusUpdate(BaseModel):
    paymentStatus: PaymentStatus


class OrderItemOut(BaseModel):
    id: int
    productId: int
    name: Optional[str] = None
    image: Optional[str] = None
    quantity: int
    selectedSize: Optional[str] = None
    selectedColor: Optional[str] = None
    price: float
    total: float


class OrderOut(BaseModel):
    id: int
    orderNumber: str
    items: List[OrderItemOut]
    shippingAddress: ShippingAddress
    paymentMethod: PaymentMethod
    paymentStatus: PaymentStatus
    gatewayOrderId: Optional[str] = None
    gatewayPaymentId: Optional[str] = None
    pricing: Pricing
    currency: str
    status: OrderStatus
    createdAt: str
    updatedAt: str
