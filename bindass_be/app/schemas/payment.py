from pydantic import BaseModel, Field
from typing import Optional


class PaymentVerify(BaseModel):
    orderId: int
    gatewayOrderId: str = Field(min_length=1)
    paymentId: str = Field(min_length=1)
    signature: str = Field(min_length=1)


class PaymentVerifyOut(BaseModel):
    message: str
    orderId: int
    orderNumber: str
    paymentId: str
    status: str
    paymentStatus: Optional[str] = None
