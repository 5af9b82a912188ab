from pydantic import Field

from .base import CamelModel


class OrderCreate(CamelModel):
    quiz_id: int


class PaymentVerify(CamelModel):
    order_id: str = Field(min_length=1)
    provider_payment_id: str = Field(min_length=1)
    signature: str = Field(min_length=1)
