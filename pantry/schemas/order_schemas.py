from datetime import datetime
from decimal import Decimal
from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, PlainSerializer
from pydantic.alias_generators import to_camel

# Amounts go out as JSON numbers, the same shape FastAPI gives bare Decimals
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class ReadModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ProductRead(ReadModel):
    id: int
    name: str
    description: str
    price: Money
    image_url: str
    heat_level: int
    stock: int


class OrderRead(ReadModel):
    id: int
    user_id: str
    status: str
    total: Money
    payment_method: Optional[str] = None
    payment_status: str
    payment_transaction_id: Optional[str] = None
    crypto_address: Optional[str] = None
    crypto_amount: Optional[Money] = None
    shipping_address: Optional[str] = None
    city: Optional[str] = None
    province: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class OrderItemRead(ReadModel):
    id: int
    order_id: int
    product_id: int
    quantity: int
    price: Money
    created_at: datetime
    product: Optional[ProductRead] = None


class TransactionRead(ReadModel):
    id: int
    user_id: str
    amount: Money
    type: str
    description: Optional[str] = None
    order_id: Optional[int] = None
    created_at: datetime
