from sqlmodel import SQLModel, Field, Relationship
from typing import List, Optional
from decimal import Decimal
from datetime import datetime

from pantry.constants.order_status import OrderStatus, PaymentStatus
from pantry.models.order_item import OrderItem


class Order(SQLModel, table=True):
    __tablename__ = "orders"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(foreign_key="users.id", index=True)

    status: str = Field(default=OrderStatus.PENDING, max_length=20, index=True)
    total: Decimal = Field(max_digits=12, decimal_places=2)

    payment_method: Optional[str] = Field(default=None, max_length=50)
    payment_status: str = Field(default=PaymentStatus.PENDING, max_length=20)
    payment_transaction_id: Optional[str] = None

    crypto_address: Optional[str] = None
    crypto_address_id: Optional[str] = None
    crypto_amount: Optional[Decimal] = Field(default=None, max_digits=18, decimal_places=8)

    shipping_address: Optional[str] = None
    city: Optional[str] = None
    province: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    items: List["OrderItem"] = Relationship(
        back_populates="order",
        sa_relationship_kwargs={"cascade": "all, delete-orphan"},
    )
