from sqlmodel import SQLModel, Field
from typing import Optional
from decimal import Decimal
from datetime import datetime


class User(SQLModel, table=True):
    __tablename__ = "users"

    # subject issued by the identity provider
    id: str = Field(primary_key=True)
    email: Optional[str] = Field(default=None, unique=True, index=True)
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_image_url: Optional[str] = None
    phone_number: Optional[str] = None
    address: Optional[str] = None

    shipping_address: Optional[str] = None
    city: Optional[str] = None
    province: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None

    # cached running total of the user's transactions, only ever changed
    # through ledger_service
    balance: Decimal = Field(default=Decimal("0"), max_digits=12, decimal_places=2)

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
