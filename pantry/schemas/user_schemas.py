from decimal import Decimal
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr

from pantry.schemas.order_schemas import Money, ReadModel


class SimpleLogin(BaseModel):
    email: EmailStr


class ProfileUpdate(ReadModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone_number: Optional[str] = None
    address: Optional[str] = None
    shipping_address: Optional[str] = None
    city: Optional[str] = None
    province: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None


class UserRead(ReadModel):
    id: str
    email: Optional[str] = None
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
    balance: Money
    created_at: datetime
    updated_at: datetime


class DepositRequest(BaseModel):
    amount: Decimal
    method: str = "card"
