from sqlmodel import SQLModel, Field
from typing import Optional
from decimal import Decimal
from datetime import datetime


class Product(SQLModel, table=True):
    __tablename__ = "products"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(max_length=100)
    description: str
    price: Decimal = Field(max_digits=12, decimal_places=2)
    image_url: str = Field(max_length=255)

    # 1 = mild, 3 = xtra hot
    heat_level: int = Field(default=1, ge=1, le=3)
    stock: int = Field(default=100)

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
