from sqlmodel import SQLModel, Field
from typing import Optional
from decimal import Decimal
from datetime import datetime


class Transaction(SQLModel, table=True):
    """Append-only ledger entry. `amount` is signed: deposits are positive,
    payments negative."""

    __tablename__ = "transactions"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(foreign_key="users.id", index=True)
    amount: Decimal = Field(max_digits=12, decimal_places=2)
    type: str = Field(max_length=20)  # deposit | payment
    description: Optional[str] = None
    order_id: Optional[int] = Field(default=None, foreign_key="orders.id", index=True)

    # unique per order and purpose, NULL for plain deposits
    idempotency_key: Optional[str] = Field(default=None, unique=True, max_length=100)

    created_at: datetime = Field(default_factory=datetime.utcnow)
