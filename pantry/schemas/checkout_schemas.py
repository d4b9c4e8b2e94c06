from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from pantry.schemas.order_schemas import Money


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CheckoutItem(CamelModel):
    # anything else the client sends with a cart line (name, price, image)
    # is ignored, prices always come from the catalog
    id: int
    quantity: int


class ShippingDetails(CamelModel):
    shipping_address: Optional[str] = None
    city: Optional[str] = None
    province: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None

    @classmethod
    def from_request(cls, data: "ShippingDetails") -> "ShippingDetails":
        """Only the address part of a checkout request body."""
        return cls.model_validate(data.model_dump(include=set(cls.model_fields)))


class CartSummaryRequest(CamelModel):
    items: List[CheckoutItem] = []


class CardPaymentRequest(ShippingDetails):
    token: Optional[str] = None
    items: List[CheckoutItem] = []


class CryptoInitRequest(ShippingDetails):
    asset: Optional[str] = None
    items: List[CheckoutItem] = []


class CryptoVerifyRequest(CamelModel):
    order_id: int
    # kept for older clients, the stored order is authoritative
    address_id: Optional[str] = None
    expected_amount: Optional[Decimal] = None


class BalanceOrderRequest(ShippingDetails):
    items: List[CheckoutItem] = []
    use_balance: bool = False


class SummaryLine(CamelModel):
    id: int
    name: str
    quantity: int
    price: Money
    line_total: Money


class CartSummary(CamelModel):
    items: List[SummaryLine]
    subtotal: Money
    shipping: Money
    total: Money
