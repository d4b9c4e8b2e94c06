import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional, Sequence

from sqlmodel import Session

from pantry.config import settings
from pantry.errors import CheckoutValidationError
from pantry.models.product import Product
from pantry.schemas.checkout_schemas import CheckoutItem, ShippingDetails

logger = logging.getLogger(__name__)


@dataclass
class VerifiedLine:
    product: Product
    quantity: int
    unit_price: Decimal
    line_total: Decimal


@dataclass
class VerifiedCart:
    lines: List[VerifiedLine] = field(default_factory=list)
    subtotal: Decimal = Decimal("0")
    shipping: Decimal = Decimal("0")
    total: Decimal = Decimal("0")


def verify_cart(
    session: Session,
    items: Sequence[CheckoutItem],
    shipping_fee: Optional[Decimal] = None,
) -> VerifiedCart:
    """
    Recompute the order total from catalog prices.

    Only product ids and quantities are taken from the client; the whole
    request fails on the first unknown product or non-positive quantity.
    """
    if not items:
        raise CheckoutValidationError("Missing required payment information")

    if shipping_fee is None:
        shipping_fee = settings.shipping_fee

    cart = VerifiedCart(shipping=Decimal(shipping_fee))

    for item in items:
        if not isinstance(item.quantity, int) or item.quantity <= 0:
            raise CheckoutValidationError("Invalid quantity")

        product = session.get(Product, item.id)
        if not product:
            raise CheckoutValidationError(f"Product {item.id} not found")

        unit_price = Decimal(product.price)
        line_total = unit_price * item.quantity
        cart.subtotal += line_total

        cart.lines.append(
            VerifiedLine(
                product=product,
                quantity=item.quantity,
                unit_price=unit_price,
                line_total=line_total,
            )
        )

    cart.total = cart.subtotal + cart.shipping
    logger.info(
        f"Verified cart: {len(cart.lines)} lines, subtotal {cart.subtotal}, total {cart.total}"
    )
    return cart


def require_shipping_details(shipping: ShippingDetails) -> None:
    required = (
        shipping.shipping_address,
        shipping.city,
        shipping.province,
        shipping.postal_code,
        shipping.country,
    )
    if not all(value and value.strip() for value in required):
        raise CheckoutValidationError("Complete shipping address is required")
