import logging
from datetime import datetime
from typing import List, Optional, Tuple

from sqlmodel import Session, select

from pantry.constants.order_status import ALLOWED_TRANSITIONS
from pantry.errors import InvalidOrderTransition, NotFoundError
from pantry.models.order import Order
from pantry.models.order_item import OrderItem
from pantry.models.product import Product
from pantry.schemas.checkout_schemas import ShippingDetails
from pantry.services.pricing_service import VerifiedCart

logger = logging.getLogger(__name__)


def create_order(
    session: Session,
    *,
    user_id: str,
    cart: VerifiedCart,
    shipping: Optional[ShippingDetails],
    status: str,
    payment_status: str,
    payment_method: str,
    **fields,
) -> Order:
    """Add an order and one item per verified line. Flushes so the order has
    an id, never commits."""
    shipping_fields = {}
    if shipping is not None:
        shipping_fields = shipping.model_dump(exclude_none=True)

    order = Order(
        user_id=user_id,
        total=cart.total,
        status=status,
        payment_status=payment_status,
        payment_method=payment_method,
        **shipping_fields,
        **fields,
    )
    for line in cart.lines:
        order.items.append(
            OrderItem(
                product_id=line.product.id,
                quantity=line.quantity,
                price=line.unit_price,
            )
        )

    session.add(order)
    session.flush()

    logger.info(f"Created order {order.id} ({status}) for user {user_id}, total {order.total}")
    return order


def transition(order: Order, new_status: str, payment_status: Optional[str] = None) -> Order:
    allowed = ALLOWED_TRANSITIONS.get(order.status, [])
    if new_status not in allowed:
        raise InvalidOrderTransition(
            f"Cannot move order #{order.id} from {order.status} to {new_status}"
        )

    order.status = new_status
    if payment_status is not None:
        order.payment_status = payment_status
    order.updated_at = datetime.utcnow()
    return order


def get_user_order(session: Session, user_id: str, order_id: int, for_update: bool = False) -> Order:
    statement = select(Order).where(Order.id == order_id, Order.user_id == user_id)
    if for_update:
        statement = statement.with_for_update()

    order = session.exec(statement).first()
    if not order:
        raise NotFoundError("Order not found")
    return order


def list_orders(session: Session, user_id: str) -> List[Order]:
    return session.exec(
        select(Order)
        .where(Order.user_id == user_id)
        .order_by(Order.created_at.desc(), Order.id.desc())
    ).all()


def list_order_items(session: Session, user_id: str, order_id: int) -> List[Tuple[OrderItem, Product]]:
    order = get_user_order(session, user_id, order_id)

    return session.exec(
        select(OrderItem, Product)
        .join(Product, OrderItem.product_id == Product.id)
        .where(OrderItem.order_id == order.id)
        .order_by(OrderItem.id)
    ).all()
