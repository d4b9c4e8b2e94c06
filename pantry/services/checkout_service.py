"""Checkout workflows for the card, crypto and balance payment rails.

Each workflow verifies the cart against the catalog before any gateway call
and writes the order and its ledger entries in a single commit, so a failure
anywhere before that commit leaves nothing behind.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Sequence

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from pantry.constants.order_status import OrderStatus, PaymentStatus, SETTLED_STATUSES
from pantry.errors import (
    CheckoutValidationError,
    InsufficientBalanceError,
    InvalidOrderTransition,
    PaymentDeclinedError,
)
from pantry.models.order import Order
from pantry.models.user import User
from pantry.schemas.checkout_schemas import CheckoutItem, ShippingDetails
from pantry.services import ledger_service, order_service
from pantry.services.gateway_port import (
    SUPPORTED_CRYPTO_ASSETS,
    CardGateway,
    CryptoExchange,
)
from pantry.services.luno_client import fiat_to_crypto
from pantry.services.pricing_service import require_shipping_details, verify_cart

logger = logging.getLogger(__name__)

CARD_PAYMENT_METHOD = "yoco_card"
BALANCE_PAYMENT_METHOD = "balance"


@dataclass
class CardCheckoutResult:
    order: Order
    payment_id: str
    amount_charged: Decimal


@dataclass
class CryptoCheckoutResult:
    order: Order
    crypto_address: str
    crypto_amount: Decimal
    asset: str
    address_id: str
    verified_total: Decimal


@dataclass
class CryptoVerification:
    success: bool
    message: str
    order: Optional[Order] = None


@dataclass
class BalanceCheckoutResult:
    order: Order
    new_balance: Decimal


def to_minor_units(amount: Decimal) -> int:
    return int((Decimal(amount) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def crypto_payment_method(asset: str) -> str:
    return f"crypto_{asset.lower()}"


def pay_with_card(
    session: Session,
    *,
    user: User,
    token: Optional[str],
    items: Sequence[CheckoutItem],
    shipping: ShippingDetails,
    gateway: CardGateway,
    currency: str = "ZAR",
) -> CardCheckoutResult:
    if not token or not items:
        raise CheckoutValidationError("Missing required payment information")
    require_shipping_details(shipping)

    cart = verify_cart(session, items)

    charge = gateway.charge(token, to_minor_units(cart.total), currency)
    if not charge.successful:
        logger.warning(f"Card charge {charge.id} for user {user.id} not successful: {charge.status}")
        raise PaymentDeclinedError(
            "Payment failed",
            extra={"details": {"id": charge.id, "status": charge.status}},
        )

    try:
        order = order_service.create_order(
            session,
            user_id=user.id,
            cart=cart,
            shipping=shipping,
            status=OrderStatus.PAID,
            payment_status=PaymentStatus.COMPLETED,
            payment_method=CARD_PAYMENT_METHOD,
            payment_transaction_id=charge.id,
        )
        ledger_service.record_external_payment(
            session,
            user_id=user.id,
            order_id=order.id,
            amount=cart.total,
            rail="Yoco card",
            reference=charge.id,
        )
        session.commit()
    except Exception:
        session.rollback()
        # the card has been charged at this point, keep the charge id findable
        logger.exception(f"Card charge {charge.id} succeeded but the order could not be saved")
        raise

    session.refresh(order)
    return CardCheckoutResult(order=order, payment_id=charge.id, amount_charged=cart.total)


def init_crypto_payment(
    session: Session,
    *,
    user: User,
    asset: Optional[str],
    items: Sequence[CheckoutItem],
    shipping: ShippingDetails,
    exchange: CryptoExchange,
) -> CryptoCheckoutResult:
    if not asset or not items:
        raise CheckoutValidationError("Missing required payment information")

    asset = asset.upper()
    if asset not in SUPPORTED_CRYPTO_ASSETS:
        raise CheckoutValidationError(
            f"Unsupported asset {asset}",
            extra={"supported": list(SUPPORTED_CRYPTO_ASSETS)},
        )
    require_shipping_details(shipping)

    cart = verify_cart(session, items)

    rate = exchange.get_rate(asset)
    crypto_amount = fiat_to_crypto(cart.total, rate)
    address = exchange.create_receive_address(asset)

    order = order_service.create_order(
        session,
        user_id=user.id,
        cart=cart,
        shipping=shipping,
        status=OrderStatus.PENDING_PAYMENT,
        payment_status=PaymentStatus.PENDING,
        payment_method=crypto_payment_method(asset),
        crypto_address=address.address,
        crypto_address_id=address.id,
        crypto_amount=crypto_amount,
    )
    session.commit()
    session.refresh(order)

    logger.info(
        f"Crypto order {order.id}: {crypto_amount} {asset} at {rate} to address {address.id}"
    )
    return CryptoCheckoutResult(
        order=order,
        crypto_address=address.address,
        crypto_amount=crypto_amount,
        asset=asset,
        address_id=address.id,
        verified_total=cart.total,
    )


def verify_crypto_payment(
    session: Session,
    *,
    user: User,
    order_id: int,
    exchange: CryptoExchange,
    address_id: Optional[str] = None,
    expected_amount: Optional[Decimal] = None,
) -> CryptoVerification:
    """
    Poll the exchange for funds sent to a crypto order's receive address.

    Expected amount and address come from the stored order; values sent by
    the client are only compared and logged. Repeated polls after
    confirmation return success without writing anything.
    """
    order = order_service.get_user_order(session, user.id, order_id, for_update=True)

    if order.status in SETTLED_STATUSES:
        return CryptoVerification(True, "Payment confirmed", order)
    if order.status != OrderStatus.PENDING_PAYMENT or order.crypto_amount is None:
        raise InvalidOrderTransition("Order is no longer awaiting payment")

    stored_address_id = order.crypto_address_id or address_id
    if not stored_address_id:
        raise CheckoutValidationError("Missing verification parameters")

    if address_id and address_id != stored_address_id:
        logger.warning(f"Order {order.id}: client address id {address_id} ignored")
    if expected_amount is not None and Decimal(expected_amount) != order.crypto_amount:
        logger.warning(
            f"Order {order.id}: client expected {expected_amount}, stored {order.crypto_amount}"
        )

    received = exchange.get_total_received(stored_address_id)
    if received < order.crypto_amount:
        logger.info(f"Order {order.id}: received {received} of {order.crypto_amount}")
        session.rollback()
        return CryptoVerification(False, "Payment not yet received", order)

    order_service.transition(order, OrderStatus.PAID, PaymentStatus.COMPLETED)
    session.add(order)
    try:
        ledger_service.record_external_payment(
            session,
            user_id=user.id,
            order_id=order.id,
            amount=order.total,
            rail=f"{order.payment_method or 'crypto'}",
            reference=stored_address_id,
        )
        session.commit()
    except IntegrityError:
        # a concurrent poll confirmed the same order first
        session.rollback()
        logger.info(f"Order {order_id} already confirmed by another request")
        order = order_service.get_user_order(session, user.id, order_id)
        return CryptoVerification(True, "Payment confirmed", order)

    session.refresh(order)
    logger.info(f"Crypto payment confirmed for order {order.id}")
    return CryptoVerification(True, "Payment confirmed", order)


def pay_with_balance(
    session: Session,
    *,
    user: User,
    items: Sequence[CheckoutItem],
    shipping: Optional[ShippingDetails] = None,
) -> BalanceCheckoutResult:
    cart = verify_cart(session, items)

    if shipping is None or not any(shipping.model_dump(exclude_none=True).values()):
        shipping = ShippingDetails(
            shipping_address=user.shipping_address,
            city=user.city,
            province=user.province,
            postal_code=user.postal_code,
            country=user.country,
        )

    try:
        order = order_service.create_order(
            session,
            user_id=user.id,
            cart=cart,
            shipping=shipping,
            status=OrderStatus.PAID,
            payment_status=PaymentStatus.COMPLETED,
            payment_method=BALANCE_PAYMENT_METHOD,
        )
        ledger_service.record_balance_payment(
            session,
            user_id=user.id,
            order_id=order.id,
            amount=cart.total,
        )
        session.commit()
    except InsufficientBalanceError:
        session.rollback()
        logger.info(f"Balance checkout rejected for user {user.id}, total {cart.total}")
        raise
    except Exception:
        session.rollback()
        raise

    session.refresh(order)
    return BalanceCheckoutResult(
        order=order,
        new_balance=ledger_service.current_balance(session, user.id),
    )
