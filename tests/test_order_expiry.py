from datetime import datetime, timedelta
from decimal import Decimal

import pytest
from sqlalchemy import event
from sqlmodel import Session

from pantry.constants.order_status import OrderStatus, PaymentStatus
from pantry.errors import InvalidOrderTransition
from pantry.models.order import Order
from pantry.services.order_expiry_service import expire_stale_crypto_orders
from pantry.services.order_service import transition

NOW = datetime(2026, 10, 19, 12, 0, 0)


def _order(session, user, status, age_hours):
    order = Order(
        user_id=user.id,
        total=Decimal("110"),
        status=status,
        payment_status=PaymentStatus.PENDING,
        payment_method="crypto_xbt",
        crypto_amount=Decimal("0.00022"),
        created_at=NOW - timedelta(hours=age_hours),
    )
    session.add(order)
    session.commit()
    return order


def test_expires_only_stale_pending_payment_orders(session, user):
    stale = _order(session, user, OrderStatus.PENDING_PAYMENT, 30)
    fresh = _order(session, user, OrderStatus.PENDING_PAYMENT, 2)
    paid = _order(session, user, OrderStatus.PAID, 48)

    expired = expire_stale_crypto_orders(session, now=NOW, max_age_hours=24)

    assert expired == 1
    session.refresh(stale)
    session.refresh(fresh)
    session.refresh(paid)
    assert stale.status == OrderStatus.EXPIRED
    assert stale.payment_status == PaymentStatus.EXPIRED
    assert fresh.status == OrderStatus.PENDING_PAYMENT
    assert paid.status == OrderStatus.PAID


def test_order_paid_after_scan_is_not_expired(engine, session, user):
    order = _order(session, user, OrderStatus.PENDING_PAYMENT, 30)
    order_id = order.id
    sweep_session = Session(engine)
    confirmed = []

    # a payment check lands between the sweep reading stale orders and writing
    @event.listens_for(sweep_session, "do_orm_execute")
    def confirm_after_scan(state):
        if not state.is_select or confirmed:
            return None
        frozen = state.invoke_statement().freeze()
        with Session(engine) as other:
            paying = other.get(Order, order_id)
            transition(paying, OrderStatus.PAID, PaymentStatus.COMPLETED)
            other.add(paying)
            other.commit()
        confirmed.append(order_id)
        return frozen()

    with sweep_session:
        expired = expire_stale_crypto_orders(sweep_session, now=NOW, max_age_hours=24)

    assert confirmed == [order_id]
    assert expired == 0
    session.refresh(order)
    assert order.status == OrderStatus.PAID
    assert order.payment_status == PaymentStatus.COMPLETED


def test_sweep_with_nothing_to_do(session, user):
    assert expire_stale_crypto_orders(session, now=NOW) == 0


def test_transition_rules(session, user):
    order = _order(session, user, OrderStatus.PENDING_PAYMENT, 0)

    transition(order, OrderStatus.PAID, PaymentStatus.COMPLETED)
    assert order.status == OrderStatus.PAID
    assert order.payment_status == PaymentStatus.COMPLETED

    transition(order, OrderStatus.COMPLETED)
    assert order.status == OrderStatus.COMPLETED

    with pytest.raises(InvalidOrderTransition):
        transition(order, OrderStatus.PENDING_PAYMENT)
