from decimal import Decimal

from sqlmodel import select

from conftest import SHIPPING
from pantry.errors import PaymentGatewayError
from pantry.models.order import Order
from pantry.models.order_item import OrderItem
from pantry.models.transaction import Transaction
from pantry.services.checkout_service import to_minor_units


def _pay(client, headers, products, **overrides):
    body = {
        "token": "tok_test_123",
        "items": [{"id": products[0].id, "quantity": 2, "price": 1}],
        **SHIPPING,
        **overrides,
    }
    return client.post("/payment/card", json=body, headers=headers)


def test_to_minor_units_rounds_half_up():
    assert to_minor_units(Decimal("170")) == 17000
    assert to_minor_units(Decimal("10.005")) == 1001
    assert to_minor_units(Decimal("10.004")) == 1000


def test_card_payment_creates_paid_order(client, session, headers, products, card_gateway, user):
    response = _pay(client, headers, products)

    assert response.status_code == 201
    data = response.json()
    assert data["success"] is True
    assert data["amountCharged"] == 170
    assert data["order"]["status"] == "paid"
    assert data["order"]["paymentStatus"] == "completed"
    assert data["order"]["paymentMethod"] == "yoco_card"
    assert data["order"]["paymentTransactionId"] == data["paymentId"]
    assert data["order"]["city"] == "Cape Town"

    assert card_gateway.calls == [
        {"token": "tok_test_123", "amount_in_cents": 17000, "currency": "ZAR"}
    ]

    items = session.exec(select(OrderItem)).all()
    assert len(items) == 1
    assert items[0].price == Decimal("60")
    assert items[0].quantity == 2


def test_card_payment_ledger_keeps_balance(client, session, headers, products, user):
    _pay(client, headers, products)

    txns = session.exec(select(Transaction).order_by(Transaction.id)).all()
    payments = [t for t in txns if t.type == "payment"]
    assert len(payments) == 1
    assert payments[0].amount == Decimal("-170")
    assert payments[0].order_id is not None

    session.refresh(user)
    assert user.balance == Decimal("0")
    assert user.balance == sum((t.amount for t in txns), Decimal("0"))


def test_declined_card_writes_nothing(client, session, headers, products, card_gateway):
    card_gateway.status = "failed"

    response = _pay(client, headers, products)

    assert response.status_code == 400
    assert response.json()["message"] == "Payment failed"
    assert session.exec(select(Order)).all() == []
    assert session.exec(select(OrderItem)).all() == []
    assert session.exec(select(Transaction)).all() == []


def test_gateway_error_writes_nothing(client, session, headers, products, card_gateway):
    card_gateway.error = PaymentGatewayError("Card gateway is unreachable")

    response = _pay(client, headers, products)

    assert response.status_code == 502
    assert response.json()["message"] == "Card gateway is unreachable"
    assert session.exec(select(Order)).all() == []
    assert session.exec(select(Transaction)).all() == []


def test_missing_shipping_rejected_before_charge(client, session, headers, products, card_gateway):
    response = _pay(client, headers, products, postalCode="")

    assert response.status_code == 400
    assert response.json()["message"] == "Complete shipping address is required"
    assert card_gateway.calls == []


def test_unknown_product_rejected_before_charge(client, headers, products, card_gateway):
    response = _pay(client, headers, products, items=[{"id": 999, "quantity": 1}])

    assert response.status_code == 400
    assert card_gateway.calls == []


def test_missing_token_rejected(client, headers, products, card_gateway):
    response = _pay(client, headers, products, token=None)

    assert response.status_code == 400
    assert response.json()["message"] == "Missing required payment information"
    assert card_gateway.calls == []


def test_card_payment_requires_auth(client, products):
    response = client.post("/payment/card", json={"token": "tok", "items": []})

    assert response.status_code == 401
