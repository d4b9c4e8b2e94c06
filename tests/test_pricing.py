from decimal import Decimal

import pytest

from pantry.errors import CheckoutValidationError
from pantry.schemas.checkout_schemas import CheckoutItem, ShippingDetails
from pantry.services.pricing_service import require_shipping_details, verify_cart


def test_total_is_catalog_price_times_quantity_plus_shipping(session, products):
    mild, hot = products
    items = [CheckoutItem(id=mild.id, quantity=2), CheckoutItem(id=hot.id, quantity=1)]

    cart = verify_cart(session, items)

    assert cart.subtotal == Decimal("180")
    assert cart.shipping == Decimal("50")
    assert cart.total == Decimal("230")
    assert [line.unit_price for line in cart.lines] == [Decimal("60"), Decimal("60")]


def test_client_price_is_ignored(session, products):
    mild = products[0]
    item = CheckoutItem.model_validate({"id": mild.id, "quantity": 2, "price": 0.01, "name": "free"})

    cart = verify_cart(session, [item])

    assert cart.total == Decimal("170")


def test_uses_current_catalog_price(session, products):
    mild = products[0]
    mild.price = Decimal("75.50")
    session.add(mild)
    session.commit()

    cart = verify_cart(session, [CheckoutItem(id=mild.id, quantity=2)])

    assert cart.total == Decimal("201.00")


def test_unknown_product_fails_whole_cart(session, products):
    items = [CheckoutItem(id=products[0].id, quantity=1), CheckoutItem(id=999, quantity=1)]

    with pytest.raises(CheckoutValidationError) as exc:
        verify_cart(session, items)

    assert exc.value.message == "Product 999 not found"
    assert exc.value.status_code == 400


@pytest.mark.parametrize("quantity", [0, -3])
def test_non_positive_quantity_rejected(session, products, quantity):
    with pytest.raises(CheckoutValidationError, match="Invalid quantity"):
        verify_cart(session, [CheckoutItem(id=products[0].id, quantity=quantity)])


def test_empty_cart_rejected(session, products):
    with pytest.raises(CheckoutValidationError):
        verify_cart(session, [])


def test_custom_shipping_fee(session, products):
    cart = verify_cart(session, [CheckoutItem(id=products[0].id, quantity=1)], shipping_fee=Decimal("0"))

    assert cart.total == Decimal("60")


def test_incomplete_shipping_rejected():
    shipping = ShippingDetails(shipping_address="12 Long Street", city="Cape Town", province=" ")

    with pytest.raises(CheckoutValidationError, match="Complete shipping address is required"):
        require_shipping_details(shipping)


def test_checkout_summary_endpoint(client, products):
    response = client.post(
        "/checkout/summary",
        json={"items": [{"id": products[0].id, "quantity": 2, "price": 1}]},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["subtotal"] == 120
    assert data["shipping"] == 50
    assert data["total"] == 170
    assert data["items"][0]["lineTotal"] == 120
    assert data["items"][0]["name"] == "Mild Pineapple & Habanero Marmalade"


def test_checkout_summary_unknown_product(client, products):
    response = client.post("/checkout/summary", json={"items": [{"id": 42, "quantity": 1}]})

    assert response.status_code == 400
    assert response.json() == {"message": "Product 42 not found"}
