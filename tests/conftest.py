import os
from decimal import Decimal
from uuid import uuid4

# settings are read at import time
os.environ.setdefault("ENV", "test")
os.environ.setdefault("DATABASE_DSN", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine, select

from pantry import models  # noqa: F401
from pantry.database import get_session
from pantry.dependencies.gateways import get_card_gateway, get_crypto_exchange
from pantry.errors import PaymentGatewayError
from pantry.main import app
from pantry.models.product import Product
from pantry.models.user import User
from pantry.services.catalog_service import seed_products
from pantry.services.gateway_port import (
    CardCharge,
    CardGateway,
    CryptoExchange,
    ReceiveAddress,
)
from pantry.utils.token import create_access_token


class FakeCardGateway(CardGateway):
    def __init__(self, status="successful", error=None):
        self.status = status
        self.error = error
        self.calls = []

    def charge(self, token, amount_in_cents, currency):
        self.calls.append(
            {"token": token, "amount_in_cents": amount_in_cents, "currency": currency}
        )
        if self.error:
            raise self.error
        return CardCharge(
            id=f"ch_{uuid4().hex[:10]}",
            status=self.status,
            amount_in_cents=amount_in_cents,
            currency=currency,
        )


class FakeExchange(CryptoExchange):
    def __init__(self, rate=Decimal("500000")):
        self.rate = rate
        self.received = {}
        self.addresses = []
        self.unreachable = False

    def get_rate(self, asset):
        if self.unreachable:
            raise PaymentGatewayError("Crypto exchange is unreachable")
        return self.rate

    def create_receive_address(self, asset):
        address = ReceiveAddress(
            id=str(1000 + len(self.addresses)),
            address=f"{asset.lower()}-addr-{len(self.addresses)}",
            asset=asset,
        )
        self.addresses.append(address)
        return address

    def get_total_received(self, address_id):
        return self.received.get(address_id, Decimal("0"))


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture()
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture()
def products(session):
    seed_products(session)
    return session.exec(select(Product).order_by(Product.id)).all()


def make_user(session, user_id="user-1", balance=Decimal("0"), **fields):
    user = User(id=user_id, email=f"{user_id}@example.com", balance=balance, **fields)
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@pytest.fixture()
def user(session):
    return make_user(session)


def auth_headers(user):
    return {"Authorization": f"Bearer {create_access_token({'sub': user.id})}"}


@pytest.fixture()
def headers(user):
    return auth_headers(user)


@pytest.fixture()
def card_gateway():
    return FakeCardGateway()


@pytest.fixture()
def exchange():
    return FakeExchange()


@pytest.fixture()
def client(session, card_gateway, exchange):
    def get_session_override():
        yield session

    app.dependency_overrides[get_session] = get_session_override
    app.dependency_overrides[get_card_gateway] = lambda: card_gateway
    app.dependency_overrides[get_crypto_exchange] = lambda: exchange

    yield TestClient(app)

    app.dependency_overrides.clear()


SHIPPING = {
    "shippingAddress": "12 Long Street",
    "city": "Cape Town",
    "province": "Western Cape",
    "postalCode": "8001",
    "country": "South Africa",
}
