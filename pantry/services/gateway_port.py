"""Interfaces for the external payment rails.

Checkout code only talks to these; the Yoco and Luno clients implement them
over HTTP and tests swap in in-memory fakes.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Optional

SUPPORTED_CRYPTO_ASSETS = ("XBT", "ETH", "USDT", "DOGE", "XMR")

SUCCESSFUL_CHARGE_STATUS = "successful"


@dataclass(frozen=True)
class CardCharge:
    id: str
    status: str
    amount_in_cents: int
    currency: str
    created_date: Optional[str] = None
    raw: Optional[Dict[str, Any]] = None

    @property
    def successful(self) -> bool:
        return self.status == SUCCESSFUL_CHARGE_STATUS


@dataclass(frozen=True)
class ReceiveAddress:
    id: str
    address: str
    asset: str
    total_received: Decimal = Decimal("0")
    total_unconfirmed: Decimal = Decimal("0")


class CardGateway(ABC):
    @abstractmethod
    def charge(self, token: str, amount_in_cents: int, currency: str) -> CardCharge:
        """Charge a tokenised card. Raises PaymentGatewayError when the
        gateway cannot be reached or rejects the request outright."""
        ...


class CryptoExchange(ABC):
    @abstractmethod
    def get_rate(self, asset: str) -> Decimal:
        """Last traded price of one unit of `asset` in the store currency."""
        ...

    @abstractmethod
    def create_receive_address(self, asset: str) -> ReceiveAddress:
        ...

    @abstractmethod
    def get_total_received(self, address_id: str) -> Decimal:
        ...
