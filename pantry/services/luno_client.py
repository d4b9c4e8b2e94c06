import logging
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

import requests

from pantry.config import LunoConfig
from pantry.errors import PaymentGatewayError
from pantry.services.gateway_port import CryptoExchange, ReceiveAddress

logger = logging.getLogger(__name__)

CRYPTO_PLACES = Decimal("0.00000001")


def fiat_to_crypto(fiat_amount: Decimal, rate: Decimal) -> Decimal:
    """Crypto needed to cover `fiat_amount` at `rate`, rounded to 8 places."""
    rate = Decimal(rate)
    if not rate.is_finite() or rate <= 0:
        raise PaymentGatewayError(f"Invalid exchange rate: {rate}")
    return (Decimal(fiat_amount) / rate).quantize(CRYPTO_PLACES, rounding=ROUND_HALF_UP)


def _decimal(value, field_name: str) -> Decimal:
    try:
        parsed = Decimal(str(value if value is not None else "0"))
    except InvalidOperation as e:
        raise PaymentGatewayError(f"Unexpected {field_name} from exchange: {value!r}") from e
    if not parsed.is_finite():
        raise PaymentGatewayError(f"Unexpected {field_name} from exchange: {value!r}")
    return parsed


class LunoClient(CryptoExchange):
    """Receive addresses, tickers and address balances from the Luno API."""

    def __init__(self, config: LunoConfig, session: requests.Session = None):
        self.config = config
        self.http = session or requests.Session()

    def _auth(self):
        if not self.config.api_key or not self.config.api_secret:
            raise PaymentGatewayError("LUNO credentials are not configured")
        return (self.config.api_key, self.config.api_secret)

    def _request(self, method: str, path: str, authenticated: bool = True, **kwargs) -> dict:
        url = f"{self.config.api_url.rstrip('/')}{path}"
        if authenticated:
            kwargs["auth"] = self._auth()

        try:
            response = self.http.request(method, url, timeout=self.config.timeout, **kwargs)
        except requests.RequestException as e:
            logger.error(f"Luno request to {path} failed: {e}")
            raise PaymentGatewayError("Crypto exchange is unreachable") from e

        if not response.ok:
            try:
                details = response.json()
            except ValueError:
                details = {"body": response.text}
            logger.error(f"Luno {path} returned {response.status_code}: {details}")
            raise PaymentGatewayError(
                f"Luno request failed: {path}", extra={"details": details}
            )

        return response.json()

    def get_rate(self, asset: str) -> Decimal:
        pair = f"{asset}{self.config.quote_currency}"
        data = self._request("GET", "/ticker", authenticated=False, params={"pair": pair})
        rate = _decimal(data.get("last_trade"), "last_trade")
        logger.info(f"Luno {pair} last trade: {rate}")
        return rate

    def create_receive_address(self, asset: str) -> ReceiveAddress:
        data = self._request("POST", "/funding_address", data={"asset": asset})
        address = ReceiveAddress(
            id=str(data.get("id")),
            address=data.get("address"),
            asset=data.get("asset") or asset,
            total_received=_decimal(data.get("total_received"), "total_received"),
            total_unconfirmed=_decimal(data.get("total_unconfirmed"), "total_unconfirmed"),
        )
        logger.info(f"Created {asset} receive address {address.id}")
        return address

    def get_total_received(self, address_id: str) -> Decimal:
        data = self._request("GET", f"/funding_address/{address_id}")
        return _decimal(data.get("total_received"), "total_received")
