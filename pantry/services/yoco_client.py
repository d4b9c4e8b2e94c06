import logging

import requests

from pantry.config import YocoConfig
from pantry.errors import PaymentGatewayError
from pantry.services.gateway_port import CardCharge, CardGateway

logger = logging.getLogger(__name__)


class YocoClient(CardGateway):
    """Card charges through the Yoco online API."""

    def __init__(self, config: YocoConfig, session: requests.Session = None):
        self.config = config
        self.http = session or requests.Session()

    def _headers(self):
        if not self.config.secret_key:
            raise PaymentGatewayError("YOCO secret key is not configured")
        return {"Authorization": f"Bearer {self.config.secret_key}"}

    def _request(self, method: str, path: str, **kwargs) -> dict:
        url = f"{self.config.api_url.rstrip('/')}{path}"
        headers = self._headers()

        try:
            response = self.http.request(
                method, url, headers=headers, timeout=self.config.timeout, **kwargs
            )
        except requests.RequestException as e:
            logger.error(f"Yoco request to {path} failed: {e}")
            raise PaymentGatewayError("Card gateway is unreachable") from e

        if not response.ok:
            try:
                details = response.json()
            except ValueError:
                details = {"body": response.text}
            logger.error(f"Yoco {path} returned {response.status_code}: {details}")
            raise PaymentGatewayError(
                "Yoco payment failed", extra={"details": details}
            )

        return response.json()

    @staticmethod
    def _to_charge(data: dict) -> CardCharge:
        return CardCharge(
            id=data.get("id"),
            status=data.get("status"),
            amount_in_cents=data.get("amount") or data.get("amountInCents") or 0,
            currency=data.get("currency"),
            created_date=data.get("createdDate"),
            raw=data,
        )

    def charge(self, token: str, amount_in_cents: int, currency: str = None) -> CardCharge:
        currency = currency or self.config.currency
        logger.info(f"Charging card: {amount_in_cents} cents {currency}")

        data = self._request(
            "POST",
            "/charges/",
            json={
                "token": token,
                "amountInCents": amount_in_cents,
                "currency": currency,
            },
        )
        charge = self._to_charge(data)
        logger.info(f"Yoco charge {charge.id} status: {charge.status}")
        return charge
