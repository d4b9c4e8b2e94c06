from typing import Any, Dict, Optional


class PantryError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code = 500

    def __init__(self, message: str, extra: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.extra = extra or {}

    def to_dict(self) -> Dict[str, Any]:
        return {"message": self.message, **self.extra}


class CheckoutValidationError(PantryError):
    status_code = 400


class PaymentDeclinedError(PantryError):
    status_code = 400


class InsufficientBalanceError(PantryError):
    status_code = 400


class NotFoundError(PantryError):
    status_code = 404


class InvalidOrderTransition(PantryError):
    status_code = 409


class PaymentGatewayError(PantryError):
    """The card gateway or crypto exchange could not be reached, rejected the
    request, or is not configured."""

    status_code = 502
