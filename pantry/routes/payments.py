from fastapi import APIRouter, Depends
from sqlmodel import Session

from pantry.config import settings
from pantry.database import get_session
from pantry.dependencies.gateways import get_card_gateway, get_crypto_exchange
from pantry.models.user import User
from pantry.schemas.checkout_schemas import (
    CardPaymentRequest,
    CryptoInitRequest,
    CryptoVerifyRequest,
    ShippingDetails,
)
from pantry.schemas.order_schemas import OrderRead
from pantry.services import checkout_service
from pantry.services.gateway_port import CardGateway, CryptoExchange
from pantry.utils.token import get_current_user

router = APIRouter()


@router.post("/card", status_code=201)
def pay_by_card(
    data: CardPaymentRequest,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
    gateway: CardGateway = Depends(get_card_gateway),
):
    result = checkout_service.pay_with_card(
        session,
        user=current_user,
        token=data.token,
        items=data.items,
        shipping=ShippingDetails.from_request(data),
        gateway=gateway,
        currency=settings.currency,
    )

    return {
        "success": True,
        "order": OrderRead.model_validate(result.order),
        "paymentId": result.payment_id,
        "amountCharged": result.amount_charged,
    }


@router.post("/crypto/init", status_code=201)
def init_crypto(
    data: CryptoInitRequest,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
    exchange: CryptoExchange = Depends(get_crypto_exchange),
):
    result = checkout_service.init_crypto_payment(
        session,
        user=current_user,
        asset=data.asset,
        items=data.items,
        shipping=ShippingDetails.from_request(data),
        exchange=exchange,
    )

    return {
        "success": True,
        "order": OrderRead.model_validate(result.order),
        "cryptoAddress": result.crypto_address,
        "cryptoAmount": result.crypto_amount,
        "asset": result.asset,
        "addressId": result.address_id,
        "verifiedTotal": result.verified_total,
    }


# Polled by the client until the funds show up
@router.post("/crypto/verify")
def verify_crypto(
    data: CryptoVerifyRequest,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
    exchange: CryptoExchange = Depends(get_crypto_exchange),
):
    result = checkout_service.verify_crypto_payment(
        session,
        user=current_user,
        order_id=data.order_id,
        exchange=exchange,
        address_id=data.address_id,
        expected_amount=data.expected_amount,
    )

    return {
        "success": result.success,
        "message": result.message,
    }
