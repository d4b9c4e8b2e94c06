from fastapi import APIRouter, Depends
from sqlmodel import Session

from pantry.database import get_session
from pantry.errors import CheckoutValidationError
from pantry.models.user import User
from pantry.schemas.checkout_schemas import BalanceOrderRequest, ShippingDetails
from pantry.schemas.order_schemas import OrderItemRead, OrderRead, ProductRead
from pantry.services import checkout_service, order_service
from pantry.utils.token import get_current_user

router = APIRouter()


@router.get("")
def get_orders(
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    return [OrderRead.model_validate(o) for o in order_service.list_orders(session, current_user.id)]


@router.get("/{order_id}/items")
def get_order_items(
    order_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    rows = order_service.list_order_items(session, current_user.id, order_id)

    results = []
    for item, product in rows:
        read = OrderItemRead.model_validate(item)
        read.product = ProductRead.model_validate(product)
        results.append(read)
    return results


# Checkout paid from the stored balance
@router.post("", status_code=201)
def create_order(
    data: BalanceOrderRequest,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    if not data.use_balance:
        raise CheckoutValidationError(
            "Orders must be paid by balance, card or crypto"
        )

    result = checkout_service.pay_with_balance(
        session,
        user=current_user,
        items=data.items,
        shipping=ShippingDetails.from_request(data),
    )

    return {
        "message": "Order created successfully",
        "order": OrderRead.model_validate(result.order),
        "newBalance": result.new_balance,
    }
