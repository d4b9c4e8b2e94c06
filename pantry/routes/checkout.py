from fastapi import APIRouter, Depends
from sqlmodel import Session

from pantry.database import get_session
from pantry.schemas.checkout_schemas import CartSummary, CartSummaryRequest, SummaryLine
from pantry.services.pricing_service import verify_cart

router = APIRouter()


# Quote shown on the checkout page, nothing is written
@router.post("/summary")
def checkout_summary(data: CartSummaryRequest, session: Session = Depends(get_session)):
    cart = verify_cart(session, data.items)

    return CartSummary(
        items=[
            SummaryLine(
                id=line.product.id,
                name=line.product.name,
                quantity=line.quantity,
                price=line.unit_price,
                line_total=line.line_total,
            )
            for line in cart.lines
        ],
        subtotal=cart.subtotal,
        shipping=cart.shipping,
        total=cart.total,
    )
