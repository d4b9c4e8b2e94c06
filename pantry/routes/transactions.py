from fastapi import APIRouter, Depends
from sqlmodel import Session

from pantry.database import get_session
from pantry.models.user import User
from pantry.schemas.order_schemas import TransactionRead
from pantry.schemas.user_schemas import DepositRequest
from pantry.services import ledger_service
from pantry.utils.token import get_current_user

router = APIRouter()


@router.post("/deposit", status_code=201)
def make_deposit(
    data: DepositRequest,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    new_balance = ledger_service.deposit(session, current_user, data.amount, data.method)

    return {
        "message": "Deposit successful",
        "newBalance": new_balance,
    }


@router.get("")
def get_transactions(
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    transactions = ledger_service.list_transactions(session, current_user.id)

    return [TransactionRead.model_validate(t) for t in transactions]
