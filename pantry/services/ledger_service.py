import logging
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import or_, update
from sqlmodel import Session, select

from pantry.config import settings
from pantry.errors import CheckoutValidationError, InsufficientBalanceError, NotFoundError
from pantry.models.transaction import Transaction
from pantry.models.user import User

logger = logging.getLogger(__name__)

DEPOSIT = "deposit"
PAYMENT = "payment"
FUNDING_KEY_PATTERN = "order:%:funding"


def payment_key(order_id: int) -> str:
    return f"order:{order_id}:payment"


def funding_key(order_id: int) -> str:
    return f"order:{order_id}:funding"


def adjust_balance(session: Session, user_id: str, amount: Decimal) -> None:
    # relative update so concurrent writers don't overwrite each other
    result = session.execute(
        update(User)
        .where(User.id == user_id)
        .values(balance=User.balance + amount, updated_at=datetime.utcnow())
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        raise NotFoundError("User not found")


def record_transaction(
    session: Session,
    *,
    user_id: str,
    amount: Decimal,
    type: str,
    description: str,
    order_id: Optional[int] = None,
    idempotency_key: Optional[str] = None,
) -> Transaction:
    """
    Append a ledger entry and move the user's balance by the same amount.

    Does not commit; the caller's unit of work decides.
    """
    amount = Decimal(amount)

    txn = Transaction(
        user_id=user_id,
        amount=amount,
        type=type,
        description=description,
        order_id=order_id,
        idempotency_key=idempotency_key,
    )
    session.add(txn)
    adjust_balance(session, user_id, amount)
    session.flush()

    logger.info(f"Ledger {type} {amount} for user {user_id} (order {order_id})")
    return txn


def debit_balance_if_sufficient(session: Session, user_id: str, amount: Decimal) -> bool:
    """Take `amount` off the balance only if it covers it. Returns False
    when the balance is too low."""
    result = session.execute(
        update(User)
        .where(User.id == user_id, User.balance >= amount)
        .values(balance=User.balance - amount, updated_at=datetime.utcnow())
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


def record_balance_payment(
    session: Session,
    *,
    user_id: str,
    order_id: int,
    amount: Decimal,
) -> Transaction:
    """Pay for an order out of the stored balance. The debit is conditional,
    so two concurrent checkouts cannot take the balance below zero."""
    amount = Decimal(amount)

    if not debit_balance_if_sufficient(session, user_id, amount):
        balance = current_balance(session, user_id)
        raise InsufficientBalanceError(
            "Insufficient balance",
            extra={"balance": balance, "total": amount},
        )

    txn = Transaction(
        user_id=user_id,
        amount=-amount,
        type=PAYMENT,
        description=f"Payment for order #{order_id}",
        order_id=order_id,
        idempotency_key=payment_key(order_id),
    )
    session.add(txn)
    session.flush()

    logger.info(f"Ledger {PAYMENT} {-amount} from balance of user {user_id} (order {order_id})")
    return txn


def current_balance(session: Session, user_id: str) -> Decimal:
    user = session.get(User, user_id, populate_existing=True)
    if not user:
        raise NotFoundError("User not found")
    return Decimal(user.balance)


def deposit(session: Session, user: User, amount: Decimal, method: str = "card") -> Decimal:
    if amount is None or amount <= 0 or amount < settings.min_deposit:
        raise CheckoutValidationError(
            "Invalid amount", extra={"minimum": settings.min_deposit}
        )

    record_transaction(
        session,
        user_id=user.id,
        amount=amount,
        type=DEPOSIT,
        description=f"Funds deposit via {method}",
    )
    session.commit()

    new_balance = current_balance(session, user.id)
    logger.info(f"Deposit of {amount} for user {user.id}, new balance {new_balance}")
    return new_balance


def record_external_payment(
    session: Session,
    *,
    user_id: str,
    order_id: int,
    amount: Decimal,
    rail: str,
    reference: Optional[str] = None,
) -> Transaction:
    """
    Ledger entries for an order paid by card or crypto.

    The captured funds are credited first and the order debited after, so the
    stored balance is unchanged and still equals the sum of the ledger.
    """
    ref = f" ({reference})" if reference else ""
    record_transaction(
        session,
        user_id=user_id,
        amount=amount,
        type=DEPOSIT,
        description=f"{rail} funds received for order #{order_id}{ref}",
        order_id=order_id,
        idempotency_key=funding_key(order_id),
    )
    return record_transaction(
        session,
        user_id=user_id,
        amount=-Decimal(amount),
        type=PAYMENT,
        description=f"{rail} payment for order #{order_id}",
        order_id=order_id,
        idempotency_key=payment_key(order_id),
    )


def list_transactions(session: Session, user_id: str) -> List[Transaction]:
    """A user's history, newest first.

    Funding credits written alongside card and crypto payments are left out,
    the user sees those orders as a single payment.
    """
    return session.exec(
        select(Transaction)
        .where(Transaction.user_id == user_id)
        .where(
            or_(
                Transaction.idempotency_key.is_(None),
                Transaction.idempotency_key.not_like(FUNDING_KEY_PATTERN),
            )
        )
        .order_by(Transaction.created_at.desc(), Transaction.id.desc())
    ).all()
