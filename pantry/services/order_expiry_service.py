import logging
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import update
from sqlmodel import Session, select

from pantry.config import settings
from pantry.constants.order_status import OrderStatus, PaymentStatus
from pantry.models.order import Order

logger = logging.getLogger(__name__)


def expire_stale_crypto_orders(
    session: Session,
    now: Optional[datetime] = None,
    max_age_hours: Optional[int] = None,
) -> int:
    """Move crypto orders that never received funds to `expired`.

    Rows a payment check is holding are skipped, and the update only
    matches orders still in `pending_payment`, so an order confirmed
    after the scan keeps its paid status.
    """
    now = now or datetime.utcnow()
    if max_age_hours is None:
        max_age_hours = settings.crypto_payment_expiry_hours
    cutoff = now - timedelta(hours=max_age_hours)

    stale_ids = session.exec(
        select(Order.id)
        .where(Order.status == OrderStatus.PENDING_PAYMENT)
        .where(Order.created_at < cutoff)
        .with_for_update(skip_locked=True)
    ).all()

    if not stale_ids:
        session.commit()
        logger.info("Expired 0 unpaid crypto orders")
        return 0

    result = session.execute(
        update(Order)
        .where(Order.id.in_(stale_ids))
        .where(Order.status == OrderStatus.PENDING_PAYMENT)
        .values(
            status=OrderStatus.EXPIRED,
            payment_status=PaymentStatus.EXPIRED,
            updated_at=now,
        )
        .execution_options(synchronize_session=False)
    )
    session.commit()

    expired = result.rowcount
    if expired < len(stale_ids):
        logger.info(f"{len(stale_ids) - expired} stale orders were settled before expiry")
    logger.info(f"Expired {expired} unpaid crypto orders")
    return expired
