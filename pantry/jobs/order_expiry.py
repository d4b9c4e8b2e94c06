import logging

from sqlmodel import Session

from pantry.config import settings
from pantry.database import engine
from pantry.services.order_expiry_service import expire_stale_crypto_orders


def run():
    with Session(engine) as session:
        return expire_stale_crypto_orders(session)


if __name__ == "__main__":
    logging.basicConfig(level=settings.log_level)
    run()
