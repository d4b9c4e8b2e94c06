import logging
from decimal import Decimal

from sqlalchemy import func
from sqlmodel import Session, select

from pantry.models.product import Product

logger = logging.getLogger(__name__)

SEED_PRODUCTS = [
    {
        "name": "Mild Pineapple & Habanero Marmalade",
        "description": "A delicate balance of sweet pineapple and subtle heat, perfect for cheese boards or breakfast toast.",
        "price": Decimal("60"),
        "image_url": "/images/mild-pineapple-habanero.jpg",
        "heat_level": 1,
        "stock": 100,
    },
    {
        "name": "Xtra Hot Pineapple & Habanero Marmalade",
        "description": "Bold flavors of sweet pineapple with an intense habanero kick, perfect for adventurous food lovers.",
        "price": Decimal("60"),
        "image_url": "/images/xtra-hot-pineapple-habanero.jpg",
        "heat_level": 3,
        "stock": 100,
    },
]


def seed_products(session: Session) -> int:
    """Insert the house range into an empty catalog."""
    count = session.exec(select(func.count()).select_from(Product)).one()
    if count:
        return 0

    for data in SEED_PRODUCTS:
        session.add(Product(**data))
    session.commit()

    logger.info(f"Seeded {len(SEED_PRODUCTS)} products")
    return len(SEED_PRODUCTS)


def list_products(session: Session):
    return session.exec(select(Product).order_by(Product.id)).all()
