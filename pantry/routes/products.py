from fastapi import APIRouter, Depends
from sqlmodel import Session
from pantry.database import get_session
from pantry.errors import CheckoutValidationError, NotFoundError
from pantry.models.product import Product
from pantry.schemas.order_schemas import ProductRead
from pantry.services.catalog_service import list_products

router = APIRouter()


@router.get("")
def get_products(session: Session = Depends(get_session)):
    return [ProductRead.model_validate(p) for p in list_products(session)]


@router.get("/{product_id}")
def get_product(product_id: str, session: Session = Depends(get_session)):
    try:
        pid = int(product_id)
    except ValueError:
        raise CheckoutValidationError("Invalid product ID")

    product = session.get(Product, pid)
    if not product:
        raise NotFoundError("Product not found")

    return ProductRead.model_validate(product)
