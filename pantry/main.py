import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlmodel import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

from pantry.config import settings
from pantry.database import create_db_and_tables, engine
from pantry.errors import PantryError
from pantry.routes import (
    auth,
    checkout,
    health,
    orders,
    payments,
    products,
    transactions,
    users,
)
from pantry.services.catalog_service import seed_products

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Run DB creation ONLY in local, elsewhere alembic owns the schema
    if settings.env == "local":
        create_db_and_tables()
    with Session(engine) as session:
        seed_products(session)
    yield

app = FastAPI(title="Pete's Pantry API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(PantryError)
async def pantry_error_handler(request: Request, exc: PantryError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(exc.to_dict()))


# Auth failures raised as HTTPException get the same body shape
@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content={"message": "Internal server error"})


app.include_router(auth.router, prefix="/auth", tags=["Authentication"])
app.include_router(users.router, prefix="/profile", tags=["Profile"])
app.include_router(products.router, prefix="/products", tags=["Products"])
app.include_router(checkout.router, prefix="/checkout", tags=["Checkout"])
app.include_router(payments.router, prefix="/payment", tags=["Payments"])
app.include_router(orders.router, prefix="/orders", tags=["Orders"])
app.include_router(transactions.router, prefix="/transactions", tags=["Transactions"])
app.include_router(health.router, prefix="/health", tags=["Health"])


@app.get("/")
def root():
    return {
        "catalog_endpoints": ["/products", "/products/{product_id}"],
        "auth_endpoints": ["/auth/user", "/auth/simple-login", "/profile"],
        "checkout_endpoints": [
            "/checkout/summary", "/payment/card",
            "/payment/crypto/init", "/payment/crypto/verify", "/orders",
        ],
        "ledger_endpoints": ["/transactions", "/transactions/deposit"],
    }
