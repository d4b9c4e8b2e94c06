from decimal import Decimal
from typing import List, Optional
from urllib.parse import quote_plus

from pydantic import BaseModel
from pydantic_settings import BaseSettings


class YocoConfig(BaseModel):
    secret_key: Optional[str] = None
    api_url: str = "https://online.yoco.com/v1"
    currency: str = "ZAR"
    timeout: float = 30


class LunoConfig(BaseModel):
    api_key: Optional[str] = None
    api_secret: Optional[str] = None
    api_url: str = "https://api.luno.com/api/1"
    quote_currency: str = "ZAR"
    timeout: float = 30


class Settings(BaseSettings):
    env: str = "local"
    log_level: str = "INFO"

    postgres_user: str = "pantry"
    postgres_password: str = "pantry"
    postgres_db: str = "pantry"
    postgres_host: str = "localhost"
    postgres_port: str = "5432"

    # full SQLAlchemy URL, wins over the postgres_* parts when set
    database_dsn: Optional[str] = None

    secret_key: str = "change-me"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24

    yoco_secret_key: Optional[str] = None
    yoco_api_url: str = "https://online.yoco.com/v1"

    luno_api_key: Optional[str] = None
    luno_api_secret: Optional[str] = None
    luno_api_url: str = "https://api.luno.com/api/1"

    currency: str = "ZAR"
    shipping_fee: Decimal = Decimal("50")
    min_deposit: Decimal = Decimal("50")
    demo_starting_balance: Decimal = Decimal("100")
    crypto_payment_expiry_hours: int = 24
    gateway_timeout_seconds: float = 30

    cors_origins: List[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
        "http://127.0.0.1:5173",
    ]

    @property
    def database_url(self):
        if self.database_dsn:
            return self.database_dsn
        encoded_password = quote_plus(self.postgres_password)
        return (
            f"postgresql+psycopg2://{self.postgres_user}:"
            f"{encoded_password}@{self.postgres_host}:"
            f"{self.postgres_port}/{self.postgres_db}"
        )

    def yoco_config(self) -> YocoConfig:
        return YocoConfig(
            secret_key=self.yoco_secret_key,
            api_url=self.yoco_api_url,
            currency=self.currency,
            timeout=self.gateway_timeout_seconds,
        )

    def luno_config(self) -> LunoConfig:
        return LunoConfig(
            api_key=self.luno_api_key,
            api_secret=self.luno_api_secret,
            api_url=self.luno_api_url,
            quote_currency=self.currency,
            timeout=self.gateway_timeout_seconds,
        )

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "allow"

settings = Settings()
