from typing import Literal

from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    DB_URL: str = "sqlite+aiosqlite:///./billing.db"
    STORE_BACKEND: Literal["sql", "memory"] = "sql"

    # "exclusive": unit price is pre-tax, "inclusive": unit price already carries GST
    PRICE_CONVENTION: Literal["exclusive", "inclusive"] = "exclusive"
    NUMBERING_STRATEGY: Literal["counter", "scan"] = "counter"
    INVOICE_PREFIX: str = "INV"
    ALLOCATOR_TIMEOUT_SECONDS: float = 5.0

    LOW_STOCK_THRESHOLD: int = 10
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"

settings = Settings()
