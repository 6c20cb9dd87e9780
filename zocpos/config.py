from decimal import Decimal
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    APP_ENV: str = "dev"
    DB_URL: str
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20
    DB_ECHO: bool = False
    TZ: str = "UTC"
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: list[str] = ["*"]

    # billing
    TAX_RATE: Decimal = Decimal("0.08")
    ORDER_NUMBER_PREFIX: str = "ORD"
    RESTAURANT_NAME: str = "ZOC-CAFE"

    # listing / reporting
    DEFAULT_PAGE_SIZE: int = 20
    MAX_PAGE_SIZE: int = 100
    ANALYTICS_DEFAULT_DAYS: int = 30
    TOP_ITEMS_LIMIT: int = 10

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

def get_settings() -> Settings:
    return Settings()
