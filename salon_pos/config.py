from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    APP_NAME: str = "Salon POS"
    DATABASE_URL: str = "sqlite:///./salon.db"

    # Auth
    SECRET_KEY: str = "change-me"
    ACCESS_TOKEN_EXPIRE_HOURS: int = 24

    # Seeded on first start when the users table is empty
    DEFAULT_ADMIN_USERNAME: str = "admin"
    DEFAULT_ADMIN_PASSWORD: str = "admin123"
    DEFAULT_SELLER_USERNAME: str = "seller"
    DEFAULT_SELLER_PASSWORD: str = "seller123"

    # Products expiring within this many days are flagged
    EXPIRY_WARNING_DAYS: int = 120
    LOW_STOCK_DEFAULT_THRESHOLD: int = 5

    # Optimistic concurrency retries for stock mutations
    CONFLICT_RETRY_ATTEMPTS: int = 3
    CONFLICT_RETRY_BACKOFF: float = 0.05

    LOG_LEVEL: str = "INFO"

    model_config = {"env_file": ".env"}


settings = Settings()
