from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    # Stores
    IDENTITY_DATABASE_URL: str = "sqlite:///./identity.db"
    CATALOG_DATABASE_URL: str = "sqlite:///./catalog.db"

    # Security / JWT
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    REFRESH_TOKEN_EXPIRE_DAYS: int = 7

    # Logging
    LOG_LEVEL: str = "INFO"

    # Pricing
    DEFAULT_CURRENCY: str = "USD"
    SLOW_PRICING_MS: float = 30.0

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


settings = Settings()
