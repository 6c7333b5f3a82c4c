from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    PROJECT_NAME: str = "StreamHub Backend API"
    VERSION: str = "1.0.0"
    API_V1_STR: str = "/api/v1"
    LOG_LEVEL: str = "INFO"

    # Database
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    POSTGRES_DB: str = "streamhub"
    DATABASE_URL: Optional[str] = None
    SQL_ECHO: bool = False

    @property
    def async_database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"

    BACKEND_CORS_ORIGINS: List[str] = ["http://localhost:3000"]

    # Rate limiting (requests per minute per client IP, 0 disables)
    RATE_LIMIT_PER_MINUTE: int = 100
    RATE_LIMIT_WRITES_PER_MINUTE: int = 30

    # Catalog
    DEFAULT_PAGE_SIZE: int = 10

    # Subscription expiry sweep, 0 disables the periodic job
    SUBSCRIPTION_SWEEP_INTERVAL_SECONDS: int = 3600

settings = Settings()
