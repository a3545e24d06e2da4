from typing import List

from pydantic_settings import BaseSettings
from sqlalchemy.engine import URL


class Settings(BaseSettings):
    PROJECT_NAME: str = "VIP Ride Istanbul Airport"
    API_PREFIX: str = "/api"

    # Server
    PORT: int = 3000
    ENVIRONMENT: str = "development"
    CORS_ORIGINS: List[str] = ["*"]

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_ERROR_FILE: str = "logs/errors.log"
    LOG_ERROR_RETENTION: str = "1 month"

    # Database (MySQL). DATABASE_URL overrides the individual parts.
    DATABASE_URL: str = ""
    DB_HOST: str = "localhost"
    DB_PORT: int = 3306
    DB_USER: str = ""
    DB_PASSWORD: str = ""
    DB_NAME: str = ""

    # Pool
    DB_POOL_SIZE: int = 10
    DB_POOL_TIMEOUT: int = 30
    DB_CONNECT_TIMEOUT: int = 30
    DB_KEEPALIVE_INITIAL_DELAY: int = 10
    DB_HEALTH_CHECK_INTERVAL: int = 30

    # iyzico
    IYZI_API_KEY: str = ""
    IYZI_SECRET_KEY: str = ""
    IYZI_BASE_URL: str = "https://sandbox-api.iyzipay.com"

    # Email
    EMAIL_ENABLED: bool = True
    EMAIL_HOST: str = "smtp.hostinger.com"
    EMAIL_PORT: int = 465
    EMAIL_USER: str = ""
    EMAIL_PASSWORD: str = ""

    # A failed reservation write must not fail a paid booking
    BOOKING_SWALLOW_PERSISTENCE_ERRORS: bool = True

    class Config:
        env_file = ".env"
        case_sensitive = True

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return URL.create(
            "mysql+aiomysql",
            username=self.DB_USER,
            password=self.DB_PASSWORD,
            host=self.DB_HOST,
            port=self.DB_PORT,
            database=self.DB_NAME,
        ).render_as_string(hide_password=False)


settings = Settings()
