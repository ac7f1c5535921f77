from typing import List, Union
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Application
    ENVIRONMENT: str = "development"
    NAME: str = "Placement Portal Server"
    VERSION: str = "1.0.0"
    API_PREFIX: str = "/api/v1"
    """Pydantic v2 doesn't support parsing List[str] from a plain comma-separated string by default anymore."""
    ALLOWED_HOSTS: Union[str, List[str]] = "http://localhost:3000,http://localhost:5000"
    LOG_LEVEL: str = "info"
    APP_URL: str = "http://localhost:5000"

    # Database
    DATABASE_URL: str = "sqlite:///./placement_portal.db"

    # Password hashing
    BCRYPT_ROUNDS: int = 12

    # SMTP / Email
    SMTP_HOST: str = "smtp.gmail.com"
    SMTP_PORT: int = 587
    SMTP_USERNAME: str = "<your-smtp-username>"
    SMTP_PASSWORD: str = "<your-smtp-password>"
    SMTP_USE_TLS: bool = True
    SMTP_TIMEOUT: int = 30
    EMAIL_FROM_NAME: str = "Placement Portal"
    EMAIL_FROM_ADDRESS: str = "<your-sender-address>"
    VERIFY_EMAIL_ON_STARTUP: bool = True

    # Password reset
    PASSWORD_RESET_OTP_EXPIRY_MINUTES: int = 5

    # Redis & Celery
    REDIS_PASSWORD: str = "<your-redis-password>"
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_DB: int = 0

    # Scheduled credential distribution
    ENABLE_AUTO_CREDENTIAL_DISTRIBUTION: bool = False
    CREDENTIAL_DISTRIBUTION_HOUR: int = 9
    CREDENTIAL_DISTRIBUTION_MINUTE: int = 0
    CREDENTIAL_BATCH_LIMIT: int = 100

    @field_validator("ALLOWED_HOSTS", mode="before")
    def assemble_cors_origins(cls, v: Union[str, List[str]]) -> Union[List[str], str]:
        if not v:
            return []
        if isinstance(v, str) and not v.startswith("["):
            return [i.strip() for i in v.split(",")]
        return v

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )


settings = Settings()
