# Path: src/shared/config/settings.py
from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent.parent
    ENVIRONMENT: str = "development"
    APP_TITLE: str = "Vehicle Registry API"
    APP_VERSION: str = "1.0.0"
    AUTH_TAG: str = "Authentication"
    REGISTRATION_TAG: str = "Registrations"
    ADMIN_TAG: str = "Administration"

    # Localization
    DEFAULT_LANGUAGE: str = "en"
    SUPPORTED_LANGUAGES: str = "en,ar"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_TO_FILE: bool = True
    LOG_FILE_PATH: str = "logs/app.log"

    # Redis
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_DB: int = 0
    REDIS_PASSWORD: Optional[str] = None
    REDIS_USE_SSL: bool = False
    REDIS_SSL_CA_CERTS: Optional[str] = None
    REDIS_SSL_CERT: Optional[str] = None
    REDIS_SSL_KEY: Optional[str] = None

    # MongoDB
    MONGO_URI: str = "mongodb://localhost:27017"
    MONGO_DB: str = "vehicle_registry"
    MONGO_TIMEOUT: int = 20000

    # Server-side sessions
    SESSION_IDLE_TIMEOUT: int = 1200
    SESSION_KEY_PREFIX: str = "session"

    # OTP policy
    OTP_TTL_SECONDS: int = 300
    OTP_MAX_ISSUANCES: int = 20
    OTP_COOLDOWN_SECONDS: int = 5
    OTP_DEV_FALLBACK_ENABLED: bool = False
    OTP_DEV_FALLBACK_CODE: str = "123456"
    PHONE_COUNTRY_PREFIX: str = "974"
    PHONE_CORE_LENGTH: int = 8
    AUDIT_USER_AGENT_MAX_LENGTH: int = 256

    # Verification provider: "twilio" or "console"
    VERIFICATION_PROVIDER: str = "console"
    TWILIO_ACCOUNT_SID: str = ""
    TWILIO_AUTH_TOKEN: str = ""
    TWILIO_VERIFY_SERVICE_SID: str = ""
    TWILIO_VERIFY_BASE_URL: str = "https://verify.twilio.com/v2"
    TWILIO_CHANNEL: str = "sms"
    TWILIO_TIMEOUT_SECONDS: float = 10.0

    # JWT
    ACCESS_SECRET: str = "change-me-access-secret"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    TOKEN_AUDIENCE: str = "api"
    TOKEN_ISSUER: str = "vehicle-registry"

    # Registration review
    REFERENCE_TOKEN_PREFIX: str = "REF"
    REFERENCE_SEQUENCE_NAME: str = "registration_reference"
    REVIEW_WRITE_ATTEMPTS: int = 3
    UNIQUE_TOKEN_LENGTH: int = 12
    REGISTRATION_PAGE_SIZE: int = 25

    # Seed SuperAdmin
    SUPERADMIN_PHONE: Optional[str] = None
    SUPERADMIN_NAME: str = "Super Admin"
    SUPERADMIN_USERNAME: str = "superadmin"

    # Sentry
    SENTRY_DSN: Optional[str] = None
    SENTRY_TRACES_SAMPLE_RATE: float = 0.0
    SENTRY_SEND_PII: bool = False

    # CORS
    CORS_ORIGINS: str = "*"


settings = Settings()
