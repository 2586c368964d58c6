"""Runtime configuration loaded from the environment."""

import os
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv

load_dotenv()


def _to_bool(value: str, *, default: bool = False) -> bool:
    lowered = value.strip().lower()
    if not lowered:
        return default
    return lowered in {"true", "1", "yes", "y", "on"}


class Settings:
    PROJECT_NAME: str = os.getenv("PROJECT_NAME", "Lydian Travel API")
    API_PREFIX: str = os.getenv("API_PREFIX", "/api/lydian/v1")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    HOST: str = os.getenv("HOST", "127.0.0.1")
    PORT: int = int(os.getenv("PORT", "8000"))
    SITE_URL: str = os.getenv("SITE_URL", "https://travel.lydian.com")

    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./lydian_travel.db")
    AUTO_CREATE_TABLES: bool = _to_bool(os.getenv("AUTO_CREATE_TABLES", "true"), default=True)

    SECRET_KEY: str = os.getenv("SECRET_KEY", "change_me")
    ALGORITHM: str = os.getenv("ALGORITHM", "HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))
    REFRESH_TOKEN_EXPIRE_DAYS: int = int(os.getenv("REFRESH_TOKEN_EXPIRE_DAYS", "7"))
    REMEMBER_ME_REFRESH_DAYS: int = int(os.getenv("REMEMBER_ME_REFRESH_DAYS", "30"))
    PASSWORD_RESET_EXPIRE_MINUTES: int = int(os.getenv("PASSWORD_RESET_EXPIRE_MINUTES", "60"))
    EMAIL_VERIFICATION_EXPIRE_HOURS: int = int(os.getenv("EMAIL_VERIFICATION_EXPIRE_HOURS", "24"))

    SMTP_HOST: str = os.getenv("SMTP_HOST", "")
    SMTP_PORT: int = int(os.getenv("SMTP_PORT", "587"))
    SMTP_USERNAME: Optional[str] = os.getenv("SMTP_USERNAME")
    SMTP_PASSWORD: Optional[str] = os.getenv("SMTP_PASSWORD")
    SMTP_FROM_EMAIL: str = os.getenv("SMTP_FROM_EMAIL", "")
    SMTP_FROM_NAME: str = os.getenv("SMTP_FROM_NAME", "Travel LyDian")
    SMTP_USE_TLS: bool = _to_bool(os.getenv("SMTP_USE_TLS", "true"), default=True)
    SMTP_USE_SSL: bool = _to_bool(os.getenv("SMTP_USE_SSL", "false"), default=False)
    SMTP_TIMEOUT: float = float(os.getenv("SMTP_TIMEOUT", "10"))
    EMAIL_NOTIFICATIONS_ENABLED: bool = _to_bool(
        os.getenv("EMAIL_NOTIFICATIONS_ENABLED", "true"), default=True
    )

    # str.format placeholders: {reference}, {booking_id}
    BOOKING_PASS_URL_TEMPLATE: str = os.getenv("BOOKING_PASS_URL_TEMPLATE", "")

    AMADEUS_CLIENT_ID: str = os.getenv("AMADEUS_CLIENT_ID", "")
    AMADEUS_CLIENT_SECRET: str = os.getenv("AMADEUS_CLIENT_SECRET", "")
    AMADEUS_BASE_URL: str = os.getenv("AMADEUS_BASE_URL", "https://test.api.amadeus.com")
    AMADEUS_TIMEOUT: float = float(os.getenv("AMADEUS_TIMEOUT", "10"))
    AMADEUS_RATE_LIMIT_MS: int = int(os.getenv("AMADEUS_RATE_LIMIT_MS", "200"))
    API_CACHE_DURATION_MINUTES: int = int(os.getenv("API_CACHE_DURATION_MINUTES", "15"))

    DEFAULT_CURRENCY: str = os.getenv("DEFAULT_CURRENCY", "TRY")
    BOOKING_TAX_RATE: float = float(os.getenv("BOOKING_TAX_RATE", "0.08"))
    BOOKING_SERVICE_FEE_RATE: float = float(os.getenv("BOOKING_SERVICE_FEE_RATE", "0.05"))
    FREE_CANCELLATION_HOURS: int = int(os.getenv("FREE_CANCELLATION_HOURS", "24"))
    PARTIAL_REFUND_HOURS: int = int(os.getenv("PARTIAL_REFUND_HOURS", "12"))
    PARTIAL_REFUND_PERCENTAGE: int = int(os.getenv("PARTIAL_REFUND_PERCENTAGE", "50"))

    SEED_ADMIN_EMAIL: str = os.getenv("SEED_ADMIN_EMAIL", "admin@lydian.travel")
    SEED_ADMIN_PASSWORD: str = os.getenv("SEED_ADMIN_PASSWORD", "ChangeMe123")


@lru_cache()
def get_settings() -> Settings:
    return Settings()


settings = get_settings()

__all__ = ["settings", "get_settings", "Settings"]
