# roombook/core/config.py
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Database is a hard dependency, no default
    DATABASE_URL: str

    JWT_SECRET: str = "change-me"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # EmailJS relay; leaving these empty runs the mailer in simulation mode
    EMAILJS_API_URL: str = "https://api.emailjs.com/api/v1.0/email/send"
    EMAILJS_PUBLIC_KEY: Optional[str] = None
    EMAILJS_PRIVATE_KEY: Optional[str] = None
    EMAILJS_SERVICE_ID: Optional[str] = None
    EMAILJS_VERIFICATION_TEMPLATE_ID: Optional[str] = None
    EMAILJS_CONFIRMATION_TEMPLATE_ID: Optional[str] = None
    EMAIL_TIMEOUT_SECONDS: float = 10.0

    BOOKING_TIMEZONE: str = "America/New_York"
    VERIFICATION_CODE_TTL_MINUTES: int = 15
    # True reproduces the legacy test where touching bookings conflict
    CONFLICT_INCLUSIVE_BOUNDARIES: bool = False

    REDIS_URL: Optional[str] = None
    CACHE_TTL_SECONDS: int = 60

    LOG_DIR: str = "logs"


@lru_cache
def get_settings() -> Settings:
    return Settings()
