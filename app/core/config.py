"""
Application configuration.
Values come from environment variables, with a .env file as the
local-development fallback.
"""
import logging
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    APP_ENV: str = "development"
    LOG_LEVEL: str = "INFO"
    DATABASE_URL: str

    # Twilio
    TWILIO_ACCOUNT_SID: str = ""
    TWILIO_AUTH_TOKEN: str = ""
    TWILIO_VALIDATE_SIGNATURES: bool = False

    # Exact public URL Twilio uses to reach us, e.g. https://calls.example.com
    PUBLIC_BASE_URL: str = ""

    class Config:
        env_file = ".env"


settings = Settings()

# Signature checks are meaningless without the token Twilio signs with
if settings.TWILIO_VALIDATE_SIGNATURES and not settings.TWILIO_AUTH_TOKEN:
    raise ValueError(
        "TWILIO_VALIDATE_SIGNATURES is enabled but TWILIO_AUTH_TOKEN is not set. "
        "Set the auth token from the Twilio console or disable signature validation."
    )

if settings.TWILIO_VALIDATE_SIGNATURES and not settings.PUBLIC_BASE_URL:
    logger.warning(
        "TWILIO_VALIDATE_SIGNATURES is enabled without PUBLIC_BASE_URL; "
        "every webhook request will be rejected."
    )
