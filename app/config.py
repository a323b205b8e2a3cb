"""Runtime settings, read from environment variables (and an optional .env)."""

import os
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

load_dotenv()

PRODUCTION_API_BASE_URL = "https://marathon-16-website.vercel.app"
DEVELOPMENT_API_BASE_URL = "http://localhost:3000"
DEFAULT_BACKGROUND_URL = "https://i.imgur.com/T7AMnkD.png"


def _default_lookup_base_url() -> str:
    override = (os.getenv("LOOKUP_API_BASE_URL") or "").strip()
    if override:
        return override.rstrip("/")
    if (os.getenv("APP_ENV") or "").strip().lower() == "production":
        return PRODUCTION_API_BASE_URL
    return DEVELOPMENT_API_BASE_URL


def _optional_env(name: str) -> Optional[str]:
    value = (os.getenv(name) or "").strip()
    return value or None


class Settings(BaseModel):
    APP_ENV: str = Field(default_factory=lambda: os.getenv("APP_ENV", "development"))

    # Participant lookup service
    LOOKUP_API_BASE_URL: str = Field(default_factory=_default_lookup_base_url)
    LOOKUP_USER_PATH: str = Field(default_factory=lambda: os.getenv("LOOKUP_USER_PATH", "/api/user/{code}"))
    HTTP_TIMEOUT_SECONDS: float = Field(default_factory=lambda: float(os.getenv("HTTP_TIMEOUT_SECONDS", "10")))

    # Certificate assets
    CERT_BACKGROUND_URL: str = Field(default_factory=lambda: os.getenv("CERT_BACKGROUND_URL", DEFAULT_BACKGROUND_URL))
    CERT_FONT_PATH: Optional[str] = Field(default_factory=lambda: _optional_env("CERT_FONT_PATH"))

    CORS_ALLOW_ORIGINS: str = Field(default_factory=lambda: os.getenv("CORS_ALLOW_ORIGINS", "*"))
    LOG_LEVEL: str = Field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))

    @property
    def allow_origins(self) -> List[str]:
        origins = [o.strip() for o in self.CORS_ALLOW_ORIGINS.split(",") if o.strip()]
        return origins or ["*"]


def get_settings() -> Settings:
    return Settings()
