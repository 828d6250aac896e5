"""Configuration settings for the application."""
import os
from functools import lru_cache
from pathlib import Path
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parent
ROOT_DIR = BASE_DIR.parent.parent

DEFAULT_CORS_ORIGINS = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=str((ROOT_DIR / ".env").resolve()),
        case_sensitive=False,
        extra="ignore",
    )

    # Gemini AI configuration
    gemini_api_key: str = os.getenv("GEMINI_API_KEY", "")
    gemini_model: str = "gemini-2.0-flash"
    gemini_temperature: float = 0.2
    gemini_top_p: float = 0.9
    gemini_top_k: int = 40
    gemini_max_output_tokens: int = 2000
    gemini_request_timeout: float = Field(
        default=120.0,
        gt=0,
        description="Seconds allowed for a single generateContent call"
    )

    # Gemini retry configuration (fixed delay between attempts)
    gemini_max_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Maximum attempts for a generation call when Gemini is overloaded"
    )
    gemini_retry_delay: float = Field(
        default=3.0,
        ge=0,
        le=60,
        description="Seconds to wait between attempts after a 503 from Gemini"
    )

    # Report configuration
    report_format: str = Field(
        default="portfolio-8",
        description="Section layout requested from the model (portfolio-7 or portfolio-8)"
    )
    reports_dir: str = os.getenv("REPORTS_DIR", "./reports")
    pdf_margin: float = 50.0

    # CORS configuration
    cors_origins: List[str] = Field(default_factory=lambda: DEFAULT_CORS_ORIGINS.copy())
    cors_allow_all: bool = Field(default=False)

    # API configuration
    api_version: str = "v1"
    debug: bool = os.getenv("DEBUG", "False").lower() == "true"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
