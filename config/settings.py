"""
Centralized configuration for Signal Radar.

All settings are loaded from environment variables via .env file.
"""

from functools import lru_cache
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

from signal_scoring.signal_classifier import ClassifyOptions

load_dotenv()


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Classifier defaults
    min_text_length: int = Field(default=10)
    min_score_threshold: int = Field(default=30)
    min_matches: int = Field(default=1)
    context_window: int = Field(default=100)
    case_sensitive: bool = Field(default=False)
    word_boundary: bool = Field(default=True)

    # Lexicons
    default_lexicon: str = Field(default="defection")  # defection | buying_intent
    lexicon_file: Optional[str] = Field(default=None)  # JSON lexicon document overriding the default

    # Batch processing
    batch_max_workers: int = Field(default=4)

    # Alerts
    high_intent_score: int = Field(default=80)
    alert_min_score: int = Field(default=0)
    alert_webhook_url: Optional[str] = Field(default=None)
    alert_webhook_api_key: Optional[str] = Field(default=None)
    alert_webhook_timeout: float = Field(default=10.0)

    # Database
    database_url: Optional[str] = Field(default=None)

    # API
    api_host: str = Field(default="0.0.0.0")
    api_port: int = Field(default=8000)
    api_title: str = Field(default="Signal Radar API")
    api_version: str = Field(default="1.0.0")
    cors_origins: str = Field(default="*")

    # Logging
    log_level: str = Field(default="INFO")

    @property
    def cors_origins_list(self) -> List[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    def classify_options(self) -> ClassifyOptions:
        """Default classifier options from settings."""
        return ClassifyOptions(
            case_sensitive=self.case_sensitive,
            min_matches=self.min_matches,
            min_score_threshold=self.min_score_threshold,
            context_window=self.context_window,
            min_text_length=self.min_text_length,
            word_boundary=self.word_boundary,
        )


@lru_cache()
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
