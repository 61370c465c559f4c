"""Application Settings - Pydantic Settings for environment configuration."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_SLOTS = ["9:00 AM", "10:30 AM", "1:00 PM", "3:30 PM", "5:00 PM"]


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings are loaded from .env file or environment variables.
    List values (keywords, slots) are given as JSON arrays.
    """

    # Booking
    greeting_keywords: list[str] = Field(default_factory=lambda: ["hola"], min_length=1)
    greeting_case_sensitive: bool = False
    booking_days_ahead: int = Field(default=5, ge=1)
    booking_slots: list[str] = Field(default_factory=lambda: list(DEFAULT_SLOTS))
    booking_timezone: str = "America/Mexico_City"

    # Reservation storage
    reservation_backend: Literal["supabase", "redis", "memory"] = "supabase"
    reservations_table: str = "appointments"

    # Database (Supabase)
    supabase_url: str = ""
    supabase_key: str = ""
    supabase_service_key: str = ""

    # Redis (sessions, idempotency, redis reservation backend)
    redis_url: str = "redis://localhost:6379"
    conversation_ttl_seconds: int = 3600
    idempotency_ttl_seconds: int = 86400

    # Evolution API (WhatsApp)
    evolution_api_url: str = "http://localhost:8080"
    evolution_api_key: str = ""
    evolution_instance_name: str = "default"

    # Observability
    otlp_endpoint: str = "http://localhost:4318/v1/traces"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    enable_tracing: bool = True

    # Application
    app_env: Literal["development", "staging", "production"] = "development"
    api_port: int = 8000
    api_host: str = "0.0.0.0"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.app_env == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.app_env == "development"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Settings are loaded once per process.
    """
    return Settings()
