"""Central environment-driven settings for the payments service.

The process loads this once at startup. Behavior is controlled by environment
variables (see `.env.example`).
"""

from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class CommonSettings(BaseSettings):
    """Typed view of runtime configuration from environment variables."""

    service_name: str = "payments-app"
    log_level: str = "INFO"
    payment_provider: Literal["mock", "stripe"] = "mock"
    stripe_api_key: str = ""
    stripe_api_base: str = "https://api.stripe.com"
    provider_timeout_seconds: float = 10.0
    request_timeout_seconds: float = 30.0
    api_key: str | None = None
    otel_exporter_otlp_endpoint: str | None = None
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = CommonSettings()
