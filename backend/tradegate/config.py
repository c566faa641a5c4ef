"""
Configuration for the trade execution safety gate.

Provides:
- Ledger service location and API key
- Request timeout for the ledger call
- Logging settings
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_LEDGER_BASE_URL = "http://127.0.0.1:3005"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",  # Ignore extra env vars not defined in Settings
    )

    # Environment
    app_env: str = "development"

    # Ledger / audit service
    playbook_api_key: str = ""
    playbook_api_base_url: str = ""
    playbook_api_timeout_seconds: float = 10.0

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"
    service_name: str = "tradegate"

    @field_validator("playbook_api_base_url", mode="before")
    @classmethod
    def strip_trailing_slash(cls, v: str | None) -> str:
        return (v or "").strip().rstrip("/")

    @field_validator("playbook_api_timeout_seconds")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("playbook_api_timeout_seconds must be positive")
        return v

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in ("json", "text"):
            raise ValueError("log_format must be 'json' or 'text'")
        return v

    @property
    def ledger_base_url(self) -> str:
        """Configured ledger base URL, or the local default."""
        return self.playbook_api_base_url or DEFAULT_LEDGER_BASE_URL

    @property
    def has_api_key(self) -> bool:
        return bool(self.playbook_api_key)

    @property
    def is_development(self) -> bool:
        """Check if running in development."""
        return self.app_env in ("development", "dev", "")


def get_settings() -> Settings:
    """
    Load settings from the environment.

    Not cached: every work item reads its own configuration.
    """
    return Settings()
