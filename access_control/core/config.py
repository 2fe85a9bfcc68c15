# access_control/core/config.py
"""
Runtime configuration for the access-control engine.

Values come from the environment (case-insensitive) and an optional ``.env``
file next to the project root. Components receive a ``Settings`` instance
explicitly; ``get_settings()`` is only used at the application edge.
"""

from functools import lru_cache
import logging
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

_PROJECT_ROOT = Path(__file__).resolve().parents[2]


def is_running_tests() -> bool:
    """
    Detect if code is running under pytest.

    PYTEST_CURRENT_TEST is set automatically by pytest during test runs, and is
    not expected to be present in production environments.
    """
    return os.getenv("PYTEST_CURRENT_TEST") is not None


# Load .env file only if not in CI
if not os.getenv("CI"):
    env_path = _PROJECT_ROOT / ".env"
    logger.debug(f"[CONFIG] Looking for .env at: {env_path}")
    load_dotenv(env_path)


if os.getenv("CI"):
    _DEFAULT_SECRET_KEY: SecretStr | object = SecretStr("ci-test-secret-key-not-for-production")
else:
    _DEFAULT_SECRET_KEY = ...


class Settings(BaseSettings):
    environment: str = "development"
    log_level: str = "INFO"

    # Key-value store
    redis_url: str = "redis://localhost:6379/10"
    key_prefix: str = "rbac"

    # Signed session tokens
    secret_key: SecretStr = Field(
        default=_DEFAULT_SECRET_KEY,
        description="Secret key used to sign access and refresh tokens",
    )  # type: ignore[assignment]  # required outside CI
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 600  # 10 hours
    refresh_token_expire_minutes: int = 1200  # 20 hours

    # Cache invalidation
    role_event_queue_size: int = 1000

    # Permission template seeding
    template_dir: Optional[Path] = None
    force_template_reload: bool = False

    model_config = SettingsConfigDict(
        env_file=".env" if not os.getenv("CI") else None,
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("key_prefix")
    @classmethod
    def _validate_key_prefix(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned or ":" in cleaned:
            raise ValueError("key_prefix must be a non-empty string without ':'")
        return cleaned

    @field_validator("role_event_queue_size")
    @classmethod
    def _validate_queue_size(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("role_event_queue_size must be positive")
        return value

    @model_validator(mode="after")
    def _validate_token_lifetimes(self) -> "Settings":
        if self.access_token_expire_minutes <= 0:
            raise ValueError("access_token_expire_minutes must be positive")
        if self.refresh_token_expire_minutes <= self.access_token_expire_minutes:
            raise ValueError(
                "refresh_token_expire_minutes must be greater than access_token_expire_minutes"
            )
        return self

    @property
    def is_testing(self) -> bool:
        return self.environment.lower() == "test" or is_running_tests()

    def secret_value(self) -> str:
        return self.secret_key.get_secret_value()


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide settings, loaded once from the environment."""
    return Settings()
