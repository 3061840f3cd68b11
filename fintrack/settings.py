from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

REPO_ROOT = Path(__file__).resolve().parents[1]

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseSettings):
    """
    Runtime settings for the fintrack API, read from ``APP_*`` variables.

    - ``db_url``: SQLAlchemy URL of the database that holds users, movements
      and the auth provider's ``sessions`` table. Unset means ``fintrack.db``
      in the repo root.
    - ``security_config_path``: route policy YAML. Unset means the bundled
      ``config/security_config.yaml``.
    - ``log_level``: level of the ``fintrack`` logger.
    - ``seed_demo_data``: create the demo admin, user, sessions and movements
      at startup when the users table is empty.
    """

    model_config = SettingsConfigDict(env_prefix="APP_", extra="ignore")

    db_url: str | None = None
    security_config_path: str | None = None
    log_level: str = "INFO"
    seed_demo_data: bool = True

    @field_validator("log_level")
    @classmethod
    def check_log_level(cls, v: str) -> str:
        normalized = v.strip().upper()
        if normalized not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {list(LOG_LEVELS)}")
        return normalized

    def resolved_db_url(self) -> str:
        return self.db_url or f"sqlite:///{REPO_ROOT / 'fintrack.db'}"

    def resolved_security_config_path(self) -> Path:
        if self.security_config_path:
            return Path(self.security_config_path)
        return REPO_ROOT / "config" / "security_config.yaml"


@lru_cache
def get_settings() -> Settings:
    return Settings()
