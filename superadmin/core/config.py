"""
Configuration module - loads all env vars using pydantic-settings.
This is the SINGLE SOURCE OF TRUTH for all config values.
"""

from functools import lru_cache
from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # MongoDB (document store + account store)
    mongodb_uri: str = "mongodb://localhost:27017/?replicaSet=rs0"
    mongodb_db: str = "superadmin_dashboard"

    # JWT Auth
    jwt_secret_key: str = "change-this-secret"
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 1440

    # Roles whose writes carry createdBy / updatedBy / assignedBy
    attribution_roles: List[str] = ["superadmin"]
    default_display_name: str = "Super Admin"
    default_role: str = "superadmin"

    # Realtime: how long a change stream waits for an event before re-checking
    # whether its subscription was cancelled
    subscription_poll_seconds: float = 1.0

    # App
    debug: bool = True
    log_level: str = "INFO"

    # Pydantic v2 config
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8"
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
