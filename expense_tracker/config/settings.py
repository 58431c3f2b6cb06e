"""
Configuration Management for Expense Tracker

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Everything the hosting environment supplies at startup (backend
credentials, app namespace, optional bootstrap token) is read from the
environment or a .env file - nothing is persisted locally.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class FirebaseSettings(BaseSettings):
    """Firebase (Authentication + Firestore) configuration."""

    model_config = SettingsConfigDict(
        env_prefix="FIREBASE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    credentials_path: str = Field(
        ...,
        description="Path to Firebase service account credentials JSON"
    )
    api_key: str = Field(
        ...,
        description="Firebase web API key (used for sign-in)"
    )
    project_id: Optional[str] = Field(
        default=None,
        description="Firebase project ID (defaults to the one in the credentials)"
    )
    auth_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        le=60,
        description="HTTP timeout for sign-in requests"
    )

    @field_validator('credentials_path')
    @classmethod
    def validate_credentials_path(cls, v: str) -> str:
        """Warn if credentials file doesn't exist (but don't fail - might be mounted later)."""
        if not Path(v).exists():
            import warnings
            warnings.warn(
                f"Firebase credentials file not found at {v}. "
                "Make sure it exists before running the application."
            )
        return v


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="TRACKER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Namespace of the per-user collections:
    # <collection_namespace>/<app_id>/users/<user_id>/expenses
    app_id: str = Field(
        default="default-app-id",
        min_length=1,
        description="Application ID used to scope stored data"
    )
    collection_namespace: str = Field(
        default="artifacts",
        min_length=1,
        description="Top-level collection holding all app data"
    )
    initial_auth_token: Optional[str] = Field(
        default=None,
        description="Optional custom token to sign in with instead of anonymous sign-in"
    )

    storage_backend: Literal["firestore", "memory"] = Field(
        default="firestore",
        description="Where expenses are stored ('memory' keeps them for this process only)"
    )

    # UI behaviour
    status_message_ttl_seconds: float = Field(
        default=3.0,
        gt=0,
        le=60,
        description="How long a status message stays visible"
    )
    refresh_interval_seconds: float = Field(
        default=1.0,
        gt=0,
        le=30,
        description="How often the expense list is redrawn"
    )
    date_format: str = Field(
        default="%d %B %Y",
        description="strftime format for the human-readable expense date"
    )

    log_level: str = Field(
        default="INFO",
        description="Minimum log level"
    )

    @field_validator('log_level')
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Note: These are loaded lazily to allow partial configuration.
    # The app must still start when Firebase is not configured.

    @property
    def firebase(self) -> FirebaseSettings:
        return FirebaseSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}.
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    try:
        _ = settings.firebase
        results["firebase"] = True
    except Exception as e:
        results["firebase"] = False
        results["firebase_error"] = str(e)

    try:
        _ = settings.app
        results["app"] = True
    except Exception as e:
        results["app"] = False
        results["app_error"] = str(e)

    return results
