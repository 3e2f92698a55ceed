"""
Configuration Management for Pocket Ledger

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here, including the
product policy for how savings transactions touch wallet balances.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LedgerSettings(BaseSettings):
    """Ledger store behaviour and persistence policy."""

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    storage_backend: Literal["memory", "json", "sheets"] = Field(
        default="json",
        description="Persistence backend used by the store"
    )
    data_dir: Path = Field(
        default=Path(".pocketledger"),
        description="Directory for the JSON file backend"
    )

    # Open product decision: savings either leave the balance alone or credit it
    savings_affects_balance: bool = Field(
        default=False,
        description="Whether savings transactions move the wallet balance (+amount)"
    )

    default_wallet_name: str = Field(
        default="My Wallet",
        min_length=1,
        description="Name of the wallet seeded into an empty ledger"
    )
    future_date_tolerance_days: int = Field(
        default=7,
        ge=0,
        description="How many days in the future a transaction date can be before warning"
    )
    recent_transactions_limit: int = Field(
        default=5,
        ge=1,
        le=100,
        description="Transactions shown on the dashboard"
    )
    trend_months: int = Field(
        default=6,
        ge=1,
        le=24,
        description="Months shown in the spending trend"
    )

    # Durable write policy
    persist_retry_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Attempts per collection write before reporting a failure"
    )
    persist_retry_multiplier: float = Field(
        default=0.5,
        ge=0.0,
        description="Exponential backoff multiplier in seconds"
    )
    persist_retry_max_wait: float = Field(
        default=5.0,
        ge=0.0,
        description="Upper bound for a single backoff wait in seconds"
    )


class GoogleSheetsSettings(BaseSettings):
    """Google Sheets storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="GOOGLE_SHEETS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    credentials_path: str = Field(
        ...,
        description="Path to Google service account credentials JSON"
    )
    spreadsheet_id: str = Field(
        ...,
        description="ID of the Google Sheets spreadsheet to use"
    )

    # Sheet names within the spreadsheet
    transactions_sheet_name: str = Field(default="Transactions")
    wallets_sheet_name: str = Field(default="Wallets")
    savings_goals_sheet_name: str = Field(default="SavingsGoals")
    analytics_sheet_name: str = Field(default="AnalyticsHistory")
    audit_sheet_name: str = Field(
        default="AuditLog",
        description="Name of the sheet for audit logs"
    )

    @field_validator('credentials_path')
    @classmethod
    def validate_credentials_path(cls, v: str) -> str:
        """Warn if credentials file doesn't exist (but don't fail - might be mounted later)."""
        if not Path(v).exists():
            import warnings
            warnings.warn(
                f"Google credentials file not found at {v}. "
                "Make sure it exists before running the application."
            )
        return v


class AppSettings(BaseSettings):
    """
    Process-level settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        description="Root log level"
    )
    json_logs: bool = Field(
        default=True,
        description="Render logs as JSON lines instead of console output"
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

    # Sub-settings are loaded lazily so a missing Sheets config only
    # matters when that backend is selected

    @property
    def ledger(self) -> LedgerSettings:
        return LedgerSettings()

    @property
    def google_sheets(self) -> GoogleSheetsSettings:
        return GoogleSheetsSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, plus `<name>_error`
    entries describing failures. Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    try:
        ledger = settings.ledger
        results["ledger"] = True
    except Exception as e:
        ledger = None
        results["ledger"] = False
        results["ledger_error"] = str(e)

    # Sheets settings are only required when that backend is selected
    if ledger is not None and ledger.storage_backend == "sheets":
        try:
            _ = settings.google_sheets
            results["google_sheets"] = True
        except Exception as e:
            results["google_sheets"] = False
            results["google_sheets_error"] = str(e)

    try:
        _ = settings.app
        results["app"] = True
    except Exception as e:
        results["app"] = False
        results["app_error"] = str(e)

    return results
