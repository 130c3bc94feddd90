"""
Configuration Management for BudgetSaver

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Storage key names default to the ones the original app wrote, so an
exported collection can be dropped into the data directory unchanged.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Local record store configuration."""
    
    model_config = SettingsConfigDict(
        env_prefix="BUDGETSAVER_STORAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )
    
    data_dir: Path = Field(
        default=Path(".budgetsaver"),
        description="Directory holding one JSON file per collection"
    )
    
    # Logical collection keys
    accounts_key: str = Field(
        default="budgetsaver-accounts",
        min_length=1,
    )
    budgets_key: str = Field(
        default="budgetsaver-budgets",
        min_length=1,
    )
    transactions_key: str = Field(
        default="budgetsaver-transactions",
        min_length=1,
    )
    recurring_key: str = Field(
        default="budgetsaver-recurring-transactions",
        min_length=1,
    )
    
    @field_validator(
        "accounts_key", "budgets_key", "transactions_key", "recurring_key"
    )
    @classmethod
    def validate_key(cls, v: str) -> str:
        """Keys become file names, so path separators are not allowed."""
        if "/" in v or "\\" in v:
            raise ValueError(f"Storage key may not contain path separators: {v}")
        return v


class AppSettings(BaseSettings):
    """
    Main application settings.
    
    Loads configuration from environment variables and .env file.
    """
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )
    
    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    
    # Logging
    log_level: str = Field(
        default="INFO",
        description="Minimum log level"
    )
    log_json: bool = Field(
        default=True,
        description="Render log lines as JSON (console renderer otherwise)"
    )
    
    # Dashboard
    recent_transactions_limit: int = Field(
        default=5,
        ge=1,
        le=100,
        description="How many transactions the dashboard lists as recent"
    )
    budget_warning_percent: float = Field(
        default=70.0,
        ge=0.0,
        description="Usage above this percentage is flagged as a warning"
    )
    budget_danger_percent: float = Field(
        default=90.0,
        ge=0.0,
        description="Usage above this percentage is flagged as danger"
    )
    
    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level
    
    @model_validator(mode="after")
    def validate_thresholds(self) -> "AppSettings":
        if self.budget_danger_percent < self.budget_warning_percent:
            raise ValueError("Danger threshold cannot be below warning threshold")
        return self


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
    
    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()
    
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
    
    Returns a dict of {setting_name: is_valid}, plus an
    "<name>_error" entry for each failing group.
    """
    results = {}
    
    settings = get_settings()
    
    try:
        _ = settings.storage
        results["storage"] = True
    except ValueError as e:
        results["storage"] = False
        results["storage_error"] = str(e)
    
    try:
        _ = settings.app
        results["app"] = True
    except ValueError as e:
        results["app"] = False
        results["app_error"] = str(e)
    
    return results
