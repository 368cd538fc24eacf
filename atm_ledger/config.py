"""
Configuration Management Module

Provides centralized configuration using pydantic-settings for environment-based configuration.
"""

from pathlib import Path
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class LedgerConfig(BaseSettings):
    """ATM ledger configuration"""

    model_config = SettingsConfigDict(
        env_prefix="ATM_LEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Persistence configuration
    data_dir: Path = Path(".")
    csv_filename: str = "transactions.csv"
    json_filename: str = "transactions.json"

    # History capacity. None keeps every transaction; a bound evicts the
    # oldest entries and so discards audit history.
    max_history: Optional[int] = Field(default=None, ge=1)

    # Display configuration
    currency_code: str = "USD"

    # Logging configuration
    log_level: str = "WARNING"
    log_format: Literal["json", "text"] = "json"

    @property
    def csv_path(self) -> Path:
        return self.data_dir / self.csv_filename

    @property
    def json_path(self) -> Path:
        return self.data_dir / self.json_filename


# Global configuration instance
config = LedgerConfig()


def get_config() -> LedgerConfig:
    """Get global configuration instance"""
    return config


def reload_config() -> LedgerConfig:
    """Reload configuration from environment"""
    global config
    config = LedgerConfig()
    return config
