"""
Pocket Ledger settings.

Read from the environment (and `.env`) with pydantic-settings.

The ledger core takes no configuration. Only the Sheets backend and
the validator's warning thresholds are configurable.
"""

import warnings
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class GoogleSheetsSettings(BaseSettings):
    """Where the Sheets backend keeps entries and audit rows."""

    model_config = SettingsConfigDict(
        env_prefix="GOOGLE_SHEETS_",
        extra="ignore"
    )

    credentials_path: str = Field(
        ...,
        description="Service account key file (JSON)"
    )
    spreadsheet_id: str = Field(
        ...,
        description="Key of the ledger spreadsheet"
    )

    entries_sheet_name: str = Field(
        default="Entries",
        description="Worksheet holding one row per entry"
    )
    audit_sheet_name: str = Field(
        default="AuditLog",
        description="Worksheet holding audit events"
    )

    @field_validator("credentials_path")
    @classmethod
    def check_credentials_file(cls, v: str) -> str:
        # Only a warning: the key may be mounted after startup
        if not Path(v).exists():
            warnings.warn(
                f"No service account key at {v}; "
                "the Sheets backend will fail to connect until it exists."
            )
        return v


class AppSettings(BaseSettings):
    """General settings and validation thresholds."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    debug_mode: bool = Field(
        default=False,
        description="Log debug lines from the pocket_ledger loggers"
    )

    # Warning thresholds; they never block a write
    max_entry_amount: float = Field(
        default=1000000.0,
        gt=0,
        description="Amount above which an entry is flagged for review"
    )
    future_date_tolerance_days: int = Field(
        default=31,
        ge=0,
        description="How many days ahead an entry date may be before it is flagged"
    )


class Settings(BaseSettings):
    """
    Entry point for every settings group.

    Groups are built on access, so a run on the in-memory backend never
    needs the Sheets variables to be set.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def google_sheets(self) -> GoogleSheetsSettings:
        return GoogleSheetsSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """Process-wide settings; `get_settings.cache_clear()` forces a re-read."""
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Startup check of each settings group.

    Maps group name to whether it loaded. Failed groups also get a
    `<name>_error` key with the reason.
    """
    settings = get_settings()
    status = {}

    for group in ("google_sheets", "app"):
        try:
            getattr(settings, group)
        except Exception as e:
            status[group] = False
            status[f"{group}_error"] = str(e)
        else:
            status[group] = True

    return status
