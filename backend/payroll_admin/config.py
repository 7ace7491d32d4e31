"""Application settings and configuration helpers."""
from functools import lru_cache
import os
from pydantic import BaseModel, Field
from dotenv import load_dotenv

load_dotenv()


class Settings(BaseModel):
    """Runtime configuration loaded from environment variables."""

    database_url: str = Field(
        default="sqlite+aiosqlite:///./payroll_admin.db", alias="DATABASE_URL"
    )
    secret_key: str = Field(default="change-me", alias="SECRET_KEY")
    access_token_expires_minutes: int = Field(default=60 * 24, alias="ACCESS_TOKEN_EXPIRES_MINUTES")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Display settings used when building page props
    currency_symbol: str = Field(default="₱", alias="CURRENCY_SYMBOL")
    company_name: str = Field(default="Payroll Admin", alias="COMPANY_NAME")
    company_tin: str = Field(default="", alias="COMPANY_TIN")
    asset_version: str = Field(default="1", alias="ASSET_VERSION")

    model_config = {
        "populate_by_name": True,
        "extra": "ignore",
    }


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance."""

    values = {
        name: os.environ[field.alias]
        for name, field in Settings.model_fields.items()
        if field.alias and field.alias in os.environ
    }
    return Settings(**values)
