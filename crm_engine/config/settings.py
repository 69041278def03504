"""
Configuration management for the CRM intent engine.
"""

from decimal import Decimal
from typing import Optional

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EngineConfig(BaseSettings):
    """Configuration settings for the intent engine."""

    # Application Configuration
    environment: str = Field(default="development", alias="ENVIRONMENT")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Record Defaults
    default_currency: str = Field(default="USD", alias="DEFAULT_CURRENCY")
    default_deal_stage: str = Field(default="prospecting", alias="DEFAULT_DEAL_STAGE")
    default_deal_probability: int = Field(
        default=25, ge=0, le=100, alias="DEFAULT_DEAL_PROBABILITY"
    )
    default_contingency_percentage: Decimal = Field(
        default=Decimal("10"), ge=0, le=100, alias="DEFAULT_CONTINGENCY_PERCENTAGE"
    )
    default_resource_name: str = Field(
        default="Default User", alias="DEFAULT_RESOURCE_NAME"
    )
    conversion_duration_days: int = Field(
        default=90, gt=0, alias="CONVERSION_DURATION_DAYS"
    )

    # Local Store
    store_file: Optional[str] = Field(default=None, alias="CRM_STORE_FILE")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        populate_by_name=True,
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Ensure log level is valid."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v.upper()

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v):
        """Ensure environment is valid."""
        valid_envs = ["development", "testing", "production"]
        if v.lower() not in valid_envs:
            raise ValueError(f"Environment must be one of: {valid_envs}")
        return v.lower()

    @field_validator("default_currency")
    @classmethod
    def validate_currency(cls, v):
        """Normalize currency codes to upper case."""
        if len(v.strip()) != 3:
            raise ValueError("Currency must be a 3-letter ISO code")
        return v.strip().upper()


def load_config(env_file: Optional[str] = None) -> EngineConfig:
    """Load configuration from environment variables and .env file."""
    if env_file:
        load_dotenv(env_file)
    else:
        load_dotenv()

    return EngineConfig()


# Global configuration instance
_config: Optional[EngineConfig] = None


def get_config() -> EngineConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reload_config(env_file: Optional[str] = None) -> EngineConfig:
    """Reload configuration (useful for testing)."""
    global _config
    _config = load_config(env_file)
    return _config
