"""
Configuration management for the BRIO Smart Tech train controller.

Uses Pydantic Settings for type-safe environment variable loading.
All configuration can be overridden via environment variables or .env file.
"""
from typing import Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from utils.constants import BRIO_CHAR_UUID, BRIO_DEVICE_NAME


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)")
    log_format: str = Field(default="json", description="Log format (json or text)")
    log_file: Optional[str] = Field(default=None, description="Log file path (None for stdout only)")

    # GATT Configuration
    command_char_uuid: str = Field(
        default=BRIO_CHAR_UUID,
        description="Characteristic UUID that receives command frames"
    )
    notify_char_uuid: str = Field(
        default=BRIO_CHAR_UUID,
        description="Characteristic UUID that emits status notifications"
    )
    write_with_response: bool = Field(
        default=False,
        description="Use GATT write-with-response for command frames"
    )

    # Discovery Configuration
    device_name_filter: str = Field(
        default=BRIO_DEVICE_NAME,
        description="Substring matched against advertised local names when scanning"
    )

    # Timing Configuration
    connect_timeout: float = Field(
        default=5.0,
        gt=0,
        description="Seconds allowed for link establishment and subscription"
    )
    discovery_timeout: float = Field(
        default=4.0,
        gt=0,
        description="Seconds to wait for a known address to advertise before reporting it missing"
    )
    scan_timeout: float = Field(
        default=30.0,
        gt=0,
        description="Seconds to scan for a locomotive before giving up"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """
    Get the global settings instance.

    Returns:
        Settings: The application settings
    """
    return settings
