"""Configuration loading for the change request adapter.

This module provides centralized configuration management:
- Load settings from environment variables and .env files
- Validate configuration using pydantic
- Provide typed access to all settings
- Build the core ConnectionConfig for an adapter instance
"""

from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from changebridge.core.models import ConnectionConfig, Credentials


class Settings(BaseSettings):
    """Application configuration loaded from environment.

    Uses pydantic-settings for environment variable handling with
    .env file support via python-dotenv.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Adapter instance
    servicenow_instance_id: str = Field(
        default="servicenow",
        description="Identifier of this adapter instance in logs and events",
    )

    # Remote service connection
    servicenow_url: str = Field(
        default="https://dev00000.service-now.com",
        description="ServiceNow instance base URL",
    )
    servicenow_username: str = Field(
        default="admin",
        description="ServiceNow login username",
    )
    servicenow_password: str = Field(
        default="",
        description="ServiceNow login password",
    )
    servicenow_table: str = Field(
        default="change_request",
        description="Change request table name",
    )
    servicenow_record_payload: dict[str, Any] = Field(
        default_factory=dict,
        description="Record fields submitted on create (JSON object)",
    )
    servicenow_query_limit: int = Field(
        default=1,
        description="sysparm_limit used on table reads",
    )
    request_timeout_seconds: float = Field(
        default=30.0,
        description="HTTP request timeout in seconds",
    )

    # Health monitoring
    healthcheck_interval_seconds: int = Field(
        default=60,
        description="Interval between health checks in monitor mode",
    )

    # Logging configuration
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Log level",
    )
    log_format: Literal["json", "text"] = Field(
        default="text",
        description="Log format",
    )

    # Run mode
    run_mode: Literal["once", "monitor", "cli"] = Field(
        default="once",
        description="Run mode",
    )

    # Development
    debug: bool = Field(
        default=False,
        description="Enable debug mode with verbose logging",
    )

    @field_validator("servicenow_url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Ensure the service URL is an http(s) URL."""
        if not v or not v.startswith(("http://", "https://")):
            raise ValueError("servicenow_url must start with http:// or https://")
        return v

    @field_validator("servicenow_table")
    @classmethod
    def validate_table(cls, v: str) -> str:
        """Ensure the table name is set."""
        if not v.strip():
            raise ValueError("servicenow_table must be a non-empty string")
        return v

    @field_validator("servicenow_query_limit", "healthcheck_interval_seconds")
    @classmethod
    def validate_positive_int(cls, v: int) -> int:
        """Ensure counts and intervals are positive."""
        if v <= 0:
            raise ValueError("value must be positive")
        return v

    @field_validator("request_timeout_seconds")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        """Ensure request timeout is positive."""
        if v <= 0:
            raise ValueError("request_timeout_seconds must be positive")
        return v

    def to_connection_config(self) -> ConnectionConfig:
        """Build the core ConnectionConfig from these settings."""
        return ConnectionConfig(
            service_url=self.servicenow_url,
            credentials=Credentials(
                username=self.servicenow_username,
                password=self.servicenow_password,
            ),
            table_name=self.servicenow_table,
            record_payload=dict(self.servicenow_record_payload),
        )


def load_settings(env_file: str | None = None) -> Settings:
    """Load application settings from environment.

    Args:
        env_file: Optional path to .env file. If not provided,
                 uses the default .env in the current directory.

    Returns:
        Validated Settings instance.

    Raises:
        ValidationError: If settings validation fails.
    """
    if env_file:
        return Settings(_env_file=env_file)  # type: ignore[call-arg]
    return Settings()


__all__ = ["Settings", "load_settings"]
