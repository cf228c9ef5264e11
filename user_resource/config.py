"""
Configuration module for the user resource service.

Centralized configuration using Pydantic settings. Every value can be
overridden via environment variables or a .env file; the defaults start
the service on port 8080 with the API document at /apidocs.json.
"""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings for the user resource service.

    Attributes:
        SERVICE_NAME: Name reported by the health endpoint and in logs
        SERVICE_VERSION: Version reported by the health endpoint
        HOST: Server bind address
        PORT: Server port number
        LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        LOG_JSON: Render logs as JSON instead of console output
        APIDOCS_PATH: Path serving the generated API description document
        APIDOCS_UI_DIR: Directory with a documentation viewer mounted at /apidocs/
        METRICS_ENABLED: Expose Prometheus metrics at /metrics
        LEGACY_PARSE_ERROR_STATUS: Report unparseable bodies as 404 (update)
            and 500 (create) instead of 400
    """

    SERVICE_NAME: str = Field(
        default="user-service",
        description="Service name used in logs and health checks",
    )
    SERVICE_VERSION: str = Field(
        default="1.0.0",
        description="Service version",
    )

    # Server configuration
    HOST: str = Field(
        default="0.0.0.0",
        description="Server bind address",
    )
    PORT: int = Field(
        default=8080,
        ge=1,
        le=65535,
        description="Server port number",
    )

    # Logging configuration
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    LOG_JSON: bool = Field(
        default=True,
        description="Render structured logs as JSON",
    )

    # API documentation
    APIDOCS_PATH: str = Field(
        default="/apidocs.json",
        description="Path of the generated API description document",
    )
    APIDOCS_UI_DIR: str = Field(
        default="",
        description="Static documentation viewer directory served at /apidocs/",
    )

    METRICS_ENABLED: bool = Field(
        default=True,
        description="Expose Prometheus metrics",
    )

    LEGACY_PARSE_ERROR_STATUS: bool = Field(
        default=False,
        description="Use 404/500 instead of 400 for unparseable request bodies",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    @field_validator("APIDOCS_PATH")
    @classmethod
    def validate_apidocs_path(cls, value: str) -> str:
        """
        Validate that the API document path is absolute.

        Args:
            value: The path to validate

        Returns:
            The validated path

        Raises:
            ValueError: If path does not start with a slash
        """
        if not value.startswith("/"):
            raise ValueError(f"APIDOCS_PATH must start with '/', got: {value}")
        return value


# Global settings instance
settings = Settings()
