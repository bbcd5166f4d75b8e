"""
Configuration Settings.

This module defines the SDK configuration using Pydantic's BaseSettings.
It automatically loads all configuration from environment variables and .env file
without explicit dotenv loading.
"""

from functools import lru_cache
from typing import Literal, Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# =====================================================================
# Decision Service Configuration Models
# =====================================================================


class DecisionApiConfig(BaseModel):
    """Decision service endpoint configuration."""

    api_key: Optional[str] = Field(default=None, alias="GAME_API_KEY", description="Decision service API key")
    base_url: str = Field(
        default="https://sdk.game.virtuals.io/v2",
        alias="AGENT_RELAY_BASE_URL",
        description="Base URL of the v2 decision service API",
    )
    legacy_runner_url: str = Field(
        default="https://game.virtuals.io",
        alias="AGENT_RELAY_LEGACY_RUNNER_URL",
        description="Base URL of the legacy (v1) prompt runner",
    )
    access_token_url: str = Field(
        default="https://api.virtuals.io/api/accesses/tokens",
        alias="AGENT_RELAY_ACCESS_TOKEN_URL",
        description="Endpoint exchanging a legacy API key for a bearer token",
    )
    llm_model: str = Field(
        default="Llama-3.1-405B-Instruct",
        alias="AGENT_RELAY_LLM_MODEL",
        description="Model name sent to the v2 decision service",
    )
    request_timeout: float = Field(
        default=30.0,
        alias="AGENT_RELAY_REQUEST_TIMEOUT",
        description="Per-request timeout in seconds",
        gt=0,
    )

    model_config = {"populate_by_name": True}


class LoggingConfig(BaseModel):
    """Logging configuration consumed by ``setup_logging``."""

    log_level: str = Field(default="INFO", alias="AGENT_RELAY_LOG_LEVEL", description="Console log level")
    log_format: Literal["simple", "detailed", "json"] = Field(
        default="detailed",
        alias="AGENT_RELAY_LOG_FORMAT",
        description="Formatter used by every handler",
    )
    log_file_dir: str = Field(default="logs", alias="AGENT_RELAY_LOG_FILE_DIR", description="Directory of the log file")
    enable_file_logging: bool = Field(
        default=False,
        alias="AGENT_RELAY_ENABLE_FILE_LOGGING",
        description="Also write DEBUG records to <log_file_dir>/agent_relay.log",
    )

    model_config = {"populate_by_name": True}


# =====================================================================
# Main Settings Class
# =====================================================================


class Settings(BaseSettings):
    """
    SDK settings model.

    All properties are automatically bound from environment variables and .env file.
    Pydantic's BaseSettings handles dotenv loading automatically via model_config.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=True,
        populate_by_name=True,
    )

    # =====================================================================
    # Decision Service Configuration
    # =====================================================================
    api_key: Optional[str] = Field(
        default=None,
        description="Decision service API key. Keys prefixed with 'apt-' select the v2 API.",
        alias="GAME_API_KEY",
    )
    base_url: str = Field(
        default="https://sdk.game.virtuals.io/v2",
        description="Base URL of the v2 decision service API",
        alias="AGENT_RELAY_BASE_URL",
    )
    legacy_runner_url: str = Field(
        default="https://game.virtuals.io",
        description="Base URL of the legacy (v1) prompt runner",
        alias="AGENT_RELAY_LEGACY_RUNNER_URL",
    )
    access_token_url: str = Field(
        default="https://api.virtuals.io/api/accesses/tokens",
        description="Endpoint exchanging a legacy API key for a bearer token",
        alias="AGENT_RELAY_ACCESS_TOKEN_URL",
    )
    llm_model: str = Field(
        default="Llama-3.1-405B-Instruct",
        description="Model name sent to the v2 decision service",
        alias="AGENT_RELAY_LLM_MODEL",
    )
    request_timeout: float = Field(
        default=30.0,
        description="Per-request timeout in seconds for decision service calls",
        alias="AGENT_RELAY_REQUEST_TIMEOUT",
        gt=0,
    )

    # =====================================================================
    # Runtime Configuration
    # =====================================================================
    heartbeat_seconds: float = Field(
        default=5.0,
        description="Default pause between rounds of Agent.run",
        alias="AGENT_RELAY_HEARTBEAT_SECONDS",
        ge=0,
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
        alias="AGENT_RELAY_LOG_LEVEL",
    )
    log_format: Literal["simple", "detailed", "json"] = Field(
        default="detailed",
        description="Log record format: simple, detailed or json",
        alias="AGENT_RELAY_LOG_FORMAT",
    )
    log_file_dir: str = Field(
        default="logs",
        description="Directory for the optional log file",
        alias="AGENT_RELAY_LOG_FILE_DIR",
    )
    enable_file_logging: bool = Field(
        default=False,
        description="Write a DEBUG log file in addition to the console",
        alias="AGENT_RELAY_ENABLE_FILE_LOGGING",
    )

    # =====================================================================
    # Computed Properties (Grouped Configurations)
    # =====================================================================

    @property
    def decision_api(self) -> DecisionApiConfig:
        """Get decision service configuration from environment variables."""
        return DecisionApiConfig.model_validate(self.model_dump(by_alias=True))

    @property
    def logging(self) -> LoggingConfig:
        """Get logging configuration from environment variables."""
        return LoggingConfig.model_validate(self.model_dump(by_alias=True))


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()
