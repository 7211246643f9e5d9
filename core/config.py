"""
Configuration Management Module

This module handles loading, validating, and providing access to application configuration
from environment variables (.env file).

Uses Pydantic Settings for automatic validation and type conversion.

Key Features:
- Loads configuration from environment variables or a .env file
- Validates the required upstream credential on startup
- Provides type-safe access to configuration values
- Handles optional settings with sensible defaults

Usage:
    from core.config import settings

    # Access configuration values
    print(settings.port)
    print(settings.poll_interval)
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

from core.errors import ConfigError


class Settings(BaseSettings):
    """
    Application Settings

    This class defines all configuration parameters for the application.
    Values are automatically loaded from environment variables or .env file.

    Attributes:
        brs_api_key: BrsApi credential (required, sent as the `key` query parameter)
        brs_api_url: BrsApi gold/currency endpoint
        app_host: Host address for the HTTP server
        port: Port number for the HTTP server
        poll_interval: Seconds between scheduled upstream fetches
        db_path: Path of the SQLite cache file
        request_timeout: Upstream request ceiling in seconds
        stale_threshold: Age in seconds after which a cached price is flagged stale
        shutdown_timeout: Graceful shutdown budget in seconds
        log_level: Logging level
    """

    # ============================================
    # Upstream (BrsApi) Configuration
    # ============================================

    brs_api_key: str = Field(
        default="",
        description="BrsApi API key (required)"
    )

    brs_api_url: str = Field(
        default="https://BrsApi.ir/Api/Market/Gold_Currency.php",
        description="BrsApi gold/currency market endpoint"
    )

    request_timeout: float = Field(
        default=10.0,
        description="Upstream HTTP request timeout in seconds"
    )

    # ============================================
    # Application Configuration
    # ============================================

    app_host: str = Field(
        default="0.0.0.0",
        description="HTTP server host address"
    )

    port: int = Field(
        default=8080,
        description="HTTP server port"
    )

    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    shutdown_timeout: float = Field(
        default=5.0,
        description="Seconds allowed for in-flight work during shutdown"
    )

    # ============================================
    # Polling & Caching
    # ============================================

    poll_interval: int = Field(
        default=60,
        description="Seconds between scheduled upstream fetches"
    )

    db_path: str = Field(
        default="/data/gold.db",
        description="SQLite database file for the price cache"
    )

    stale_threshold: float = Field(
        default=300.0,
        description="Seconds after which a cached price is reported as stale"
    )

    # ============================================
    # Pydantic Settings Configuration
    # ============================================

    model_config = SettingsConfigDict(
        # Look for .env file in the project root
        env_file=".env",
        # Ignore extra fields in .env that aren't defined here
        extra="ignore",
        # Case-insensitive environment variable matching
        case_sensitive=False,
        # Treat VAR= the same as an unset variable (falls back to the default)
        env_ignore_empty=True
    )


# ============================================
# Global Settings Instance
# ============================================

# Loaded once at import and reused by the whole application
settings = Settings()


# ============================================
# Configuration Validation
# ============================================

def validate_configuration(config: Settings = None) -> None:
    """
    Validate critical configuration settings on application startup.

    Args:
        config: Settings to validate (defaults to the global instance)

    Raises:
        ConfigError: If required configuration is missing or invalid
    """
    # Import logger here to avoid circular import
    # (logging.py imports config.py, so we can't import at module level)
    from core.logging import logger

    config = config or settings

    if not config.brs_api_key.strip():
        raise ConfigError("BRS_API_KEY environment variable is required")

    if not (1 <= config.port <= 65535):
        raise ConfigError(f"Invalid port number: {config.port}. Must be between 1 and 65535")

    if config.poll_interval <= 0:
        raise ConfigError(f"POLL_INTERVAL must be positive, got {config.poll_interval}")

    for name in ("request_timeout", "stale_threshold", "shutdown_timeout"):
        if getattr(config, name) <= 0:
            raise ConfigError(f"{name.upper()} must be positive, got {getattr(config, name)}")

    valid_log_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    if config.log_level.upper() not in valid_log_levels:
        raise ConfigError(
            f"Invalid LOG_LEVEL: '{config.log_level}'. "
            f"Must be one of: {', '.join(valid_log_levels)}"
        )

    logger.info("Configuration validated successfully")
    logger.info(f"Upstream: {config.brs_api_url}")
    logger.info(f"Poll interval: {config.poll_interval}s")
    logger.info(f"Database: {config.db_path}")
    logger.info(f"Server: {config.app_host}:{config.port}")
    logger.info(f"Log level: {config.log_level.upper()}")
