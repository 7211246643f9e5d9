"""
Unified Logging Configuration

This module sets up a centralized logging system for the entire service.
All modules should import and use the logger from this module instead of
using print() statements.

Every non-fatal error the poller contains (upstream failures, store write
failures, skipped ticks) ends up here, so this is the single place to
redirect logs to files or an external sink.

Usage:
    from core.logging import logger, get_logger

    logger.info("Service started")
    poll_logger = get_logger("services.poller")
    poll_logger.warning("Fetch failed")

Configuration:
    Log level is controlled by the LOG_LEVEL setting (environment or .env).
    If not set, defaults to INFO.
"""

import logging
import sys
from typing import Optional


def setup_logging(
    log_level: str = "INFO",
    log_format: Optional[str] = None,
    include_timestamp: bool = True,
    include_module: bool = True
) -> logging.Logger:
    """
    Configure and return the application logger.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Custom log format string (uses default if None)
        include_timestamp: Include timestamp in log messages
        include_module: Include logger name in log messages

    Returns:
        logging.Logger: Configured logger instance

    Example:
        >>> logger = setup_logging(log_level="DEBUG")
        >>> logger.info("Service started")
        2026-01-01 12:00:00 [INFO] goldcache Service started
    """
    if log_format is None:
        format_parts = []

        if include_timestamp:
            format_parts.append("%(asctime)s")

        format_parts.append("[%(levelname)s]")

        if include_module:
            format_parts.append("%(name)s")

        format_parts.append("%(message)s")

        log_format = " ".join(format_parts)

    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        format=log_format,
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
        force=True  # Override any existing configuration
    )

    logger = logging.getLogger("goldcache")
    logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    return logger


# ============================================
# Initialize Logger with Settings
# ============================================

try:
    from core.config import settings
    log_level = settings.log_level if hasattr(settings, 'log_level') else "INFO"
except ImportError:
    # Settings not importable yet (partial initialisation)
    log_level = "INFO"

# Create the global logger instance
logger = setup_logging(log_level=log_level)


# ============================================
# Convenience Functions
# ============================================

def get_logger(name: str) -> logging.Logger:
    """
    Get a logger for a specific module or component.

    Args:
        name: Name for the logger (typically __name__)

    Returns:
        logging.Logger: Logger instance named "goldcache.<name>"
    """
    return logging.getLogger(f"goldcache.{name}")


# ============================================
# Log Helper Functions
# ============================================

def log_api_request(source: str, endpoint: str) -> None:
    """
    Log an upstream API request with consistent formatting.

    The endpoint is logged without its query string so the credential never
    reaches the logs.

    Example:
        >>> log_api_request("brsapi", "/Api/Market/Gold_Currency.php")
        [DEBUG] API Request: brsapi /Api/Market/Gold_Currency.php
    """
    logger.debug(f"API Request: {source} {endpoint}")


def log_api_response(source: str, endpoint: str, status: int, response_time: float = None) -> None:
    """
    Log an upstream API response with status and timing information.

    Example:
        >>> log_api_response("brsapi", "/Api/Market/Gold_Currency.php", 200, 0.342)
        [DEBUG] API Response: brsapi /Api/Market/Gold_Currency.php | Status: 200 | Time: 0.342s
    """
    time_str = f" | Time: {response_time:.3f}s" if response_time else ""
    logger.debug(f"API Response: {source} {endpoint} | Status: {status}{time_str}")


logger.debug("Logging system initialized")
