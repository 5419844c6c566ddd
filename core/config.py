"""
Configuration Management Module

This module handles loading, validating, and providing access to application configuration
from environment variables (.env file).

Uses Pydantic Settings for automatic validation and type conversion.

Key Features:
- Loads configuration from .env file
- Validates the aggregation knobs (timeout, highlight threshold, default symbol)
- Provides type-safe access to configuration values
- Converts comma-separated strings to lists (direct venues, CORS origins)

Usage:
    from core.config import settings

    print(settings.request_timeout)       # 4.0
    print(settings.direct_venues_list)    # ['binance', 'bybit']
"""

from typing import List
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


# Venues that ship a hand-written REST client under exchanges/
DIRECT_CLIENT_VENUES = ("binance", "bybit")

# Hosting platforms cap serverless requests around 10s; stay under it
MAX_REQUEST_TIMEOUT = 10.0


class Settings(BaseSettings):
    """
    Application Settings

    Values are automatically loaded from environment variables or .env file.

    Attributes:
        request_timeout: Per-call timeout for every venue request, in seconds
        highlight_threshold: Absolute premium/gap (in %) at which a row is flagged
        default_symbol: Symbol used when the caller does not supply one
        display_timezone: IANA timezone used to render funding settlement times
        direct_access_venues: Comma-separated venues fetched over raw REST
        binance_spot_base_url: Binance spot REST base URL
        binance_futures_base_url: Binance USD-M futures REST base URL
        bybit_base_url: Bybit v5 REST base URL
        app_host: Host address for FastAPI server
        app_port: Port number for FastAPI server
        environment: Current environment (development, production)
        debug: Enable debug mode with verbose logging
        log_level: Logging level
        cors_origins: Comma-separated list of allowed CORS origins
    """

    # ============================================
    # Aggregation Configuration
    # ============================================

    request_timeout: float = Field(
        default=4.0,
        description="Per-call venue request timeout in seconds"
    )

    highlight_threshold: float = Field(
        default=0.5,
        description="Absolute premium/gap percentage that flags a row for emphasis"
    )

    default_symbol: str = Field(
        default="BTC",
        description="Fallback asset symbol when the caller supplies none"
    )

    display_timezone: str = Field(
        default="Asia/Seoul",
        description="Timezone used to format the next funding settlement time"
    )

    direct_access_venues: str = Field(
        default="binance,bybit",
        description="Comma-separated venues that bypass ccxt and use raw REST calls"
    )

    # ============================================
    # Direct REST Endpoints
    # ============================================

    binance_spot_base_url: str = Field(
        default="https://api.binance.com",
        description="Binance spot API base URL"
    )

    binance_futures_base_url: str = Field(
        default="https://fapi.binance.com",
        description="Binance USD-M futures API base URL"
    )

    bybit_base_url: str = Field(
        default="https://api.bybit.com",
        description="Bybit v5 API base URL"
    )

    # ============================================
    # Application Configuration
    # ============================================

    app_host: str = Field(
        default="0.0.0.0",
        description="FastAPI server host address"
    )

    app_port: int = Field(
        default=8000,
        description="FastAPI server port"
    )

    environment: str = Field(
        default="development",
        description="Application environment (development, production)"
    )

    debug: bool = Field(
        default=True,
        description="Enable debug mode"
    )

    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    cors_origins: str = Field(
        default="http://localhost:3000,http://localhost:5173",
        description="Comma-separated list of allowed CORS origins"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        case_sensitive=False
    )

    # ============================================
    # Derived Properties
    # ============================================

    @property
    def direct_venues_list(self) -> List[str]:
        """
        Convert comma-separated direct venues string to a list.

        Example:
            >>> settings.direct_venues_list
            ['binance', 'bybit']
        """
        return [v.strip().lower() for v in self.direct_access_venues.split(",") if v.strip()]

    @property
    def cors_origins_list(self) -> List[str]:
        """
        Convert comma-separated CORS origins string to a list.

        Example:
            >>> settings.cors_origins_list
            ['http://localhost:3000', 'http://localhost:5173']
        """
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def tzinfo(self) -> ZoneInfo:
        """Timezone object for `display_timezone`."""
        return ZoneInfo(self.display_timezone)


# ============================================
# Global Settings Instance
# ============================================

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
        ValueError: If configuration is missing or invalid
    """
    # logging.py imports config.py, so import lazily
    from core.logging import logger

    config = config or settings

    if config.request_timeout <= 0:
        raise ValueError(f"REQUEST_TIMEOUT must be positive, got {config.request_timeout}")

    if config.request_timeout > MAX_REQUEST_TIMEOUT:
        raise ValueError(
            f"REQUEST_TIMEOUT {config.request_timeout}s exceeds the {MAX_REQUEST_TIMEOUT}s limit"
        )

    if config.highlight_threshold < 0:
        raise ValueError(
            f"HIGHLIGHT_THRESHOLD must be non-negative, got {config.highlight_threshold}"
        )

    default_symbol = config.default_symbol.strip()
    if not (default_symbol.isascii() and default_symbol.isalnum()):
        raise ValueError(f"DEFAULT_SYMBOL '{config.default_symbol}' must be alphanumeric")

    try:
        config.tzinfo
    except (ZoneInfoNotFoundError, ValueError):
        raise ValueError(f"Unknown DISPLAY_TIMEZONE: '{config.display_timezone}'")

    for venue in config.direct_venues_list:
        if venue not in DIRECT_CLIENT_VENUES:
            raise ValueError(
                f"Venue '{venue}' has no direct REST client. "
                f"Must be one of: {', '.join(DIRECT_CLIENT_VENUES)}"
            )

    if not (1 <= config.app_port <= 65535):
        raise ValueError(f"Invalid port number: {config.app_port}. Must be between 1 and 65535")

    valid_log_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    if config.log_level.upper() not in valid_log_levels:
        raise ValueError(
            f"Invalid LOG_LEVEL: '{config.log_level}'. "
            f"Must be one of: {', '.join(valid_log_levels)}"
        )

    logger.info("Configuration validated successfully")
    logger.info(f"Request timeout: {config.request_timeout}s")
    logger.info(f"Highlight threshold: {config.highlight_threshold}%")
    logger.info(f"Default symbol: {config.default_symbol.upper()}")
    logger.info(f"Direct REST venues: {', '.join(config.direct_venues_list) or 'none'}")
    logger.info(f"Server: {config.app_host}:{config.app_port}")
    logger.info(f"Log level: {config.log_level.upper()}")
