"""
Unified Logging Configuration

This module sets up a centralized logging system for the entire application.
All modules should import and use the logger from this module instead of
using print() statements.

Usage:
    from core.logging import logger, get_logger

    logger.info("Aggregating BTC across 8 venues")

    log = get_logger(__name__)
    log.warning("okx futures unavailable: timeout")

Log Levels (from most to least verbose):
    DEBUG    - Request/response traces for each venue call
    INFO     - Aggregation summaries, startup/shutdown
    WARNING  - A venue call failed and was reported as missing data
    ERROR    - Failures outside the per-venue boundary
    CRITICAL - Severe errors that may crash the service

Configuration:
    Log level is controlled by the LOG_LEVEL setting in .env file.
"""

import logging
import sys
from typing import Optional


# Third-party loggers that flood DEBUG output during a 3xN fan-out
NOISY_LOGGERS = ("ccxt", "aiohttp.access", "asyncio")


def setup_logging(
    log_level: str = "INFO",
    log_format: Optional[str] = None,
    include_timestamp: bool = True,
    quiet_libraries: bool = True
) -> logging.Logger:
    """
    Configure and return the application logger.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Custom log format string (uses default if None)
        include_timestamp: Include timestamp in log messages
        quiet_libraries: Cap ccxt/aiohttp/asyncio loggers at WARNING

    Returns:
        logging.Logger: The "gapscan" root logger

    Example:
        >>> logger = setup_logging(log_level="DEBUG")
        >>> logger.info("Aggregating BTC")
        2024-01-01 12:00:00 [INFO] gapscan: Aggregating BTC
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    if log_format is None:
        prefix = "%(asctime)s " if include_timestamp else ""
        log_format = prefix + "[%(levelname)s] %(name)s: %(message)s"

    logging.basicConfig(
        level=level,
        format=log_format,
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
        force=True
    )

    if quiet_libraries:
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(max(level, logging.WARNING))

    logger = logging.getLogger("gapscan")
    logger.setLevel(level)

    return logger


# ============================================
# Initialize Logger with Settings
# ============================================

from core.config import settings  # noqa: E402

logger = setup_logging(log_level=settings.log_level)


# ============================================
# Convenience Functions
# ============================================

def get_logger(name: str) -> logging.Logger:
    """
    Get a logger for a specific module or component.

    Args:
        name: Name for the logger (typically __name__)

    Returns:
        logging.Logger: Logger instance nested under "gapscan"

    Example:
        # In exchanges/binance/api_client.py:
        logger = get_logger(__name__)  # "gapscan.exchanges.binance.api_client"
    """
    return logging.getLogger(f"gapscan.{name}")


# ============================================
# Log Helper Functions
# ============================================

def log_api_request(exchange: str, endpoint: str, params: dict = None) -> None:
    """
    Log an API request with consistent formatting.

    Example:
        >>> log_api_request("binance", "/api/v3/ticker/price", {"symbol": "BTCUSDT"})
        [DEBUG] API Request: binance /api/v3/ticker/price | Params: {'symbol': 'BTCUSDT'}
    """
    if params:
        logger.debug(f"API Request: {exchange} {endpoint} | Params: {params}")
    else:
        logger.debug(f"API Request: {exchange} {endpoint}")


def log_api_response(exchange: str, endpoint: str, status: int, response_time: float = None) -> None:
    """
    Log an API response with status and timing information.

    Example:
        >>> log_api_response("bybit", "/v5/market/tickers", 200, 0.342)
        [DEBUG] API Response: bybit /v5/market/tickers | Status: 200 | Time: 0.342s
    """
    time_str = f" | Time: {response_time:.3f}s" if response_time else ""
    logger.debug(f"API Response: {exchange} {endpoint} | Status: {status}{time_str}")


logger.debug("Logging system initialized")
