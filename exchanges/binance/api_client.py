"""
Binance REST API Client

This module provides an async HTTP client for the public Binance market data
endpoints used by the direct access path. It handles:
- Single-shot HTTP GET requests bounded by a per-call timeout
- Error handling and logging
- Extraction of last price and funding data from Binance payloads

Binance splits spot and USD-M futures across two hosts, so the client keeps two
base URLs.

API Documentation:
    https://binance-docs.github.io/apidocs/spot/en/
    https://binance-docs.github.io/apidocs/futures/en/

Usage:
    async with BinanceAPIClient() as client:
        spot = await client.get_spot_price("BTCUSDT")
        index = await client.get_premium_index("BTCUSDT")
"""

import time
from typing import Any, Dict, Optional

import aiohttp

from core.errors import TransientFetchFailure
from core.logging import get_logger, log_api_request, log_api_response


class BinanceAPIClient:
    """
    Async HTTP client for Binance public market data.

    Attributes:
        name: Venue id used in logs and errors
        spot_base_url: Binance spot API base URL
        futures_base_url: Binance USD-M futures API base URL
        timeout: Per-request timeout in seconds
        session: aiohttp ClientSession for HTTP requests

    Example:
        >>> async with BinanceAPIClient(timeout=4.0) as client:
        ...     data = await client.get_futures_price("ETHUSDT")
        ...     print(data["price"])

    Notes:
        - No API key: every endpoint used here is public
        - No retries: a failed call is reported as missing data upstream
    """

    name = "binance"

    SPOT_BASE_URL = "https://api.binance.com"
    FUTURES_BASE_URL = "https://fapi.binance.com"

    def __init__(
        self,
        spot_base_url: Optional[str] = None,
        futures_base_url: Optional[str] = None,
        timeout: float = 4.0
    ):
        """
        Initialize the Binance API client.

        Args:
            spot_base_url: Override for the spot host
            futures_base_url: Override for the futures host
            timeout: Per-request timeout in seconds
        """
        self.spot_base_url = (spot_base_url or self.SPOT_BASE_URL).rstrip("/")
        self.futures_base_url = (futures_base_url or self.FUTURES_BASE_URL).rstrip("/")
        self.timeout = timeout
        self.logger = get_logger(__name__)
        self.session: Optional[aiohttp.ClientSession] = None

    # ============================================
    # Context Manager for Session Management
    # ============================================

    async def __aenter__(self):
        """Enter async context - creates HTTP session."""
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Exit async context - closes HTTP session."""
        await self.close()

    async def open(self) -> None:
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            )
            self.logger.debug("BinanceAPIClient session created")

    async def close(self) -> None:
        if self.session and not self.session.closed:
            await self.session.close()
            self.logger.debug("BinanceAPIClient session closed")
        self.session = None

    # ============================================
    # HTTP Request Handler
    # ============================================

    async def _get(self, base_url: str, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """
        Make a single GET request to a Binance host.

        Args:
            base_url: Spot or futures host
            path: API endpoint path (e.g., "/api/v3/ticker/price")
            params: Optional query parameters

        Returns:
            Parsed JSON response

        Raises:
            TransientFetchFailure: On any non-200 response
            aiohttp.ClientError / asyncio.TimeoutError: On transport failure
        """
        await self.open()

        url = f"{base_url}{path}"
        log_api_request(self.name, path, params)
        started = time.monotonic()

        async with self.session.get(url, params=params) as resp:
            log_api_response(self.name, path, resp.status, time.monotonic() - started)
            if resp.status != 200:
                text = await resp.text()
                raise TransientFetchFailure(self.name, f"HTTP {resp.status} on {path}: {text[:200]}")
            return await resp.json(content_type=None)

    # ============================================
    # Market Data Methods
    # ============================================

    async def get_spot_price(self, symbol: str) -> Dict[str, Any]:
        """
        Latest spot price.

        Binance Endpoint:
            GET /api/v3/ticker/price?symbol=BTCUSDT

        Response Format:
            {"symbol": "BTCUSDT", "price": "50000.10"}
        """
        return await self._get(self.spot_base_url, "/api/v3/ticker/price", {"symbol": symbol.upper()})

    async def get_futures_price(self, symbol: str) -> Dict[str, Any]:
        """
        Latest USD-M perpetual price.

        Binance Endpoint:
            GET /fapi/v1/ticker/price?symbol=BTCUSDT

        Response Format:
            {"symbol": "BTCUSDT", "price": "50010.20", "time": 1700000000000}
        """
        return await self._get(self.futures_base_url, "/fapi/v1/ticker/price", {"symbol": symbol.upper()})

    async def get_premium_index(self, symbol: str) -> Dict[str, Any]:
        """
        Mark price and funding information.

        Binance Endpoint:
            GET /fapi/v1/premiumIndex?symbol=BTCUSDT

        Response Format:
            {
              "symbol": "BTCUSDT",
              "markPrice": "50005.0",
              "lastFundingRate": "0.00010000",
              "nextFundingTime": 1700006400000,
              ...
            }
        """
        return await self._get(self.futures_base_url, "/fapi/v1/premiumIndex", {"symbol": symbol.upper()})
