"""
Bybit REST API Client

This module provides an async HTTP client for the Bybit v5 market tickers
endpoint used by the direct access path. It handles:
- Single-shot HTTP GET requests bounded by a per-call timeout
- Bybit's retCode/retMsg envelope
- Error handling and logging

API Documentation:
    https://bybit-exchange.github.io/docs/v5/market/tickers

Usage:
    async with BybitAPIClient() as client:
        spot = await client.get_ticker("spot", "BTCUSDT")
        perp = await client.get_ticker("linear", "BTCUSDT")
"""

import time
from typing import Any, Dict, Optional

import aiohttp

from core.errors import TransientFetchFailure
from core.logging import get_logger, log_api_request, log_api_response


class BybitAPIClient:
    """
    Async HTTP client for Bybit v5 public market data.

    Attributes:
        name: Venue id used in logs and errors
        base_url: Bybit API base URL
        timeout: Per-request timeout in seconds
        session: aiohttp ClientSession for HTTP requests

    Notes:
        - "spot" category holds spot pairs, "linear" holds USDT perpetuals
        - Perpetual tickers carry fundingRate and nextFundingTime directly
    """

    name = "bybit"

    BASE_URL = "https://api.bybit.com"

    def __init__(self, base_url: Optional[str] = None, timeout: float = 4.0):
        """
        Initialize the Bybit API client.

        Args:
            base_url: Override for the API host
            timeout: Per-request timeout in seconds
        """
        self.base_url = (base_url or self.BASE_URL).rstrip("/")
        self.timeout = timeout
        self.logger = get_logger(__name__)
        self.session: Optional[aiohttp.ClientSession] = None

    # ============================================
    # Context Manager for Session Management
    # ============================================

    async def __aenter__(self):
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def open(self) -> None:
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            )
            self.logger.debug("BybitAPIClient session created")

    async def close(self) -> None:
        if self.session and not self.session.closed:
            await self.session.close()
            self.logger.debug("BybitAPIClient session closed")
        self.session = None

    # ============================================
    # HTTP Request Handler
    # ============================================

    async def _get(self, endpoint: str, params: Dict[str, Any] = None) -> Any:
        """
        Make a single GET request to the Bybit v5 market API.

        Args:
            endpoint: API endpoint (e.g., "/tickers")
            params: Query parameters

        Returns:
            The "result" object of the response envelope

        Raises:
            TransientFetchFailure: Non-200 status or retCode != 0
        """
        await self.open()

        path = f"/v5/market{endpoint}"
        url = f"{self.base_url}{path}"
        params = params or {}
        log_api_request(self.name, path, params)
        started = time.monotonic()

        async with self.session.get(url, params=params) as response:
            log_api_response(self.name, path, response.status, time.monotonic() - started)
            if response.status != 200:
                text = await response.text()
                raise TransientFetchFailure(self.name, f"HTTP {response.status}: {text[:200]}")

            data = await response.json(content_type=None)

        if data.get("retCode") != 0:
            error_msg = data.get("retMsg", "Unknown error")
            raise TransientFetchFailure(self.name, f"Bybit API error: {error_msg}")

        return data.get("result") or {}

    # ============================================
    # Market Data Methods
    # ============================================

    async def get_ticker(self, category: str, symbol: str) -> Dict[str, Any]:
        """
        First ticker entry for a symbol in a category.

        Args:
            category: "spot" or "linear"
            symbol: Exchange-native symbol (e.g., "BTCUSDT")

        Returns:
            Ticker dict with lastPrice (and fundingRate / nextFundingTime for linear)

        Bybit Endpoint:
            GET /v5/market/tickers?category={category}&symbol={symbol}

        Raises:
            TransientFetchFailure: If the symbol is not listed
        """
        data = await self._get("/tickers", {"category": category, "symbol": symbol.upper()})
        tickers = data.get("list") or []

        if not tickers:
            raise TransientFetchFailure(self.name, f"No {category} ticker for {symbol}")

        return tickers[0]
