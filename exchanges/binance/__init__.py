"""
Binance Direct Transport

Normalizes Binance REST payloads for the direct access path.

Endpoints Used:
    - GET api.binance.com/api/v3/ticker/price   - Spot last price
    - GET fapi.binance.com/fapi/v1/ticker/price - USD-M perpetual last price
    - GET fapi.binance.com/fapi/v1/premiumIndex - lastFundingRate, nextFundingTime

Structure:
    exchanges/binance/
    ├── __init__.py      # This file (BinanceTransport)
    └── api_client.py    # REST client with aiohttp
"""

from core.errors import TransientFetchFailure
from core.schemas import FundingQuote, PricePoint
from core.utils.time import parse_settlement_time
from core.venue_adapter import parse_funding_rate, parse_price
from .api_client import BinanceAPIClient


class BinanceTransport:
    """
    Binance market data, normalized to prices and FundingQuote.

    Example:
        >>> transport = BinanceTransport(timeout=4.0)
        >>> await transport.spot_price("BTCUSDT")
        50000.1
        >>> await transport.close()
    """

    name = "binance"

    def __init__(self, timeout: float = 4.0):
        from core.config import settings

        self.client = BinanceAPIClient(
            spot_base_url=settings.binance_spot_base_url,
            futures_base_url=settings.binance_futures_base_url,
            timeout=timeout,
        )

    async def spot_price(self, pair: str) -> PricePoint:
        data = await self.client.get_spot_price(pair)
        return self._price(data, pair)

    async def futures_price(self, pair: str) -> PricePoint:
        data = await self.client.get_futures_price(pair)
        return self._price(data, pair)

    async def funding(self, pair: str) -> FundingQuote:
        data = await self.client.get_premium_index(pair)
        if not isinstance(data, dict):
            raise TransientFetchFailure(self.name, f"Unexpected premiumIndex payload for {pair}")

        return FundingQuote(
            rate_percent=parse_funding_rate(data.get("lastFundingRate")),
            next_settlement=parse_settlement_time(data.get("nextFundingTime")),
        )

    def _price(self, data, pair: str) -> PricePoint:
        if not isinstance(data, dict) or "price" not in data:
            raise TransientFetchFailure(self.name, f"Unexpected ticker payload for {pair}")
        return parse_price(data["price"])

    async def open(self) -> None:
        await self.client.open()

    async def close(self) -> None:
        await self.client.close()


__all__ = ["BinanceTransport", "BinanceAPIClient"]
