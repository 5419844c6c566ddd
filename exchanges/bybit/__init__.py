"""
Bybit Direct Transport

Normalizes Bybit v5 ticker payloads for the direct access path. Spot prices come
from the "spot" category; perpetual price and funding both come from the
"linear" ticker, which carries fundingRate and nextFundingTime.

Structure:
    exchanges/bybit/
    ├── __init__.py      # This file (BybitTransport)
    └── api_client.py    # REST client with aiohttp
"""

from core.schemas import FundingQuote, PricePoint
from core.utils.time import parse_settlement_time
from core.venue_adapter import parse_funding_rate, parse_price
from .api_client import BybitAPIClient


class BybitTransport:
    """Bybit market data, normalized to prices and FundingQuote."""

    name = "bybit"

    def __init__(self, timeout: float = 4.0):
        from core.config import settings

        self.client = BybitAPIClient(base_url=settings.bybit_base_url, timeout=timeout)

    async def spot_price(self, pair: str) -> PricePoint:
        ticker = await self.client.get_ticker("spot", pair)
        return parse_price(ticker.get("lastPrice"))

    async def futures_price(self, pair: str) -> PricePoint:
        ticker = await self.client.get_ticker("linear", pair)
        return parse_price(ticker.get("lastPrice"))

    async def funding(self, pair: str) -> FundingQuote:
        ticker = await self.client.get_ticker("linear", pair)
        return FundingQuote(
            rate_percent=parse_funding_rate(ticker.get("fundingRate")),
            next_settlement=parse_settlement_time(ticker.get("nextFundingTime")),
        )

    async def open(self) -> None:
        await self.client.open()

    async def close(self) -> None:
        await self.client.close()


__all__ = ["BybitTransport", "BybitAPIClient"]
