"""
Generic Access Strategy

CcxtAdapter delegates to the ccxt library's async clients. Each venue gets two
clients: one for spot markets and one with `defaultType="swap"` for perpetual
prices and funding rates. Clients are created on first use and closed on
shutdown.

Pair Formats (ccxt unified symbols):
    spot:    BTC/USDT
    futures: BTC/USDT:USDT   (BTC/USDC:USDC on Hyperliquid)
"""

from typing import Any, Callable, Dict, Optional

import ccxt.async_support as ccxt_async

from core.errors import TransientFetchFailure
from core.logging import get_logger
from core.schemas import AccessStrategy, FundingQuote, PricePoint, VenueDescriptor
from core.utils.time import parse_settlement_time
from core.venue_adapter import DEFAULT_REQUEST_TIMEOUT, VenueAdapter, parse_funding_rate, parse_price


logger = get_logger(__name__)


def create_ccxt_client(exchange_id: str, config: Dict[str, Any]):
    """
    Instantiate a ccxt async exchange by id.

    Raises:
        ValueError: If ccxt has no exchange with that id
    """
    exchange_cls = getattr(ccxt_async, exchange_id, None)
    if exchange_cls is None:
        raise ValueError(f"ccxt exchange '{exchange_id}' is unavailable")
    return exchange_cls(config)


class CcxtAdapter(VenueAdapter):
    """
    Venue adapter backed by ccxt.

    Args:
        descriptor: Venue description; `ccxt_id` selects the ccxt class
        timeout: Per-call timeout in seconds (passed to ccxt in milliseconds)
        client_factory: Callable(exchange_id, config) -> client; tests inject fakes
    """

    strategy = AccessStrategy.GENERIC

    def __init__(
        self,
        descriptor: VenueDescriptor,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        client_factory: Optional[Callable] = None,
    ):
        super().__init__(descriptor, timeout)
        self.client_factory = client_factory or create_ccxt_client
        self._spot_client = None
        self._swap_client = None

    # ============================================
    # Client Management
    # ============================================

    def _client_config(self, swap: bool) -> Dict[str, Any]:
        config = {
            "enableRateLimit": self.descriptor.rate_limited,
            "timeout": int(self.timeout * 1000),
        }
        if swap:
            config["options"] = {"defaultType": "swap"}
        return config

    @property
    def spot_client(self):
        if self._spot_client is None:
            self._spot_client = self.client_factory(self.descriptor.ccxt_id, self._client_config(swap=False))
        return self._spot_client

    @property
    def swap_client(self):
        if self._swap_client is None:
            self._swap_client = self.client_factory(self.descriptor.ccxt_id, self._client_config(swap=True))
        return self._swap_client

    # ============================================
    # Transport Hooks
    # ============================================

    async def _fetch_spot_price(self, pair: str) -> PricePoint:
        ticker = await self.spot_client.fetch_ticker(pair)
        return self._last_price(ticker, pair)

    async def _fetch_futures_price(self, pair: str) -> PricePoint:
        ticker = await self.swap_client.fetch_ticker(pair)
        return self._last_price(ticker, pair)

    async def _fetch_funding(self, pair: str) -> FundingQuote:
        funding = await self.swap_client.fetch_funding_rate(pair)
        if not isinstance(funding, dict):
            raise TransientFetchFailure(self.venue_id, f"Unexpected funding payload for {pair}")

        next_ts = funding.get("nextFundingTimestamp") or funding.get("fundingTimestamp")
        return FundingQuote(
            rate_percent=parse_funding_rate(funding.get("fundingRate")),
            next_settlement=parse_settlement_time(next_ts),
        )

    def _last_price(self, ticker, pair: str) -> PricePoint:
        if not isinstance(ticker, dict):
            raise TransientFetchFailure(self.venue_id, f"Unexpected ticker payload for {pair}")
        return parse_price(ticker.get("last"))

    # ============================================
    # Lifecycle
    # ============================================

    async def shutdown(self) -> None:
        """Close both ccxt clients; errors are logged, not raised."""
        for client in (self._spot_client, self._swap_client):
            if client is None:
                continue
            try:
                await client.close()
            except Exception as e:
                logger.error(f"Error closing ccxt client for {self.venue_id}: {e}")

        self._spot_client = None
        self._swap_client = None
