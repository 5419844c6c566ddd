"""
Direct Access Strategy

DirectAdapter fetches market data with hand-written REST clients instead of
ccxt. It is used for the few high-traffic venues whose ccxt path is unreliable
from the deployment's network location. The contract, timeout and
normalization rules are identical to the generic strategy.

Each direct venue provides a transport with three coroutines:

    spot_price(pair)    -> Optional[float]
    futures_price(pair) -> Optional[float]
    funding(pair)       -> FundingQuote

plus open()/close() for its HTTP session.
"""

from typing import Callable, Dict

from core.logging import get_logger
from core.schemas import AccessStrategy, FundingQuote, PricePoint, VenueDescriptor
from core.venue_adapter import DEFAULT_REQUEST_TIMEOUT, VenueAdapter
from exchanges.binance import BinanceTransport
from exchanges.bybit import BybitTransport


logger = get_logger(__name__)


# Venue id -> transport factory taking the per-call timeout
DIRECT_TRANSPORTS: Dict[str, Callable] = {
    "binance": BinanceTransport,
    "bybit": BybitTransport,
}


class DirectAdapter(VenueAdapter):
    """
    Venue adapter backed by a raw REST transport.

    Args:
        descriptor: Venue description (access_strategy should be "direct")
        timeout: Per-call timeout in seconds
        transport: Optional pre-built transport (tests inject fakes here)

    Raises:
        ValueError: If no transport exists for the venue
    """

    strategy = AccessStrategy.DIRECT

    def __init__(self, descriptor: VenueDescriptor, timeout: float = DEFAULT_REQUEST_TIMEOUT, transport=None):
        super().__init__(descriptor, timeout)

        if transport is None:
            factory = DIRECT_TRANSPORTS.get(descriptor.id)
            if factory is None:
                raise ValueError(
                    f"No direct REST transport for '{descriptor.id}'. "
                    f"Available: {', '.join(DIRECT_TRANSPORTS)}"
                )
            transport = factory(timeout=timeout)

        self.transport = transport

    async def _fetch_spot_price(self, pair: str) -> PricePoint:
        return await self.transport.spot_price(pair)

    async def _fetch_futures_price(self, pair: str) -> PricePoint:
        return await self.transport.futures_price(pair)

    async def _fetch_funding(self, pair: str) -> FundingQuote:
        return await self.transport.funding(pair)

    async def initialize(self) -> None:
        await self.transport.open()
        logger.debug(f"{self.venue_id} direct transport ready")

    async def shutdown(self) -> None:
        await self.transport.close()
        logger.debug(f"{self.venue_id} direct transport closed")
