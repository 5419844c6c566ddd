"""
Venue Adapter - Abstract Contract for Fetching One Venue's Market Data

Every venue is served by exactly one adapter instance. Two strategies exist:

    DirectAdapter  (exchanges/direct.py)   raw REST calls through aiohttp
    CcxtAdapter    (exchanges/generic.py)  delegates to the ccxt library

Both expose the same three operations and the same failure policy:

    fetch_spot(symbol)    -> Optional[float]
    fetch_futures(symbol) -> Optional[float]
    fetch_funding(symbol) -> FundingQuote

Failure Policy:
    An adapter never raises past its public methods. Network errors, non-success
    responses, malformed payloads and timeouts are logged and turned into the
    absent value (None / FundingQuote.absent()). One venue's outage therefore
    shows up only as missing data for that venue.

    Subclasses implement the `_fetch_*` hooks, which receive the already
    rendered pair string and may raise freely.

Example:
    adapter = manager.get_adapter("okx")
    price = await adapter.fetch_futures("BTC")   # 50012.5 or None
"""

import asyncio
import math
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Optional, TypeVar

from core.logging import get_logger
from core.schemas import AccessStrategy, FundingQuote, MarketType, PricePoint, VenueDescriptor


DEFAULT_REQUEST_TIMEOUT = 4.0

T = TypeVar("T")

logger = get_logger(__name__)


# ============================================
# Normalization Helpers
# ============================================

def parse_price(raw: Any) -> PricePoint:
    """
    Convert a venue-reported price (number or numeric string) to float.

    Missing, non-numeric and non-finite values are absent. Zero stays zero.

    Examples:
        >>> parse_price("50000.5")
        50000.5
        >>> parse_price("") is None
        True
    """
    if raw is None or isinstance(raw, bool):
        return None

    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None

    if not math.isfinite(value):
        return None
    return value


def parse_funding_rate(raw: Any) -> Optional[float]:
    """
    Convert a native fractional funding rate to percentage units.

    Example:
        >>> parse_funding_rate("0.0001")
        0.01
    """
    fraction = parse_price(raw)
    if fraction is None:
        return None
    return fraction * 100


class VenueAdapter(ABC):
    """
    Abstract Base Class for Venue Adapters

    Attributes:
        descriptor: Static venue description from the registry
        timeout: Per-call timeout in seconds
        strategy: Access strategy implemented by the subclass

    Abstract Methods (MUST be implemented by all adapters):
        - _fetch_spot_price: Last spot price for a rendered spot pair
        - _fetch_futures_price: Last perpetual price for a rendered futures pair
        - _fetch_funding: Funding quote for a rendered futures pair

    Optional Methods (can be overridden):
        - initialize: Open sessions / clients
        - shutdown: Release them
    """

    strategy: AccessStrategy

    def __init__(self, descriptor: VenueDescriptor, timeout: float = DEFAULT_REQUEST_TIMEOUT):
        self.descriptor = descriptor
        self.timeout = timeout

    @property
    def venue_id(self) -> str:
        return self.descriptor.id

    # ============================================
    # Public Operations (never raise)
    # ============================================

    async def fetch_spot(self, symbol: str) -> PricePoint:
        """
        Last traded spot price for `symbol`, or None.

        Venues without a spot market return None without any network call.
        """
        if not self.descriptor.has_spot:
            return None

        pair = self.descriptor.spot_pair(symbol)
        return await self._guarded("spot", pair, self._fetch_spot_price, None)

    async def fetch_futures(self, symbol: str) -> PricePoint:
        """Last traded perpetual futures price for `symbol`, or None."""
        if not self.descriptor.has_futures:
            return None

        pair = self.descriptor.futures_pair(symbol)
        return await self._guarded("futures", pair, self._fetch_futures_price, None)

    async def fetch_funding(self, symbol: str) -> FundingQuote:
        """Current funding rate (percent) and next settlement for `symbol`."""
        if not self.descriptor.has_futures:
            return FundingQuote.absent()

        pair = self.descriptor.futures_pair(symbol)
        return await self._guarded("funding", pair, self._fetch_funding, FundingQuote.absent())

    async def _guarded(
        self,
        metric: str,
        pair: str,
        fetch: Callable[[str], Awaitable[T]],
        fallback: T,
    ) -> T:
        """Run one fetch under the per-call timeout, absorbing every failure."""
        try:
            return await asyncio.wait_for(fetch(pair), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning(f"{self.venue_id} {metric} {pair}: timed out after {self.timeout}s")
        except Exception as e:
            logger.warning(f"{self.venue_id} {metric} {pair}: {type(e).__name__}: {e}")
        return fallback

    # ============================================
    # Transport Hooks
    # ============================================

    @abstractmethod
    async def _fetch_spot_price(self, pair: str) -> PricePoint:
        ...

    @abstractmethod
    async def _fetch_futures_price(self, pair: str) -> PricePoint:
        ...

    @abstractmethod
    async def _fetch_funding(self, pair: str) -> FundingQuote:
        ...

    # ============================================
    # Optional Lifecycle Methods
    # ============================================

    async def initialize(self) -> None:
        """
        Prepare transport resources.

        Optional; adapters also create their resources lazily on first use, so
        calling this is not required before fetching.
        """
        pass

    async def shutdown(self) -> None:
        """Release transport resources. Should not raise."""
        pass

    # ============================================
    # Helper Methods
    # ============================================

    def supports(self, market) -> bool:
        return self.descriptor.supports(MarketType(market))

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(venue='{self.venue_id}', timeout={self.timeout})>"
