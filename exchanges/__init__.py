"""
Exchange Connectors Package

This package contains the two venue adapter strategies and the hand-written
REST clients used by the direct one:

- direct.py:  DirectAdapter (raw REST through aiohttp)
- generic.py: CcxtAdapter (ccxt async clients)
- binance/, bybit/: REST client + payload normalization for direct venues

create_adapter() picks the strategy from a VenueDescriptor's access_strategy.
"""

from core.schemas import AccessStrategy, VenueDescriptor
from core.venue_adapter import DEFAULT_REQUEST_TIMEOUT, VenueAdapter
from exchanges.direct import DirectAdapter
from exchanges.generic import CcxtAdapter


ADAPTER_STRATEGIES = {
    AccessStrategy.DIRECT: DirectAdapter,
    AccessStrategy.GENERIC: CcxtAdapter,
}


def create_adapter(descriptor: VenueDescriptor, timeout: float = DEFAULT_REQUEST_TIMEOUT) -> VenueAdapter:
    """Build the adapter matching the descriptor's access strategy."""
    adapter_cls = ADAPTER_STRATEGIES[AccessStrategy(descriptor.access_strategy)]
    return adapter_cls(descriptor, timeout=timeout)


__all__ = ["create_adapter", "DirectAdapter", "CcxtAdapter", "ADAPTER_STRATEGIES"]
