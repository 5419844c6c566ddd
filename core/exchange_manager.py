"""
Exchange Manager - Central Registry of Venue Adapters

The ExchangeManager pairs the static ExchangeRegistry with one VenueAdapter per
venue. The adapter strategy (direct REST or ccxt) is chosen once, here, from
each descriptor's access_strategy, so the rest of the system never branches on
venue identity.

Design Benefits:
    - Single place where strategy selection happens
    - Centralized lifecycle management (initialize/shutdown)
    - Aggregator and HTTP layer work against VenueAdapter only

Example Usage:
    manager = ExchangeManager()
    await manager.initialize_all()

    adapter = manager.get_adapter("okx")       # CcxtAdapter
    price = await adapter.fetch_spot("BTC")

    await manager.shutdown_all()
"""

from typing import Callable, Dict, List, Optional

from core.exchange_registry import ExchangeRegistry, build_default_registry
from core.logging import logger
from core.schemas import VenueDescriptor
from core.venue_adapter import VenueAdapter


class ExchangeManager:
    """
    Central Manager for Venue Adapters

    Attributes:
        registry: Static venue configuration
        timeout: Per-call timeout handed to every adapter
        adapters: Venue id -> adapter instance, in registry order

    Example:
        >>> manager = ExchangeManager(timeout=4.0)
        >>> manager.list_venues()
        ['binance', 'bybit', 'okx', 'bitget', 'mexc', 'gate', 'htx', 'hyperliquid']
        >>> manager.get_adapter("binance")
        <DirectAdapter(venue='binance', timeout=4.0)>
    """

    def __init__(
        self,
        registry: Optional[ExchangeRegistry] = None,
        timeout: Optional[float] = None,
        adapter_factory: Optional[Callable[[VenueDescriptor, float], VenueAdapter]] = None,
    ):
        """
        Build one adapter per registered venue.

        Args:
            registry: Venue registry (default venue set if None)
            timeout: Per-call timeout (settings.request_timeout if None)
            adapter_factory: Callable(descriptor, timeout) -> adapter
                             (exchanges.create_adapter if None)
        """
        if timeout is None:
            from core.config import settings
            timeout = settings.request_timeout

        if adapter_factory is None:
            # exchanges imports core modules, so import lazily
            from exchanges import create_adapter
            adapter_factory = create_adapter

        self.registry = registry or build_default_registry()
        self.timeout = timeout
        self.adapters: Dict[str, VenueAdapter] = {
            descriptor.id: adapter_factory(descriptor, timeout)
            for descriptor in self.registry
        }

        strategies = ", ".join(
            f"{vid}={adapter.strategy.value}" for vid, adapter in self.adapters.items()
        )
        logger.info(f"ExchangeManager initialized with {len(self.adapters)} venue(s): {strategies}")

    # ============================================
    # Adapter Retrieval Methods
    # ============================================

    def get_adapter(self, venue_id: str) -> VenueAdapter:
        """
        Get the adapter for a venue.

        Raises:
            UnknownVenue: If the venue is not configured
        """
        descriptor = self.registry.describe(venue_id)
        return self.adapters[descriptor.id]

    def describe(self, venue_id: str) -> VenueDescriptor:
        return self.registry.describe(venue_id)

    def list_venues(self) -> List[str]:
        return self.registry.list_all()

    # ============================================
    # Lifecycle Management
    # ============================================

    async def initialize_all(self) -> None:
        """
        Initialize every adapter. A venue that fails to initialize is logged
        and left to create its resources lazily on first use.
        """
        logger.info("Initializing all venue adapters...")

        for name, adapter in self.adapters.items():
            try:
                await adapter.initialize()
                logger.debug(f"✓ {name} initialized")
            except Exception as e:
                logger.error(f"✗ Failed to initialize {name}: {e}")

        logger.info("All venue adapters initialized")

    async def shutdown_all(self) -> None:
        """Shutdown every adapter, continuing past individual failures."""
        logger.info("Shutting down all venue adapters...")

        for name, adapter in self.adapters.items():
            try:
                await adapter.shutdown()
                logger.debug(f"✓ {name} shut down")
            except Exception as e:
                logger.error(f"✗ Error shutting down {name}: {e}")

        logger.info("All venue adapters shut down")

    # ============================================
    # Utility Methods
    # ============================================

    def __repr__(self) -> str:
        return f"<ExchangeManager(venues={self.list_venues()})>"

    def __len__(self) -> int:
        return len(self.adapters)
