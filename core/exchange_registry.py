"""
Exchange Registry - Static Venue Configuration

The registry is the single source of truth for which venues are queried and in
which order. Order matters: comparison tables are rendered in registration
order, and the futures-vs-futures pairing uses it to decide which venue is "A".

The registry holds pure data. It performs no I/O and is never mutated after
construction, so it can be shared freely between concurrent requests.

Example:
    registry = build_default_registry(direct_venues=["binance", "bybit"])
    registry.describe("okx").display_name      # "OKX"
    registry.list_venues(MarketType.SPOT)      # every venue except hyperliquid
"""

from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from core.errors import UnknownVenue
from core.schemas import AccessStrategy, MarketType, VenueDescriptor


# Direct venues talk to exchange-native REST endpoints, which take "BTCUSDT"
DIRECT_SPOT_TEMPLATE = "{symbol}USDT"
DIRECT_FUTURES_TEMPLATE = "{symbol}USDT"


DEFAULT_VENUES: Tuple[VenueDescriptor, ...] = (
    VenueDescriptor(id="binance", display_name="Binance"),
    VenueDescriptor(id="bybit", display_name="Bybit"),
    VenueDescriptor(id="okx", display_name="OKX"),
    VenueDescriptor(id="bitget", display_name="Bitget"),
    VenueDescriptor(id="mexc", display_name="MEXC"),
    VenueDescriptor(id="gate", display_name="Gate.io"),
    VenueDescriptor(id="htx", display_name="HTX"),
    VenueDescriptor(
        id="hyperliquid",
        display_name="Hyperliquid",
        has_spot=False,
        spot_pair_template="",
        futures_pair_template="{symbol}/USDC:USDC",
        rate_limited=True,
    ),
)


class ExchangeRegistry:
    """
    Ordered, read-only collection of VenueDescriptors.

    Attributes:
        venues: Mapping of venue id to descriptor, in registration order

    Example:
        >>> registry = ExchangeRegistry(DEFAULT_VENUES)
        >>> registry.list_venues("futures")[:3]
        ['binance', 'bybit', 'okx']
    """

    def __init__(self, descriptors: Iterable[VenueDescriptor]):
        venues: Dict[str, VenueDescriptor] = {}
        for descriptor in descriptors:
            if descriptor.id in venues:
                raise ValueError(f"Venue '{descriptor.id}' registered twice")
            venues[descriptor.id] = descriptor

        self.venues = venues

    def describe(self, venue_id: str) -> VenueDescriptor:
        """
        Look up a venue by id (case-insensitive).

        Raises:
            UnknownVenue: If the id is not configured
        """
        descriptor = self.venues.get(venue_id.lower())
        if descriptor is None:
            raise UnknownVenue(venue_id, available=self.list_all())
        return descriptor

    def has_venue(self, venue_id: str) -> bool:
        return venue_id.lower() in self.venues

    def list_venues(self, capability) -> List[str]:
        """
        Venue ids supporting a market type, in registration order.

        Args:
            capability: MarketType or its string value ("spot" / "futures")
        """
        market = MarketType(capability)
        return [vid for vid, descriptor in self.venues.items() if descriptor.supports(market)]

    def list_all(self) -> List[str]:
        return list(self.venues.keys())

    def index_of(self, venue_id: str) -> int:
        """Registration position of a venue, used for stable ordering."""
        return self.list_all().index(self.describe(venue_id).id)

    def order(self, venue_ids: Iterable[str]) -> List[str]:
        """Return the given ids deduplicated and sorted by registration order."""
        wanted = {self.describe(vid).id for vid in venue_ids}
        return [vid for vid in self.venues if vid in wanted]

    def __iter__(self) -> Iterator[VenueDescriptor]:
        return iter(self.venues.values())

    def __len__(self) -> int:
        return len(self.venues)

    def __repr__(self) -> str:
        return f"<ExchangeRegistry(venues={self.list_all()})>"


def build_default_registry(direct_venues: Optional[Iterable[str]] = None) -> ExchangeRegistry:
    """
    Build the default venue set, switching the named venues to direct REST access.

    Direct venues get exchange-native pair templates since they bypass ccxt's
    unified symbols.

    Args:
        direct_venues: Venue ids to fetch over raw REST (settings default if None)
    """
    if direct_venues is None:
        from core.config import settings
        direct_venues = settings.direct_venues_list

    direct = {v.lower() for v in direct_venues}

    descriptors = []
    for descriptor in DEFAULT_VENUES:
        if descriptor.id in direct:
            descriptor = descriptor.model_copy(update={
                "access_strategy": AccessStrategy.DIRECT,
                "spot_pair_template": DIRECT_SPOT_TEMPLATE,
                "futures_pair_template": DIRECT_FUTURES_TEMPLATE,
            })
        descriptors.append(descriptor)

    unknown = direct - {d.id for d in DEFAULT_VENUES}
    if unknown:
        raise UnknownVenue(sorted(unknown)[0], available=[d.id for d in DEFAULT_VENUES])

    return ExchangeRegistry(descriptors)
