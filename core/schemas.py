"""
Normalized Data Schemas

This module defines Pydantic models for venue configuration, aggregated
market data and the comparison rows derived from it.

Key Principle:
    Regardless of which venue the data comes from or which transport fetched it
    (raw REST or ccxt), it gets normalized into these schemas. A missing value
    is always None, never 0, so consumers can tell "no data" from a real price.

Models:
    - VenueDescriptor: Static identity and quirks of one exchange
    - FundingQuote: Funding rate (in percent) and next settlement instant
    - VenueSnapshot: Spot, futures and funding for a single venue
    - AggregateResult: Per-metric maps keyed by venue id
    - PremiumRow: Spot vs futures comparison on a venue pair
    - GapRow: Futures vs futures comparison on a venue pair
"""

from datetime import datetime, tzinfo
from enum import Enum
from typing import Dict, Optional, Any

from pydantic import BaseModel, Field, ConfigDict, field_validator

from core.utils.time import format_settlement_time


# A last traded price; None means unknown/unavailable
PricePoint = Optional[float]


# ============================================
# Venue Configuration
# ============================================

class AccessStrategy(str, Enum):
    """How a venue's market data is fetched."""

    DIRECT = "direct"
    GENERIC = "generic"


class MarketType(str, Enum):
    """Market capability used to filter the registry."""

    SPOT = "spot"
    FUTURES = "futures"


class VenueDescriptor(BaseModel):
    """
    Static description of one exchange.

    Pair templates contain a `{symbol}` placeholder that is substituted with the
    normalized asset symbol. Generic venues use ccxt unified symbols
    ("BTC/USDT", "BTC/USDT:USDT"); direct venues use the exchange-native
    form ("BTCUSDT").

    Example:
        >>> VenueDescriptor(
        ...     id="hyperliquid",
        ...     display_name="Hyperliquid",
        ...     has_spot=False,
        ...     has_futures=True,
        ...     futures_pair_template="{symbol}/USDC:USDC",
        ...     rate_limited=True,
        ... )
    """

    id: str = Field(..., description="Unique venue key (lowercase)", examples=["binance", "okx"])
    display_name: str = Field(..., description="Human readable name")
    has_spot: bool = Field(True, description="Venue lists a spot market")
    has_futures: bool = Field(True, description="Venue lists a perpetual futures market")
    spot_pair_template: str = Field("{symbol}/USDT", description="Spot pair template")
    futures_pair_template: str = Field("{symbol}/USDT:USDT", description="Futures pair template")
    access_strategy: AccessStrategy = Field(AccessStrategy.GENERIC)
    client_id: Optional[str] = Field(None, description="ccxt exchange class name (defaults to id)")
    rate_limited: bool = Field(False, description="Enable ccxt's client-side rate limiter")

    model_config = ConfigDict(frozen=True)

    @field_validator("id")
    @classmethod
    def validate_id(cls, v: str) -> str:
        """Ensure venue id is lowercase"""
        return v.lower()

    @property
    def ccxt_id(self) -> str:
        return self.client_id or self.id

    def supports(self, market: MarketType) -> bool:
        """True if the venue lists the given market type."""
        if MarketType(market) is MarketType.SPOT:
            return self.has_spot
        return self.has_futures

    def spot_pair(self, symbol: str) -> str:
        return self.spot_pair_template.format(symbol=symbol)

    def futures_pair(self, symbol: str) -> str:
        return self.futures_pair_template.format(symbol=symbol)


# ============================================
# Market Data
# ============================================

class FundingQuote(BaseModel):
    """
    Funding rate for a perpetual contract.

    Attributes:
        rate_percent: Funding rate already multiplied by 100 (0.0001 -> 0.01)
        next_settlement: Next settlement instant in UTC, None if unavailable
    """

    rate_percent: Optional[float] = None
    next_settlement: Optional[datetime] = None

    model_config = ConfigDict(frozen=True)

    @classmethod
    def absent(cls) -> "FundingQuote":
        return cls()

    def to_payload(self, tz: Optional[tzinfo] = None) -> Dict[str, Any]:
        """Render as {"rate": float|None, "nextTime": "HH:MM"|"N/A"}."""
        return {
            "rate": self.rate_percent,
            "nextTime": format_settlement_time(self.next_settlement, tz),
        }


class VenueSnapshot(BaseModel):
    """Spot, futures and funding for one venue, assembled once per aggregation."""

    venue_id: str
    spot: PricePoint = None
    futures: PricePoint = None
    funding: FundingQuote = Field(default_factory=FundingQuote)

    model_config = ConfigDict(frozen=True)


class AggregateResult(BaseModel):
    """
    Aggregated market data for one symbol.

    Every requested venue id is present as a key in each of the three maps,
    with None (or an absent FundingQuote) when the call failed.

    Example:
        >>> result.spot["hyperliquid"] is None
        True
        >>> result.to_payload()["funding"]["binance"]
        {'rate': 0.01, 'nextTime': '09:00'}
    """

    symbol: str
    spot: Dict[str, PricePoint] = Field(default_factory=dict)
    futures: Dict[str, PricePoint] = Field(default_factory=dict)
    funding: Dict[str, FundingQuote] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)

    @property
    def venues(self):
        return list(self.futures.keys())

    def snapshot(self, venue_id: str) -> VenueSnapshot:
        """Bundle the three metrics of one venue."""
        return VenueSnapshot(
            venue_id=venue_id,
            spot=self.spot.get(venue_id),
            futures=self.futures.get(venue_id),
            funding=self.funding.get(venue_id) or FundingQuote.absent(),
        )

    def funding_rate(self, venue_id: str) -> Optional[float]:
        quote = self.funding.get(venue_id)
        return quote.rate_percent if quote else None

    def missing_count(self) -> int:
        """Number of (venue, metric) slots that came back absent."""
        return (
            sum(1 for v in self.spot.values() if v is None)
            + sum(1 for v in self.futures.values() if v is None)
            + sum(1 for q in self.funding.values() if q.rate_percent is None)
        )

    def to_payload(self, tz: Optional[tzinfo] = None) -> Dict[str, Any]:
        """
        JSON-serializable shape consumed by the dashboard.

        {
          "spot":    {venue: float|None},
          "futures": {venue: float|None},
          "funding": {venue: {"rate": float|None, "nextTime": str}}
        }
        """
        return {
            "spot": dict(self.spot),
            "futures": dict(self.futures),
            "funding": {venue: quote.to_payload(tz) for venue, quote in self.funding.items()},
        }


# ============================================
# Comparison Rows
# ============================================

class PremiumRow(BaseModel):
    """Spot vs futures comparison for one (futures venue, spot venue) pair."""

    futures_venue: str
    spot_venue: str
    futures_price: PricePoint = None
    spot_price: PricePoint = None
    premium: Optional[float] = Field(None, description="(futures - spot) / spot * 100")
    highlight: bool = False

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "futures_venue": "binance",
                "spot_venue": "okx",
                "futures_price": 50050.0,
                "spot_price": 50000.0,
                "premium": 0.1,
                "highlight": False
            }
        }
    )


class GapRow(BaseModel):
    """Futures vs futures comparison for one unordered venue pair (A listed first)."""

    venue_a: str
    venue_b: str
    price_a: PricePoint = None
    price_b: PricePoint = None
    funding_a: Optional[float] = None
    funding_b: Optional[float] = None
    gap: Optional[float] = Field(None, description="(price_b - price_a) / price_a * 100")
    funding_diff: Optional[float] = Field(None, description="funding_b - funding_a")
    highlight: bool = False

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "venue_a": "binance",
                "venue_b": "hyperliquid",
                "price_a": 50000.0,
                "price_b": 50300.0,
                "funding_a": 0.01,
                "funding_b": 0.0125,
                "gap": 0.6,
                "funding_diff": 0.0025,
                "highlight": True
            }
        }
    )
