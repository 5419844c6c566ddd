"""
Unit Tests for the Price Aggregator

These tests verify that:
- Every requested venue appears in every result map
- A hung or failing call only blanks its own slot
- Total latency is bounded by the per-call timeout, not the sum of calls
- Symbols are normalized before any venue is queried

Run with:
    pytest tests/unit/test_aggregator.py -v
"""

import asyncio

import pytest

from core.aggregator import PriceAggregator, normalize_symbol
from core.errors import InvalidSymbol, UnknownVenue
from core.exchange_manager import ExchangeManager
from core.exchange_registry import build_default_registry
from core.schemas import AccessStrategy, FundingQuote
from core.venue_adapter import VenueAdapter


# ============================================
# Test Doubles
# ============================================

class StubAdapter(VenueAdapter):
    """Returns prices derived from the venue's registry position"""

    strategy = AccessStrategy.GENERIC

    hang = set()
    fail = set()
    symbols = []

    async def _answer(self, metric, value):
        self.symbols.append(self.venue_id)
        if (self.venue_id, metric) in self.hang:
            await asyncio.Event().wait()
        if (self.venue_id, metric) in self.fail:
            raise ConnectionError("boom")
        return value

    async def _fetch_spot_price(self, pair):
        return await self._answer("spot", 100.0)

    async def _fetch_futures_price(self, pair):
        return await self._answer("futures", 101.0)

    async def _fetch_funding(self, pair):
        return await self._answer("funding", FundingQuote(rate_percent=0.01))


class RaisingAdapter(StubAdapter):
    """Breaks the never-raise contract to exercise the aggregator's own guard"""

    async def fetch_spot(self, symbol):
        raise RuntimeError("adapter bug")

    async def fetch_futures(self, symbol):
        await asyncio.Event().wait()


@pytest.fixture
def registry():
    return build_default_registry(direct_venues=[])


@pytest.fixture(autouse=True)
def reset_stub_state():
    StubAdapter.hang = set()
    StubAdapter.fail = set()
    StubAdapter.symbols = []
    yield


def make_aggregator(registry, adapter_cls=StubAdapter, timeout=0.1):
    manager = ExchangeManager(registry=registry, timeout=timeout, adapter_factory=adapter_cls)
    return PriceAggregator(manager, default_symbol="BTC")


# ============================================
# Symbol Normalization
# ============================================

class TestNormalizeSymbol:
    """Tests for normalize_symbol()"""

    @pytest.mark.parametrize("raw,expected", [
        (" eth ", "ETH"),
        ("btc", "BTC"),
        ("1000PEPE", "1000PEPE"),
        (None, "BTC"),
        ("", "BTC"),
        ("   ", "BTC"),
    ])
    def test_normalize(self, raw, expected):
        assert normalize_symbol(raw) == expected

    @pytest.mark.parametrize("raw", ["BTC/USDT", "BTC-USD", "e th", "$ETH", "BTC²", "ß", "ＢＴＣ"])
    def test_malformed_symbol_rejected(self, raw):
        with pytest.raises(InvalidSymbol):
            normalize_symbol(raw)

    def test_invalid_default_rejected(self):
        with pytest.raises(InvalidSymbol):
            normalize_symbol(None, default="")


# ============================================
# Aggregation
# ============================================

class TestAggregate:
    """Tests for PriceAggregator.aggregate()"""

    @pytest.mark.asyncio
    async def test_every_venue_in_every_map(self, registry):
        aggregator = make_aggregator(registry)

        result = await aggregator.aggregate("btc")

        expected = set(registry.list_all())
        assert result.symbol == "BTC"
        assert set(result.spot) == expected
        assert set(result.futures) == expected
        assert set(result.funding) == expected

    @pytest.mark.asyncio
    async def test_keys_follow_registry_order(self, registry):
        result = await make_aggregator(registry).aggregate("BTC")
        assert list(result.futures) == registry.list_all()

    @pytest.mark.asyncio
    async def test_venue_without_spot_is_none(self, registry):
        result = await make_aggregator(registry).aggregate("ETH")

        assert result.spot["hyperliquid"] is None
        assert result.futures["hyperliquid"] == 101.0
        assert result.spot["okx"] == 100.0

    @pytest.mark.asyncio
    async def test_hung_call_only_blanks_its_slot(self, registry):
        StubAdapter.hang = {("okx", "futures")}
        aggregator = make_aggregator(registry, timeout=0.05)

        loop = asyncio.get_running_loop()
        started = loop.time()
        result = await aggregator.aggregate("BTC")
        elapsed = loop.time() - started

        assert result.futures["okx"] is None
        assert result.spot["okx"] == 100.0
        assert result.funding["okx"].rate_percent == 0.01
        assert result.futures["binance"] == 101.0
        assert elapsed < 1.0

    @pytest.mark.asyncio
    async def test_all_calls_hang_still_completes(self, registry):
        StubAdapter.hang = {(vid, m) for vid in registry.list_all() for m in ("spot", "futures", "funding")}
        aggregator = make_aggregator(registry, timeout=0.05)

        result = await asyncio.wait_for(aggregator.aggregate("BTC"), timeout=2.0)

        assert all(v is None for v in result.futures.values())
        assert result.missing_count() == 3 * len(registry)

    @pytest.mark.asyncio
    async def test_failed_call_is_absent(self, registry):
        StubAdapter.fail = {("bybit", "funding")}

        result = await make_aggregator(registry).aggregate("BTC")

        assert result.funding["bybit"] == FundingQuote.absent()
        assert result.futures["bybit"] == 101.0

    @pytest.mark.asyncio
    async def test_raising_adapter_is_contained(self, registry):
        aggregator = make_aggregator(registry, adapter_cls=RaisingAdapter, timeout=0.05)

        result = await aggregator.aggregate("BTC")

        assert all(v is None for v in result.spot.values())
        assert all(v is None for v in result.futures.values())
        assert result.funding["okx"].rate_percent == 0.01

    @pytest.mark.asyncio
    async def test_venue_subset(self, registry):
        aggregator = make_aggregator(registry)

        result = await aggregator.aggregate("BTC", venues=["hyperliquid", "binance"])

        assert list(result.futures) == ["binance", "hyperliquid"]
        assert set(StubAdapter.symbols) == {"binance", "hyperliquid"}

    @pytest.mark.asyncio
    async def test_unknown_venue(self, registry):
        with pytest.raises(UnknownVenue):
            await make_aggregator(registry).aggregate("BTC", venues=["ftx"])

    @pytest.mark.asyncio
    async def test_invalid_symbol_makes_no_calls(self, registry):
        with pytest.raises(InvalidSymbol):
            await make_aggregator(registry).aggregate("BTC/USDT")

        assert StubAdapter.symbols == []

    @pytest.mark.asyncio
    async def test_default_symbol(self, registry):
        result = await make_aggregator(registry).aggregate()
        assert result.symbol == "BTC"


# ============================================
# Per-Venue Snapshots
# ============================================

class TestSnapshot:
    """Tests for AggregateResult.snapshot() and venues"""

    @pytest.mark.asyncio
    async def test_snapshot_bundles_one_venue(self, registry):
        result = await make_aggregator(registry).aggregate("ETH")

        snapshot = result.snapshot("hyperliquid")

        assert snapshot.venue_id == "hyperliquid"
        assert snapshot.spot is None
        assert snapshot.futures == 101.0
        assert snapshot.funding.rate_percent == 0.01

    @pytest.mark.asyncio
    async def test_snapshot_unknown_venue_is_all_absent(self, registry):
        result = await make_aggregator(registry).aggregate("ETH")

        snapshot = result.snapshot("ftx")

        assert snapshot.spot is None
        assert snapshot.futures is None
        assert snapshot.funding == FundingQuote.absent()

    @pytest.mark.asyncio
    async def test_venues_follow_request_order(self, registry):
        result = await make_aggregator(registry).aggregate("BTC", venues=["okx", "binance"])
        assert result.venues == ["binance", "okx"]
