"""
Unit Tests for the HTTP API

The module-level aggregator is replaced with a stub, so no exchange is
contacted. TestClient is used without a `with` block so the lifespan (which
opens venue sessions) does not run.

Run with:
    pytest tests/unit/test_api.py -v
"""

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

import app.main as main
from core.aggregator import normalize_symbol
from core.schemas import AggregateResult, FundingQuote


class StubAggregator:
    """Returns fixed prices and records the venues it was asked for"""

    def __init__(self):
        self.requests = []

    async def aggregate(self, symbol=None, venues=None):
        normalized = normalize_symbol(symbol, "BTC")
        venue_ids = main.manager.registry.order(venues) if venues is not None else main.manager.list_venues()
        self.requests.append((normalized, venue_ids))

        futures = {"binance": 100.0, "bybit": 100.3, "okx": 99.0, "hyperliquid": None}
        spot = {"binance": 99.9, "bybit": 100.0, "okx": 0.0, "hyperliquid": None}
        funding = {
            "binance": FundingQuote(
                rate_percent=0.01,
                next_settlement=datetime(2024, 1, 1, 8, 0, tzinfo=timezone.utc),
            ),
            "bybit": FundingQuote(rate_percent=0.02),
        }
        return AggregateResult(
            symbol=normalized,
            spot={v: spot.get(v) for v in venue_ids},
            futures={v: futures.get(v) for v in venue_ids},
            funding={v: funding.get(v, FundingQuote.absent()) for v in venue_ids},
        )


@pytest.fixture
def stub(monkeypatch):
    stub = StubAggregator()
    monkeypatch.setattr(main, "aggregator", stub)
    return stub


@pytest.fixture
def client(stub):
    return TestClient(main.app)


class TestSystemEndpoints:
    """Tests for / and /exchanges"""

    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["venues"] == main.manager.list_venues()

    def test_exchanges(self, client):
        response = client.get("/exchanges")
        exchanges = {e["id"]: e for e in response.json()["exchanges"]}

        assert exchanges["hyperliquid"]["has_spot"] is False
        assert exchanges["okx"]["access_strategy"] == "generic"


class TestPrices:
    """Tests for /api/prices"""

    def test_payload_shape(self, client, monkeypatch):
        monkeypatch.setattr(main.settings, "display_timezone", "Asia/Seoul")

        response = client.get("/api/prices", params={"symbol": " eth "})
        body = response.json()

        assert response.status_code == 200
        assert set(body) == {"spot", "futures", "funding"}
        assert set(body["futures"]) == set(main.manager.list_venues())
        assert body["spot"]["hyperliquid"] is None
        assert body["spot"]["okx"] == 0.0
        assert body["funding"]["binance"] == {"rate": 0.01, "nextTime": "17:00"}
        assert body["funding"]["okx"] == {"rate": None, "nextTime": "N/A"}

    def test_symbol_is_normalized(self, client, stub):
        client.get("/api/prices", params={"symbol": " eth "})
        assert stub.requests[0][0] == "ETH"

    def test_default_symbol(self, client, stub):
        client.get("/api/prices")
        assert stub.requests[0][0] == "BTC"

    def test_invalid_symbol_is_400(self, client):
        response = client.get("/api/prices", params={"symbol": "BTC/USDT"})
        assert response.status_code == 400


class TestPremium:
    """Tests for /api/premium"""

    def test_rows_for_selection(self, client):
        response = client.get("/api/premium", params={"futures": "bybit,binance", "spot": "binance,okx"})
        rows = response.json()

        assert response.status_code == 200
        assert [(r["futures_venue"], r["spot_venue"]) for r in rows] == [
            ("binance", "binance"), ("binance", "okx"), ("bybit", "binance"), ("bybit", "okx"),
        ]
        assert rows[0]["premium"] == pytest.approx(0.1001, rel=1e-3)
        assert rows[1]["premium"] is None

    def test_spot_selection_skips_venues_without_spot(self, client):
        rows = client.get("/api/premium", params={"futures": "binance", "spot": "hyperliquid,okx"}).json()
        assert [r["spot_venue"] for r in rows] == ["okx"]

    def test_unknown_venue_is_404(self, client):
        response = client.get("/api/premium", params={"futures": "ftx"})
        assert response.status_code == 404

    def test_invalid_symbol_is_400(self, client):
        response = client.get("/api/premium", params={"symbol": "??", "futures": "", "spot": ""})
        assert response.status_code == 400


class TestGaps:
    """Tests for /api/gaps"""

    def test_sorted_rows(self, client):
        response = client.get("/api/gaps", params={"venues": "okx,binance,bybit,hyperliquid"})
        rows = response.json()

        assert response.status_code == 200
        assert len(rows) == 6
        assert (rows[0]["venue_a"], rows[0]["venue_b"]) == ("bybit", "okx")
        assert rows[0]["highlight"] is True
        assert rows[-1]["gap"] is None

    def test_pair_orientation_follows_registry(self, client):
        rows = client.get("/api/gaps", params={"venues": "bybit,binance"}).json()

        assert len(rows) == 1
        assert rows[0]["venue_a"] == "binance"
        assert rows[0]["gap"] == pytest.approx(0.3)
        assert rows[0]["funding_diff"] == pytest.approx(0.01)

    def test_single_venue_returns_empty(self, client, stub):
        assert client.get("/api/gaps", params={"venues": "okx"}).json() == []
        assert stub.requests == []
