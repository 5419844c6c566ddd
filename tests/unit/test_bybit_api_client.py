"""
Unit Tests for Bybit API Client and Transport

Run with:
    pytest tests/unit/test_bybit_api_client.py -v
"""

import pytest
import pytest_asyncio

from core.errors import TransientFetchFailure
from exchanges.bybit import BybitTransport
from exchanges.bybit.api_client import BybitAPIClient


class MockResponse:
    def __init__(self, status, json_data=None):
        self.status = status
        self._json_data = json_data

    async def json(self, content_type=None):
        return self._json_data

    async def text(self):
        return "error"

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        pass


class MockSession:
    def __init__(self, response):
        self.response = response
        self.calls = []
        self.closed = False

    def get(self, url, params=None):
        self.calls.append((url, params))
        return self.response

    async def close(self):
        self.closed = True


@pytest.fixture
def api_client():
    return BybitAPIClient(base_url="https://bybit.test", timeout=1.0)


@pytest_asyncio.fixture
async def transport():
    transport = BybitTransport(timeout=1.0)
    yield transport
    await transport.close()


class TestEnvelope:
    """Tests for the retCode/result envelope"""

    @pytest.mark.asyncio
    async def test_get_returns_result(self, api_client):
        session = MockSession(MockResponse(200, {
            "retCode": 0,
            "retMsg": "OK",
            "result": {"category": "spot", "list": [{"symbol": "BTCUSDT", "lastPrice": "50000"}]},
        }))
        api_client.session = session

        result = await api_client._get("/tickers", {"category": "spot", "symbol": "BTCUSDT"})

        assert result["list"][0]["lastPrice"] == "50000"
        assert session.calls[0][0] == "https://bybit.test/v5/market/tickers"

    @pytest.mark.asyncio
    async def test_get_raises_on_ret_code(self, api_client):
        api_client.session = MockSession(MockResponse(200, {"retCode": 10001, "retMsg": "params error"}))

        with pytest.raises(TransientFetchFailure, match="params error"):
            await api_client._get("/tickers", {"category": "spot"})

    @pytest.mark.asyncio
    async def test_get_raises_on_http_error(self, api_client):
        api_client.session = MockSession(MockResponse(403))

        with pytest.raises(TransientFetchFailure, match="HTTP 403"):
            await api_client._get("/tickers")


class TestGetTicker:
    """Tests for get_ticker"""

    @pytest.mark.asyncio
    async def test_get_ticker_passes_category_and_symbol(self, api_client, monkeypatch):
        called = {}

        async def mock_get(endpoint, params=None):
            called.update(endpoint=endpoint, params=params)
            return {"list": [{"symbol": "ETHUSDT", "lastPrice": "2650.1"}]}

        monkeypatch.setattr(api_client, "_get", mock_get)

        ticker = await api_client.get_ticker("linear", "ethusdt")

        assert ticker["lastPrice"] == "2650.1"
        assert called["endpoint"] == "/tickers"
        assert called["params"] == {"category": "linear", "symbol": "ETHUSDT"}

    @pytest.mark.asyncio
    async def test_get_ticker_unlisted_symbol(self, api_client, monkeypatch):
        async def mock_get(endpoint, params=None):
            return {"category": "spot", "list": []}

        monkeypatch.setattr(api_client, "_get", mock_get)

        with pytest.raises(TransientFetchFailure):
            await api_client.get_ticker("spot", "NOPEUSDT")


class TestBybitTransport:
    """Tests for payload normalization"""

    @pytest.mark.asyncio
    async def test_spot_uses_spot_category(self, transport, monkeypatch):
        categories = []

        async def mock_ticker(category, symbol):
            categories.append(category)
            return {"symbol": symbol, "lastPrice": "50000.5"}

        monkeypatch.setattr(transport.client, "get_ticker", mock_ticker)

        assert await transport.spot_price("BTCUSDT") == 50000.5
        assert await transport.futures_price("BTCUSDT") == 50000.5
        assert categories == ["spot", "linear"]

    @pytest.mark.asyncio
    async def test_funding_from_linear_ticker(self, transport, monkeypatch):
        async def mock_ticker(category, symbol):
            assert category == "linear"
            return {"lastPrice": "50010", "fundingRate": "0.000125", "nextFundingTime": "1704096000000"}

        monkeypatch.setattr(transport.client, "get_ticker", mock_ticker)

        quote = await transport.funding("BTCUSDT")

        assert quote.rate_percent == pytest.approx(0.0125)
        assert quote.next_settlement is not None

    @pytest.mark.asyncio
    async def test_missing_funding_rate_is_absent(self, transport, monkeypatch):
        async def mock_ticker(category, symbol):
            return {"lastPrice": "50010", "fundingRate": ""}

        monkeypatch.setattr(transport.client, "get_ticker", mock_ticker)

        quote = await transport.funding("BTCUSDT")

        assert quote.rate_percent is None
        assert quote.next_settlement is None
