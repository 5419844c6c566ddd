"""
FastAPI Application - Cross-Exchange Premium / Gap API

Serves spot, futures and funding data for one asset across exchanges, plus the
premium (spot vs futures) and gap (futures vs futures) tables derived from it.

Supported Venues:
    Binance, Bybit (direct REST), OKX, Bitget, MEXC, Gate.io, HTX, Hyperliquid (ccxt)

Usage:
    uvicorn app.main:app --reload --host 0.0.0.0 --port 8000

Docs:
    - Swagger: http://localhost:8000/docs
    - ReDoc: http://localhost:8000/redoc
"""

from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware

from core.aggregator import PriceAggregator, normalize_symbol
from core.config import settings, validate_configuration
from core.errors import InvalidSymbol, UnknownVenue
from core.exchange_manager import ExchangeManager
from core.logging import logger
from core.metrics import MetricsEngine
from core.schemas import GapRow, MarketType, PremiumRow


# ============================================
# Lifespan Management
# ============================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle application startup and shutdown."""
    logger.info("=== Application Starting ===")
    try:
        validate_configuration()
        await manager.initialize_all()
        logger.info("=== Started Successfully ===")
    except Exception as e:
        logger.error(f"Startup failed: {e}")
        raise

    yield

    logger.info("=== Shutting Down ===")
    try:
        await manager.shutdown_all()
        logger.info("=== Shutdown Complete ===")
    except Exception as e:
        logger.error(f"Shutdown error: {e}")


# ============================================
# FastAPI Application
# ============================================

app = FastAPI(
    title="Cross-Exchange Premium / Gap API",
    description=(
        "Spot, futures and funding data for one asset across exchanges.\n\n"
        "## REST Endpoints\n"
        "- `GET /api/prices?symbol=BTC` - Per-venue spot/futures/funding\n"
        "- `GET /api/premium?symbol=BTC&futures=binance,okx&spot=bybit` - Spot vs futures premium rows\n"
        "- `GET /api/gaps?symbol=BTC&venues=binance,okx,hyperliquid` - Futures vs futures gap rows\n"
        "- `GET /exchanges` - Configured venues\n\n"
        "Missing data is `null` (funding time `\"N/A\"`), never an error."
    ),
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"]
)

manager = ExchangeManager(timeout=settings.request_timeout)
aggregator = PriceAggregator(manager, default_symbol=settings.default_symbol)
engine = MetricsEngine(threshold=settings.highlight_threshold)


# ============================================
# Helpers
# ============================================

def _parse_selection(raw: Optional[str], capability: MarketType) -> List[str]:
    """
    Comma-separated venue ids -> registry-ordered ids supporting `capability`.

    None selects every venue with the capability.

    Raises:
        HTTPException(404): If a venue id is not configured
    """
    available = manager.registry.list_venues(capability)
    if raw is None:
        return available

    requested = [v.strip() for v in raw.split(",") if v.strip()]
    try:
        ordered = manager.registry.order(requested)
    except UnknownVenue as e:
        raise HTTPException(status_code=404, detail=str(e))

    return [v for v in ordered if v in available]


def _check_symbol(symbol: Optional[str]) -> None:
    """Reject malformed symbols with 400 even when no venue gets queried."""
    try:
        normalize_symbol(symbol, settings.default_symbol)
    except InvalidSymbol as e:
        raise HTTPException(status_code=400, detail=str(e))


async def _aggregate(symbol: Optional[str], venues: Optional[List[str]] = None):
    try:
        return await aggregator.aggregate(symbol, venues=venues)
    except InvalidSymbol as e:
        raise HTTPException(status_code=400, detail=str(e))
    except UnknownVenue as e:
        raise HTTPException(status_code=404, detail=str(e))


# ============================================
# System Endpoints
# ============================================

@app.get("/", tags=["System"])
async def root():
    """API information and configured venues."""
    return {
        "name": "Cross-Exchange Premium / Gap API",
        "version": "1.0.0",
        "status": "operational",
        "docs": "/docs",
        "venues": manager.list_venues()
    }


@app.get("/exchanges", tags=["System"])
async def list_exchanges():
    """List configured venues, their markets and access strategy."""
    return {
        "exchanges": [
            {
                "id": descriptor.id,
                "name": descriptor.display_name,
                "has_spot": descriptor.has_spot,
                "has_futures": descriptor.has_futures,
                "access_strategy": descriptor.access_strategy.value,
            }
            for descriptor in manager.registry
        ]
    }


# ============================================
# Market Data Endpoints
# ============================================

@app.get("/api/prices", tags=["Market Data"])
async def get_prices(symbol: Optional[str] = Query(default=None, description="Asset symbol (e.g., BTC, eth)")):
    """
    Spot, futures and funding for every venue.

    Response:
        {
          "spot":    {venue: price | null},
          "futures": {venue: price | null},
          "funding": {venue: {"rate": percent | null, "nextTime": "HH:MM" | "N/A"}}
        }
    """
    result = await _aggregate(symbol)
    return result.to_payload(settings.tzinfo)


@app.get("/api/premium", response_model=List[PremiumRow], tags=["Market Data"])
async def get_premium(
    symbol: Optional[str] = Query(default=None, description="Asset symbol"),
    futures: Optional[str] = Query(default=None, description="Comma-separated futures venues"),
    spot: Optional[str] = Query(default=None, description="Comma-separated spot venues"),
):
    """Spot vs futures premium for every (futures venue, spot venue) pair."""
    _check_symbol(symbol)
    futures_venues = _parse_selection(futures, MarketType.FUTURES)
    spot_venues = _parse_selection(spot, MarketType.SPOT)

    wanted = set(futures_venues) | set(spot_venues)
    if not wanted:
        return []

    result = await _aggregate(symbol, venues=wanted)
    return engine.premium_rows(result, futures_venues, spot_venues)


@app.get("/api/gaps", response_model=List[GapRow], tags=["Market Data"])
async def get_gaps(
    symbol: Optional[str] = Query(default=None, description="Asset symbol"),
    venues: Optional[str] = Query(default=None, description="Comma-separated futures venues"),
):
    """Futures vs futures gap for every unordered venue pair, largest |gap| first."""
    _check_symbol(symbol)
    selected = _parse_selection(venues, MarketType.FUTURES)
    if len(selected) < 2:
        return []

    result = await _aggregate(symbol, venues=selected)
    return engine.gap_rows(result, selected)
