"""
Price Aggregator - Concurrent Fan-Out Across Venues

For a symbol, the aggregator schedules three independent calls per venue
(spot, futures, funding) and runs all 3×N of them concurrently on the event
loop. Overall latency is bounded by the slowest single call, which the
per-call timeout caps.

Completion Policy:
    - Waits for every call to finish (no fail-fast, no partial results)
    - A call that fails or times out yields None / an absent FundingQuote
    - Every requested venue id appears in each result map, always

Ordering:
    Results are keyed by (venue id, metric), never appended in completion order,
    and each slot is written exactly once after gather() returns. No locking is
    needed.

Example:
    aggregator = PriceAggregator(manager)
    result = await aggregator.aggregate(" eth ")
    result.symbol                # "ETH"
    result.futures["okx"]        # 2650.1 or None
"""

import asyncio
import time
from typing import Any, Dict, Iterable, List, Optional, Tuple

from core.errors import InvalidSymbol
from core.exchange_manager import ExchangeManager
from core.logging import get_logger
from core.schemas import AggregateResult, FundingQuote


logger = get_logger(__name__)

METRICS = ("spot", "futures", "funding")


def normalize_symbol(symbol: Optional[str], default: str = "BTC") -> str:
    """
    Trim and upper-case a symbol, falling back to `default` when none is given.

    Raises:
        InvalidSymbol: If the result is empty or not ASCII letters and digits

    Examples:
        >>> normalize_symbol(" eth ")
        'ETH'
        >>> normalize_symbol(None)
        'BTC'
    """
    if symbol is None or not symbol.strip():
        symbol = default

    stripped = (symbol or "").strip()
    # check before upper(): "ß".upper() is "SS"
    if not stripped.isascii():
        raise InvalidSymbol(symbol)

    normalized = stripped.upper()
    if not normalized or not normalized.isalnum():
        raise InvalidSymbol(symbol)
    return normalized


class PriceAggregator:
    """
    Aggregates spot, futures and funding data for one symbol across venues.

    Args:
        manager: Exchange manager holding one adapter per venue
        timeout: Per-call timeout in seconds (manager.timeout if None).
                 Applied again here so a misbehaving adapter cannot stall the batch.
        default_symbol: Symbol used when aggregate() receives none
    """

    def __init__(
        self,
        manager: ExchangeManager,
        timeout: Optional[float] = None,
        default_symbol: Optional[str] = None,
    ):
        if default_symbol is None:
            from core.config import settings
            default_symbol = settings.default_symbol

        self.manager = manager
        self.timeout = timeout if timeout is not None else manager.timeout
        self.default_symbol = default_symbol

    async def aggregate(self, symbol: Optional[str] = None, venues: Optional[Iterable[str]] = None) -> AggregateResult:
        """
        Fetch every metric from every venue concurrently.

        Args:
            symbol: Asset symbol, case-insensitive ("btc", " ETH ")
            venues: Optional subset of venue ids (registry order is kept)

        Returns:
            AggregateResult keyed by venue id for spot, futures and funding

        Raises:
            InvalidSymbol: If the symbol is empty after normalization
            UnknownVenue: If `venues` names an unconfigured venue
        """
        normalized = normalize_symbol(symbol, self.default_symbol)

        if venues is None:
            venue_ids = self.manager.list_venues()
        else:
            venue_ids = self.manager.registry.order(venues)

        slots: List[Tuple[str, str]] = []
        calls = []
        for venue_id in venue_ids:
            adapter = self.manager.get_adapter(venue_id)
            for metric, fetch in (
                ("spot", adapter.fetch_spot),
                ("futures", adapter.fetch_futures),
                ("funding", adapter.fetch_funding),
            ):
                slots.append((venue_id, metric))
                calls.append(self._bounded(venue_id, metric, fetch(normalized)))

        logger.info(f"Aggregating {normalized} across {len(venue_ids)} venue(s) ({len(calls)} calls)")
        started = time.monotonic()

        outcomes = await asyncio.gather(*calls)

        collected: Dict[str, Dict[str, Any]] = {metric: {} for metric in METRICS}
        for (venue_id, metric), value in zip(slots, outcomes):
            collected[metric][venue_id] = value

        result = AggregateResult(
            symbol=normalized,
            spot=collected["spot"],
            futures=collected["futures"],
            funding=collected["funding"],
        )

        logger.info(
            f"Aggregated {normalized} in {time.monotonic() - started:.2f}s "
            f"({result.missing_count()}/{len(calls)} slot(s) missing)"
        )
        return result

    async def _bounded(self, venue_id: str, metric: str, call):
        """Await one adapter call; any failure becomes the absent value for its metric."""
        absent = FundingQuote.absent() if metric == "funding" else None
        try:
            return await asyncio.wait_for(call, timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning(f"{venue_id} {metric}: no result within {self.timeout}s")
        except Exception as e:
            logger.error(f"{venue_id} {metric}: adapter raised {type(e).__name__}: {e}")
        return absent
