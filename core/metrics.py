"""
Market Metrics Engine

Pure functions over aggregated prices. No I/O, no concurrency.

Formulas (all results in percent):
    premium(spot, futures) = (futures - spot) / spot * 100
    gap(a, b)              = (b - a) / a * 100
    funding_diff(a, b)     = b - a

Missing inputs (None) always produce None. Division guards check only the
denominator: premium guards `spot`, gap guards `a`. gap(a, b) is therefore not
simply -gap(b, a), and which venue is "a" matters. Pairs are always built with
the lower registry index as "a".
"""

from typing import Iterable, List, Optional, Sequence

from core.schemas import AggregateResult, GapRow, PremiumRow


DEFAULT_HIGHLIGHT_THRESHOLD = 0.5


# ============================================
# Pure Formulas
# ============================================

def premium(spot_price: Optional[float], futures_price: Optional[float]) -> Optional[float]:
    """
    Futures premium over spot, in percent.

    Examples:
        >>> premium(100, 101)
        1.0
        >>> premium(0, 101) is None
        True
    """
    if spot_price is None or futures_price is None or spot_price == 0:
        return None
    return (futures_price - spot_price) / spot_price * 100


def gap(price_a: Optional[float], price_b: Optional[float]) -> Optional[float]:
    """
    Percentage difference of price_b relative to price_a.

    Examples:
        >>> gap(100, 105)
        5.0
        >>> round(gap(105, 100), 6)
        -4.761905
    """
    if price_a is None or price_b is None or price_a == 0:
        return None
    return (price_b - price_a) / price_a * 100


def funding_diff(rate_a: Optional[float], rate_b: Optional[float]) -> Optional[float]:
    """Funding rate of B minus A (both already in percent)."""
    if rate_a is None or rate_b is None:
        return None
    return rate_b - rate_a


def is_highlighted(value: Optional[float], threshold: float = DEFAULT_HIGHLIGHT_THRESHOLD) -> bool:
    """True when |value| reaches the emphasis threshold. None is never highlighted."""
    return value is not None and abs(value) >= threshold


def gap_sort_key(value: Optional[float]) -> float:
    """Absolute gap with None counted as 0."""
    return abs(value) if value is not None else 0.0


def sort_by_gap(rows: Iterable[GapRow]) -> List[GapRow]:
    """
    Order rows by descending |gap|; missing gaps sink like zeros. Stable.

    Example:
        gaps [0.2, -0.9, None, 0.5] -> [-0.9, 0.5, 0.2, None]
    """
    return sorted(rows, key=lambda row: gap_sort_key(row.gap), reverse=True)


# ============================================
# Row Assembly
# ============================================

class MetricsEngine:
    """
    Builds comparison rows from an AggregateResult.

    Args:
        threshold: Highlight threshold in percent (settings default if None)

    Example:
        >>> engine = MetricsEngine(threshold=0.5)
        >>> rows = engine.gap_rows(result)
        >>> rows[0].gap  # largest absolute gap first
    """

    def __init__(self, threshold: Optional[float] = None):
        if threshold is None:
            from core.config import settings
            threshold = settings.highlight_threshold

        self.threshold = threshold

    def premium_rows(
        self,
        result: AggregateResult,
        futures_venues: Optional[Sequence[str]] = None,
        spot_venues: Optional[Sequence[str]] = None,
    ) -> List[PremiumRow]:
        """
        Spot vs futures rows, grouped by futures venue.

        Args:
            result: Aggregated prices
            futures_venues: Futures venues to include (all in result if None)
            spot_venues: Spot venues to include (all in result if None)

        Returns:
            One row per (futures venue, spot venue), futures venue outermost,
            in the order the venues were given.
        """
        if futures_venues is None:
            futures_venues = list(result.futures.keys())
        if spot_venues is None:
            spot_venues = list(result.spot.keys())

        rows = []
        for futures_venue in futures_venues:
            futures_price = result.futures.get(futures_venue)
            for spot_venue in spot_venues:
                spot_price = result.spot.get(spot_venue)
                value = premium(spot_price, futures_price)
                rows.append(PremiumRow(
                    futures_venue=futures_venue,
                    spot_venue=spot_venue,
                    futures_price=futures_price,
                    spot_price=spot_price,
                    premium=value,
                    highlight=is_highlighted(value, self.threshold),
                ))
        return rows

    def gap_rows(self, result: AggregateResult, venues: Optional[Sequence[str]] = None) -> List[GapRow]:
        """
        Futures vs futures rows for every unordered venue pair, sorted by |gap|.

        Args:
            result: Aggregated prices
            venues: Venues to pair, already in registry order (all in result if None).
                    The earlier venue of each pair is "A".
        """
        if venues is None:
            venues = list(result.futures.keys())

        rows = []
        for i, venue_a in enumerate(venues):
            for venue_b in venues[i + 1:]:
                price_a = result.futures.get(venue_a)
                price_b = result.futures.get(venue_b)
                funding_a = result.funding_rate(venue_a)
                funding_b = result.funding_rate(venue_b)
                value = gap(price_a, price_b)
                rows.append(GapRow(
                    venue_a=venue_a,
                    venue_b=venue_b,
                    price_a=price_a,
                    price_b=price_b,
                    funding_a=funding_a,
                    funding_b=funding_b,
                    gap=value,
                    funding_diff=funding_diff(funding_a, funding_b),
                    highlight=is_highlighted(value, self.threshold),
                ))

        return sort_by_gap(rows)
