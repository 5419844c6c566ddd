"""
Error Taxonomy

Only InvalidSymbol is meant to reach the HTTP caller. TransientFetchFailure is
raised inside REST clients and adapters and always converted to a missing value
at the adapter boundary. UnknownVenue signals wiring mistakes.
"""


class GapScanError(Exception):
    """Base class for all application errors."""


class UnknownVenue(GapScanError, ValueError):
    """Registry lookup of a venue id that is not configured."""

    def __init__(self, venue_id: str, available=()):
        self.venue_id = venue_id
        message = f"Venue '{venue_id}' is not configured"
        if available:
            message += f". Available venues: {', '.join(available)}"
        super().__init__(message)


class TransientFetchFailure(GapScanError):
    """Network error, non-success response or malformed payload from a venue."""

    def __init__(self, venue_id: str, message: str):
        self.venue_id = venue_id
        super().__init__(f"{venue_id}: {message}")


class InvalidSymbol(GapScanError, ValueError):
    """Symbol is empty or malformed after normalization."""

    def __init__(self, symbol):
        self.symbol = symbol
        super().__init__(f"Invalid symbol: {symbol!r}")
