"""
Core Package

Contains the exchange-agnostic core logic including:
- ExchangeRegistry: Static venue configuration (ids, markets, pair templates)
- VenueAdapter: Abstract contract for fetching one venue's prices and funding
- ExchangeManager: Builds and owns one adapter per venue
- PriceAggregator: Concurrent fan-out of spot/futures/funding calls
- Metrics: Premium and gap calculations over the aggregated result
- Schemas: Pydantic models for normalized data
"""
