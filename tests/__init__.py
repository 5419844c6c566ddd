"""
Test Suite

Unit tests for the aggregation backend.

Structure:
- tests/unit/: Tests for individual components (registry, adapters, aggregator,
  metrics, REST clients, HTTP API). Every exchange is faked; no test touches
  the network.

Uses pytest with pytest-asyncio for testing async functionality.
"""
