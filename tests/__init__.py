"""
Test Suite

Contains unit tests for the gold price cache.

Structure:
- tests/unit/: Tests for individual components (config, store, fetcher, poller, query, HTTP)

Uses pytest with pytest-asyncio for testing async functionality. No test
touches the network: the upstream is replaced by fakes.
"""
