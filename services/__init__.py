"""
Services Package

Background and request-path services:
- poller: the interval-driven refresher (sole writer of the cache)
- price_query: the read-only view answering HTTP requests
"""
