"""
FastAPI Application Package

This package contains the HTTP surface of the gold price cache and the
lifespan that wires the store, poller and query service together.
"""
