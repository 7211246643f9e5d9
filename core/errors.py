"""
Error Taxonomy

Every failure the service can observe has its own exception type so callers
can log or react to each kind separately.

Fatal at startup:
    - ConfigError: required configuration missing or invalid
    - StoreInitError: the SQLite cache could not be opened

Contained inside the poller (logged, cached value untouched):
    - UpstreamRequestError: transport failure or timeout
    - UpstreamStatusError: non-200 response from BrsApi
    - UpstreamFormatError: body is not the expected JSON shape
    - UpstreamDataError: IR_GOLD_18K missing or priced at zero/negative
    - StoreWriteError: the upsert failed, the tick's result is lost

Request level:
    - NotYetAvailable: no price has ever been cached (HTTP 503)
    - StoreReadError: the cache could not be read (HTTP 500)
"""

from typing import Optional


class GoldServiceError(Exception):
    """Base class for all service errors."""


class ConfigError(GoldServiceError):
    """Required configuration is missing or invalid."""


# ============================================
# Store Errors
# ============================================

class StoreError(GoldServiceError):
    """Base class for cache store failures."""


class StoreInitError(StoreError):
    """The store could not be opened or its schema created."""


class StoreWriteError(StoreError):
    """An upsert did not commit."""


class StoreReadError(StoreError):
    """A read against the store failed."""


class StoreClosedError(StoreWriteError, StoreReadError):
    """The store was used after close()."""


# ============================================
# Upstream Fetch Errors
# ============================================

class FetchError(GoldServiceError):
    """Base class for a failed upstream fetch."""


class UpstreamRequestError(FetchError):
    """The request never produced a response (network error or timeout)."""


class UpstreamStatusError(FetchError):
    """Upstream answered with a non-success status code."""

    def __init__(self, status: int, body: Optional[str] = None):
        self.status = status
        self.body = body
        super().__init__(f"API returned status {status}")


class UpstreamFormatError(FetchError):
    """Response body is malformed or undecodable."""


class UpstreamDataError(FetchError):
    """Response decoded fine but does not carry a usable price."""


# ============================================
# Read Path
# ============================================

class NotYetAvailable(GoldServiceError):
    """No price has been cached yet."""

    def __init__(self, message: str = "no cached price available"):
        super().__init__(message)
