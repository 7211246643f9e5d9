"""
BrsApi REST Client

Async HTTP client for the BrsApi gold/currency market feed. One call returns
every gold item; only IR_GOLD_18K is consumed.

API:
    GET https://BrsApi.ir/Api/Market/Gold_Currency.php?key=<API_KEY>

Response Format:
    {
      "gold": [
        {"symbol": "IR_GOLD_18K", "name": "طلای 18 عیار", "price": 4250000, ...},
        {"symbol": "IR_COIN_EMAMI", ...}
      ],
      "currency": [...]
    }

Prices arrive in Toman and are stored in Rial (x10).

Usage:
    async with BrsApiClient(api_key="...") as client:
        sample = await client.fetch()
"""

import asyncio
import json
import math
import time
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Optional
from datetime import datetime

import aiohttp

from core.errors import (
    UpstreamDataError,
    UpstreamFormatError,
    UpstreamRequestError,
    UpstreamStatusError,
)
from core.fetcher_interface import PriceFetcher
from core.logging import get_logger, log_api_request, log_api_response
from core.schemas import PriceSample
from core.utils.time import current_utc_datetime


TARGET_SYMBOL = "IR_GOLD_18K"

# 1 Toman = 10 Rial
TOMAN_TO_RIAL = 10

FALLBACK_NAME = "طلای 18 عیار"

# The API rejects requests with non-browser user agents
USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36"
)


def to_minor_units(price: Any) -> int:
    """
    Convert an upstream Toman price to integer Rial.

    The multiplication goes through Decimal so 4250000.7 becomes 42500007
    rather than a float artefact; any fraction of a Rial is truncated.

    Raises:
        UpstreamFormatError: If price is not a JSON number
        UpstreamDataError: If price is not finite or not positive
    """
    if isinstance(price, bool) or not isinstance(price, (int, float)):
        raise UpstreamFormatError(f"{TARGET_SYMBOL} price is not a number: {price!r}")
    if isinstance(price, float) and not math.isfinite(price):
        raise UpstreamDataError(f"{TARGET_SYMBOL} price is not finite: {price!r}")
    if price <= 0:
        raise UpstreamDataError(f"{TARGET_SYMBOL} price must be positive, got {price!r}")

    try:
        rial = int(Decimal(str(price)) * TOMAN_TO_RIAL)
    except (InvalidOperation, ValueError) as e:
        raise UpstreamDataError(f"{TARGET_SYMBOL} price {price!r} cannot be converted: {e}") from e

    if rial <= 0:
        raise UpstreamDataError(f"{TARGET_SYMBOL} price {price!r} rounds to {rial} Rial")
    return rial


def parse_gold_response(payload: Any, fetched_at: datetime) -> PriceSample:
    """
    Extract the 18k gold price from a decoded BrsApi response.

    Args:
        payload: Decoded JSON body
        fetched_at: Time to stamp the sample with

    Returns:
        PriceSample for IR_GOLD_18K

    Raises:
        UpstreamFormatError: Body is not {"gold": [...]}, or the price is not numeric
        UpstreamDataError: IR_GOLD_18K is missing or its price is not positive
    """
    if not isinstance(payload, dict):
        raise UpstreamFormatError(f"Expected JSON object, got {type(payload).__name__}")

    items = payload.get("gold")
    if not isinstance(items, list):
        raise UpstreamFormatError("Response has no 'gold' list")

    item = next(
        (x for x in items if isinstance(x, dict) and x.get("symbol") == TARGET_SYMBOL),
        None,
    )
    if item is None:
        raise UpstreamDataError(f"{TARGET_SYMBOL} not found in API response")

    price = to_minor_units(item.get("price"))

    name = item.get("name")
    if not isinstance(name, str) or not name.strip():
        name = FALLBACK_NAME

    return PriceSample(name=name, price_minor_units=price, fetched_at=fetched_at)


class BrsApiClient(PriceFetcher):
    """
    Async HTTP client for the BrsApi gold feed.

    Each fetch is exactly one GET with a total timeout; there are no retries
    here, the poller's next tick is the retry.

    Attributes:
        api_key: BrsApi credential (sent as the `key` query parameter)
        base_url: Endpoint URL
        timeout: Total request ceiling in seconds
        session: aiohttp ClientSession (created by initialize / async with)

    Example:
        >>> async with BrsApiClient(api_key="secret") as client:
        ...     sample = await client.fetch()
        ...     print(sample.price_minor_units)
    """

    name = "brsapi"
    BASE_URL = "https://BrsApi.ir/Api/Market/Gold_Currency.php"

    def __init__(
        self,
        api_key: str,
        base_url: Optional[str] = None,
        timeout: float = 10.0,
        clock: Callable[[], datetime] = current_utc_datetime,
    ):
        self.api_key = api_key
        self.base_url = base_url or self.BASE_URL
        self.timeout = timeout
        self.clock = clock
        self.logger = get_logger(__name__)
        self.session: Optional[aiohttp.ClientSession] = None

    # ============================================
    # Session Management
    # ============================================

    async def initialize(self) -> None:
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession(headers={"User-Agent": USER_AGENT})
            self.logger.debug("BrsApiClient session created")

    async def shutdown(self) -> None:
        if self.session:
            await self.session.close()
            self.session = None
            self.logger.debug("BrsApiClient session closed")

    # ============================================
    # HTTP
    # ============================================

    async def _get(self) -> Any:
        """
        Perform the GET and decode the JSON body.

        Raises:
            UpstreamRequestError: Network failure or timeout
            UpstreamStatusError: Status other than 200
            UpstreamFormatError: Body is not valid JSON
        """
        if not self.session:
            raise RuntimeError("Client session not initialized. Use 'async with' statement.")

        log_api_request(self.name, self.base_url)
        started = time.monotonic()
        try:
            async with self.session.get(
                self.base_url,
                params={"key": self.api_key},
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            ) as resp:
                raw = await resp.read()
                log_api_response(self.name, self.base_url, resp.status, time.monotonic() - started)

                if resp.status != 200:
                    body = raw[:200].decode("utf-8", errors="replace")
                    raise UpstreamStatusError(resp.status, body)

        except asyncio.TimeoutError as e:
            raise UpstreamRequestError(f"Request timed out after {self.timeout}s") from e
        except aiohttp.ClientError as e:
            raise UpstreamRequestError(f"HTTP request failed: {e}") from e

        try:
            return json.loads(raw)
        except ValueError as e:
            raise UpstreamFormatError(f"JSON decode failed: {e}") from e

    async def fetch(self) -> PriceSample:
        """
        Fetch and validate the current 18k gold price.

        Returns:
            PriceSample with the price in Rial, stamped with the current UTC time

        Raises:
            FetchError: see module docstring for the individual kinds
        """
        payload = await self._get()
        return parse_gold_response(payload, self.clock())
