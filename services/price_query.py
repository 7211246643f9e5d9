"""
Price Query Service

Read-only view over the price store. Never touches the network: it answers
from whatever the poller last committed and flags the answer stale when it
is older than the threshold. Staleness is recomputed on every read from the
stored timestamp and the current time; nothing about it is persisted.
"""

from datetime import datetime, timedelta
from typing import Callable, Dict, Optional

from core.errors import NotYetAvailable
from core.schemas import LatestPrice
from core.utils.time import age_of, current_utc_datetime, to_rfc3339
from services.poller import GOLD_18K_SYMBOL
from storage.price_store import PriceStore


DEFAULT_STALE_THRESHOLD = timedelta(minutes=5)


class PriceQueryService:
    """Answers "what is the latest cached price" for one symbol."""

    def __init__(
        self,
        store: PriceStore,
        stale_threshold: timedelta = DEFAULT_STALE_THRESHOLD,
        symbol: str = GOLD_18K_SYMBOL,
        clock: Callable[[], datetime] = current_utc_datetime,
    ) -> None:
        self._store = store
        self._stale_threshold = stale_threshold
        self._symbol = symbol
        self._clock = clock

    def is_stale(self, fetched_at: datetime, now: Optional[datetime] = None) -> bool:
        """True once strictly more than the threshold has elapsed since `fetched_at`."""
        return age_of(fetched_at, now or self._clock()) > self._stale_threshold

    async def get_latest(self) -> LatestPrice:
        """
        Return the cached price annotated with its staleness.

        Raises:
            NotYetAvailable: No successful fetch has ever been stored
            StoreReadError: The store could not be read
        """
        row = await self._store.aget(self._symbol)
        if row is None:
            raise NotYetAvailable()

        return LatestPrice(
            name=row.name,
            price=row.price_minor_units,
            fetched_at=to_rfc3339(row.fetched_at),
            stale=self.is_stale(row.fetched_at),
        )

    @staticmethod
    def health() -> Dict[str, str]:
        # Liveness only: must not depend on the store or upstream
        return {"status": "ok"}
