"""
Price Poller

The only writer into the price store. On a fixed interval it asks the
fetcher for a fresh sample and upserts it under the cached symbol.

Overlap rule:
    An asyncio.Lock marks "a fetch is in flight". A tick that finds it held
    is skipped outright (logged, counted) and never queued or retried; the
    next tick simply tries again.

Failure rule:
    Every fetch error and every store write error is logged and swallowed
    here. The cached row is left exactly as it was, so readers keep seeing
    the last known good value.
"""

import asyncio
import contextlib
from enum import Enum
from typing import Optional, Set

from core.errors import FetchError, StoreWriteError
from core.fetcher_interface import PriceFetcher
from core.logging import get_logger
from core.schemas import CachedPrice
from storage.price_store import PriceStore


GOLD_18K_SYMBOL = "gold_18k"


class PollOutcome(str, Enum):
    UPDATED = "updated"
    SKIPPED = "skipped"
    FAILED = "failed"


class PricePoller:
    """
    Background service that refreshes the cached price on a fixed interval.

    Each tick runs its fetch cycle as a separate task, so the schedule keeps
    firing while a slow fetch is still in flight; those ticks are the ones
    the in-flight guard skips.

    Attributes:
        ticks: Scheduled ticks fired so far
        updated / skipped / failed: Outcome counters across all cycles
    """

    def __init__(
        self,
        fetcher: PriceFetcher,
        store: PriceStore,
        interval_seconds: float = 60,
        symbol: str = GOLD_18K_SYMBOL,
    ) -> None:
        self._logger = get_logger(__name__)
        self._fetcher = fetcher
        self._store = store
        self._interval = float(interval_seconds)
        self._symbol = symbol

        self._in_flight = asyncio.Lock()
        self._stop_event = asyncio.Event()
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._stop_requested_at: Optional[float] = None
        self._task: Optional[asyncio.Task] = None
        self._cycles: Set[asyncio.Task] = set()

        self.ticks = 0
        self.updated = 0
        self.skipped = 0
        self.failed = 0

    @property
    def is_fetching(self) -> bool:
        return self._in_flight.locked()

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    # ============================================
    # Fetch Cycle
    # ============================================

    async def run_once(self) -> PollOutcome:
        """
        Run one fetch + write cycle unless another one is in flight.

        Returns:
            PollOutcome.SKIPPED if a cycle was already running,
            PollOutcome.FAILED if the fetch or the write failed,
            PollOutcome.UPDATED if the new price was committed
        """
        # Non-blocking: a held lock means skip, never wait
        if self._in_flight.locked():
            self.skipped += 1
            self._logger.info("Previous fetch still in progress, skipping")
            return PollOutcome.SKIPPED

        async with self._in_flight:
            try:
                sample = await self._fetcher.fetch()
            except FetchError as e:
                self.failed += 1
                self._logger.warning(f"Fetch failed ({type(e).__name__}): {e}")
                return PollOutcome.FAILED

            try:
                await self._store.aupsert(CachedPrice.from_sample(self._symbol, sample))
            except StoreWriteError as e:
                self.failed += 1
                self._logger.error(f"Store write failed, result of this tick lost: {e}")
                return PollOutcome.FAILED

            self.updated += 1
            self._logger.info(
                f"Updated {self._symbol}: {sample.name} = {sample.price_minor_units} Rial"
            )
            return PollOutcome.UPDATED

    async def run_cycle(self) -> PollOutcome:
        """run_once that also contains unexpected errors; used for every tick."""
        try:
            return await self.run_once()
        except Exception as e:
            self.failed += 1
            self._logger.exception(f"Unexpected poll cycle error: {e}")
            return PollOutcome.FAILED

    def tick(self) -> asyncio.Task:
        """
        Fire one scheduled tick: dispatch a fetch cycle without awaiting it.

        Returns:
            The task running the cycle (already done-tracked by the poller)
        """
        self.ticks += 1
        task = asyncio.create_task(self.run_cycle(), name=f"price_poll_{self.ticks}")
        self._cycles.add(task)
        task.add_done_callback(self._cycles.discard)
        return task

    # ============================================
    # Lifecycle
    # ============================================

    async def start(self) -> None:
        """Start the interval loop in the background."""
        if self.is_running:
            return
        self._loop = asyncio.get_running_loop()
        self._stop_event.clear()
        self._stop_requested_at = None
        self._logger.info(f"Starting price poller (every {self._interval:g}s)...")
        self._task = asyncio.create_task(self._run(), name="price_poller")

    def request_stop(self) -> None:
        """
        Stop scheduling ticks as soon as possible.

        Safe to call from a signal handler or another thread; the in-flight
        cycle (if any) is left to stop(), whose budget starts counting here.
        """
        if self._loop is None or self._loop.is_closed():
            return
        self._loop.call_soon_threadsafe(self._mark_stopping)

    def _mark_stopping(self) -> None:
        if self._stop_requested_at is None:
            self._stop_requested_at = self._loop.time()
        self._stop_event.set()

    async def stop(self, timeout: float = 5.0) -> None:
        """
        Stop the timer, then give an in-flight cycle what is left of `timeout`.

        The budget runs from the first request_stop() (or from this call if
        there was none), so a stop signal followed by the HTTP drain and then
        stop() is bounded by one `timeout` overall.

        Cycles still running after the budget are cancelled; the store's
        upsert is a single statement, so abandoning it cannot leave a half row.
        """
        loop = asyncio.get_running_loop()
        self._loop = self._loop or loop
        self._mark_stopping()
        deadline = self._stop_requested_at + timeout

        if self._task:
            self._logger.info("Stopping price poller...")
            try:
                await asyncio.wait_for(self._task, timeout=max(0.0, deadline - loop.time()))
            except asyncio.TimeoutError:
                self._logger.warning("Poller loop did not exit in time, cancelled")
            self._task = None

        pending = list(self._cycles)
        if not pending:
            return

        remaining = max(0.0, deadline - loop.time())
        _, still_running = await asyncio.wait(pending, timeout=remaining)
        if still_running:
            self._logger.warning(
                f"Abandoning {len(still_running)} in-flight fetch(es) after {timeout:g}s"
            )
            for task in still_running:
                task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await asyncio.gather(*still_running, return_exceptions=True)

    # ============================================
    # Core Loop
    # ============================================

    async def _run(self) -> None:
        loop = asyncio.get_running_loop()
        next_tick = loop.time() + self._interval

        while not self._stop_event.is_set():
            try:
                await asyncio.wait_for(
                    self._stop_event.wait(), timeout=max(0.0, next_tick - loop.time())
                )
            except asyncio.TimeoutError:
                next_tick += self._interval
                self.tick()

        self._logger.info(
            f"Price poller stopped (ticks={self.ticks} updated={self.updated} "
            f"skipped={self.skipped} failed={self.failed})"
        )
