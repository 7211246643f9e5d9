"""
Shared fixtures and fakes for the test suite.

FakeFetcher stands in for the BrsApi client: it replays a scripted sequence
of samples/errors, records every call, and can be held open on a gate to
simulate a slow upstream.
"""

import asyncio
from datetime import datetime, timezone
from typing import List, Optional, Union

import pytest

from core.config import Settings
from core.fetcher_interface import PriceFetcher
from core.schemas import PriceSample
from storage.price_store import PriceStore


FIXED_TIME = datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


def make_sample(price: int = 42_500_000, name: str = "طلای 18 عیار",
                fetched_at: datetime = FIXED_TIME) -> PriceSample:
    return PriceSample(name=name, price_minor_units=price, fetched_at=fetched_at)


class FakeFetcher(PriceFetcher):
    """Scripted fetcher. Each fetch pops the next outcome; the last one repeats."""

    name = "fake"

    def __init__(self, outcomes: Optional[List[Union[PriceSample, Exception]]] = None):
        self.outcomes = list(outcomes or [make_sample()])
        self.calls = 0
        self.gate: Optional[asyncio.Event] = None
        self.entered = asyncio.Event()
        self.initialized = False
        self.closed = False

    async def initialize(self) -> None:
        self.initialized = True

    async def shutdown(self) -> None:
        self.closed = True

    async def fetch(self) -> PriceSample:
        self.calls += 1
        self.entered.set()
        if self.gate is not None:
            await self.gate.wait()
        outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "data" / "gold.db")


@pytest.fixture
def store(db_path):
    price_store = PriceStore(db_path)
    price_store.open()
    yield price_store
    price_store.close()


@pytest.fixture
def test_settings(db_path):
    return Settings(
        brs_api_key="test-key",
        db_path=db_path,
        poll_interval=3600,
        shutdown_timeout=1.0,
    )
