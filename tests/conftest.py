"""
Shared fakes and fixtures for pricewatch tests.
"""
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import List, Optional, Tuple

import pytest

from pricewatch.errors import SendError, StoreError
from pricewatch.models import SendErrorKind, StoreErrorKind
from pricewatch.notifiers.notifier import Notifier
from pricewatch.pricing.models import DeviationWatch
from pricewatch.storage.db import PriceDB
from pricewatch.storage.price_store import PriceStore, SqlitePriceStore
from pricewatch.symbols.catalog import lookup

T0 = datetime(2026, 3, 2, 10, 0, tzinfo=timezone.utc)


class RecordingNotifier(Notifier):
    """Keeps delivered messages; fails while fail_next > 0"""

    def __init__(self):
        self.sent: List[Tuple[int, str]] = []
        self.fail_next = 0
        self.attempts = 0

    async def send(self, destination: int, text: str) -> None:
        self.attempts += 1
        if self.fail_next > 0:
            self.fail_next -= 1
            raise SendError(SendErrorKind.TRANSPORT, "network down")
        self.sent.append((destination, text))


class MemoryStore(PriceStore):
    """PriceStore keeping samples in a list; average can be pinned"""

    def __init__(self, pinned_average: Optional[Decimal] = None):
        self.samples: List[Tuple[str, Decimal, datetime]] = []
        self.pinned_average = pinned_average
        self.fail_writes = False
        self.fail_reads = False

    def append(self, symbol, price, observed_at):
        if self.fail_writes:
            raise StoreError(StoreErrorKind.WRITE_FAILED, "disk full")
        self.samples.append((symbol, price, observed_at))

    def average_since(self, symbol, since):
        if self.fail_reads:
            raise StoreError(StoreErrorKind.QUERY_FAILED, "locked")
        if self.pinned_average is not None:
            return self.pinned_average
        prices = [p for s, p, t in self.samples if s == symbol and t >= since]
        if not prices:
            return None
        return sum(prices) / len(prices)


class StepClock:
    """Returns T0, T0+step, T0+2*step, ... on successive calls"""

    def __init__(self, start: datetime = T0, step: timedelta = timedelta(seconds=10)):
        self.now = start
        self.step = step

    def __call__(self):
        current = self.now
        self.now += self.step
        return current


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def db(tmp_path):
    return PriceDB(str(tmp_path / "prices.db"))


@pytest.fixture
def sqlite_store(db):
    return SqlitePriceStore(db)


def make_watch(ticker="LKOH", threshold="0.42", rearm="0.1", window_minutes=5, destinations=(42,)):
    return DeviationWatch(
        symbol=lookup(ticker),
        poll_interval=10,
        averaging_window=timedelta(minutes=window_minutes),
        deviation_threshold_pct=Decimal(threshold),
        rearm_threshold_pct=Decimal(rearm),
        destinations=tuple(destinations),
    )
