# pricewatch/pricing/models.py
import itertools
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Dict, Tuple

from pricewatch.models import AlertDirection
from pricewatch.symbols.catalog import Symbol

_alert_ids = itertools.count(1)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class PriceQuote:
    """What a price source returns for one page visit"""
    name: str
    price: Decimal


@dataclass(frozen=True)
class PriceSample:
    symbol: str
    price: Decimal
    observed_at: datetime = field(default_factory=utc_now)


@dataclass
class DeviationWatch:
    symbol: Symbol
    poll_interval: float  # seconds
    averaging_window: timedelta
    deviation_threshold_pct: Decimal
    rearm_threshold_pct: Decimal
    destinations: Tuple[int, ...] = ()
    # destination -> price last reported there; written by the owning monitor only
    last_alert_prices: Dict[int, Decimal] = field(default_factory=dict)


@dataclass(frozen=True)
class TargetAlert:
    symbol: str
    target_price: Decimal
    destination: int
    direction: AlertDirection
    alert_id: int = field(default_factory=lambda: next(_alert_ids))
    created_at: datetime = field(default_factory=utc_now, compare=False)
