# pricewatch/storage/price_store.py
import sqlite3
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional

from pricewatch.errors import StoreError
from pricewatch.logger import logger
from pricewatch.models import StoreErrorKind
from pricewatch.pricing.models import PriceSample
from .db import PriceDB

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S.%f"


def to_db_time(moment: datetime) -> str:
    """UTC text that sorts in time order"""
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc).replace(tzinfo=None)
    return moment.strftime(TIMESTAMP_FORMAT)


def from_db_time(text: str) -> datetime:
    fmt = TIMESTAMP_FORMAT if "." in text else "%Y-%m-%d %H:%M:%S"
    return datetime.strptime(text, fmt).replace(tzinfo=timezone.utc)


class PriceStore(ABC):
    @abstractmethod
    def append(self, symbol: str, price: Decimal, observed_at: datetime) -> None:
        """Persist one sample, raises StoreError(WRITE_FAILED)"""
        pass

    @abstractmethod
    def average_since(self, symbol: str, since: datetime) -> Optional[Decimal]:
        """Average price of symbol observed at or after since, None without samples"""
        pass


class SqlitePriceStore(PriceStore):
    def __init__(self, db: PriceDB):
        self.db = db

    def append(self, symbol: str, price: Decimal, observed_at: datetime) -> None:
        try:
            with self.db._get_conn() as conn:
                conn.execute(
                    "INSERT INTO stock_prices (ticker, price, observed_at) VALUES (?, ?, ?)",
                    (symbol, str(price), to_db_time(observed_at))
                )
        except sqlite3.Error as e:
            raise StoreError(StoreErrorKind.WRITE_FAILED, f"saving {symbol} at {price}: {e}") from e
        logger.debug(f"Price {symbol} ({price}) saved")

    def average_since(self, symbol: str, since: datetime) -> Optional[Decimal]:
        try:
            with self.db._get_conn() as conn:
                row = conn.execute(
                    """
                    SELECT AVG(price) AS avg_price, COUNT(*) AS samples
                    FROM stock_prices
                    WHERE ticker = ? AND observed_at >= ?
                    """,
                    (symbol, to_db_time(since))
                ).fetchone()
        except sqlite3.Error as e:
            raise StoreError(StoreErrorKind.QUERY_FAILED, f"average for {symbol}: {e}") from e

        if row is None or row['avg_price'] is None:
            return None
        return Decimal(str(row['avg_price']))

    def recent_samples(self, symbol: str, limit: int = 20) -> List[PriceSample]:
        """Latest samples for symbol, newest first"""
        try:
            with self.db._get_conn() as conn:
                rows = conn.execute(
                    """
                    SELECT ticker, price, observed_at
                    FROM stock_prices
                    WHERE ticker = ?
                    ORDER BY observed_at DESC, id DESC
                    LIMIT ?
                    """,
                    (symbol, limit)
                ).fetchall()
        except sqlite3.Error as e:
            raise StoreError(StoreErrorKind.QUERY_FAILED, f"history for {symbol}: {e}") from e

        return [
            PriceSample(
                symbol=row['ticker'],
                price=Decimal(str(row['price'])),
                observed_at=from_db_time(row['observed_at']),
            )
            for row in rows
        ]
