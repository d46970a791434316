# scripts/inspect_prices.py
import argparse
from datetime import timedelta

from tabulate import tabulate

from pricewatch.config.env import DB_PATH
from pricewatch.config.manager import ConfigManager
from pricewatch.pricing.models import utc_now
from pricewatch.storage.db import PriceDB
from pricewatch.storage.price_store import SqlitePriceStore
from pricewatch.symbols.catalog import lookup

def inspect_prices(ticker: str, limit: int, db_path: str = DB_PATH):
    """Print the latest stored samples and the current window average for a ticker"""
    symbol = lookup(ticker)
    db = PriceDB(db_path)
    store = SqlitePriceStore(db)
    window = timedelta(minutes=ConfigManager(db).get('averaging_window_minutes'))

    samples = store.recent_samples(symbol.ticker, limit)
    if samples:
        rows = [(s.observed_at.strftime('%Y-%m-%d %H:%M:%S'), f"{s.price:.2f}") for s in samples]
        print(tabulate(rows, headers=["observed_at (UTC)", "price"], tablefmt="psql"))
    else:
        print(f"No samples stored for {symbol.ticker}")

    average = store.average_since(symbol.ticker, utc_now() - window)
    label = f"{average:.2f}" if average is not None else "n/a"
    print(f"{symbol.name} ({symbol.ticker}) average over last {window}: {label}")

if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    parser.add_argument('ticker')
    parser.add_argument('--limit', type=int, default=20)
    parser.add_argument('--db-path', default=DB_PATH)
    args = parser.parse_args()
    inspect_prices(args.ticker, args.limit, args.db_path)
