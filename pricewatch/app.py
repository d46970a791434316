# pricewatch/app.py
"""
Composition root: wires config, storage, price source, notifier, the
deviation monitors, the target alert sweep and the Telegram poller, then
runs until SIGINT/SIGTERM.

Run:
    python -m pricewatch.app --debug
"""
import argparse
import asyncio
import signal
import sys
from datetime import timedelta
from decimal import Decimal
from typing import List, Optional

from pricewatch.alerts.registry import TargetAlertRegistry
from pricewatch.bot.commands import CommandHandler
from pricewatch.bot.telegram_poller import TelegramPoller
from pricewatch.config import env
from pricewatch.config.manager import ConfigManager
from pricewatch.config.spec import split_list
from pricewatch.errors import RequestError
from pricewatch.logger import logger, setup_logger
from pricewatch.monitoring.deviation_monitor import DeviationMonitor
from pricewatch.notifiers.log_notifier import LogNotifier
from pricewatch.notifiers.telegram_notifier import TelegramNotifier
from pricewatch.price_services.investing_service import InvestingPriceService
from pricewatch.pricing.models import DeviationWatch
from pricewatch.storage.db import PriceDB
from pricewatch.storage.price_store import SqlitePriceStore
from pricewatch.symbols.catalog import lookup

DRAIN_TIMEOUT_SECONDS = 10.0


def build_watches(config: ConfigManager) -> List[DeviationWatch]:
    """One DeviationWatch per configured ticker, unknown tickers are skipped"""
    destinations = tuple(int(chat) for chat in split_list(config.get('deviation_chat_ids')))
    watches = []
    for ticker in split_list(config.get('watched_symbols')):
        try:
            symbol = lookup(ticker)
        except RequestError:
            logger.error(f"Watched symbol {ticker} is not in the catalog, ignoring it")
            continue
        watches.append(DeviationWatch(
            symbol=symbol,
            poll_interval=config.get('poll_interval_seconds'),
            averaging_window=timedelta(minutes=config.get('averaging_window_minutes')),
            deviation_threshold_pct=Decimal(str(config.get('deviation_threshold_pct'))),
            rearm_threshold_pct=Decimal(str(config.get('rearm_threshold_pct'))),
            destinations=destinations,
        ))
    return watches


async def shutdown(tasks: List[asyncio.Task], poller: Optional[TelegramPoller] = None,
                   telegram: Optional[TelegramNotifier] = None, drain_timeout: float = DRAIN_TIMEOUT_SECONDS):
    """Stop the loops, let replies already being answered go out, then close the Bot API client"""
    for task in tasks:
        task.cancel()
    await asyncio.gather(*tasks, return_exceptions=True)
    if poller is not None:
        try:
            await asyncio.wait_for(poller.drain(), timeout=drain_timeout)
        except asyncio.TimeoutError:
            logger.warning(f"[Telegram] Replies still pending after {drain_timeout}s, dropping them")
    if telegram is not None:
        await telegram.close()


async def run_service(config: ConfigManager, db: PriceDB, bot_token: str, dry_run: bool):
    source = InvestingPriceService(timeout=config.get('fetch_timeout_seconds'))
    await source.warm_up()

    telegram = TelegramNotifier(bot_token) if bot_token else None
    notifier = LogNotifier() if dry_run or telegram is None else telegram

    store = SqlitePriceStore(db)
    monitor = DeviationMonitor(source, store, notifier)
    registry = TargetAlertRegistry(source, notifier)

    tasks = [monitor.start(watch) for watch in build_watches(config)]
    tasks.append(registry.start(config.get('sweep_interval_seconds')))
    poller = None
    if telegram is not None:
        poller = TelegramPoller(telegram, CommandHandler(source, registry))
        tasks.append(poller.start())
    else:
        logger.warning("TELEGRAM_BOT_TOKEN not set, running without the chat bot")

    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop.set)
        except NotImplementedError:
            # Windows event loops have no signal handlers, Ctrl+C still raises KeyboardInterrupt
            pass

    logger.info(f"Started {len(tasks)} background tasks, waiting for shutdown signal")
    try:
        await stop.wait()
    finally:
        logger.info("Shutting down...")
        await shutdown(tasks, poller, telegram)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Watch share prices and notify on sharp moves and target crossings")
    parser.add_argument('--debug', action='store_true', default=env.DEBUG, help='Enable debug logging')
    parser.add_argument('--dry-run', action='store_true', help='Log notifications instead of sending them')
    parser.add_argument('--db-path', default=env.DB_PATH, help='SQLite database file')
    args = parser.parse_args(argv)

    setup_logger(debug=args.debug)

    db = PriceDB(args.db_path)
    config = ConfigManager(db)
    config.initialize_defaults()
    dry_run = args.dry_run or config.get('dry_run')

    if not env.TELEGRAM_BOT_TOKEN and not dry_run:
        logger.critical("TELEGRAM_BOT_TOKEN is not set (use --dry-run to run without Telegram)")
        return 1

    try:
        asyncio.run(run_service(config, db, env.TELEGRAM_BOT_TOKEN, dry_run))
    except KeyboardInterrupt:
        logger.info("Interrupted")
    return 0


if __name__ == "__main__":
    sys.exit(main())
