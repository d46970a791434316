# pricewatch/monitoring/deviation_monitor.py
import asyncio
from datetime import timedelta
from decimal import Decimal
from typing import Callable, Optional

from pricewatch.errors import FetchError, SendError, StoreError
from pricewatch.logger import logger
from pricewatch.notifiers.notifier import Notifier
from pricewatch.price_services.price_service import PriceService
from pricewatch.pricing.models import DeviationWatch, utc_now
from pricewatch.pricing.rules import (
    breaches_threshold,
    format_deviation_message,
    percent_deviation,
    should_notify,
)
from pricewatch.storage.price_store import PriceStore


def window_label(window: timedelta) -> str:
    minutes, seconds = divmod(int(window.total_seconds()), 60)
    if seconds:
        return f"{minutes} мин {seconds} с" if minutes else f"{seconds} с"
    return f"{minutes} мин"


class DeviationMonitor:
    """Samples a watched symbol forever and reports sharp moves away from its moving average.

    One DeviationMonitor can drive any number of watches; each watch gets its
    own task and is the only writer of its last_alert_prices.
    """

    def __init__(
        self,
        source: PriceService,
        store: PriceStore,
        notifier: Notifier,
        clock: Callable = utc_now,
        sleep: Callable = asyncio.sleep,
    ):
        self.source = source
        self.store = store
        self.notifier = notifier
        self._clock = clock
        self._sleep = sleep

    def start(self, watch: DeviationWatch) -> asyncio.Task:
        """Launch the unattended loop for watch on the running event loop"""
        logger.info(
            f"[Monitor {watch.symbol.ticker}] Starting: every {watch.poll_interval}s, "
            f"window {window_label(watch.averaging_window)}, threshold {watch.deviation_threshold_pct}%"
        )
        return asyncio.create_task(self.run(watch), name=f"monitor-{watch.symbol.ticker}")

    async def run(self, watch: DeviationWatch):
        while True:
            try:
                await self.step(watch)
            except Exception:
                logger.exception(f"[Monitor {watch.symbol.ticker}] Unexpected error, continuing")
            await self._sleep(watch.poll_interval)

    async def step(self, watch: DeviationWatch) -> Optional[Decimal]:
        """One fetch-store-evaluate pass. Returns the deviation in percent when it could be computed."""
        ticker = watch.symbol.ticker
        prefix = f"[Monitor {ticker}]"

        try:
            quote = await self.source.fetch(watch.symbol)
        except FetchError as e:
            logger.warning(f"{prefix} Fetch failed ({e.kind.value}): {e}")
            return None
        current = quote.price
        now = self._clock()
        logger.info(f"{prefix} Current price: {current:.2f}")

        try:
            await asyncio.to_thread(self.store.append, ticker, current, now)
        except StoreError as e:
            logger.error(f"{prefix} Could not save price: {e}")

        try:
            average = await asyncio.to_thread(self.store.average_since, ticker, now - watch.averaging_window)
        except StoreError as e:
            logger.error(f"{prefix} Could not read average: {e}")
            return None

        pct = percent_deviation(current, average)
        if pct is None:
            logger.debug(f"{prefix} No usable average over {window_label(watch.averaging_window)}, skipping")
            return None
        logger.info(f"{prefix} Average {average:.2f}, deviation {pct:+.2f}%")

        if not breaches_threshold(pct, watch.deviation_threshold_pct):
            if watch.last_alert_prices:
                logger.info(f"{prefix} Back under threshold, re-armed")
            watch.last_alert_prices.clear()
            return pct

        await self._notify(watch, current, average, pct)
        return pct

    async def _notify(self, watch: DeviationWatch, current: Decimal, average: Decimal, pct: Decimal):
        """Send to every destination the re-arm rule lets through; only successful sends move a baseline."""
        prefix = f"[Monitor {watch.symbol.ticker}]"
        if not watch.destinations:
            logger.warning(f"{prefix} Deviation {pct:+.2f}% but no destinations configured")
            return

        due = [
            destination for destination in watch.destinations
            if should_notify(current, watch.last_alert_prices.get(destination), watch.rearm_threshold_pct)
        ]
        if not due:
            logger.debug(f"{prefix} Still near last alerted price {current}, suppressed")
            return

        text = format_deviation_message(
            watch.symbol.ticker, current, average, window_label(watch.averaging_window), pct
        )
        delivered = 0
        for destination in due:
            try:
                await self.notifier.send(destination, text)
            except SendError as e:
                logger.error(f"{prefix} Notification to {destination} failed, will retry: {e}")
                continue
            watch.last_alert_prices[destination] = current
            delivered += 1

        if delivered:
            logger.info(f"{prefix} Deviation alert sent to {delivered}/{len(due)} chats")
