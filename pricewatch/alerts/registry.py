# pricewatch/alerts/registry.py
import asyncio
from decimal import Decimal
from typing import List

from pricewatch.errors import FetchError, RequestError, SendError
from pricewatch.logger import logger
from pricewatch.models import RequestErrorKind
from pricewatch.notifiers.notifier import Notifier
from pricewatch.price_services.price_service import PriceService
from pricewatch.pricing.models import TargetAlert
from pricewatch.pricing.rules import derive_direction, format_target_message, is_triggered
from pricewatch.symbols.catalog import lookup


class TargetAlertRegistry:
    """Pending "tell me when the price reaches X" requests.

    The lock only guards the list itself; fetches and sends always happen
    outside of it so a slow page never stalls submit().
    """

    def __init__(self, source: PriceService, notifier: Notifier, max_concurrency: int = 4):
        self.source = source
        self.notifier = notifier
        self._alerts: List[TargetAlert] = []
        self._lock = asyncio.Lock()
        self._fetch_slots = asyncio.Semaphore(max_concurrency)

    async def submit(self, ticker: str, target_price: Decimal, destination: int) -> TargetAlert:
        """Create an alert for destination. Raises RequestError or FetchError, never leaves partial state."""
        symbol = lookup(ticker)
        if not target_price.is_finite() or target_price <= 0:
            raise RequestError(RequestErrorKind.INVALID_PRICE, "Неверный формат цены. Попробуйте еще раз.")

        quote = await self.source.fetch(symbol)
        direction = derive_direction(quote.price, target_price, quote.name)
        alert = TargetAlert(
            symbol=symbol.ticker,
            target_price=target_price,
            destination=destination,
            direction=direction,
        )
        async with self._lock:
            self._alerts.append(alert)
        logger.info(
            f"[Alerts] #{alert.alert_id} {symbol.ticker} {direction.value} {target_price} "
            f"for {destination} (now {quote.price})"
        )
        return alert

    async def snapshot(self) -> List[TargetAlert]:
        async with self._lock:
            return list(self._alerts)

    async def pending_for(self, destination: int) -> List[TargetAlert]:
        return [a for a in await self.snapshot() if a.destination == destination]

    async def sweep(self) -> List[TargetAlert]:
        """Evaluate every pending alert once and drop the ones delivered. Returns the dropped alerts."""
        pending = await self.snapshot()
        if not pending:
            return []

        outcomes = await asyncio.gather(*(self._evaluate(alert) for alert in pending))
        fired = [alert for alert, done in zip(pending, outcomes) if done]
        fired_ids = {alert.alert_id for alert in fired}

        async with self._lock:
            # alerts submitted while the sweep ran are not in fired_ids and survive
            self._alerts = [a for a in self._alerts if a.alert_id not in fired_ids]

        logger.info(f"[Alerts] Sweep: {len(pending)} checked, {len(fired)} fired")
        return fired

    async def _evaluate(self, alert: TargetAlert) -> bool:
        """True only when the alert triggered and its notification went out."""
        try:
            symbol = lookup(alert.symbol)
            async with self._fetch_slots:
                quote = await self.source.fetch(symbol)
        except (FetchError, RequestError) as e:
            logger.warning(f"[Alerts] #{alert.alert_id} {alert.symbol} check failed: {e}")
            return False
        except Exception:
            logger.exception(f"[Alerts] #{alert.alert_id} {alert.symbol} unexpected error")
            return False

        if not is_triggered(alert, quote.price):
            return False

        try:
            await self.notifier.send(
                alert.destination,
                format_target_message(quote.name, alert.target_price, quote.price),
            )
        except SendError as e:
            logger.error(f"[Alerts] #{alert.alert_id} triggered but delivery failed, keeping it: {e}")
            return False
        except Exception:
            logger.exception(f"[Alerts] #{alert.alert_id} unexpected send error, keeping it")
            return False
        return True

    def start(self, interval: float) -> asyncio.Task:
        logger.info(f"[Alerts] Sweeping every {interval}s")
        return asyncio.create_task(self.run(interval), name="target-alert-sweep")

    async def run(self, interval: float):
        while True:
            try:
                await self.sweep()
            except Exception:
                logger.exception("[Alerts] Sweep failed, retrying next interval")
            await asyncio.sleep(interval)
