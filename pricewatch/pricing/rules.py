# pricewatch/pricing/rules.py
"""
Decision primitives shared by the deviation monitor and the target alert
registry. Everything here is pure: no I/O, no clocks, Decimal in and out.
Message text is Telegram HTML, so interpolated strings are escaped.
"""
from decimal import ROUND_HALF_UP, Decimal
from html import escape
from typing import Optional

from pricewatch.errors import RequestError
from pricewatch.models import AlertDirection, RequestErrorKind
from pricewatch.pricing.models import TargetAlert

HUNDRED = Decimal("100")
DISPLAY_PRECISION = Decimal("0.01")


def percent_deviation(current: Decimal, average: Optional[Decimal]) -> Optional[Decimal]:
    """(current - average) / average * 100, or None when there is no usable average."""
    if average is None or average <= 0:
        return None
    return (current - average) / average * HUNDRED


def breaches_threshold(pct: Decimal, threshold_pct: Decimal) -> bool:
    """Compare the deviation at the precision it is reported with (two decimals)."""
    return abs(pct).quantize(DISPLAY_PRECISION, rounding=ROUND_HALF_UP) >= threshold_pct


def should_notify(current: Decimal, last_alert_price: Optional[Decimal], rearm_pct: Decimal) -> bool:
    """Re-arm rule: stay quiet while the price sits within rearm_pct of the last alerted price."""
    if last_alert_price is None or last_alert_price <= 0:
        return True
    ratio = current / last_alert_price
    band = rearm_pct / HUNDRED
    return ratio < 1 - band or ratio > 1 + band


def derive_direction(current: Decimal, target: Decimal, name: str = "") -> AlertDirection:
    if target > current:
        return AlertDirection.ABOVE
    if target < current:
        return AlertDirection.BELOW
    raise RequestError(
        RequestErrorKind.INVALID_TARGET,
        f"{name or 'Инструмент'} уже имеет цену {current:.2f}",
    )


def is_triggered(alert: TargetAlert, price: Decimal) -> bool:
    if alert.direction == AlertDirection.ABOVE:
        return price >= alert.target_price
    return price <= alert.target_price


def format_deviation_message(ticker: str, current: Decimal, average: Decimal, window_label: str, pct: Decimal) -> str:
    return (
        f"🚨 <b>Резкое изменение цены {escape(ticker)}!</b>\n"
        f"Текущая цена: {current:.2f}\n"
        f"Средняя цена за {window_label}: {average:.2f}\n"
        f"Отклонение: {pct:+.2f}%"
    )


def format_target_message(name: str, target: Decimal, current: Decimal) -> str:
    return f"🔔 Оповещение сработало для {escape(name)}: цена достигла {target:.2f} (текущее значение: {current:.2f})"
