# pricewatch/price_services/mock_service.py
import asyncio
from decimal import Decimal
from typing import Dict, Iterable, List, Union

from pricewatch.errors import FetchError
from pricewatch.models import FetchErrorKind
from pricewatch.pricing.models import PriceQuote
from pricewatch.symbols.catalog import Symbol
from .price_service import PriceService

Scripted = Union[Decimal, float, str, Exception]


class MockPriceService(PriceService):
    """Replays a scripted price sequence per ticker; the last entry repeats.

    Exception entries are raised instead of returning a quote.
    """

    def __init__(self, prices: Dict[str, Iterable[Scripted]], delay: float = 0.0):
        self.delay = delay
        self._scripts: Dict[str, List[Scripted]] = {k.upper(): list(v) for k, v in prices.items()}
        self.calls: Dict[str, int] = {}

    def set_prices(self, ticker: str, *values: Scripted) -> None:
        """Replace what the next fetches for ticker return"""
        self._scripts[ticker.upper()] = list(values)

    async def fetch(self, symbol: Symbol) -> PriceQuote:
        self.calls[symbol.ticker] = self.calls.get(symbol.ticker, 0) + 1
        await asyncio.sleep(self.delay)
        script = self._scripts.get(symbol.ticker)
        if not script:
            raise FetchError(FetchErrorKind.TRANSPORT, f"no scripted price for {symbol.ticker}")

        value = script.pop(0) if len(script) > 1 else script[0]
        if isinstance(value, Exception):
            raise value
        return PriceQuote(name=symbol.name, price=Decimal(str(value)))
