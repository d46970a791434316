# pricewatch/price_services/price_service.py
from abc import ABC, abstractmethod

from pricewatch.pricing.models import PriceQuote
from pricewatch.symbols.catalog import Symbol

class PriceService(ABC):
    @abstractmethod
    async def fetch(self, symbol: Symbol) -> PriceQuote:
        """Return the current quote for symbol or raise FetchError. Must not hang."""
        pass
