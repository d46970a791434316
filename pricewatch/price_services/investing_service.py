# pricewatch/price_services/investing_service.py
import asyncio
import random
from typing import Optional

import httpx
from bs4 import BeautifulSoup

from pricewatch.config.settings import (
    BASE_HEADERS,
    INVESTING_BASE_URL,
    NAME_SELECTOR,
    PRICE_SELECTOR,
    REFERERS,
    USER_AGENTS,
)
from pricewatch.errors import FetchError
from pricewatch.logger import logger
from pricewatch.models import FetchErrorKind
from pricewatch.pricing.models import PriceQuote
from pricewatch.symbols.catalog import Symbol
from .normalize import normalize_price
from .price_service import PriceService


def parse_quote(html: str, symbol: Symbol) -> PriceQuote:
    """Extract display name and last price from an instrument page."""
    soup = BeautifulSoup(html, "html.parser")

    price_el = soup.select_one(PRICE_SELECTOR)
    if price_el is None:
        raise FetchError(FetchErrorKind.PARSE_FAILURE, f"no price element for {symbol.ticker}")
    price = normalize_price(price_el.get_text(strip=True))

    name_el = soup.select_one(NAME_SELECTOR)
    name = name_el.get_text(strip=True) if name_el else ""
    return PriceQuote(name=name or symbol.name, price=price)


class InvestingPriceService(PriceService):
    """Scrapes the last price from investing.com instrument pages.

    The cookie jar filled by warm_up() is only read afterwards: every fetch
    works on its own copy, so concurrent monitors never share session state.
    """

    def __init__(self, timeout: float = 10.0, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.timeout = timeout
        self._transport = transport
        self._cookies = httpx.Cookies()

    def _headers(self) -> dict:
        headers = dict(BASE_HEADERS)
        headers["User-Agent"] = random.choice(USER_AGENTS)
        headers["Referer"] = random.choice(REFERERS)
        return headers

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            headers=self._headers(),
            cookies=httpx.Cookies(self._cookies),
            timeout=self.timeout,
            follow_redirects=True,
            transport=self._transport,
        )

    async def warm_up(self) -> None:
        """Visit the site root once so later requests carry its session cookies."""
        try:
            async with self._client() as client:
                response = await client.get(INVESTING_BASE_URL)
                # client.cookies also holds cookies set on redirect hops
                self._cookies.update(client.cookies)
                logger.info(f"[Investing] Warm-up HTTP {response.status_code}, {len(self._cookies)} cookies")
        except httpx.HTTPError as e:
            logger.warning(f"[Investing] Warm-up request failed: {e}")

    async def fetch(self, symbol: Symbol) -> PriceQuote:
        try:
            return await asyncio.wait_for(self._fetch(symbol), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            raise FetchError(
                FetchErrorKind.TIMEOUT,
                f"no data for {symbol.ticker} within {self.timeout}s",
            ) from e

    async def _fetch(self, symbol: Symbol) -> PriceQuote:
        try:
            async with self._client() as client:
                response = await client.get(symbol.locator)
        except httpx.TimeoutException as e:
            raise FetchError(FetchErrorKind.TIMEOUT, f"request timed out for {symbol.ticker}") from e
        except httpx.HTTPError as e:
            raise FetchError(FetchErrorKind.TRANSPORT, f"request failed for {symbol.ticker}: {e}") from e

        logger.debug(f"[Investing] HTTP {response.status_code} for {symbol.ticker}")
        if response.status_code != 200:
            raise FetchError(
                FetchErrorKind.TRANSPORT,
                f"HTTP {response.status_code} for {symbol.ticker}",
            )

        quote = parse_quote(response.text, symbol)
        logger.info(f"[Investing] Retrieved price for {symbol.ticker}: {quote.price}")
        return quote
