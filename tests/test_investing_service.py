import asyncio
from decimal import Decimal

import httpx
import pytest

from pricewatch.config.settings import USER_AGENTS
from pricewatch.errors import FetchError
from pricewatch.models import FetchErrorKind
from pricewatch.price_services.investing_service import InvestingPriceService, parse_quote
from pricewatch.symbols.catalog import lookup

LKOH = lookup("LKOH")

PAGE = """
<html><body>
  <h1>  Лукойл (LKOH)  </h1>
  <div class="x">
    <div data-test="instrument-price-last">7 051,50</div>
  </div>
</body></html>
"""


def fetch_with(handler, timeout=5.0):
    service = InvestingPriceService(timeout=timeout, transport=httpx.MockTransport(handler))
    return asyncio.run(service.fetch(LKOH))


def test_parse_quote_reads_name_and_price():
    quote = parse_quote(PAGE, LKOH)
    assert quote.name == "Лукойл (LKOH)"
    assert quote.price == Decimal("7051.50")


def test_parse_quote_falls_back_to_catalog_name():
    quote = parse_quote('<div data-test="instrument-price-last">12,5</div>', LKOH)
    assert quote.name == "Лукойл"
    assert quote.price == Decimal("12.5")


def test_missing_price_is_parse_failure():
    with pytest.raises(FetchError) as exc:
        parse_quote("<html><h1>Лукойл</h1></html>", LKOH)
    assert exc.value.kind == FetchErrorKind.PARSE_FAILURE


def test_fetch_requests_locator_with_browser_headers():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, text=PAGE)

    quote = fetch_with(handler)

    assert quote.price == Decimal("7051.50")
    assert str(seen[0].url) == LKOH.locator
    assert seen[0].headers["User-Agent"] in USER_AGENTS
    assert seen[0].headers["Accept-Language"].startswith("ru-RU")


def test_http_error_status_is_transport_error():
    with pytest.raises(FetchError) as exc:
        fetch_with(lambda request: httpx.Response(503, text="busy"))
    assert exc.value.kind == FetchErrorKind.TRANSPORT


def test_connection_error_is_transport_error():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(FetchError) as exc:
        fetch_with(handler)
    assert exc.value.kind == FetchErrorKind.TRANSPORT


def test_slow_page_times_out():
    async def handler(request):
        await asyncio.sleep(1)
        return httpx.Response(200, text=PAGE)

    with pytest.raises(FetchError) as exc:
        fetch_with(handler, timeout=0.05)
    assert exc.value.kind == FetchErrorKind.TIMEOUT


def test_warm_up_keeps_cookies_set_before_a_redirect():
    def handler(request):
        if request.url.path == "/":
            return httpx.Response(302, headers={"Location": "/welcome", "Set-Cookie": "consent=1; Path=/"})
        return httpx.Response(200, headers={"Set-Cookie": "session=abc; Path=/"}, text="ok")

    service = InvestingPriceService(transport=httpx.MockTransport(handler))
    asyncio.run(service.warm_up())

    assert service._cookies.get("consent") == "1"
    assert service._cookies.get("session") == "abc"


def test_warm_up_cookies_are_sent_but_never_shared_back():
    cookie_headers = []

    def handler(request):
        if request.url.path == "/":
            return httpx.Response(200, headers={"Set-Cookie": "session=abc; Path=/"}, text="ok")
        cookie_headers.append(request.headers.get("Cookie", ""))
        return httpx.Response(200, headers={"Set-Cookie": "tracker=xyz; Path=/"}, text=PAGE)

    service = InvestingPriceService(transport=httpx.MockTransport(handler))

    async def go():
        await service.warm_up()
        await asyncio.gather(service.fetch(LKOH), service.fetch(lookup("SBER")))

    asyncio.run(go())

    assert all("session=abc" in header for header in cookie_headers)
    assert all("tracker" not in header for header in cookie_headers)
    assert "tracker" not in service._cookies
    assert service._cookies.get("session") == "abc"
