# pricewatch/symbols/catalog.py
from dataclasses import dataclass
from typing import Dict, List

from pricewatch.config.settings import INVESTING_BASE_URL
from pricewatch.errors import RequestError
from pricewatch.models import RequestErrorKind


@dataclass(frozen=True)
class Symbol:
    ticker: str
    locator: str  # page the price is scraped from
    name: str


def _equity(ticker: str, slug: str, name: str) -> Symbol:
    return Symbol(ticker=ticker, locator=f"{INVESTING_BASE_URL}/equities/{slug}", name=name)


STOCKS: Dict[str, Symbol] = {
    s.ticker: s
    for s in (
        _equity("LKOH", "lukoil_rts", "Лукойл"),
        _equity("AEROFLOT", "aeroflot", "Аэрофлот"),
        _equity("AFKS", "afk-sistema_rts", "АФК Система"),
        _equity("T", "tcs-group-holding-plc", "TCS Group Holding Plc"),
        _equity("MAGN", "mmk_rts", "ММК"),
        _equity("SBER", "sberbank_rts", "Сбербанк"),
        _equity("YDEX", "yandex", "Яндекс"),
        _equity("MSTT", "mostotrest_rts", "Мостотрест"),
        _equity("APTK", "apteka-36-6_rts", "Аптека-36.6"),
        _equity("WUSH", "whoosh-holding-pao", "Whoosh Holding"),
        _equity("HEAD", "headhunter-ipjsc", "Хэдхантер"),
        _equity("FLOT", "sovcomflot-pao", "Совкомфлот"),
        _equity("CHMF", "severstal_rts", "Северсталь"),
        _equity("GAZP", "gazprom_rts", "Газпром"),
        _equity("SIBN", "gazprom-neft_rts", "Газпром нефть"),
        _equity("BLNG", "belon_rts", "Белон"),
    )
}


def lookup(ticker: str) -> Symbol:
    """Resolve a ticker (any case, surrounding blanks ignored) to its catalog entry."""
    key = (ticker or "").strip().upper()
    symbol = STOCKS.get(key)
    if symbol is None:
        raise RequestError(
            RequestErrorKind.UNKNOWN_SYMBOL,
            f"Тикер {key} не найден в базе.",
        )
    return symbol


def list_symbols() -> List[Symbol]:
    return sorted(STOCKS.values(), key=lambda s: s.ticker)
