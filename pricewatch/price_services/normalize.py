# pricewatch/price_services/normalize.py
from decimal import Decimal, InvalidOperation

from pricewatch.errors import FetchError
from pricewatch.models import FetchErrorKind

# regular, non-breaking, narrow non-breaking and thin spaces
_GROUP_SEPARATORS = (" ", "\u00a0", "\u202f", "\u2009", ".")


def normalize_price(text: str) -> Decimal:
    """Turn a ru-locale price ("7 100,50", "7.100,5") into a Decimal."""
    cleaned = (text or "").strip()
    for sep in _GROUP_SEPARATORS:
        cleaned = cleaned.replace(sep, "")
    cleaned = cleaned.replace(",", ".")

    if not cleaned:
        raise FetchError(FetchErrorKind.PARSE_FAILURE, "empty price text")
    try:
        price = Decimal(cleaned)
    except InvalidOperation as e:
        raise FetchError(FetchErrorKind.PARSE_FAILURE, f"unparseable price {text!r}") from e
    if not price.is_finite() or price < 0:
        raise FetchError(FetchErrorKind.PARSE_FAILURE, f"unusable price {text!r}")
    return price
