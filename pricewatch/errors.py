# pricewatch/errors.py
from pricewatch.models import (
    FetchErrorKind,
    RequestErrorKind,
    SendErrorKind,
    StoreErrorKind,
)


class PriceWatchError(Exception):
    """Base class for every recoverable error raised by pricewatch"""

    def __init__(self, kind, message: str = ""):
        self.kind = kind
        super().__init__(message or kind.value)


class FetchError(PriceWatchError):
    """A price sample could not be obtained (timeout, transport, parse)"""

    def __init__(self, kind: FetchErrorKind, message: str = ""):
        super().__init__(kind, message)


class StoreError(PriceWatchError):
    def __init__(self, kind: StoreErrorKind, message: str = ""):
        super().__init__(kind, message)


class SendError(PriceWatchError):
    def __init__(self, kind: SendErrorKind, message: str = ""):
        super().__init__(kind, message)


class RequestError(PriceWatchError):
    """User input rejected before any state was touched.

    The message is meant to be shown to the requester as-is.
    """

    def __init__(self, kind: RequestErrorKind, message: str = ""):
        super().__init__(kind, message)
