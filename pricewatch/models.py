# pricewatch/models.py
from enum import Enum

class AlertDirection(str, Enum):
    """Side of the target a price has to reach for a target alert to fire"""
    ABOVE = "above"
    BELOW = "below"

class FetchErrorKind(str, Enum):
    TIMEOUT = "timeout"
    TRANSPORT = "transport"
    PARSE_FAILURE = "parse_failure"

class StoreErrorKind(str, Enum):
    WRITE_FAILED = "write_failed"
    QUERY_FAILED = "query_failed"

class SendErrorKind(str, Enum):
    TRANSPORT = "transport"
    INVALID_DESTINATION = "invalid_destination"
    MALFORMED_MESSAGE = "malformed_message"

class RequestErrorKind(str, Enum):
    UNKNOWN_SYMBOL = "unknown_symbol"
    INVALID_PRICE = "invalid_price"
    INVALID_TARGET = "invalid_target"
