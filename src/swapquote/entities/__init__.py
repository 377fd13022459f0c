"""Quote requests and quote entities."""

from swapquote.entities.quote import (
    ClassicQuote,
    DutchLimitQuote,
    Quote,
    QuoteFactory,
    UnknownRoutingType,
    build_quote_response,
    parse_quote,
)
from swapquote.entities.request import (
    DutchLimitConfig,
    DutchLimitRequest,
    QuoteRequest,
    QuoteRequestInfo,
    RoutingType,
    TradeType,
)

__all__ = [
    # Requests
    "QuoteRequestInfo",
    "QuoteRequest",
    "DutchLimitConfig",
    "DutchLimitRequest",
    "RoutingType",
    "TradeType",
    # Quotes
    "Quote",
    "ClassicQuote",
    "DutchLimitQuote",
    "QuoteFactory",
    "UnknownRoutingType",
    "build_quote_response",
    "parse_quote",
]
