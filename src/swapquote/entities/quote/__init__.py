"""Quote entities, one class per routing type."""

from swapquote.entities.quote.base import Quote
from swapquote.entities.quote.classic import ClassicQuote, ClassicQuoteData
from swapquote.entities.quote.dutch_limit import DutchLimitQuote, DutchLimitQuoteData
from swapquote.entities.quote.factory import (
    QuoteFactory,
    UnknownRoutingType,
    build_quote_response,
    parse_quote,
)

__all__ = [
    "Quote",
    "ClassicQuote",
    "ClassicQuoteData",
    "DutchLimitQuote",
    "DutchLimitQuoteData",
    "QuoteFactory",
    "UnknownRoutingType",
    "build_quote_response",
    "parse_quote",
]
