"""Quote factory.

Dispatches an upstream payload to the quote class for its routing type.
An unknown routing type is a caller or configuration defect and raises.
"""

import logging
from typing import Union

from swapquote.entities.quote.base import Quote
from swapquote.entities.quote.classic import ClassicQuote
from swapquote.entities.quote.dutch_limit import DutchLimitQuote
from swapquote.entities.request import QuoteRequest, RoutingType

logger = logging.getLogger(__name__)


class UnknownRoutingType(ValueError):
    """Raised when a payload carries a routing type no quote class handles."""

    def __init__(self, routing_type: object):
        self.routing_type = routing_type
        super().__init__(f"Unknown routing type: {routing_type}")


def _resolve_routing_type(routing_type: Union[RoutingType, str]) -> RoutingType:
    if isinstance(routing_type, RoutingType):
        return routing_type
    try:
        return RoutingType(routing_type)
    except ValueError:
        raise UnknownRoutingType(routing_type) from None


def parse_quote(
    request: QuoteRequest,
    routing_type: Union[RoutingType, str],
    quote: dict,
) -> Quote:
    """Build the quote entity for ``routing_type`` from an upstream payload.

    Raises:
        UnknownRoutingType: routing type has no quote class
    """
    routing = _resolve_routing_type(routing_type)

    if routing == RoutingType.CLASSIC:
        return ClassicQuote.from_response_body(request, quote)
    elif routing == RoutingType.DUTCH_LIMIT:
        return DutchLimitQuote.from_response_body(request, quote)
    else:
        raise UnknownRoutingType(routing)


def build_quote_response(body: dict, request: QuoteRequest) -> Quote:
    """Parse a ``{"routing": ..., "quote": {...}}`` response body."""
    logger.debug(f"Parsing {body.get('routing')} quote for request {request.info.request_id}")
    return parse_quote(request, body.get("routing"), body.get("quote") or {})


class QuoteFactory:
    """Object wrapper over ``parse_quote`` for injection into services."""

    @staticmethod
    def parse(
        request: QuoteRequest,
        routing_type: Union[RoutingType, str],
        quote: dict,
    ) -> Quote:
        return parse_quote(request, routing_type, quote)

    @staticmethod
    def from_response_body(body: dict, request: QuoteRequest) -> Quote:
        return build_quote_response(body, request)
