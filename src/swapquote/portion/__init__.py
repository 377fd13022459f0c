"""Portion (fee) lookup for token pairs."""

from swapquote.portion.base import (
    BX_PORTION_ADDRESSES,
    BX_PORTION_RESPONSE,
    NO_PORTION_RESPONSE,
    GetPortionResponse,
    Portion,
    PortionType,
    portion_cache_key,
)
from swapquote.portion.cache import InMemoryPortionCache, PortionCache
from swapquote.portion.client import PortionServiceClient, PortionServiceError
from swapquote.portion.fetcher import PortionFetcher

__all__ = [
    "BX_PORTION_ADDRESSES",
    "BX_PORTION_RESPONSE",
    "NO_PORTION_RESPONSE",
    "GetPortionResponse",
    "Portion",
    "PortionType",
    "portion_cache_key",
    "PortionCache",
    "InMemoryPortionCache",
    "PortionServiceClient",
    "PortionServiceError",
    "PortionFetcher",
]
