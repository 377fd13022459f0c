"""Portion fetcher.

Decides whether a token pair carries a portion (fee). The enabling flag is
read on every call. When enabled, allowlisted pairs get a fixed flat portion
and every other pair gets none; the cache-aside lookup against the portion
service sits behind that and is only reached with ``allowlist_only=False``
or through ``fetch_portion``. All failures resolve to the no-portion response.
"""

import logging
import time
from typing import Callable, Optional

from swapquote.config import Settings, get_settings, portion_flag_from_env
from swapquote.metrics import MetricsCollector, MetricUnit, metrics as default_metrics
from swapquote.portion.base import (
    BX_PORTION_RESPONSE,
    NO_PORTION_RESPONSE,
    GetPortionResponse,
    is_allowlisted_pair,
    portion_cache_key,
)
from swapquote.portion.cache import InMemoryPortionCache, PortionCache
from swapquote.portion.client import PortionServiceClient

logger = logging.getLogger(__name__)

FlagProvider = Callable[[], bool]


class PortionFetcher:
    """Resolves the portion for a token pair."""

    def __init__(
        self,
        client: PortionServiceClient,
        cache: PortionCache,
        flag_provider: FlagProvider = portion_flag_from_env,
        positive_cache_entry_ttl: int = 600,
        negative_cache_entry_ttl: int = 600,
        force_portion: bool = False,
        allowlist_only: bool = True,
        metrics: Optional[MetricsCollector] = None,
    ):
        """Initialize portion fetcher.

        Args:
            client: Remote portion service client
            cache: Cache store for service responses
            flag_provider: Returns whether portions are enabled; called every request
            positive_cache_entry_ttl: TTL for responses that carry a portion
            negative_cache_entry_ttl: TTL for responses without a portion
            force_portion: Testing mode, skip cache read and write
            allowlist_only: Non-allowlisted pairs get no portion without a service call
            metrics: Metrics collector (defaults to the process-wide one)
        """
        self.client = client
        self.cache = cache
        self.flag_provider = flag_provider
        self.positive_cache_entry_ttl = positive_cache_entry_ttl
        self.negative_cache_entry_ttl = negative_cache_entry_ttl
        self.force_portion = force_portion
        self.allowlist_only = allowlist_only
        self.metrics = metrics or default_metrics

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        cache: Optional[PortionCache] = None,
    ) -> "PortionFetcher":
        """Build a fetcher from application settings."""
        settings = settings or get_settings()
        return cls(
            client=PortionServiceClient(
                settings.portion_api_url,
                timeout=settings.portion_request_timeout,
            ),
            cache=cache if cache is not None else InMemoryPortionCache(),
            positive_cache_entry_ttl=settings.positive_cache_entry_ttl,
            negative_cache_entry_ttl=settings.negative_cache_entry_ttl,
            force_portion=settings.force_portion,
            allowlist_only=settings.portion_allowlist_only,
        )

    def _is_enabled(self) -> bool:
        try:
            return bool(self.flag_provider())
        except Exception as e:
            logger.error(f"Portion flag lookup failed, treating as disabled: {e}")
            return False

    async def get_portion(
        self,
        token_in_chain_id: int,
        token_in_address: str,
        token_out_chain_id: int,
        token_out_address: str,
    ) -> GetPortionResponse:
        """Get the portion for a token pair. Never raises."""
        self.metrics.put_metric("PortionFetcherRequest", 1)

        if not self._is_enabled():
            self.metrics.put_metric("PortionFetcherFlagDisabled", 1)
            return NO_PORTION_RESPONSE

        if is_allowlisted_pair(token_in_address, token_out_address):
            self.metrics.put_metric("PortionFetcherAllowlistHit", 1)
            return BX_PORTION_RESPONSE

        if self.allowlist_only:
            return NO_PORTION_RESPONSE

        return await self.fetch_portion(
            token_in_chain_id, token_in_address, token_out_chain_id, token_out_address
        )

    async def fetch_portion(
        self,
        token_in_chain_id: int,
        token_in_address: str,
        token_out_chain_id: int,
        token_out_address: str,
    ) -> GetPortionResponse:
        """Cache-aside lookup against the portion service. Never raises."""
        key = portion_cache_key(
            token_in_chain_id, token_in_address, token_out_chain_id, token_out_address
        )

        # force_portion skips the cache in both directions
        if not self.force_portion:
            cached = self._cache_get(key)
            if cached is not None:
                self.metrics.put_metric("PortionFetcherCacheHit", 1)
                return cached

        try:
            started = time.monotonic()
            response = await self.client.get_portion(
                token_in_chain_id, token_in_address, token_out_chain_id, token_out_address
            )
            latency_ms = (time.monotonic() - started) * 1000
        except Exception as e:
            logger.error(f"PortionFetcherErr: {type(e).__name__}: {e}")
            self.metrics.put_metric("PortionFetcherErr", 1)
            self.metrics.put_metric("PortionFetcherCacheMiss", 1)
            return NO_PORTION_RESPONSE

        self.metrics.put_metric("Latency-GetPortion", latency_ms, MetricUnit.MILLISECONDS)
        self.metrics.put_metric("PortionFetcherSuccess", 1)
        self.metrics.put_metric("PortionFetcherCacheMiss", 1)

        if not self.force_portion:
            ttl = (
                self.positive_cache_entry_ttl
                if response.portion is not None
                else self.negative_cache_entry_ttl
            )
            self._cache_set(key, response, ttl)

        return response

    def _cache_get(self, key: str) -> Optional[GetPortionResponse]:
        try:
            return self.cache.get(key)
        except Exception as e:
            logger.warning(f"Portion cache read failed for {key}: {e}")
            self.metrics.put_metric("PortionFetcherCacheErr", 1)
            return None

    def _cache_set(self, key: str, response: GetPortionResponse, ttl: int) -> None:
        try:
            self.cache.set(key, response, ttl)
        except Exception as e:
            logger.warning(f"Portion cache write failed for {key}: {e}")
            self.metrics.put_metric("PortionFetcherCacheErr", 1)

    async def aclose(self) -> None:
        await self.client.aclose()
