"""Tests for the portion fetcher."""

from unittest.mock import MagicMock

import pytest

from swapquote.config import Settings
from swapquote.portion import (
    BX_PORTION_RESPONSE,
    NO_PORTION_RESPONSE,
    GetPortionResponse,
    InMemoryPortionCache,
    Portion,
    PortionCache,
    PortionFetcher,
    PortionServiceError,
    PortionType,
    portion_cache_key,
)

ETH_ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"
USDC_ADDRESS = "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48"
UNI_ADDRESS = "0x1f9840a85d5aF5bf1D1762F925BDADdC4201F984"

POSITIVE_TTL = 300
NEGATIVE_TTL = 30

PORTION_RESPONSE = GetPortionResponse(
    has_portion=True,
    portion=Portion(
        bips=15,
        recipient="0x0000000000000000000000000000000000000002",
        type=PortionType.FLAT,
    ),
)


def make_fetcher(client, cache, metrics, enabled=True, **kwargs) -> PortionFetcher:
    return PortionFetcher(
        client=client,
        cache=cache,
        flag_provider=lambda: enabled,
        positive_cache_entry_ttl=POSITIVE_TTL,
        negative_cache_entry_ttl=NEGATIVE_TTL,
        metrics=metrics,
        **kwargs,
    )


class TestPortionCacheKey:
    """Tests for cache key composition."""

    def test_key_ignores_address_case(self):
        """Test keys differing only in address case are equal."""
        assert portion_cache_key(1, "0xABC", 1, "0xdef") == portion_cache_key(1, "0xabc", 1, "0xDEF")

    def test_key_includes_chain_ids(self):
        """Test chain ids are part of the key."""
        assert portion_cache_key(1, "0xabc", 1, "0xdef") != portion_cache_key(10, "0xabc", 1, "0xdef")
        assert portion_cache_key(1, "0xabc", 1, "0xdef") == "PortionFetcher-1-0xabc-1-0xdef"


class TestFlagDisabled:
    """Tests with the portion flag off."""

    @pytest.mark.asyncio
    async def test_returns_no_portion_without_side_effects(self, portion_client, metrics_collector):
        """Test disabled flag never touches cache or service."""
        cache = MagicMock(spec=PortionCache)
        fetcher = make_fetcher(portion_client, cache, metrics_collector, enabled=False)

        for token_in, token_out in [
            (ETH_ZERO_ADDRESS, USDC_ADDRESS),
            (USDC_ADDRESS, UNI_ADDRESS),
        ]:
            response = await fetcher.get_portion(1, token_in, 1, token_out)
            assert response is NO_PORTION_RESPONSE

        portion_client.get_portion.assert_not_called()
        cache.get.assert_not_called()
        cache.set.assert_not_called()
        assert metrics_collector.count("PortionFetcherFlagDisabled") == 2
        assert metrics_collector.count("PortionFetcherRequest") == 2

    @pytest.mark.asyncio
    async def test_flag_is_read_every_call(self, portion_client, cache, metrics_collector):
        """Test toggling the flag takes effect on the next call."""
        flag = {"enabled": False}
        fetcher = PortionFetcher(
            client=portion_client,
            cache=cache,
            flag_provider=lambda: flag["enabled"],
            metrics=metrics_collector,
        )

        assert await fetcher.get_portion(1, ETH_ZERO_ADDRESS, 1, USDC_ADDRESS) is NO_PORTION_RESPONSE

        flag["enabled"] = True
        assert await fetcher.get_portion(1, ETH_ZERO_ADDRESS, 1, USDC_ADDRESS) is BX_PORTION_RESPONSE

    @pytest.mark.asyncio
    async def test_failing_flag_provider_counts_as_disabled(self, portion_client, cache, metrics_collector):
        """Test a flag provider error resolves to no portion."""
        def broken_flag():
            raise RuntimeError("env unavailable")

        fetcher = PortionFetcher(
            client=portion_client,
            cache=cache,
            flag_provider=broken_flag,
            metrics=metrics_collector,
        )

        assert await fetcher.get_portion(1, ETH_ZERO_ADDRESS, 1, USDC_ADDRESS) is NO_PORTION_RESPONSE


class TestAllowlist:
    """Tests for the allowlist short-circuit."""

    @pytest.mark.asyncio
    async def test_allowlisted_pair_gets_flat_portion(self, portion_client, metrics_collector):
        """Test both tokens on the allowlist return the fixed flat portion."""
        cache = MagicMock(spec=PortionCache)
        fetcher = make_fetcher(portion_client, cache, metrics_collector)

        response = await fetcher.get_portion(1, ETH_ZERO_ADDRESS, 1, USDC_ADDRESS)

        assert response is BX_PORTION_RESPONSE
        assert response.has_portion is True
        assert response.portion.bips == 5
        assert response.portion.type == PortionType.FLAT
        assert response.portion.recipient == "0x27213E28D7fDA5c57Fe9e5dD923818DBCcf71c47"
        portion_client.get_portion.assert_not_called()
        cache.get.assert_not_called()

    @pytest.mark.asyncio
    async def test_allowlist_is_case_insensitive(self, portion_client, cache, metrics_collector):
        """Test mixed-case addresses still match the allowlist."""
        fetcher = make_fetcher(portion_client, cache, metrics_collector)

        response = await fetcher.get_portion(1, "ETH", 1, USDC_ADDRESS.upper().replace("0X", "0x"))

        assert response is BX_PORTION_RESPONSE

    @pytest.mark.asyncio
    async def test_pair_outside_allowlist_gets_no_portion(self, portion_client, cache, metrics_collector):
        """Test one non-allowlisted token yields no portion without a service call."""
        fetcher = make_fetcher(portion_client, cache, metrics_collector)

        assert await fetcher.get_portion(1, USDC_ADDRESS, 1, UNI_ADDRESS) is NO_PORTION_RESPONSE
        assert await fetcher.get_portion(1, UNI_ADDRESS, 1, ETH_ZERO_ADDRESS) is NO_PORTION_RESPONSE

        portion_client.get_portion.assert_not_called()
        assert len(cache) == 0


class TestCacheAside:
    """Tests for the service lookup behind the cache."""

    @pytest.mark.asyncio
    async def test_positive_response_cached_with_positive_ttl(
        self, portion_client, cache, clock, metrics_collector
    ):
        """Test a portion response is cached for the positive TTL."""
        portion_client.get_portion.return_value = PORTION_RESPONSE
        fetcher = make_fetcher(portion_client, cache, metrics_collector, allowlist_only=False)

        first = await fetcher.get_portion(1, USDC_ADDRESS, 1, UNI_ADDRESS)
        second = await fetcher.get_portion(1, USDC_ADDRESS.lower(), 1, UNI_ADDRESS.upper().replace("0X", "0x"))

        assert first == PORTION_RESPONSE
        assert second == PORTION_RESPONSE
        portion_client.get_portion.assert_awaited_once_with(1, USDC_ADDRESS, 1, UNI_ADDRESS)

        key = portion_cache_key(1, USDC_ADDRESS, 1, UNI_ADDRESS)
        assert cache.ttl(key) == POSITIVE_TTL
        assert metrics_collector.count("PortionFetcherCacheHit") == 1
        assert metrics_collector.count("PortionFetcherCacheMiss") == 1
        assert metrics_collector.count("PortionFetcherSuccess") == 1
        assert len(metrics_collector.timings("Latency-GetPortion")) == 1

    @pytest.mark.asyncio
    async def test_negative_response_cached_with_negative_ttl(
        self, portion_client, cache, clock, metrics_collector
    ):
        """Test a no-portion response is cached for the negative TTL."""
        portion_client.get_portion.return_value = GetPortionResponse(has_portion=False)
        fetcher = make_fetcher(portion_client, cache, metrics_collector, allowlist_only=False)

        response = await fetcher.get_portion(1, USDC_ADDRESS, 1, UNI_ADDRESS)

        assert response.has_portion is False
        key = portion_cache_key(1, USDC_ADDRESS, 1, UNI_ADDRESS)
        assert cache.ttl(key) == NEGATIVE_TTL

        # Still cached inside the TTL
        clock.advance(NEGATIVE_TTL - 1)
        await fetcher.get_portion(1, USDC_ADDRESS, 1, UNI_ADDRESS)
        assert portion_client.get_portion.await_count == 1

        # Expired afterwards
        clock.advance(2)
        await fetcher.get_portion(1, USDC_ADDRESS, 1, UNI_ADDRESS)
        assert portion_client.get_portion.await_count == 2

    @pytest.mark.asyncio
    async def test_force_portion_bypasses_cache(self, portion_client, metrics_collector):
        """Test force mode calls the service every time and never touches the cache."""
        portion_client.get_portion.return_value = PORTION_RESPONSE
        cache = MagicMock(spec=PortionCache)
        fetcher = make_fetcher(
            portion_client, cache, metrics_collector, allowlist_only=False, force_portion=True
        )

        await fetcher.get_portion(1, USDC_ADDRESS, 1, UNI_ADDRESS)
        await fetcher.get_portion(1, USDC_ADDRESS, 1, UNI_ADDRESS)

        assert portion_client.get_portion.await_count == 2
        cache.get.assert_not_called()
        cache.set.assert_not_called()

    @pytest.mark.asyncio
    async def test_service_error_returns_no_portion_and_skips_cache(
        self, portion_client, cache, metrics_collector
    ):
        """Test a failed service call is not cached and is retried next call."""
        portion_client.get_portion.side_effect = PortionServiceError("HTTP 503", status_code=503)
        fetcher = make_fetcher(portion_client, cache, metrics_collector, allowlist_only=False)

        assert await fetcher.get_portion(1, USDC_ADDRESS, 1, UNI_ADDRESS) is NO_PORTION_RESPONSE
        assert len(cache) == 0

        assert await fetcher.get_portion(1, USDC_ADDRESS, 1, UNI_ADDRESS) is NO_PORTION_RESPONSE
        assert portion_client.get_portion.await_count == 2
        assert metrics_collector.count("PortionFetcherErr") == 2

    @pytest.mark.asyncio
    async def test_unexpected_error_is_absorbed(self, portion_client, cache, metrics_collector):
        """Test any exception from the client resolves to no portion."""
        portion_client.get_portion.side_effect = RuntimeError("boom")
        fetcher = make_fetcher(portion_client, cache, metrics_collector)

        assert await fetcher.fetch_portion(1, USDC_ADDRESS, 1, UNI_ADDRESS) is NO_PORTION_RESPONSE

    @pytest.mark.asyncio
    async def test_cache_read_failure_falls_through_to_service(self, portion_client, metrics_collector):
        """Test a broken cache read is treated as a miss."""
        portion_client.get_portion.return_value = PORTION_RESPONSE
        cache = MagicMock(spec=PortionCache)
        cache.get.side_effect = RuntimeError("cache down")
        cache.set.side_effect = RuntimeError("cache down")
        fetcher = make_fetcher(portion_client, cache, metrics_collector, allowlist_only=False)

        response = await fetcher.get_portion(1, USDC_ADDRESS, 1, UNI_ADDRESS)

        assert response == PORTION_RESPONSE
        assert metrics_collector.count("PortionFetcherCacheErr") == 2

    @pytest.mark.asyncio
    async def test_fetch_portion_reachable_with_allowlist_only(
        self, portion_client, cache, metrics_collector
    ):
        """Test the cache-aside path works directly regardless of the allowlist policy."""
        portion_client.get_portion.return_value = PORTION_RESPONSE
        fetcher = make_fetcher(portion_client, cache, metrics_collector)

        assert await fetcher.fetch_portion(1, USDC_ADDRESS, 1, UNI_ADDRESS) == PORTION_RESPONSE
        assert await fetcher.fetch_portion(1, USDC_ADDRESS, 1, UNI_ADDRESS) == PORTION_RESPONSE
        portion_client.get_portion.assert_awaited_once()


class TestFromSettings:
    """Tests for building a fetcher from settings."""

    def test_settings_are_applied(self):
        """Test settings values flow into the fetcher."""
        settings = Settings(
            portion_api_url="https://portion.test/v1/",
            positive_cache_entry_ttl=120,
            negative_cache_entry_ttl=60,
            force_portion=True,
            portion_allowlist_only=False,
        )

        fetcher = PortionFetcher.from_settings(settings)

        assert fetcher.client.portion_url == "https://portion.test/v1/portion"
        assert fetcher.positive_cache_entry_ttl == 120
        assert fetcher.negative_cache_entry_ttl == 60
        assert fetcher.force_portion is True
        assert fetcher.allowlist_only is False
        assert isinstance(fetcher.cache, InMemoryPortionCache)
