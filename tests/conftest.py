"""Pytest configuration and fixtures."""

import os
from unittest.mock import AsyncMock

import pytest

# Set test environment
os.environ["ENVIRONMENT"] = "test"
os.environ["DEBUG"] = "false"
os.environ.pop("ENABLE_PORTION", None)
os.environ.pop("FORCE_PORTION", None)

from swapquote.entities import QuoteRequest, QuoteRequestInfo, TradeType
from swapquote.metrics import MetricsCollector
from swapquote.portion import InMemoryPortionCache, PortionServiceClient

USDC_ADDRESS = "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48"
UNI_ADDRESS = "0x1f9840a85d5aF5bf1D1762F925BDADdC4201F984"


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock) -> InMemoryPortionCache:
    return InMemoryPortionCache(clock=clock)


@pytest.fixture
def metrics_collector() -> MetricsCollector:
    return MetricsCollector()


@pytest.fixture
def portion_client() -> AsyncMock:
    """Portion service client with a mocked get_portion."""
    return AsyncMock(spec=PortionServiceClient)


def make_request(
    trade_type: TradeType = TradeType.EXACT_INPUT,
    swapper: str = None,
    slippage_tolerance: str = None,
    amount: int = 100,
) -> QuoteRequest:
    """Build a classic quote request for USDC -> UNI on mainnet."""
    return QuoteRequest(
        info=QuoteRequestInfo(
            request_id="request-1",
            token_in_chain_id=1,
            token_out_chain_id=1,
            token_in=USDC_ADDRESS,
            token_out=UNI_ADDRESS,
            amount=amount,
            type=trade_type,
            slippage_tolerance=slippage_tolerance,
            swapper=swapper,
        )
    )


def classic_quote_body(**overrides) -> dict:
    """Upstream classic quote payload."""
    body = {
        "quoteId": "upstream-quote-id",
        "amount": "100",
        "amountDecimals": "0.0001",
        "quote": "95",
        "quoteDecimals": "0.000095",
        "quoteGasAdjusted": "90",
        "quoteGasAdjustedDecimals": "0.00009",
        "gasUseEstimate": "100000",
        "gasUseEstimateQuote": "5",
        "gasUseEstimateQuoteDecimals": "0.000005",
        "gasUseEstimateUSD": "2.50",
        "simulationStatus": "UNATTEMPTED",
        "gasPriceWei": "10000",
        "blockNumber": "1234",
        "route": [],
        "routeString": "USDC -- [100%] --> UNI",
    }
    body.update(overrides)
    return body


@pytest.fixture
def request_factory():
    return make_request


@pytest.fixture
def classic_body():
    return classic_quote_body
