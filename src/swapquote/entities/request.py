"""Quote request types."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class TradeType(str, Enum):
    """Which side of the trade is fixed by the requester."""
    EXACT_INPUT = "EXACT_INPUT"
    EXACT_OUTPUT = "EXACT_OUTPUT"


class RoutingType(str, Enum):
    """Execution mechanism a quote is for."""
    CLASSIC = "CLASSIC"          # Immediate on-chain swap
    DUTCH_LIMIT = "DUTCH_LIMIT"  # Limit order filled later by a filler


@dataclass(frozen=True)
class QuoteRequestInfo:
    """Shared fields of every quote request.

    Attributes:
        request_id: Caller-assigned request identifier
        token_in_chain_id: Chain of the input token
        token_out_chain_id: Chain of the output token
        token_in: Input token address
        token_out: Output token address
        amount: Fixed amount in base units (input for EXACT_INPUT, output for EXACT_OUTPUT)
        type: Trade type
        slippage_tolerance: Slippage in percent as a decimal string (e.g. "0.5")
        swapper: Address that will execute the trade, if known
    """
    request_id: str
    token_in_chain_id: int
    token_out_chain_id: int
    token_in: str
    token_out: str
    amount: int
    type: TradeType
    slippage_tolerance: Optional[str] = None
    swapper: Optional[str] = None


@dataclass(frozen=True)
class QuoteRequest:
    """Request for a quote."""
    info: QuoteRequestInfo

    @property
    def routing_type(self) -> RoutingType:
        return RoutingType.CLASSIC


DEFAULT_AUCTION_PERIOD_SECS = 60
DEFAULT_DEADLINE_BUFFER_SECS = 12


@dataclass(frozen=True)
class DutchLimitConfig:
    """Limit-order specific request settings."""
    swapper: Optional[str] = None
    auction_period_secs: int = DEFAULT_AUCTION_PERIOD_SECS
    deadline_buffer_secs: int = DEFAULT_DEADLINE_BUFFER_SECS


@dataclass(frozen=True)
class DutchLimitRequest(QuoteRequest):
    """Request for a limit-order quote."""
    config: DutchLimitConfig = field(default_factory=DutchLimitConfig)

    @property
    def routing_type(self) -> RoutingType:
        return RoutingType.DUTCH_LIMIT

    @classmethod
    def from_request(cls, request: QuoteRequest) -> "DutchLimitRequest":
        """Promote a plain request using default limit-order settings."""
        if isinstance(request, DutchLimitRequest):
            return request
        return cls(info=request.info, config=DutchLimitConfig(swapper=request.info.swapper))

    @property
    def swapper(self) -> Optional[str]:
        return self.config.swapper or self.info.swapper
