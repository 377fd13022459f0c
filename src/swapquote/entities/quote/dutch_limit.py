"""Dutch limit-order quote.

A filler quotes both sides explicitly. The order decays linearly from the
start amounts to the end amounts over the auction period; the end amount
of the computed side is widened by the requested slippage.
"""

import secrets
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from swapquote.entities.quote.base import Quote, drop_none, is_integer_string, parse_amount
from swapquote.entities.request import (
    DutchLimitRequest,
    QuoteRequest,
    RoutingType,
    TradeType,
)


BPS = 10_000
DEFAULT_SLIPPAGE_TOLERANCE = "0.5"  # percent


class DutchLimitQuoteData(BaseModel):
    """Upstream limit-order quote payload."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    chain_id: int
    request_id: Optional[str] = None
    quote_id: Optional[str] = None
    token_in: str
    amount_in: str
    token_out: str
    amount_out: str
    swapper: Optional[str] = None
    filler: Optional[str] = None
    nonce: Optional[str] = None
    portion_bips: Optional[int] = None
    portion_recipient: Optional[str] = None

    @field_validator("amount_in", "amount_out", "nonce", mode="before")
    @classmethod
    def _integer_string(cls, value: Any) -> Any:
        if value is None:
            return value
        if isinstance(value, int) and not isinstance(value, bool):
            value = str(value)
        if not isinstance(value, str) or not is_integer_string(value):
            raise ValueError("value must be an integer string")
        return value


class DutchLimitQuote(Quote):
    """Quote for a limit order filled later by a filler."""

    routing_type = RoutingType.DUTCH_LIMIT

    def __init__(self, request: DutchLimitRequest, quote_data: DutchLimitQuoteData):
        super().__init__(request)
        self.quote_data = quote_data
        self.nonce = quote_data.nonce or str(secrets.randbits(248))
        self.decay_start_time = self.created_at
        self.decay_end_time = self.decay_start_time + request.config.auction_period_secs
        self.deadline = self.decay_end_time + request.config.deadline_buffer_secs

    @classmethod
    def from_response_body(
        cls,
        request: QuoteRequest,
        body: Union[dict, DutchLimitQuoteData],
    ) -> "DutchLimitQuote":
        """Build a quote from an upstream response body."""
        if isinstance(body, DutchLimitQuoteData):
            data = body.model_copy(deep=True)
        else:
            data = DutchLimitQuoteData.model_validate(cls._copy_payload(body))
        return cls(DutchLimitRequest.from_request(request), data)

    @property
    def trade_type(self) -> TradeType:
        return self.request.info.type

    @property
    def swapper(self) -> Optional[str]:
        return self.quote_data.swapper or self.request.swapper

    @property
    def slippage_tolerance(self) -> str:
        return self.request.info.slippage_tolerance or DEFAULT_SLIPPAGE_TOLERANCE

    @property
    def slippage_bps(self) -> int:
        return int(round(float(self.slippage_tolerance) * 100))

    @property
    def amount_in(self) -> int:
        return parse_amount(self.quote_data.amount_in, "amountIn")

    @property
    def amount_out(self) -> int:
        return parse_amount(self.quote_data.amount_out, "amountOut")

    @property
    def amount_in_start(self) -> int:
        return self.amount_in

    @property
    def amount_out_start(self) -> int:
        return self.amount_out

    @property
    def amount_in_end(self) -> int:
        if self.trade_type == TradeType.EXACT_INPUT:
            return self.amount_in
        return self.amount_in * (BPS + self.slippage_bps) // BPS

    @property
    def amount_out_end(self) -> int:
        if self.trade_type == TradeType.EXACT_OUTPUT:
            return self.amount_out
        return self.amount_out * (BPS - self.slippage_bps) // BPS

    @property
    def portion_bips(self) -> Optional[int]:
        return self.quote_data.portion_bips

    @property
    def portion_recipient(self) -> Optional[str]:
        return self.quote_data.portion_recipient

    @property
    def portion_amount_out_start(self) -> Optional[int]:
        if not self.portion_bips:
            return None
        return self.amount_out_start * self.portion_bips // BPS

    @property
    def portion_amount_out_end(self) -> Optional[int]:
        if not self.portion_bips:
            return None
        return self.amount_out_end * self.portion_bips // BPS

    def to_order_info(self) -> dict:
        """Order terms the swapper signs."""
        data = self.quote_data
        outputs = [
            {
                "token": data.token_out,
                "startAmount": str(self.amount_out_start),
                "endAmount": str(self.amount_out_end),
                "recipient": self.swapper,
            }
        ]
        if self.portion_bips and self.portion_recipient:
            outputs.append({
                "token": data.token_out,
                "startAmount": str(self.portion_amount_out_start),
                "endAmount": str(self.portion_amount_out_end),
                "recipient": self.portion_recipient,
            })

        return {
            "swapper": self.swapper,
            "nonce": self.nonce,
            "deadline": self.deadline,
            "decayStartTime": self.decay_start_time,
            "decayEndTime": self.decay_end_time,
            "exclusiveFiller": data.filler,
            "input": {
                "token": data.token_in,
                "startAmount": str(self.amount_in_start),
                "endAmount": str(self.amount_in_end),
            },
            "outputs": outputs,
        }

    def to_json(self) -> dict:
        data = self.quote_data.model_dump(mode="json", by_alias=True, exclude_none=True)
        data.update(
            quoteId=self.quote_id,
            requestId=self.request.info.request_id,
            swapper=self.swapper,
            nonce=self.nonce,
            slippageTolerance=self.slippage_tolerance,
            orderInfo=self.to_order_info(),
        )
        return drop_none(data)

    def to_log(self) -> dict:
        info = self.request.info
        return drop_none({
            "quoteId": self.quote_id,
            "requestId": info.request_id,
            "tokenInChainId": info.token_in_chain_id,
            "tokenOutChainId": info.token_out_chain_id,
            "tokenIn": self.quote_data.token_in,
            "tokenOut": self.quote_data.token_out,
            "amountIn": str(self.amount_in_start),
            "endAmountIn": str(self.amount_in_end),
            "amountOut": str(self.amount_out_start),
            "endAmountOut": str(self.amount_out_end),
            "swapper": self.swapper or "",
            "filler": self.quote_data.filler,
            "routing": self.routing_type.value,
            "slippage": float(self.slippage_tolerance),
            "createdAt": str(self.created_at),
            "createdAtMs": str(self.created_at_ms),
            "portionBips": self.portion_bips,
            "portionRecipient": self.portion_recipient,
            "portionAmountOutStart": _str_or_none(self.portion_amount_out_start),
            "portionAmountOutEnd": _str_or_none(self.portion_amount_out_end),
        })


def _str_or_none(value: Optional[int]) -> Optional[str]:
    return None if value is None else str(value)
