"""Classic (on-chain swap) quote.

Upstream returns ``amount`` (the fixed side, as requested) and ``quote`` (the
computed side). Which of them is the input depends on the request's trade
type, so every amount accessor branches on it. Gas adjustments only ever
apply to the computed side.
"""

from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from swapquote.entities.quote.base import Quote, drop_none, is_integer_string, parse_amount
from swapquote.entities.request import QuoteRequest, RoutingType, TradeType
from swapquote.permit2 import PermitDetails, create_permit_data
from swapquote.utils.time import current_timestamp_seconds


class ClassicQuoteData(BaseModel):
    """Upstream classic quote payload.

    Only ``amount`` and ``quote`` are required. Keys not modelled here are
    kept and passed through on serialization.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    request_id: Optional[str] = None
    quote_id: Optional[str] = None
    amount: str
    amount_decimals: Optional[str] = None
    quote: str
    quote_decimals: Optional[str] = None
    quote_gas_adjusted: Optional[str] = None
    quote_gas_adjusted_decimals: Optional[str] = None
    gas_use_estimate: Optional[str] = None
    gas_use_estimate_quote: Optional[str] = None
    gas_use_estimate_quote_decimals: Optional[str] = None
    gas_use_estimate_usd: Optional[str] = Field(default=None, alias="gasUseEstimateUSD")
    simulation_error: Optional[bool] = None
    simulation_status: Optional[str] = None
    gas_price_wei: Optional[str] = None
    block_number: Optional[str] = None
    route: Optional[list[list[dict[str, Any]]]] = None
    route_string: Optional[str] = None
    method_parameters: Optional[dict[str, Any]] = None
    permit_data: Optional[dict[str, Any]] = None
    trade_type: Optional[str] = None
    slippage: Optional[float] = None
    portion_bips: Optional[int] = None
    portion_recipient: Optional[str] = None
    portion_amount: Optional[str] = None
    portion_amount_decimals: Optional[str] = None
    quote_gas_and_portion_adjusted: Optional[str] = None
    quote_gas_and_portion_adjusted_decimals: Optional[str] = None

    @field_validator(
        "amount", "quote", "quote_gas_adjusted", "quote_gas_and_portion_adjusted",
        mode="before",
    )
    @classmethod
    def _integer_string(cls, value: Any) -> Any:
        if value is None:
            return value
        if isinstance(value, int) and not isinstance(value, bool):
            value = str(value)
        if not isinstance(value, str) or not is_integer_string(value):
            raise ValueError("amount must be a base-unit integer string")
        return value


class ClassicQuote(Quote):
    """Quote for an immediate on-chain swap."""

    routing_type = RoutingType.CLASSIC

    def __init__(self, request: QuoteRequest, quote_data: ClassicQuoteData):
        super().__init__(request)
        self.quote_data = quote_data
        # Set after construction once the on-chain allowance lookup completes
        self._allowance_data: Optional[PermitDetails] = None

    @classmethod
    def from_response_body(
        cls,
        request: QuoteRequest,
        body: Union[dict, ClassicQuoteData],
    ) -> "ClassicQuote":
        """Build a quote from an upstream response body."""
        if isinstance(body, ClassicQuoteData):
            data = body.model_copy(deep=True)
        else:
            data = ClassicQuoteData.model_validate(cls._copy_payload(body))
        return cls(request, data)

    @property
    def trade_type(self) -> TradeType:
        return self.request.info.type

    @property
    def _is_exact_input(self) -> bool:
        return self.trade_type == TradeType.EXACT_INPUT

    @property
    def _fixed_amount(self) -> int:
        return parse_amount(self.quote_data.amount, "amount")

    @property
    def _quoted_amount(self) -> int:
        return parse_amount(self.quote_data.quote, "quote")

    @property
    def _quoted_amount_gas_adjusted(self) -> int:
        # Upstream omits quoteGasAdjusted when gas estimation was skipped
        if self.quote_data.quote_gas_adjusted is None:
            return self._quoted_amount
        return parse_amount(self.quote_data.quote_gas_adjusted, "quoteGasAdjusted")

    @property
    def _quoted_amount_gas_and_portion_adjusted(self) -> int:
        # Absent when the portion flag was off upstream
        if self.quote_data.quote_gas_and_portion_adjusted is None:
            return self._quoted_amount_gas_adjusted
        return parse_amount(
            self.quote_data.quote_gas_and_portion_adjusted, "quoteGasAndPortionAdjusted"
        )

    @property
    def amount_in(self) -> int:
        return self._fixed_amount if self._is_exact_input else self._quoted_amount

    @property
    def amount_out(self) -> int:
        return self._quoted_amount if self._is_exact_input else self._fixed_amount

    @property
    def amount_in_gas_adjusted(self) -> int:
        return self._fixed_amount if self._is_exact_input else self._quoted_amount_gas_adjusted

    @property
    def amount_out_gas_adjusted(self) -> int:
        return self._quoted_amount_gas_adjusted if self._is_exact_input else self._fixed_amount

    @property
    def amount_in_gas_and_portion_adjusted(self) -> int:
        if self._is_exact_input:
            return self._fixed_amount
        return self._quoted_amount_gas_and_portion_adjusted

    @property
    def amount_out_gas_and_portion_adjusted(self) -> int:
        if self._is_exact_input:
            return self._quoted_amount_gas_and_portion_adjusted
        return self._fixed_amount

    @property
    def gas_price_wei(self) -> Optional[str]:
        return self.quote_data.gas_price_wei

    @property
    def slippage(self) -> float:
        """Requested slippage in percent, -1 when unspecified."""
        tolerance = self.request.info.slippage_tolerance
        return float(tolerance) if tolerance else -1

    @property
    def portion_bips(self) -> Optional[int]:
        return self.quote_data.portion_bips

    @property
    def portion_recipient(self) -> Optional[str]:
        return self.quote_data.portion_recipient

    @property
    def allowance_data(self) -> Optional[PermitDetails]:
        return self._allowance_data

    def set_allowance_data(self, data: Optional[PermitDetails]) -> None:
        """Record the swapper's current Permit2 allowance.

        This is the only mutation allowed after construction.
        """
        self._allowance_data = data

    def get_permit_data(self) -> Optional[dict]:
        """Permit2 typed data the swapper must sign, or None if not needed.

        Not needed when there is no swapper, or when the recorded allowance
        already covers ``amount_in`` and has not expired.
        """
        info = self.request.info
        if not info.swapper:
            return None

        allowance = self._allowance_data
        if (
            allowance is not None
            and allowance.amount >= self.amount_in
            and allowance.expiration > current_timestamp_seconds()
        ):
            return None

        nonce = allowance.nonce if allowance is not None else 0
        return create_permit_data(info.token_in, info.token_in_chain_id, nonce)

    def to_json(self) -> dict:
        data = self.quote_data.model_dump(mode="json", by_alias=True, exclude_unset=True)
        data.pop("permitData", None)
        data.update(
            quoteId=self.quote_id,
            requestId=self.request.info.request_id,
            tradeType=self.trade_type.value,
            slippage=self.slippage,
        )
        permit_data = self.get_permit_data()
        if permit_data is not None:
            data["permitData"] = permit_data
        return data

    def to_log(self) -> dict:
        info = self.request.info
        return drop_none({
            "quoteId": self.quote_id,
            "requestId": info.request_id,
            "tokenInChainId": info.token_in_chain_id,
            "tokenOutChainId": info.token_out_chain_id,
            "tokenIn": info.token_in,
            "tokenOut": info.token_out,
            "amountIn": str(self.amount_in),
            "endAmountIn": str(self.amount_in),
            "amountOut": str(self.amount_out),
            "endAmountOut": str(self.amount_out),
            "amountInGasAdjusted": str(self.amount_in_gas_adjusted),
            "amountOutGasAdjusted": str(self.amount_out_gas_adjusted),
            "amountInGasAndPortionAdjusted": str(self.amount_in_gas_and_portion_adjusted),
            "amountOutGasAndPortionAdjusted": str(self.amount_out_gas_and_portion_adjusted),
            "swapper": info.swapper or "",
            "routing": self.routing_type.value,
            "slippage": self.slippage,
            "createdAt": str(self.created_at),
            "createdAtMs": str(self.created_at_ms),
            "gasPriceWei": self.gas_price_wei,
            "portionBips": self.quote_data.portion_bips,
            "portionRecipient": self.quote_data.portion_recipient,
            "portionAmount": self.quote_data.portion_amount,
            "portionAmountDecimals": self.quote_data.portion_amount_decimals,
            "quoteGasAndPortionAdjusted": self.quote_data.quote_gas_and_portion_adjusted,
            "quoteGasAndPortionAdjustedDecimals": (
                self.quote_data.quote_gas_and_portion_adjusted_decimals
            ),
        })
