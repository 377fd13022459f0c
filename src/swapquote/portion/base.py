"""Portion (fee) value types and fixed responses."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, model_validator
from pydantic.alias_generators import to_camel


class PortionType(str, Enum):
    """How the portion scales with trade size."""
    FLAT = "flat"
    REGRESSIVE = "regressive"


class Portion(BaseModel):
    """A basis-point fee cut with its recipient."""

    model_config = ConfigDict(frozen=True)

    bips: int
    recipient: str
    type: PortionType


class GetPortionResponse(BaseModel):
    """Portion lookup result.

    ``hasPortion`` must agree with the presence of ``portion``; an upstream
    body that breaks this is rejected as malformed.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    has_portion: bool
    portion: Optional[Portion] = None

    @model_validator(mode="after")
    def _check_has_portion(self) -> "GetPortionResponse":
        if self.has_portion != (self.portion is not None):
            raise ValueError("hasPortion must be true exactly when portion is present")
        return self

    def to_dict(self) -> dict:
        """Serialize with the wire (camelCase) field names."""
        return self.model_dump(mode="json", by_alias=True)


NO_PORTION_RESPONSE = GetPortionResponse(has_portion=False, portion=None)

# Lower-cased token addresses eligible for the flat portion
BX_PORTION_ADDRESSES = frozenset([
    "eth",  # ETH
    "0x0000000000000000000000000000000000000000",  # ETH
    "0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48",  # USDC
    "0xc02aaa39b223fe8d0a0e5c4f27ead9083c756cc2",  # WETH
    "0xdac17f958d2ee523a2206206994597c13d831ec7",  # USDT
    "0x6b175474e89094c44da98b954eedeac495271d0f",  # DAI
    "0x2260fac5e5542a773aa44fbcfedf7c193bc2c599",  # WBTC
    "0x1a7e4e63778b4f12a199c062f3efdd288afcbce8",  # agEUR
    "0x056fd409e1d7a124bd7017459dfea2f387b6d5cd",  # GUSD
    "0x5f98805a4e8be255a32880fdec7f6728c6568ba0",  # LUSD
    "0x1abaea1f7c830bd89acc67ec4af516284b1bc33c",  # EUROC
    "0x70e8de73ce538da2beed35d14187f6959a8eca96",  # XSGD
])

BX_PORTION_RECIPIENT = "0x27213E28D7fDA5c57Fe9e5dD923818DBCcf71c47"

BX_PORTION_RESPONSE = GetPortionResponse(
    has_portion=True,
    portion=Portion(bips=5, recipient=BX_PORTION_RECIPIENT, type=PortionType.FLAT),
)


def is_allowlisted_pair(token_in_address: str, token_out_address: str) -> bool:
    """Check if both tokens are on the flat-portion allowlist (case-insensitive)."""
    return (
        token_in_address.lower() in BX_PORTION_ADDRESSES
        and token_out_address.lower() in BX_PORTION_ADDRESSES
    )


def portion_cache_key(
    token_in_chain_id: int,
    token_in_address: str,
    token_out_chain_id: int,
    token_out_address: str,
) -> str:
    """Cache key for a token pair; addresses are lower-cased."""
    return (
        f"PortionFetcher-{token_in_chain_id}-{token_in_address.lower()}"
        f"-{token_out_chain_id}-{token_out_address.lower()}"
    )
