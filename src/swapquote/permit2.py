"""Permit2 typed-data construction.

Builds the EIP-712 ``PermitSingle`` payload a wallet signs to let the
Universal Router spend a token through Permit2 without a separate approval
transaction.
"""

from dataclasses import dataclass
from typing import Optional

from eth_account.messages import SignableMessage, encode_typed_data
from eth_utils import to_checksum_address

from swapquote.utils.time import current_timestamp_seconds


PERMIT2_ADDRESS = "0x000000000022D473030F116dDEE9F6B43aC78BA3"

MAX_ALLOWANCE_TRANSFER_AMOUNT = 2**160 - 1

PERMIT_EXPIRATION_SECONDS = 30 * 24 * 60 * 60  # 30 days
PERMIT_SIG_EXPIRATION_SECONDS = 30 * 60  # 30 minutes

# Universal Router deployments by chain id
UNIVERSAL_ROUTER_ADDRESSES = {
    chain_id: to_checksum_address(address)
    for chain_id, address in {
        1: "0x3fC91A3afd70395Cd496C647d5a6CC9D4B2b7FAD",  # Ethereum
        5: "0x3fC91A3afd70395Cd496C647d5a6CC9D4B2b7FAD",  # Goerli
        10: "0x3fC91A3afd70395Cd496C647d5a6CC9D4B2b7FAD",  # Optimism
        56: "0x5Dc88340E1c5c6366864Ee415d6034cadd1A9897",  # BNB Chain
        137: "0x3fC91A3afd70395Cd496C647d5a6CC9D4B2b7FAD",  # Polygon
        420: "0x3fC91A3afd70395Cd496C647d5a6CC9D4B2b7FAD",  # Optimism Goerli
        8453: "0x3fC91A3afd70395Cd496C647d5a6CC9D4B2b7FAD",  # Base
        42161: "0x3fC91A3afd70395Cd496C647d5a6CC9D4B2b7FAD",  # Arbitrum
        42220: "0x3fC91A3afd70395Cd496C647d5a6CC9D4B2b7FAD",  # Celo
        43114: "0x82635AF6146972cD6601161c4472ffe97237D292",  # Avalanche
        44787: "0x3fC91A3afd70395Cd496C647d5a6CC9D4B2b7FAD",  # Celo Alfajores
        80001: "0x3fC91A3afd70395Cd496C647d5a6CC9D4B2b7FAD",  # Polygon Mumbai
        84531: "0xd0872d928672ae2ff74bdb2f5130ac12229cafaf",  # Base Goerli
        421613: "0x3fC91A3afd70395Cd496C647d5a6CC9D4B2b7FAD",  # Arbitrum Goerli
        11155111: "0x3fC91A3afd70395Cd496C647d5a6CC9D4B2b7FAD",  # Sepolia
    }.items()
}

PERMIT_DETAILS_TYPE = [
    {"name": "token", "type": "address"},
    {"name": "amount", "type": "uint160"},
    {"name": "expiration", "type": "uint48"},
    {"name": "nonce", "type": "uint48"},
]

PERMIT_SINGLE_TYPE = [
    {"name": "details", "type": "PermitDetails"},
    {"name": "spender", "type": "address"},
    {"name": "sigDeadline", "type": "uint256"},
]


@dataclass(frozen=True)
class PermitDetails:
    """Permit2 allowance observed on-chain for an owner/token/spender."""

    token: str
    amount: int
    expiration: int  # unix seconds
    nonce: int


def universal_router_address(chain_id: int) -> str:
    """Universal Router address for a chain.

    Raises:
        ValueError: no deployment known for the chain
    """
    address = UNIVERSAL_ROUTER_ADDRESSES.get(chain_id)
    if address is None:
        raise ValueError(f"Universal Router not deployed on chain {chain_id}")
    return address


def create_permit_data(
    token_address: str,
    chain_id: int,
    nonce: int = 0,
    now: Optional[int] = None,
) -> dict:
    """Build PermitSingle typed data for ``token_address`` on ``chain_id``.

    Amounts are serialized as decimal strings so they survive JSON clients
    that cannot hold uint160 values.
    """
    now = current_timestamp_seconds() if now is None else now

    return {
        "domain": {
            "name": "Permit2",
            "chainId": chain_id,
            "verifyingContract": PERMIT2_ADDRESS,
        },
        "types": {
            "PermitSingle": PERMIT_SINGLE_TYPE,
            "PermitDetails": PERMIT_DETAILS_TYPE,
        },
        "values": {
            "details": {
                "token": token_address,
                "amount": str(MAX_ALLOWANCE_TRANSFER_AMOUNT),
                "expiration": str(now + PERMIT_EXPIRATION_SECONDS),
                "nonce": str(nonce),
            },
            "spender": universal_router_address(chain_id),
            "sigDeadline": str(now + PERMIT_SIG_EXPIRATION_SECONDS),
        },
    }


def permit_signable_message(permit_data: dict) -> SignableMessage:
    """EIP-712 signable message for permit data from ``create_permit_data``."""
    values = permit_data["values"]
    details = values["details"]

    message = {
        "details": {
            "token": details["token"],
            "amount": int(details["amount"]),
            "expiration": int(details["expiration"]),
            "nonce": int(details["nonce"]),
        },
        "spender": values["spender"],
        "sigDeadline": int(values["sigDeadline"]),
    }

    return encode_typed_data(
        domain_data=permit_data["domain"],
        message_types=permit_data["types"],
        message_data=message,
    )
