"""Abstract quote contract shared by every routing type."""

import copy
import re
import uuid
from abc import ABC, abstractmethod
from typing import Any, Optional

from swapquote.entities.request import QuoteRequest, RoutingType
from swapquote.utils.time import current_timestamp_ms, timestamp_ms_to_seconds


INTEGER_STRING = re.compile(r"[0-9]+")


def is_integer_string(value: str) -> bool:
    """True for a non-negative base-unit amount such as ``"1000"``."""
    return INTEGER_STRING.fullmatch(value) is not None


def drop_none(record: dict) -> dict:
    """Remove keys whose value is None."""
    return {key: value for key, value in record.items() if value is not None}


def parse_amount(value: Optional[str], field_name: str) -> int:
    """Parse a base-unit decimal string into an int."""
    if value is None:
        raise ValueError(f"Missing amount field: {field_name}")
    return int(value)


class Quote(ABC):
    """A quote for one request and one routing type.

    Identity (``quote_id``) and creation timestamps are fixed at
    construction. The raw payload is copied so the quote owns it; the
    request is held by reference.
    """

    routing_type: RoutingType

    def __init__(self, request: QuoteRequest):
        self.request = request
        self.quote_id = str(uuid.uuid4())
        self.created_at_ms = current_timestamp_ms()
        self.created_at = timestamp_ms_to_seconds(self.created_at_ms)

    @staticmethod
    def _copy_payload(payload: Any) -> Any:
        return copy.deepcopy(payload)

    @property
    @abstractmethod
    def amount_in(self) -> int:
        """Input amount in base units."""
        pass

    @property
    @abstractmethod
    def amount_out(self) -> int:
        """Output amount in base units."""
        pass

    @abstractmethod
    def to_json(self) -> dict:
        """Public JSON contract returned to API callers."""
        pass

    @abstractmethod
    def to_log(self) -> dict:
        """Flat record for logs and analytics."""
        pass

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(quote_id={self.quote_id!r}, "
            f"amount_in={self.amount_in}, amount_out={self.amount_out})"
        )
