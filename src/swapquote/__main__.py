"""Command line entry point.

Usage:
    python -m swapquote portion --token-in-chain-id 1 --token-in 0x... \
        --token-out-chain-id 1 --token-out 0x...
    python -m swapquote parse-quote response.json --trade-type EXACT_INPUT ...
"""

import argparse
import asyncio
import json
import logging
import sys
import uuid
from typing import Optional

from swapquote.config import get_settings
from swapquote.entities import (
    QuoteRequest,
    QuoteRequestInfo,
    TradeType,
    UnknownRoutingType,
    build_quote_response,
)
from swapquote.portion import PortionFetcher

logger = logging.getLogger(__name__)


def setup_logging(debug: bool) -> None:
    """Configure root logging."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="swapquote", description="Portion and quote tools")
    subparsers = parser.add_subparsers(dest="command", required=True)

    portion = subparsers.add_parser("portion", help="Look up the portion for a token pair")
    portion.add_argument("--token-in-chain-id", type=int, required=True)
    portion.add_argument("--token-in", required=True)
    portion.add_argument("--token-out-chain-id", type=int, required=True)
    portion.add_argument("--token-out", required=True)

    parse = subparsers.add_parser("parse-quote", help="Parse a {routing, quote} response body")
    parse.add_argument("file", help="JSON file, '-' for stdin")
    parse.add_argument(
        "--trade-type",
        choices=[t.value for t in TradeType],
        default=TradeType.EXACT_INPUT.value,
    )
    parse.add_argument("--token-in", default="")
    parse.add_argument("--token-out", default="")
    parse.add_argument("--chain-id", type=int, default=1)
    parse.add_argument("--amount", default="0")
    parse.add_argument("--slippage")
    parse.add_argument("--swapper")
    parse.add_argument("--request-id")
    parse.add_argument("--log", action="store_true", help="Print the log record instead")

    return parser


async def run_portion(args: argparse.Namespace) -> int:
    fetcher = PortionFetcher.from_settings()
    try:
        response = await fetcher.get_portion(
            args.token_in_chain_id, args.token_in, args.token_out_chain_id, args.token_out
        )
    finally:
        await fetcher.aclose()

    print(json.dumps(response.to_dict(), indent=2))
    return 0


def run_parse_quote(args: argparse.Namespace) -> int:
    if args.file == "-":
        body = json.load(sys.stdin)
    else:
        with open(args.file) as f:
            body = json.load(f)

    request = QuoteRequest(
        info=QuoteRequestInfo(
            request_id=args.request_id or str(uuid.uuid4()),
            token_in_chain_id=args.chain_id,
            token_out_chain_id=args.chain_id,
            token_in=args.token_in,
            token_out=args.token_out,
            amount=int(args.amount),
            type=TradeType(args.trade_type),
            slippage_tolerance=args.slippage,
            swapper=args.swapper,
        )
    )

    try:
        quote = build_quote_response(body, request)
    except UnknownRoutingType as e:
        logger.error(str(e))
        return 2

    print(json.dumps(quote.to_log() if args.log else quote.to_json(), indent=2))
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(get_settings().debug)

    if args.command == "portion":
        return asyncio.run(run_portion(args))
    return run_parse_quote(args)


if __name__ == "__main__":
    sys.exit(main())
