#!/usr/bin/env python3
"""
CLI for building watchman command envelopes and decoding responses.

Usage:
    python -m src.cli clock /path/to/root --sync-timeout 500
    python -m src.cli query /path/to/root --suffix py --since c:0:0
    python -m src.cli subscribe /path/to/root my-sub --field name --field exists
    watchman -j < request.json | python -m src.cli decode query
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

# Load .env from project root
_env_file = Path(__file__).parent.parent / ".env"
if _env_file.exists():
    load_dotenv(_env_file)
else:
    load_dotenv()

from src.watchman_pdu import (
    ClockRequest,
    ClockRequestParams,
    ClockResponse,
    ClockSpec,
    GetSockNameResponse,
    PathGeneratorElement,
    PduConfig,
    PduError,
    QueryRequest,
    QueryResult,
    SubscribeCommand,
    SubscribeResponse,
    SyncTimeout,
    Unsubscribe,
    UnsubscribeResponse,
    WatchProjectResponse,
    decode_file_record,
    decode_response,
    encode_pdu,
)


logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("cli")


RESPONSE_TYPES = {
    "get-sockname": GetSockNameResponse,
    "clock": ClockResponse,
    "watch-project": WatchProjectResponse,
    "query": QueryResult,
    "subscribe": SubscribeResponse,
    "unsubscribe": UnsubscribeResponse,
}


def _emit(pdu) -> None:
    sys.stdout.write(encode_pdu(pdu).decode("utf-8"))


def _parse_path_element(value: str) -> PathGeneratorElement:
    # "dir:2" limits the walk to depth 2
    path, sep, depth = value.rpartition(":")
    if sep and depth.isdigit():
        return PathGeneratorElement(Path(path), int(depth))
    return PathGeneratorElement(Path(value))


def cmd_clock(args):
    """Print a clock request."""
    if args.sync_timeout is None:
        params = ClockRequestParams()
    else:
        params = ClockRequestParams(SyncTimeout.from_millis(args.sync_timeout))
    _emit(ClockRequest(Path(args.root), params))


def cmd_query(args):
    """Print a query request built on the configured defaults."""
    config = PduConfig.from_env()
    overrides = {}
    if args.glob:
        overrides["glob"] = args.glob
    if args.suffix:
        overrides["suffix"] = args.suffix
    if args.path:
        overrides["path"] = [_parse_path_element(p) for p in args.path]
    if args.since:
        overrides["since"] = ClockSpec.from_wire(args.since)
    if args.relative_root:
        overrides["relative_root"] = Path(args.relative_root)
    if args.field:
        overrides["fields"] = args.field
    if args.case_sensitive:
        overrides["case_sensitive"] = True
    if args.dedup:
        overrides["dedup_results"] = True
    if args.sync_timeout is not None:
        overrides["sync_timeout"] = SyncTimeout.from_millis(args.sync_timeout)
    _emit(QueryRequest(Path(args.root), config.query_params(**overrides)))


def cmd_subscribe(args):
    """Print a subscribe request."""
    config = PduConfig.from_env()
    overrides = {}
    if args.since:
        overrides["since"] = ClockSpec.from_wire(args.since)
    if args.relative_root:
        overrides["relative_root"] = Path(args.relative_root)
    if args.field:
        overrides["fields"] = args.field
    _emit(SubscribeCommand(Path(args.root), args.name, config.subscribe_params(**overrides)))


def cmd_unsubscribe(args):
    """Print an unsubscribe request."""
    _emit(Unsubscribe(Path(args.root), args.name))


def _summarize(command: str, response) -> None:
    if command == "query":
        files = response.files or []
        print(f"version: {response.version}")
        print(f"fresh instance: {response.is_fresh_instance}")
        if response.clock is not None:
            print(f"clock: {response.clock}")
        print(f"files: {len(files)}")
        for record in files:
            print(f"  {json.dumps(record, default=str)}")
        if response.state_enter:
            print(f"state-enter: {response.state_enter}")
        if response.state_leave:
            print(f"state-leave: {response.state_leave}")
        if response.subscription_canceled:
            print("canceled: true")
        return
    for key, value in vars(response).items():
        print(f"{key}: {value}")


def cmd_decode(args):
    """Decode one JSON response from stdin."""
    response_type = RESPONSE_TYPES[args.response]
    line = sys.stdin.readline()
    kwargs = {}
    if args.response == "query":
        kwargs = {"file_decoder": decode_file_record, "fields": args.field}
    try:
        response = decode_response(response_type, line, **kwargs)
    except PduError as e:
        logger.error(f"Cannot decode {args.response} response: {e}")
        sys.exit(1)
    _summarize(args.response, response)


def main(argv: Optional[List[str]] = None):
    parser = argparse.ArgumentParser(
        description="Build watchman command envelopes and decode responses",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Clock request with a 500ms sync timeout
  python -m src.cli clock ./project --sync-timeout 500

  # Since query for python files
  python -m src.cli query ./project --suffix py --since c:0:0

  # Decode a query response
  python -m src.cli decode query < response.json
        """,
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    # Clock command
    clock_parser = subparsers.add_parser("clock", help="Build a clock request")
    clock_parser.add_argument("root", help="Watched root")
    clock_parser.add_argument("--sync-timeout", type=int, default=None, help="Sync timeout in ms (0 disables the cookie)")
    clock_parser.set_defaults(func=cmd_clock)

    # Query command
    query_parser = subparsers.add_parser("query", help="Build a query request")
    query_parser.add_argument("root", help="Watched root")
    query_parser.add_argument("--glob", action="append", help="Glob generator pattern")
    query_parser.add_argument("--suffix", action="append", help="Suffix generator entry")
    query_parser.add_argument("--path", action="append", help="Path generator entry, PATH or PATH:DEPTH")
    query_parser.add_argument("--since", help="Clock token for the since generator")
    query_parser.add_argument("--relative-root", help="Subdirectory to scope the query to")
    query_parser.add_argument("--field", action="append", help="Field to return (repeatable)")
    query_parser.add_argument("--case-sensitive", action="store_true", help="Match names case sensitively")
    query_parser.add_argument("--dedup", action="store_true", help="Dedup results across generators")
    query_parser.add_argument("--sync-timeout", type=int, default=None, help="Sync timeout in ms (0 disables the cookie)")
    query_parser.set_defaults(func=cmd_query)

    # Subscribe command
    subscribe_parser = subparsers.add_parser("subscribe", help="Build a subscribe request")
    subscribe_parser.add_argument("root", help="Watched root")
    subscribe_parser.add_argument("name", help="Subscription name")
    subscribe_parser.add_argument("--since", help="Clock token to start from")
    subscribe_parser.add_argument("--relative-root", help="Subdirectory to scope the subscription to")
    subscribe_parser.add_argument("--field", action="append", help="Field to return (repeatable)")
    subscribe_parser.set_defaults(func=cmd_subscribe)

    # Unsubscribe command
    unsubscribe_parser = subparsers.add_parser("unsubscribe", help="Build an unsubscribe request")
    unsubscribe_parser.add_argument("root", help="Watched root")
    unsubscribe_parser.add_argument("name", help="Subscription name")
    unsubscribe_parser.set_defaults(func=cmd_unsubscribe)

    # Decode command
    decode_parser = subparsers.add_parser("decode", help="Decode a response read from stdin")
    decode_parser.add_argument("response", choices=sorted(RESPONSE_TYPES), help="Response type")
    decode_parser.add_argument("--field", action="append", help="Field list the query requested (repeatable)")
    decode_parser.set_defaults(func=cmd_decode)

    args = parser.parse_args(argv)

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    args.func(args)


if __name__ == "__main__":
    main()
