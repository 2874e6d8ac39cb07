"""Run the brightness daemon with its HTTP API.

Usage:
    python -m content_brightness                # run the daemon
    python -m content_brightness trigger space_switch
    python -m content_brightness status
"""

from __future__ import annotations

import argparse
import json
import sys

import requests

from content_brightness.client import (
    DEFAULT_URL,
    check_api_availability,
    send_trigger,
)
from content_brightness.config import load_settings
from content_brightness.model.models import TriggerReason


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="content-brightness")
    parser.add_argument(
        "--url", default=None, help=f"daemon URL (default {DEFAULT_URL})"
    )
    sub = parser.add_subparsers(dest="command")
    sub.add_parser("run", help="run the daemon (default)")
    trigger = sub.add_parser("trigger", help="send a trigger to a running daemon")
    trigger.add_argument("reason", choices=[r.value for r in TriggerReason])
    sub.add_parser("status", help="check whether the daemon is reachable")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = load_settings()
    url = args.url or f"http://{settings.api_host}:{settings.api_port}"

    if args.command == "trigger":
        try:
            result = send_trigger(args.reason, url)
        except requests.RequestException as e:
            print(f"daemon unreachable: {e}", file=sys.stderr)
            return 1
        print(json.dumps(result))
        return 0 if result else 1
    if args.command == "status":
        ok = check_api_availability(url)
        print("running" if ok else "not running")
        return 0 if ok else 1

    import uvicorn

    uvicorn.run(
        "content_brightness.api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level.lower(),
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
