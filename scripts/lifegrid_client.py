#!/usr/bin/env python3
"""
lifegrid API Client

Command-line client for driving the shared universe of a running lifegrid server.

Usage:
    python scripts/lifegrid_client.py health
    python scripts/lifegrid_client.py show
    python scripts/lifegrid_client.py tick 10
    python scripts/lifegrid_client.py toggle 5 12
    python scripts/lifegrid_client.py glider 20 20
    python scripts/lifegrid_client.py reset random --seed 42
    python scripts/lifegrid_client.py play
    python scripts/lifegrid_client.py pause
    python scripts/lifegrid_client.py speed 30
"""

import argparse
import json
import os
import sys
from typing import Optional, Union
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

_verbose = False


def set_verbose(verbose: bool):
    """Enable/disable verbose output."""
    global _verbose
    _verbose = verbose


def get_base_url() -> str:
    """Get lifegrid server URL from environment."""
    host = os.environ.get("LIFEGRID_HOST", "localhost")
    port = os.environ.get("LIFEGRID_PORT", "8080")
    return f"http://{host}:{port}"


def api_request(endpoint: str, method: str = "GET", data: Optional[dict] = None) -> Union[dict, str]:
    """
    Make an API request to the lifegrid server.

    JSON responses are decoded; anything else is returned as text. Failures
    come back as ``{"error": True, "detail": ...}``.
    """
    url = f"{get_base_url()}{endpoint}"
    headers = {"Content-Type": "application/json"}
    body = json.dumps(data).encode() if data is not None else None

    if _verbose:
        print(f"🔗 {method} {url}")

    try:
        req = Request(url, data=body, headers=headers, method=method)
        with urlopen(req, timeout=30) as response:
            raw = response.read().decode()
            if response.headers.get("Content-Type", "").startswith("application/json"):
                return json.loads(raw)
            return raw
    except HTTPError as e:
        try:
            raw_body = e.read().decode()
            error_body = json.loads(raw_body)
            return {"error": True, "status": e.code, "detail": error_body.get("detail", raw_body)}
        except Exception:
            return {"error": True, "status": e.code, "detail": f"HTTP {e.code}: {e.reason}"}
    except URLError as e:
        return {"error": True, "detail": f"Connection failed: {e.reason}"}
    except Exception as e:
        return {"error": True, "detail": str(e)}


def _failed(result) -> bool:
    if isinstance(result, dict) and result.get("error"):
        print(f"❌ Error: {result.get('detail')}")
        return True
    return False


def _print_state(result: dict):
    state = "running" if result.get("running") else "paused"
    print(
        f"generation {result.get('generation')} | population {result.get('population', '-')} | "
        f"{state} @ {result.get('tick_rate_hz')} Hz"
    )


def cmd_health(args):
    """Check lifegrid server health."""
    result = api_request("/health")
    if isinstance(result, dict) and result.get("error"):
        print(f"❌ lifegrid server unreachable: {result.get('detail')}")
        return 1
    ready = "ready" if result.get("universe_ready") else "starting"
    print(f"✅ lifegrid server healthy (universe {ready})")
    return 0


def cmd_show(args):
    """Print the universe as text."""
    result = api_request("/api/universe/render")
    if _failed(result):
        return 1
    print(result, end="")
    return 0


def cmd_state(args):
    result = api_request("/api/universe")
    if _failed(result):
        return 1
    print(f"{result['width']}x{result['height']}")
    _print_state(result)
    return 0


def cmd_tick(args):
    """Advance the universe."""
    result = api_request("/api/universe/tick", method="POST", data={"steps": args.steps})
    if _failed(result):
        return 1
    _print_state(result)
    return 0


def cmd_toggle(args):
    result = api_request(
        "/api/universe/toggle", method="POST", data={"row": args.row, "column": args.column}
    )
    if _failed(result):
        return 1
    state = "alive" if result.get("alive") else "dead"
    print(f"({args.row}, {args.column}) is now {state}")
    return 0


def cmd_glider(args):
    result = api_request(
        "/api/universe/glider", method="POST", data={"row": args.row, "column": args.column}
    )
    if _failed(result):
        return 1
    print(f"🛸 Glider added at ({args.row}, {args.column})")
    _print_state(result)
    return 0


def cmd_reset(args):
    """Reseed the universe."""
    data = {"pattern": args.pattern}
    if args.width is not None:
        data["width"] = args.width
    if args.height is not None:
        data["height"] = args.height
    if args.seed is not None:
        data["seed"] = args.seed

    result = api_request("/api/universe/reset", method="POST", data=data)
    if _failed(result):
        return 1
    print(f"🔄 Reset to '{args.pattern}' ({result['width']}x{result['height']})")
    _print_state(result)
    return 0


def cmd_run_state(args):
    """Play or pause the simulation."""
    result = api_request(f"/api/universe/{args.action}", method="POST")
    if _failed(result):
        return 1
    _print_state(result)
    return 0


def cmd_speed(args):
    result = api_request("/api/universe/speed", method="PUT", data={"tick_rate_hz": args.hz})
    if _failed(result):
        return 1
    _print_state(result)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="lifegrid API Client")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("health", help="Check server health").set_defaults(func=cmd_health)
    subparsers.add_parser("show", help="Print the universe").set_defaults(func=cmd_show)
    subparsers.add_parser("state", help="Print universe state").set_defaults(func=cmd_state)

    tick_parser = subparsers.add_parser("tick", help="Advance N generations")
    tick_parser.add_argument("steps", type=int, nargs="?", default=1)
    tick_parser.set_defaults(func=cmd_tick)

    for name, func in (("toggle", cmd_toggle), ("glider", cmd_glider)):
        cell_parser = subparsers.add_parser(name, help=f"{name.capitalize()} at ROW COLUMN")
        cell_parser.add_argument("row", type=int)
        cell_parser.add_argument("column", type=int)
        cell_parser.set_defaults(func=func)

    reset_parser = subparsers.add_parser("reset", help="Reseed the universe")
    reset_parser.add_argument("pattern", nargs="?", default="default",
                              choices=["default", "blank", "random"])
    reset_parser.add_argument("--width", type=int)
    reset_parser.add_argument("--height", type=int)
    reset_parser.add_argument("--seed", type=int)
    reset_parser.set_defaults(func=cmd_reset)

    for action in ("play", "pause"):
        action_parser = subparsers.add_parser(action, help=f"{action.capitalize()} the simulation")
        action_parser.set_defaults(func=cmd_run_state, action=action)

    speed_parser = subparsers.add_parser("speed", help="Set tick rate in Hz")
    speed_parser.add_argument("hz", type=float)
    speed_parser.set_defaults(func=cmd_speed)

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    if args.verbose:
        set_verbose(True)

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
