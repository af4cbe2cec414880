"""Command line entry point for the clinic records dashboard."""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

if __package__ is None or __package__ == "":  # pragma: no cover - runtime safety for script execution
    sys.path.append(str(Path(__file__).resolve().parent.parent))

from connector import SeedClient, seed_session
from connector.seed_client import DEFAULT_SEED_BASE_URL
from records import COLLECTIONS, ClinicSession
from ui.dashboard import DEFAULT_PORT, create_app

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def run_seed(seed_url: str, collections: List[str]) -> int:
    """Fetch seed data into a throwaway session and print the counts."""

    session = ClinicSession()
    with SeedClient(seed_url) as client:
        summary = seed_session(session, client, collections)
    print(json.dumps(summary, indent=2))
    return 0


def run_server(args: argparse.Namespace) -> int:
    session = ClinicSession()
    if args.no_seed:
        app = create_app(session)
    else:
        with SeedClient(args.seed_url) as client:
            app = create_app(session, seed_client=client)
    app.run(host=args.host, port=args.port, debug=args.debug)
    return 0


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Clinic records controller")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=("DEBUG", "INFO", "WARNING", "ERROR"),
        help="Root logging level",
    )
    subparsers = parser.add_subparsers(dest="command")

    serve = subparsers.add_parser("serve", help="Run the dashboard web application")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=DEFAULT_PORT)
    serve.add_argument("--seed-url", default=DEFAULT_SEED_BASE_URL)
    serve.add_argument("--no-seed", action="store_true", help="Start with empty collections")
    serve.add_argument("--debug", action="store_true")

    seed = subparsers.add_parser("seed", help="Preview the seed data load")
    seed.add_argument("--seed-url", default=DEFAULT_SEED_BASE_URL)
    seed.add_argument(
        "collections",
        nargs="*",
        help=f"Collections to fetch: {', '.join(COLLECTIONS)} (default: all)",
    )

    args = parser.parse_args(argv)
    if args.command is None:
        parser.error("a command is required")
    unknown = [name for name in getattr(args, "collections", []) if name not in COLLECTIONS]
    if unknown:
        parser.error(f"unknown collection(s): {', '.join(unknown)}")
    return args


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=args.log_level, format=LOG_FORMAT)

    if args.command == "seed":
        return run_seed(args.seed_url, args.collections or list(COLLECTIONS))
    return run_server(args)


if __name__ == "__main__":
    sys.exit(main())
