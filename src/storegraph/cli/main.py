#!/usr/bin/env python3
"""
Storegraph CLI - Main entry point.

Usage:
    storegraph serve [--host HOST] [--port PORT]   # Run the HTTP service
    storegraph init-db                              # Create document tables
    storegraph show-config                          # Print effective config
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

import uvicorn
import yaml

from ..config import StoregraphConfig, load_config
from ..store.sql import SQLDocumentStore


def _configure_logging(config: StoregraphConfig) -> None:
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def cmd_serve(args: argparse.Namespace) -> int:
    """Run the HTTP service under uvicorn."""
    from ..service.app import create_app

    config = load_config(args.config)
    if args.host:
        config.host = args.host
    if args.port:
        config.port = args.port
    _configure_logging(config)

    app = create_app(config)
    uvicorn.run(app, host=config.host, port=config.port, log_level=config.log_level.lower())
    return 0


def cmd_init_db(args: argparse.Namespace) -> int:
    """Create document tables in the configured database."""
    config = load_config(args.config)
    _configure_logging(config)

    async def run():
        store = SQLDocumentStore(config.database_url, echo=config.sql_echo)
        try:
            await store.init()
        finally:
            await store.close()

    asyncio.run(run())
    print(f"Tables created on {config.database_url}")
    return 0


def cmd_show_config(args: argparse.Namespace) -> int:
    """Print the effective configuration as YAML."""
    config = load_config(args.config)
    print(yaml.dump(config.to_dict(), default_flow_style=False, sort_keys=False), end="")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="storegraph",
        description="Products, users and orders with batched references and change events",
    )
    parser.add_argument(
        "--config",
        default="storegraph.yaml",
        help="Path to config file (default: storegraph.yaml)",
    )
    subparsers = parser.add_subparsers(dest="command")

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP service")
    serve_parser.add_argument("--host", help="Bind host")
    serve_parser.add_argument("--port", type=int, help="Bind port")
    serve_parser.set_defaults(func=cmd_serve)

    init_parser = subparsers.add_parser("init-db", help="Create document tables")
    init_parser.set_defaults(func=cmd_init_db)

    show_parser = subparsers.add_parser("show-config", help="Print effective config")
    show_parser.set_defaults(func=cmd_show_config)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not getattr(args, "func", None):
        parser.print_help()
        return 1

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
