"""Entry point for running the CLI as a module."""

import argparse
import asyncio
import os
import sys

from .riley_cli import main


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Interactive CLI for the Riley API",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--host",
        type=str,
        default="localhost",
        help="Server host (default: localhost)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=8080,
        help="Server port (default: 8080)",
    )
    parser.add_argument(
        "--api-prefix",
        type=str,
        default="/api/v1",
        help="API route prefix (default: /api/v1)",
    )
    parser.add_argument(
        "--firebase-api-key",
        type=str,
        default=os.environ.get("RILEY_FIREBASE_API_KEY", ""),
        help="Firebase web API key (default: $RILEY_FIREBASE_API_KEY)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    return parser.parse_args()


def cli_entry() -> None:
    """CLI entry point."""
    args = parse_args()

    try:
        asyncio.run(
            main(
                host=args.host,
                port=args.port,
                api_prefix=args.api_prefix,
                firebase_api_key=args.firebase_api_key,
                debug=args.debug,
            )
        )
    except KeyboardInterrupt:
        sys.exit(0)


if __name__ == "__main__":
    cli_entry()
