"""
Command-line access to a Phlag server.

Examples:
  # Read flags from production
  phlag --environment production get feature_checkout max_items

  # Check a SWITCH flag with the cache enabled
  phlag --cache enabled feature_checkout

  # Populate or drop the cache file ahead of a deploy
  phlag --cache warm
  phlag --cache clear

Connection settings default to the PHLAG_* environment variables (or a .env
file); command-line options take priority.
"""

import argparse
import asyncio
import json
import sys

from phlag_client.config import load_client_config
from phlag_client.core.errors import PhlagConfigError, PhlagError
from phlag_client.logging import configure_logging, get_logger
from phlag_client.services.flags import PhlagClient

logger = get_logger("CLI")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="phlag",
        description="Query feature flags from a Phlag server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--base-url", help="Server base URL (PHLAG_BASE_URL)")
    parser.add_argument("--api-key", help="API key (PHLAG_API_KEY)")
    parser.add_argument("--environment", "-e", help="Environment name (PHLAG_ENVIRONMENT)")
    parser.add_argument("--timeout", type=float, help="Request timeout in seconds")
    parser.add_argument(
        "--cache",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Enable the flag cache (PHLAG_CACHE)",
    )
    parser.add_argument("--cache-file", help="Cache file path override")
    parser.add_argument("--cache-ttl", type=int, help="Cache TTL in seconds")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging to stderr")

    commands = parser.add_subparsers(dest="command", required=True)

    get_cmd = commands.add_parser("get", help="Print flag values as JSON")
    get_cmd.add_argument("names", nargs="+", help="Flag names")

    enabled_cmd = commands.add_parser("enabled", help="Print whether a SWITCH flag is on")
    enabled_cmd.add_argument("name", help="Flag name")

    commands.add_parser("warm", help="Load every flag into the cache")
    commands.add_parser("clear", help="Delete the cached flags")
    return parser


async def run_command(client: PhlagClient, args: argparse.Namespace) -> None:
    if args.command == "get":
        if len(args.names) == 1:
            print(json.dumps(await client.get_flag(args.names[0])))
        else:
            values = {name: await client.get_flag(name) for name in args.names}
            print(json.dumps(values, indent=2))
    elif args.command == "enabled":
        print(json.dumps(await client.is_enabled(args.name)))
    elif args.command == "warm":
        await client.warm_cache()
        print(f"Cache warmed: {client.get_cache_file()}")
    elif args.command == "clear":
        await client.clear_cache()
        print(f"Cache cleared: {client.get_cache_file()}")


async def main(argv: list[str] | None = None) -> int:
    """Run the CLI and return the process exit code."""
    args = build_parser().parse_args(argv)

    configure_logging(log_level="DEBUG" if args.verbose else "WARNING")

    try:
        config = load_client_config(
            base_url=args.base_url,
            api_key=args.api_key,
            environment=args.environment,
            timeout=args.timeout,
            cache=args.cache,
            cache_file=args.cache_file,
            cache_ttl=args.cache_ttl,
        )
    except PhlagConfigError as e:
        logger.error(f"Configuration error: {e}")
        return 2

    async with PhlagClient(config) as client:
        try:
            await run_command(client, args)
        except PhlagError as e:
            logger.error(f"{type(e).__name__}: {e}")
            return 1
    return 0


def run() -> None:
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
