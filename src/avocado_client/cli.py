#!/usr/bin/env python3
"""
Command line interface for avocado-client.

Usage:
    python -m avocado_client env              # Dump env vars as JSON
    python -m avocado_client env --format md  # Dump as markdown
    python -m avocado_client validate         # Validate required vars
    python -m avocado_client whoami           # Show the logged-in user
    python -m avocado_client activities --type hug
    python -m avocado_client message "on my way"
"""

import argparse
import asyncio
import json
import logging
import sys
from collections.abc import Awaitable, Callable
from typing import Any

import structlog

from avocado_client.client import AvocadoClient, filter_activities
from avocado_client.config import ClientSettings
from avocado_client.exceptions import AvocadoError
from avocado_client.models import ActivityType, dump_records
from avocado_client.utils import dump_env_config, validate_env_config

logger = structlog.get_logger()


def configure_logging(verbose: bool = False):
    """Send log output to stderr so stdout stays machine-readable."""
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(logging.DEBUG if verbose else logging.WARNING),
        logger_factory=lambda *args: structlog.PrintLogger(sys.stderr),
    )


def cmd_env(args):
    """Dump environment variable configuration."""
    ClientSettings.from_env(strict=False)
    print(dump_env_config(format=args.format, include_values=not args.no_values))


def cmd_validate(args):
    """Validate required environment variables."""
    ClientSettings.from_env(strict=False)

    errors = validate_env_config()
    if errors:
        print("Validation failed:")
        for error in errors:
            print(f"  - {error}")
        sys.exit(1)
    print("All required environment variables are set.")


async def _with_session(call: Callable[[AvocadoClient], Awaitable[Any]]) -> Any:
    """Log in with settings from the environment, run one call, log out."""
    settings = ClientSettings.from_env()
    async with AvocadoClient.from_settings(settings) as client:
        if not await client.login(settings.email, settings.password):
            raise AvocadoError("Login did not return a session")
        try:
            result = await call(client)
        except BaseException:
            # Keep the call's error, not the logout's
            try:
                await client.logout()
            except AvocadoError as e:
                logger.warning("logout_failed", error=str(e))
            raise
        await client.logout()
        return result


def _api_command(call: Callable[[argparse.Namespace, AvocadoClient], Awaitable[Any]]):
    def run(args):
        try:
            result = asyncio.run(_with_session(lambda client: call(args, client)))
        except AvocadoError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
        print(json.dumps(dump_records(result), indent=2))

    return run


async def _activities(args, client: AvocadoClient):
    if args.before is not None:
        activities = await client.activities_before(args.before)
    elif args.after is not None:
        activities = await client.activities_after(args.after)
    else:
        activities = await client.activities()
    return filter_activities(activities, args.type)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="avocado",
        description="Avocado API client",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Log requests to stderr")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # env command
    env_parser = subparsers.add_parser("env", help="Dump environment variables")
    env_parser.add_argument(
        "--format", "-f",
        choices=["json", "md", "markdown", "env"],
        default="json",
        help="Output format (default: json)",
    )
    env_parser.add_argument(
        "--no-values",
        action="store_true",
        help="Exclude current values from output",
    )
    env_parser.set_defaults(func=cmd_env)

    # validate command
    validate_parser = subparsers.add_parser("validate", help="Validate required vars")
    validate_parser.set_defaults(func=cmd_validate)

    # API commands
    whoami_parser = subparsers.add_parser("whoami", help="Show the logged-in user")
    whoami_parser.set_defaults(func=_api_command(lambda args, client: client.current_user()))

    couple_parser = subparsers.add_parser("couple", help="Show the couple")
    couple_parser.set_defaults(func=_api_command(lambda args, client: client.couple()))

    activities_parser = subparsers.add_parser("activities", help="Show recent activities")
    activities_parser.add_argument(
        "--type", "-t",
        choices=[t.value for t in ActivityType],
        help="Only show one activity type",
    )
    window = activities_parser.add_mutually_exclusive_group()
    window.add_argument("--before", type=int, help="Unix timestamp upper bound")
    window.add_argument("--after", type=int, help="Unix timestamp lower bound")
    activities_parser.set_defaults(func=_api_command(_activities))

    lists_parser = subparsers.add_parser("lists", help="Show shared lists")
    lists_parser.set_defaults(func=_api_command(lambda args, client: client.lists()))

    message_parser = subparsers.add_parser("message", help="Send a message")
    message_parser.add_argument("text", help="Message text")
    message_parser.set_defaults(func=_api_command(lambda args, client: client.message(args.text)))

    hug_parser = subparsers.add_parser("hug", help="Send a hug")
    hug_parser.set_defaults(func=_api_command(lambda args, client: client.hug()))

    kiss_parser = subparsers.add_parser("kiss", help="Send a kiss")
    kiss_parser.set_defaults(func=_api_command(lambda args, client: client.kiss()))

    return parser


def main(argv: list[str] | None = None):
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    args.func(args)


if __name__ == "__main__":
    main()
