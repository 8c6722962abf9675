"""Main Entry Point for Hoarder Social Relay.

Runs the webhook server that announces fully enriched Hoarder bookmarks on
Bluesky and LinkedIn.

Usage:
    python -m src.main                 # Listen on PORT (default 3000)
    python -m src.main --port 8080     # Listen on a custom port
    python -m src.main --verbose       # Enable debug logging
"""

import argparse
import asyncio
import sys

from src.core.config import get_config
from src.core.exceptions import ConfigurationError
from src.core.logger import get_logger, setup_logging
from src.webhook_server import DEFAULT_HOST, create_app, run_server

logger = get_logger(__name__)


def create_argument_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser."""
    parser = argparse.ArgumentParser(
        prog="hoarder-social-relay",
        description="Post newly enriched Hoarder bookmarks to Bluesky and LinkedIn.",
        epilog="Configuration is read from environment variables.",
    )

    parser.add_argument(
        "--host",
        default=DEFAULT_HOST,
        metavar="HOST",
        help=f"Interface to bind (default: {DEFAULT_HOST})",
    )

    parser.add_argument(
        "--port",
        type=int,
        default=None,
        metavar="PORT",
        help="Port for the webhook server (default: PORT env var or 3000)",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )

    return parser


async def serve(host: str, port: int) -> None:
    """Run the webhook server until cancelled."""
    runner = await run_server(host=host, port=port, app=create_app())
    try:
        while True:
            await asyncio.sleep(3600)
    finally:
        await runner.cleanup()


def main(args: list[str] | None = None) -> int:
    """Main entry point.

    Args:
        args: Command line arguments (defaults to sys.argv[1:]).

    Returns:
        Exit code (0 for success, 1 for configuration errors).
    """
    parser = create_argument_parser()
    parsed_args = parser.parse_args(args)

    try:
        config = get_config()
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    log_level = "DEBUG" if parsed_args.verbose else config.log_level
    setup_logging(log_level)

    if not config.hoarder_api_base_url:
        logger.warning("HOARDER_API_BASE_URL is not set; bookmark fetches will fail")

    platforms = config.enabled_platforms()
    if platforms:
        logger.info("Publishing enabled for: %s", ", ".join(platforms))
    else:
        logger.warning("No platform credentials configured; nothing will be posted")

    port = parsed_args.port or config.port
    try:
        asyncio.run(serve(parsed_args.host, port))
    except KeyboardInterrupt:
        logger.info("Webhook server stopped")
    return 0


if __name__ == "__main__":
    sys.exit(main())
