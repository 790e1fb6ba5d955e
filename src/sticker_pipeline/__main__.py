"""
Command line entry point.

Usage:
    # Ingest one sticker set into the configured bucket
    python -m sticker_pipeline ingest cattos

    # List sticker sets linked from a catalog page (source 0 = tlgrm.eu, 1 = combot.org)
    python -m sticker_pipeline discover --page 2 --source 1

    # Count stored collections and stickers
    python -m sticker_pipeline stats

    # Run the HTTP entry point
    python -m sticker_pipeline serve --port 8080

Secrets come from the environment or a .env file in the working directory:
SUPABASE_URL, SUPABASE_SERVICE_ROLE_KEY, SUPABASE_BUCKET, TELEGRAM_API_KEY.
"""

import argparse
import asyncio
import json
import logging
import os
import signal
import sys
from pathlib import Path

from dotenv import load_dotenv

from config.config import IngestConfig, load_config
from core.errors.exceptions import PipelineError
from core.logging.setup import setup_logging
from core.utils.json_serializers import json_serializer
from sticker_pipeline.schemas.responses import CollectionStats, IngestResponse
from sticker_pipeline.server import run_server
from sticker_pipeline.service import build_service

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="sticker_pipeline",
        description="Discover and ingest Telegram sticker sets into object storage",
    )
    parser.add_argument("--config", type=Path, help="Path to config.yaml")
    parser.add_argument("--json-logs", action="store_true", help="Emit logs as JSON lines")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--log-dir",
        type=Path,
        default=os.getenv("LOG_DIR") or None,
        help="Also write JSON logs to this directory",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    ingest = sub.add_parser("ingest", help="Ingest one sticker set")
    ingest.add_argument("shortname", help="Sticker set name, e.g. cattos")

    discover = sub.add_parser("discover", help="List sticker sets from a catalog page")
    discover.add_argument("--page", type=int, default=1, help="Listing page (default: 1)")
    discover.add_argument("--source", type=int, default=0, help="Catalog source variant (default: 0)")

    stats = sub.add_parser("stats", help="Show bucket statistics")
    stats.add_argument("--bucket", help="Bucket to inspect (default: configured bucket)")

    serve = sub.add_parser("serve", help="Run the HTTP entry point")
    serve.add_argument("--host", help="Bind address (default: from config)")
    serve.add_argument("--port", type=int, help="Port (default: from config)")

    return parser.parse_args(argv)


def _print_json(payload) -> None:
    print(json.dumps(payload, indent=2, default=json_serializer))


async def run_command(args: argparse.Namespace, config: IngestConfig) -> int:
    if args.command == "serve":
        if args.host:
            config.server_host = args.host
        if args.port:
            config.server_port = args.port
        stop_event = asyncio.Event()
        if sys.platform != "win32":
            loop = asyncio.get_running_loop()
            for sig in (signal.SIGINT, signal.SIGTERM):
                loop.add_signal_handler(sig, stop_event.set)
        await run_server(config, stop_event)
        return 0

    async with build_service(config) as service:
        if args.command == "ingest":
            report = await service.ingest(args.shortname)
            _print_json(IngestResponse.from_report(report).model_dump())
            return 0 if report.failed == 0 else 2

        if args.command == "discover":
            found = await service.discover(args.page, args.source)
            _print_json(sorted(found))
            return 0

        if args.command == "stats":
            stats = await service.stats(args.bucket)
            _print_json(
                CollectionStats(
                    totalCollections=stats.total_collections,
                    totalStickers=stats.total_objects,
                    animatedCount=stats.animated_count,
                    collections=stats.per_collection,
                ).model_dump()
            )
            return 0

    raise ValueError(f"Unknown command: {args.command}")


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    args = parse_args(argv)

    setup_logging(
        name="sticker_pipeline",
        stage=args.command,
        log_dir=args.log_dir,
        json_format=args.json_logs or os.getenv("JSON_LOGS", "false").lower() in ("true", "1", "yes"),
        console_level=logging.DEBUG if args.verbose else logging.INFO,
    )

    try:
        config = load_config(config_path=args.config)
    except ValueError as e:
        logger.error("Invalid configuration", extra={"error_message": str(e)})
        return 1

    try:
        return asyncio.run(run_command(args, config))
    except PipelineError as e:
        logger.error(
            "Command failed",
            extra={"error_type": type(e).__name__, "error_message": str(e)},
        )
        _print_json({"error": e.message, "success": False})
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted")
        return 130


if __name__ == "__main__":
    sys.exit(main())
