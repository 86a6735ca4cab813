"""CLI entry point for partcopy."""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from partcopy.config import PartCopyConfig, load_config
from partcopy.copier import MultipartCopier
from partcopy.errors import CleanupOutcome, CopyError
from partcopy.logging_config import configure_logging
from partcopy.metrics import init_metrics
from partcopy.models import CopyRequest
from partcopy.store import create_store

logger = logging.getLogger("partcopy")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Args:
        argv: Argument list to parse. Defaults to sys.argv[1:].

    Returns:
        Parsed argument namespace.
    """
    parser = argparse.ArgumentParser(
        prog="partcopy",
        description="partcopy - copy a large object using server-side multipart copy",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to YAML configuration file (default: built-in defaults)",
    )
    parser.add_argument("--source-bucket", required=True, help="Bucket holding the source object")
    parser.add_argument("--source-key", required=True, help="Key of the source object")
    parser.add_argument("--destination-bucket", required=True, help="Bucket receiving the copy")
    parser.add_argument("--destination-key", required=True, help="Key of the copy")
    parser.add_argument("--size", type=int, required=True, help="Source object size in bytes")
    parser.add_argument(
        "--part-size",
        type=int,
        default=None,
        help="Part size in bytes (overrides config)",
    )
    parser.add_argument(
        "--max-concurrency",
        type=int,
        default=None,
        help="Maximum in-flight part copies (overrides config)",
    )
    parser.add_argument("--acl", default=None, help="Canned ACL for the copy")
    parser.add_argument("--content-type", default=None, help="Content-Type of the copy")
    parser.add_argument("--storage-class", default=None, help="Storage class of the copy")
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level (overrides config, default: INFO)",
    )
    parser.add_argument(
        "--log-format",
        type=str,
        default=None,
        choices=["text", "json"],
        help="Log format: 'text' (human-readable) or 'json' (structured)",
    )
    return parser.parse_args(argv)


async def run_copy(config: PartCopyConfig, request: CopyRequest) -> dict:
    """Build the store and copier from ``config`` and run one copy."""
    store = create_store(config.storage)
    init = getattr(store, "init", None)
    if init is not None:
        await init()
    try:
        copier = MultipartCopier(
            store,
            logging.getLogger("partcopy.copier"),
            part_size=config.multipart.part_size,
            min_part_size=config.multipart.min_part_size,
            max_concurrency=config.multipart.max_concurrency,
            default_acl=config.multipart.default_acl,
        )
        return await copier.copy_object(request, timeout=config.multipart.timeout)
    finally:
        close = getattr(store, "close", None)
        if close is not None:
            await close()


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the partcopy CLI.

    Loads configuration, applies CLI overrides, runs the copy and prints the
    store's completion response as JSON. Exits 1 on failure.

    Args:
        argv: Argument list to parse. Defaults to sys.argv[1:].
    """
    args = parse_args(argv)

    # Use a basic stderr logger for config-loading errors
    logging.basicConfig(level=logging.INFO, stream=sys.stderr)

    if args.config is None:
        config = PartCopyConfig()
    else:
        try:
            config = load_config(args.config)
        except FileNotFoundError:
            logger.error("Config file not found: %s", args.config)
            sys.exit(1)
        except Exception as exc:
            logger.error("Failed to load config: %s", exc)
            sys.exit(1)

    # Apply CLI overrides
    if args.part_size is not None:
        config.multipart.part_size = args.part_size
    if args.max_concurrency is not None:
        config.multipart.max_concurrency = args.max_concurrency
    if args.log_level is not None:
        config.logging.level = args.log_level
    if args.log_format is not None:
        config.logging.format = args.log_format

    configure_logging(level=config.logging.level, fmt=config.logging.format)
    init_metrics()

    request = CopyRequest(
        source_bucket=args.source_bucket,
        object_key=args.source_key,
        destination_bucket=args.destination_bucket,
        copied_object_name=args.destination_key,
        object_size=args.size,
        copied_object_permissions=args.acl,
        content_type=args.content_type,
        storage_class=args.storage_class,
        request_context="cli",
    )

    try:
        result = asyncio.run(run_copy(config, request))
    except CopyError as exc:
        if isinstance(exc, CleanupOutcome) and exc.cause is not None:
            logger.error("%s: %s (after %s)", exc.code, exc.message, exc.cause.code)
        else:
            logger.error("%s: %s", exc.code, exc.message)
        sys.exit(1)

    print(json.dumps(result, default=str, indent=2))


if __name__ == "__main__":
    main()
