"""Entry point for running the form as a module.

Usage:
    python -m fieldkit                      # Demo catalog
    python -m fieldkit catalog.yaml         # Fields from a catalog file
    python -m fieldkit catalog.yaml --store values.json
"""

from __future__ import annotations

import argparse
import logging
import sys

from fieldkit.errors import FieldKitError
from fieldkit.logging import setup_logging
from fieldkit.settings import get_settings

logger = logging.getLogger("fieldkit")


def main(argv: list[str] | None = None) -> int:
    """Run the form application."""
    parser = argparse.ArgumentParser(
        prog="fieldkit",
        description="Configurable form-field editor",
    )
    parser.add_argument(
        "catalog",
        nargs="?",
        help="Path to a field catalog YAML file (defaults to the demo form)",
    )
    parser.add_argument(
        "--store", "-s",
        help="JSON file field values are persisted to",
    )
    parser.add_argument(
        "--log-file",
        help="Write logs to this file",
    )
    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Write logs as JSON lines",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging",
    )
    args = parser.parse_args(argv)

    settings = get_settings()
    setup_logging(
        level="DEBUG" if args.verbose else settings.log_level,
        json_format=args.json_logs or settings.json_logs,
        log_file=args.log_file or settings.log_file,
    )

    from fieldkit.app import run_form

    try:
        host = run_form(args.catalog, args.store, settings=settings)
    except FieldKitError as exc:
        logger.error("%s", exc)
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    logger.info("Form closed with %d values", len(host.values))
    return 0


if __name__ == "__main__":
    sys.exit(main())
