from __future__ import annotations

import argparse
import logging

from app.config import load_config, setup_logging
from app.domain.exceptions import PickupError
from app.services.container import ServiceContainer
from app.utils.time import parse_date, today

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Delete pickup exceptions and day notes dated before a cut-off date."""
    parser = argparse.ArgumentParser(prog="pickup-cleanup")
    parser.add_argument(
        "--before",
        metavar="YYYY-MM-DD",
        help="Purge entries dated before this day (default: today in PICKUP_TIMEZONE)",
    )
    parser.add_argument("--database", help="SQLite database path (default: PICKUP_DATABASE_PATH)")
    args = parser.parse_args(argv)

    config = load_config()
    if args.database:
        config.database_path = args.database
    setup_logging(debug=config.debug, log_file=config.log_file or None, level=config.log_level)

    try:
        before = parse_date(args.before) if args.before else today(config.timezone)
    except PickupError as exc:
        parser.error(str(exc))

    container = ServiceContainer.build(config)
    try:
        counts = container.pickup_schedule_service.purge_past_entries(before)
    except PickupError:
        logger.exception("Cleanup failed")
        return 1
    finally:
        container.shutdown()

    print(f"Removed {counts['exceptions']} exceptions and {counts['notes']} notes dated before {before}")
    return 0


if __name__ == "__main__":
    import sys

    raise SystemExit(main(sys.argv[1:]))
