"""Command that starts the Somana agent."""

from __future__ import annotations

import argparse
import logging
import sqlite3
import time

from .config import load_config
from .database import init_database
from .registration import DEFAULT_CONFIG_PATH, HostRegistrationService

logger = logging.getLogger(__name__)


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="somana-agent", description="Register this host with Somana and keep it online."
    )
    parser.add_argument("--config", default=DEFAULT_CONFIG_PATH, help="configuration file")
    parser.add_argument("--data-dir", default="data", help="directory for the local database")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Run the agent until interrupted; return the exit status."""
    args = _parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(message)s")

    try:
        config = load_config(args.config)
    except (OSError, ValueError) as exc:
        logger.error("Failed to load configuration: %s", exc)
        return 1

    try:
        init_database(args.data_dir)
    except (OSError, sqlite3.Error) as exc:
        logger.error("Failed to initialize database: %s", exc)
        return 1

    service = HostRegistrationService(config, args.config)
    try:
        service.start()
    except (RuntimeError, ValueError) as exc:
        logger.warning("Failed to start host registration: %s", exc)

    logger.info("Host registration service started. Press Ctrl+C to exit.")
    try:
        while True:
            time.sleep(3600)
    except KeyboardInterrupt:
        service.stop()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())