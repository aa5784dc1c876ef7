"""Bring the setoran schema up to date before the API starts serving.

Deploys call this once per release. It waits for the database to accept
connections, upgrades to the requested revision and, with ``--sql``, only prints
the migration SQL so a DBA can apply it by hand.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
import time
from pathlib import Path
from typing import Optional

from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError, SQLAlchemyError

LOGGER = logging.getLogger("setoran.migrations")
URL_PLACEHOLDER = "%(SETORAN_DATABASE_URL)s"
DEFAULT_TIMEOUT = int(os.getenv("SETORAN_DB_MIGRATION_TIMEOUT", "60"))
DEFAULT_POLL_INTERVAL = float(os.getenv("SETORAN_DB_MIGRATION_POLL_INTERVAL", "2"))
BACKEND_ROOT = Path(__file__).resolve().parent.parent


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Upgrade the setoran database schema.")
    parser.add_argument(
        "--revision",
        default=os.getenv("SETORAN_DB_MIGRATION_REVISION", "head"),
        help="Target revision (default: head).",
    )
    parser.add_argument(
        "--timeout",
        type=int,
        default=DEFAULT_TIMEOUT,
        help=f"Seconds to wait for the database (default: {DEFAULT_TIMEOUT}).",
    )
    parser.add_argument(
        "--poll-interval",
        type=float,
        default=DEFAULT_POLL_INTERVAL,
        help=f"Seconds between connection attempts (default: {DEFAULT_POLL_INTERVAL}).",
    )
    parser.add_argument(
        "--config",
        default=str(BACKEND_ROOT / "alembic.ini"),
        help="Path to alembic.ini.",
    )
    parser.add_argument(
        "--sql",
        action="store_true",
        help="Emit the migration SQL instead of applying it.",
    )
    return parser.parse_args(argv)


def get_alembic_config(config_path: str) -> Config:
    config = Config(config_path)
    config.set_main_option("script_location", str(BACKEND_ROOT / "alembic"))
    return config


def resolve_database_url(config: Config) -> str:
    """Use the URL from alembic.ini unless it is still the environment placeholder."""
    url = config.get_main_option("sqlalchemy.url")
    if url and url != URL_PLACEHOLDER:
        return url
    env_url = os.getenv("SETORAN_DATABASE_URL")
    if not env_url:
        raise RuntimeError("SETORAN_DATABASE_URL must be set before running migrations.")
    config.set_main_option("sqlalchemy.url", env_url)
    return env_url


def wait_for_database(database_url: str, *, timeout: int, poll_interval: float) -> None:
    deadline = time.monotonic() + timeout
    engine: Optional[Engine] = None
    last_error: Optional[Exception] = None
    attempts = 0

    try:
        engine = create_engine(database_url, future=True, pool_pre_ping=True)
        while True:
            attempts += 1
            try:
                with engine.connect() as connection:
                    connection.execute(text("SELECT 1"))
                LOGGER.info("Database reachable after %d attempt(s).", attempts)
                return
            except OperationalError as exc:
                last_error = exc
                LOGGER.warning("Database not ready (attempt %d): %s", attempts, exc)
            except SQLAlchemyError as exc:
                last_error = exc
                LOGGER.error("Database rejected the readiness probe: %s", exc)
                break
            if time.monotonic() >= deadline:
                break
            time.sleep(poll_interval)
    finally:
        if engine is not None:
            engine.dispose()

    raise RuntimeError(f"Database was not reachable within {timeout}s.") from last_error


def run_migrations(
    revision: str,
    *,
    timeout: int,
    poll_interval: float,
    config: Optional[Config] = None,
    sql_only: bool = False,
) -> None:
    config = config or get_alembic_config(str(BACKEND_ROOT / "alembic.ini"))
    database_url = resolve_database_url(config)
    if sql_only:
        LOGGER.info("Rendering migration SQL up to %s", revision)
        command.upgrade(config, revision, sql=True)
        return
    LOGGER.info("Upgrading schema to %s (timeout=%ss poll=%ss)", revision, timeout, poll_interval)
    wait_for_database(database_url, timeout=timeout, poll_interval=poll_interval)
    command.upgrade(config, revision)
    LOGGER.info("Schema is at %s.", revision)


def main(argv: Optional[list[str]] = None) -> int:
    logging.basicConfig(
        level=os.getenv("SETORAN_DB_MIGRATION_LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    args = parse_args(argv)
    try:
        run_migrations(
            args.revision,
            timeout=args.timeout,
            poll_interval=args.poll_interval,
            config=get_alembic_config(args.config),
            sql_only=args.sql,
        )
    except Exception as exc:  # noqa: BLE001
        LOGGER.exception("Migration run failed: %s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
