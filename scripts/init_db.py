import argparse
import asyncio
import logging
from pathlib import Path
from typing import List, Optional

from alembic import command
from alembic.config import Config
from sqlalchemy.engine import make_url

from core.config import settings
from core.database import create_engine
from core.logging import setup_logging
from models.base import Base
# Import all models to ensure they are registered
from models.customer import Customer  # noqa: F401
from models.organization import Organization  # noqa: F401

logger = logging.getLogger(__name__)


def _ensure_database_dir(database_url: str) -> None:
    url = make_url(database_url)
    if url.database and url.database != ":memory:":
        Path(url.database).parent.mkdir(parents=True, exist_ok=True)


async def init_database(database_url: Optional[str] = None):
    """Create the destination tables straight from the models"""
    database_url = database_url or settings.DATABASE_URL
    _ensure_database_dir(database_url)

    logger.info("Connecting to database...")
    engine = create_engine(database_url)

    try:
        async with engine.begin() as conn:
            logger.info("Creating tables...")
            await conn.run_sync(Base.metadata.create_all)
            logger.info("Tables created successfully.")
    finally:
        await engine.dispose()


def run_migrations(config_path: str = "alembic.ini", revision: str = "head"):
    """Apply the alembic migrations found in MIGRATIONS_DIR"""
    _ensure_database_dir(settings.DATABASE_URL)

    alembic_cfg = Config(config_path)
    alembic_cfg.set_main_option("script_location", settings.MIGRATIONS_DIR)

    logger.info(f"Upgrading database to {revision}...")
    command.upgrade(alembic_cfg, revision)


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Create the destination tables")
    parser.add_argument("--migrate", action="store_true", help="Use alembic migrations instead of create_all")
    args = parser.parse_args(argv)

    setup_logging()

    if args.migrate:
        run_migrations()
    else:
        asyncio.run(init_database())


if __name__ == "__main__":
    main()
