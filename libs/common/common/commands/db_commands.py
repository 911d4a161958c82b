import asyncio

import typer

from common.core.config_service import ConfigService
from common.db.db import Db
from common.logging import setup_logging
from common.utils.utils import get_logger
from enrollment_db.db.init_db import drop_db, init_db

# Get logger for this module
logger = get_logger(__name__)

# Create a Typer app
app = typer.Typer(help="Database management commands")


def _open_db() -> Db:
    url = ConfigService().get_database_url()
    if not url:
        logger.error("DATABASE_URL is not set")
        raise typer.Exit(code=1)
    return Db.from_url(url)


async def _init() -> bool:
    async with _open_db() as db:
        return await init_db(db)


async def _drop() -> None:
    async with _open_db() as db:
        await drop_db(db)


@app.callback()
def main() -> None:
    setup_logging()


@app.command()
def init() -> None:
    """Initialize the database by creating all tables."""
    logger.info("Initializing database...")
    if not asyncio.run(_init()):
        logger.error("Database initialization failed!")
        raise typer.Exit(code=1)
    logger.info("Database initialized successfully!")


@app.command()
def drop(yes: bool = typer.Option(False, "--yes", help="Skip the confirmation prompt")) -> None:
    """Drop every table. Payment history is lost."""
    if not yes:
        _ = typer.confirm("Drop all tables?", abort=True)
    logger.info("Dropping database tables...")
    asyncio.run(_drop())
    logger.info("Database tables dropped")


if __name__ == "__main__":
    app()
