from sqlalchemy.exc import SQLAlchemyError

from common.db.db import Db
from common.utils.utils import get_logger
from enrollment_db import models  # noqa: F401  # registers every table on Base.metadata
from enrollment_db.db import Base

logger = get_logger()


async def init_db(db: Db) -> bool:
    """Create all tables that do not exist yet."""
    try:
        logger.info("Creating database tables", operation="create_tables")
        async with db.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables created", operation="create_tables", status="success")
        return True
    except SQLAlchemyError as e:
        logger.exception("Error during database initialization", operation="init_db", status="error", error=str(e))
        return False


async def drop_db(db: Db) -> None:
    async with db.engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
