from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any, override

from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.engine.url import URL
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.pool import NullPool, StaticPool

from common.core.lifecycle import Lifecycle
from common.utils import JsonSnakeCaseModel, decode_json, encode_json_str, get_logger

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

logger = get_logger()

_DRIVER_ALIASES = {
    "postgres": "postgresql+asyncpg",
    "postgresql": "postgresql+asyncpg",
    "postgresql+psycopg2": "postgresql+asyncpg",
    "sqlite": "sqlite+aiosqlite",
}


class DBConfig(JsonSnakeCaseModel):
    url: str
    pool_size: int = 5
    pool_max_overflow: int = 10
    pool_timeout: int = 30
    pool_recycle: int = 300
    echo: bool = False
    pool_pre_ping: bool = True
    pool_disabled: bool = False

    @property
    def sqlalchemy_url(self) -> URL:
        """The configured URL with a sync driver name swapped for its async counterpart."""
        url = make_url(self.url)
        driver = _DRIVER_ALIASES.get(url.drivername)
        return url.set(drivername=driver) if driver else url

    @property
    def is_sqlite(self) -> bool:
        return self.sqlalchemy_url.get_backend_name() == "sqlite"

    @property
    def is_in_memory(self) -> bool:
        return self.is_sqlite and self.sqlalchemy_url.database in (None, "", ":memory:")


class Db(Lifecycle):
    _config: DBConfig
    engine: AsyncEngine

    def __init__(self, config: DBConfig) -> None:
        super().__init__()
        self._config = config

        if config.is_sqlite:
            # In-memory databases live as long as their single connection
            pool_options: dict[str, Any] = (
                {"poolclass": StaticPool, "connect_args": {"check_same_thread": False}} if config.is_in_memory else {}
            )
            self.engine = create_async_engine(
                url=config.sqlalchemy_url,
                json_serializer=encode_json_str,
                json_deserializer=decode_json,
                echo=config.echo,
                **pool_options,
            )

            @event.listens_for(self.engine.sync_engine, "connect")
            def _sqla_on_connect(dbapi_connection: Any, _: Any) -> Any:  # type: ignore
                """Disable pysqlite's own BEGIN handling so SQLAlchemy controls transactions.

                Also turns on foreign key enforcement, which SQLite leaves off per connection.
                """
                dbapi_connection.isolation_level = None
                cursor = dbapi_connection.cursor()
                cursor.execute("PRAGMA foreign_keys=ON")
                cursor.close()

            @event.listens_for(self.engine.sync_engine, "begin")
            def _sqla_on_begin(conn: Any) -> Any:  # type: ignore
                conn.exec_driver_sql("BEGIN")
        else:
            self.engine = create_async_engine(
                url=config.sqlalchemy_url,
                json_serializer=encode_json_str,
                json_deserializer=decode_json,
                echo=config.echo,
                max_overflow=config.pool_max_overflow,
                pool_size=config.pool_size,
                pool_timeout=config.pool_timeout,
                pool_recycle=config.pool_recycle,
                pool_pre_ping=config.pool_pre_ping,
                poolclass=NullPool if config.pool_disabled else None,
            )

    @classmethod
    def from_url(cls, url: str, **overrides: Any) -> Db:
        return cls(DBConfig(url=url, **overrides))

    @property
    @override
    def _name_for_log(self) -> str:
        return f"Db[{self._config.sqlalchemy_url.get_backend_name()}]"

    @override
    async def _start(self) -> None:
        pass

    @override
    async def _stop(self) -> None:
        await self.engine.dispose()

    @asynccontextmanager
    async def new_session(self) -> AsyncGenerator[AsyncSession]:
        async with AsyncSession(self.engine, expire_on_commit=False, autoflush=False) as session:
            yield session
