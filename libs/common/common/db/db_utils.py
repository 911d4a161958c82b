from __future__ import annotations

from datetime import UTC, date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any
from uuid import UUID

from sqlalchemy import JSON, Date, DateTime, MetaData, Numeric, TypeDecorator, Uuid
from sqlalchemy.dialects.postgresql import JSONB as PG_JSONB
from sqlalchemy.orm import registry

if TYPE_CHECKING:
    from sqlalchemy.engine import Dialect
    from sqlalchemy.sql.schema import _NamingSchemaParameter as NamingSchemaParameter  # pyright: ignore[reportPrivateUsage]
    from sqlalchemy.types import TypeEngine

convention: NamingSchemaParameter = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

JsonB = JSON().with_variant(PG_JSONB, "postgresql")
"""JSON column: native ``JSONB`` on PostgreSQL, plain ``JSON`` on SQLite. Used for Stripe metadata snapshots."""

Money = Numeric(10, 2, asdecimal=True)
"""Currency amounts in major units (dollars), two decimal places."""


def create_registry() -> registry:
    """Registry mapping the Python annotations used by the enrollment models to column types."""
    type_annotation_map: dict[Any, type[TypeEngine[Any]] | TypeEngine[Any]] = {
        datetime: DateTimeUTC,
        date: Date,
        dict[str, Any]: JsonB,
        Decimal: Money,
        UUID: Uuid,
    }
    return registry(metadata=MetaData(naming_convention=convention), type_annotation_map=type_annotation_map)


class DateTimeUTC(TypeDecorator[datetime]):
    """Timezone aware DateTime, stored as UTC and returned with tzinfo on every dialect."""

    impl = DateTime(timezone=True)
    cache_ok = True

    @property
    def python_type(self) -> type[datetime]:
        return datetime

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        if value is None:
            return value
        if not value.tzinfo:
            msg = "tzinfo is required"
            raise TypeError(msg)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        if value is None:
            return value
        # SQLite drops the offset on the way back
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value
