"""Helpers for StrEnum-backed SQLAlchemy columns."""

from __future__ import annotations

from enum import Enum, StrEnum
from typing import Any, TypeVar

from sqlalchemy import Enum as SqlEnum

EnumT = TypeVar("EnumT", bound=Enum)


def enum_values(enum_cls: type[EnumT]) -> list[Any]:
    """Persist enum `.value`s rather than member names.

    SQLAlchemy's ``Enum`` type calls ``values_callable`` with the enum class. Our
    enums are lowercase ``StrEnum`` values, which is also what the
    administrator-facing tables show.
    """
    return [member.value for member in enum_cls]


def str_enum_column(enum_cls: type[StrEnum]) -> SqlEnum:
    """Non-native enum column (VARCHAR + CHECK) storing the enum's values."""
    return SqlEnum(enum_cls, native_enum=False, values_callable=enum_values, length=32)
