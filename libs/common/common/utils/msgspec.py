from __future__ import annotations

from collections.abc import Callable
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from pathlib import PurePath
from typing import Any
from uuid import UUID

import msgspec
from pydantic import BaseModel

Serializer = Callable[[Any], Any]

type TypeEncodersMap = dict[Any, Callable[[Any], Any]]


class SerializationError(Exception):
    """Encoding or decoding of an object failed."""


__all__ = (
    "SerializationError",
    "decode_json",
    "default_serializer",
    "encode_json",
    "encode_json_str",
)

DEFAULT_TYPE_ENCODERS: TypeEncodersMap = {
    PurePath: str,
    UUID: str,
    datetime: lambda val: val.isoformat(),
    date: lambda val: val.isoformat(),
    time: lambda val: val.isoformat(),
    # Money is kept exact on the wire
    Decimal: str,
    Enum: lambda val: val.value,
    BaseModel: lambda val: val.model_dump(mode="json"),
}


def default_serializer(value: Any, type_encoders: TypeEncodersMap | None = None) -> Any:
    """Transform values non-natively supported by ``msgspec``

    Args:
        value: A value to serialize
        type_encoders: Mapping of types to callables to transform types
    Returns:
        A serialized value
    Raises:
        TypeError: if value is not supported
    """
    type_encoders = DEFAULT_TYPE_ENCODERS if type_encoders is None else {**DEFAULT_TYPE_ENCODERS, **type_encoders}

    for base in value.__class__.__mro__[:-1]:
        try:
            encoder = type_encoders[base]
            return encoder(value)
        except KeyError:
            continue

    raise TypeError(f"Unsupported type: {type(value)!r}")


_default_json_encoder = msgspec.json.Encoder(enc_hook=default_serializer)
_default_json_decoder = msgspec.json.Decoder()


def encode_json(value: Any, serializer: Serializer | None = None) -> bytes:
    """Encode a value into JSON.

    Raises:
        SerializationError: If error encoding ``value``.
    """
    try:
        return msgspec.json.encode(value, enc_hook=serializer) if serializer else _default_json_encoder.encode(value)
    except (TypeError, msgspec.EncodeError) as msgspec_error:
        raise SerializationError(str(msgspec_error)) from msgspec_error


def encode_json_str(value: Any, serializer: Serializer | None = None) -> str:
    return encode_json(value, serializer).decode("utf-8")


def decode_json(value: str | bytes) -> Any:
    """Decode a JSON string/bytes into builtin Python objects.

    Raises:
        SerializationError: If error decoding ``value``.
    """
    try:
        return _default_json_decoder.decode(value)
    except msgspec.DecodeError as msgspec_error:
        raise SerializationError(str(msgspec_error)) from msgspec_error
