import sys
from collections.abc import Awaitable, Callable
from contextlib import AbstractContextManager
from contextvars import ContextVar, Token
from dataclasses import dataclass
from typing import Any, Generic, TypeVar, cast

import structlog

T = TypeVar("T")


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    if name is None:
        # Get the name of the module that called this function
        frame = sys._getframe(1)  # type: ignore  # 0 would be get_logger, 1 is the caller
        module_name = frame.f_globals["__name__"].rsplit(".", 1)[-1]
        name = module_name
    return structlog.stdlib.get_logger(name)


class ContextVarManager(AbstractContextManager[T]):
    """Sets a context variable for the duration of a `with` block and restores the previous value on exit."""

    _var: ContextVar[T]
    _value: T
    _token: Token[T] | None

    def __init__(self, var: ContextVar[T], value: T) -> None:
        self._var = var
        self._value = value
        self._token = None

    def __enter__(self) -> T:
        self._token = self._var.set(self._value)
        return self._value

    def __exit__(self, *exc_details: object) -> None:
        if self._token is not None:
            self._var.reset(self._token)


def use_context_var(var: ContextVar[T], value: T) -> ContextVarManager[T]:
    return ContextVarManager(var, value)


@dataclass(frozen=True)
class BestEffortResult(Generic[T]):
    """Outcome of a side effect whose failure must not propagate to the caller."""

    name: str
    ok: bool
    value: T | None = None
    error: str | None = None


async def run_best_effort[T](name: str, action: Callable[[], Awaitable[T]], **log_fields: Any) -> BestEffortResult[T]:
    """Await `action`, logging and capturing any exception instead of raising it."""
    try:
        value = await action()
    except Exception as e:
        structlog.stdlib.get_logger("best_effort").warning(
            f"Best-effort step '{name}' failed",
            step=name,
            error=str(e),
            exc_info=e,
            **log_fields,
        )
        return BestEffortResult(name=name, ok=False, error=str(e))
    return BestEffortResult(name=name, ok=True, value=value)


def deep_merge(base: dict[str, Any], update: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries.

    Args:
        base: Base dictionary that will be updated
        update: Dictionary with values to update

    Returns:
        Updated dictionary with deeply merged values
    """
    merged = base.copy()

    for key, value in update.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = deep_merge(merged[key], cast(dict[str, Any], value))
        else:
            merged[key] = value

    return merged
