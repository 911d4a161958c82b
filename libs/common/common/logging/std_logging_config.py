from __future__ import annotations

import os
import sys
from collections.abc import Iterable
from datetime import datetime
from decimal import Decimal
from enum import Enum
from logging import Filter, LogRecord, StreamHandler
from typing import Any, cast
from uuid import UUID

import structlog
from pydantic import BaseModel
from structlog.typing import EventDict, Processor, WrappedLogger

from common.core.request_context import RequestContext
from common.utils import encode_json

# Never written to logs, even when passed explicitly
_EXCLUDED_KEYS = {"stripe_secret_key", "refresh_token", "access_token", "client_secret", "authorization"}

_CONSOLE_VERBOSE_FIELDS = {
    "filename",
    "func_name",
    "lineno",
    "pathname",
    "module",
    "process",
    "thread",
    "thread_name",
    "process_name",
    "stack_info",
    "color_message",
    "message",
}


def _should_use_json_logging() -> bool:
    """Use JSON logs outside local/dev, while allowing opt-in locally via flag."""
    app_env = os.getenv("APP_ENV", "local").lower()
    if app_env not in ("development", "local", "test"):
        return True
    return os.getenv("LOG_JSON_FORMAT", "").lower() in {"true", "1", "t", "yes"}


def _get_formatter_name() -> str:
    return "json" if _should_use_json_logging() else "plain"


class NoHealthCheckFilter(Filter):
    def filter(self, record: LogRecord) -> bool:
        message = record.getMessage()
        return "GET /api/health" not in message


def _ensure_event_dict(_logger: WrappedLogger, _name: str, event_dict: Any) -> EventDict:
    """Stdlib loggers hand over `record.msg`, which may be a plain string."""
    if isinstance(event_dict, dict):
        return cast(EventDict, event_dict)
    if event_dict is None:
        return {"event": ""}
    return {"event": str(event_dict)}


def _process_values(_logger: WrappedLogger, _name: str, event_dict: EventDict) -> EventDict:
    """Attach the request context and turn models, enums and ids into plain values."""
    request_context = RequestContext.get_or_none()
    if request_context is not None:
        event_dict["requestId"] = str(request_context.request_id)
        if request_context.endpoint:
            event_dict["endpoint"] = request_context.endpoint
        if request_context.paywall_id:
            event_dict.setdefault("paywall_id", str(request_context.paywall_id))
        if request_context.stripe_session_id:
            event_dict.setdefault("session_id", request_context.stripe_session_id)

    for key, value in list(event_dict.items()):
        if key in _EXCLUDED_KEYS or value is None:
            event_dict.pop(key, None)
        elif isinstance(value, BaseModel):
            event_dict[key] = value.model_dump(exclude_none=True, by_alias=True, mode="json")
        elif isinstance(value, Enum):
            event_dict[key] = value.value
        elif isinstance(value, UUID | Decimal):
            event_dict[key] = str(value)

    return event_dict


def _filter_console_fields(_logger: WrappedLogger, _name: str, event_dict: EventDict) -> EventDict:
    for field in _CONSOLE_VERBOSE_FIELDS:
        event_dict.pop(field, None)
    return event_dict


def json_serializer(value: EventDict, **_: Any) -> str:
    return encode_json(value).decode("utf-8")


def _human_readable_renderer(_logger: WrappedLogger, _name: str, event_dict: EventDict) -> str:
    """Render logs as `HH:MM:SS [LEVEL] logger message (key=value, ...)`."""
    use_colors = hasattr(sys.stdout, "isatty") and sys.stdout.isatty()
    if use_colors:
        reset, gray, green, yellow, red, cyan = "\033[0m", "\033[90m", "\033[92m", "\033[93m", "\033[91m", "\033[96m"
    else:
        reset = gray = green = yellow = red = cyan = ""

    level_str = str(event_dict.pop("level", "info")).upper()
    level_color = {"DEBUG": gray, "INFO": green, "WARNING": yellow, "ERROR": red, "CRITICAL": red}.get(level_str, reset)

    timestamp = str(event_dict.pop("timestamp", ""))
    short_time = timestamp
    if timestamp:
        try:
            short_time = datetime.fromisoformat(timestamp.replace("Z", "+00:00")).strftime("%H:%M:%S")
        except ValueError:
            short_time = timestamp

    logger_name = str(event_dict.pop("logger", ""))[-20:]
    event = str(event_dict.pop("event", ""))
    exception = event_dict.pop("exception", None)

    parts: list[str] = []
    if short_time:
        parts.append(f"{gray}{short_time}{reset}")
    parts.append(f"{level_color}[{level_str:<5}]{reset}")
    if logger_name:
        parts.append(f"{cyan}{logger_name:<20}{reset}")
    parts.append(event)

    extra_parts: list[str] = []
    for key, value in event_dict.items():
        if isinstance(value, dict):
            value_str = json_serializer(cast(EventDict, value))
        elif isinstance(value, list | tuple):
            value_str = ", ".join(str(item) for item in cast(Iterable[Any], value))
        else:
            value_str = str(value)
        extra_parts.append(f"{key}={value_str}")

    result = " ".join(parts)
    if extra_parts:
        result += f" {gray}({', '.join(extra_parts)}){reset}"
    if exception:
        result += f"\n{level_color}{exception}{reset}"
    return result


class SafeProcessorFormatter(structlog.stdlib.ProcessorFormatter):
    """ProcessorFormatter that wraps non-dict `record.msg` values before formatting."""

    def format(self, record: LogRecord) -> str:
        if not isinstance(record.msg, dict):
            record.msg = {"event": str(record.msg)}
        return super().format(record)


class StdLoggingConfig:
    foreign_pre_chain_processors: list[Processor] = [
        _ensure_event_dict,
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.ExtraAdder(),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        _process_values,
    ]

    structlog_processors = [*foreign_pre_chain_processors, structlog.stdlib.ProcessorFormatter.wrap_for_formatter]

    # Compact JSON output (single line per log entry) for log parsers
    json_renderer: list[Processor] = [
        structlog.stdlib.ProcessorFormatter.remove_processors_meta,
        structlog.processors.dict_tracebacks,
        structlog.processors.JSONRenderer(sort_keys=True, default=json_serializer),
    ]

    console_renderer: list[Processor] = [
        structlog.stdlib.ProcessorFormatter.remove_processors_meta,
        structlog.processors.format_exc_info,
        _filter_console_fields,
        _human_readable_renderer,
    ]

    formatters = {
        "json": {
            "()": SafeProcessorFormatter,
            "processors": json_renderer,
            "foreign_pre_chain": foreign_pre_chain_processors,
        },
        "plain": {
            "()": SafeProcessorFormatter,
            "processors": console_renderer,
            "foreign_pre_chain": foreign_pre_chain_processors,
        },
    }

    filters = {
        "no_health_check": {
            "()": NoHealthCheckFilter,
        },
    }

    logger_factory = structlog.stdlib.LoggerFactory()


def _logger_entry(level: str) -> dict[str, Any]:
    return {"handlers": ["standard"], "propagate": False, "level": level, "filters": ["no_health_check"]}


common_logger_config: dict[str, Any] = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": StdLoggingConfig.formatters,
    "filters": StdLoggingConfig.filters,
    "handlers": {
        "standard": {
            "class": StreamHandler,
            "level": "INFO",
            "stream": sys.stdout,
            "formatter": _get_formatter_name(),
            "filters": ["no_health_check"],
        },
    },
    "root": {
        "handlers": ["standard"],
        "level": "INFO",
    },
    "loggers": {
        "httpx": _logger_entry("WARNING"),
        "stripe": _logger_entry("WARNING"),
        "sqlalchemy.engine": _logger_entry("WARNING"),
        "uvicorn": _logger_entry("INFO"),
        "uvicorn.error": _logger_entry("INFO"),
        "uvicorn.access": _logger_entry("WARNING"),
    },
}
