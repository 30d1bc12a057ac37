"""
Logging setup and helpers for the Discord GitHub Bot.

Two output modes are supported, picked by LOG_FORMAT:

- ``json``: one JSON object per line, for containers and log shippers
- ``text``: rich console output while developing

Every module gets its logger from get_logger() or get_service_logger().
The helpers below keep the field names of the bot's recurring events
(GitHub calls, interactions, form sessions) the same everywhere.
"""

import json
import logging
import sys
import time
import uuid
from contextlib import contextmanager
from typing import Any, Dict, Optional, Union, TYPE_CHECKING
from urllib.parse import urlparse

import structlog
from rich.console import Console
from rich.logging import RichHandler

if TYPE_CHECKING:
    from discord_github_bot.config import LoggingConfig


# Keys that are shown by the handler itself in text mode
_TEXT_HIDDEN_KEYS = frozenset({"timestamp", "level", "filename", "lineno"})

# Logged GitHub payload values are cut to this many characters
_BODY_PREVIEW = 100

# Library loggers and the level they are held at
_LIBRARY_LEVELS = {
    "discord": logging.WARNING,
    "discord.http": logging.WARNING,
    "discord.gateway": logging.INFO,
    "aiohttp": logging.WARNING,
    "aiohttp.access": logging.WARNING,
}


def setup_logging(config: "LoggingConfig") -> None:
    """
    Configure stdlib logging and structlog from the LOG_* settings.

    Safe to call more than once; existing root handlers are replaced.
    """
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(config.level)

    json_output = config.format == "json"
    root.addHandler(_json_handler(config.level) if json_output else _console_handler(config.level))

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.CallsiteParameterAdder(
                parameters=[
                    structlog.processors.CallsiteParameter.FILENAME,
                    structlog.processors.CallsiteParameter.LINENO,
                ]
            ),
            _render_json if json_output else _render_text,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, config.level)),
        logger_factory=structlog.WriteLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    configure_external_loggers()


def _json_handler(level: str) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(
        fmt='{"timestamp": "%(asctime)s", "level": "%(levelname)s", '
            '"logger": "%(name)s", "message": "%(message)s"}',
        datefmt="%Y-%m-%dT%H:%M:%SZ",
    ))
    handler.setLevel(level)
    return handler


def _console_handler(level: str) -> logging.Handler:
    handler = RichHandler(
        console=Console(force_terminal=True, width=120),
        show_path=True,
        markup=True,
        rich_tracebacks=True,
    )
    handler.setLevel(level)
    return handler


def _render_json(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> str:
    return json.dumps(event_dict, default=str)


def _render_text(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> str:
    """Render `[LEVEL] event (key=value, ...)` for the console."""
    message = event_dict.pop("event", "")
    level = event_dict.get("level", "")

    extras = ", ".join(
        f"{key}={value}" for key, value in event_dict.items() if key not in _TEXT_HIDDEN_KEYS
    )
    if extras:
        message = f"{message} ({extras})"
    if level:
        message = f"[{level.upper()}] {message}"
    return message


def get_logger(name: Optional[str] = None) -> structlog.BoundLogger:
    """Return a structlog logger, usually `get_logger(__name__)`."""
    return structlog.get_logger(name)


def get_service_logger(service_name: str) -> structlog.BoundLogger:
    """Return a logger bound to `service` (github, discord, cache, sessions)."""
    return get_logger(f"service.{service_name}").bind(service=service_name)


def generate_correlation_id() -> str:
    """Short id tying together the log lines of one interaction or request."""
    return uuid.uuid4().hex[:8]


def log_function_call(func_name: str, **kwargs: Any) -> None:
    get_logger().debug("Function called", function=func_name, **kwargs)


def log_error(error: Exception, context: Optional[Dict[str, Any]] = None) -> None:
    """
    Log an exception as a structured error event.

    Args:
        error: The exception that was caught
        context: Extra fields, e.g. the session key or repository
    """
    fields: Dict[str, Any] = {
        "error_type": type(error).__name__,
        "error_message": str(error),
    }
    if context:
        fields.update(context)
    get_logger().error("Exception occurred", **fields)


def _preview(body: Union[str, Dict[str, Any], None]) -> Any:
    if isinstance(body, dict):
        return {
            key: value if len(str(value)) <= _BODY_PREVIEW else f"{str(value)[:_BODY_PREVIEW]}... (truncated)"
            for key, value in body.items()
        }
    if isinstance(body, str) and len(body) > _BODY_PREVIEW * 10:
        return body[:_BODY_PREVIEW * 10] + "... (truncated)"
    return body


def log_http_request(
    method: str,
    url: str,
    body: Optional[Union[str, Dict[str, Any]]] = None,
    service: str = "github",
    correlation_id: Optional[str] = None,
) -> None:
    """
    Log an outgoing API call.

    Only host and path are logged so tokens in query strings never reach
    the logs. Issue bodies are shortened.
    """
    parsed = urlparse(url)
    get_service_logger(service).info(
        "HTTP request initiated",
        method=method,
        host=parsed.netloc,
        path=parsed.path,
        body=_preview(body),
        correlation_id=correlation_id or "none",
    )


def log_http_response(
    status_code: int,
    response_time_ms: float,
    response_size: Optional[int] = None,
    error: Optional[str] = None,
    service: str = "github",
    correlation_id: Optional[str] = None,
) -> None:
    """Log an API response; 4xx as warnings, 5xx as errors."""
    if status_code >= 500:
        level = "error"
    elif status_code >= 400:
        level = "warning"
    else:
        level = "info"

    fields: Dict[str, Any] = {
        "status_code": status_code,
        "response_time_ms": round(response_time_ms, 2),
        "correlation_id": correlation_id or "none",
    }
    if response_size is not None:
        fields["response_size_bytes"] = response_size
    if error:
        fields["error"] = error

    message = "HTTP request failed" if error else "HTTP response received"
    getattr(get_service_logger(service), level)(message, **fields)


@contextmanager
def log_operation_timing(operation_name: str, **context):
    """
    Time the wrapped block and log how it ended.

    Yields the correlation id, taken from `context` when given.
    """
    logger = get_logger()
    correlation_id = context.pop("correlation_id", None) or generate_correlation_id()
    started = time.monotonic()

    def elapsed_ms() -> float:
        return round((time.monotonic() - started) * 1000, 2)

    logger.debug(f"Starting {operation_name}", operation=operation_name,
                 correlation_id=correlation_id, **context)
    try:
        yield correlation_id
    except Exception as e:
        logger.error(
            f"Failed {operation_name}",
            operation=operation_name,
            duration_ms=elapsed_ms(),
            correlation_id=correlation_id,
            status="error",
            error_type=type(e).__name__,
            error_message=str(e),
            **context,
        )
        raise
    logger.info(
        f"Completed {operation_name}",
        operation=operation_name,
        duration_ms=elapsed_ms(),
        correlation_id=correlation_id,
        status="success",
        **context,
    )


def log_discord_event(event_type: str, **context):
    get_service_logger("discord").info(f"Discord event: {event_type}", event_type=event_type, **context)


def log_session_event(event_type: str, session_key: str, **context):
    """Log a form session step: created, advanced, completed, deleted or missing."""
    get_service_logger("sessions").info(
        f"Session event: {event_type}",
        event_type=event_type,
        session_key=session_key,
        **context,
    )


def configure_external_loggers() -> None:
    """Quieten discord.py and aiohttp."""
    for name, level in _LIBRARY_LEVELS.items():
        logging.getLogger(name).setLevel(level)
