"""
Logging utilities for hybiscus_client.

Provides structured logging helpers (context passed via ``extra``), a mixin
for classes that log with instance context, an operation decorator for async
methods, and console setup with JSON or plain output.
"""

import functools
import json
import logging
import re
import sys
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional, TypeVar

F = TypeVar("F", bound=Callable[..., Any])

# Loggers quietened by setup_logging()
NOISY_LOGGERS = ["aiohttp", "asyncio"]

_API_KEY_PATTERN = re.compile(r"(api_key=)[^&\s]+", re.IGNORECASE)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)


def redact_api_key(value: str) -> str:
    """Mask any api_key query parameter in a URL or message."""
    return _API_KEY_PATTERN.sub(r"\1***", value)


def log_with_context(
    logger: logging.Logger,
    level: int,
    msg: str,
    **kwargs: Any,
) -> None:
    """
    Log with structured context fields.

    Args:
        logger: Logger instance
        level: Log level (logging.INFO, etc.)
        msg: Log message
        **kwargs: Additional context fields (task_id, duration_ms, etc.)

    Example:
        log_with_context(
            logger, logging.INFO, "Task submitted",
            task_id=handle.task_id,
            report_kind="build",
        )
    """
    logger.log(level, msg, extra=kwargs)


def log_exception(
    logger: logging.Logger,
    exc: BaseException,
    msg: str,
    level: int = logging.ERROR,
    include_traceback: bool = True,
    **kwargs: Any,
) -> None:
    """
    Log exception with context and optional traceback.

    Automatically extracts error_kind and task_id from HybiscusApiError.

    Args:
        logger: Logger instance
        exc: Exception to log
        msg: Context message
        level: Log level (default: ERROR)
        include_traceback: Include full traceback (default: True)
        **kwargs: Additional context fields
    """
    if kwargs.get("error_kind") is None and hasattr(exc, "kind"):
        kind = exc.kind
        kwargs["error_kind"] = kind.value if hasattr(kind, "value") else str(kind)
    if kwargs.get("task_id") is None and getattr(exc, "task_id", None):
        kwargs["task_id"] = exc.task_id

    error_msg = redact_api_key(str(exc))
    if len(error_msg) > 500:
        error_msg = error_msg[:500] + "..."
    kwargs["error_message"] = error_msg

    if include_traceback:
        logger.log(level, msg, exc_info=exc, extra=kwargs)
    else:
        logger.log(level, msg, extra=kwargs)


def _extract_instance_context(obj: Any) -> Dict[str, Any]:
    """Pull identifying attributes off an instance for log context."""
    ctx: Dict[str, Any] = {}
    for attr in ["base_url"]:
        value = getattr(obj, attr, None)
        if value is not None:
            ctx[attr] = value
    return ctx


def logged_operation(
    level: int = logging.DEBUG,
    log_start: bool = False,
    operation_name: Optional[str] = None,
) -> Callable[[F], F]:
    """
    Decorator for automatic operation logging on async methods.

    Failures are logged at WARNING without traceback and re-raised unchanged.

    Args:
        level: Log level for completion message
        log_start: Also log when operation starts
        operation_name: Override operation name (default: method name)

    Example:
        class ApiClient(LoggedClass):
            @logged_operation(level=logging.DEBUG)
            async def query_status(self, task_id):
                ...
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        async def wrapper(self, *args, **kwargs):
            _logger = getattr(self, "_logger", None) or get_logger(
                self.__class__.__module__
            )
            full_op = f"{self.__class__.__name__}.{operation_name or func.__name__}"

            if log_start:
                log_with_context(_logger, level, f"{full_op} starting")

            try:
                result = await func(self, *args, **kwargs)
            except Exception as e:
                log_exception(
                    _logger,
                    e,
                    f"{full_op} failed",
                    level=logging.WARNING,
                    include_traceback=False,
                )
                raise
            log_with_context(_logger, level, f"{full_op} completed")
            return result

        return wrapper  # type: ignore

    return decorator


class LoggedClass:
    """
    Mixin providing logging infrastructure for classes.

    Provides:
    - self._logger: Logger instance
    - self._log(): Log with auto-extracted context
    - self._log_exception(): Exception logging with context
    """

    log_component: Optional[str] = None  # Optional logger name suffix

    def __init__(self, *args, **kwargs):
        logger_name = self.__class__.__module__
        if self.log_component:
            logger_name = f"{logger_name}.{self.log_component}"
        self._logger = get_logger(logger_name)
        super().__init__(*args, **kwargs)

    def _log(self, level: int, msg: str, **extra: Any) -> None:
        context = _extract_instance_context(self)
        context.update(extra)
        log_with_context(self._logger, level, msg, **context)

    def _log_exception(
        self,
        exc: BaseException,
        msg: str,
        level: int = logging.ERROR,
        **extra: Any,
    ) -> None:
        context = _extract_instance_context(self)
        context.update(extra)
        log_exception(self._logger, exc, msg, level=level, **context)


class JSONFormatter(logging.Formatter):
    """
    JSON log formatter.

    Produces one JSON object per line. Values of URL fields have any api_key
    parameter masked.
    """

    EXTRA_FIELDS = [
        "task_id",
        "task_status",
        "report_kind",
        "duration_ms",
        "http_status",
        "error_kind",
        "error_message",
        "poll_count",
        "timeout_seconds",
        "api_endpoint",
        "api_method",
        "base_url",
        "url",
    ]

    URL_FIELDS = ["url", "base_url"]

    def format(self, record: logging.LogRecord) -> str:
        log_entry: Dict[str, Any] = {
            "ts": datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3]
            + "Z",
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }

        if record.levelno in (logging.DEBUG, logging.ERROR, logging.CRITICAL):
            log_entry["file"] = f"{record.filename}:{record.lineno}"

        for field in self.EXTRA_FIELDS:
            value = getattr(record, field, None)
            if value is None:
                continue
            if field in self.URL_FIELDS and isinstance(value, str):
                value = redact_api_key(value)
            log_entry[field] = value

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


def setup_logging(
    level: int = logging.INFO,
    json_format: bool = False,
    suppress_noisy: bool = True,
) -> logging.Logger:
    """
    Configure console logging for command line use.

    Library code never calls this; embedding applications own their logging.

    Args:
        level: Root log level
        json_format: Emit one JSON object per line instead of plain text
        suppress_noisy: Quiet down HTTP client loggers

    Returns:
        The package logger
    """
    handler = logging.StreamHandler(sys.stderr)
    if json_format:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    if suppress_noisy:
        for logger_name in NOISY_LOGGERS:
            logging.getLogger(logger_name).setLevel(logging.WARNING)

    return logging.getLogger("hybiscus_client")
