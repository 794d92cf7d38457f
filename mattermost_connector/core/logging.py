"""
Logging configuration for the Mattermost connector.

Records go to stderr: stdout is reserved for the MCP stdio stream.
"""

import asyncio
import json
import logging
import sys
import time
from contextvars import ContextVar
from datetime import datetime, timezone
from functools import wraps
from typing import Any, Callable, Dict, Optional

# Context variable carrying the tool currently being served
tool_name_var: ContextVar[str] = ContextVar("tool_name", default="")


def set_tool_context(tool_name: str) -> None:
    """Tag subsequent log records with the tool being served."""
    tool_name_var.set(tool_name)


def clear_tool_context() -> None:
    """Clear tool context after a call completes."""
    tool_name_var.set("")


class StructuredLogFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    One JSON object per line, suitable for log aggregation.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if tool_name := tool_name_var.get():
            log_data["tool"] = tool_name

        if hasattr(record, "extra_fields"):
            log_data.update(record.extra_fields)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class DevelopmentFormatter(logging.Formatter):
    """Human-readable, colorized formatter for local development."""

    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
        "RESET": "\033[0m",
    }

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, self.COLORS["RESET"])
        reset = self.COLORS["RESET"]

        tool_name = tool_name_var.get()
        context_str = f" [tool={tool_name}]" if tool_name else ""

        timestamp = datetime.now().strftime("%H:%M:%S.%f")[:-3]

        log_line = (
            f"{color}{timestamp} {record.levelname:8}{reset}"
            f"{context_str} "
            f"{record.name}: {record.getMessage()}"
        )

        if hasattr(record, "extra_fields") and record.extra_fields:
            extras = " | ".join(f"{k}={v}" for k, v in record.extra_fields.items())
            log_line += f" | {extras}"

        if record.exc_info:
            log_line += f"\n{self.formatException(record.exc_info)}"

        return log_line


class ContextLogger(logging.LoggerAdapter):
    """
    Logger adapter that moves ``extra`` into a single ``extra_fields`` attribute.

    Usage:
        logger = get_logger(__name__)
        logger.info("Fetched page", extra={"channel_id": "abc", "posts": 200})
    """

    def process(self, msg: str, kwargs: Dict[str, Any]) -> tuple:
        extra = kwargs.get("extra", {})
        if extra:
            kwargs["extra"] = {"extra_fields": extra}
        return msg, kwargs


def get_logger(name: str) -> ContextLogger:
    """Get a logger with context support."""
    return ContextLogger(logging.getLogger(name), {})


def configure_logging(log_level: str = "INFO", json_format: bool = False) -> None:
    """
    Configure process-wide logging.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: Use JSON lines instead of the readable development format
    """
    level = getattr(logging, log_level.upper())

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(StructuredLogFormatter() if json_format else DevelopmentFormatter())
    root_logger.addHandler(handler)

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)


def log_execution_time(
    logger: Optional[ContextLogger] = None,
    operation: str = "operation",
) -> Callable:
    """
    Decorator to log how long a coroutine takes.

    Usage:
        @log_execution_time(operation="get_channel_history")
        async def get_channel_history(...):
            ...
    """

    def decorator(func: Callable) -> Callable:
        if not asyncio.iscoroutinefunction(func):
            raise TypeError("log_execution_time only wraps coroutine functions")
        func_logger = logger or get_logger(func.__module__)

        @wraps(func)
        async def wrapper(*args, **kwargs):
            start = time.perf_counter()
            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                duration_ms = (time.perf_counter() - start) * 1000
                func_logger.error(
                    f"{operation} failed",
                    extra={
                        "duration_ms": round(duration_ms, 2),
                        "status": "error",
                        "error_type": type(e).__name__,
                    },
                )
                raise
            duration_ms = (time.perf_counter() - start) * 1000
            func_logger.info(
                f"{operation} completed",
                extra={"duration_ms": round(duration_ms, 2), "status": "success"},
            )
            return result

        return wrapper

    return decorator
