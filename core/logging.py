"""
Logging Module - Centralized logging configuration
=================================================

This module provides logging setup and utilities including:
- Coloured console output
- Plain or JSON file logs
- A separate JSON error log
- Per-request (per-task) logging context
"""

import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Dict, Any
import json
from contextvars import ContextVar, Token


ROOT_LOGGER_NAME = "rule_agent"


class JSONFormatter(logging.Formatter):
    """
    JSON log formatter for structured logging.

    Outputs one JSON object per record.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if getattr(record, "context", None):
            log_data["context"] = record.context

        return json.dumps(log_data, default=str)


class ColoredFormatter(logging.Formatter):
    """
    Colored console formatter for readable terminal output.
    """

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"
    BOLD = "\033[1m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, "")
        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")

        formatted = (
            f"{color}{self.BOLD}[{record.levelname}]{self.RESET} "
            f"{timestamp} | {record.name}:{record.lineno} | "
            f"{record.getMessage()}"
        )

        context = getattr(record, "context", None)
        if context:
            pairs = " ".join(f"{k}={v}" for k, v in context.items())
            formatted += f" [{pairs}]"

        if record.exc_info:
            formatted += f"\n{self.formatException(record.exc_info)}"

        return formatted


class ContextFilter(logging.Filter):
    """
    Logging filter that attaches the current request context to each record.

    The context lives in a ``ContextVar``, so every asyncio task (and so
    every request on the event loop) sees only its own values.
    """

    _context: ContextVar[Dict[str, Any]] = ContextVar("rule_agent_log_context", default={})

    @classmethod
    def set_context(cls, **kwargs) -> Token:
        data = dict(cls._context.get())
        data.update(kwargs)
        return cls._context.set(data)

    @classmethod
    def reset_context(cls, token: Token) -> None:
        cls._context.reset(token)

    @classmethod
    def get_context(cls) -> Dict[str, Any]:
        return dict(cls._context.get())

    def filter(self, record: logging.LogRecord) -> bool:
        record.context = self.get_context()
        return True


class LoggerAdapter(logging.LoggerAdapter):
    """
    Logger adapter that merges its bound extras into every call.
    """

    def process(self, msg: str, kwargs: Dict[str, Any]) -> tuple:
        extra = dict(self.extra)
        extra.update(kwargs.get("extra", {}))
        kwargs["extra"] = extra
        return msg, kwargs


_loggers: Dict[str, logging.Logger] = {}
_configured = False


def setup_logging(
    log_dir: Optional[str] = None,
    log_level: str = "INFO",
    json_format: bool = False,
    console_output: bool = True
) -> None:
    """
    Set up logging configuration for the application.

    Only the first call has any effect; later calls are ignored so
    that the web app and the CLI can both call it safely.

    Args:
        log_dir: Directory for log files (optional)
        log_level: Minimum log level to capture
        json_format: Use JSON format for the main file log
        console_output: Also output to console
    """
    global _configured

    if _configured:
        return

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))
    root_logger.handlers.clear()

    context_filter = ContextFilter()

    if console_output:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(logging.DEBUG)
        console_handler.addFilter(context_filter)
        console_handler.setFormatter(ColoredFormatter())
        root_logger.addHandler(console_handler)

    if log_dir:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path / "rule-agent.log", encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.addFilter(context_filter)

        if json_format:
            file_handler.setFormatter(JSONFormatter())
        else:
            file_handler.setFormatter(
                logging.Formatter(
                    "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s"
                )
            )
        root_logger.addHandler(file_handler)

        error_handler = logging.FileHandler(log_path / "errors.log", encoding="utf-8")
        error_handler.setLevel(logging.ERROR)
        error_handler.addFilter(context_filter)
        error_handler.setFormatter(JSONFormatter())
        root_logger.addHandler(error_handler)

    _configured = True


def get_logger(name: str, **extra) -> LoggerAdapter:
    """
    Get a logger instance for a module.

    Args:
        name: Logger name, placed under the ``rule_agent`` namespace
        **extra: Extra attributes bound to every record

    Returns:
        LoggerAdapter instance

    Example:
        logger = get_logger("web.routes")
        logger.info("Reply sent")
    """
    prefix = ROOT_LOGGER_NAME
    full_name = name if name.startswith(prefix) else f"{prefix}.{name}"

    if full_name not in _loggers:
        _loggers[full_name] = logging.getLogger(full_name)

    return LoggerAdapter(_loggers[full_name], extra)


def set_log_context(**kwargs) -> Token:
    """
    Add values to the logging context of the current task.

    Returns a token for ``reset_log_context``.

    Example:
        token = set_log_context(request_id="abc123")
        logger.info("Processing request")  # carries request_id
        reset_log_context(token)
    """
    return ContextFilter.set_context(**kwargs)


def reset_log_context(token: Token) -> None:
    """Restore the logging context to what it was before ``set_log_context``."""
    ContextFilter.reset_context(token)
