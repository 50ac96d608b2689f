"""
Engine Logging

Every module logs through a child of ``app_logger`` (the ``eduadapt``
logger). The root is configured once, from ``LOG_LEVEL``, ``LOG_JSON`` and
``LOG_FILE`` at import time, or explicitly by the host from a
``LoggingConfig`` through ``configure_from_config``.

Context such as the subject and lecture being processed travels in the
``data`` extra; ``LoggerAdapter`` fills it and ``JsonFormatter`` flattens it
into the emitted object.
"""

import os
import sys
import json
import time
import logging
import datetime
import functools
from typing import Any, Callable, Dict, Optional, TypeVar, Union

ROOT_LOGGER_NAME = "eduadapt"

DEFAULT_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)-40s | %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

F = TypeVar('F', bound=Callable[..., Any])

__all__ = [
    'JsonFormatter',
    'LoggerAdapter',
    'app_logger',
    'configure_from_config',
    'configure_logger',
    'get_logger',
    'log_execution_time',
    'with_context',
]


class JsonFormatter(logging.Formatter):
    """Render each record as one JSON line, with context fields at the top level."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": datetime.datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        data = getattr(record, 'data', None)
        if isinstance(data, dict):
            for key, value in data.items():
                payload.setdefault(key, value)

        if record.exc_info:
            payload["error"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": self.formatException(record.exc_info),
            }

        return json.dumps(payload, default=str)


def configure_logger(
    name: str = ROOT_LOGGER_NAME,
    level: Union[str, int] = logging.INFO,
    use_json: bool = False,
    log_file: Optional[str] = None,
    console_output: bool = True
) -> logging.Logger:
    """
    (Re)configure a logger's level and handlers.

    Existing handlers on the logger are replaced.

    Args:
        name: Logger name
        level: Level name or number
        use_json: Emit JSON lines instead of the text format
        log_file: Optional file to append to, parent directories are created
        console_output: Whether to write to stdout

    Returns:
        The configured logger
    """
    logger = logging.getLogger(name)
    logger.setLevel(level.upper() if isinstance(level, str) else level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = JsonFormatter() if use_json else logging.Formatter(DEFAULT_LOG_FORMAT, DEFAULT_DATE_FORMAT)

    handlers = []
    if console_output:
        handlers.append(logging.StreamHandler(sys.stdout))
    if log_file:
        directory = os.path.dirname(log_file)
        try:
            if directory:
                os.makedirs(directory, exist_ok=True)
            handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
        except OSError as e:
            logger.warning(f"Could not open log file {log_file}: {e}")

    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    return logger


def configure_from_config(logging_config) -> logging.Logger:
    """
    Configure the engine's root logger from a ``LoggingConfig``.

    Args:
        logging_config: Section with ``level``, ``json_output`` and ``file_path``

    Returns:
        The root engine logger
    """
    return configure_logger(
        level=logging_config.level,
        use_json=logging_config.json_output,
        log_file=logging_config.file_path
    )


def get_logger(name: str, parent: Optional[logging.Logger] = None) -> logging.Logger:
    """Get ``name`` as a child of ``parent``, or as a plain logger name."""
    return parent.getChild(name) if parent else logging.getLogger(name)


class LoggerAdapter(logging.LoggerAdapter):
    """
    Adapter that attaches fixed context to every record under ``extra["data"]``.

    Context given on an individual call is kept; the adapter's own context
    is added on top.
    """

    def __init__(self, logger: logging.Logger, context: Optional[Dict[str, Any]] = None):
        super().__init__(logger, dict(context or {}))

    def process(self, msg: str, kwargs: Dict[str, Any]) -> tuple:
        extra = dict(kwargs.get('extra') or {})
        data = dict(extra.get('data') or {})
        data.update(self.extra)
        extra['data'] = data
        return msg, dict(kwargs, extra=extra)

    def with_context(self, **context) -> 'LoggerAdapter':
        """Return a new adapter whose context also includes ``context``."""
        return LoggerAdapter(self.logger, {**self.extra, **context})


def with_context(name: Optional[str] = None, **context) -> LoggerAdapter:
    """Adapter for logger ``name`` (the engine root by default) carrying ``context``."""
    return LoggerAdapter(get_logger(name) if name else app_logger, context)


def _init_app_logger() -> logging.Logger:
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    if logger.handlers:
        return logger
    return configure_logger(
        level=os.environ.get("LOG_LEVEL", "INFO"),
        use_json=os.environ.get("LOG_JSON", "false").lower() == "true",
        log_file=os.environ.get("LOG_FILE")
    )


app_logger = _init_app_logger()


def log_execution_time(logger: Optional[logging.Logger] = None) -> Callable[[F], F]:
    """
    Decorator logging a call's duration at DEBUG, or its failure at ERROR.

    Exceptions are re-raised unchanged.

    Args:
        logger: Logger to use, defaults to ``app_logger``
    """
    target = logger or app_logger

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            started = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                target.error(f"{func.__name__} failed after {time.perf_counter() - started:.3f}s: {e}")
                raise
            target.debug(f"{func.__name__} executed in {time.perf_counter() - started:.3f}s")
            return result

        return wrapper  # type: ignore[return-value]
    return decorator
