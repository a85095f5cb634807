#!/usr/bin/env python3
"""
Structured logging for m2e with environment-driven configuration and context management.

Features:
- Environment-driven configuration (LOG_LEVEL, LOG_OUTPUT)
- JSON output in production, readable lines during development
- Context propagation via contextvars (file name and file type per converted file)
- INFO/DEBUG to stdout, WARNING and above to stderr, optional rotating file
"""
from __future__ import annotations

import json
import logging
import logging.handlers
import os
import sys
from contextvars import ContextVar
from pathlib import Path
from typing import Any, Dict, Optional

# Context variables for automatic context propagation
_log_context: ContextVar[Dict[str, Any]] = ContextVar('log_context', default={})

_RESERVED_RECORD_KEYS = frozenset((
    'name', 'msg', 'args', 'levelname', 'levelno', 'pathname', 'filename', 'module',
    'lineno', 'funcName', 'created', 'msecs', 'relativeCreated', 'thread', 'threadName',
    'processName', 'process', 'message', 'exc_info', 'exc_text', 'stack_info', 'context',
    'taskName',
))


class StructuredFormatter(logging.Formatter):
    """
    Formatter that outputs JSON for production or readable format for development.
    """

    def __init__(self, use_json: bool = False):
        self.use_json = use_json
        super().__init__()

    def format(self, record: logging.LogRecord) -> str:
        context = _log_context.get({})

        # Merge context from record if available
        if hasattr(record, 'context') and record.context:
            context = {**context, **record.context}

        if self.use_json:
            return self._format_json(record, context)
        return self._format_readable(record, context)

    def _format_json(self, record: logging.LogRecord, context: Dict[str, Any]) -> str:
        """Format log record as JSON."""
        log_entry = {
            'timestamp': self.formatTime(record, datefmt='%Y-%m-%dT%H:%M:%S'),
            'level': record.levelname,
            'module': record.name,
            'message': record.getMessage(),
        }

        if context:
            log_entry['context'] = context

        if record.exc_info:
            log_entry['exception'] = self.formatException(record.exc_info)

        # Any extra fields passed through `extra=`
        for key, value in record.__dict__.items():
            if key not in _RESERVED_RECORD_KEYS:
                log_entry[key] = value

        return json.dumps(log_entry, default=str)

    def _format_readable(self, record: logging.LogRecord, context: Dict[str, Any]) -> str:
        """Format log record in human-readable format."""
        timestamp = self.formatTime(record, datefmt='%Y-%m-%d %H:%M:%S')

        context_str = ""
        if context:
            context_parts = [f"{k}={v}" for k, v in context.items()]
            context_str = f" | {' '.join(context_parts)}"

        base_msg = f"{timestamp} | {record.levelname:5} | {record.name} | {record.getMessage()}{context_str}"

        if record.exc_info:
            base_msg += f"\n{self.formatException(record.exc_info)}"

        return base_msg


class ContextLogger(logging.LoggerAdapter):
    """
    Logger adapter that automatically includes context in log messages.
    """

    def __init__(self, logger: logging.Logger, extra: Optional[Dict[str, Any]] = None):
        super().__init__(logger, extra or {})

    def process(self, msg: str, kwargs: Dict[str, Any]) -> tuple[str, Dict[str, Any]]:
        """Process log call to include context."""
        context = _log_context.get({})

        if self.extra:
            context = {**context, **self.extra}

        if 'extra' in kwargs and kwargs['extra']:
            call_context = kwargs['extra'].pop('context', {})
            context = {**context, **call_context}

        if 'extra' not in kwargs:
            kwargs['extra'] = {}
        kwargs['extra']['context'] = context

        return msg, kwargs


def get_log_level() -> str:
    """Get log level from environment or default to WARNING."""
    return os.environ.get('LOG_LEVEL', 'WARNING').upper()


def get_log_output() -> str:
    """Get log output mode from environment or default to console."""
    return os.environ.get('LOG_OUTPUT', 'console').lower()


def is_production_env() -> bool:
    """Detect if running in production environment."""
    env_indicators = [
        os.environ.get('ENVIRONMENT') == 'production',
        os.environ.get('ENV') == 'production',
        os.environ.get('M2E_ENV') == 'production',
        # Docker/Kubernetes indicators
        os.path.exists('/.dockerenv'),
        os.environ.get('KUBERNETES_SERVICE_HOST') is not None,
    ]
    return any(env_indicators)


def setup_structured_logging(
    name: str,
    log_level: Optional[str] = None,
    log_output: Optional[str] = None,
    force_json: Optional[bool] = None,
    context: Optional[Dict[str, Any]] = None,
) -> ContextLogger:
    """
    Setup standardized structured logging.

    Args:
        name: Logger name (typically __name__)
        log_level: Log level override (DEBUG, INFO, WARNING, ERROR)
        log_output: Output mode override (console, file, both)
        force_json: Force JSON output regardless of environment detection
        context: Default context to include in all log messages

    Returns:
        ContextLogger instance with structured logging configured
    """
    logger = logging.getLogger(name)

    # Avoid duplicate handlers
    if logger.handlers:
        return ContextLogger(logger, context)

    level = log_level or get_log_level()
    output = log_output or get_log_output()
    use_json = force_json if force_json is not None else is_production_env()

    logger.setLevel(getattr(logging, level, logging.WARNING))

    formatter = StructuredFormatter(use_json=use_json)

    if output in ('console', 'both'):
        _setup_console_handlers(logger, formatter)

    if output in ('file', 'both'):
        _setup_file_handler(logger, formatter, name)

    # Prevent propagation to avoid duplicate messages
    logger.propagate = False

    return ContextLogger(logger, context)


class _StreamRouter(logging.StreamHandler):
    """Stream handler that resolves its stream on every emit.

    Looking the stream up lazily keeps output working when sys.stdout or
    sys.stderr are swapped after the handler was created (test runners, CLI
    runners).
    """

    def __init__(self, stream_name: str):
        super().__init__()
        self._stream_name = stream_name

    @property
    def stream(self):
        return getattr(sys, self._stream_name)

    @stream.setter
    def stream(self, value):
        pass


def _setup_console_handlers(logger: logging.Logger, formatter: StructuredFormatter) -> None:
    """Setup console handlers with proper stream routing."""
    # INFO and DEBUG to stdout
    stdout_handler = _StreamRouter('stdout')
    stdout_handler.setFormatter(formatter)
    stdout_handler.setLevel(logging.DEBUG)
    stdout_handler.addFilter(lambda record: record.levelno < logging.WARNING)
    logger.addHandler(stdout_handler)

    # WARNING and ERROR to stderr
    stderr_handler = _StreamRouter('stderr')
    stderr_handler.setFormatter(formatter)
    stderr_handler.setLevel(logging.WARNING)
    logger.addHandler(stderr_handler)


def _setup_file_handler(logger: logging.Logger, formatter: StructuredFormatter, name: str) -> None:
    """Setup rotating file handler under the user config directory."""
    from .config import get_config_dir

    logs_dir = Path(get_config_dir()) / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)

    module_basename = name.split('.')[-1] if '.' in name else name
    log_file = logs_dir / f"{module_basename}.log"

    # 5MB max, 3 backups
    file_handler = logging.handlers.RotatingFileHandler(
        log_file,
        maxBytes=5 * 1024 * 1024,
        backupCount=3,
        encoding='utf-8',
    )
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)


def set_level(level: str, prefix: str = "m2e") -> None:
    """Change the level of every configured logger under `prefix`."""
    numeric = getattr(logging, level.upper(), logging.WARNING)
    for logger_name in list(logging.root.manager.loggerDict):
        if logger_name == prefix or logger_name.startswith(prefix + "."):
            logging.getLogger(logger_name).setLevel(numeric)


def get_context() -> Dict[str, Any]:
    """Get current logging context."""
    return _log_context.get({}).copy()


class LogContext:
    """
    Context manager that tags every record logged inside it.

    Usage:
        with LogContext(file="README.md", file_type="md"):
            engine.convert(text)  # Step logs carry file= and file_type=
    """

    def __init__(self, **kwargs: Any):
        self.fields = kwargs
        self._token = None

    def __enter__(self):
        self._token = _log_context.set({**get_context(), **self.fields})
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        _log_context.reset(self._token)
        self._token = None


def get_logger(
    name: str,
    log_level: Optional[str] = None,
    include_console: Optional[bool] = None,
    include_file: Optional[bool] = None,
    context: Optional[Dict[str, Any]] = None,
) -> ContextLogger:
    """
    Get a structured logger using console/file switches instead of an output mode.
    """
    if include_console is False and include_file is True:
        output = 'file'
    elif include_console is True and include_file is False:
        output = 'console'
    elif include_console is True and include_file is True:
        output = 'both'
    else:
        output = None  # Use default

    return setup_structured_logging(
        name=name,
        log_level=log_level,
        log_output=output,
        context=context,
    )
