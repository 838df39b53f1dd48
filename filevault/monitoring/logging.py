"""
Structured Logging - Monitoring Layer

Log records carry keyword fields (``extra_fields``) and, while a storage call
runs for an owner, that owner's id. Output is either one JSON object per line
or a pipe-separated text line.

@.architecture
Incoming: cli.py, security/crypto.py, data/storage/local.py --- {str log_level, str format_type, str owner_id, keyword fields}
Processing: configure_logging(), owner_context(), StructuredLogger._log(), JSONFormatter.format(), OwnerFilter.filter() --- {4 jobs: log_configuration, owner_tagging, structured_logging, formatting}
Outgoing: sys.stderr --- {JSON or text log lines}
"""

import json
import logging
import sys
import traceback
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, Optional

_owner_id: ContextVar[Optional[str]] = ContextVar('filevault_owner_id', default=None)

TEXT_FORMAT = '%(asctime)s | %(levelname)-8s | %(name)-30s | [%(owner)s] | %(message)s'


@contextmanager
def owner_context(owner_id: str) -> Iterator[None]:
    """Tag every record logged inside the block with owner_id."""
    token = _owner_id.set(owner_id)
    try:
        yield
    finally:
        _owner_id.reset(token)


def current_owner_id() -> Optional[str]:
    return _owner_id.get()


class JSONFormatter(logging.Formatter):
    """One JSON object per record, for log aggregation."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            'timestamp': datetime.fromtimestamp(record.created, tz=timezone.utc)
                .isoformat().replace('+00:00', 'Z'),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'function': record.funcName,
            'line': record.lineno,
        }

        owner_id = getattr(record, 'owner_id', None)
        if owner_id:
            entry['owner_id'] = owner_id

        if record.exc_info:
            exc_type, exc_value, _ = record.exc_info
            entry['exception'] = {
                'type': exc_type.__name__,
                'message': str(exc_value),
                'traceback': traceback.format_exception(*record.exc_info),
            }

        fields = getattr(record, 'extra_fields', None)
        if fields:
            entry['extra'] = fields

        return json.dumps(entry, default=str)


class OwnerFilter(logging.Filter):
    """Fill ``%(owner)s`` for the text format; '-' outside an owner context."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.owner = getattr(record, 'owner_id', None) or '-'
        return True


class StructuredLogger:
    """
    Thin wrapper over a stdlib logger.

    ``logger.info("Stored file", category="credential")`` logs the message
    with ``record.extra_fields == {"category": "credential"}`` and, inside
    owner_context(), ``record.owner_id`` set.
    """

    def __init__(self, name: str):
        self._logger = logging.getLogger(name)

    @property
    def name(self) -> str:
        return self._logger.name

    def _log(self, level: int, message: str, fields: Dict[str, Any]) -> None:
        extra: Dict[str, Any] = {}
        if fields:
            extra['extra_fields'] = fields
        owner_id = _owner_id.get()
        if owner_id is not None:
            extra['owner_id'] = owner_id
        # stacklevel 3: caller -> debug()/info()/... -> _log()
        self._logger.log(level, message, extra=extra, stacklevel=3)

    def debug(self, message: str, **fields: Any) -> None:
        self._log(logging.DEBUG, message, fields)

    def info(self, message: str, **fields: Any) -> None:
        self._log(logging.INFO, message, fields)

    def warning(self, message: str, **fields: Any) -> None:
        self._log(logging.WARNING, message, fields)

    def error(self, message: str, **fields: Any) -> None:
        self._log(logging.ERROR, message, fields)


def configure_logging(level: str = "INFO", format_type: str = "text") -> None:
    """
    Replace the root logger's handlers with a single stderr handler.

    Args:
        level: Root log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_type: "json" or "text"
    """
    if format_type == "json":
        formatter: logging.Formatter = JSONFormatter()
    else:
        formatter = logging.Formatter(fmt=TEXT_FORMAT, datefmt='%Y-%m-%d %H:%M:%S')

    # stdout is reserved for CLI output
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)
    handler.addFilter(OwnerFilter())

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))


def get_logger(name: str) -> StructuredLogger:
    """Get a structured logger (usually get_logger(__name__))."""
    return StructuredLogger(name)
