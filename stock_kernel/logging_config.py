"""
Structured JSON logging for the stock kernel.

Every record under the ``stock_kernel`` logger namespace is rendered as
one JSON object per line: timestamp, level, logger, message, the
request-scoped LogContext fields, any ``extra`` payload, and structured
exception fields (including ``code`` for StockKernelError subclasses).

Usage:
    from stock_kernel.logging_config import LogContext, configure_logging, get_logger

    configure_logging(level=logging.INFO)
    logger = get_logger("engines.allocation")

    with LogContext.bind(order_id="SO-1", warehouse_id="W1"):
        logger.info("allocation_started", extra={"demand": "5"})
"""

__all__ = [
    "StructuredFormatter",
    "LogContext",
    "get_logger",
    "configure_logging",
    "reset_logging",
]

import json
import logging
import sys
import threading
from contextvars import ContextVar, Token
from datetime import UTC, date, datetime
from typing import Any

# ---------------------------------------------------------------------------
# Context propagation
# ---------------------------------------------------------------------------

_CONTEXT_FIELDS: tuple[str, ...] = (
    "correlation_id",
    "actor_id",
    "order_id",
    "warehouse_id",
    "trace_id",
)

_context_vars: dict[str, ContextVar[str | None]] = {
    name: ContextVar(f"stock_log_{name}", default=None) for name in _CONTEXT_FIELDS
}


class LogContext:
    """Request-scoped log fields held in ContextVars (thread- and task-safe)."""

    FIELDS = _CONTEXT_FIELDS

    @classmethod
    def set(cls, **fields: str | None) -> None:
        """Set context fields. None values leave the current value alone.

        Raises:
            TypeError: On a field name that is not a context field.
        """
        for name, value in fields.items():
            var = cls._var(name)
            if value is not None:
                var.set(value)

    @classmethod
    def get_all(cls) -> dict[str, str]:
        """Non-None context fields, in declaration order."""
        return {
            name: value
            for name, var in _context_vars.items()
            if (value := var.get()) is not None
        }

    @classmethod
    def clear(cls) -> None:
        for var in _context_vars.values():
            var.set(None)

    @classmethod
    def bind(cls, **fields: str | None) -> "_BoundContext":
        """Context manager that sets fields on entry and restores them on exit."""
        for name in fields:
            cls._var(name)
        return _BoundContext(fields)

    @staticmethod
    def _var(name: str) -> ContextVar[str | None]:
        try:
            return _context_vars[name]
        except KeyError:
            raise TypeError(f"Unknown log context field: {name!r}") from None


class _BoundContext:
    def __init__(self, fields: dict[str, str | None]):
        self._fields = fields
        self._tokens: list[tuple[ContextVar[str | None], Token]] = []

    def __enter__(self) -> type[LogContext]:
        for name, value in self._fields.items():
            if value is not None:
                var = _context_vars[name]
                self._tokens.append((var, var.set(value)))
        return LogContext

    def __exit__(self, *exc: Any) -> None:
        while self._tokens:
            var, token = self._tokens.pop()
            var.reset(token)


# ---------------------------------------------------------------------------
# JSON Formatter
# ---------------------------------------------------------------------------

_RESERVED_RECORD_KEYS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "asctime", "taskName"}


def _json_default(obj: Any) -> Any:
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    # Decimal, UUID and anything else: exact text form
    return str(obj)


class StructuredFormatter(logging.Formatter):
    """Renders each LogRecord as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        payload = self._base_fields(record)
        payload.update(LogContext.get_all())
        for key, value in self._extra_fields(record):
            payload.setdefault(key, value)
        if record.exc_info and record.exc_info[1] is not None:
            payload.update(self._exception_fields(record))
        return json.dumps(payload, default=_json_default)

    @staticmethod
    def _base_fields(record: logging.LogRecord) -> dict[str, Any]:
        return {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

    @staticmethod
    def _extra_fields(record: logging.LogRecord):
        for key, value in vars(record).items():
            if key not in _RESERVED_RECORD_KEYS:
                yield key, value

    def _exception_fields(self, record: logging.LogRecord) -> dict[str, Any]:
        error = record.exc_info[1]
        fields: dict[str, Any] = {
            "exc_type": type(error).__name__,
            "exc_message": str(error),
        }
        code = getattr(error, "code", None)
        if code is not None:
            fields["exc_code"] = code
        # StockKernelError subclasses expose their payload as attributes
        for name, value in vars(error).items():
            if not name.startswith("_"):
                fields[f"exc_{name}"] = value
        fields["traceback"] = self.formatException(record.exc_info)
        return fields


# ---------------------------------------------------------------------------
# Logger factory and initialization
# ---------------------------------------------------------------------------

_ROOT_LOGGER_NAME = "stock_kernel"

_state_lock = threading.Lock()
_configured = False


def get_logger(name: str) -> logging.Logger:
    """Logger named ``stock_kernel.<name>``."""
    return logging.getLogger(f"{_ROOT_LOGGER_NAME}.{name}")


def configure_logging(
    *,
    level: int = logging.INFO,
    stream: Any = None,
    handler: logging.Handler | None = None,
) -> None:
    """Attach a JSON handler to the stock_kernel logger. Later calls are no-ops."""
    global _configured
    with _state_lock:
        if _configured:
            return
        _configured = True

    root = logging.getLogger(_ROOT_LOGGER_NAME)
    root.setLevel(level)
    root.propagate = False

    target = handler or logging.StreamHandler(stream or sys.stderr)
    target.setFormatter(StructuredFormatter())
    root.addHandler(target)


def reset_logging() -> None:
    """Undo configure_logging. FOR TESTING ONLY."""
    global _configured
    with _state_lock:
        _configured = False
    root = logging.getLogger(_ROOT_LOGGER_NAME)
    root.handlers.clear()
    root.setLevel(logging.WARNING)
