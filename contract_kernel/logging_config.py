"""
Structured JSON logging for the contract scheduling packages.

Every record under the ``contract_kernel`` logger hierarchy is written as
one JSON object per line: ``ts``, ``level``, ``logger`` and ``message``,
then the bound contract context, then the record's ``extra`` fields.
Records logged with ``exc_info`` also carry the exception type, message,
the ``code`` of ContractKernelError subclasses and their context
attributes as ``exc_<name>``.

Usage:
    from contract_kernel.logging_config import LogContext, get_logger

    logger = get_logger("engines.events")
    with LogContext.bind(contract_id="CN-2025-014"):
        logger.info("contract_events_computed", extra={"event_count": 12})
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
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

_LOGGER_PREFIX = "contract_kernel"


class LogContext:
    """
    Contract-scoped fields stamped on every record.

    ``contract_id`` is bound by the event engine for the duration of a
    computation; ``correlation_id`` is left to callers that batch several
    contracts (the preview CLI, a wizard session).
    """

    _vars: dict[str, ContextVar[str | None]] = {
        "correlation_id": ContextVar("log_correlation_id", default=None),
        "contract_id": ContextVar("log_contract_id", default=None),
    }

    @classmethod
    def get_all(cls) -> dict[str, str]:
        """Bound fields, omitting unset ones."""
        return {
            name: var.get()
            for name, var in cls._vars.items()
            if var.get() is not None
        }

    @classmethod
    def clear(cls) -> None:
        for var in cls._vars.values():
            var.set(None)

    @classmethod
    @contextmanager
    def bind(cls, **fields: str | None) -> Iterator[None]:
        """
        Bind fields for the enclosed block, restoring the outer values on exit.

        None values and unknown names are ignored, so callers can pass an
        optional id straight through.
        """
        tokens = [
            (cls._vars[name], cls._vars[name].set(value))
            for name, value in fields.items()
            if value is not None and name in cls._vars
        ]
        try:
            yield
        finally:
            for var, token in reversed(tokens):
                var.reset(token)


_RESERVED = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "taskName"}


def _json_default(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (set, frozenset)):
        return sorted(value, key=str)
    return str(value)


def _exception_fields(exc: BaseException) -> dict[str, Any]:
    fields: dict[str, Any] = {
        "exc_type": type(exc).__name__,
        "exc_message": str(exc),
    }
    code = getattr(exc, "code", None)
    if code is not None:
        fields["exc_code"] = code
    # Kernel errors keep their context (field, value, currency...) as attributes
    for name, value in vars(exc).items():
        if not name.startswith("_") and name != "code":
            fields[f"exc_{name}"] = value
    return fields


class StructuredFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **LogContext.get_all(),
        }
        for key, value in vars(record).items():
            if key not in _RESERVED:
                payload.setdefault(key, value)

        if record.exc_info and record.exc_info[1] is not None:
            payload.update(_exception_fields(record.exc_info[1]))
            payload["traceback"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=_json_default)


def get_logger(name: str) -> logging.Logger:
    """Logger for ``name`` under the contract_kernel hierarchy."""
    return logging.getLogger(f"{_LOGGER_PREFIX}.{name}")


_configured = False
_lock = threading.Lock()


def configure_logging(
    *,
    level: int = logging.INFO,
    stream: Any = None,
    handler: logging.Handler | None = None,
) -> None:
    """
    Attach one JSON handler to the contract_kernel logger.

    Only the first call has an effect; later calls are ignored so library
    code and scripts can both call it safely.
    """
    global _configured
    with _lock:
        if _configured:
            return
        _configured = True

    root = logging.getLogger(_LOGGER_PREFIX)
    root.setLevel(level)
    root.propagate = False
    target = handler or logging.StreamHandler(stream or sys.stderr)
    target.setFormatter(StructuredFormatter())
    root.addHandler(target)


def reset_logging() -> None:
    """Undo configure_logging(). Used by the test suite."""
    global _configured
    with _lock:
        _configured = False
    root = logging.getLogger(_LOGGER_PREFIX)
    root.handlers.clear()
    root.setLevel(logging.WARNING)
    root.propagate = True
