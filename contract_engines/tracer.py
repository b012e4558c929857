"""
contract_engines.tracer -- Engine invocation tracer emitting CONTRACT_ENGINE_TRACE.

Responsibility:
    Provide a lightweight decorator (``@traced_engine``) that wraps pure
    engine invocations with structured trace logging.  The trace captures
    engine_name, engine_version, input_fingerprint (deterministic SHA-256
    hash of selected inputs), result_size and duration_ms.

Architecture position:
    Engines -- infrastructure support for the pure calculation layer.
    Does NOT introduce I/O into engines; emits a log record only.

Invariants enforced:
    - Fingerprint computation is deterministic: values are canonicalized,
      dict keys are sorted, and the hash is SHA-256 truncated to 16 hex
      chars.  Positional and keyword arguments are bound to parameter
      names first, so ``f(cfg)`` and ``f(config=cfg)`` fingerprint alike.
    - Engine purity: the decorator only reads arguments and emits a log
      record; it does not mutate inputs or inject side effects.

Failure modes:
    - Fingerprint fields that are not parameters of the wrapped function
      are recorded as "null".

Usage:
    from contract_engines.tracer import traced_engine

    @traced_engine("contract_events", "1.0", fingerprint_fields=("config",))
    def compute_contract_events(config, settings=None):
        ...
"""

from __future__ import annotations

import dataclasses
import functools
import hashlib
import inspect
import time
from collections.abc import Callable, Mapping
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any

from contract_kernel.logging_config import get_logger

_logger = get_logger("engines.tracer")


def _canonicalize(value: Any) -> str:
    """Produce a stable string representation of a value for fingerprinting.

    Dataclasses are expanded field by field, mappings are key-sorted and
    sequences keep their order.  Unknown types fall back to ``str(value)``.
    """
    if value is None:
        return "null"
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, (bool, int, float, Decimal, str)):
        return str(value)
    if isinstance(value, date):
        return value.isoformat()
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        fields = {f.name: getattr(value, f.name) for f in dataclasses.fields(value)}
        return type(value).__name__ + _canonicalize(fields)
    if isinstance(value, Mapping):
        items = sorted(value.items(), key=lambda kv: str(kv[0]))
        return "{" + ",".join(f"{k}:{_canonicalize(v)}" for k, v in items) + "}"
    if isinstance(value, (set, frozenset)):
        return "{" + ",".join(sorted(_canonicalize(v) for v in value)) + "}"
    if isinstance(value, (list, tuple)):
        return "[" + ",".join(_canonicalize(v) for v in value) + "]"
    return str(value)


def compute_input_fingerprint(
    fingerprint_fields: tuple[str, ...],
    arguments: Mapping[str, Any],
) -> str:
    """Compute a deterministic SHA-256 fingerprint of selected arguments.

    Returns a 16-character hex prefix.  Missing fields are recorded as
    "null"; the result is identical for identical inputs.
    """
    parts = [
        f"{name}={_canonicalize(arguments.get(name))}"
        for name in fingerprint_fields
    ]
    canonical = "|".join(parts)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:16]


def _result_size(result: Any) -> int | None:
    try:
        return len(result)
    except TypeError:
        return None


def traced_engine(
    engine_name: str,
    engine_version: str,
    fingerprint_fields: tuple[str, ...] = (),
) -> Callable:
    """Decorator that emits CONTRACT_ENGINE_TRACE for pure engine invocations.

    Args:
        engine_name: Engine identifier (e.g., "contract_events").
        engine_version: Engine version (e.g., "1.0").
        fingerprint_fields: Parameter names to include in the input
            fingerprint hash.
    """

    def decorator(func: Callable) -> Callable:
        signature = inspect.signature(func)

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            fp = ""
            if fingerprint_fields:
                try:
                    bound = signature.bind_partial(*args, **kwargs)
                    arguments: Mapping[str, Any] = bound.arguments
                except TypeError:
                    arguments = kwargs
                fp = compute_input_fingerprint(fingerprint_fields, arguments)

            t0 = time.monotonic()
            result = func(*args, **kwargs)
            duration_ms = round((time.monotonic() - t0) * 1000, 2)

            _logger.info(
                "CONTRACT_ENGINE_TRACE",
                extra={
                    "trace_type": "CONTRACT_ENGINE_TRACE",
                    "engine_name": engine_name,
                    "engine_version": engine_version,
                    "input_fingerprint": fp,
                    "result_size": _result_size(result),
                    "duration_ms": duration_ms,
                    "function": func.__qualname__,
                },
            )
            return result

        return wrapper

    return decorator
