"""Instrumentation shared by every MCP tool handler."""

from __future__ import annotations

import functools
import inspect
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable

from reports_common.context import get_request_id, new_request_id, set_request_id
from reports_common.errors import INTERNAL, REDACT_TOKEN, typed_error
from reports_common.telemetry import DEFAULT_TELEMETRY_FILE, log_event


logger = logging.getLogger(__name__)

_SENSITIVE_ARGS = frozenset({"github_token", "authorization", "token", "access_token", "api_key", "apikey"})


def sanitize_args_for_log(args: dict | None) -> dict:
    """Mask secret-looking arguments before they reach telemetry."""
    return {
        str(name): REDACT_TOKEN if str(name).lower() in _SENSITIVE_ARGS else value
        for name, value in (args or {}).items()
    }


@dataclass(frozen=True)
class InstrumentConfig:
    kind: str
    name: str
    client_id: str
    telemetry_file: str = DEFAULT_TELEMETRY_FILE
    new_corr_id_per_call: bool = False
    # echo corr_id in dict payloads so clients can quote it
    attach_corr_id: bool = True


def _call_args(sig: inspect.Signature, args: tuple, kwargs: dict) -> dict[str, Any]:
    try:
        return dict(sig.bind_partial(*args, **kwargs).arguments)
    except TypeError:
        return {**kwargs, "_args": list(args)} if args else dict(kwargs)


def _corr_id(cfg: InstrumentConfig) -> str:
    current = get_request_id()
    if current and not cfg.new_corr_id_per_call:
        return current
    fresh = new_request_id()
    set_request_id(fresh)
    return fresh


def instrument_sync_tool(cfg: InstrumentConfig):
    """
    Wrap a sync tool so that every call
      - runs under a correlation id,
      - returns a typed `internal` error instead of raising,
      - appends one telemetry record (args sanitized, ok flag, duration).
    The wrapped signature is preserved for MCP schema generation.
    """

    def decorator(fn: Callable[..., Any]):
        sig = inspect.signature(fn)

        @functools.wraps(fn)
        def wrapper(*args: Any, **kwargs: Any):
            corr_id = _corr_id(cfg)
            record: dict[str, Any] = {"args": sanitize_args_for_log(_call_args(sig, args, kwargs))}
            started = time.perf_counter()

            try:
                payload = fn(*args, **kwargs)
            except Exception as e:
                logger.exception("Tool %s failed", cfg.name)
                payload = typed_error(INTERNAL, str(e))

            failed = isinstance(payload, dict) and "error" in payload
            if failed:
                record["error"] = payload["error"]

            log_event(
                cfg.kind,
                cfg.name,
                record,
                ok=not failed,
                ms=int((time.perf_counter() - started) * 1000),
                client_id=cfg.client_id,
                corr_id=corr_id,
                telemetry_file=cfg.telemetry_file,
            )

            if cfg.attach_corr_id and isinstance(payload, dict):
                payload.setdefault("corr_id", corr_id)
            return payload

        wrapper.__signature__ = sig  # type: ignore[attr-defined]
        return wrapper

    return decorator
