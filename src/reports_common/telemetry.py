"""JSONL telemetry: one line per tool call, secrets masked on write and on read."""

from __future__ import annotations

import datetime as _dt
import json
import os
from collections import deque
from pathlib import Path
from typing import Any

from reports_config.settings import telemetry_dir
from reports_common.context import get_request_id
from reports_common.errors import REDACT_TOKEN

DEFAULT_TELEMETRY_FILE = "mcp-telemetry.jsonl"
MAX_RECENT = 200

_SECRET_KEYS = frozenset({"authorization", "github_token", "access_token", "token", "api_key", "apikey"})


def _disabled() -> bool:
    return os.getenv("REPORTS_DISABLE_TELEMETRY", "0").strip().lower() in {"1", "true", "yes"}


def _mask(value: Any) -> Any:
    if isinstance(value, str) and value.strip().lower().startswith("bearer "):
        return f"Bearer {REDACT_TOKEN}"
    return REDACT_TOKEN


def redact_secrets(obj: Any) -> Any:
    """Recursively mask values stored under secret-looking keys."""
    if isinstance(obj, dict):
        return {
            k: _mask(v) if isinstance(k, str) and k.strip().lower() in _SECRET_KEYS else redact_secrets(v)
            for k, v in obj.items()
        }
    if isinstance(obj, list):
        return [redact_secrets(x) for x in obj]
    return obj


def _telemetry_path(telemetry_file: str) -> Path:
    return telemetry_dir() / telemetry_file


def log_event(
    kind: str,
    name: str,
    args: dict | None = None,
    ok: bool = True,
    ms: int = 0,
    *,
    client_id: str | None = None,
    corr_id: str | None = None,
    telemetry_file: str = DEFAULT_TELEMETRY_FILE,
) -> None:
    if _disabled():
        return

    request_id = get_request_id()
    record = redact_secrets({
        "ts": _dt.datetime.now(_dt.timezone.utc).isoformat().replace("+00:00", "Z"),
        "kind": kind,
        "name": name,
        "client_id": client_id,
        "request_id": request_id,
        "corr_id": corr_id or request_id,
        "args": dict(args or {}),
        "ok": bool(ok),
        "ms": int(ms),
    })

    path = _telemetry_path(telemetry_file)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("a", encoding="utf-8") as f:
        f.write(json.dumps(record, ensure_ascii=False, default=str) + "\n")


def telemetry_recent(n: int = 50, telemetry_file: str = DEFAULT_TELEMETRY_FILE) -> dict:
    """Last `n` records (1..MAX_RECENT); unreadable lines are skipped."""
    path = _telemetry_path(telemetry_file)
    if not path.exists():
        return {"records": []}

    try:
        n = int(n)
    except (TypeError, ValueError):
        n = 50
    n = max(1, min(n, MAX_RECENT))

    with path.open("r", encoding="utf-8") as f:
        tail = deque(f, maxlen=n)

    records = []
    for line in tail:
        try:
            records.append(redact_secrets(json.loads(line)))
        except json.JSONDecodeError:
            continue
    return {"records": records}
