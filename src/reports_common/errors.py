"""Error envelopes returned by MCP tools instead of raising."""

from __future__ import annotations

from typing import Any

REDACT_TOKEN = "***redacted***"

BAD_REQUEST = "bad_request"
NOT_FOUND = "not_found"
NOT_CONFIGURED = "not_configured"
INTERNAL = "internal"


def typed_error(code: str, message: str, **extra: Any) -> dict:
    """{"error": {"code", "message"}} plus any extra top-level keys (e.g. report_id)."""
    return {"error": {"code": code, "message": message}, **extra}
