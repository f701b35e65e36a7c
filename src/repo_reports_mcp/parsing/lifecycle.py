"""Parse and write the per-report lifecycle status file (.reports-status.json).

The file maps report ids to "read" or "dismissed". A missing key means
"unread", so "unread" is never written.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Mapping

from repo_reports_mcp.domain.models import DEFAULT_LIFECYCLE_STATUS, LIFECYCLE_STATUSES

logger = logging.getLogger(__name__)


def parse_lifecycle_statuses(raw: str) -> dict[str, str]:
    """Return {report_id: status}; {} for anything that is not a JSON object."""
    try:
        parsed: Any = json.loads(raw)
    except (TypeError, ValueError, RecursionError):
        logger.warning("Lifecycle status file is not valid JSON; ignoring it")
        return {}

    if not isinstance(parsed, dict):
        return {}

    return {
        str(key): value
        for key, value in parsed.items()
        if isinstance(value, str) and value in LIFECYCLE_STATUSES
    }


def set_lifecycle_status(statuses: Mapping[str, str], report_id: str, status: str) -> dict[str, str]:
    """Return a copy of `statuses` with `report_id` moved to `status`."""
    if status not in LIFECYCLE_STATUSES:
        raise ValueError(f"lifecycle status must be one of: {', '.join(sorted(LIFECYCLE_STATUSES))}")

    out = dict(statuses)
    if status == DEFAULT_LIFECYCLE_STATUS:
        out.pop(report_id, None)
    else:
        out[report_id] = status
    return out


def serialize_lifecycle_statuses(statuses: Mapping[str, str]) -> str:
    """Pretty-printed JSON holding only the non-default entries."""
    persisted = {k: v for k, v in statuses.items() if v != DEFAULT_LIFECYCLE_STATUS}
    return json.dumps(persisted, indent=2, ensure_ascii=False)
