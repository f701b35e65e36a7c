from __future__ import annotations

from typing import Any, Iterable

from pydantic import ValidationError

from repo_reports_mcp.domain.models import SECTION_ADAPTER, ReportSection


def _coerce_section(value: Any) -> ReportSection | None:
    if not isinstance(value, dict):
        return None
    try:
        return SECTION_ADAPTER.validate_python(value)
    except ValidationError:
        return None


def is_valid_section(value: Any) -> bool:
    """True for a mapping with a known `type` and that type's required fields.

    List contents are not inspected: a metrics section with `items: [1, 2]`
    is valid.
    """
    return _coerce_section(value) is not None


def valid_sections(values: Iterable[Any]) -> list[ReportSection]:
    """Keep the valid sections, in order. Invalid ones are dropped silently."""
    out: list[ReportSection] = []
    for value in values:
        section = _coerce_section(value)
        if section is not None:
            out.append(section)
    return out
