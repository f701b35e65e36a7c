"""
Report assembly.

A report file looks like:

    ---
    title: "Report Title"
    category: performance
    status: warning
    summary: "One-line summary"
    source: my-agent
    tags: [extra-tag]
    updatedAt: "2025-01-15T10:00:00Z"
    sections:
      - type: metrics
        title: "Core Vitals"
        items:
          - label: LCP
            value: 2.5
            unit: s
            status: passing
    ---

    ## Markdown body becomes the last section
"""

from __future__ import annotations

import datetime as _dt
from typing import Any, Mapping

from repo_reports_mcp.domain.models import (
    LIFECYCLE_STATUSES,
    REPORT_STATUSES,
    MarkdownSection,
    Report,
    ReportSection,
    ReportSummary,
)
from repo_reports_mcp.parsing.frontmatter import split_frontmatter
from repo_reports_mcp.parsing.identity import derive_report_id, derive_tags_from_path, derive_title
from repo_reports_mcp.parsing.sections import valid_sections


def _now_iso() -> str:
    now = _dt.datetime.now(_dt.timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _text(value: Any) -> str | None:
    """Frontmatter scalar as text; None for falsy values (0, false, "", null)."""
    if not value:
        return None
    return str(value)


def _merge_tags(dir_tags: list[str], frontmatter_tags: Any) -> list[str]:
    explicit = [str(t) for t in frontmatter_tags] if isinstance(frontmatter_tags, list) else []
    # dict keeps first-seen order
    return list(dict.fromkeys([*dir_tags, *explicit]))


def _normalize_status(value: Any) -> str:
    return value if isinstance(value, str) and value in REPORT_STATUSES else "info"


def _build_summary(
    frontmatter: Mapping[str, Any],
    file_path: str,
    reports_path: str,
    lifecycle_statuses: Mapping[str, str],
) -> ReportSummary:
    report_id = derive_report_id(file_path, reports_path)
    tags = _merge_tags(derive_tags_from_path(report_id), frontmatter.get("tags"))

    lifecycle = lifecycle_statuses.get(report_id)
    if lifecycle not in LIFECYCLE_STATUSES:
        lifecycle = None

    return ReportSummary(
        id=report_id,
        title=derive_title(report_id, frontmatter.get("title")),
        category=_text(frontmatter.get("category")) or "general",
        status=_normalize_status(frontmatter.get("status")),
        summary=_text(frontmatter.get("summary")) or "",
        updated_at=_text(frontmatter.get("updatedAt")) or _now_iso(),
        source=_text(frontmatter.get("source")),
        tags=tags or None,
        lifecycle_status=lifecycle,
    )


def parse_report_summary(
    raw: str,
    file_path: str,
    reports_path: str,
    lifecycle_statuses: Mapping[str, str],
) -> ReportSummary:
    """Metadata only (no sections); what listings return."""
    frontmatter, _body = split_frontmatter(raw)
    return _build_summary(frontmatter, file_path, reports_path, lifecycle_statuses)


def parse_report(
    raw: str,
    file_path: str,
    reports_path: str,
    lifecycle_statuses: Mapping[str, str],
) -> Report:
    """Full report: frontmatter sections in order, then the body as a markdown section."""
    frontmatter, body = split_frontmatter(raw)
    summary = parse_report_summary(raw, file_path, reports_path, lifecycle_statuses)

    sections: list[ReportSection] = []
    declared = frontmatter.get("sections")
    if isinstance(declared, list):
        sections.extend(valid_sections(declared))

    if body:
        sections.append(MarkdownSection(type="markdown", content=body))

    return Report(**summary.model_dump(), sections=sections)
