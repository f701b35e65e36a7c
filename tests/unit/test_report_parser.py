"""Report assembly: summary metadata and full reports with sections."""

import re

import pytest

from repo_reports_mcp.domain.models import MarkdownSection, MetricsSection, TableSection
from repo_reports_mcp.parsing.report_parser import parse_report, parse_report_summary


FULL = """---
title: "Performance Report"
category: performance
status: warning
summary: "3 of 5 metrics below threshold"
source: lighthouse
tags: [homepage, mobile]
updatedAt: "2025-06-15T10:00:00Z"
---

Some body content.
"""


def _meta(**fields) -> str:
    lines = [f"{k}: {v}" for k, v in fields.items()]
    return "---\n" + "\n".join(lines) + "\n---\n"


# ── parse_report_summary ──────────────────────────────────────────────


def test_summary_reads_all_frontmatter_fields():
    s = parse_report_summary(FULL, "reports/check.md", "reports", {})

    assert s.id == "check"
    assert s.title == "Performance Report"
    assert s.category == "performance"
    assert s.status == "warning"
    assert s.summary == "3 of 5 metrics below threshold"
    assert s.source == "lighthouse"
    assert s.tags == ["homepage", "mobile"]
    assert s.updated_at == "2025-06-15T10:00:00Z"
    assert s.lifecycle_status is None


def test_summary_wire_form_uses_camel_case_and_omits_absent_keys():
    d = parse_report_summary(_meta(title="T", summary="x"), "reports/test.md", "reports", {}).to_dict()
    assert "updatedAt" in d
    assert "source" not in d
    assert "tags" not in d
    assert "lifecycleStatus" not in d
    assert "sections" not in d


def test_title_derived_from_filename():
    s = parse_report_summary(_meta(category="quality", status="passing"), "reports/daily-check.md", "reports", {})
    assert s.title == "Daily Check"

    s = parse_report_summary(_meta(status="info"), "reports/my_report_2024.md", "reports", {})
    assert s.title == "My Report 2024"


def test_category_defaults_to_general():
    s = parse_report_summary(_meta(title="Test"), "reports/test.md", "reports", {})
    assert s.category == "general"


@pytest.mark.parametrize("value", ["0", "false", "\"\"", "null"])
def test_falsy_scalars_fall_back_to_defaults(value):
    s = parse_report_summary(
        _meta(title=value, category=value, summary=value, source=value), "reports/my-check.md", "reports", {}
    )
    assert s.title == "My Check"
    assert s.category == "general"
    assert s.summary == ""
    assert s.source is None


@pytest.mark.parametrize("status", ["passing", "warning", "failing", "info"])
def test_valid_statuses_are_kept(status):
    s = parse_report_summary(_meta(title="Test", status=status), "reports/test.md", "reports", {})
    assert s.status == status


@pytest.mark.parametrize("raw", [
    _meta(title="Test", status="invalid-status"),
    _meta(title="Test", status="Passing"),
    _meta(title="Test", status="1"),
    _meta(title="Test"),
])
def test_unknown_or_missing_status_becomes_info(raw):
    assert parse_report_summary(raw, "reports/test.md", "reports", {}).status == "info"


def test_directory_tags_come_first_and_duplicates_are_dropped():
    raw = _meta(title="Audit", tags="[critical, security]", status="failing")
    s = parse_report_summary(raw, "reports/security/audit.md", "reports", {})
    assert s.tags == ["security", "critical"]


def test_directory_only_tags():
    s = parse_report_summary(_meta(title="Thing"), "reports/farm/thing.md", "reports", {})
    assert s.tags == ["farm"]


def test_no_tags_for_top_level_report_without_frontmatter_tags():
    s = parse_report_summary(_meta(title="Root"), "reports/root-report.md", "reports", {})
    assert s.tags is None


def test_lifecycle_status_lookup_by_id():
    raw = _meta(title="Audit")
    assert parse_report_summary(raw, "reports/test.md", "reports", {"test": "read"}).lifecycle_status == "read"
    nested = parse_report_summary(raw, "reports/security/audit.md", "reports", {"security/audit": "dismissed"})
    assert nested.lifecycle_status == "dismissed"
    assert parse_report_summary(raw, "reports/test.md", "reports", {"other": "read"}).lifecycle_status is None


def test_explicit_unread_entry_is_honored():
    s = parse_report_summary(_meta(title="T"), "reports/test.md", "reports", {"test": "unread"})
    assert s.lifecycle_status == "unread"


def test_file_without_frontmatter():
    s = parse_report_summary("# Just a markdown file\n\nNo frontmatter here.", "reports/plain.md", "reports", {})
    assert (s.id, s.title, s.category, s.status, s.summary) == ("plain", "Plain", "general", "info", "")


def test_empty_file():
    s = parse_report_summary("", "reports/empty.md", "reports", {})
    assert (s.id, s.title, s.status) == ("empty", "Empty", "info")


def test_unterminated_frontmatter_is_ignored():
    raw = "---\ntitle: Ignored\nstatus: passing\nThis never closes\n"
    s = parse_report_summary(raw, "reports/broken.md", "reports", {})
    assert s.title == "Broken"
    assert s.status == "info"


def test_updated_at_defaults_to_now():
    s = parse_report_summary(_meta(title="T"), "reports/t.md", "reports", {})
    assert re.fullmatch(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z", s.updated_at)


def test_unquoted_timestamp_is_kept_verbatim():
    s = parse_report_summary(_meta(updatedAt="2025-01-15T10:00:00Z"), "reports/t.md", "reports", {})
    assert s.updated_at == "2025-01-15T10:00:00Z"


# ── parse_report ──────────────────────────────────────────────────────


def test_body_becomes_markdown_section():
    raw = _meta(title="Simple Report", status="passing") + "\n## Overview\n\nEverything looks great today.\n"
    report = parse_report(raw, "reports/simple.md", "reports", {})

    assert report.id == "simple"
    assert len(report.sections) == 1
    assert isinstance(report.sections[0], MarkdownSection)
    assert "Everything looks great today." in report.sections[0].content


def test_metrics_section_keeps_items_as_written():
    raw = """---
title: Metrics Report
status: warning
sections:
  - type: metrics
    title: Core Web Vitals
    items:
      - label: LCP
        value: 2.5
        unit: s
        status: passing
      - label: FID
        value: 300
        unit: ms
        status: failing
---
"""
    report = parse_report(raw, "reports/metrics.md", "reports", {})

    assert len(report.sections) == 1
    section = report.sections[0]
    assert isinstance(section, MetricsSection)
    assert section.title == "Core Web Vitals"
    assert section.items[0] == {"label": "LCP", "value": 2.5, "unit": "s", "status": "passing"}
    assert section.items[1]["value"] == 300


def test_table_section():
    raw = """---
title: Table Report
sections:
  - type: table
    title: Resources
    columns: [Resource, Size, Time]
    rows:
      - [main.js, 150KB, 1.2s]
      - [styles.css, 30KB, null]
---
"""
    report = parse_report(raw, "reports/table.md", "reports", {})
    section = report.sections[0]
    assert isinstance(section, TableSection)
    assert section.columns == ["Resource", "Size", "Time"]
    assert section.rows == [["main.js", "150KB", "1.2s"], ["styles.css", "30KB", None]]

    wire = report.to_dict()["sections"][0]
    assert wire["rows"][1] == ["styles.css", "30KB", None]
    assert wire["title"] == "Resources"


def test_frontmatter_sections_then_body():
    raw = """---
title: Combined Report
sections:
  - type: metrics
    items:
      - label: Score
        value: 85
  - type: table
    columns: [Issue, Severity]
    rows:
      - [Slow API, High]
---

## Detailed Analysis

Here is a longer explanation.
"""
    report = parse_report(raw, "reports/combined.md", "reports", {})
    assert [s.type for s in report.sections] == ["metrics", "table", "markdown"]
    assert "Detailed Analysis" in report.sections[2].content


def test_invalid_sections_are_dropped_without_reordering():
    raw = """---
title: Bad Sections
sections:
  - type: unknown
    data: something
  - type: markdown
    content: "ok"
  - type: metrics
  - type: table
    columns: [A]
    rows: [[1]]
---
Body text
"""
    report = parse_report(raw, "reports/bad.md", "reports", {})
    assert [s.type for s in report.sections] == ["markdown", "table", "markdown"]
    assert report.sections[0].content == "ok"
    assert report.sections[2].content == "Body text"


def test_frontmatter_only_file_has_no_sections():
    report = parse_report(_meta(title="Metadata Only", status="passing"), "reports/metadata-only.md", "reports", {})
    assert report.sections == []
    assert report.to_dict()["sections"] == []


def test_non_list_sections_key_is_ignored():
    report = parse_report(_meta(title="X", sections="nope"), "reports/x.md", "reports", {})
    assert report.sections == []


def test_full_report_keeps_summary_fields():
    report = parse_report(FULL, "reports/perf/check.md", "reports", {"perf/check": "read"})
    d = report.to_dict()
    assert d["id"] == "perf/check"
    assert d["title"] == "Performance Report"
    assert d["tags"] == ["perf", "homepage", "mobile"]
    assert d["lifecycleStatus"] == "read"
    assert d["sections"] == [{"type": "markdown", "content": "Some body content."}]


def test_wire_form_drops_null_section_keys_but_keeps_null_item_fields():
    raw = """---
title: Nulls
sections:
  - type: metrics
    title: null
    items:
      - label: a
        previousValue: null
---
"""
    d = parse_report(raw, "reports/nulls.md", "reports", {}).to_dict()

    assert d["sections"] == [{"type": "metrics", "items": [{"label": "a", "previousValue": None}]}]
