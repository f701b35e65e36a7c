"""Markdown + YAML frontmatter report parsing and the lifecycle status map."""

from repo_reports_mcp.parsing.frontmatter import split_frontmatter  # noqa: F401
from repo_reports_mcp.parsing.identity import (  # noqa: F401
    derive_report_id,
    derive_tags_from_path,
    derive_title,
)
from repo_reports_mcp.parsing.lifecycle import (  # noqa: F401
    parse_lifecycle_statuses,
    serialize_lifecycle_statuses,
    set_lifecycle_status,
)
from repo_reports_mcp.parsing.report_parser import parse_report, parse_report_summary  # noqa: F401
from repo_reports_mcp.parsing.sections import is_valid_section, valid_sections  # noqa: F401
