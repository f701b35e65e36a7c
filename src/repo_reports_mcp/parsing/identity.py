"""Report identity, implicit tags and display titles, all derived from the file path."""

from __future__ import annotations

import re

MARKDOWN_EXT = ".md"

_SEPARATOR_RUN = re.compile(r"[-_]+")
_WORD_START = re.compile(r"\b\w")


def derive_report_id(file_path: str, reports_path: str) -> str:
    """
    reports/farm/thing.md with reports_path "reports" -> "farm/thing"
    """
    relative = file_path
    if reports_path:
        prefix = reports_path if reports_path.endswith("/") else f"{reports_path}/"
        if relative.startswith(prefix):
            relative = relative[len(prefix):]

    if relative.endswith(MARKDOWN_EXT):
        relative = relative[: -len(MARKDOWN_EXT)]
    return relative


def derive_tags_from_path(report_id: str) -> list[str]:
    """Every directory segment of the id, outermost first. "check" -> []."""
    return report_id.split("/")[:-1]


def title_from_filename(filename: str) -> str:
    """daily-check -> Daily Check, my_report_2024 -> My Report 2024"""
    spaced = _SEPARATOR_RUN.sub(" ", filename)
    return _WORD_START.sub(lambda m: m.group(0).upper(), spaced)


def derive_title(report_id: str, frontmatter_title: object = None) -> str:
    if frontmatter_title:
        return str(frontmatter_title)
    return title_from_filename(report_id.rsplit("/", 1)[-1])
