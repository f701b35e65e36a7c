"""Split a Markdown file into its YAML frontmatter and body."""

from __future__ import annotations

import logging
from typing import Any

import yaml

logger = logging.getLogger(__name__)

DELIMITER = "---"

_TIMESTAMP_TAG = "tag:yaml.org,2002:timestamp"


class _FrontmatterLoader(yaml.SafeLoader):
    """SafeLoader that leaves timestamps as plain strings.

    `updatedAt: 2025-01-15T10:00:00Z` must come back exactly as written.
    """


_FrontmatterLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != _TIMESTAMP_TAG]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


def split_frontmatter(raw: str) -> tuple[dict[str, Any], str]:
    """Return (frontmatter, body).

    Malformed input never raises: a missing or unterminated delimiter, or a
    YAML block that fails to parse, yields empty frontmatter and the whole
    (left-trimmed) text as body.
    """
    text = raw.lstrip()

    if not text.startswith(DELIMITER):
        return {}, text

    closing = text.find("\n" + DELIMITER, len(DELIMITER))
    if closing == -1:
        return {}, text

    block = text[len(DELIMITER):closing].strip()
    body = text[closing + len(DELIMITER) + 1:].strip()

    try:
        parsed = yaml.load(block, Loader=_FrontmatterLoader)
    except (yaml.YAMLError, RecursionError) as e:
        logger.debug("Unparseable frontmatter, treating file as plain markdown: %s", e)
        return {}, text

    if not isinstance(parsed, dict):
        return {}, body
    return parsed, body
