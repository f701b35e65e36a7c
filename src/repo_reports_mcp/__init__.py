"""MCP server over Markdown reports stored in a GitHub repository.

Reports are Markdown files with YAML frontmatter; a JSON status file next to
them tracks which reports have been read or dismissed.
"""
