from __future__ import annotations

from typing import List, Optional, Protocol, runtime_checkable

from reports_config.settings import RepoParams
from repo_reports_mcp.connectors.github.client import FileContent, TreeEntry


@runtime_checkable
class ReportStorePort(Protocol):
    """
    Versioned storage holding the report files and the lifecycle status file.
    GitHubReportsClient is the production implementation.
    """
    def list_markdown_files(self, params: RepoParams, prefix: str) -> List[TreeEntry]:
        ...

    def get_blob_content(self, owner: str, repo: str, sha: str) -> str:
        ...

    def get_file_content(self, params: RepoParams, path: str) -> Optional[FileContent]:
        ...
        # None means "does not exist"; any other failure raises.

    def put_file_content(
        self,
        params: RepoParams,
        path: str,
        content: str,
        message: str,
        previous_sha: Optional[str] = None,
    ) -> None:
        ...

    def delete_file(self, params: RepoParams, path: str, message: str, sha: str) -> None:
        ...
