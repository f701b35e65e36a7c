"""GitHub Git Data + Contents API client for report files and the status file."""

from __future__ import annotations

import base64
import logging
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

import requests

from reports_config.settings import DEFAULT_GITHUB_API_URL, RepoParams
from repo_reports_mcp.core_infrastructure.http_client import HttpClient


logger = logging.getLogger(__name__)

GITHUB_API_VERSION = "2022-11-28"


@dataclass(frozen=True)
class TreeEntry:
    """A single entry from the Git Tree API (blob or tree)."""
    path: str
    sha: str
    type: str = "blob"
    mode: str = "100644"
    size: int | None = None


@dataclass(frozen=True)
class FileContent:
    """Decoded file content plus the sha GitHub needs for updates."""
    content: str
    sha: str


def _decode(content: str, encoding: str | None) -> str:
    if encoding == "base64":
        return base64.b64decode(content).decode("utf-8")
    return content


def _normalize_prefix(prefix: str) -> str:
    return prefix if prefix.endswith("/") else f"{prefix}/"


class GitHubReportsClient:
    """Reads report files and reads/writes the status file in one repository."""

    def __init__(
        self,
        token: str | None,
        *,
        api_url: str = DEFAULT_GITHUB_API_URL,
        http: HttpClient | None = None,
    ) -> None:
        self.api_url = api_url.rstrip("/")
        self.http = http or HttpClient()
        self._headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": GITHUB_API_VERSION,
        }
        if token:
            self._headers["Authorization"] = f"Bearer {token}"

    def _repo_url(self, owner: str, repo: str, suffix: str) -> str:
        return f"{self.api_url}/repos/{quote(owner, safe='')}/{quote(repo, safe='')}/{suffix}"

    def _get(self, owner: str, repo: str, suffix: str, **params: Any) -> Any:
        return self.http.get_json(self._repo_url(owner, repo, suffix), headers=self._headers, params=params or None)

    # ---- Git Tree API ------------------------------------------------------

    def list_markdown_files(self, params: RepoParams, prefix: str) -> list[TreeEntry]:
        """All `.md` blobs under `prefix` on the branch head (empty prefix = whole repo)."""
        ref = self._get(params.owner, params.repo, f"git/ref/heads/{quote(params.branch)}")
        commit_sha = ref["object"]["sha"]

        commit = self._get(params.owner, params.repo, f"git/commits/{commit_sha}")
        tree_sha = commit["tree"]["sha"]

        tree = self._get(params.owner, params.repo, f"git/trees/{tree_sha}", recursive="1")
        if tree.get("truncated"):
            logger.warning("Git tree for %s/%s@%s is truncated; some reports may be missing",
                           params.owner, params.repo, params.branch)

        want = _normalize_prefix(prefix) if prefix else ""
        out: list[TreeEntry] = []
        for e in tree.get("tree") or []:
            path = e.get("path") or ""
            if e.get("type") != "blob" or not path.endswith(".md"):
                continue
            if want and not path.startswith(want):
                continue
            out.append(
                TreeEntry(path=path, sha=e["sha"], type=e["type"], mode=e.get("mode", "100644"), size=e.get("size"))
            )
        return out

    # ---- Git Blob API ------------------------------------------------------

    def get_blob_content(self, owner: str, repo: str, sha: str) -> str:
        blob = self._get(owner, repo, f"git/blobs/{sha}")
        return _decode(blob.get("content") or "", blob.get("encoding"))

    # ---- Contents API ------------------------------------------------------

    def get_file_content(self, params: RepoParams, path: str) -> FileContent | None:
        """Decoded content + sha, or None when the path is missing or not a file."""
        try:
            data = self._get(params.owner, params.repo, f"contents/{quote(path)}", ref=params.branch)
        except requests.HTTPError as e:
            if getattr(e.response, "status_code", None) == 404:
                return None
            raise

        # Directories come back as a list
        if isinstance(data, list):
            return None
        if data.get("type") != "file" or "content" not in data:
            return None

        return FileContent(content=_decode(data["content"], data.get("encoding", "base64")), sha=data["sha"])

    def put_file_content(
        self,
        params: RepoParams,
        path: str,
        content: str,
        message: str,
        previous_sha: str | None = None,
    ) -> None:
        """Create the file, or update it when `previous_sha` is given."""
        body: dict[str, Any] = {
            "message": message,
            "content": base64.b64encode(content.encode("utf-8")).decode("ascii"),
            "branch": params.branch,
        }
        if previous_sha:
            body["sha"] = previous_sha

        self.http.put_json(self._repo_url(params.owner, params.repo, f"contents/{quote(path)}"),
                           headers=self._headers, json=body)

    def delete_file(self, params: RepoParams, path: str, message: str, sha: str) -> None:
        body = {"message": message, "sha": sha, "branch": params.branch}
        self.http.delete_json(self._repo_url(params.owner, params.repo, f"contents/{quote(path)}"),
                              headers=self._headers, json=body)
