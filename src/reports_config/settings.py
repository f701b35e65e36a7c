"""Runtime settings: .env loading, logging setup, and the reports repository config."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


DEFAULT_GITHUB_API_URL = "https://api.github.com"
DEFAULT_BRANCH = "main"
DEFAULT_REPORTS_PATH = "reports"
STATUS_FILE_NAME = ".reports-status.json"

_ROOT_MARKERS = ("pyproject.toml", ".git")


def _has_root_marker(path: Path) -> bool:
    return any((path / marker).exists() for marker in _ROOT_MARKERS)


@lru_cache(maxsize=1)
def repo_root() -> Path:
    """
    REPORTS_REPO_ROOT if set, else the nearest ancestor of the working
    directory (then of this file) holding pyproject.toml or .git.
    """
    explicit = os.getenv("REPORTS_REPO_ROOT")
    if explicit:
        root = Path(explicit).expanduser().resolve()
        if not root.is_dir():
            raise RuntimeError(f"REPORTS_REPO_ROOT is not a directory: {root}")
        return root

    here = Path(__file__).resolve().parent
    for start in (Path.cwd().resolve(), here):
        for candidate in (start, *start.parents):
            if _has_root_marker(candidate):
                return candidate

    # repo/src/reports_config/settings.py
    return here.parents[1]


@lru_cache(maxsize=1)
def load_env_once() -> Optional[Path]:
    """
    Load the first existing dotenv file among REPORTS_ENV_FILE,
    <root>/.env and <root>/config/.env. Variables already set win.
    """
    candidates = [repo_root() / ".env", repo_root() / "config" / ".env"]
    explicit = os.getenv("REPORTS_ENV_FILE")
    if explicit:
        candidates.insert(0, Path(explicit).expanduser())

    for path in candidates:
        if path.is_file():
            load_dotenv(dotenv_path=path, override=False)
            return path
    return None


def telemetry_dir() -> Path:
    """
    Default telemetry dir. Override with REPORTS_TELEMETRY_DIR.
    """
    p = os.getenv("REPORTS_TELEMETRY_DIR")
    if p:
        return Path(p).expanduser().resolve()
    return (repo_root() / "artifacts" / "telemetry").resolve()


@dataclass(frozen=True)
class RepoParams:
    """Repository coordinates shared by most GitHub calls."""
    owner: str
    repo: str
    branch: str = DEFAULT_BRANCH


@dataclass(frozen=True)
class ReportsConfig:
    owner: str
    repo: str
    branch: str = DEFAULT_BRANCH
    reports_path: str = DEFAULT_REPORTS_PATH
    status_file: str = ""
    token: str | None = None
    api_url: str = DEFAULT_GITHUB_API_URL

    @property
    def repo_params(self) -> RepoParams:
        return RepoParams(owner=self.owner, repo=self.repo, branch=self.branch)

    @property
    def status_file_path(self) -> str:
        if self.status_file:
            return self.status_file
        base = self.reports_path.strip("/")
        return f"{base}/{STATUS_FILE_NAME}" if base else STATUS_FILE_NAME

    def missing(self) -> list[str]:
        """Names of the settings that must be present before any GitHub call."""
        out = []
        if not self.owner:
            out.append("REPORTS_GITHUB_OWNER")
        if not self.repo:
            out.append("REPORTS_GITHUB_REPO")
        if not self.token:
            out.append("GITHUB_TOKEN")
        return out

    def public_view(self) -> dict:
        return {
            "owner": self.owner,
            "repo": self.repo,
            "branch": self.branch,
            "reports_path": self.reports_path,
            "status_file": self.status_file_path,
            "api_url": self.api_url,
            "has_token": bool(self.token),
        }


def _strip_bearer_prefix(token: str | None) -> str | None:
    if not token:
        return None
    t = token.strip()
    if t.lower().startswith("bearer "):
        return t.split(None, 1)[1].strip()
    return t or None


def load_reports_config() -> ReportsConfig:
    """
    Build the reports configuration from the environment.
    Call init_runtime() first if values live in a .env file.
    """
    token = os.getenv("REPORTS_GITHUB_TOKEN") or os.getenv("GITHUB_TOKEN")
    return ReportsConfig(
        owner=(os.getenv("REPORTS_GITHUB_OWNER") or "").strip(),
        repo=(os.getenv("REPORTS_GITHUB_REPO") or "").strip(),
        branch=(os.getenv("REPORTS_GITHUB_BRANCH") or DEFAULT_BRANCH).strip(),
        reports_path=(os.getenv("REPORTS_PATH", DEFAULT_REPORTS_PATH)).strip(),
        status_file=(os.getenv("REPORTS_STATUS_FILE") or "").strip(),
        token=_strip_bearer_prefix(token),
        api_url=(os.getenv("REPORTS_GITHUB_API_URL") or DEFAULT_GITHUB_API_URL).rstrip("/"),
    )


def configure_logging() -> None:
    """
    Configure logging explicitly. No import-time side effects.
    Idempotent: if logging is already configured, do nothing.
    """
    root = logging.getLogger()
    if root.handlers:
        return

    level_name = os.getenv("REPORTS_LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)

    fmt = os.getenv(
        "REPORTS_LOG_FORMAT",
        "%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    logging.basicConfig(level=level, format=fmt)


def init_runtime(*, configure_logs: bool = True, load_env: bool = True) -> None:
    """
    Call this from entrypoints only (servers, scripts).
    """
    if load_env:
        load_env_once()
    if configure_logs:
        configure_logging()
