from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Tuple

from reports_config.settings import ReportsConfig
from repo_reports_mcp.domain.models import (
    DEFAULT_LIFECYCLE_STATUS,
    LIFECYCLE_STATUSES,
    Report,
    ReportSummary,
)
from repo_reports_mcp.domain.ports import ReportStorePort
from repo_reports_mcp.parsing import (
    parse_lifecycle_statuses,
    parse_report,
    parse_report_summary,
    serialize_lifecycle_statuses,
    set_lifecycle_status,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 8


class ReportNotFoundError(LookupError):
    def __init__(self, report_id: str) -> None:
        super().__init__(f"Report not found: {report_id}")
        self.report_id = report_id


class InvalidReportIdError(ValueError):
    """Raised for ids that would resolve outside the reports directory."""

    def __init__(self, report_id: str) -> None:
        super().__init__(f"Invalid report id: {report_id!r}")
        self.report_id = report_id


def check_report_id(report_id: str) -> str:
    """Ids are relative paths under the reports root: no absolute, empty, dot or backslash segments."""
    if not isinstance(report_id, str) or not report_id or report_id.startswith("/") or "\\" in report_id:
        raise InvalidReportIdError(report_id)
    if any(seg in ("", ".", "..") for seg in report_id.split("/")):
        raise InvalidReportIdError(report_id)
    return report_id


class ReportsService:
    """
    Application service: composes the storage port with the report parser.
    MCP tools call this service and stay ignorant of GitHub specifics.
    Every call re-reads storage; nothing is cached.
    """

    def __init__(self,
                 store: ReportStorePort,
                 config: ReportsConfig,
                 *,
                 max_workers: int = DEFAULT_MAX_WORKERS) -> None:
        self.store = store
        self.config = config
        self.max_workers = max(1, int(max_workers))

    # ---- internal helpers -------------------------------------------------
    def _report_path(self, report_id: str) -> str:
        check_report_id(report_id)
        base = self.config.reports_path.strip("/")
        return f"{base}/{report_id}.md" if base else f"{report_id}.md"

    def _read_statuses(self) -> Tuple[dict[str, str], Optional[str]]:
        """Current status map and the status file's sha (None when the file is absent)."""
        existing = self.store.get_file_content(self.config.repo_params, self.config.status_file_path)
        if existing is None:
            return {}, None
        return parse_lifecycle_statuses(existing.content), existing.sha

    def _read_statuses_or_empty(self) -> dict[str, str]:
        try:
            return self._read_statuses()[0]
        except Exception as e:
            # Reports still load without statuses; every report shows as unread.
            logger.warning("Could not load lifecycle statuses from %s: %s", self.config.status_file_path, e)
            return {}

    def _write_statuses(self, statuses: dict[str, str], previous_sha: Optional[str], message: str) -> None:
        self.store.put_file_content(
            self.config.repo_params,
            self.config.status_file_path,
            serialize_lifecycle_statuses(statuses),
            message,
            previous_sha,
        )

    # ---- primary use cases ------------------------------------------------
    def list_reports(
        self,
        *,
        category: Optional[str] = None,
        status: Optional[str] = None,
        tag: Optional[str] = None,
        lifecycle_status: Optional[str] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> Tuple[List[ReportSummary], int]:
        """
        Summaries of every report, newest `updatedAt` first, plus the total
        count before paging. The file tree and the status file are fetched
        concurrently, then every blob; a blob that fails to load is skipped.
        """
        params = self.config.repo_params

        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            files_future = pool.submit(self.store.list_markdown_files, params, self.config.reports_path)
            statuses_future = pool.submit(self._read_statuses_or_empty)
            files = files_future.result()
            statuses = statuses_future.result()

            pending = [
                (entry, pool.submit(self.store.get_blob_content, params.owner, params.repo, entry.sha))
                for entry in files
            ]

            summaries: List[ReportSummary] = []
            for entry, future in pending:
                try:
                    raw = future.result()
                except Exception as e:
                    logger.warning("Skipping report %s: failed to fetch content: %s", entry.path, e)
                    continue
                summaries.append(parse_report_summary(raw, entry.path, self.config.reports_path, statuses))

        def _keep(s: ReportSummary) -> bool:
            if category and s.category != category:
                return False
            if status and s.status != status:
                return False
            if tag and tag not in (s.tags or []):
                return False
            if lifecycle_status and (s.lifecycle_status or DEFAULT_LIFECYCLE_STATUS) != lifecycle_status:
                return False
            return True

        matched = sorted((s for s in summaries if _keep(s)), key=lambda s: s.updated_at, reverse=True)
        total = len(matched)

        off = max(int(offset or 0), 0)
        if limit is None:
            return matched[off:], total
        lim = max(int(limit), 0)
        return matched[off: off + lim], total

    def get_report(self, report_id: str) -> Report:
        path = self._report_path(report_id)
        params = self.config.repo_params

        with ThreadPoolExecutor(max_workers=2) as pool:
            file_future = pool.submit(self.store.get_file_content, params, path)
            statuses_future = pool.submit(self._read_statuses_or_empty)
            found = file_future.result()
            statuses = statuses_future.result()

        if found is None:
            raise ReportNotFoundError(report_id)
        return parse_report(found.content, path, self.config.reports_path, statuses)

    def update_lifecycle_status(self, report_id: str, lifecycle_status: str) -> str:
        """Persist a new lifecycle status. Returns the status now in effect."""
        if lifecycle_status not in LIFECYCLE_STATUSES:
            raise ValueError(f"lifecycle_status must be one of: {', '.join(sorted(LIFECYCLE_STATUSES))}")

        if self.store.get_file_content(self.config.repo_params, self._report_path(report_id)) is None:
            raise ReportNotFoundError(report_id)

        current, sha = self._read_statuses()
        updated = set_lifecycle_status(current, report_id, lifecycle_status)
        if updated == current:
            return lifecycle_status

        self._write_statuses(updated, sha, f"Mark report {report_id} as {lifecycle_status}")
        logger.info("Report %s marked as %s", report_id, lifecycle_status)
        return lifecycle_status

    def delete_report(self, report_id: str) -> None:
        """Delete the report file and drop its lifecycle entry, if any."""
        path = self._report_path(report_id)
        found = self.store.get_file_content(self.config.repo_params, path)
        if found is None:
            raise ReportNotFoundError(report_id)

        self.store.delete_file(self.config.repo_params, path, f"Delete report {report_id}", found.sha)
        logger.info("Report %s deleted", report_id)

        current, sha = self._read_statuses()
        if report_id in current:
            updated = set_lifecycle_status(current, report_id, DEFAULT_LIFECYCLE_STATUS)
            self._write_statuses(updated, sha, f"Remove lifecycle status of deleted report {report_id}")
