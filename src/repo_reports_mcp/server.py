from __future__ import annotations

import logging
import os

from mcp.server.fastmcp import FastMCP

from reports_common.context import set_request_id
from reports_common.errors import BAD_REQUEST, NOT_CONFIGURED, NOT_FOUND, typed_error
from reports_common.telemetry import telemetry_recent
from reports_common.tooling import InstrumentConfig, instrument_sync_tool
from reports_config.settings import init_runtime, load_reports_config
from repo_reports_mcp.connectors.github.client import GitHubReportsClient
from repo_reports_mcp.domain.models import LIFECYCLE_STATUSES, REPORT_STATUSES
from repo_reports_mcp.domain.services import InvalidReportIdError, ReportNotFoundError, ReportsService


logger = logging.getLogger(__name__)

CORR_ID = os.getenv("REPORTS_CORR_ID")
if CORR_ID:
    set_request_id(CORR_ID)

REPORTS_CLIENT_ID = os.getenv("MCP_CLIENT_ID", "repo_reports_mcp")


def _build_service() -> tuple[ReportsService | None, dict | None]:
    # Resolved per call so a .env loaded by init_runtime() (or a test's
    # monkeypatched env) is always honored.
    cfg = load_reports_config()
    missing = cfg.missing()
    if missing:
        return None, typed_error(
            NOT_CONFIGURED,
            f"Missing configuration: {', '.join(missing)}",
            missing=missing,
        )
    client = GitHubReportsClient(cfg.token, api_url=cfg.api_url)
    return ReportsService(client, cfg), None


def _instrument(name: str):
    return instrument_sync_tool(InstrumentConfig(kind="tool", name=name, client_id=REPORTS_CLIENT_ID))


mcp = FastMCP(
    name="Repo-Reports-MCP",
    instructions="Markdown reports stored in a GitHub repository: list, read, mark read/dismissed, delete.",
)


@mcp.tool(name="healthz.v1")
@_instrument("healthz.v1")
def healthz() -> dict:
    return {"ok": True}


@mcp.tool(name="reports.config.v1")
@_instrument("reports.config.v1")
def reports_config_view() -> dict:
    """Active repository settings (the token itself is never returned)."""
    cfg = load_reports_config()
    return {**cfg.public_view(), "missing": cfg.missing()}


@mcp.tool(name="reports.list.v1")
@_instrument("reports.list.v1")
def reports_list(
    category: str | None = None,
    status: str | None = None,
    tag: str | None = None,
    lifecycle_status: str | None = None,
    limit: int | None = None,
    offset: int | None = None,
) -> dict:
    """List report summaries, newest first. All filters are optional."""
    if status and status not in REPORT_STATUSES:
        return typed_error(BAD_REQUEST, f"status must be one of: {', '.join(sorted(REPORT_STATUSES))}")
    if lifecycle_status and lifecycle_status not in LIFECYCLE_STATUSES:
        return typed_error(
            BAD_REQUEST, f"lifecycle_status must be one of: {', '.join(sorted(LIFECYCLE_STATUSES))}"
        )

    svc, err = _build_service()
    if err:
        return err

    summaries, total = svc.list_reports(
        category=category,
        status=status,
        tag=tag,
        lifecycle_status=lifecycle_status,
        limit=limit,
        offset=offset,
    )
    return {"reports": [s.to_dict() for s in summaries], "total": total}


@mcp.tool(name="reports.get.v1")
@_instrument("reports.get.v1")
def reports_get(report_id: str) -> dict:
    """Full report, including its sections."""
    svc, err = _build_service()
    if err:
        return err
    try:
        report = svc.get_report(report_id)
    except InvalidReportIdError as e:
        return typed_error(BAD_REQUEST, str(e), report_id=report_id)
    except ReportNotFoundError as e:
        return typed_error(NOT_FOUND, str(e), report_id=report_id)
    return {"report": report.to_dict()}


@mcp.tool(name="reports.status.update.v1")
@_instrument("reports.status.update.v1")
def reports_status_update(report_id: str, lifecycle_status: str) -> dict:
    """Mark a report unread, read or dismissed."""
    if lifecycle_status not in LIFECYCLE_STATUSES:
        return typed_error(
            BAD_REQUEST,
            f"lifecycle_status must be one of: {', '.join(sorted(LIFECYCLE_STATUSES))}",
            lifecycle_status=lifecycle_status,
        )

    svc, err = _build_service()
    if err:
        return err
    try:
        applied = svc.update_lifecycle_status(report_id, lifecycle_status)
    except InvalidReportIdError as e:
        return typed_error(BAD_REQUEST, str(e), report_id=report_id)
    except ReportNotFoundError as e:
        return typed_error(NOT_FOUND, str(e), report_id=report_id)
    return {"ok": True, "id": report_id, "lifecycleStatus": applied}


@mcp.tool(name="reports.delete.v1")
@_instrument("reports.delete.v1")
def reports_delete(report_id: str) -> dict:
    svc, err = _build_service()
    if err:
        return err
    try:
        svc.delete_report(report_id)
    except InvalidReportIdError as e:
        return typed_error(BAD_REQUEST, str(e), report_id=report_id)
    except ReportNotFoundError as e:
        return typed_error(NOT_FOUND, str(e), report_id=report_id)
    return {"ok": True, "id": report_id}


@mcp.tool(name="telemetry.recent.v1")
@_instrument("telemetry.recent.v1")
def telemetry_recent_tool(n: int = 50) -> dict:
    """Last N telemetry records written by this server (secrets redacted)."""
    return telemetry_recent(n=n)


def main() -> None:
    # Entry points (console_scripts) call main() directly, so we must perform
    # runtime initialization here (dotenv + logging).
    init_runtime()
    transport = os.environ.get("MCP_TRANSPORT", "stdio")
    logger.info("Starting Repo-Reports-MCP (transport=%s)", transport)
    mcp.run(transport=transport)


if __name__ == "__main__":
    main()
