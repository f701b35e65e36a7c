import json

import pytest

import repo_reports_mcp.server as server
from tests.helpers.fake_store import STATUS_PATH, FakeStore, sample_files


@pytest.fixture
def store(monkeypatch):
    fake = FakeStore(sample_files())
    monkeypatch.setenv("REPORTS_GITHUB_OWNER", "acme")
    monkeypatch.setenv("REPORTS_GITHUB_REPO", "ops")
    monkeypatch.setenv("GITHUB_TOKEN", "tkn")
    monkeypatch.setattr(server, "GitHubReportsClient", lambda token, api_url: fake)
    return fake


def test_healthz():
    assert server.healthz()["ok"] is True


def test_tools_report_not_configured_without_env():
    out = server.reports_list()
    assert out["error"]["code"] == "not_configured"
    assert "GITHUB_TOKEN" in out["missing"]


def test_config_tool_never_returns_token(store):
    out = server.reports_config_view()
    assert out["has_token"] is True
    assert out["missing"] == []
    assert "tkn" not in json.dumps(out)


def test_list_tool(store):
    out = server.reports_list(limit=2)
    assert out["total"] == 3
    assert [r["id"] for r in out["reports"]] == ["farm/thing", "security/audit"]
    assert out["reports"][1]["lifecycleStatus"] == "dismissed"
    assert "sections" not in out["reports"][0]
    assert "corr_id" in out


def test_list_tool_rejects_unknown_filters(store):
    assert server.reports_list(status="green")["error"]["code"] == "bad_request"
    assert server.reports_list(lifecycle_status="archived")["error"]["code"] == "bad_request"


def test_get_tool(store):
    out = server.reports_get("check")
    report = out["report"]
    assert report["title"] == "Check"
    assert report["status"] == "passing"
    assert report["sections"] == [{"type": "markdown", "content": "Body of Check"}]


def test_get_tool_not_found(store):
    out = server.reports_get("nope")
    assert out["error"]["code"] == "not_found"
    assert out["report_id"] == "nope"


def test_status_update_tool(store):
    out = server.reports_status_update("farm/thing", "dismissed")
    assert out == {"ok": True, "id": "farm/thing", "lifecycleStatus": "dismissed", "corr_id": out["corr_id"]}
    assert json.loads(store.files[STATUS_PATH])["farm/thing"] == "dismissed"


def test_status_update_tool_bad_value(store):
    out = server.reports_status_update("check", "archived")
    assert out["error"]["code"] == "bad_request"
    assert store.writes == []


def test_delete_tool_rejects_ids_outside_reports_root(store):
    store.files["README.md"] = "# repo readme\n"

    out = server.reports_delete("../README")

    assert out["error"]["code"] == "bad_request"
    assert out["report_id"] == "../README"
    assert store.deletes == []
    assert "README.md" in store.files


def test_get_tool_rejects_ids_outside_reports_root(store):
    assert server.reports_get("../README")["error"]["code"] == "bad_request"
    assert server.reports_status_update("../README", "read")["error"]["code"] == "bad_request"
    assert store.writes == []


def test_delete_tool(store):
    assert server.reports_delete("check")["ok"] is True
    assert "reports/check.md" not in store.files
    assert server.reports_delete("check")["error"]["code"] == "not_found"


def test_upstream_failure_becomes_internal_error(store, monkeypatch):
    def boom(params, prefix):
        raise RuntimeError("github down")

    monkeypatch.setattr(store, "list_markdown_files", boom)
    out = server.reports_list()
    assert out["error"] == {"code": "internal", "message": "github down"}


@pytest.mark.asyncio
async def test_tools_are_registered():
    names = {t.name for t in await server.mcp.list_tools()}
    assert {
        "healthz.v1",
        "reports.config.v1",
        "reports.list.v1",
        "reports.get.v1",
        "reports.status.update.v1",
        "reports.delete.v1",
        "telemetry.recent.v1",
    } <= names
