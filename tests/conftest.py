"""Pytest configuration and shared fixtures."""
from __future__ import annotations

import pytest


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path):
    """Keep telemetry out of the repo and real GitHub settings out of tests."""
    monkeypatch.setenv("REPORTS_TELEMETRY_DIR", str(tmp_path / "telemetry"))
    for name in (
        "GITHUB_TOKEN",
        "REPORTS_GITHUB_TOKEN",
        "REPORTS_GITHUB_OWNER",
        "REPORTS_GITHUB_REPO",
        "REPORTS_GITHUB_BRANCH",
        "REPORTS_PATH",
        "REPORTS_STATUS_FILE",
        "REPORTS_GITHUB_API_URL",
        "REPORTS_DISABLE_TELEMETRY",
    ):
        monkeypatch.delenv(name, raising=False)
