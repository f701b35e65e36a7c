"""
Shared HTTP plumbing for the GitHub calls: one `requests.Session` with
timeouts, retries on idempotent methods, and a log line per failure.
"""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass, field
from typing import Any, Mapping

import requests
from requests import Response
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry


logger = logging.getLogger(__name__)

RETRY_STATUSES = (429, 500, 502, 503, 504)
# PUT/DELETE on the Contents API create commits; never replay them.
RETRY_METHODS = frozenset({"HEAD", "GET", "OPTIONS"})


def _env_number(name: str, default: float, cast=float):
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return cast(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r (not a number); using %s", name, raw, default)
        return default


@dataclass(frozen=True)
class HttpClientConfig:
    connect_timeout: float = field(default_factory=lambda: _env_number("REPORTS_HTTP_CONNECT_TIMEOUT", 3.05))
    read_timeout: float = field(default_factory=lambda: _env_number("REPORTS_HTTP_READ_TIMEOUT", 20.0))
    retries: int = field(default_factory=lambda: _env_number("REPORTS_HTTP_RETRIES", 3, int))
    backoff: float = field(default_factory=lambda: _env_number("REPORTS_HTTP_BACKOFF", 0.4))
    user_agent: str = field(default_factory=lambda: os.getenv("REPORTS_HTTP_USER_AGENT", "repo-reports-mcp/0.1"))

    @property
    def timeout(self) -> tuple[float, float]:
        return (self.connect_timeout, self.read_timeout)


def _retry_policy(config: HttpClientConfig) -> Retry:
    return Retry(
        total=config.retries,
        backoff_factor=config.backoff,
        status_forcelist=RETRY_STATUSES,
        allowed_methods=RETRY_METHODS,
        respect_retry_after_header=True,
        raise_on_status=False,
    )


class HttpClient:
    """JSON-over-HTTP helper; every non-2xx answer raises `requests.HTTPError`."""

    def __init__(self, *, config: HttpClientConfig | None = None, session: requests.Session | None = None) -> None:
        self.config = config or HttpClientConfig()
        self.session = session or requests.Session()
        self.session.headers.setdefault("User-Agent", self.config.user_agent)
        if self.config.retries > 0:
            adapter = HTTPAdapter(max_retries=_retry_policy(self.config))
            self.session.mount("https://", adapter)
            self.session.mount("http://", adapter)

    def request(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str] | None = None,
        params: Mapping[str, Any] | None = None,
        json: Any | None = None,
    ) -> Response:
        started = time.perf_counter()
        try:
            resp = self.session.request(
                method=method,
                url=url,
                headers=dict(headers) if headers else None,
                params=dict(params) if params else None,
                json=json,
                timeout=self.config.timeout,
            )
            resp.raise_for_status()
        except requests.RequestException as e:
            status = getattr(e.response, "status_code", None)
            # a 404 is how GitHub says "no such file"; callers decide what it means
            log = logger.debug if status == 404 else logger.warning
            log("HTTP %s %s failed (status=%s, ms=%d): %s",
                method, url, status, (time.perf_counter() - started) * 1000, e)
            raise
        return resp

    def get_json(self, url: str, *, headers: Mapping[str, str] | None = None,
                 params: Mapping[str, Any] | None = None) -> Any:
        return self.request("GET", url, headers=headers, params=params).json()

    def put_json(self, url: str, *, headers: Mapping[str, str] | None = None, json: Any = None) -> Any:
        return self.request("PUT", url, headers=headers, json=json).json()

    def delete_json(self, url: str, *, headers: Mapping[str, str] | None = None, json: Any = None) -> Any:
        return self.request("DELETE", url, headers=headers, json=json).json()
