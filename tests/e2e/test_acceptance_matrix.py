"""Acceptance scenarios against a mocked GitHub API."""

from __future__ import annotations

import base64
from typing import Any

import httpx
import pytest

from reposentry.config.models import AppConfig
from reposentry.errors import ContentProviderUnavailableError
from reposentry.providers.github import GitHubContentProvider
from reposentry.scanner.pipeline import SecurityScanner
from reposentry.schemas.enums import CodeIssueCategory, RiskLevel, Severity
from reposentry.schemas.report_models import SecurityReport
from reposentry.schemas.scanner_models import RepositoryCoordinate

API = "https://api.github.test"
COORDINATE = RepositoryCoordinate(owner="acme", name="widgets")
REPO = "/repos/acme/widgets"


class FakeGitHub:
    """Serves repository metadata, listings, and files like the contents API."""

    def __init__(
        self,
        files: dict[str, str],
        *,
        license_id: str | None = None,
        failing_paths: set[str] | None = None,
    ) -> None:
        self.files = files
        self.license_id = license_id
        self.failing_paths = failing_paths or set()
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path == REPO:
            license_payload = {"spdx_id": self.license_id} if self.license_id else None
            return httpx.Response(200, json={"full_name": "acme/widgets", "license": license_payload})
        prefix = f"{REPO}/contents/"
        if not path.startswith(prefix):
            return httpx.Response(404, json={"message": "Not Found"})
        rel = path[len(prefix) :]
        if rel in self.failing_paths:
            return httpx.Response(502, json={"message": "Bad Gateway"})
        if rel in self.files:
            raw = self.files[rel].encode("utf-8")
            return httpx.Response(
                200,
                json={
                    "type": "file",
                    "encoding": "base64",
                    "size": len(raw),
                    "content": base64.encodebytes(raw).decode("ascii"),
                },
            )
        return httpx.Response(200, json=self._listing(rel))

    def _listing(self, rel: str) -> list[dict[str, Any]]:
        dir_prefix = f"{rel}/" if rel else ""
        entries: dict[str, dict[str, Any]] = {}
        for file_path in sorted(self.files):
            if not file_path.startswith(dir_prefix):
                continue
            head = file_path[len(dir_prefix) :].split("/", 1)[0]
            child = f"{dir_prefix}{head}"
            if child == file_path:
                entries[child] = {
                    "path": child,
                    "name": head,
                    "type": "file",
                    "size": len(self.files[file_path].encode("utf-8")),
                }
            else:
                entries.setdefault(child, {"path": child, "name": head, "type": "dir", "size": 0})
        return list(entries.values())


def _scan(fake: FakeGitHub) -> SecurityReport:
    config = AppConfig.model_validate(
        {"github": {"api_base_url": API}, "retries": {"max_attempts": 1}}
    )
    client = httpx.Client(base_url=API, transport=httpx.MockTransport(fake))
    provider = GitHubContentProvider.from_config(config, {}, client=client)
    return SecurityScanner(provider, config=config).scan(COORDINATE)


def test_clean_repository_scores_perfect() -> None:
    """A single benign file yields 100/Low with the no-issues recommendation."""
    report = _scan(FakeGitHub({"index.js": "function add(a, b) {\n  return a + b;\n}\n"}))

    assert report.overall_score == 100
    assert report.risk_level == RiskLevel.LOW
    assert report.recommendations == ["Great job! No major security issues detected"]
    assert report.summary == (
        "Excellent security posture with minimal risks detected. 0 issues found."
    )


def test_hardcoded_password_scores_sixty_four() -> None:
    """One password literal costs 20 for the issue and 16 for the secret."""
    report = _scan(FakeGitHub({"config.js": 'const password = "supersecret123";\n'}))

    assert report.overall_score == 64
    assert report.risk_level == RiskLevel.MEDIUM
    assert len(report.findings.code_quality) == 1
    issue = report.findings.code_quality[0]
    assert issue.category == CodeIssueCategory.HARDCODED_SECRET
    assert issue.severity == Severity.CRITICAL
    assert issue.file == "config.js"
    assert issue.line == 1
    assert len(report.findings.secrets) == 1
    assert report.recommendations[0] == (
        "Remove hardcoded secrets and use environment variables or secure vaults"
    )
    assert report.summary.endswith("1 issues found.")


def test_gpl_license_scores_eighty_five() -> None:
    """A GPL-3.0 declaration alone costs 15 points."""
    report = _scan(FakeGitHub({"main.py": "print('hello')\n"}, license_id="GPL-3.0"))

    assert report.overall_score == 85
    assert report.risk_level == RiskLevel.LOW
    assert [risk.license_id for risk in report.findings.license_risks] == ["GPL-3.0"]
    assert report.findings.license_risks[0].risk_level == Severity.HIGH
    assert "Review license compatibility with your project's intended use" in (
        report.recommendations
    )


def test_agpl_license_is_critical_without_score_deduction() -> None:
    """AGPL is recognized as its own family."""
    report = _scan(FakeGitHub({"main.py": "print('hello')\n"}, license_id="AGPL-3.0"))
    assert report.findings.license_risks[0].risk_level == Severity.CRITICAL
    assert report.overall_score == 100


def test_partial_fetch_failure_still_yields_report() -> None:
    """A failing subtree and a failing file do not abort the scan."""
    fake = FakeGitHub(
        {
            "api/handlers.js": "el.innerHTML = '<p>' + name;\n",
            "lib/crypto.py": "h = sha1(data)\n",
            "lib/broken.py": "password = 'supersecret123'\n",
        },
        failing_paths={"api", "lib/broken.py"},
    )
    report = _scan(fake)

    assert [issue.rule_id for issue in report.findings.code_quality] == ["crypto-sha1"]
    assert report.findings.secrets == []
    assert report.overall_score == 94
    assert report.scan_stats.files_scanned == 1
    assert report.scan_stats.skipped_reasons.unreadable == 1


def test_unauthenticated_scan_sends_no_authorization_header() -> None:
    """No token means no Authorization header on any request."""
    fake = FakeGitHub({"index.js": "let x = 1;\n"})
    _scan(fake)
    assert fake.requests
    assert all("authorization" not in request.headers for request in fake.requests)


def test_file_budget_caps_requests() -> None:
    """No more than max_total_files file bodies are requested."""
    files = {f"src/mod_{index:02d}.py": "x = 1\n" for index in range(8)}
    fake = FakeGitHub(files)
    config = AppConfig.model_validate(
        {
            "github": {"api_base_url": API},
            "traversal": {"max_total_files": 3},
            "retries": {"max_attempts": 1},
        }
    )
    client = httpx.Client(base_url=API, transport=httpx.MockTransport(fake))
    provider = GitHubContentProvider.from_config(config, {}, client=client)
    report = SecurityScanner(provider, config=config).scan(COORDINATE)

    body_requests = [
        request for request in fake.requests if request.url.path.endswith(".py")
    ]
    assert len(body_requests) == 3
    assert report.scan_stats.total_files_seen == 3


def test_unreachable_api_raises() -> None:
    """Connection failure at the start of a scan is not a degraded report."""

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("name resolution failed", request=request)

    config = AppConfig.model_validate({"github": {"api_base_url": API}, "retries": {"max_attempts": 1}})
    client = httpx.Client(base_url=API, transport=httpx.MockTransport(handler))
    provider = GitHubContentProvider.from_config(config, {}, client=client)
    with pytest.raises(ContentProviderUnavailableError):
        SecurityScanner(provider, config=config).scan(COORDINATE)
