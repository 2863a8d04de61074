"""Recommendation, summary, and report assembly tests."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from reposentry.scanner.composer import (
    NO_ISSUES_RECOMMENDATION,
    build_recommendations,
    build_summary,
    compose_report,
)
from reposentry.schemas.enums import CodeIssueCategory, RiskLevel, SecretCategory, Severity
from reposentry.schemas.findings import CodeQualityIssue, LicenseRisk, SecretDetection
from reposentry.schemas.report_models import ReportFindings, SecurityReport
from reposentry.schemas.scanner_models import RepositoryCoordinate

COORDINATE = RepositoryCoordinate(owner="acme", name="widgets")


def _issue(category: CodeIssueCategory, severity: Severity = Severity.MEDIUM) -> CodeQualityIssue:
    return CodeQualityIssue(
        category=category,
        severity=severity,
        description="d",
        file="a.js",
        line=3,
        matched_text="x",
        recommendation="r",
        rule_id="rule",
    )


def test_no_findings_still_recommends_something() -> None:
    """Recommendations are never empty."""
    assert build_recommendations(ReportFindings()) == [NO_ISSUES_RECOMMENDATION]


def test_recommendations_follow_rule_order() -> None:
    """Each triggered rule contributes one message, in a fixed order."""
    findings = ReportFindings(
        code_quality=[
            _issue(CodeIssueCategory.WEAK_CRYPTO),
            _issue(CodeIssueCategory.SQL_INJECTION),
            _issue(CodeIssueCategory.XSS),
        ],
        secrets=[
            SecretDetection(
                category=SecretCategory.API_KEY,
                file="a.js",
                line=1,
                matched_text_truncated="api_key='x'",
                confidence=0.8,
                rule_id="api-key-literal",
            )
        ],
        license_risks=[
            LicenseRisk(
                license_id="GPL-3.0",
                risk_level=Severity.HIGH,
                description="d",
                compatibility_note="n",
            )
        ],
    )
    assert build_recommendations(findings) == [
        "Remove hardcoded secrets and use environment variables or secure vaults",
        "Use parameterized queries to prevent SQL injection attacks",
        "Sanitize user input and use safe DOM manipulation methods",
        "Review license compatibility with your project's intended use",
        "Update to use strong cryptographic algorithms (SHA-256, AES)",
    ]


def test_medium_license_risk_does_not_trigger_license_advice() -> None:
    """Only High or Critical license risks ask for a compatibility review."""
    findings = ReportFindings(
        license_risks=[
            LicenseRisk(
                license_id="LGPL-3.0",
                risk_level=Severity.MEDIUM,
                description="d",
                compatibility_note="n",
            )
        ]
    )
    assert build_recommendations(findings) == [NO_ISSUES_RECOMMENDATION]


def test_insecure_config_alone_gets_fallback_recommendation() -> None:
    """Categories without a dedicated rule fall back to the default message."""
    findings = ReportFindings(code_quality=[_issue(CodeIssueCategory.INSECURE_CONFIG)])
    assert build_recommendations(findings) == [NO_ISSUES_RECOMMENDATION]


@pytest.mark.parametrize(
    ("score", "prefix"),
    [
        (100, "Excellent security posture"),
        (90, "Excellent security posture"),
        (89, "Good security overall"),
        (70, "Good security overall"),
        (69, "Moderate security concerns"),
        (50, "Moderate security concerns"),
        (49, "Significant security risks"),
        (0, "Significant security risks"),
    ],
)
def test_summary_brackets(score: int, prefix: str) -> None:
    """Summary headline depends on the score bracket."""
    summary = build_summary(score, 4)
    assert summary.startswith(prefix)
    assert summary.endswith("4 issues found.")


def test_compose_report_is_consistent() -> None:
    """Composed reports carry matching score, risk, and counts."""
    findings = ReportFindings(code_quality=[_issue(CodeIssueCategory.XSS, Severity.HIGH)])
    report = compose_report(repository=COORDINATE, findings=findings)

    assert report.overall_score == 88
    assert report.risk_level == RiskLevel.LOW
    assert report.summary.endswith("1 issues found.")
    assert report.dependency_scan_status == "unavailable"
    assert report.recommendations == [
        "Sanitize user input and use safe DOM manipulation methods"
    ]


def test_report_rejects_risk_that_disagrees_with_score() -> None:
    """The report model enforces the score to risk mapping."""
    with pytest.raises(ValidationError):
        SecurityReport(
            schema_version="1.0.0",
            repository=COORDINATE,
            overall_score=95,
            risk_level=RiskLevel.HIGH,
            recommendations=[NO_ISSUES_RECOMMENDATION],
            summary="s",
            catalog_version="2024.1",
        )


def test_report_requires_recommendations() -> None:
    """An empty recommendation list is invalid."""
    with pytest.raises(ValidationError):
        SecurityReport(
            schema_version="1.0.0",
            repository=COORDINATE,
            overall_score=100,
            risk_level=RiskLevel.LOW,
            recommendations=[],
            summary="s",
            catalog_version="2024.1",
        )
