"""Recommendation, summary, and report assembly."""

from __future__ import annotations

from typing import Callable

from reposentry.constants import CATALOG_VERSION, SCHEMA_VERSION
from reposentry.scanner.scoring import compute_score
from reposentry.schemas.enums import CodeIssueCategory, Severity
from reposentry.schemas.report_models import (
    DependencyScanStatus,
    ReportFindings,
    SecurityReport,
)
from reposentry.schemas.scanner_models import RepositoryCoordinate, ScanStats

NO_ISSUES_RECOMMENDATION = "Great job! No major security issues detected"


def _has_category(category: CodeIssueCategory) -> Callable[[ReportFindings], bool]:
    def predicate(findings: ReportFindings) -> bool:
        return any(issue.category == category for issue in findings.code_quality)

    return predicate


def _has_severe_license_risk(findings: ReportFindings) -> bool:
    return any(
        risk.risk_level in {Severity.HIGH, Severity.CRITICAL}
        for risk in findings.license_risks
    )


RECOMMENDATION_RULES: tuple[tuple[Callable[[ReportFindings], bool], str], ...] = (
    (
        lambda findings: bool(findings.secrets),
        "Remove hardcoded secrets and use environment variables or secure vaults",
    ),
    (
        _has_category(CodeIssueCategory.SQL_INJECTION),
        "Use parameterized queries to prevent SQL injection attacks",
    ),
    (
        _has_category(CodeIssueCategory.XSS),
        "Sanitize user input and use safe DOM manipulation methods",
    ),
    (
        _has_severe_license_risk,
        "Review license compatibility with your project's intended use",
    ),
    (
        _has_category(CodeIssueCategory.WEAK_CRYPTO),
        "Update to use strong cryptographic algorithms (SHA-256, AES)",
    ),
)

SUMMARY_BRACKETS: tuple[tuple[int, str], ...] = (
    (90, "Excellent security posture with minimal risks detected."),
    (70, "Good security overall with some areas for improvement."),
    (50, "Moderate security concerns that should be addressed."),
)
SIGNIFICANT_RISK_SUMMARY = (
    "Significant security risks detected requiring immediate attention."
)


def build_recommendations(findings: ReportFindings) -> list[str]:
    """Evaluate every rule independently; never returns an empty list."""
    recommendations = [
        message for predicate, message in RECOMMENDATION_RULES if predicate(findings)
    ]
    if not recommendations:
        recommendations.append(NO_ISSUES_RECOMMENDATION)
    return recommendations


def build_summary(score: int, issue_count: int) -> str:
    headline = SIGNIFICANT_RISK_SUMMARY
    for threshold, text in SUMMARY_BRACKETS:
        if score >= threshold:
            headline = text
            break
    return f"{headline} {issue_count} issues found."


def compose_report(
    *,
    repository: RepositoryCoordinate,
    findings: ReportFindings,
    scan_stats: ScanStats | None = None,
    dependency_scan_status: DependencyScanStatus = "unavailable",
    catalog_version: str = CATALOG_VERSION,
    schema_version: str = SCHEMA_VERSION,
) -> SecurityReport:
    """Score the findings and assemble the immutable report."""
    result = compute_score(
        code_quality=findings.code_quality,
        secrets=findings.secrets,
        license_risks=findings.license_risks,
        dependency_vulns=findings.dependency_vulns,
    )
    return SecurityReport(
        schema_version=schema_version,
        repository=repository,
        overall_score=result.score,
        risk_level=result.risk_level,
        findings=findings,
        recommendations=build_recommendations(findings),
        summary=build_summary(result.score, findings.issue_count),
        scan_stats=scan_stats or ScanStats(),
        dependency_scan_status=dependency_scan_status,
        catalog_version=catalog_version,
    )
