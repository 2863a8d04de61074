"""Report artifact rendering and persistence."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import orjson

from reposentry.schemas.enums import RiskLevel
from reposentry.schemas.findings import CodeQualityIssue
from reposentry.schemas.report_models import SecurityReport

JSON_ARTIFACT_NAME = "security_report.json"
MARKDOWN_ARTIFACT_NAME = "security_report.md"
MAX_CODE_ISSUES_SHOWN = 5
MAX_SECRETS_SHOWN = 3

RISK_BADGES: dict[RiskLevel, str] = {
    RiskLevel.LOW: "**SECURE** - Low security risk detected",
    RiskLevel.MEDIUM: "**CAUTION** - Medium security risk, review recommended",
    RiskLevel.HIGH: "**WARNING** - High security risk, action required",
    RiskLevel.CRITICAL: "**CRITICAL** - Severe security risks, immediate action required",
}


@dataclass(frozen=True)
class GeneratedArtifacts:
    """Generated artifact payload."""

    report: SecurityReport
    report_markdown: str
    json_path: Path
    markdown_path: Path


def render_report_json(report: SecurityReport) -> bytes:
    return orjson.dumps(report.model_dump(mode="json"), option=orjson.OPT_INDENT_2)


def build_report_markdown(report: SecurityReport) -> str:
    """Render security_report.md using fixed section ordering."""
    findings = report.findings
    stats = report.scan_stats
    lines = [
        f"# Security Analysis: {report.repository.full_name}",
        "",
        f"- Security score: **{report.overall_score}/100**",
        f"- Risk level: **{report.risk_level.value}**",
        f"- Files scanned: {stats.files_scanned} of {stats.total_files_seen}",
        f"- Dependency scan: `{report.dependency_scan_status}`",
        f"- Rule catalog: `{report.catalog_version}`",
        "",
        "## Summary",
        report.summary,
        "",
        f"## Code Security Issues ({len(findings.code_quality)})",
        _code_issue_lines(findings.code_quality),
        "",
        f"## Potential Secrets ({len(findings.secrets)})",
        _secret_lines(report),
        "",
        "## License Compliance Risks",
        _license_lines(report),
        "",
        "## Recommendations",
        "\n".join(f"- {item}" for item in report.recommendations),
        "",
        RISK_BADGES[report.risk_level],
        "",
    ]
    return "\n".join(lines)


def write_artifacts(*, output_dir: Path, report: SecurityReport) -> GeneratedArtifacts:
    """Write security_report.json and security_report.md to output directory."""
    output_dir.mkdir(parents=True, exist_ok=True)
    json_path = output_dir / JSON_ARTIFACT_NAME
    markdown_path = output_dir / MARKDOWN_ARTIFACT_NAME

    json_path.write_bytes(render_report_json(report) + b"\n")
    report_markdown = build_report_markdown(report)
    markdown_path.write_text(report_markdown, encoding="utf-8")

    return GeneratedArtifacts(
        report=report,
        report_markdown=report_markdown,
        json_path=json_path,
        markdown_path=markdown_path,
    )


def _top_code_issues(issues: list[CodeQualityIssue]) -> list[CodeQualityIssue]:
    return sorted(
        issues,
        key=lambda issue: (-issue.severity.rank, issue.file, issue.line),
    )[:MAX_CODE_ISSUES_SHOWN]


def _code_issue_lines(issues: list[CodeQualityIssue]) -> str:
    if not issues:
        return "- No code security issues detected."
    lines = [
        f"- **{issue.severity.value}** `{issue.file}:{issue.line}` - "
        f"{issue.description}: {issue.recommendation}"
        for issue in _top_code_issues(issues)
    ]
    remaining = len(issues) - MAX_CODE_ISSUES_SHOWN
    if remaining > 0:
        lines.append(f"- ... and {remaining} more issues")
    return "\n".join(lines)


def _secret_lines(report: SecurityReport) -> str:
    secrets = report.findings.secrets
    if not secrets:
        return "- No potential secrets detected."
    lines = [
        f"- `{secret.category.value}` detected in `{secret.file}:{secret.line}` "
        f"(confidence {secret.confidence:.2f})"
        for secret in secrets[:MAX_SECRETS_SHOWN]
    ]
    remaining = len(secrets) - MAX_SECRETS_SHOWN
    if remaining > 0:
        lines.append(f"- ... and {remaining} more potential secrets")
    return "\n".join(lines)


def _license_lines(report: SecurityReport) -> str:
    risks = report.findings.license_risks
    if not risks:
        return "- No license risks detected."
    return "\n".join(
        f"- {risk.license_id}: {risk.risk_level.value} risk. "
        f"{risk.description} {risk.compatibility_note}"
        for risk in risks
    )
