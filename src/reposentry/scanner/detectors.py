"""Regex detector passes over decoded file content."""

from __future__ import annotations

from dataclasses import dataclass, field

from reposentry.scanner.catalog import (
    CATEGORY_GUIDANCE,
    LICENSE_COMPATIBILITY,
    PatternCatalog,
)
from reposentry.schemas.findings import (
    CodeQualityIssue,
    LicenseRisk,
    SecretDetection,
    truncate_excerpt,
)
from reposentry.schemas.scanner_models import SourceFile


@dataclass(frozen=True)
class FileFindings:
    """Findings produced for a single source file."""

    code_quality: list[CodeQualityIssue] = field(default_factory=list)
    secrets: list[SecretDetection] = field(default_factory=list)


def line_number_at(content: str, offset: int) -> int:
    """1-based line of ``offset``, counting newlines before it."""
    return content.count("\n", 0, offset) + 1


class DetectorEngine:
    """Applies a pattern catalog to files and declared licenses."""

    def __init__(self, catalog: PatternCatalog) -> None:
        self.catalog = catalog

    def scan_file(self, source: SourceFile) -> FileFindings:
        """Run the vulnerability and secret passes over one file."""
        return FileFindings(
            code_quality=self.scan_vulnerabilities(source),
            secrets=self.scan_secrets(source),
        )

    def scan_vulnerabilities(self, source: SourceFile) -> list[CodeQualityIssue]:
        issues: list[CodeQualityIssue] = []
        content = source.content
        for compiled in self.catalog.vulnerability_rules:
            rule = compiled.rule
            description, recommendation = CATEGORY_GUIDANCE[rule.category]
            for match in compiled.regex.finditer(content):
                issues.append(
                    CodeQualityIssue(
                        category=rule.category,
                        severity=rule.severity,
                        description=description,
                        file=source.path,
                        line=line_number_at(content, match.start()),
                        matched_text=match.group(0),
                        recommendation=recommendation,
                        rule_id=rule.id,
                    )
                )
        return issues

    def scan_secrets(self, source: SourceFile) -> list[SecretDetection]:
        detections: list[SecretDetection] = []
        content = source.content
        for compiled in self.catalog.secret_rules:
            for match in compiled.regex.finditer(content):
                detections.append(
                    SecretDetection(
                        category=compiled.rule.category,
                        file=source.path,
                        line=line_number_at(content, match.start()),
                        matched_text_truncated=truncate_excerpt(match.group(0)),
                        confidence=compiled.confidence,
                        rule_id=compiled.rule.id,
                    )
                )
        return detections

    def assess_license(self, license_id: str | None) -> LicenseRisk | None:
        """Map a declared SPDX id onto a license risk, if it is risky."""
        if not license_id:
            return None
        rule = self.catalog.match_license(license_id)
        if rule is None:
            return None
        return LicenseRisk(
            license_id=license_id,
            risk_level=rule.risk,
            description=rule.description,
            compatibility_note=LICENSE_COMPATIBILITY[rule.risk],
        )
