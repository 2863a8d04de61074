"""Final security report schema."""

from __future__ import annotations

from typing import Literal

from pydantic import Field, model_validator

from reposentry.schemas.base import FrozenSchemaModel, VersionedSchemaModel
from reposentry.schemas.enums import RiskLevel
from reposentry.schemas.findings import (
    CodeQualityIssue,
    DependencyVulnerability,
    LicenseRisk,
    SecretDetection,
)
from reposentry.schemas.scanner_models import RepositoryCoordinate, ScanStats

DependencyScanStatus = Literal["completed", "failed", "unavailable"]


class ReportFindings(FrozenSchemaModel):
    """All findings gathered during one scan, grouped by variant."""

    code_quality: list[CodeQualityIssue] = Field(default_factory=list)
    secrets: list[SecretDetection] = Field(default_factory=list)
    license_risks: list[LicenseRisk] = Field(default_factory=list, max_length=1)
    dependency_vulns: list[DependencyVulnerability] = Field(default_factory=list)

    @property
    def issue_count(self) -> int:
        """Vulnerabilities plus code issues, as quoted in the summary."""
        return len(self.dependency_vulns) + len(self.code_quality)


class SecurityReport(VersionedSchemaModel):
    """Composed result of one repository scan."""

    repository: RepositoryCoordinate
    overall_score: int = Field(ge=0, le=100)
    risk_level: RiskLevel
    findings: ReportFindings = Field(default_factory=ReportFindings)
    recommendations: list[str] = Field(min_length=1)
    summary: str = Field(min_length=1)
    scan_stats: ScanStats = Field(default_factory=ScanStats)
    dependency_scan_status: DependencyScanStatus = "unavailable"
    catalog_version: str = Field(min_length=1)

    @model_validator(mode="after")
    def validate_risk_matches_score(self) -> "SecurityReport":
        expected = RiskLevel.from_score(self.overall_score)
        if self.risk_level != expected:
            raise ValueError(
                f"risk_level {self.risk_level.value} does not match score "
                f"{self.overall_score} (expected {expected.value})"
            )
        return self
