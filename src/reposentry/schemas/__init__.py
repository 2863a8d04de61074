"""Schema contract exports."""

from reposentry.schemas.enums import (
    CodeIssueCategory,
    FileKind,
    RiskLevel,
    SecretCategory,
    Severity,
)
from reposentry.schemas.findings import (
    CodeQualityIssue,
    DependencyVulnerability,
    LicenseRisk,
    SecretDetection,
)
from reposentry.schemas.report_models import ReportFindings, SecurityReport
from reposentry.schemas.scanner_models import (
    FileHandle,
    RepositoryCoordinate,
    RepositoryMetadata,
    ScanStats,
    SourceFile,
)

__all__ = [
    "CodeIssueCategory",
    "CodeQualityIssue",
    "DependencyVulnerability",
    "FileHandle",
    "FileKind",
    "LicenseRisk",
    "ReportFindings",
    "RepositoryCoordinate",
    "RepositoryMetadata",
    "RiskLevel",
    "ScanStats",
    "SecretCategory",
    "SecretDetection",
    "SecurityReport",
    "Severity",
    "SourceFile",
]
