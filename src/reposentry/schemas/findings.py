"""Finding variants produced by the detector engine."""

from __future__ import annotations

from pydantic import Field, field_validator

from reposentry.schemas.base import FrozenSchemaModel
from reposentry.schemas.enums import (
    CodeIssueCategory,
    SecretCategory,
    Severity,
    normalize_severity,
)

MAX_SECRET_EXCERPT = 50
ELLIPSIS = "..."


class CodeQualityIssue(FrozenSchemaModel):
    """Vulnerable code pattern matched in a source file."""

    category: CodeIssueCategory
    severity: Severity
    description: str = Field(min_length=1)
    file: str = Field(min_length=1)
    line: int = Field(ge=1)
    matched_text: str
    recommendation: str = Field(min_length=1)
    rule_id: str = Field(min_length=1)


class SecretDetection(FrozenSchemaModel):
    """Credential-shaped literal found in a source file."""

    category: SecretCategory
    file: str = Field(min_length=1)
    line: int = Field(ge=1)
    matched_text_truncated: str = Field(
        max_length=MAX_SECRET_EXCERPT + len(ELLIPSIS)
    )
    confidence: float = Field(ge=0.0, le=1.0)
    rule_id: str = Field(min_length=1)


class LicenseRisk(FrozenSchemaModel):
    """Risk derived from the repository's declared license."""

    license_id: str = Field(min_length=1)
    risk_level: Severity
    description: str = Field(min_length=1)
    compatibility_note: str = Field(min_length=1)


class DependencyVulnerability(FrozenSchemaModel):
    """Known-vulnerable dependency; reserved for a dependency auditor."""

    ecosystem: str = Field(min_length=1)
    severity: Severity
    description: str = Field(min_length=1)
    cve: str | None = None

    @field_validator("severity", mode="before")
    @classmethod
    def normalize_severity_label(cls, value: str | Severity) -> Severity:
        return normalize_severity(value)


def truncate_excerpt(text: str, limit: int = MAX_SECRET_EXCERPT) -> str:
    """Cut matched secret text so full values are never stored."""
    if len(text) <= limit:
        return text
    return f"{text[:limit]}{ELLIPSIS}"
