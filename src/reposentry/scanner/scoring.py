"""Deduction-based security scoring."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

from reposentry.schemas.enums import RiskLevel, Severity
from reposentry.schemas.findings import (
    CodeQualityIssue,
    DependencyVulnerability,
    LicenseRisk,
    SecretDetection,
)

BASE_SCORE = 100
MIN_SCORE = 0
MAX_SCORE = 100
SECRET_CONFIDENCE_WEIGHT = 20

DEPENDENCY_DEDUCTIONS: dict[Severity, int] = {
    Severity.CRITICAL: 25,
    Severity.HIGH: 15,
    Severity.MEDIUM: 8,
    Severity.LOW: 3,
}
CODE_ISSUE_DEDUCTIONS: dict[Severity, int] = {
    Severity.CRITICAL: 20,
    Severity.HIGH: 12,
    Severity.MEDIUM: 6,
    Severity.LOW: 2,
}
# Critical license risk carries no deduction of its own; it still drives the
# license recommendation.
LICENSE_DEDUCTIONS: dict[Severity, int] = {
    Severity.CRITICAL: 0,
    Severity.HIGH: 15,
    Severity.MEDIUM: 8,
    Severity.LOW: 3,
}


@dataclass(frozen=True)
class ScoreResult:
    """Final clamped score plus the unclamped value it came from."""

    score: int
    risk_level: RiskLevel
    raw_score: int

    @property
    def total_deduction(self) -> int:
        return BASE_SCORE - self.raw_score


def secret_deduction(confidence: float) -> int:
    return math.floor(confidence * SECRET_CONFIDENCE_WEIGHT)


def classify_risk(score: int) -> RiskLevel:
    """Map a final score onto the four-level risk scale."""
    return RiskLevel.from_score(score)


def compute_score(
    *,
    code_quality: Sequence[CodeQualityIssue] = (),
    secrets: Sequence[SecretDetection] = (),
    license_risks: Sequence[LicenseRisk] = (),
    dependency_vulns: Sequence[DependencyVulnerability] = (),
) -> ScoreResult:
    """Sum every deduction first, then clamp once to [0, 100]."""
    deduction = 0
    deduction += sum(DEPENDENCY_DEDUCTIONS[vuln.severity] for vuln in dependency_vulns)
    deduction += sum(CODE_ISSUE_DEDUCTIONS[issue.severity] for issue in code_quality)
    deduction += sum(LICENSE_DEDUCTIONS[risk.risk_level] for risk in license_risks)
    deduction += sum(secret_deduction(secret.confidence) for secret in secrets)

    raw_score = BASE_SCORE - deduction
    score = max(MIN_SCORE, min(MAX_SCORE, raw_score))
    return ScoreResult(score=score, risk_level=classify_risk(score), raw_score=raw_score)
