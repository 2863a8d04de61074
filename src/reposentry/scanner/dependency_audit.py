"""Dependency vulnerability auditing seam."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol

from reposentry.schemas.findings import DependencyVulnerability
from reposentry.schemas.report_models import DependencyScanStatus
from reposentry.schemas.scanner_models import RepositoryCoordinate


@dataclass(frozen=True)
class DependencyAuditResult:
    """Outcome of a dependency audit."""

    status: DependencyScanStatus
    vulnerabilities: list[DependencyVulnerability] = field(default_factory=list)


class DependencyAuditor(Protocol):
    """Looks up known-vulnerable dependencies for a repository."""

    def audit(self, coordinate: RepositoryCoordinate) -> DependencyAuditResult:
        """Return vulnerabilities and the status of the lookup."""


class UnavailableDependencyAuditor:
    """Placeholder auditor: dependency lookups are not yet available."""

    def audit(self, coordinate: RepositoryCoordinate) -> DependencyAuditResult:
        del coordinate
        return DependencyAuditResult(status="unavailable")
