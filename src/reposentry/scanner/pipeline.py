"""End-to-end security scan of one repository."""

from __future__ import annotations

import logging
from functools import partial
from pathlib import Path
from typing import Iterable, Iterator

from reposentry.config.models import AppConfig
from reposentry.errors import ContentProviderError, ContentProviderUnavailableError
from reposentry.providers.base import ContentProvider
from reposentry.scanner.catalog import PatternCatalog, load_catalog
from reposentry.scanner.composer import compose_report
from reposentry.scanner.dependency_audit import (
    DependencyAuditor,
    DependencyAuditResult,
    UnavailableDependencyAuditor,
)
from reposentry.scanner.detectors import DetectorEngine
from reposentry.scanner.ignore_policy import IgnorePolicy
from reposentry.scanner.inventory import InventoryEngine
from reposentry.schemas.findings import CodeQualityIssue, LicenseRisk, SecretDetection
from reposentry.schemas.report_models import ReportFindings, SecurityReport
from reposentry.schemas.scanner_models import FileHandle, RepositoryCoordinate

LOGGER = logging.getLogger(__name__)


def catalog_from_config(config: AppConfig) -> PatternCatalog:
    rules_path = config.detection.rules_path
    return load_catalog(
        Path(rules_path) if rules_path else None,
        default_confidence=config.detection.secret_confidence,
        confidence_overrides=config.detection.secret_confidence_overrides,
    )


class SecurityScanner:
    """Runs license lookup, traversal, detection, and scoring for a repository.

    Only an unreachable provider during the initial license lookup aborts a
    scan. Every later provider failure shrinks the set of scanned files and
    is reflected in the report's scan stats.
    """

    def __init__(
        self,
        provider: ContentProvider,
        *,
        config: AppConfig | None = None,
        catalog: PatternCatalog | None = None,
        dependency_auditor: DependencyAuditor | None = None,
    ) -> None:
        self.provider = provider
        self.config = config or AppConfig()
        self.catalog = catalog or catalog_from_config(self.config)
        self.detectors = DetectorEngine(self.catalog)
        self.inventory = InventoryEngine(
            IgnorePolicy.from_config(self.config.scan_policy),
            self.config.scan_policy,
        )
        self.dependency_auditor = dependency_auditor or UnavailableDependencyAuditor()

    def scan(self, coordinate: RepositoryCoordinate) -> SecurityReport:
        """Scan ``coordinate`` and return its scored report."""
        LOGGER.info("Scanning %s", coordinate)
        license_risks = self._assess_license(coordinate)

        handles = _guarded(self.provider.list_tree(coordinate), coordinate)
        inventory = self.inventory.collect(
            handles, partial(self.provider.read_content, coordinate)
        )
        LOGGER.info(
            "Fetched %d of %d files from %s",
            inventory.stats.files_scanned,
            inventory.stats.total_files_seen,
            coordinate,
        )

        code_quality: list[CodeQualityIssue] = []
        secrets: list[SecretDetection] = []
        for source in inventory.files:
            file_findings = self.detectors.scan_file(source)
            code_quality.extend(file_findings.code_quality)
            secrets.extend(file_findings.secrets)

        audit = self._audit_dependencies(coordinate)
        findings = ReportFindings(
            code_quality=code_quality,
            secrets=secrets,
            license_risks=license_risks,
            dependency_vulns=audit.vulnerabilities,
        )
        report = compose_report(
            repository=coordinate,
            findings=findings,
            scan_stats=inventory.stats,
            dependency_scan_status=audit.status,
            catalog_version=self.catalog.version,
        )
        LOGGER.info(
            "Scan of %s finished: score=%d risk=%s",
            coordinate,
            report.overall_score,
            report.risk_level.value,
        )
        return report

    def _assess_license(self, coordinate: RepositoryCoordinate) -> list[LicenseRisk]:
        try:
            license_id = self.provider.get_declared_license(coordinate)
        except ContentProviderUnavailableError:
            raise
        except ContentProviderError as exc:
            LOGGER.warning("Declared license unavailable for %s: %s", coordinate, exc)
            return []
        risk = self.detectors.assess_license(license_id)
        return [risk] if risk is not None else []

    def _audit_dependencies(self, coordinate: RepositoryCoordinate) -> DependencyAuditResult:
        try:
            return self.dependency_auditor.audit(coordinate)
        except ContentProviderError as exc:
            LOGGER.warning("Dependency audit failed for %s: %s", coordinate, exc)
            return DependencyAuditResult(status="failed")


def _guarded(
    handles: Iterable[FileHandle], coordinate: RepositoryCoordinate
) -> Iterator[FileHandle]:
    """Stop enumeration quietly if the provider fails mid-iteration."""
    try:
        yield from handles
    except ContentProviderError as exc:
        LOGGER.warning("Traversal of %s stopped early: %s", coordinate, exc)
