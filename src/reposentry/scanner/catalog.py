"""Versioned detection rule tables and their compiled catalog."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Mapping

import yaml
from pydantic import Field, ValidationError, field_validator

from reposentry.constants import CATALOG_VERSION
from reposentry.errors import CatalogError
from reposentry.schemas.base import StrictSchemaModel
from reposentry.schemas.enums import (
    CodeIssueCategory,
    SecretCategory,
    Severity,
    normalize_severity,
)

DEFAULT_SECRET_CONFIDENCE = 0.8


class VulnerabilityRule(StrictSchemaModel):
    """Regex rule producing code-quality issues."""

    id: str = Field(min_length=1)
    category: CodeIssueCategory
    severity: Severity
    pattern: str = Field(min_length=1)

    @field_validator("severity", mode="before")
    @classmethod
    def normalize_rule_severity(cls, value: str | Severity) -> Severity:
        return normalize_severity(value)


class SecretRule(StrictSchemaModel):
    """Regex rule producing secret detections."""

    id: str = Field(min_length=1)
    category: SecretCategory
    pattern: str = Field(min_length=1)
    confidence: float | None = Field(default=None, ge=0.0, le=1.0)


class LicenseRule(StrictSchemaModel):
    """Risky license family, matched by substring of the SPDX id."""

    name: str = Field(min_length=1)
    risk: Severity
    description: str = Field(min_length=1)

    @field_validator("risk", mode="before")
    @classmethod
    def normalize_rule_risk(cls, value: str | Severity) -> Severity:
        return normalize_severity(value)


DEFAULT_VULNERABILITY_RULES: tuple[VulnerabilityRule, ...] = (
    VulnerabilityRule(
        id="sql-concat-query",
        category=CodeIssueCategory.SQL_INJECTION,
        severity=Severity.HIGH,
        pattern=r"query\s*\+\s*['\"]",
    ),
    VulnerabilityRule(
        id="sql-execute-literal",
        category=CodeIssueCategory.SQL_INJECTION,
        severity=Severity.HIGH,
        pattern=r"execute\s*\(\s*['\"]",
    ),
    VulnerabilityRule(
        id="sql-template-query",
        category=CodeIssueCategory.SQL_INJECTION,
        severity=Severity.MEDIUM,
        pattern=r"\$\{.*\}.*query",
    ),
    VulnerabilityRule(
        id="xss-innerhtml-concat",
        category=CodeIssueCategory.XSS,
        severity=Severity.MEDIUM,
        pattern=r"innerHTML\s*=\s*.*\+",
    ),
    VulnerabilityRule(
        id="xss-document-write",
        category=CodeIssueCategory.XSS,
        severity=Severity.MEDIUM,
        pattern=r"document\.write\s*\(",
    ),
    VulnerabilityRule(
        id="xss-eval",
        category=CodeIssueCategory.XSS,
        severity=Severity.HIGH,
        pattern=r"\beval\s*\(",
    ),
    VulnerabilityRule(
        id="secret-password",
        category=CodeIssueCategory.HARDCODED_SECRET,
        severity=Severity.CRITICAL,
        pattern=r"password\s*[=:]\s*['\"][^'\"\s]{8,}",
    ),
    VulnerabilityRule(
        id="secret-api-key",
        category=CodeIssueCategory.HARDCODED_SECRET,
        severity=Severity.CRITICAL,
        pattern=r"api[_-]?key\s*[=:]\s*['\"][^'\"\s]{10,}",
    ),
    VulnerabilityRule(
        id="secret-generic",
        category=CodeIssueCategory.HARDCODED_SECRET,
        severity=Severity.HIGH,
        pattern=r"secret\s*[=:]\s*['\"][^'\"\s]{8,}",
    ),
    VulnerabilityRule(
        id="secret-token",
        category=CodeIssueCategory.HARDCODED_SECRET,
        severity=Severity.HIGH,
        pattern=r"token\s*[=:]\s*['\"][^'\"\s]{10,}",
    ),
    VulnerabilityRule(
        id="config-ssl-disabled",
        category=CodeIssueCategory.INSECURE_CONFIG,
        severity=Severity.MEDIUM,
        pattern=r"ssl:\s*false",
    ),
    VulnerabilityRule(
        id="config-verify-disabled",
        category=CodeIssueCategory.INSECURE_CONFIG,
        severity=Severity.MEDIUM,
        pattern=r"verify:\s*false",
    ),
    VulnerabilityRule(
        id="config-ignore-ssl",
        category=CodeIssueCategory.INSECURE_CONFIG,
        severity=Severity.MEDIUM,
        pattern=r"ignore[-_]ssl",
    ),
    VulnerabilityRule(
        id="crypto-md5",
        category=CodeIssueCategory.WEAK_CRYPTO,
        severity=Severity.MEDIUM,
        pattern=r"\bmd5\s*\(",
    ),
    VulnerabilityRule(
        id="crypto-sha1",
        category=CodeIssueCategory.WEAK_CRYPTO,
        severity=Severity.MEDIUM,
        pattern=r"\bsha1\s*\(",
    ),
    VulnerabilityRule(
        id="crypto-des",
        category=CodeIssueCategory.WEAK_CRYPTO,
        severity=Severity.HIGH,
        pattern=r"\bdes\s*\(",
    ),
)

DEFAULT_SECRET_RULES: tuple[SecretRule, ...] = (
    SecretRule(
        id="api-key-literal",
        category=SecretCategory.API_KEY,
        pattern=r"(?:api[_-]?key|apikey)\s*[=:]\s*['\"]([a-zA-Z0-9]{20,})['\"]",
    ),
    SecretRule(
        id="password-literal",
        category=SecretCategory.PASSWORD,
        pattern=r"(?:password|pwd)\s*[=:]\s*['\"]([^'\"]{8,})['\"]",
    ),
    SecretRule(
        id="token-literal",
        category=SecretCategory.TOKEN,
        pattern=r"(?:token|access[_-]?token)\s*[=:]\s*['\"]([a-zA-Z0-9]{15,})['\"]",
    ),
    SecretRule(
        id="pem-private-key",
        category=SecretCategory.PRIVATE_KEY,
        pattern=r"-----BEGIN\s+(?:RSA\s+)?PRIVATE\s+KEY-----",
    ),
    SecretRule(
        id="database-url",
        category=SecretCategory.DATABASE_URL,
        pattern=r"(?:database[_-]?url|db[_-]?url)\s*[=:]\s*['\"]([^'\"]+)['\"]",
    ),
)

COPYLEFT_DESCRIPTION = "Copyleft license requiring derivative works to be GPL"
WEAK_COPYLEFT_DESCRIPTION = "Limited copyleft, linking restrictions"
DEFAULT_LICENSE_RULES: tuple[LicenseRule, ...] = (
    LicenseRule(name="GPL-3.0", risk=Severity.HIGH, description=COPYLEFT_DESCRIPTION),
    LicenseRule(name="GPL-2.0", risk=Severity.HIGH, description=COPYLEFT_DESCRIPTION),
    LicenseRule(
        name="AGPL-3.0",
        risk=Severity.CRITICAL,
        description="Network copyleft, affects SaaS applications",
    ),
    LicenseRule(name="LGPL-3.0", risk=Severity.MEDIUM, description=WEAK_COPYLEFT_DESCRIPTION),
    LicenseRule(name="LGPL-2.1", risk=Severity.MEDIUM, description=WEAK_COPYLEFT_DESCRIPTION),
    LicenseRule(
        name="CC-BY-SA",
        risk=Severity.MEDIUM,
        description="Share-alike requirement for modifications",
    ),
)

CATEGORY_GUIDANCE: dict[CodeIssueCategory, tuple[str, str]] = {
    CodeIssueCategory.SQL_INJECTION: (
        "Potential SQL injection vulnerability detected",
        "Use parameterized queries or prepared statements",
    ),
    CodeIssueCategory.XSS: (
        "Cross-site scripting (XSS) vulnerability detected",
        "Sanitize user input and use safe DOM methods",
    ),
    CodeIssueCategory.HARDCODED_SECRET: (
        "Hardcoded secret or credential found",
        "Move secrets to environment variables or secure vault",
    ),
    CodeIssueCategory.INSECURE_CONFIG: (
        "Insecure configuration detected",
        "Enable secure configuration options",
    ),
    CodeIssueCategory.WEAK_CRYPTO: (
        "Weak cryptographic algorithm in use",
        "Upgrade to stronger cryptographic algorithms",
    ),
}

LICENSE_COMPATIBILITY: dict[Severity, str] = {
    Severity.CRITICAL: "Incompatible with most commercial projects",
    Severity.HIGH: "Limited commercial compatibility",
    Severity.MEDIUM: "Some restrictions may apply",
    Severity.LOW: "Generally compatible",
}


@dataclass(frozen=True)
class CompiledVulnerabilityRule:
    """Vulnerability rule with its compiled regex."""

    rule: VulnerabilityRule
    regex: re.Pattern[str]


@dataclass(frozen=True)
class CompiledSecretRule:
    """Secret rule with its compiled regex and resolved confidence."""

    rule: SecretRule
    regex: re.Pattern[str]
    confidence: float


@dataclass(frozen=True)
class PatternCatalog:
    """Immutable, compiled rule set shared by every scan."""

    version: str
    vulnerability_rules: tuple[CompiledVulnerabilityRule, ...]
    secret_rules: tuple[CompiledSecretRule, ...]
    license_rules: tuple[LicenseRule, ...]

    @classmethod
    def build(
        cls,
        *,
        vulnerability_rules: Iterable[VulnerabilityRule],
        secret_rules: Iterable[SecretRule],
        license_rules: Iterable[LicenseRule],
        version: str = CATALOG_VERSION,
        default_confidence: float = DEFAULT_SECRET_CONFIDENCE,
        confidence_overrides: Mapping[str, float] | None = None,
    ) -> "PatternCatalog":
        """Compile rules, failing fast on any malformed entry."""
        overrides = dict(confidence_overrides or {})
        vuln_rules = tuple(vulnerability_rules)
        sec_rules = tuple(secret_rules)
        _ensure_unique_ids([rule.id for rule in vuln_rules], "vulnerability")
        _ensure_unique_ids([rule.id for rule in sec_rules], "secret")
        unknown = sorted(set(overrides) - {rule.id for rule in sec_rules})
        if unknown:
            raise CatalogError(
                f"Confidence overrides reference unknown secret rules: {', '.join(unknown)}"
            )

        compiled_vulns = tuple(
            CompiledVulnerabilityRule(rule=rule, regex=_compile(rule.id, rule.pattern))
            for rule in vuln_rules
        )
        compiled_secrets: list[CompiledSecretRule] = []
        for rule in sec_rules:
            confidence = overrides.get(rule.id, rule.confidence)
            if confidence is None:
                confidence = default_confidence
            compiled_secrets.append(
                CompiledSecretRule(
                    rule=rule,
                    regex=_compile(rule.id, rule.pattern),
                    confidence=confidence,
                )
            )
        return cls(
            version=version,
            vulnerability_rules=compiled_vulns,
            secret_rules=tuple(compiled_secrets),
            license_rules=tuple(license_rules),
        )

    def match_license(self, license_id: str) -> LicenseRule | None:
        """Return the most specific risky-license rule contained in the id."""
        lowered = license_id.strip().lower()
        if not lowered:
            return None
        candidates = [
            rule for rule in self.license_rules if rule.name.lower() in lowered
        ]
        if not candidates:
            return None
        return max(candidates, key=lambda rule: len(rule.name))


def default_catalog(
    *,
    default_confidence: float = DEFAULT_SECRET_CONFIDENCE,
    confidence_overrides: Mapping[str, float] | None = None,
) -> PatternCatalog:
    """Compile the built-in rule tables."""
    return PatternCatalog.build(
        vulnerability_rules=DEFAULT_VULNERABILITY_RULES,
        secret_rules=DEFAULT_SECRET_RULES,
        license_rules=DEFAULT_LICENSE_RULES,
        default_confidence=default_confidence,
        confidence_overrides=confidence_overrides,
    )


def load_catalog(
    rules_path: Path | None = None,
    *,
    default_confidence: float = DEFAULT_SECRET_CONFIDENCE,
    confidence_overrides: Mapping[str, float] | None = None,
) -> PatternCatalog:
    """Build the catalog, optionally extending or replacing it from YAML.

    The YAML document may define ``vulnerability_rules``, ``secret_rules`` and
    ``license_rules`` lists plus ``version`` and ``replace_defaults``. Custom
    rules are appended after the defaults unless ``replace_defaults`` is true.
    """
    if rules_path is None:
        return default_catalog(
            default_confidence=default_confidence,
            confidence_overrides=confidence_overrides,
        )

    payload = _load_rules_yaml(rules_path)
    replace_defaults = bool(payload.get("replace_defaults", False))
    try:
        custom_vulns = [
            VulnerabilityRule.model_validate(item)
            for item in payload.get("vulnerability_rules") or []
        ]
        custom_secrets = [
            SecretRule.model_validate(item) for item in payload.get("secret_rules") or []
        ]
        custom_licenses = [
            LicenseRule.model_validate(item)
            for item in payload.get("license_rules") or []
        ]
    except ValidationError as exc:
        raise CatalogError(f"Invalid rule in {rules_path}: {exc}") from exc

    base_vulns: tuple[VulnerabilityRule, ...] = ()
    base_secrets: tuple[SecretRule, ...] = ()
    base_licenses: tuple[LicenseRule, ...] = ()
    if not replace_defaults:
        base_vulns = DEFAULT_VULNERABILITY_RULES
        base_secrets = DEFAULT_SECRET_RULES
        base_licenses = DEFAULT_LICENSE_RULES

    version = str(payload.get("version") or f"{CATALOG_VERSION}+custom")
    return PatternCatalog.build(
        vulnerability_rules=[*base_vulns, *custom_vulns],
        secret_rules=[*base_secrets, *custom_secrets],
        license_rules=[*base_licenses, *custom_licenses],
        version=version,
        default_confidence=default_confidence,
        confidence_overrides=confidence_overrides,
    )


def _load_rules_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise CatalogError(f"Rules file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise CatalogError(f"Rules file is not valid YAML: {path}") from exc
    if not isinstance(data, dict):
        raise CatalogError("Rules file must deserialize to a mapping")
    return data


def _compile(rule_id: str, pattern: str) -> re.Pattern[str]:
    try:
        regex = re.compile(pattern, re.IGNORECASE)
    except re.error as exc:
        raise CatalogError(f"Rule '{rule_id}' has an invalid pattern: {exc}") from exc
    if regex.fullmatch("") is not None:
        raise CatalogError(f"Rule '{rule_id}' matches the empty string")
    return regex


def _ensure_unique_ids(rule_ids: list[str], kind: str) -> None:
    seen: set[str] = set()
    for rule_id in rule_ids:
        if rule_id in seen:
            raise CatalogError(f"Duplicate {kind} rule id: {rule_id}")
        seen.add(rule_id)
