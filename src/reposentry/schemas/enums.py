"""Enum definitions for canonical contracts."""

from __future__ import annotations

from enum import Enum


class Severity(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"

    @property
    def rank(self) -> int:
        """Ordinal position, Low=0 through Critical=3."""
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {
    Severity.LOW: 0,
    Severity.MEDIUM: 1,
    Severity.HIGH: 2,
    Severity.CRITICAL: 3,
}


class RiskLevel(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"

    @classmethod
    def from_score(cls, score: int) -> "RiskLevel":
        """Step function over the final clamped score."""
        for threshold, level in RISK_THRESHOLDS:
            if score >= threshold:
                return level
        return cls.CRITICAL


RISK_THRESHOLDS: tuple[tuple[int, RiskLevel], ...] = (
    (80, RiskLevel.LOW),
    (60, RiskLevel.MEDIUM),
    (40, RiskLevel.HIGH),
)


class CodeIssueCategory(str, Enum):
    SQL_INJECTION = "sql_injection"
    XSS = "xss"
    HARDCODED_SECRET = "hardcoded_secret"
    INSECURE_CONFIG = "insecure_config"
    WEAK_CRYPTO = "weak_crypto"


class SecretCategory(str, Enum):
    API_KEY = "api_key"
    PASSWORD = "password"
    TOKEN = "token"
    PRIVATE_KEY = "private_key"
    DATABASE_URL = "database_url"


class FileKind(str, Enum):
    FILE = "file"
    DIRECTORY = "dir"


LEGACY_SEVERITY_MAP: dict[str, Severity] = {
    "low": Severity.LOW,
    "medium": Severity.MEDIUM,
    "moderate": Severity.MEDIUM,
    "high": Severity.HIGH,
    "critical": Severity.CRITICAL,
}


def normalize_severity(raw_value: str | Severity) -> Severity:
    """Normalize severity labels (any case, legacy aliases) into the enum."""
    if isinstance(raw_value, Severity):
        return raw_value
    normalized = LEGACY_SEVERITY_MAP.get(raw_value.strip().lower())
    if normalized is None:
        raise ValueError(f"Unsupported severity: {raw_value}")
    return normalized
