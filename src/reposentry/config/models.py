"""Pydantic models for central YAML configuration."""

from __future__ import annotations

from pydantic import Field, field_validator, model_validator

from reposentry.constants import SCHEMA_VERSION, USER_AGENT
from reposentry.schemas.base import StrictSchemaModel

DEFAULT_SOURCE_EXTENSIONS = [
    ".js",
    ".ts",
    ".py",
    ".java",
    ".php",
    ".rb",
    ".go",
    ".rs",
    ".cpp",
    ".c",
    ".cs",
    ".sql",
    ".yaml",
    ".yml",
    ".json",
    ".env",
]


class RetryConfig(StrictSchemaModel):
    """Retry controls for provider transport errors."""

    max_attempts: int = Field(default=2, ge=1, le=10)
    backoff_seconds: float = Field(default=0.5, ge=0.0)
    jitter_seconds: float = Field(default=0.2, ge=0.0, le=5.0)


class GitHubConfig(StrictSchemaModel):
    """GitHub REST API access settings."""

    api_base_url: str = Field(default="https://api.github.com", min_length=1)
    token_env: str = Field(default="GITHUB_TOKEN", min_length=1)
    user_agent: str = Field(default=USER_AGENT, min_length=1)
    timeout_seconds: float = Field(default=15.0, gt=0)

    @field_validator("api_base_url")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")


class TraversalConfig(StrictSchemaModel):
    """Bounds for remote tree traversal."""

    max_total_files: int = Field(default=50, gt=0)
    max_entries_per_directory: int = Field(default=10, gt=0)
    max_depth: int = Field(default=8, ge=0)


class ScanPolicyConfig(StrictSchemaModel):
    """Which traversed files get materialized and scanned."""

    source_extensions: list[str] = Field(
        default_factory=lambda: list(DEFAULT_SOURCE_EXTENSIONS)
    )
    exclude_globs: list[str] = Field(
        default_factory=lambda: [
            "node_modules/**",
            "dist/**",
            "build/**",
            "vendor/**",
            ".venv/**",
            "__pycache__/**",
            "*.min.js",
        ]
    )
    max_file_size_bytes: int = Field(default=1_000_000, gt=0)
    fetch_workers: int = Field(default=4, ge=1, le=16)

    @field_validator("source_extensions")
    @classmethod
    def normalize_extensions(cls, value: list[str]) -> list[str]:
        normalized: list[str] = []
        for extension in value:
            cleaned = extension.strip().lower()
            if not cleaned:
                continue
            if not cleaned.startswith("."):
                cleaned = f".{cleaned}"
            if cleaned not in normalized:
                normalized.append(cleaned)
        if not normalized:
            raise ValueError("source_extensions must not be empty")
        return normalized


class DetectionConfig(StrictSchemaModel):
    """Detector catalog controls."""

    rules_path: str | None = None
    secret_confidence: float = Field(default=0.8, ge=0.0, le=1.0)
    secret_confidence_overrides: dict[str, float] = Field(default_factory=dict)

    @model_validator(mode="after")
    def validate_overrides(self) -> "DetectionConfig":
        for rule_id, confidence in self.secret_confidence_overrides.items():
            if not 0.0 <= confidence <= 1.0:
                raise ValueError(
                    f"confidence override for '{rule_id}' must be within [0, 1]"
                )
        return self


class AppConfig(StrictSchemaModel):
    """Central application configuration."""

    schema_version: str = Field(default=SCHEMA_VERSION, min_length=1)
    github: GitHubConfig = Field(default_factory=GitHubConfig)
    traversal: TraversalConfig = Field(default_factory=TraversalConfig)
    scan_policy: ScanPolicyConfig = Field(default_factory=ScanPolicyConfig)
    detection: DetectionConfig = Field(default_factory=DetectionConfig)
    retries: RetryConfig = Field(default_factory=RetryConfig)
