"""Exclusion rules applied to repository paths before they are listed or fetched."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Iterable

from pathspec import PathSpec

from reposentry.config.models import ScanPolicyConfig

# Vendored, generated, or tool-owned trees never hold first-party source.
HARD_EXCLUDED_SEGMENTS = frozenset(
    {
        ".git",
        ".hg",
        ".svn",
        "node_modules",
        "bower_components",
        "vendor",
        "dist",
        "build",
        ".next",
        ".venv",
        "venv",
        "site-packages",
        "__pycache__",
        ".tox",
        ".mypy_cache",
        ".pytest_cache",
        "coverage",
    }
)


@dataclass(frozen=True)
class IgnorePolicy:
    """Hard-excluded path segments plus gitignore-style exclude globs."""

    exclude_spec: PathSpec

    @classmethod
    def from_globs(cls, globs: Iterable[str]) -> "IgnorePolicy":
        return cls(exclude_spec=PathSpec.from_lines("gitwildmatch", list(globs)))

    @classmethod
    def from_config(cls, policy: ScanPolicyConfig) -> "IgnorePolicy":
        return cls.from_globs(policy.exclude_globs)

    @classmethod
    def permissive(cls) -> "IgnorePolicy":
        return cls.from_globs([])

    def should_skip(self, path: str, *, is_dir: bool = False) -> bool:
        """Return True when ``path`` must not be yielded, entered, or read."""
        rel = path.strip("/")
        if not rel:
            return False
        if not HARD_EXCLUDED_SEGMENTS.isdisjoint(PurePosixPath(rel).parts):
            return True
        if self.exclude_spec.match_file(rel):
            return True
        return is_dir and self.exclude_spec.match_file(f"{rel}/")
