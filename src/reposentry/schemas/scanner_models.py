"""Scan-input and traversal schema contracts."""

from __future__ import annotations

from pydantic import Field

from reposentry.schemas.base import FrozenSchemaModel, StrictSchemaModel
from reposentry.schemas.enums import FileKind


class RepositoryCoordinate(FrozenSchemaModel):
    """Owner/name pair identifying the scan target."""

    owner: str = Field(min_length=1, pattern=r"^[A-Za-z0-9_.-]+$")
    name: str = Field(min_length=1, pattern=r"^[A-Za-z0-9_.-]+$")

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"

    def __str__(self) -> str:
        return self.full_name


class RepositoryMetadata(FrozenSchemaModel):
    """Typed subset of the hosting service's repository payload."""

    full_name: str = Field(min_length=1)
    default_branch: str | None = None
    license_spdx_id: str | None = None
    private: bool = False


class FileHandle(FrozenSchemaModel):
    """A tree entry produced during traversal."""

    path: str = Field(min_length=1)
    name: str = Field(min_length=1)
    kind: FileKind
    size_bytes: int | None = Field(default=None, ge=0)

    @property
    def is_file(self) -> bool:
        return self.kind == FileKind.FILE


class SourceFile(FrozenSchemaModel):
    """Decoded textual body of one scanned file."""

    path: str = Field(min_length=1)
    content: str


class SkipReasons(StrictSchemaModel):
    """Reasons for file scan skips."""

    unsupported_extension: int = 0
    ignored_pathspec: int = 0
    too_large: int = 0
    unreadable: int = 0


class ScanStats(StrictSchemaModel):
    """Scan statistics for repository traversal."""

    total_files_seen: int = 0
    files_scanned: int = 0
    files_skipped: int = 0
    skipped_reasons: SkipReasons = Field(default_factory=SkipReasons)
