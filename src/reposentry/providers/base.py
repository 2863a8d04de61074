"""Content provider contract consumed by the scanner."""

from __future__ import annotations

from typing import Iterator, Protocol

from reposentry.schemas.scanner_models import FileHandle, RepositoryCoordinate


class ContentProvider(Protocol):
    """Supplies file listings, file text, and license metadata."""

    def list_tree(self, coordinate: RepositoryCoordinate) -> Iterator[FileHandle]:
        """Yield a bounded set of handles; partial on subtree failures."""

    def read_content(self, coordinate: RepositoryCoordinate, path: str) -> str | None:
        """Return decoded text, or None when the file cannot be read as text."""

    def get_declared_license(self, coordinate: RepositoryCoordinate) -> str | None:
        """Return the repository's SPDX license id, if declared."""
