"""Filesystem-backed content provider for scanning a local checkout."""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Iterator

from reposentry.config.models import AppConfig
from reposentry.errors import ContentProviderError, ContentProviderUnavailableError
from reposentry.scanner.ignore_policy import IgnorePolicy
from reposentry.scanner.traversal import TraversalLimits, TreeWalker
from reposentry.schemas.enums import FileKind
from reposentry.schemas.scanner_models import FileHandle, RepositoryCoordinate

LOGGER = logging.getLogger(__name__)

LICENSE_FILENAMES = ("LICENSE", "LICENSE.md", "LICENSE.txt", "COPYING", "COPYING.md")
BINARY_SNIFF_BYTES = 1024

# Ordered most specific first; the first matching heading wins.
LICENSE_SIGNATURES: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"GNU AFFERO GENERAL PUBLIC LICENSE\s+Version 3", re.I), "AGPL-3.0"),
    (re.compile(r"GNU LESSER GENERAL PUBLIC LICENSE\s+Version 3", re.I), "LGPL-3.0"),
    (re.compile(r"GNU LESSER GENERAL PUBLIC LICENSE\s+Version 2\.1", re.I), "LGPL-2.1"),
    (re.compile(r"GNU GENERAL PUBLIC LICENSE\s+Version 3", re.I), "GPL-3.0"),
    (re.compile(r"GNU GENERAL PUBLIC LICENSE\s+Version 2", re.I), "GPL-2.0"),
    (re.compile(r"Creative Commons Attribution-ShareAlike", re.I), "CC-BY-SA-4.0"),
    (re.compile(r"Apache License,?\s+Version 2\.0", re.I), "Apache-2.0"),
    (re.compile(r"^\s*MIT License", re.I | re.M), "MIT"),
)


def detect_license_id(text: str) -> str | None:
    """Best-effort SPDX id from the leading text of a license file."""
    head = text[:4000]
    for pattern, spdx_id in LICENSE_SIGNATURES:
        if pattern.search(head):
            return spdx_id
    return None


class LocalContentProvider:
    """Serves a directory on disk through the content provider contract.

    The coordinate passed to each call is only used for labelling; every path
    resolves against ``root``.
    """

    def __init__(
        self,
        root: Path,
        *,
        walker: TreeWalker | None = None,
        max_file_size_bytes: int = 1_000_000,
    ) -> None:
        self.root = Path(root).expanduser().resolve()
        self.walker = walker or TreeWalker()
        self.max_file_size_bytes = max_file_size_bytes

    @classmethod
    def from_config(cls, root: Path, config: AppConfig) -> "LocalContentProvider":
        walker = TreeWalker(
            TraversalLimits.from_config(config.traversal),
            IgnorePolicy.from_config(config.scan_policy),
        )
        return cls(
            root,
            walker=walker,
            max_file_size_bytes=config.scan_policy.max_file_size_bytes,
        )

    def coordinate(self) -> RepositoryCoordinate:
        """Synthetic ``local/<dirname>`` coordinate for report labelling."""
        name = re.sub(r"[^A-Za-z0-9_.-]", "-", self.root.name) or "repository"
        return RepositoryCoordinate(owner="local", name=name)

    def get_declared_license(self, coordinate: RepositoryCoordinate) -> str | None:
        if not self.root.is_dir():
            raise ContentProviderUnavailableError(f"Invalid local path: {self.root}")
        for filename in LICENSE_FILENAMES:
            candidate = self.root / filename
            if not candidate.is_file():
                continue
            try:
                text = candidate.read_text(encoding="utf-8", errors="replace")
            except OSError as exc:
                LOGGER.warning("Cannot read %s: %s", candidate, exc)
                continue
            return detect_license_id(text)
        return None

    def list_directory(self, path: str) -> list[FileHandle]:
        directory = self._resolve(path)
        try:
            with os.scandir(directory) as iterator:
                entries = sorted(iterator, key=lambda entry: entry.name)
        except OSError as exc:
            raise ContentProviderError(f"Cannot list {path or '/'}: {exc}", path=path) from exc

        handles: list[FileHandle] = []
        for entry in entries:
            rel = f"{path.strip('/')}/{entry.name}" if path.strip("/") else entry.name
            try:
                if entry.is_symlink():
                    continue
                if entry.is_dir():
                    handles.append(FileHandle(path=rel, name=entry.name, kind=FileKind.DIRECTORY))
                elif entry.is_file():
                    handles.append(
                        FileHandle(
                            path=rel,
                            name=entry.name,
                            kind=FileKind.FILE,
                            size_bytes=entry.stat().st_size,
                        )
                    )
            except OSError as exc:
                LOGGER.debug("Skipping %s: %s", rel, exc)
        return handles

    def list_tree(self, coordinate: RepositoryCoordinate) -> Iterator[FileHandle]:
        return self.walker.walk(self.list_directory)

    def read_content(self, coordinate: RepositoryCoordinate, path: str) -> str | None:
        target = self._resolve(path)
        try:
            if target.stat().st_size > self.max_file_size_bytes:
                return None
            raw = target.read_bytes()
        except OSError as exc:
            LOGGER.warning("Failed to read %s: %s", path, exc)
            return None
        if b"\x00" in raw[:BINARY_SNIFF_BYTES]:
            return None
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError:
            return None

    def _resolve(self, path: str) -> Path:
        target = (self.root / path.strip("/")).resolve()
        if target != self.root and self.root not in target.parents:
            raise ContentProviderError(f"Path escapes repository root: {path}", path=path)
        return target
