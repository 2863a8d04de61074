"""Materializes scannable source files from traversed handles."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Iterable

from reposentry.config.models import ScanPolicyConfig
from reposentry.errors import ContentProviderError
from reposentry.scanner.ignore_policy import IgnorePolicy
from reposentry.schemas.scanner_models import FileHandle, ScanStats, SourceFile

LOGGER = logging.getLogger(__name__)

FetchContent = Callable[[str], str | None]


@dataclass(frozen=True)
class InventoryResult:
    """Inventory result payload."""

    files: list[SourceFile]
    stats: ScanStats


def is_source_file(name: str, extensions: Iterable[str]) -> bool:
    """Case-insensitive suffix check against recognized extensions."""
    lowered = name.lower()
    return any(lowered.endswith(extension) for extension in extensions)


class InventoryEngine:
    """Filter handles and fetch each selected file's content exactly once."""

    def __init__(self, policy: IgnorePolicy, scan_policy: ScanPolicyConfig) -> None:
        self.policy = policy
        self.scan_policy = scan_policy

    def collect(
        self, handles: Iterable[FileHandle], fetch_content: FetchContent
    ) -> InventoryResult:
        stats = ScanStats()
        selected: list[FileHandle] = []

        for handle in handles:
            if not handle.is_file:
                continue
            stats.total_files_seen += 1
            if not is_source_file(handle.name, self.scan_policy.source_extensions):
                stats.files_skipped += 1
                stats.skipped_reasons.unsupported_extension += 1
                continue
            if self.policy.should_skip(handle.path):
                stats.files_skipped += 1
                stats.skipped_reasons.ignored_pathspec += 1
                continue
            if (
                handle.size_bytes is not None
                and handle.size_bytes > self.scan_policy.max_file_size_bytes
            ):
                stats.files_skipped += 1
                stats.skipped_reasons.too_large += 1
                continue
            selected.append(handle)

        contents = self._fetch_all(selected, fetch_content)
        records: list[SourceFile] = []
        for handle, content in zip(selected, contents):
            if content is None:
                stats.files_skipped += 1
                stats.skipped_reasons.unreadable += 1
                continue
            records.append(SourceFile(path=handle.path, content=content))
            stats.files_scanned += 1

        return InventoryResult(files=records, stats=stats)

    def _fetch_all(
        self, handles: list[FileHandle], fetch_content: FetchContent
    ) -> list[str | None]:
        def fetch(handle: FileHandle) -> str | None:
            try:
                return fetch_content(handle.path)
            except ContentProviderError as exc:
                LOGGER.warning("Skipping unreadable file %s: %s", handle.path, exc)
                return None

        workers = min(self.scan_policy.fetch_workers, len(handles))
        if workers <= 1:
            return [fetch(handle) for handle in handles]
        # map() keeps results in enumeration order.
        with ThreadPoolExecutor(max_workers=workers) as executor:
            return list(executor.map(fetch, handles))

