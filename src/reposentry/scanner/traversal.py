"""Bounded tree traversal over a directory-listing callable."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterator

from reposentry.config.models import TraversalConfig
from reposentry.errors import ContentProviderError
from reposentry.scanner.ignore_policy import IgnorePolicy
from reposentry.schemas.enums import FileKind
from reposentry.schemas.scanner_models import FileHandle

LOGGER = logging.getLogger(__name__)

ListDirectory = Callable[[str], list[FileHandle]]


@dataclass(frozen=True)
class TraversalLimits:
    """Caps that keep traversal inside remote API quotas."""

    max_total_files: int = 50
    max_entries_per_directory: int = 10
    max_depth: int = 8

    @classmethod
    def from_config(cls, config: TraversalConfig) -> "TraversalLimits":
        return cls(
            max_total_files=config.max_total_files,
            max_entries_per_directory=config.max_entries_per_directory,
            max_depth=config.max_depth,
        )


class _Budget:
    def __init__(self, limit: int) -> None:
        self.limit = limit
        self.used = 0

    @property
    def exhausted(self) -> bool:
        return self.used >= self.limit


class TreeWalker:
    """Depth-first walk yielding file handles under the configured caps.

    Only the first ``max_entries_per_directory`` entries of each listing are
    considered. Subdirectories are entered only while the running file total
    is below ``max_total_files``. A listing failure drops that subtree and the
    walk continues with its siblings.
    """

    def __init__(
        self,
        limits: TraversalLimits | None = None,
        ignore_policy: IgnorePolicy | None = None,
    ) -> None:
        self.limits = limits or TraversalLimits()
        self.ignore_policy = ignore_policy or IgnorePolicy.permissive()

    def walk(self, list_directory: ListDirectory, root: str = "") -> Iterator[FileHandle]:
        budget = _Budget(self.limits.max_total_files)
        yield from self._walk_directory(list_directory, root, depth=0, budget=budget)

    def _walk_directory(
        self,
        list_directory: ListDirectory,
        path: str,
        *,
        depth: int,
        budget: _Budget,
    ) -> Iterator[FileHandle]:
        try:
            entries = list_directory(path)
        except ContentProviderError as exc:
            LOGGER.warning("Skipping subtree '%s': %s", path or "/", exc)
            return

        for entry in entries[: self.limits.max_entries_per_directory]:
            if budget.exhausted:
                return
            is_dir = entry.kind == FileKind.DIRECTORY
            if self.ignore_policy.should_skip(entry.path, is_dir=is_dir):
                LOGGER.debug("Ignoring %s", entry.path)
                continue
            if not is_dir:
                budget.used += 1
                yield entry
                continue
            if depth >= self.limits.max_depth:
                LOGGER.debug("Depth limit reached at %s", entry.path)
                continue
            yield from self._walk_directory(
                list_directory, entry.path, depth=depth + 1, budget=budget
            )
