"""Parsing of repository references into coordinates."""

from __future__ import annotations

import re

from reposentry.schemas.scanner_models import RepositoryCoordinate

GITHUB_REPO_PATTERN = re.compile(
    r"github\.com[:/](?P<owner>[^/\s]+)/(?P<repo>[^/\s]+?)(?:\.git)?/?$"
)
SHORT_REPO_PATTERN = re.compile(r"^(?P<owner>[A-Za-z0-9_.-]+)/(?P<repo>[A-Za-z0-9_.-]+)$")


def parse_coordinate(reference: str) -> RepositoryCoordinate:
    """Parse ``owner/name``, an https GitHub URL, or an SSH remote."""
    candidate = reference.strip()
    match = SHORT_REPO_PATTERN.match(candidate) or GITHUB_REPO_PATTERN.search(candidate)
    if not match:
        raise ValueError(f"Unsupported repository reference: {reference}")
    repo = match.group("repo")
    if repo.endswith(".git"):
        repo = repo[: -len(".git")]
    return RepositoryCoordinate(owner=match.group("owner"), name=repo)
