"""Content provider exports."""

from reposentry.providers.base import ContentProvider
from reposentry.providers.github import GitHubContentProvider
from reposentry.providers.local import LocalContentProvider

__all__ = ["ContentProvider", "GitHubContentProvider", "LocalContentProvider"]
