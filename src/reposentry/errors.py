"""Exception taxonomy shared by providers, catalog, and scanner."""

from __future__ import annotations


class ContentProviderError(RuntimeError):
    """Raised when a content provider cannot fetch a listing, file, or metadata."""

    def __init__(self, message: str, *, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path


class ContentProviderUnavailableError(ContentProviderError):
    """Raised when the provider cannot be reached at all."""


class CatalogError(ValueError):
    """Raised when a detection rule cannot be compiled into the catalog."""
