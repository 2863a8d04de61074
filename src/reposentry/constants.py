"""Package-wide constants."""

from __future__ import annotations

PACKAGE_VERSION = "0.3.0"
SCHEMA_VERSION = "1.0.0"
CATALOG_VERSION = "2024.1"
USER_AGENT = f"RepoSentry-Security-Scanner/{PACKAGE_VERSION}"
