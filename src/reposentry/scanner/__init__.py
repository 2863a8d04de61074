"""Scanner exports."""

from reposentry.scanner.catalog import PatternCatalog, default_catalog, load_catalog
from reposentry.scanner.coordinate import parse_coordinate
from reposentry.scanner.pipeline import SecurityScanner

__all__ = [
    "PatternCatalog",
    "SecurityScanner",
    "default_catalog",
    "load_catalog",
    "parse_coordinate",
]
