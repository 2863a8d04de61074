"""Artifact generation exports."""

from reposentry.artifacts.generator import (
    GeneratedArtifacts,
    build_report_markdown,
    render_report_json,
    write_artifacts,
)

__all__ = [
    "GeneratedArtifacts",
    "build_report_markdown",
    "render_report_json",
    "write_artifacts",
]
