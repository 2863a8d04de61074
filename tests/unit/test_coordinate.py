"""Repository reference parsing tests."""

from __future__ import annotations

import pytest

from reposentry.scanner.coordinate import parse_coordinate


@pytest.mark.parametrize(
    "reference",
    [
        "acme/widgets",
        "https://github.com/acme/widgets",
        "https://github.com/acme/widgets.git",
        "https://github.com/acme/widgets/",
        "git@github.com:acme/widgets.git",
        "  acme/widgets  ",
    ],
)
def test_supported_references_resolve_to_owner_and_name(reference: str) -> None:
    """Short form, https URLs, and SSH remotes all parse."""
    coordinate = parse_coordinate(reference)
    assert coordinate.owner == "acme"
    assert coordinate.name == "widgets"
    assert str(coordinate) == "acme/widgets"


@pytest.mark.parametrize("reference", ["", "widgets", "https://gitlab.com/acme/widgets"])
def test_unsupported_references_are_rejected(reference: str) -> None:
    """Anything that is not a GitHub repository raises ValueError."""
    with pytest.raises(ValueError):
        parse_coordinate(reference)
