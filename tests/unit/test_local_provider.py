"""Local filesystem provider tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from reposentry.errors import ContentProviderError, ContentProviderUnavailableError
from reposentry.providers.local import LocalContentProvider, detect_license_id
from reposentry.schemas.enums import FileKind


def _make_repo(root: Path) -> None:
    (root / "src").mkdir()
    (root / "src" / "app.py").write_text("print('hi')\n", encoding="utf-8")
    (root / "README.md").write_text("# demo\n", encoding="utf-8")
    (root / "logo.bin").write_bytes(b"\x00\x01\x02")


def test_listing_is_sorted_and_typed(tmp_path: Path) -> None:
    """Entries carry repository-relative POSIX paths."""
    _make_repo(tmp_path)
    provider = LocalContentProvider(tmp_path)
    handles = provider.list_directory("")
    assert [(handle.path, handle.kind) for handle in handles] == [
        ("README.md", FileKind.FILE),
        ("logo.bin", FileKind.FILE),
        ("src", FileKind.DIRECTORY),
    ]
    assert [handle.path for handle in provider.list_directory("src")] == ["src/app.py"]


def test_list_tree_walks_nested_directories(tmp_path: Path) -> None:
    """The tree walk reaches nested files."""
    _make_repo(tmp_path)
    provider = LocalContentProvider(tmp_path)
    paths = [handle.path for handle in provider.list_tree(provider.coordinate())]
    assert paths == ["README.md", "logo.bin", "src/app.py"]


def test_read_content_skips_binary_and_oversize_files(tmp_path: Path) -> None:
    """Binary and oversize files are unreadable; text decodes as UTF-8."""
    _make_repo(tmp_path)
    (tmp_path / "big.js").write_text("x" * 200, encoding="utf-8")
    provider = LocalContentProvider(tmp_path, max_file_size_bytes=100)
    coordinate = provider.coordinate()
    assert provider.read_content(coordinate, "src/app.py") == "print('hi')\n"
    assert provider.read_content(coordinate, "logo.bin") is None
    assert provider.read_content(coordinate, "big.js") is None
    assert provider.read_content(coordinate, "missing.py") is None


def test_paths_outside_root_are_rejected(tmp_path: Path) -> None:
    """Relative paths cannot escape the repository root."""
    provider = LocalContentProvider(tmp_path)
    with pytest.raises(ContentProviderError):
        provider.read_content(provider.coordinate(), "../etc/passwd")


def test_coordinate_uses_sanitized_directory_name(tmp_path: Path) -> None:
    """Local scans are labelled local/<dirname>."""
    root = tmp_path / "my repo"
    root.mkdir()
    coordinate = LocalContentProvider(root).coordinate()
    assert coordinate.owner == "local"
    assert coordinate.name == "my-repo"


def test_missing_root_is_unavailable(tmp_path: Path) -> None:
    """A root that does not exist aborts at the license lookup."""
    provider = LocalContentProvider(tmp_path / "nope")
    with pytest.raises(ContentProviderUnavailableError):
        provider.get_declared_license(provider.coordinate())


def test_declared_license_is_read_from_license_file(tmp_path: Path) -> None:
    """The LICENSE heading maps to an SPDX id."""
    (tmp_path / "LICENSE").write_text(
        "GNU AFFERO GENERAL PUBLIC LICENSE\n   Version 3, 19 November 2007\n",
        encoding="utf-8",
    )
    provider = LocalContentProvider(tmp_path)
    assert provider.get_declared_license(provider.coordinate()) == "AGPL-3.0"


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("MIT License\n\nCopyright (c) 2024", "MIT"),
        ("Apache License\nVersion 2.0, January 2004", "Apache-2.0"),
        ("GNU GENERAL PUBLIC LICENSE\nVersion 3, 29 June 2007", "GPL-3.0"),
        ("GNU GENERAL PUBLIC LICENSE\nVersion 2, June 1991", "GPL-2.0"),
        ("GNU LESSER GENERAL PUBLIC LICENSE\nVersion 2.1, February 1999", "LGPL-2.1"),
        ("Some custom terms", None),
    ],
)
def test_detect_license_id(text: str, expected: str | None) -> None:
    """License headings are recognized most specific first."""
    assert detect_license_id(text) == expected
