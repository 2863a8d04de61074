"""GitHub REST implementation of the content provider."""

from __future__ import annotations

import base64
import binascii
import logging
from functools import partial
from typing import Any, Iterator, Mapping
from urllib.parse import quote

import httpx

from reposentry.config.loader import resolve_github_token
from reposentry.config.models import AppConfig, GitHubConfig
from reposentry.errors import ContentProviderError, ContentProviderUnavailableError
from reposentry.resilience.retry import RetryExecutor, RetryPolicy
from reposentry.scanner.ignore_policy import IgnorePolicy
from reposentry.scanner.traversal import TraversalLimits, TreeWalker
from reposentry.schemas.enums import FileKind
from reposentry.schemas.scanner_models import (
    FileHandle,
    RepositoryCoordinate,
    RepositoryMetadata,
)

LOGGER = logging.getLogger(__name__)

GITHUB_ACCEPT = "application/vnd.github.v3+json"
UNREACHABLE_ERRORS = (httpx.ConnectError, httpx.ConnectTimeout, httpx.UnsupportedProtocol)
NO_LICENSE_IDS = {"", "NOASSERTION"}


class GitHubContentProvider:
    """Fetches trees, file bodies, and license metadata from the GitHub API.

    The bearer token is optional; without it requests go out unauthenticated
    and are subject to the lower anonymous rate limit.
    """

    def __init__(
        self,
        *,
        settings: GitHubConfig | None = None,
        token: str | None = None,
        walker: TreeWalker | None = None,
        max_file_size_bytes: int = 1_000_000,
        retry: RetryExecutor | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        self.settings = settings or GitHubConfig()
        self.walker = walker or TreeWalker()
        self.max_file_size_bytes = max_file_size_bytes
        self._retry = retry or RetryExecutor(
            RetryPolicy(
                max_attempts=1,
                backoff_seconds=0.0,
                retry_on=(httpx.TransportError,),
            )
        )
        self._owns_client = client is None
        self._client = client or httpx.Client(
            base_url=self.settings.api_base_url,
            timeout=self.settings.timeout_seconds,
        )
        self._client.headers.update(build_headers(self.settings, token))

    @classmethod
    def from_config(
        cls,
        config: AppConfig,
        env: Mapping[str, str],
        *,
        client: httpx.Client | None = None,
    ) -> "GitHubContentProvider":
        """Build a provider wired to config limits, retries, and token env."""
        walker = TreeWalker(
            TraversalLimits.from_config(config.traversal),
            IgnorePolicy.from_config(config.scan_policy),
        )
        retry = RetryExecutor(
            RetryPolicy(
                max_attempts=config.retries.max_attempts,
                backoff_seconds=config.retries.backoff_seconds,
                jitter_seconds=config.retries.jitter_seconds,
                retry_on=(httpx.TransportError,),
            )
        )
        return cls(
            settings=config.github,
            token=resolve_github_token(config, env),
            walker=walker,
            max_file_size_bytes=config.scan_policy.max_file_size_bytes,
            retry=retry,
            client=client,
        )

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "GitHubContentProvider":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def get_repository(self, coordinate: RepositoryCoordinate) -> RepositoryMetadata:
        payload = self._get_json(f"/repos/{coordinate.owner}/{coordinate.name}")
        if not isinstance(payload, dict):
            raise ContentProviderError("Repository payload is not an object")
        return parse_repository(payload, coordinate)

    def get_declared_license(self, coordinate: RepositoryCoordinate) -> str | None:
        try:
            metadata = self.get_repository(coordinate)
        except ContentProviderUnavailableError:
            raise
        except ContentProviderError as exc:
            LOGGER.warning("License lookup failed for %s: %s", coordinate, exc)
            return None
        return metadata.license_spdx_id

    def list_directory(self, coordinate: RepositoryCoordinate, path: str) -> list[FileHandle]:
        payload = self._get_json(_contents_path(coordinate, path), path=path)
        if not isinstance(payload, list):
            raise ContentProviderError(f"'{path or '/'}' is not a directory", path=path)
        return parse_directory_listing(payload)

    def list_tree(self, coordinate: RepositoryCoordinate) -> Iterator[FileHandle]:
        return self.walker.walk(partial(self.list_directory, coordinate))

    def read_content(self, coordinate: RepositoryCoordinate, path: str) -> str | None:
        try:
            payload = self._get_json(_contents_path(coordinate, path), path=path)
        except ContentProviderError as exc:
            LOGGER.warning("Failed to fetch content for %s: %s", path, exc)
            return None
        if not isinstance(payload, dict):
            return None
        return decode_file_payload(payload, max_size_bytes=self.max_file_size_bytes)

    def _get_json(self, url_path: str, *, path: str | None = None) -> Any:
        try:
            response = self._retry.run(
                lambda: self._client.get(url_path),
                operation_name=f"GET {url_path}",
            )
        except UNREACHABLE_ERRORS as exc:
            raise ContentProviderUnavailableError(
                f"GitHub API unreachable: {exc}", path=path
            ) from exc
        except httpx.TransportError as exc:
            raise ContentProviderError(f"GET {url_path} failed: {exc}", path=path) from exc

        if response.status_code == 403 and response.headers.get("x-ratelimit-remaining") == "0":
            raise ContentProviderError("GitHub API rate limit exceeded", path=path)
        if response.is_error:
            raise ContentProviderError(
                f"GET {url_path} returned HTTP {response.status_code}", path=path
            )
        try:
            return response.json()
        except ValueError as exc:
            raise ContentProviderError(f"GET {url_path} returned non-JSON body", path=path) from exc


def build_headers(settings: GitHubConfig, token: str | None) -> dict[str, str]:
    headers = {"Accept": GITHUB_ACCEPT, "User-Agent": settings.user_agent}
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return headers


def parse_repository(payload: dict[str, Any], coordinate: RepositoryCoordinate) -> RepositoryMetadata:
    license_payload = payload.get("license") or {}
    spdx_id = license_payload.get("spdx_id") if isinstance(license_payload, dict) else None
    if not isinstance(spdx_id, str) or spdx_id.strip() in NO_LICENSE_IDS:
        spdx_id = None
    return RepositoryMetadata(
        full_name=payload.get("full_name") or coordinate.full_name,
        default_branch=payload.get("default_branch"),
        license_spdx_id=spdx_id,
        private=bool(payload.get("private", False)),
    )


def parse_directory_listing(payload: list[Any]) -> list[FileHandle]:
    """Convert a contents-API listing into typed handles.

    Symlinks, submodules, and malformed entries are dropped.
    """
    handles: list[FileHandle] = []
    for item in payload:
        if not isinstance(item, dict):
            continue
        entry_type = item.get("type")
        path = item.get("path")
        name = item.get("name")
        if entry_type not in {FileKind.FILE.value, FileKind.DIRECTORY.value}:
            continue
        if not path or not name:
            LOGGER.debug("Dropping malformed listing entry: %s", item)
            continue
        size = item.get("size")
        handles.append(
            FileHandle(
                path=path,
                name=name,
                kind=FileKind(entry_type),
                size_bytes=size
                if entry_type == FileKind.FILE.value and isinstance(size, int) and size >= 0
                else None,
            )
        )
    return handles


def decode_file_payload(payload: dict[str, Any], *, max_size_bytes: int) -> str | None:
    """Decode a base64 file body; None for oversize, binary, or non-UTF-8 data."""
    content = payload.get("content")
    if not content or payload.get("encoding") != "base64":
        return None
    size = payload.get("size")
    if isinstance(size, int) and size > max_size_bytes:
        return None
    try:
        raw = base64.b64decode(content)
    except (binascii.Error, ValueError):
        return None
    if len(raw) > max_size_bytes or b"\x00" in raw[:1024]:
        return None
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        return None


def _contents_path(coordinate: RepositoryCoordinate, path: str) -> str:
    return f"/repos/{coordinate.owner}/{coordinate.name}/contents/{quote(path.strip('/'))}"
