"""Configuration loading and override resolution."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Mapping

import yaml

from reposentry.config.models import AppConfig

DEFAULT_CONFIG_PATH = Path("config/settings.yaml")


def _load_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError("Configuration file must deserialize to a mapping")
    return data


def apply_overrides(
    raw_config: dict[str, Any],
    env: Mapping[str, str],
    cli_overrides: Mapping[str, Any] | None,
) -> dict[str, Any]:
    """Apply precedence: CLI > env > YAML defaults."""
    merged = {
        key: dict(value) if isinstance(value, dict) else value
        for key, value in raw_config.items()
    }
    api_url = env.get("REPOSENTRY_GITHUB_API_URL")
    if api_url:
        merged.setdefault("github", {})
        merged["github"]["api_base_url"] = api_url
    max_total_files = env.get("REPOSENTRY_MAX_TOTAL_FILES")
    if max_total_files:
        merged.setdefault("traversal", {})
        merged["traversal"]["max_total_files"] = int(max_total_files)

    if cli_overrides:
        if cli_overrides.get("rules_path"):
            merged.setdefault("detection", {})
            merged["detection"]["rules_path"] = str(cli_overrides["rules_path"])
        if cli_overrides.get("max_total_files") is not None:
            merged.setdefault("traversal", {})
            merged["traversal"]["max_total_files"] = cli_overrides["max_total_files"]
    return merged


def load_app_config(
    config_path: Path | None = None,
    *,
    env: Mapping[str, str] | None = None,
    cli_overrides: Mapping[str, Any] | None = None,
) -> AppConfig:
    """Load and validate central application config.

    An explicit ``config_path`` must exist. Without one, the default
    ``config/settings.yaml`` is used when present and built-in defaults
    apply otherwise.
    """
    active_env = os.environ if env is None else env
    if config_path is not None:
        raw = _load_yaml(config_path)
    elif DEFAULT_CONFIG_PATH.exists():
        raw = _load_yaml(DEFAULT_CONFIG_PATH)
    else:
        raw = {}
    merged = apply_overrides(raw, active_env, cli_overrides)
    return AppConfig.model_validate(merged)


def resolve_github_token(config: AppConfig, env: Mapping[str, str]) -> str | None:
    """Return the configured bearer token, or None for unauthenticated access."""
    token = env.get(config.github.token_env, "").strip()
    return token or None
