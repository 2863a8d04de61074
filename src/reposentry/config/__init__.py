"""Configuration exports."""

from reposentry.config.loader import (
    DEFAULT_CONFIG_PATH,
    load_app_config,
    resolve_github_token,
)
from reposentry.config.models import AppConfig

__all__ = [
    "AppConfig",
    "DEFAULT_CONFIG_PATH",
    "load_app_config",
    "resolve_github_token",
]
