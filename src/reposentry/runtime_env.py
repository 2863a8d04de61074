"""Process environment bootstrap for the CLI."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from dotenv import find_dotenv, load_dotenv

LOGGER = logging.getLogger(__name__)

DISABLE_DOTENV_VAR = "REPOSENTRY_DISABLE_DOTENV"
ENV_FILE_VAR = "REPOSENTRY_ENV_FILE"
_TRUTHY = {"1", "true", "yes", "on"}


def load_runtime_env(*, filename: str = ".env") -> Path | None:
    """Load scanner settings such as GITHUB_TOKEN from a dotenv file.

    ``REPOSENTRY_ENV_FILE`` names an explicit file; otherwise ``filename`` is
    searched from the working directory upwards. Variables already exported in
    the process win. Returns the file that was read, if any.
    """
    if os.getenv(DISABLE_DOTENV_VAR, "").strip().lower() in _TRUTHY:
        return None

    explicit = os.getenv(ENV_FILE_VAR, "").strip()
    if explicit:
        dotenv_path = Path(explicit).expanduser()
        if not dotenv_path.is_file():
            LOGGER.warning("%s points to a missing file: %s", ENV_FILE_VAR, dotenv_path)
            return None
    else:
        found = find_dotenv(filename=filename, usecwd=True)
        if not found:
            return None
        dotenv_path = Path(found)

    load_dotenv(dotenv_path=dotenv_path, override=False)
    LOGGER.debug("Loaded environment from %s", dotenv_path)
    return dotenv_path
