"""
Layered environment for the CLI.

``layered_environ`` merges, lowest precedence first:

1. the user file ``$XDG_CONFIG_HOME/tikaclient/.env``
2. the project files ``.env`` then ``.env.local`` in the working directory
3. the process environment

The result is a plain mapping that the CLI hands to ``load_config``;
``os.environ`` is never written. The library itself does not read ``.env``
files.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Mapping
from pathlib import Path

from dotenv import dotenv_values

logger = logging.getLogger(__name__)

USER_ENV_FILE = Path("tikaclient") / ".env"
PROJECT_ENV_FILES = (".env", ".env.local")


def user_env_path(environ: Mapping[str, str] | None = None) -> Path:
    """Path of the user-level env file (XDG aware)."""
    env = os.environ if environ is None else environ
    config_home = env.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    return Path(config_home) / USER_ENV_FILE


def project_env_paths(project_dir: Path | None = None) -> list[Path]:
    base = Path.cwd() if project_dir is None else project_dir
    return [base / name for name in PROJECT_ENV_FILES]


def read_env_file(path: Path) -> dict[str, str]:
    """Variables assigned in ``path``; bare keys without a value are skipped."""
    if not path.is_file():
        return {}
    values = {key: value for key, value in dotenv_values(path).items() if value is not None}
    logger.debug("Read %d variables from %s", len(values), path)
    return values


def layered_environ(
    base: Mapping[str, str] | None = None,
    *,
    project_dir: Path | None = None,
    user_files: Iterable[Path] | None = None,
    project_files: Iterable[Path] | None = None,
) -> dict[str, str]:
    """
    Merge ``.env`` files underneath ``base``.

    Args:
        base: Variables that win over every file (defaults to ``os.environ``)
        project_dir: Directory holding the project files (defaults to cwd)
        user_files: Explicit user env files, replacing the XDG default
        project_files: Explicit project env files, replacing ``.env``/``.env.local``

    Returns:
        A new mapping; neither ``base`` nor ``os.environ`` is modified.
    """
    top = dict(os.environ if base is None else base)
    if user_files is None:
        user_files = [user_env_path(top)]
    if project_files is None:
        project_files = project_env_paths(project_dir)

    merged: dict[str, str] = {}
    for path in [*user_files, *project_files]:
        merged.update(read_env_file(Path(path)))
    merged.update(top)
    return merged


__all__ = ["layered_environ", "project_env_paths", "read_env_file", "user_env_path"]
