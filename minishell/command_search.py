"""Locating executables through the PATH variable."""

from __future__ import annotations

import os
from typing import Optional

from minishell.environment import Environment

DEFAULT_PATH = "/usr/local/sbin:/usr/local/bin:/usr/sbin:/usr/bin:/sbin:/bin"


def path_dirs(env: Environment, save_path: bool) -> list[str]:
    """Return the directories named by PATH, empty segments dropped.

    When PATH is empty and ``save_path`` is set, DEFAULT_PATH is used.
    """
    env_path = env.get("PATH") or ""
    if not env_path and save_path:
        env_path = DEFAULT_PATH
    return [part for part in env_path.split(":") if part]


def search_command(
    env: Environment, cmd_name: str, save_path: bool
) -> Optional[str]:
    """Return ``dir/cmd_name`` for the first PATH directory holding it."""
    for directory in path_dirs(env, save_path):
        try:
            entries = os.listdir(directory)
        except OSError:
            continue
        if cmd_name in entries:
            return f"{directory}/{cmd_name}"
    return None


def default_invalid_path(
    env: Environment, cmd_name: str, save_path: bool
) -> Optional[str]:
    """Return ``cmd_name`` joined to the first PATH directory, if any."""
    dirs = path_dirs(env, save_path)
    if not dirs:
        return None
    return f"{dirs[0]}/{cmd_name}"