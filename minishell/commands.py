"""Simple commands, their redirections and the errors of running them."""

from __future__ import annotations

import errno
import os
import stat
from dataclasses import dataclass, field
from typing import Iterable, Optional


class RedirectionError(Exception):
    """Raised when a redirection file cannot be opened."""


@dataclass
class Redirection:
    """A file a command reads from or writes to.

    For an output file ``append`` selects ``>>`` over ``>``; for an input
    file it marks the file as the body of a here-document.
    """

    name: str
    output: bool = False
    append: bool = False

    def open(self) -> int:
        """Open the file and return its descriptor; raise OSError on failure."""
        if self.output:
            mode = os.O_APPEND if self.append else os.O_TRUNC
            return os.open(self.name, os.O_WRONLY | os.O_CREAT | mode, 0o644)
        return os.open(self.name, os.O_RDONLY)

    def _describe(self, exc: OSError) -> str:
        if not self.output and self.append:
            return f"minishell: here-document: cannot open '{self.name}'"
        reason = exc.strerror or os.strerror(exc.errno or errno.EIO)
        return f"minishell: {self.name}: {reason}"


@dataclass
class Command:
    """A simple command: its words, resolved path and redirections."""

    args: list[str] = field(default_factory=list)
    path: Optional[str] = None
    input_files: list[Redirection] = field(default_factory=list)
    output_files: list[Redirection] = field(default_factory=list)
    type_empty: bool = False


def _open_last(redirections: Iterable[Redirection]) -> Optional[int]:
    """Open every file in turn and keep only the last descriptor.

    Every file is tried so that output files are all created; the first
    failure is reported once all have been tried.
    """
    error: Optional[str] = None
    fd: Optional[int] = None
    for redirection in redirections:
        if fd is not None:
            os.close(fd)
            fd = None
        try:
            fd = redirection.open()
        except OSError as exc:
            if error is None:
                error = redirection._describe(exc)
    if error is not None:
        if fd is not None:
            os.close(fd)
        raise RedirectionError(error)
    return fd


def open_input(command: Command) -> Optional[int]:
    """Return the descriptor that should become standard input, if any."""
    return _open_last(command.input_files)


def open_output(command: Command) -> Optional[int]:
    """Return the descriptor that should become standard output, if any."""
    return _open_last(command.output_files)


def execve_error(command: Command) -> tuple[int, Optional[str]]:
    """Explain why a command could not be run.

    Returns the exit status and the message to print, or ``None`` when
    nothing is to be printed.
    """
    name = command.args[0] if command.args else ""
    if not name:
        return 0, None
    if "/" not in name:
        return 127, f"minishell: {name}: command not found"
    try:
        info = os.stat(name)
    except OSError as exc:
        return 127, f"minishell: {exc.strerror}"
    if stat.S_ISDIR(info.st_mode):
        return 126, f"minishell: {name}: Is a directory"
    if not os.access(name, os.X_OK):
        return 126, f"minishell: {name}: {os.strerror(errno.EACCES)}"
    return 127, None


def missing_args_status(command: Command) -> Optional[tuple[int, Optional[str]]]:
    """Status and message for a command without words, or ``None`` if it has some."""
    if command.args:
        return None
    if not command.type_empty and not command.output_files and not command.input_files:
        return 1, "minishell: : command not found"
    return 0, None