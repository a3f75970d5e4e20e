"""The interactive shell's state, its signal flags and the exit builtin."""

from __future__ import annotations

import os
import re
import signal
import sys
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Iterable, Optional, TextIO, Union

from minishell.environment import Environment, make_prompt

_NUMERIC = re.compile(r"[0-9+-][0-9]*")
_ATOI = re.compile(r"[ \t\n\v\f\r]*([+-]?\d+)")


class ShellExit(Exception):
    """Raised to leave the shell with ``status`` (taken modulo 256)."""

    def __init__(self, status: int) -> None:
        self.status = status & 0xFF
        super().__init__(self.status)


@dataclass
class SignalState:
    """Flags set by signals that arrive while commands are running."""

    received: Optional[signal.Signals] = None
    nested: int = 0
    heredoc_quit: bool = False
    interrupted: bool = False

    def reset(self) -> None:
        """Clear every flag before reading the next line."""
        self.received = None
        self.nested = 0
        self.heredoc_quit = False
        self.interrupted = False

    def on_interrupt(self) -> None:
        """Record SIGINT unless a nested shell is in the foreground."""
        if self.nested == 0:
            self.received = signal.SIGINT
            self.interrupted = True

    def on_quit(self) -> None:
        """Record SIGQUIT unless a nested shell is in the foreground."""
        if self.nested == 0:
            self.received = signal.SIGQUIT
            self.interrupted = True


@dataclass
class Shell:
    """State shared by the whole shell session."""

    env: Environment
    prompt: str
    last_exit_status: int = 0
    save_path: bool = True
    edit_terminal: bool = True
    parent_pid: Optional[int] = None
    signals: SignalState = field(default_factory=SignalState)

    @classmethod
    def from_environ(
        cls, envp: Union[Mapping[str, str], Iterable[str], None] = None
    ) -> "Shell":
        """Create a shell from ``NAME=value`` strings or a mapping.

        Without an argument the process environment is used.
        """
        if envp is None:
            envp = os.environ
        if isinstance(envp, Mapping):
            entries = [f"{name}={value}" for name, value in envp.items()]
        else:
            entries = list(envp)
        cwd = _current_directory()
        return cls(env=Environment.from_envp(entries, cwd), prompt=make_prompt(cwd))

    def refresh_prompt(self) -> None:
        """Rebuild the prompt from the current directory."""
        self.prompt = make_prompt(_current_directory())

    def exit(self, status: int) -> None:
        """Leave the shell with ``status``."""
        self._leave(status, sys.stderr, "exit\n")

    def _notify_parent(self, err: TextIO) -> None:
        if self.parent_pid:
            try:
                os.kill(self.parent_pid, signal.SIGUSR1)
            except OSError as exc:
                err.write(f"minishell: kill: {exc.strerror}\n")

    def _leave(self, status: int, err: TextIO, message: str) -> None:
        err.write(message)
        self._notify_parent(err)
        raise ShellExit(status)


def _current_directory() -> str:
    try:
        return os.getcwd()
    except OSError as exc:
        raise ShellExit(1) from exc


def is_numeric_argument(arg: str) -> bool:
    """Whether ``arg`` is a valid argument to ``exit``."""
    return _NUMERIC.fullmatch(arg) is not None


def _atoi(text: str) -> int:
    match = _ATOI.match(text)
    return int(match.group(1)) if match else 0


def exit_builtin(shell: Shell, args: list[str], err: Optional[TextIO] = None) -> int:
    """Run ``exit``: raise ShellExit, or return 1 on too many arguments."""
    if err is None:
        err = sys.stderr
    if len(args) < 2:
        shell._leave(0, err, "exit\n")
    if not is_numeric_argument(args[1]):
        shell._leave(
            2, err, f"exit\nminishell: exit: {args[1]}: numeric argument required\n"
        )
    if len(args) > 2:
        err.write("exit\n")
        err.write("bash: exit: too many arguments\n")
        return 1
    shell._leave(_atoi(args[1]), err, "exit\n")
    return 1