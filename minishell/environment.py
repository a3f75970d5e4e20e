"""Shell variables and the environment handed to child processes."""

from __future__ import annotations

import os
import re
import sys
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional

_ATOI = re.compile(r"[ \t\n\v\f\r]*([+-]?\d+)")
_MAX_SHELL_LEVEL = 998


@dataclass
class Variable:
    """A shell variable; ``value`` is ``None`` when declared but unset."""

    name: str
    value: Optional[str] = None

    def __str__(self) -> str:
        return f"{self.name}={self.value if self.value is not None else ''}"


def _atoi(text: str) -> int:
    match = _ATOI.match(text)
    return int(match.group(1)) if match else 0


def bump_shell_level(value: str) -> str:
    """Return the SHLVL value a nested shell should see."""
    level = _atoi(value)
    if level > _MAX_SHELL_LEVEL:
        print(
            f"minishell: warning: shell level ({level + 1}) too high, "
            "resetting to 1",
            file=sys.stderr,
        )
        level = 0
    return str(level + 1)


def make_prompt(cwd: str, suffix: str = " $> ") -> str:
    """Build the prompt shown before each input line."""
    return f"{cwd}{suffix}"


class Environment:
    """Ordered collection of shell variables."""

    def __init__(self, variables: Iterable[Variable] = ()) -> None:
        self._vars: dict[str, Variable] = {}
        for var in variables:
            self._vars.setdefault(var.name, var)

    @classmethod
    def from_envp(
        cls, envp: Iterable[str], cwd: Optional[str] = None
    ) -> "Environment":
        """Build the environment from ``NAME=value`` strings.

        Entries without a name are ignored, SHLVL is incremented, and
        OLDPWD, ``_``, SHLVL and PWD are added when missing.
        """
        if cwd is None:
            try:
                cwd = os.getcwd()
            except OSError:
                cwd = None
        env = cls()
        for entry in envp:
            name, sep, value = entry.partition("=")
            if not sep or not name or name in env._vars:
                continue
            if name == "SHLVL":
                value = bump_shell_level(value)
            env._vars[name] = Variable(name, value)
        for name, value in (
            ("OLDPWD", None),
            ("_", "./minishell"),
            ("SHLVL", "1"),
            ("PWD", cwd),
        ):
            env._vars.setdefault(name, Variable(name, value))
        return env

    def get(self, name: str) -> Optional[str]:
        """Return the value of ``name``, or ``None`` if unset or absent."""
        var = self._vars.get(name)
        return var.value if var is not None else None

    def __contains__(self, name: object) -> bool:
        return name in self._vars

    def set(self, name: str, value: Optional[str]) -> None:
        """Assign ``value``, appending the variable if it is new."""
        var = self._vars.get(name)
        if var is None:
            self._vars[name] = Variable(name, value)
        else:
            var.value = value

    def declare(self, name: str) -> bool:
        """Add ``name`` without a value; return whether it was new."""
        if name in self._vars:
            return False
        self._vars[name] = Variable(name, None)
        return True

    def unset(self, name: str) -> bool:
        """Remove ``name``; return whether it existed."""
        return self._vars.pop(name, None) is not None

    def to_envp(self) -> list[str]:
        """Return ``NAME=value`` strings for every variable with a value."""
        return [str(var) for var in self._vars.values() if var.value is not None]

    def __iter__(self) -> Iterator[Variable]:
        return iter(list(self._vars.values()))

    def __len__(self) -> int:
        return len(self._vars)