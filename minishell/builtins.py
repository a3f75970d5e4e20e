"""Commands the shell runs itself: cd, echo, env, export, pwd and unset."""

from __future__ import annotations

import os
import sys
from typing import Iterable, Optional, TextIO

from minishell.environment import Environment
from minishell.shell import Shell, ShellExit

ERR_CD = (
    "cd: error retrieving current directory: getcwd: cannot access "
    "parent directories: No such file or directory\n"
)
SPECIAL_VAR_LINE = "_=/usr/bin/env\n"


def is_valid_identifier(arg: str, end: Optional[int] = None) -> bool:
    """Whether ``arg[:end]`` is a valid variable name.

    A negative or missing ``end`` checks the whole string.
    """
    if end is None or end < 0:
        end = len(arg)
    if not arg:
        return False
    first = arg[0]
    if not (first == "_" or (first.isascii() and first.isalpha())):
        return False
    return all(
        ch == "_" or (ch.isascii() and ch.isalnum()) for ch in arg[1:end]
    )


def _write(out: TextIO, text: str) -> bool:
    try:
        out.write(text)
    except OSError:
        return False
    return True


def _update_pwd(shell: Shell, err: TextIO) -> bool:
    """Refresh PWD and OLDPWD; return whether the prompt may be rebuilt."""
    env = shell.env
    edit_prompt = True
    previous: Optional[str] = None
    if "PWD" in env:
        previous = env.get("PWD")
        try:
            env.set("PWD", os.getcwd())
        except FileNotFoundError:
            env.set("PWD", None)
            edit_prompt = False
            err.write(ERR_CD)
        except OSError as exc:
            err.write(f"minishell: cd: {exc.strerror}\n")
            raise ShellExit(1) from exc
    if "OLDPWD" in env:
        env.set("OLDPWD", previous if previous is not None else "")
    return edit_prompt


def cd(shell: Shell, args: list[str], err: Optional[TextIO] = None) -> int:
    """Change the working directory; return the exit status."""
    if err is None:
        err = sys.stderr
    if len(args) > 2:
        err.write("minishell: cd: Too many arguments\n")
        return 1
    if len(args) < 2:
        target = shell.env.get("HOME")
        if not target:
            err.write("minishell: cd: HOME not set\n")
            return 1
    else:
        target = args[1]
    try:
        os.chdir(target)
    except OSError as exc:
        err.write(f"minishell: cd: {target}: {exc.strerror}\n")
        return 1
    if _update_pwd(shell, err):
        shell.refresh_prompt()
    return 0


def _is_n_flag(arg: str) -> bool:
    return len(arg) > 1 and arg[0] == "-" and set(arg[1:]) == {"n"}


def echo(args: list[str], out: Optional[TextIO] = None) -> int:
    """Print the arguments; a leading run of ``-n`` flags drops the newline."""
    if out is None:
        out = sys.stdout
    words = args[1:]
    skip = 0
    for word in words:
        if not _is_n_flag(word):
            break
        skip += 1
    status = 0
    text = " ".join(words[skip:])
    if text and not _write(out, text):
        status = 1
    if skip == 0 and not _write(out, "\n"):
        status = 1
    return status


def env(shell: Shell, out: Optional[TextIO] = None) -> int:
    """Print every variable that has a value."""
    if out is None:
        out = sys.stdout
    for var in shell.env:
        if var.name == "_":
            out.write(SPECIAL_VAR_LINE)
        elif var.value is not None:
            out.write(f"{var.name}={var.value}\n")
    return 0


def export_listing(environment: Environment) -> list[str]:
    """Lines ``export`` prints without arguments, sorted by name."""
    lines = []
    for var in sorted(environment, key=lambda v: v.name.encode()):
        if var.name == "_":
            continue
        if var.value is None:
            lines.append(f"declare -x {var.name}")
        else:
            lines.append(f'declare -x {var.name}="{var.value}"')
    return lines


def export(
    shell: Shell,
    args: list[str],
    out: Optional[TextIO] = None,
    err: Optional[TextIO] = None,
) -> int:
    """Set or declare variables, or list them when given no arguments."""
    if out is None:
        out = sys.stdout
    if err is None:
        err = sys.stderr
    if len(args) < 2:
        for line in export_listing(shell.env):
            out.write(line + "\n")
        return 0
    status = 0
    for arg in args[1:]:
        eq = arg.find("=")
        if eq == 0 or not is_valid_identifier(arg, eq):
            err.write(f"minishell: export: '{arg}': not a valid identifier\n")
            status = 1
        elif eq > 0:
            name, value = arg[:eq], arg[eq + 1:]
            if name == "PATH":
                shell.save_path = False
            shell.env.set(name, value)
        elif arg not in shell.env:
            if arg == "PATH":
                shell.save_path = False
            shell.env.declare(arg)
    return status


def pwd(out: Optional[TextIO] = None) -> int:
    """Print the absolute path of the working directory."""
    if out is None:
        out = sys.stdout
    try:
        cwd = os.getcwd()
    except OSError as exc:
        sys.stderr.write(f"minishell: pwd: {exc.strerror}\n")
        return 1
    out.write(f"{cwd}\n")
    return 0


def unset(shell: Shell, args: Iterable[str]) -> int:
    """Remove the named variables; ``_`` is never removed."""
    for name in list(args)[1:]:
        if name == "_":
            continue
        if name == "PATH":
            shell.save_path = False
        shell.env.unset(name)
    return 0