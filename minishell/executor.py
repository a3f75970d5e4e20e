"""Running a parsed command line: forking, piping and collecting statuses."""

from __future__ import annotations

import os
import signal
import sys
import time
from typing import Callable, Optional, TextIO

from minishell import builtins as shell_builtins
from minishell.ast import AstNode, NodeType
from minishell.commands import (
    Command,
    RedirectionError,
    execve_error,
    missing_args_status,
    open_input,
    open_output,
)
from minishell.shell import Shell, ShellExit, exit_builtin

_NESTED_SHELL_SUFFIX = "/minishell"
_NESTED_SHELL_DELAY = 0.05
_PARENT_BUILTINS = ("cd", "unset")


def pipeline_commands(ast: Optional[AstNode]) -> list[Command]:
    """Return the commands of a pipeline tree in the order they run.

    The first command is the leftmost leaf; every pipe node on the way back
    up to the root contributes its right child.
    """
    if ast is None:
        return []
    node = ast
    while node.left is not None:
        node = node.left
    commands = []
    while True:
        target = node.right if node.type is NodeType.PIPE else node
        if target is None:
            raise ValueError("pipe node without a right-hand command")
        commands.append(target.data)
        if node is ast:
            return commands
        if node.parent is None:
            raise ValueError("node is not part of the given tree")
        node = node.parent


def _is_nested_shell(command: Command) -> bool:
    """Whether the command starts another interactive shell of ours."""
    if len(command.args) != 1 or len(command.args[0]) < len(_NESTED_SHELL_SUFFIX):
        return False
    path = command.path
    return (
        path is not None
        and path.endswith(_NESTED_SHELL_SUFFIX)
        and os.access(path, os.F_OK | os.X_OK)
    )


def _close_pipes(pipes: list[tuple[int, int]]) -> None:
    for read_end, write_end in pipes:
        for fd in (read_end, write_end):
            try:
                os.close(fd)
            except OSError:
                pass


def _environment_dict(envp: list[str]) -> dict[str, str]:
    return dict(entry.split("=", 1) for entry in envp)


class Executor:
    """Runs the commands of one command line for a shell."""

    def __init__(self, shell: Shell) -> None:
        self.shell = shell

    def run(self, ast: Optional[AstNode]) -> int:
        """Run the tree and return the shell's last exit status."""
        if ast is None:
            return self.shell.last_exit_status
        commands = pipeline_commands(ast)
        count = len(commands)
        pids: list[int] = []
        previous = self._install_handlers()
        try:
            pipes = [os.pipe() for _ in range(count - 1)]
            try:
                for index, command in enumerate(commands):
                    last = index == count - 1
                    if last and self._runs_in_parent(command, count):
                        self.shell.last_exit_status = self._parent_builtin(
                            command, count
                        )
                        pids.append(0)
                    else:
                        pids.append(self._spawn(command, index, last, pipes))
            finally:
                _close_pipes(pipes)
            if count == 1:
                self._update_underscore(commands[0])
            self._wait(pids)
        finally:
            self._restore_handlers(previous)
        return self.shell.last_exit_status

    # Signals -----------------------------------------------------------

    def _install_handlers(self) -> dict[int, Callable]:
        signals = self.shell.signals

        def on_usr1(signum, frame) -> None:
            signals.nested -= 1

        handlers = {
            signal.SIGINT: lambda signum, frame: signals.on_interrupt(),
            signal.SIGQUIT: lambda signum, frame: signals.on_quit(),
            signal.SIGUSR1: on_usr1,
        }
        previous = {}
        for signum, handler in handlers.items():
            try:
                previous[signum] = signal.signal(signum, handler)
            except ValueError:
                continue
        return previous

    @staticmethod
    def _restore_handlers(previous: dict[int, Callable]) -> None:
        for signum, handler in previous.items():
            if handler is not None:
                signal.signal(signum, handler)

    # Builtins run by the shell itself ----------------------------------

    @staticmethod
    def _runs_in_parent(command: Command, count: int) -> bool:
        if not command.args:
            return False
        name = command.args[0]
        if command.path is None and name in _PARENT_BUILTINS:
            return True
        if command.path is None and name == "export" and len(command.args) > 1:
            return True
        return count == 1 and name == "exit"

    def _parent_builtin(self, command: Command, count: int) -> int:
        name = command.args[0]
        if name == "cd" and command.path is None:
            return shell_builtins.cd(self.shell, command.args)
        if name == "export" and command.path is None:
            return shell_builtins.export(self.shell, command.args)
        if name == "unset" and command.path is None:
            return shell_builtins.unset(self.shell, command.args)
        return exit_builtin(self.shell, command.args)

    def _update_underscore(self, command: Command) -> None:
        if command.args and "_" in self.shell.env:
            self.shell.env.set("_", command.args[-1])

    # Child processes ---------------------------------------------------

    def _spawn(
        self, command: Command, index: int, last: bool, pipes: list[tuple[int, int]]
    ) -> int:
        envp = _environment_dict(self.shell.env.to_envp())
        sys.stdout.flush()
        sys.stderr.flush()
        try:
            pid = os.fork()
        except OSError as exc:
            sys.stderr.write(f"minishell: fork: {exc.strerror}\n")
            return 0
        if pid == 0:
            status = 1
            try:
                status = self._child(command, index, last, pipes, envp)
            except ShellExit as exc:
                status = exc.status
            except BaseException:
                status = 1
            finally:
                os._exit(status)
        if last and _is_nested_shell(command):
            self.shell.signals.nested = 1
            time.sleep(_NESTED_SHELL_DELAY)
            try:
                os.kill(pid, signal.SIGUSR2)
            except OSError as exc:
                sys.stderr.write(f"minishell: kill: {exc.strerror}\n")
        return pid

    def _child(
        self,
        command: Command,
        index: int,
        last: bool,
        pipes: list[tuple[int, int]],
        envp: dict[str, str],
    ) -> int:
        for signum in (signal.SIGINT, signal.SIGQUIT, signal.SIGPIPE):
            signal.signal(signum, signal.SIG_DFL)
        out = os.fdopen(1, "w", closefd=False)
        err = os.fdopen(2, "w", closefd=False)
        try:
            missing = missing_args_status(command)
            if missing is not None:
                status, message = missing
                if message:
                    err.write(message + "\n")
                return status
            if not self._redirect(command, index, last, pipes, err):
                return 1
            status = self._child_builtin(command, out, err)
            if status is not None:
                return status
            if not last and _is_nested_shell(command):
                return 0
            if not last and self._looks_like_nested_shell(command):
                err.write(
                    f"minishell: {command.args[0]}: "
                    f"{os.strerror(2) if not os.path.exists(command.path or '') else os.strerror(13)}\n"
                )
                return 1
            if command.path is not None:
                out.flush()
                err.flush()
                try:
                    os.execve(command.path, command.args, envp)
                except OSError:
                    pass
            status, message = execve_error(command)
            if message:
                err.write(message + "\n")
            return status
        finally:
            for stream in (out, err):
                try:
                    stream.flush()
                except OSError:
                    pass

    @staticmethod
    def _looks_like_nested_shell(command: Command) -> bool:
        return (
            len(command.args) == 1
            and len(command.args[0]) >= len(_NESTED_SHELL_SUFFIX)
            and command.path is not None
            and command.path.endswith(_NESTED_SHELL_SUFFIX)
        )

    def _child_builtin(
        self, command: Command, out: TextIO, err: TextIO
    ) -> Optional[int]:
        if command.path is not None:
            return None
        name, args = command.args[0], command.args
        if name == "echo":
            return shell_builtins.echo(args, out)
        if name == "pwd":
            return shell_builtins.pwd(out)
        if name == "env":
            return shell_builtins.env(self.shell, out)
        if name == "export":
            return shell_builtins.export(self.shell, args, out, err)
        if name == "cd":
            return shell_builtins.cd(self.shell, args, err)
        if name == "unset":
            return shell_builtins.unset(self.shell, args)
        return None

    @staticmethod
    def _redirect(
        command: Command,
        index: int,
        last: bool,
        pipes: list[tuple[int, int]],
        err: TextIO,
    ) -> bool:
        ok = True
        if command.input_files:
            try:
                fd = open_input(command)
            except RedirectionError as exc:
                err.write(f"{exc}\n")
                ok = False
            else:
                if fd is not None:
                    os.dup2(fd, 0)
                    os.close(fd)
        elif index > 0 and not (last and _is_nested_shell(command)):
            os.dup2(pipes[index - 1][0], 0)
        if command.output_files:
            try:
                fd = open_output(command)
            except RedirectionError as exc:
                if ok:
                    err.write(f"{exc}\n")
                ok = False
            else:
                if fd is not None:
                    os.dup2(fd, 1)
                    os.close(fd)
        elif not last:
            os.dup2(pipes[index][1], 1)
        _close_pipes(pipes)
        return ok

    # Waiting -----------------------------------------------------------

    def _wait(self, pids: list[int]) -> None:
        shell = self.shell
        signals = shell.signals
        status = 0
        completed = True
        for pid in pids:
            if pid > 0:
                try:
                    _, status = os.waitpid(pid, 0)
                except ChildProcessError:
                    pass
            if signals.received == signal.SIGINT:
                signals.received = None
                sys.stdout.write("\n")
                sys.stdout.flush()
                shell.last_exit_status = 130
                completed = False
                break
            if signals.received == signal.SIGQUIT:
                signals.received = None
                sys.stdout.write("Quit\n")
                sys.stdout.flush()
                shell.last_exit_status = 131
                completed = False
                break
            if os.WIFSIGNALED(status) and os.WTERMSIG(status) == signal.SIGSEGV:
                sys.stderr.write("Segmentation fault\n")
                completed = False
                break
        if completed and pids and pids[-1] > 0 and not signals.interrupted:
            shell.last_exit_status = os.WEXITSTATUS(status)
        if not completed:
            self._reap(pids)

    @staticmethod
    def _reap(pids: list[int]) -> None:
        for pid in pids:
            if pid > 0:
                try:
                    os.waitpid(pid, os.WNOHANG)
                except ChildProcessError:
                    pass


def execute(shell: Shell, ast: Optional[AstNode]) -> int:
    """Run ``ast`` for ``shell`` and return the last exit status."""
    return Executor(shell).run(ast)