# minishell

The core of a small POSIX-style shell. It provides:

- an environment table;
- `PATH` lookup;
- a binary tree that holds a pipeline;
- file redirections;
- the classic builtins (`cd`, `echo`, `env`, `export`, `pwd`, `unset`, `exit`);
- an executor that forks one child process per command and connects the children with pipes.

It needs a POSIX system, because the executor uses `os.fork`.

## Modules

- `minishell.ast`
  - `NodeType` has two members, `COMMAND` and `PIPE`.
  - `AstNode` is the tree node. It has `data`, `type`, `root`, `parent`, `left` and `right`.
  - `add_left`, `add_right` and `add_left_right` attach children and set their `parent`.
  - `postorder()` yields the left subtree, then the right subtree, then the node itself.
- `minishell.environment`
  - `Variable` is a name and a value. The value is `None` when the variable is declared but has no value.
  - `Environment` is an ordered table of variables. Its methods are `get`, `set`, `declare`, `unset` and `to_envp`. It also supports `in`, iteration and `len`.
  - `Environment.from_envp(envp, cwd)` reads `NAME=value` strings. It skips entries without a name and raises `SHLVL` by one. It adds `OLDPWD` (with no value), `_`, `SHLVL` and `PWD` when they are missing.
  - `bump_shell_level(value)` returns the `SHLVL` value a nested shell should see.
  - `make_prompt(cwd, suffix)` builds the prompt string.
- `minishell.command_search`
  - `path_dirs(env, save_path)` returns the directories named in `PATH`. When `PATH` is empty and `save_path` is true, it falls back to `DEFAULT_PATH`.
  - `search_command(env, cmd_name, save_path)` returns `dir/cmd_name` for the first directory that holds the name.
  - `default_invalid_path(...)` joins the name to the first directory.
- `minishell.commands`
  - `Command` holds `args`, `path`, `input_files`, `output_files` and `type_empty`.
  - `Redirection` holds `name`, `output` and `append`.
  - `open_input` and `open_output` open every redirection in turn and return the last descriptor. They raise `RedirectionError` if any of the files fails to open.
  - `execve_error` and `missing_args_status` give the exit status and message for a command that cannot be run.
- `minishell.shell`
  - `Shell` holds the environment, the prompt, `last_exit_status`, `save_path` and the `SignalState`.
  - `Shell.from_environ(envp)` accepts a mapping, a list of `NAME=value` strings, or nothing (the process environment).
  - `exit_builtin(shell, args, err)` runs `exit` by raising `ShellExit`.
- `minishell.builtins`
  - `cd`, `echo`, `env`, `export`, `pwd` and `unset`.
  - `export_listing` and `is_valid_identifier`.
- `minishell.executor`
  - `pipeline_commands(ast)` returns the commands of a tree in the order they run.
  - `Executor(shell).run(ast)` and `execute(shell, ast)` run a tree. They record the status on the shell and return it.

## Example

```python
from minishell.environment import Environment
from minishell.command_search import search_command

env = Environment.from_envp(["PATH=/usr/bin:/bin", "SHLVL=1"], "/tmp")
print(env.get("SHLVL"))        # 2
print("OLDPWD" in env)         # True, declared without a value
print(search_command(env, "ls", True))
```

Running `ls | wc -l`. A pipe node takes the earlier part of the pipeline on its left and the next command on its right:

```python
from minishell.ast import AstNode, NodeType
from minishell.commands import Command
from minishell.command_search import search_command
from minishell.executor import execute
from minishell.shell import Shell

shell = Shell.from_environ()
ls = Command(args=["ls"], path=search_command(shell.env, "ls", shell.save_path))
wc = Command(args=["wc", "-l"], path=search_command(shell.env, "wc", shell.save_path))

pipe = AstNode(type=NodeType.PIPE)
pipe.add_left_right(AstNode(data=ls), AstNode(data=wc))
status = execute(shell, pipe)
```

A builtin is a `Command` whose `path` is `None`, for example `Command(args=["cd", "/tmp"])`.

## Behaviour worth knowing

**Builtins that run in the shell itself.** When `cd`, `unset` or `export NAME...` is the last command, it runs in the shell's own process. So does `exit` when it is the only command. Everything else runs in a child process.

**`export`**
- `export NAME=value` sets a variable.
- `export NAME` declares it without a value.
- An invalid identifier is reported, and the status becomes 1.
- With no arguments, `export` prints every variable except `_`, sorted by name, as `declare -x NAME="value"`.

**`unset`.** `unset _` is ignored.

**`SHLVL`.** An inherited `SHLVL` of 999 or more is reported, and the level is reset to 1.

**`exit`**
- With a non-numeric argument, `exit` exits with status 2.
- With more than one numeric argument, it reports "too many arguments" and returns 1 without leaving.
- `ShellExit.status` is the requested status modulo 256.

**Failures of a command**
- A command not found exits with 127.
- A directory, or a file that may not be executed, exits with 126.
- A command without words and without redirections exits with 1 and prints "command not found".

## What this package does not do

This package does not read input lines or show a prompt loop. It has no tokenizer, quote handling, `$VAR` expansion or here-document reader, and it installs no command-line entry point.

The caller builds the `AstNode` tree of `Command` objects itself. The caller also resolves each `Command.path`, for example with `search_command`. For here-document input, the caller supplies a `Redirection` with `append=True` that points at a file already holding the body.