import os

import pytest

from minishell.commands import (
    Command,
    Redirection,
    RedirectionError,
    execve_error,
    missing_args_status,
    open_input,
    open_output,
)


def _read_fd(fd):
    try:
        return os.read(fd, 4096)
    finally:
        os.close(fd)


def _write_fd(fd, data):
    try:
        os.write(fd, data)
    finally:
        os.close(fd)


def test_output_redirection_truncates(tmp_path):
    target = tmp_path / "out.txt"
    target.write_text("old content")
    _write_fd(Redirection(str(target), output=True).open(), b"new")
    assert target.read_bytes() == b"new"


def test_output_redirection_appends(tmp_path):
    target = tmp_path / "out.txt"
    target.write_text("first")
    _write_fd(Redirection(str(target), output=True, append=True).open(), b"second")
    assert target.read_bytes() == b"firstsecond"


def test_open_input_reads_last_file(tmp_path):
    first = tmp_path / "a.txt"
    second = tmp_path / "b.txt"
    first.write_text("alpha")
    second.write_text("beta")
    command = Command(
        args=["cat"],
        input_files=[Redirection(str(first)), Redirection(str(second))],
    )
    assert _read_fd(open_input(command)) == b"beta"


def test_open_input_without_files_returns_none():
    assert open_input(Command(args=["cat"])) is None
    assert open_output(Command(args=["cat"])) is None


def test_open_input_missing_file_raises(tmp_path):
    missing = tmp_path / "missing.txt"
    command = Command(args=["cat"], input_files=[Redirection(str(missing))])
    with pytest.raises(RedirectionError) as info:
        open_input(command)
    assert str(missing) in str(info.value)
    assert str(info.value).startswith("minishell: ")


def test_missing_heredoc_is_reported(tmp_path):
    missing = tmp_path / "heredoc.tmp"
    command = Command(
        args=["cat"], input_files=[Redirection(str(missing), append=True)]
    )
    with pytest.raises(RedirectionError) as info:
        open_input(command)
    assert str(missing) in str(info.value)


def test_open_output_creates_every_file(tmp_path):
    names = [tmp_path / "one", tmp_path / "two", tmp_path / "three"]
    command = Command(
        args=["echo"], output_files=[Redirection(str(n), output=True) for n in names]
    )
    _write_fd(open_output(command), b"data")
    assert all(n.exists() for n in names)
    assert names[-1].read_bytes() == b"data"
    assert names[0].read_bytes() == b""


def test_open_output_reports_first_failure(tmp_path):
    bad = tmp_path / "nodir" / "file"
    good = tmp_path / "good"
    command = Command(
        args=["echo"],
        output_files=[Redirection(str(bad), output=True), Redirection(str(good), output=True)],
    )
    with pytest.raises(RedirectionError) as info:
        open_output(command)
    assert str(bad) in str(info.value)
    assert good.exists()


def test_execve_error_command_not_found():
    status, message = execve_error(Command(args=["nosuchcommand"]))
    assert status == 127
    assert message == "minishell: nosuchcommand: command not found"


def test_execve_error_directory(tmp_path):
    status, message = execve_error(Command(args=[str(tmp_path)]))
    assert status == 126
    assert message == f"minishell: {tmp_path}: Is a directory"


def test_execve_error_missing_path(tmp_path):
    status, message = execve_error(Command(args=[str(tmp_path / "absent")]))
    assert status == 127
    assert message.startswith("minishell: ")


def test_execve_error_not_executable(tmp_path):
    script = tmp_path / "script.sh"
    script.write_text("echo hi\n")
    script.chmod(0o644)
    status, message = execve_error(Command(args=[str(script)]))
    if os.access(str(script), os.X_OK):
        assert (status, message) == (127, None)
    else:
        assert status == 126
        assert str(script) in message


def test_execve_error_empty_name():
    assert execve_error(Command(args=[""])) == (0, None)
    assert execve_error(Command()) == (0, None)


def test_missing_args_status():
    assert missing_args_status(Command(args=["ls"])) is None
    assert missing_args_status(Command()) == (1, "minishell: : command not found")
    assert missing_args_status(Command(type_empty=True)) == (0, None)
    with_redirect = Command(output_files=[Redirection("x", output=True)])
    assert missing_args_status(with_redirect) == (0, None)