import pytest

from minishell.environment import (
    Environment,
    Variable,
    bump_shell_level,
    make_prompt,
)


@pytest.fixture
def env():
    return Environment.from_envp(
        ["HOME=/home/user", "SHLVL=3", "=bad", "NOEQUALS", "EMPTY="],
        cwd="/work/dir",
    )


def test_entries_without_name_are_skipped(env):
    assert "NOEQUALS" not in env
    assert "" not in env


def test_empty_value_is_kept(env):
    assert env.get("EMPTY") == ""


def test_shell_level_is_bumped(env):
    assert env.get("SHLVL") == "4"


def test_missing_variables_are_added(env):
    assert env.get("_") == "./minishell"
    assert "OLDPWD" in env
    assert env.get("OLDPWD") is None
    assert env.get("PWD") == "/work/dir"


def test_missing_shlvl_defaults_to_one():
    env = Environment.from_envp([], cwd="/x")
    assert env.get("SHLVL") == "1"
    assert [v.name for v in env] == ["OLDPWD", "_", "SHLVL", "PWD"]


def test_existing_oldpwd_is_not_replaced():
    env = Environment.from_envp(["OLDPWD=/prev"], cwd="/x")
    assert env.get("OLDPWD") == "/prev"
    assert [v.name for v in env].count("OLDPWD") == 1


def test_bump_resets_when_too_high(capsys):
    assert bump_shell_level("999") == "1"
    assert "too high" in capsys.readouterr().err


def test_bump_non_numeric_starts_at_one():
    assert bump_shell_level("abc") == "1"


def test_to_envp_skips_unset(env):
    envp = env.to_envp()
    assert "HOME=/home/user" in envp
    assert not any(e.startswith("OLDPWD") for e in envp)
    assert len(envp) == sum(1 for v in env if v.value is not None)


def test_to_envp_round_trip(env):
    again = Environment.from_envp(env.to_envp(), cwd="/other")
    assert again.get("HOME") == env.get("HOME")
    assert again.get("PWD") == env.get("PWD")


def test_set_existing_keeps_order(env):
    before = [v.name for v in env]
    env.set("HOME", "/elsewhere")
    assert env.get("HOME") == "/elsewhere"
    assert [v.name for v in env] == before


def test_set_new_appends(env):
    env.set("NEWVAR", "value")
    names = [v.name for v in env]
    assert names[-1] == "NEWVAR"
    assert env.get("NEWVAR") == "value"


def test_declare_does_not_clobber(env):
    assert env.declare("HOME") is False
    assert env.get("HOME") == "/home/user"
    assert env.declare("FRESH") is True
    assert "FRESH" in env and env.get("FRESH") is None


def test_unset(env):
    count = len(env)
    assert env.unset("HOME") is True
    assert "HOME" not in env
    assert len(env) == count - 1
    assert env.unset("HOME") is False


def test_variable_str():
    assert str(Variable("A", "b")) == "A=b"


def test_make_prompt():
    assert make_prompt("/tmp", " $> ") == "/tmp" + " $> "