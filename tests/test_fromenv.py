"""Tests for --fromenv and --tryfromenv."""

import os
import sys

import pytest

# Add parent directory to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from cmdflags.definitions import define_builtin_flags, define_int32, define_string
from cmdflags.infos import ProgramInfo
from cmdflags.parser import CommandLineFlagParser
from cmdflags.registry import FlagRegistry


@pytest.fixture
def registry():
    registry = FlagRegistry()
    define_builtin_flags(registry)
    return registry


@pytest.fixture
def flags(registry):
    return {
        'a': define_int32('a', 1, 'An integer', registry=registry, filename='fromenv_test.py'),
        'b': define_string('b', '', 'A string', registry=registry, filename='fromenv_test.py'),
    }


@pytest.fixture
def parser(registry, flags):
    info = ProgramInfo()
    info.set_argv(['fromenv_test'])
    return CommandLineFlagParser(registry, info)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ('FLAGS_a', 'FLAGS_b', 'FLAGS_nope', 'FLAGS_flagfile', 'FLAGS_fromenv'):
        monkeypatch.delenv(name, raising=False)


def test_fromenv_sets_values(parser, flags, monkeypatch):
    monkeypatch.setenv('FLAGS_a', '42')
    monkeypatch.setenv('FLAGS_b', 'from the environment')
    parser.parse_new_command_line_flags(["prog", "--fromenv=a,b"], True)
    assert flags['a'].value == 42
    assert flags['b'].value == "from the environment"
    assert not parser.report_errors()


def test_fromenv_missing_variable_is_an_error(parser, flags, capsys):
    parser.parse_new_command_line_flags(["prog", "--fromenv=a"], True)
    assert parser.error_flags['a'] == "ERROR: FLAGS_a not found in environment\n"
    assert parser.report_errors()
    assert "FLAGS_a not found in environment" in capsys.readouterr().err


def test_tryfromenv_missing_variable_is_skipped(parser, flags, monkeypatch):
    monkeypatch.setenv('FLAGS_b', 'present')
    parser.parse_new_command_line_flags(["prog", "--tryfromenv=a,b"], True)
    assert flags['a'].value == 1
    assert flags['b'].value == "present"
    assert not parser.report_errors()


@pytest.mark.parametrize("directive", ["fromenv", "tryfromenv"])
def test_unknown_flag_name(parser, flags, directive):
    parser.parse_new_command_line_flags(["prog", f"--{directive}=nope"], True)
    assert parser.error_flags['nope'] == (
        "ERROR: unknown command line flag 'nope' (via --fromenv or --tryfromenv)\n")
    assert 'nope' in parser.undefined_names


def test_unknown_flag_name_forgiven_by_undefok(parser, flags):
    parser.parse_new_command_line_flags(["prog", "--tryfromenv=nope", "--undefok=nope"], True)
    assert not parser.report_errors()


def test_illegal_environment_value(parser, flags, monkeypatch):
    monkeypatch.setenv('FLAGS_a', 'forty-two')
    parser.parse_new_command_line_flags(["prog", "--fromenv=a"], True)
    assert parser.error_flags['a'] == "ERROR: illegal value 'forty-two' specified for int32 flag 'a'\n"
    assert flags['a'].value == 1


def test_recursive_environment_flag_is_refused(parser, flags, monkeypatch):
    monkeypatch.setenv('FLAGS_fromenv', 'fromenv')
    parser.parse_new_command_line_flags(["prog", "--fromenv=fromenv"], True)
    assert parser.error_flags['fromenv'] == (
        "ERROR: infinite recursion on environment flag 'fromenv'\n")


def test_environment_can_name_a_flagfile(parser, flags, monkeypatch, tmp_path):
    path = tmp_path / "env.flags"
    path.write_text("--a=77\n")
    monkeypatch.setenv('FLAGS_flagfile', str(path))
    parser.parse_new_command_line_flags(["prog", "--tryfromenv=flagfile"], True)
    assert flags['a'].value == 77


def test_command_line_after_fromenv_wins(parser, flags, monkeypatch):
    monkeypatch.setenv('FLAGS_a', '42')
    parser.parse_new_command_line_flags(["prog", "--fromenv=a", "--a=43"], True)
    assert flags['a'].value == 43


def test_empty_list_entry_is_fatal(parser, flags):
    with pytest.raises(SystemExit):
        parser.parse_new_command_line_flags(["prog", "--fromenv=a,,b"], True)


def test_entry_starting_with_dash_is_fatal(parser, flags, capsys):
    with pytest.raises(SystemExit):
        parser.parse_new_command_line_flags(["prog", "--tryfromenv=-a"], True)
    assert "ERROR: flag \"-a\" begins with '-'" in capsys.readouterr().err
