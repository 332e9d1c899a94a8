"""Tests for by-name flag access, validators, program info and env helpers."""

import logging
import os
import sys

import pytest

# Add parent directory to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from cmdflags import env, infos
from cmdflags.access import (
    get_all_flags,
    get_command_line_flag_info,
    get_command_line_flag_info_or_die,
    get_command_line_option,
    set_command_line_option,
    set_command_line_option_with_mode,
)
from cmdflags.definitions import define_builtin_flags, define_int32, define_string, define_uint64
from cmdflags.infos import ProgramInfo
from cmdflags.registry import SET_FLAG_IF_DEFAULT, SET_FLAGS_DEFAULT, FlagRegistry
from cmdflags.validators import add_flag_validator, register_flag_validator
from cmdflags.values import FlagValue


@pytest.fixture
def registry():
    registry = FlagRegistry()
    define_builtin_flags(registry)
    return registry


@pytest.fixture
def flags(registry):
    return {
        'a': define_int32('a', 1, 'An integer', registry=registry, filename='z_module.py'),
        'b': define_string('b', 'bee', 'A string', registry=registry, filename='a_module.py'),
        'big': define_uint64('big', 5, 'Big number', registry=registry, filename='a_module.py'),
    }


def test_get_command_line_option(registry, flags):
    assert get_command_line_option('a', registry) == "1"
    assert get_command_line_option('b', registry) == "bee"
    assert get_command_line_option('missing', registry) is None
    assert get_command_line_option(None, registry) is None


def test_set_command_line_option(registry, flags):
    assert set_command_line_option('a', '5', registry) == "a set to 5\n"
    assert flags['a'].value == 5
    assert get_command_line_option('a', registry) == "5"


def test_set_command_line_option_failures(registry, flags):
    assert set_command_line_option('missing', '5', registry) == ""
    assert set_command_line_option('a', 'five', registry) == ""
    assert set_command_line_option('big', '-1', registry) == ""
    assert flags['a'].value == 1
    assert flags['big'].value == 5


def test_set_command_line_option_with_modes(registry, flags):
    assert set_command_line_option_with_mode('b', 'first', SET_FLAG_IF_DEFAULT, registry) == (
        "b set to first\n")
    assert set_command_line_option_with_mode('b', 'second', SET_FLAG_IF_DEFAULT, registry) == (
        "b set to first")
    assert flags['b'].value == "first"

    set_command_line_option_with_mode('a', '8', SET_FLAGS_DEFAULT, registry)
    assert flags['a'].default == 8
    assert flags['a'].value == 8


def test_set_command_line_option_expands_flagfile(registry, flags, tmp_path):
    path = tmp_path / "option.flags"
    path.write_text("--a=21\n--b=from file\n")
    msg = set_command_line_option('flagfile', str(path), registry)
    assert msg == f"flagfile set to {path}\na set to 21\nb set to from file\n"
    assert flags['a'].value == 21


def test_get_command_line_flag_info(registry, flags):
    info = get_command_line_flag_info('big', registry)
    assert info.name == 'big'
    assert info.type == 'uint64'
    assert info.description == 'Big number'
    assert info.current_value == '5'
    assert info.default_value == '5'
    assert info.filename == 'a_module.py'
    assert not info.has_validator_fn
    assert info.is_default
    assert get_command_line_flag_info('missing', registry) is None


def test_get_command_line_flag_info_or_die(registry, flags, capsys):
    assert get_command_line_flag_info_or_die('a', registry).name == 'a'
    with pytest.raises(SystemExit) as exc_info:
        get_command_line_flag_info_or_die('missing', registry)
    assert exc_info.value.code == 1
    assert "FATAL ERROR: flag name 'missing' doesn't exist" in capsys.readouterr().err


def test_get_all_flags_sorted_by_file_then_name(registry, flags):
    all_flags = get_all_flags(registry)
    names = [(info.filename, info.name) for info in all_flags]
    assert names == sorted(names)
    ours = [info.name for info in all_flags if info.filename.endswith('_module.py')]
    assert ours == ['b', 'big', 'a']
    assert len(all_flags) == 7


def test_register_validator(registry, flags):
    def positive(name, value):
        return value > 0

    assert register_flag_validator(flags['a'], positive)
    # Registering the same function again is fine
    assert register_flag_validator(flags['a'], positive)
    assert set_command_line_option('a', '-3', registry) == ""
    assert flags['a'].value == 1
    assert set_command_line_option('a', '3', registry) == "a set to 3\n"


def test_register_second_validator_fails(registry, flags, caplog):
    assert register_flag_validator(flags['a'], lambda name, value: True)
    with caplog.at_level(logging.WARNING):
        assert not register_flag_validator(flags['a'], lambda name, value: False)
    assert "validate-fn already registered" in caplog.text
    # The first validator is still in place
    assert set_command_line_option('a', '3', registry) == "a set to 3\n"


def test_clear_validator(registry, flags):
    register_flag_validator(flags['a'], lambda name, value: False)
    assert register_flag_validator(flags['a'], None)
    assert not get_command_line_flag_info('a', registry).has_validator_fn
    assert register_flag_validator(flags['a'], lambda name, value: True)


def test_validator_for_unknown_value(registry, flags, caplog):
    stray = FlagValue(0, 'int32')
    with caplog.at_level(logging.WARNING):
        assert not add_flag_validator(stray, lambda name, value: True, registry)
    assert "no flag found" in caplog.text


def test_validator_by_flag_ptr(registry, flags):
    assert register_flag_validator(flags['b'].flag_ptr, lambda name, value: value != "", registry)
    assert set_command_line_option('b', '', registry) == ""
    assert flags['b'].value == "bee"


def test_program_info():
    info = ProgramInfo()
    assert info.argv0 == "UNKNOWN"
    info.set_argv(['/usr/local/bin/tool', '--x=1', 'file'])
    info.set_argv(['ignored'])
    assert info.argvs == ['/usr/local/bin/tool', '--x=1', 'file']
    assert info.argv == "/usr/local/bin/tool --x=1 file"
    assert info.argv0 == '/usr/local/bin/tool'
    assert info.invocation_name == '/usr/local/bin/tool'
    assert info.invocation_short_name == 'tool'
    assert info.argv_sum == sum(ord(c) for c in "/usr/local/bin/tool --x=1 file")


def test_program_info_rejects_empty_argv():
    info = ProgramInfo()
    with pytest.raises(ValueError):
        info.set_argv([])
    assert info.argv0 == "UNKNOWN"
    # A rejected argv does not use up the one allowed call
    info.set_argv(['tool'])
    assert info.argv0 == 'tool'


def test_program_info_argvs_is_a_copy():
    info = ProgramInfo()
    info.set_argv(['tool'])
    info.argvs.append('extra')
    assert info.argvs == ['tool']


def test_usage_and_version():
    info = ProgramInfo()
    assert info.usage == "Warning: set_usage_message() never called"
    assert info.version == ""
    info.usage = "tool [flags] files"
    info.version = "1.2.3"
    assert info.usage == "tool [flags] files"
    assert info.version == "1.2.3"


def test_env_helpers(monkeypatch):
    monkeypatch.setenv('CMDFLAGS_TEST_BOOL', 'yes')
    monkeypatch.setenv('CMDFLAGS_TEST_INT', '-12')
    monkeypatch.setenv('CMDFLAGS_TEST_BIG', '18446744073709551615')
    monkeypatch.setenv('CMDFLAGS_TEST_DOUBLE', '2.5')
    monkeypatch.setenv('CMDFLAGS_TEST_STRING', 'text')
    monkeypatch.delenv('CMDFLAGS_TEST_MISSING', raising=False)

    assert env.bool_from_env('CMDFLAGS_TEST_BOOL', False) is True
    assert env.int32_from_env('CMDFLAGS_TEST_INT', 0) == -12
    assert env.int64_from_env('CMDFLAGS_TEST_INT', 0) == -12
    assert env.uint64_from_env('CMDFLAGS_TEST_BIG', 0) == (1 << 64) - 1
    assert env.double_from_env('CMDFLAGS_TEST_DOUBLE', 0.0) == 2.5
    assert env.string_from_env('CMDFLAGS_TEST_STRING', 'default') == 'text'

    assert env.uint32_from_env('CMDFLAGS_TEST_MISSING', 7) == 7
    assert env.string_from_env('CMDFLAGS_TEST_MISSING', 'default') == 'default'
    assert env.string_from_env('CMDFLAGS_TEST_MISSING', None) is None


def test_env_helper_parse_error_is_fatal(monkeypatch, capsys):
    monkeypatch.setenv('CMDFLAGS_TEST_INT', 'twelve')
    with pytest.raises(SystemExit):
        env.int32_from_env('CMDFLAGS_TEST_INT', 0)
    assert ("ERROR: error parsing env variable 'CMDFLAGS_TEST_INT' with value 'twelve'"
            in capsys.readouterr().err)


def test_process_wide_program_info():
    previous = infos.get_program_info()
    try:
        infos.reset_program_info()
        assert infos.get_argv0() == "UNKNOWN"
        infos.set_argv(['/opt/app/bin/worker', '--jobs=4'])
        assert infos.get_argvs() == ['/opt/app/bin/worker', '--jobs=4']
        assert infos.get_argv() == "/opt/app/bin/worker --jobs=4"
        assert infos.get_argv0() == '/opt/app/bin/worker'
        assert infos.get_argv_sum() == sum(ord(c) for c in "/opt/app/bin/worker --jobs=4")
        assert infos.program_invocation_name() == '/opt/app/bin/worker'
        assert infos.program_invocation_short_name() == 'worker'

        infos.set_usage_message("worker [--jobs=N]")
        infos.set_version_string("worker 0.1")
        assert infos.program_usage() == "worker [--jobs=N]"
        assert infos.version_string() == "worker 0.1"
    finally:
        infos.reset_program_info(previous)
