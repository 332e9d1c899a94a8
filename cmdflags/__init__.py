"""
Command-line flags that any module can declare.

Key features:
- Typed flags (bool, int32, uint32, int64, uint64, double, string) declared where they are used
- --flag=value, --flag value, --flag / --noflag for booleans, and -- to stop parsing
- --flagfile, --fromenv and --tryfromenv expansion, --undefok for unknown flags
- Per-flag validators, checked on every set and once more after parsing
- FlagSaver snapshots for restoring every flag afterwards
"""

from .access import (
    get_all_flags,
    get_command_line_flag_info,
    get_command_line_flag_info_or_die,
    get_command_line_option,
    set_command_line_option,
    set_command_line_option_with_mode,
)
from .api import (
    allow_command_line_reparsing,
    parse_command_line_flags,
    parse_command_line_non_help_flags,
    read_flags_from_string,
    reparse_command_line_non_help_flags,
    set_help_handler,
    shut_down_command_line_flags,
)
from .command_line_flag import CommandLineFlag, CommandLineFlagInfo
from .definitions import (
    FlagHolder,
    define_bool,
    define_double,
    define_int32,
    define_int64,
    define_string,
    define_uint32,
    define_uint64,
)
from .env import (
    bool_from_env,
    double_from_env,
    int32_from_env,
    int64_from_env,
    string_from_env,
    uint32_from_env,
    uint64_from_env,
)
from .errors import set_exit_func
from .flag_types import FlagType
from .infos import (
    ProgramInfo,
    get_argv,
    get_argv0,
    get_argv_sum,
    get_argvs,
    program_invocation_name,
    program_invocation_short_name,
    program_usage,
    set_argv,
    set_usage_message,
    set_version_string,
    version_string,
)
from .parser import CommandLineFlagParser
from .registry import (
    SET_FLAG_IF_DEFAULT,
    SET_FLAGS_DEFAULT,
    SET_FLAGS_VALUE,
    FlagRegistry,
    FlagSettingMode,
)
from .saver import FlagSaver
from .validators import register_flag_validator
from .values import FlagValue
from .version import __version__

__all__ = [
    'CommandLineFlag',
    'CommandLineFlagInfo',
    'CommandLineFlagParser',
    'FlagHolder',
    'FlagRegistry',
    'FlagSaver',
    'FlagSettingMode',
    'FlagType',
    'FlagValue',
    'ProgramInfo',
    'SET_FLAGS_DEFAULT',
    'SET_FLAGS_VALUE',
    'SET_FLAG_IF_DEFAULT',
    'allow_command_line_reparsing',
    'bool_from_env',
    'define_bool',
    'define_double',
    'define_int32',
    'define_int64',
    'define_string',
    'define_uint32',
    'define_uint64',
    'double_from_env',
    'get_all_flags',
    'get_argv',
    'get_argv0',
    'get_argv_sum',
    'get_argvs',
    'get_command_line_flag_info',
    'get_command_line_flag_info_or_die',
    'get_command_line_option',
    'int32_from_env',
    'int64_from_env',
    'parse_command_line_flags',
    'parse_command_line_non_help_flags',
    'program_invocation_name',
    'program_invocation_short_name',
    'program_usage',
    'read_flags_from_string',
    'register_flag_validator',
    'reparse_command_line_non_help_flags',
    'set_argv',
    'set_command_line_option',
    'set_command_line_option_with_mode',
    'set_exit_func',
    'set_help_handler',
    'set_usage_message',
    'set_version_string',
    'shut_down_command_line_flags',
    'string_from_env',
    'uint32_from_env',
    'uint64_from_env',
    'version_string',
    '__version__',
]
