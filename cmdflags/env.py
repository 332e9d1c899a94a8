"""Read typed values straight from environment variables.

These parse with the same rules as flags, but do not involve any
registered flag:

    DEBUG = define_bool('debug', bool_from_env('APP_DEBUG', False), 'Debug mode')
"""

from typing import Any, Optional
import os

from .errors import DIE, report_error
from .flag_types import FlagType
from .values import FlagValue


def _get_from_env(varname: str, flag_type: FlagType, default: Any) -> Any:
    valstr = os.environ.get(varname)
    if valstr is None:
        return default
    value = FlagValue(flag_type.zero_value, flag_type)
    if not value.parse_from(valstr):
        report_error(DIE, f"ERROR: error parsing env variable '{varname}' with value '{valstr}'\n")
        return default
    return value.value


def bool_from_env(varname: str, default: bool) -> bool:
    return _get_from_env(varname, FlagType.BOOL, default)


def int32_from_env(varname: str, default: int) -> int:
    return _get_from_env(varname, FlagType.INT32, default)


def uint32_from_env(varname: str, default: int) -> int:
    return _get_from_env(varname, FlagType.UINT32, default)


def int64_from_env(varname: str, default: int) -> int:
    return _get_from_env(varname, FlagType.INT64, default)


def uint64_from_env(varname: str, default: int) -> int:
    return _get_from_env(varname, FlagType.UINT64, default)


def double_from_env(varname: str, default: float) -> float:
    return _get_from_env(varname, FlagType.DOUBLE, default)


def string_from_env(varname: str, default: Optional[str]) -> Optional[str]:
    return os.environ.get(varname, default)
