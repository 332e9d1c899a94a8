"""Flag declaration helpers.

Modules declare flags at import time and keep the returned FlagHolder:

    VERBOSE = define_bool('verbose', False, 'Print progress while working')
    PORT = define_int32('port', 8080, 'Port to listen on')

    if VERBOSE.value:
        ...

Declaration is not thread-safe; it must be finished before other threads
start touching flags.
"""

from typing import Any, Generic, Optional, TypeVar
import sys

from . import config
from .command_line_flag import CommandLineFlag
from .flag_types import FlagType
from .registry import FlagRegistry
from .values import FlagValue

T = TypeVar('T')


class FlagHolder(Generic[T]):
    """Handle to a declared flag.

    ``value`` reads and writes the flag's live storage directly. Writes
    through the holder bypass parsing, validation and the registry lock;
    the registry notices them later by comparing against the default.
    """

    def __init__(self, flag: CommandLineFlag, registry: FlagRegistry):
        self._flag = flag
        self._registry = registry

    @property
    def name(self) -> str:
        return self._flag.name

    @property
    def value(self) -> T:
        return self._flag.current.value

    @value.setter
    def value(self, new_value: T) -> None:
        self._flag.current.value = new_value

    @property
    def default(self) -> T:
        return self._flag.defvalue.value

    @property
    def flag_ptr(self) -> FlagValue:
        """The flag's current-value container, its key in the registry."""
        return self._flag.current

    @property
    def registry(self) -> FlagRegistry:
        return self._registry

    def __repr__(self) -> str:
        return f"FlagHolder('{self.name}', value={self.value!r})"


def _check_default(name: str, flag_type: FlagType, default: Any) -> Any:
    """Validate a declared default and convert it to the stored Python type."""
    if flag_type == FlagType.BOOL:
        if not isinstance(default, bool):
            raise TypeError(f"Flag '{name}' expects boolean default, got {type(default).__name__}")
        return default

    if flag_type == FlagType.STRING:
        if not isinstance(default, str):
            raise TypeError(f"Flag '{name}' expects string default, got {type(default).__name__}")
        return default

    if flag_type == FlagType.DOUBLE:
        if isinstance(default, bool) or not isinstance(default, (int, float)):
            raise TypeError(f"Flag '{name}' expects numeric default, got {type(default).__name__}")
        return float(default)

    if isinstance(default, bool) or not isinstance(default, int):
        raise TypeError(f"Flag '{name}' expects integer default, got {type(default).__name__}")
    low, high = flag_type.value_range
    if default < low or default > high:
        raise ValueError(
            f"Flag '{name}' default {default} out of range for {flag_type.type_name}"
        )
    return default


def _define_flag(
    flag_type: FlagType,
    name: str,
    default: Any,
    help: Optional[str],
    registry: Optional[FlagRegistry],
    filename: Optional[str]
) -> FlagHolder:
    if filename is None:
        # Two frames up is the module that called define_<type>()
        filename = sys._getframe(2).f_globals.get('__file__') or '<unknown>'
    if help is None:
        help = ""
    if config.STRIP_FLAG_HELP:
        help = config.STRIPPED_FLAG_HELP
    if registry is None:
        registry = FlagRegistry.global_registry()

    default = _check_default(name, flag_type, default)
    current = FlagValue(default, flag_type)
    defvalue = FlagValue(default, flag_type)
    flag = CommandLineFlag(name, help, filename, current, defvalue)
    registry.register_flag(flag)
    return FlagHolder(flag, registry)


def define_bool(name: str, default: bool, help: Optional[str] = "",
                registry: Optional[FlagRegistry] = None,
                filename: Optional[str] = None) -> FlagHolder[bool]:
    return _define_flag(FlagType.BOOL, name, default, help, registry, filename)


def define_int32(name: str, default: int, help: Optional[str] = "",
                 registry: Optional[FlagRegistry] = None,
                 filename: Optional[str] = None) -> FlagHolder[int]:
    return _define_flag(FlagType.INT32, name, default, help, registry, filename)


def define_uint32(name: str, default: int, help: Optional[str] = "",
                  registry: Optional[FlagRegistry] = None,
                  filename: Optional[str] = None) -> FlagHolder[int]:
    return _define_flag(FlagType.UINT32, name, default, help, registry, filename)


def define_int64(name: str, default: int, help: Optional[str] = "",
                 registry: Optional[FlagRegistry] = None,
                 filename: Optional[str] = None) -> FlagHolder[int]:
    return _define_flag(FlagType.INT64, name, default, help, registry, filename)


def define_uint64(name: str, default: int, help: Optional[str] = "",
                  registry: Optional[FlagRegistry] = None,
                  filename: Optional[str] = None) -> FlagHolder[int]:
    return _define_flag(FlagType.UINT64, name, default, help, registry, filename)


def define_double(name: str, default: float, help: Optional[str] = "",
                  registry: Optional[FlagRegistry] = None,
                  filename: Optional[str] = None) -> FlagHolder[float]:
    return _define_flag(FlagType.DOUBLE, name, default, help, registry, filename)


def define_string(name: str, default: str, help: Optional[str] = "",
                  registry: Optional[FlagRegistry] = None,
                  filename: Optional[str] = None) -> FlagHolder[str]:
    return _define_flag(FlagType.STRING, name, default, help, registry, filename)


def define_builtin_flags(registry: FlagRegistry) -> None:
    """Declare --flagfile, --fromenv, --tryfromenv and --undefok in registry."""
    _define_flag(
        FlagType.STRING, config.FLAGFILE_FLAG, "",
        "load flags from file", registry, __file__)
    _define_flag(
        FlagType.STRING, config.FROMENV_FLAG, "",
        "set flags from the environment [use 'export FLAGS_flag1=value']",
        registry, __file__)
    _define_flag(
        FlagType.STRING, config.TRYFROMENV_FLAG, "",
        "set flags from the environment if present", registry, __file__)
    _define_flag(
        FlagType.STRING, config.UNDEFOK_FLAG, "",
        "comma-separated list of flag names that it is okay to specify "
        "on the command line even if the program does not define a flag "
        "with that name.  IMPORTANT: flags in this list that have "
        "arguments MUST use the flag=value format", registry, __file__)
