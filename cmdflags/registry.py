"""FlagRegistry: the name-indexed collection of all CommandLineFlags.

Every method whose name ends in ``_locked`` expects the caller to hold the
registry lock already (see registry_lock()). Public entry points elsewhere in
the package take the lock for exactly one logical operation.
"""

from contextlib import contextmanager
from enum import Enum
from typing import Dict, Iterator, List, Optional, Tuple
import threading

from .command_line_flag import CommandLineFlag
from .config import ERROR_PREFIX
from .errors import DIE, report_error
from .flag_types import FlagType
from .values import FlagValue


class FlagSettingMode(Enum):
    """How set_flag_locked() treats the flag it is given."""
    # Update the flag's value (the normal case)
    SET_FLAGS_VALUE = 0
    # Update the value only if nobody has set it yet
    SET_FLAG_IF_DEFAULT = 1
    # Change the default; the value follows unless it was already set
    SET_FLAGS_DEFAULT = 2


SET_FLAGS_VALUE = FlagSettingMode.SET_FLAGS_VALUE
SET_FLAG_IF_DEFAULT = FlagSettingMode.SET_FLAG_IF_DEFAULT
SET_FLAGS_DEFAULT = FlagSettingMode.SET_FLAGS_DEFAULT


def try_parse_locked(
    flag: CommandLineFlag,
    flag_value: FlagValue,
    value: str
) -> Tuple[bool, str]:
    """Parse and validate value into flag_value through a scratch copy.

    flag_value is only written when the text parses and passes the flag's
    validator.

    Returns:
        (success, message) where message describes the new value or the error
    """
    tentative_value = flag_value.new()
    if not tentative_value.parse_from(value):
        return False, (f"{ERROR_PREFIX}illegal value '{value}' specified for "
                       f"{flag.type_name} flag '{flag.name}'\n")
    if not flag.validate(tentative_value):
        return False, (f"{ERROR_PREFIX}failed validation of new value "
                       f"'{tentative_value.to_string()}' for flag '{flag.name}'\n")
    flag_value.copy_from(tentative_value)
    return True, f"{flag.name} set to {flag_value.to_string()}\n"


class FlagRegistry:
    """Collection of flags, indexed by name and by current-value handle."""

    _global_registry: Optional['FlagRegistry'] = None
    _global_registry_lock = threading.Lock()

    def __init__(self) -> None:
        self._flags: Dict[str, CommandLineFlag] = {}
        # id() of each flag's current FlagValue -> flag
        self._flags_by_ptr: Dict[int, CommandLineFlag] = {}
        self._lock = threading.Lock()

    def lock(self) -> None:
        self._lock.acquire()

    def unlock(self) -> None:
        self._lock.release()

    def register_flag(self, flag: CommandLineFlag) -> None:
        """Store a flag in this registry. The registry owns it from now on.

        Registering a second flag with an existing name is fatal.
        """
        with registry_lock(self):
            existing = self._flags.get(flag.name)
            if existing is not None:
                if existing.filename != flag.filename:
                    report_error(
                        DIE,
                        f"ERROR: flag '{flag.name}' was defined more than once "
                        f"(in files '{existing.filename}' and '{flag.filename}').\n")
                else:
                    report_error(
                        DIE,
                        f"ERROR: something wrong with flag '{flag.name}' in file "
                        f"'{flag.filename}'.  One possibility: file '{flag.filename}' "
                        f"is being imported twice under different module names.\n")
                return
            self._flags[flag.name] = flag
            self._flags_by_ptr[id(flag.current)] = flag

    def remove_flag(self, name: str) -> bool:
        """Drop a flag from both indexes. Returns False if it was not registered."""
        with registry_lock(self):
            flag = self._flags.pop(name, None)
            if flag is None:
                return False
            self._flags_by_ptr.pop(id(flag.current), None)
            return True

    def find_flag_locked(self, name: str) -> Optional[CommandLineFlag]:
        return self._flags.get(name)

    def find_flag_via_ptr_locked(self, flag_ptr: FlagValue) -> Optional[CommandLineFlag]:
        """Find the flag whose current value is the given FlagValue object."""
        flag = self._flags_by_ptr.get(id(flag_ptr))
        if flag is None or flag.current is not flag_ptr:
            return None
        return flag

    def flags_locked(self) -> List[CommandLineFlag]:
        """All flags in name order."""
        return [self._flags[name] for name in sorted(self._flags)]

    def __len__(self) -> int:
        return len(self._flags)

    def __contains__(self, name: str) -> bool:
        return name in self._flags

    def split_argument_locked(
        self,
        arg: str
    ) -> Tuple[Optional[CommandLineFlag], str, Optional[str], str]:
        """Resolve 'name' or 'name=value' (leading dashes already removed).

        A name that is not registered but looks like 'nox', where 'x' is a
        boolean flag, resolves to 'x' with the value "0". A boolean flag
        given without a value gets "1".

        Returns:
            (flag, key, value, error_message). flag is None when the name
            cannot be resolved, with error_message saying why. value is None
            when a non-boolean flag was given without '='.
        """
        key, sep, value = arg.partition('=')
        if not sep:
            value = None

        flag = self.find_flag_locked(key)
        if flag is None:
            if not key.startswith('no'):
                return None, key, value, f"{ERROR_PREFIX}unknown command line flag '{key}'\n"
            flag = self.find_flag_locked(key[2:])
            if flag is None:
                return None, key, value, f"{ERROR_PREFIX}unknown command line flag '{key}'\n"
            if flag.current.flag_type != FlagType.BOOL:
                return None, key, value, (f"{ERROR_PREFIX}boolean value ({key}) specified for "
                                          f"{flag.type_name} command line flag\n")
            key = key[2:]
            value = "0"

        if value is None and flag.current.flag_type == FlagType.BOOL:
            value = "1"
        return flag, key, value, ""

    def set_flag_locked(
        self,
        flag: CommandLineFlag,
        value: str,
        set_mode: FlagSettingMode
    ) -> Tuple[bool, str]:
        """Set a flag from text according to set_mode.

        On failure the flag is left unchanged.

        Returns:
            (success, message) where message is the new value or the error
        """
        flag.update_modified_bit()
        if set_mode == SET_FLAGS_VALUE:
            ok, msg = try_parse_locked(flag, flag.current, value)
            if not ok:
                return False, msg
            flag.modified = True
        elif set_mode == SET_FLAG_IF_DEFAULT:
            if flag.modified:
                return True, f"{flag.name} set to {flag.current_value}"
            ok, msg = try_parse_locked(flag, flag.current, value)
            if not ok:
                return False, msg
            flag.modified = True
        elif set_mode == SET_FLAGS_DEFAULT:
            ok, msg = try_parse_locked(flag, flag.defvalue, value)
            if not ok:
                return False, msg
            if not flag.modified:
                # The current value tracks the default until someone sets it
                try_parse_locked(flag, flag.current, value)
        else:
            raise ValueError(f"Unknown flag setting mode {set_mode!r}")
        return True, msg

    @classmethod
    def global_registry(cls) -> 'FlagRegistry':
        """Return the process-wide registry, creating it on first use.

        A new global registry comes with the built-in directive flags
        (--flagfile, --fromenv, --tryfromenv, --undefok) already declared.
        """
        with cls._global_registry_lock:
            if cls._global_registry is None:
                from .definitions import define_builtin_flags
                registry = cls()
                define_builtin_flags(registry)
                cls._global_registry = registry
            return cls._global_registry

    @classmethod
    def delete_global_registry(cls) -> None:
        """Forget the global registry. The next global_registry() call builds a fresh one."""
        with cls._global_registry_lock:
            cls._global_registry = None


@contextmanager
def registry_lock(registry: FlagRegistry) -> Iterator[FlagRegistry]:
    """Hold registry's lock for the duration of a with-block."""
    registry.lock()
    try:
        yield registry
    finally:
        registry.unlock()
