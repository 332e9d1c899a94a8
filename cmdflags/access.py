"""Look up and change flags by name."""

from typing import List, Optional
import sys

from .command_line_flag import CommandLineFlagInfo
from .errors import exit_process
from .parser import CommandLineFlagParser
from .registry import SET_FLAGS_VALUE, FlagRegistry, FlagSettingMode, registry_lock


def _registry_or_global(registry: Optional[FlagRegistry]) -> FlagRegistry:
    return registry if registry is not None else FlagRegistry.global_registry()


def get_command_line_option(name: str, registry: Optional[FlagRegistry] = None) -> Optional[str]:
    """Current value of the named flag as a string, or None if there is no such flag."""
    if name is None:
        return None
    registry = _registry_or_global(registry)
    with registry_lock(registry):
        flag = registry.find_flag_locked(name)
        if flag is None:
            return None
        return flag.current_value


def get_command_line_flag_info(
    name: str,
    registry: Optional[FlagRegistry] = None
) -> Optional[CommandLineFlagInfo]:
    if name is None:
        return None
    registry = _registry_or_global(registry)
    with registry_lock(registry):
        flag = registry.find_flag_locked(name)
        if flag is None:
            return None
        return flag.fill_command_line_flag_info()


def get_command_line_flag_info_or_die(
    name: str,
    registry: Optional[FlagRegistry] = None
) -> CommandLineFlagInfo:
    """Like get_command_line_flag_info(), but a missing flag is fatal."""
    info = get_command_line_flag_info(name, registry)
    if info is None:
        sys.stderr.write(f"FATAL ERROR: flag name '{name}' doesn't exist\n")
        exit_process(1)
    return info


def set_command_line_option_with_mode(
    name: str,
    value: str,
    set_mode: FlagSettingMode,
    registry: Optional[FlagRegistry] = None
) -> str:
    """Set the named flag from text.

    Directive flags (--flagfile and friends) are expanded as on the command
    line.

    Returns:
        Description of the new value, or "" if the flag does not exist or the
        value was rejected
    """
    registry = _registry_or_global(registry)
    with registry_lock(registry):
        flag = registry.find_flag_locked(name)
        if flag is None:
            return ""
        parser = CommandLineFlagParser(registry)
        return parser.process_single_option_locked(flag, value, set_mode)


def set_command_line_option(name: str, value: str, registry: Optional[FlagRegistry] = None) -> str:
    return set_command_line_option_with_mode(name, value, SET_FLAGS_VALUE, registry)


def get_all_flags(registry: Optional[FlagRegistry] = None) -> List[CommandLineFlagInfo]:
    """Info for every flag, sorted by declaring file and then by name."""
    registry = _registry_or_global(registry)
    with registry_lock(registry):
        infos = [flag.fill_command_line_flag_info() for flag in registry.flags_locked()]
    infos.sort(key=lambda info: (info.filename, info.name))
    return infos
