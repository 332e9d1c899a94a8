"""Top-level entry points for parsing the command line.

    import sys
    from cmdflags import define_int32, parse_command_line_flags

    PORT = define_int32('port', 8080, 'Port to listen on')

    def main():
        parse_command_line_flags(sys.argv, remove_flags=True)
        serve(PORT.value, sys.argv[1:])
"""

from typing import Callable, List, Optional
import sys

from .errors import exit_process
from .infos import ProgramInfo, get_program_info
from .parser import CommandLineFlagParser, exit_on_errors
from .registry import SET_FLAGS_VALUE, FlagRegistry, registry_lock
from .saver import FlagSaver

_allow_command_line_reparsing = False

# Called between argv scanning and validation by the help-aware entry
# points; this is where --help style flags get rendered
_help_handler: Optional[Callable[[], None]] = None


def set_help_handler(handler: Optional[Callable[[], None]]) -> Optional[Callable[[], None]]:
    """Install the function that handles help flags. Returns the previous one."""
    global _help_handler
    previous = _help_handler
    _help_handler = handler
    return previous


def allow_command_line_reparsing() -> None:
    """Tolerate unknown flags; a later reparse (e.g. after loading a plugin) may define them."""
    global _allow_command_line_reparsing
    _allow_command_line_reparsing = True


def is_command_line_reparsing_allowed() -> bool:
    return _allow_command_line_reparsing


def _parse_command_line_flags_internal(
    argv: List[str],
    remove_flags: bool,
    do_report: bool,
    registry: Optional[FlagRegistry],
    program_info: Optional[ProgramInfo]
) -> int:
    if program_info is None:
        program_info = get_program_info()
    program_info.set_argv(argv)

    if registry is None:
        registry = FlagRegistry.global_registry()
    parser = CommandLineFlagParser(registry, program_info, _allow_command_line_reparsing)

    # Directive flags set before parsing count as the first flags on the line
    with registry_lock(registry):
        parser.process_directive_flags_locked(SET_FLAGS_VALUE)

    result = parser.parse_new_command_line_flags(argv, remove_flags)

    if do_report and _help_handler is not None:
        _help_handler()

    parser.validate_all_flags()
    exit_on_errors(parser)
    return result


def parse_command_line_flags(
    argv: Optional[List[str]] = None,
    remove_flags: bool = True,
    registry: Optional[FlagRegistry] = None,
    program_info: Optional[ProgramInfo] = None
) -> int:
    """Parse argv (sys.argv by default) into the registered flags.

    argv is rewritten in place: positional arguments end up after the flags,
    and with remove_flags only the program name and positional arguments
    remain. Any error is written to stderr and terminates the process
    through the exit hook.

    Returns:
        len(argv) after removal, or the index of the first positional
        argument when flags are kept
    """
    if argv is None:
        argv = sys.argv
    return _parse_command_line_flags_internal(argv, remove_flags, True, registry, program_info)


def parse_command_line_non_help_flags(
    argv: Optional[List[str]] = None,
    remove_flags: bool = True,
    registry: Optional[FlagRegistry] = None,
    program_info: Optional[ProgramInfo] = None
) -> int:
    """Same as parse_command_line_flags() without running the help handler."""
    if argv is None:
        argv = sys.argv
    return _parse_command_line_flags_internal(argv, remove_flags, False, registry, program_info)


def reparse_command_line_non_help_flags(
    registry: Optional[FlagRegistry] = None,
    program_info: Optional[ProgramInfo] = None
) -> None:
    """Parse the argv recorded by the first parse again, leaving it untouched."""
    if program_info is None:
        program_info = get_program_info()
    argv = program_info.argvs
    parse_command_line_non_help_flags(argv, False, registry, program_info)


def read_flags_from_string(
    flagfile_contents: str,
    errors_are_fatal: bool = True,
    registry: Optional[FlagRegistry] = None,
    program_info: Optional[ProgramInfo] = None
) -> bool:
    """Apply flags written in flag-file format.

    If anything goes wrong, every flag is restored to its state before the
    call.

    Returns:
        True on success; False on error when errors_are_fatal is off
    """
    if registry is None:
        registry = FlagRegistry.global_registry()
    saved_states = FlagSaver(registry)

    parser = CommandLineFlagParser(registry, program_info)
    with registry_lock(registry):
        parser.process_options_from_string_locked(flagfile_contents, SET_FLAGS_VALUE)

    if _help_handler is not None:
        _help_handler()

    if parser.report_errors():
        saved_states.restore()
        if errors_are_fatal:
            exit_process(1)
        return False
    saved_states.discard()
    return True


def shut_down_command_line_flags() -> None:
    """Drop the global registry. Call at exit to release every flag."""
    FlagRegistry.delete_global_registry()
