"""CommandLineFlagParser: turns argv, flag files and environment variables into flag values.

A parse runs in stages:

1. Apply --flagfile/--fromenv/--tryfromenv values that were set before
   parsing started (process_directive_flags_locked).
2. Scan argv (parse_new_command_line_flags). Each flag is applied as soon
   as it is seen, so directive flags expand in command-line order.
3. Validate every flag's current value (validate_all_flags).
4. Report everything that went wrong in one message (report_errors).

Errors from stages 1-3 accumulate per flag name and are only surfaced by
stage 4, after --undefok exemptions.
"""

from typing import Callable, Dict, List, Optional
import fnmatch
import logging as log
import os

from .command_line_flag import CommandLineFlag
from .config import (
    ENV_PREFIX,
    ERROR_PREFIX,
    FLAGFILE_FLAG,
    FROMENV_FLAG,
    TRYFROMENV_FLAG,
    UNDEFOK_FLAG,
)
from .errors import DIE, DO_NOT_DIE, exit_process, report_error
from .flag_types import FlagType
from .infos import ProgramInfo, get_program_info
from .registry import SET_FLAGS_VALUE, FlagRegistry, FlagSettingMode, registry_lock

DirectiveHandler = Callable[[str, FlagSettingMode], str]


def parse_flag_list(value: str) -> List[str]:
    """Split a comma-separated list of flag names or filenames.

    A trailing comma is allowed. Empty entries and entries starting with
    '-' are fatal.
    """
    entries: List[str] = []
    if not value:
        return entries
    parts = value.split(',')
    if len(parts) > 1 and parts[-1] == '':
        parts.pop()
    for part in parts:
        if not part:
            report_error(DIE, "ERROR: empty flaglist entry\n")
            continue
        if part.startswith('-'):
            report_error(DIE, f"ERROR: flag \"{part}\" begins with '-'\n")
            continue
        entries.append(part)
    return entries


def read_file_into_string(filename: str) -> str:
    """Read a whole UTF-8 file. Failing to read or decode it is fatal."""
    try:
        with open(filename, 'r', encoding='utf-8') as f:
            return f.read()
    except OSError as e:
        report_error(DIE, f"{filename}: {e.strerror or e}\n")
    except UnicodeDecodeError as e:
        report_error(DIE, f"{filename}: invalid UTF-8 at byte {e.start}\n")
    return ""


def _glob_matches(pattern: str, name: str) -> bool:
    """Shell-glob match where wildcards never match '/' (like FNM_PATHNAME)."""
    pattern_parts = pattern.split('/')
    name_parts = name.split('/')
    if len(pattern_parts) != len(name_parts):
        return False
    return all(fnmatch.fnmatchcase(part, pat) for part, pat in zip(name_parts, pattern_parts))


class CommandLineFlagParser:
    """Parses flags into one registry and collects the errors along the way.

    One parser instance is one parse session: its error maps keep growing
    across calls until the parser is thrown away.
    """

    def __init__(
        self,
        registry: FlagRegistry,
        program_info: Optional[ProgramInfo] = None,
        allow_reparsing: bool = False
    ):
        self._registry = registry
        self._program_info = program_info if program_info is not None else get_program_info()
        self._allow_reparsing = allow_reparsing
        # flag name -> error message ("" once an error is forgiven)
        self.error_flags: Dict[str, str] = {}
        # names seen on the command line that no flag answers to
        self.undefined_names: Dict[str, str] = {}
        self._directives: Dict[str, DirectiveHandler] = {
            FLAGFILE_FLAG: self.process_flagfile_locked,
            FROMENV_FLAG: lambda value, mode: self.process_fromenv_locked(value, mode, True),
            TRYFROMENV_FLAG: lambda value, mode: self.process_fromenv_locked(value, mode, False),
        }

    @property
    def registry(self) -> FlagRegistry:
        return self._registry

    def _directive_value_locked(self, name: str) -> str:
        flag = self._registry.find_flag_locked(name)
        return flag.current_value if flag is not None else ""

    def process_directive_flags_locked(self, set_mode: FlagSettingMode = SET_FLAGS_VALUE) -> str:
        """Expand --flagfile, --fromenv and --tryfromenv as they stand right now.

        Programs may set these before parsing; they are evaluated as if they
        were the first flags on the command line.
        """
        msg = ""
        for name in (FLAGFILE_FLAG, FROMENV_FLAG, TRYFROMENV_FLAG):
            msg += self._directives[name](self._directive_value_locked(name), set_mode)
        return msg

    def parse_new_command_line_flags(self, argv: List[str], remove_flags: bool) -> int:
        """Apply every flag in argv, moving positional arguments to the end.

        argv is modified in place. Like getopt(), positional arguments are
        permuted behind the flags, keeping their order; "--" stops flag
        processing. With remove_flags, argv is left holding the program
        name followed by the positional arguments.

        Returns:
            len(argv) after flag removal, or without removal the index of
            the first positional argument
        """
        first_nonopt = len(argv)

        with registry_lock(self._registry):
            i = 1
            while i < first_nonopt:
                arg = argv[i]

                if not arg.startswith('-') or arg == '-':
                    # A program argument, push it to the back
                    del argv[i]
                    argv.append(arg)
                    first_nonopt -= 1
                    continue

                name_and_value = arg[1:]
                if name_and_value.startswith('-'):
                    name_and_value = name_and_value[1:]

                # -- alone stops option parsing, as with GNU getopt
                if not name_and_value:
                    first_nonopt = i + 1
                    break

                flag, key, value, error_message = self._registry.split_argument_locked(name_and_value)
                if flag is None:
                    self.undefined_names[key] = ""
                    self.error_flags[key] = error_message
                    i += 1
                    continue

                if value is None:
                    # Boolean flags always get a value from split_argument_locked()
                    assert flag.current.flag_type != FlagType.BOOL
                    if i + 1 >= first_nonopt:
                        message = f"{ERROR_PREFIX}flag '{argv[i]}' is missing its argument"
                        if flag.help and flag.help[0] > '\001':
                            message += f"; flag description: {flag.help}"
                        self.error_flags[key] = message + "\n"
                        # Once argv positions are off, nothing after can be trusted
                        break

                    i += 1
                    value = argv[i]
                    self._warn_if_value_looks_like_flag(flag, value)

                self.process_single_option_locked(flag, value, SET_FLAGS_VALUE)
                i += 1

        if remove_flags:
            argv[:] = [argv[0]] + argv[first_nonopt:]
            return len(argv)
        return first_nonopt

    def _warn_if_value_looks_like_flag(self, flag: CommandLineFlag, value: str) -> None:
        """Catch '--my_string_flag --other_flag', where the string flag was treated as a bool.

        Requiring "true" or "false" in the help keeps '-lat -30.5' quiet.
        """
        if (value.startswith('-') and flag.current.flag_type == FlagType.STRING
                and ('true' in flag.help or 'false' in flag.help)):
            log.warning(f"Did you really mean to set flag '{flag.name}' to the value '{value}'?")

    def process_single_option_locked(
        self,
        flag: CommandLineFlag,
        value: Optional[str],
        set_mode: FlagSettingMode
    ) -> str:
        """Set one flag and expand it if it is a directive flag.

        Returns:
            Description of the new value(s), or "" on error. Directive flags
            can make this describe many flags.
        """
        msg = ""
        if value is not None:
            ok, msg = self._registry.set_flag_locked(flag, value, set_mode)
            if not ok:
                self.error_flags[flag.name] = msg
                return ""

        handler = self._directives.get(flag.name)
        if handler is not None:
            msg += handler(flag.current_value, set_mode)
        return msg

    def process_flagfile_locked(self, flagval: str, set_mode: FlagSettingMode) -> str:
        if not flagval:
            return ""

        msg = ""
        for filename in parse_flag_list(flagval):
            log.debug(f"Reading flags from {filename}")
            msg += self.process_options_from_string_locked(read_file_into_string(filename), set_mode)
        return msg

    def process_fromenv_locked(
        self,
        flagval: str,
        set_mode: FlagSettingMode,
        errors_are_fatal: bool
    ) -> str:
        """Set each named flag from its FLAGS_<name> environment variable.

        errors_are_fatal distinguishes --fromenv (a missing variable is an
        error) from --tryfromenv (a missing variable is skipped).
        """
        if not flagval:
            return ""

        msg = ""
        for flagname in parse_flag_list(flagval):
            flag = self._registry.find_flag_locked(flagname)
            if flag is None:
                self.error_flags[flagname] = (
                    f"{ERROR_PREFIX}unknown command line flag '{flagname}' "
                    f"(via --fromenv or --tryfromenv)\n")
                self.undefined_names[flagname] = ""
                continue

            envname = ENV_PREFIX + flagname
            envval = os.environ.get(envname)
            if envval is None:
                if errors_are_fatal:
                    self.error_flags[flagname] = f"{ERROR_PREFIX}{envname} not found in environment\n"
                continue

            if envval in (FROMENV_FLAG, TRYFROMENV_FLAG):
                self.error_flags[flagname] = (
                    f"{ERROR_PREFIX}infinite recursion on environment flag '{envval}'\n")
                continue

            log.debug(f"Setting flag '{flagname}' from {envname}")
            msg += self.process_single_option_locked(flag, envval, set_mode)
        return msg

    def process_options_from_string_locked(self, contents: str, set_mode: FlagSettingMode) -> str:
        """Apply flags written in flag-file format.

        Each line is one of:
            - blank, or a '#' comment: skipped
            - a list of program-name globs: starts a section; the flag lines
              that follow only apply if one glob matches this program
            - a --flag=value line: applied when the current section matches

        Bad flag lines are ignored without error.
        """
        retval = ""
        flags_are_relevant = True
        in_filename_section = False

        for raw_line in contents.replace('\r', '\n').split('\n'):
            line = raw_line.lstrip()
            if not line or line.startswith('#'):
                continue

            if line.startswith('-'):
                in_filename_section = False
                if not flags_are_relevant:
                    continue

                name_and_value = line[1:]
                if name_and_value.startswith('-'):
                    name_and_value = name_and_value[1:]
                flag, key, value, _ = self._registry.split_argument_locked(name_and_value)
                if flag is None:
                    log.debug(f"Ignoring unknown flag '{key}' in flag file")
                elif value is None:
                    log.debug(f"Ignoring flag '{key}' with no value in flag file")
                else:
                    retval += self.process_single_option_locked(flag, value, set_mode)
            else:
                if not in_filename_section:
                    # A new section: assume it is not for us until a glob matches
                    in_filename_section = True
                    flags_are_relevant = False

                for glob in line.split(' '):
                    if flags_are_relevant:
                        break
                    if self._program_name_matches(glob):
                        flags_are_relevant = True
        return retval

    def _program_name_matches(self, glob: str) -> bool:
        full_name = self._program_info.invocation_name
        short_name = self._program_info.invocation_short_name
        return (glob == full_name
                or glob == short_name
                or _glob_matches(glob, full_name)
                or _glob_matches(glob, short_name))

    def validate_all_flags(self) -> None:
        """Record an error for every flag whose current value fails its validator."""
        with registry_lock(self._registry):
            for flag in self._registry.flags_locked():
                if not flag.validate_current():
                    # Any existing error for this flag already covers it
                    if not self.error_flags.get(flag.name):
                        self.error_flags[flag.name] = (
                            f"{ERROR_PREFIX}--{flag.name} must be set on the commandline "
                            f"(default value fails validation)\n")

    def report_errors(self) -> bool:
        """Write all outstanding errors to stderr.

        Undefined flags listed in --undefok are forgiven, and so are all
        undefined flags when reparsing is allowed.

        Returns:
            True if any error remained
        """
        with registry_lock(self._registry):
            undefok = self._directive_value_locked(UNDEFOK_FLAG)

        for name in parse_flag_list(undefok):
            # --no<name> is how an undefined boolean would show up
            no_version = "no" + name
            if name in self.undefined_names:
                self.error_flags[name] = ""
            elif no_version in self.undefined_names:
                self.error_flags[no_version] = ""

        if self._allow_reparsing:
            for name in self.undefined_names:
                self.error_flags[name] = ""

        error_message = "".join(
            self.error_flags[name] for name in sorted(self.error_flags) if self.error_flags[name])
        if error_message:
            report_error(DO_NOT_DIE, error_message)
            return True
        return False


def exit_on_errors(parser: CommandLineFlagParser) -> None:
    """Report the parser's errors and terminate if there were any."""
    if parser.report_errors():
        exit_process(1)
