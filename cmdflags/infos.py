"""Information about the running program: argv, invocation name, usage and version.

The module keeps one ProgramInfo for the process. Parsers take a
ProgramInfo explicitly, so tests can build their own instead of touching
the process-wide one.
"""

from typing import List, Optional, Sequence
import os

from .config import UNKNOWN_PROGRAM_NAME


class ProgramInfo:
    """What the program was invoked as, plus its usage and version strings."""

    def __init__(self) -> None:
        self._argv0 = UNKNOWN_PROGRAM_NAME
        self._cmdline = ""
        self._argvs: List[str] = []
        self._argv_sum = 0
        self._argv_set = False
        self._usage = ""
        self._version = ""

    def set_argv(self, argv: Sequence[str]) -> None:
        """Record argv. Only the first successful call has any effect.

        Raises:
            ValueError: If argv does not even hold the program name
        """
        if self._argv_set:
            return
        if len(argv) == 0:
            raise ValueError("argv must contain at least the program name")
        self._argv_set = True

        self._argv0 = argv[0]
        self._argvs = list(argv)
        self._cmdline = " ".join(argv)
        # Simple checksum of every character on the command line
        self._argv_sum = sum(ord(c) for c in self._cmdline) & 0xFFFFFFFF

    @property
    def argvs(self) -> List[str]:
        return list(self._argvs)

    @property
    def argv(self) -> str:
        """The whole command line joined with spaces."""
        return self._cmdline

    @property
    def argv0(self) -> str:
        return self._argv0

    @property
    def argv_sum(self) -> int:
        return self._argv_sum

    @property
    def invocation_name(self) -> str:
        return self._argv0

    @property
    def invocation_short_name(self) -> str:
        """Basename of the invocation name."""
        pos = self._argv0.rfind('/')
        if pos < 0 and os.sep != '/':
            pos = self._argv0.rfind(os.sep)
        return self._argv0 if pos < 0 else self._argv0[pos + 1:]

    @property
    def usage(self) -> str:
        if not self._usage:
            return "Warning: set_usage_message() never called"
        return self._usage

    @usage.setter
    def usage(self, usage: str) -> None:
        self._usage = usage

    @property
    def version(self) -> str:
        return self._version

    @version.setter
    def version(self, version: str) -> None:
        self._version = version


_program_info = ProgramInfo()


def get_program_info() -> ProgramInfo:
    return _program_info


def reset_program_info(info: Optional[ProgramInfo] = None) -> ProgramInfo:
    """Replace the process-wide ProgramInfo and return the new one."""
    global _program_info
    _program_info = info if info is not None else ProgramInfo()
    return _program_info


def set_argv(argv: Sequence[str]) -> None:
    _program_info.set_argv(argv)


def get_argvs() -> List[str]:
    return _program_info.argvs


def get_argv() -> str:
    return _program_info.argv


def get_argv0() -> str:
    return _program_info.argv0


def get_argv_sum() -> int:
    return _program_info.argv_sum


def program_invocation_name() -> str:
    return _program_info.invocation_name


def program_invocation_short_name() -> str:
    return _program_info.invocation_short_name


def set_usage_message(usage: str) -> None:
    _program_info.usage = usage


def program_usage() -> str:
    return _program_info.usage


def set_version_string(version: str) -> None:
    _program_info.version = version


def version_string() -> str:
    return _program_info.version
