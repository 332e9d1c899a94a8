"""Error reporting and the replaceable process-exit hook."""

from enum import Enum
from typing import Callable
import sys


class DieWhenReporting(Enum):
    """Whether report_error() should terminate after writing the message."""
    DIE = 1
    DO_NOT_DIE = 2


DIE = DieWhenReporting.DIE
DO_NOT_DIE = DieWhenReporting.DO_NOT_DIE

_exit_func: Callable[[int], None] = sys.exit


def set_exit_func(func: Callable[[int], None]) -> Callable[[int], None]:
    """Replace the function called on unrecoverable errors.

    Tests swap in a function that raises instead of terminating. A hook that
    returns normally lets the caller carry on after the error.

    Returns:
        The previously installed hook
    """
    global _exit_func
    previous = _exit_func
    _exit_func = func
    return previous


def get_exit_func() -> Callable[[int], None]:
    return _exit_func


def exit_process(status: int = 1) -> None:
    """Terminate through the installed exit hook."""
    _exit_func(status)


def report_error(should_die: DieWhenReporting, message: str) -> None:
    """Write message to stderr and, for DIE, call the exit hook with status 1."""
    sys.stderr.write(message)
    sys.stderr.flush()
    if should_die == DIE:
        exit_process(1)
