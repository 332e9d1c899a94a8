"""Attach validator functions to declared flags.

A validator receives the flag name and a candidate value and returns True
if the value is acceptable:

    PORT = define_int32('port', 0, 'What port to listen on')

    def validate_port(flagname, value):
        return 0 < value < 32768

    register_flag_validator(PORT, validate_port)

Setting a flag to a value its validator rejects fails and leaves the flag
unchanged. At parse time, a flag whose default value fails validation must
be set on the command line.
"""

from typing import Optional, Union
import logging as log

from .definitions import FlagHolder
from .registry import FlagRegistry, registry_lock
from .values import FlagValue, ValidateFn


def add_flag_validator(
    flag_ptr: FlagValue,
    validate_fn: Optional[ValidateFn],
    registry: FlagRegistry
) -> bool:
    """Install validate_fn on the flag whose current value is flag_ptr.

    Registering the same function again is fine. Passing None removes the
    validator.

    Returns:
        False if no flag owns flag_ptr, or a different validator is already set
    """
    with registry_lock(registry):
        flag = registry.find_flag_via_ptr_locked(flag_ptr)
        if flag is None:
            log.warning(f"Ignoring register_flag_validator() for {flag_ptr!r}: no flag found for that value")
            return False
        if validate_fn is flag.validate_function:
            return True
        if validate_fn is not None and flag.validate_function is not None:
            log.warning(f"Ignoring register_flag_validator() for flag '{flag.name}': "
                        f"validate-fn already registered")
            return False
        flag.validate_fn = validate_fn
        return True


def register_flag_validator(
    flag: Union[FlagHolder, FlagValue],
    validate_fn: Optional[ValidateFn],
    registry: Optional[FlagRegistry] = None
) -> bool:
    """Register validate_fn for a declared flag. See add_flag_validator()."""
    if isinstance(flag, FlagHolder):
        if registry is None:
            registry = flag.registry
        flag = flag.flag_ptr
    if registry is None:
        registry = FlagRegistry.global_registry()
    return add_flag_validator(flag, validate_fn, registry)
