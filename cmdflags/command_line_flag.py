"""CommandLineFlag: the registry's record for a single named flag."""

from dataclasses import dataclass
from typing import Any, Optional
import os

from . import config
from .values import FlagValue, ValidateFn


@dataclass
class CommandLineFlagInfo:
    """Plain snapshot of everything externally visible about one flag."""
    name: str
    type: str
    description: str
    current_value: str
    default_value: str
    filename: str
    has_validator_fn: bool
    is_default: bool
    flag_ptr: Any = None


class CommandLineFlag:
    """Metadata plus current and default values for one flag.

    name, help and filename are fixed at construction. Everything else
    (modified bit, both values, validator) is mutable and is what
    copy_from() transfers, which is how snapshots save and restore flags.
    Mutations must happen while holding the owning registry's lock.
    """

    def __init__(
        self,
        name: str,
        help: str,
        filename: str,
        current_value: FlagValue,
        default_value: FlagValue
    ):
        assert current_value.flag_type == default_value.flag_type, \
            f"Flag '{name}' has mismatched current and default types"
        self._name = name
        self._help = help
        self._file = filename
        self.modified = False
        self.defvalue = default_value
        self.current = current_value
        self.validate_fn: Optional[ValidateFn] = None

    @property
    def name(self) -> str:
        return self._name

    @property
    def help(self) -> str:
        return self._help

    @property
    def filename(self) -> str:
        return self._file

    @property
    def current_value(self) -> str:
        return self.current.to_string()

    @property
    def default_value(self) -> str:
        return self.defvalue.to_string()

    @property
    def type_name(self) -> str:
        return self.defvalue.type_name

    @property
    def validate_function(self) -> Optional[ValidateFn]:
        return self.validate_fn

    @property
    def flag_ptr(self) -> FlagValue:
        """The current-value container, used as this flag's stable handle."""
        return self.current

    def clean_filename(self) -> str:
        """Filename with everything up to config.ROOT_DIR removed."""
        root_dir = config.ROOT_DIR
        if not root_dir:
            return self._file
        index = self._file.rfind(root_dir)
        if index < 0:
            return self._file
        return self._file[index + len(root_dir):].lstrip(os.sep)

    def fill_command_line_flag_info(self) -> CommandLineFlagInfo:
        """Build a CommandLineFlagInfo for this flag."""
        self.update_modified_bit()
        return CommandLineFlagInfo(
            name=self._name,
            type=self.type_name,
            description=self._help,
            current_value=self.current_value,
            default_value=self.default_value,
            filename=self.clean_filename(),
            has_validator_fn=self.validate_fn is not None,
            is_default=not self.modified,
            flag_ptr=self.flag_ptr,
        )

    def update_modified_bit(self) -> None:
        """Mark the flag modified if its value was written without going through the registry."""
        if not self.modified and not self.current.equal(self.defvalue):
            self.modified = True

    def copy_from(self, src: 'CommandLineFlag') -> None:
        # Only the mutable members; name, help and filename stay put
        if self.modified != src.modified:
            self.modified = src.modified
        if not self.current.equal(src.current):
            self.current.copy_from(src.current)
        if not self.defvalue.equal(src.defvalue):
            self.defvalue.copy_from(src.defvalue)
        if self.validate_fn is not src.validate_fn:
            self.validate_fn = src.validate_fn

    def validate(self, value: FlagValue) -> bool:
        """Check value against the registered validator. No validator means valid."""
        if self.validate_fn is None:
            return True
        return value.validate(self._name, self.validate_fn)

    def validate_current(self) -> bool:
        return self.validate(self.current)

    def __repr__(self) -> str:
        return f"CommandLineFlag('{self._name}', {self.type_name}, current={self.current_value!r})"
