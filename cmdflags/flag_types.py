"""Closed set of value kinds a flag can hold."""

from enum import IntEnum
from typing import Any


class FlagType(IntEnum):
    """Type tags for flag values."""
    BOOL = 0
    INT32 = 1
    UINT32 = 2
    INT64 = 3
    UINT64 = 4
    DOUBLE = 5
    STRING = 6

    @property
    def type_name(self) -> str:
        """Get the name used for this type in flag info and error messages."""
        names = {
            FlagType.BOOL: "bool",
            FlagType.INT32: "int32",
            FlagType.UINT32: "uint32",
            FlagType.INT64: "int64",
            FlagType.UINT64: "uint64",
            FlagType.DOUBLE: "double",
            FlagType.STRING: "string",
        }
        return names[self]

    @property
    def zero_value(self) -> Any:
        """Value a freshly created value of this type starts with."""
        if self == FlagType.BOOL:
            return False
        if self == FlagType.DOUBLE:
            return 0.0
        if self == FlagType.STRING:
            return ""
        return 0

    @property
    def is_unsigned(self) -> bool:
        return self in (FlagType.UINT32, FlagType.UINT64)

    @property
    def value_range(self):
        """(min, max) of an integer type."""
        ranges = {
            FlagType.INT32: (-(1 << 31), (1 << 31) - 1),
            FlagType.UINT32: (0, (1 << 32) - 1),
            FlagType.INT64: (-(1 << 63), (1 << 63) - 1),
            FlagType.UINT64: (0, (1 << 64) - 1),
        }
        return ranges[self]

    @classmethod
    def from_name(cls, type_name: str) -> 'FlagType':
        """Look up a type by name, e.g. 'int32'.

        Raises:
            ValueError: If the name is not one of the known types
        """
        for flag_type in cls:
            if flag_type.type_name == type_name:
                return flag_type
        raise ValueError(f"Unknown flag type name '{type_name}'")
