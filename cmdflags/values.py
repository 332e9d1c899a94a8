"""FlagValue: the typed container holding a single flag value.

A FlagValue knows how to parse itself from command-line text and how to
render itself back. Parsing follows the C library conventions the flag
syntax was designed around: integers use strtol() rules (optional leading
whitespace and sign, no trailing characters), a leading "0x" selects
hexadecimal but a leading "0" never selects octal, and doubles use strtod()
rules.
"""

import math
import re
from typing import Any, Callable, Optional, Union

from .config import FALSE_SPELLINGS, TRUE_SPELLINGS
from .flag_types import FlagType

ValidateFn = Callable[[str, Any], bool]

_DECIMAL_INT_RE = re.compile(r'[ \t\n\v\f\r]*[+-]?[0-9]+\Z')
_HEX_INT_RE = re.compile(r'0[xX][0-9a-fA-F]+\Z')
_DOUBLE_RE = re.compile(
    r'[ \t\n\v\f\r]*[+-]?'
    r'(?:(?P<hex>0x(?:[0-9a-f]+\.?[0-9a-f]*|\.[0-9a-f]+)(?:p[+-]?[0-9]+)?)'
    r'|(?P<dec>(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:e[+-]?[0-9]+)?)'
    r'|(?P<inf>inf(?:inity)?)'
    r'|(?P<nan>nan(?:\([0-9a-z_]*\))?))\Z',
    re.IGNORECASE)


def _parse_integer(text: str, flag_type: FlagType) -> Optional[int]:
    """Parse text as an integer of flag_type, or return None."""
    if text.startswith(('0x', '0X')):
        if not _HEX_INT_RE.match(text):
            return None
        result = int(text, 16)
    else:
        if not _DECIMAL_INT_RE.match(text):
            return None
        result = int(text.strip(), 10)

    # Unsigned types reject a minus sign, even on "-0"
    if flag_type.is_unsigned and text.lstrip().startswith('-'):
        return None
    low, high = flag_type.value_range
    if result < low or result > high:
        return None
    return result


def _has_nonzero_mantissa(number: str, exponent_marker: str) -> bool:
    mantissa = number.lower().split(exponent_marker, 1)[0]
    if exponent_marker == 'p':
        mantissa = mantissa[2:]  # drop "0x"
    return any(c not in '0.' for c in mantissa)


def _parse_double(text: str) -> Optional[float]:
    """Parse text the way strtod() would, or return None.

    Overflow to infinity and underflow of a nonzero number to zero both
    fail, as strtod() reports ERANGE for them.
    """
    match = _DOUBLE_RE.match(text)
    if not match:
        return None

    body = text.strip()
    negative = body.startswith('-')
    if match.group('hex'):
        try:
            result = float.fromhex(body)
        except OverflowError:
            return None
        if result == 0.0 and _has_nonzero_mantissa(match.group('hex'), 'p'):
            return None
    elif match.group('nan'):
        result = float('nan')
        if negative:
            result = -result
    elif match.group('inf'):
        result = float('-inf') if negative else float('inf')
    else:
        result = float(body)
        if math.isinf(result):
            return None
        if result == 0.0 and _has_nonzero_mantissa(match.group('dec'), 'e'):
            return None
    return result


class FlagValue:
    """A type-tagged value that converts to and from text.

    The type tag is fixed at construction. Every parse goes through a
    scratch copy made with new(), so a failed parse never touches the
    live value.
    """

    def __init__(self, value: Any, flag_type: Union[FlagType, str]):
        """Initialize a FlagValue.

        Args:
            value: Initial value, already of the right Python type
            flag_type: A FlagType, or its name such as 'int32'

        Raises:
            ValueError: If flag_type names an unknown type
        """
        if not isinstance(flag_type, FlagType):
            flag_type = FlagType.from_name(flag_type)
        self._type = flag_type
        self.value = value

    @property
    def flag_type(self) -> FlagType:
        return self._type

    @property
    def type_name(self) -> str:
        return self._type.type_name

    def parse_from(self, text: str) -> bool:
        """Set the value from text. Returns False, leaving the value alone, if text is illegal."""
        if self._type == FlagType.BOOL:
            lowered = text.lower()
            for true_word, false_word in zip(TRUE_SPELLINGS, FALSE_SPELLINGS):
                if lowered == true_word:
                    self.value = True
                    return True
                if lowered == false_word:
                    self.value = False
                    return True
            return False

        if self._type == FlagType.STRING:
            self.value = text
            return True

        # Empty string is only legal for strings
        if not text:
            return False

        if self._type == FlagType.DOUBLE:
            result = _parse_double(text)
        else:
            result = _parse_integer(text, self._type)
        if result is None:
            return False
        self.value = result
        return True

    def to_string(self) -> str:
        if self._type == FlagType.BOOL:
            return "true" if self.value else "false"
        if self._type == FlagType.DOUBLE:
            # 17 significant digits round-trip every double
            return "%.17g" % self.value
        if self._type == FlagType.STRING:
            return self.value
        return str(self.value)

    def equal(self, other: 'FlagValue') -> bool:
        if self._type != other._type:
            return False
        return self.value == other.value

    def new(self) -> 'FlagValue':
        """Create a new FlagValue of the same type holding the zero value."""
        return FlagValue(self._type.zero_value, self._type)

    def copy_from(self, other: 'FlagValue') -> None:
        assert self._type == other._type, \
            f"Cannot copy {other.type_name} value into {self.type_name} value"
        self.value = other.value

    def validate(self, flag_name: str, validate_fn: ValidateFn) -> bool:
        """Run validate_fn(flag_name, value) and return its verdict."""
        return bool(validate_fn(flag_name, self.value))

    def __repr__(self) -> str:
        return f"FlagValue({self.value!r}, '{self.type_name}')"
