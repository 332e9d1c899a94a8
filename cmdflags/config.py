"""Library-wide constants.

Everything that controls message formats, environment lookups and value
spellings lives here so the rest of the package has a single place to read
them from.
"""

import os

# Prefix for every error message the parser records
ERROR_PREFIX = "ERROR: "

# --fromenv=foo looks up FLAGS_foo
ENV_PREFIX = "FLAGS_"

# Accepted spellings for boolean values (compared case-insensitively).
# The two tuples are the same length and are checked pairwise.
TRUE_SPELLINGS = ("1", "t", "true", "y", "yes")
FALSE_SPELLINGS = ("0", "f", "false", "n", "no")

# Help text stored for flags when help strings are stripped
STRIPPED_FLAG_HELP = "\001\002\003\004 (unknown) \004\003\002\001"

# Set CMDFLAGS_STRIP_FLAG_HELP=1 to replace all flag help with the marker above
STRIP_FLAG_HELP = os.environ.get("CMDFLAGS_STRIP_FLAG_HELP", "0") not in ("", "0")

# Names of the built-in flags that trigger recursive processing
FLAGFILE_FLAG = "flagfile"
FROMENV_FLAG = "fromenv"
TRYFROMENV_FLAG = "tryfromenv"
UNDEFOK_FLAG = "undefok"

# Program name recorded before set_argv() is called
UNKNOWN_PROGRAM_NAME = "UNKNOWN"

# Prefix stripped from filenames reported in flag info, e.g. a source root.
# Empty means filenames are reported unchanged.
ROOT_DIR = os.environ.get("CMDFLAGS_ROOT_DIR", "")
