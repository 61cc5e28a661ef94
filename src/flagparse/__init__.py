"""
flagparse - declarative command-line flag parsing.

Register flags with a default value and help text on a FlagRegistry, parse
the argument vector, and read each flag's parsed value from the Flag object
returned at registration. Supports short and long aliases, inline values
(``--name=value`` or ``--name:value``), a ``--`` terminator for passthrough
arguments, typed conversion for a fixed set of value kinds, generated help
text, and flag defaults loaded from YAML or JSON files.
"""

from .errors import (
    ConfigFileError,
    ConversionError,
    DuplicateFlagError,
    FlagError,
    MissingValueError,
    UnrecognizedFlagError,
    UnsupportedTypeError,
)
from .flag import Flag
from .registry import HELP_EXIT_CODE, FlagRegistry, ParseStatus
from .values import ComparisonMode, DayOfWeek, ValueKind, Version

__version__ = "1.0.0"
__all__ = [
    "ComparisonMode",
    "ConfigFileError",
    "ConversionError",
    "DayOfWeek",
    "DuplicateFlagError",
    "Flag",
    "FlagError",
    "FlagRegistry",
    "HELP_EXIT_CODE",
    "MissingValueError",
    "ParseStatus",
    "UnrecognizedFlagError",
    "UnsupportedTypeError",
    "ValueKind",
    "Version",
]
