"""
Value kinds supported by flagparse and the converters behind them.

Every flag is declared with one kind from the closed ValueKind set. The
converter table maps each kind to a function turning command-line text into
a typed Python value; converters raise ValueError on malformed input and the
calling Flag wraps that into a ConversionError.

Name matching (flag aliases and enumeration member names) goes through a
ComparisonMode, which decides case sensitivity.
"""

import functools
import ipaddress
import math
import re
import struct
import unicodedata
from datetime import datetime, timedelta
from decimal import Decimal, InvalidOperation
from enum import Enum, IntEnum
from pathlib import Path, PurePath
from typing import Any, Callable, NamedTuple, Optional


class ComparisonMode(Enum):
    """
    Case-sensitivity policy for alias and enumeration-name matching.

    The culture variants compare NFC-normalized text and fold case with
    str.casefold; the ordinal variants compare code points directly and fold
    case with str.upper. Current and invariant culture behave the same.
    """

    CURRENT_CULTURE = "current_culture"
    CURRENT_CULTURE_IGNORE_CASE = "current_culture_ignore_case"
    INVARIANT_CULTURE = "invariant_culture"
    INVARIANT_CULTURE_IGNORE_CASE = "invariant_culture_ignore_case"
    ORDINAL = "ordinal"
    ORDINAL_IGNORE_CASE = "ordinal_ignore_case"

    @property
    def ignore_case(self) -> bool:
        return self.value.endswith("_ignore_case")

    @property
    def ordinal(self) -> bool:
        return self.value.startswith("ordinal")

    def normalize(self, text: str) -> str:
        if self.ordinal:
            return text.upper() if self.ignore_case else text
        text = unicodedata.normalize("NFC", text)
        return text.casefold() if self.ignore_case else text

    def equals(self, left: str, right: str) -> bool:
        return self.normalize(left) == self.normalize(right)


DEFAULT_COMPARISON = ComparisonMode.CURRENT_CULTURE_IGNORE_CASE


class ValueKind(Enum):
    """The closed set of value kinds a flag can hold; values are display names."""

    BOOL = "bool"
    INT8 = "int8"
    UINT8 = "uint8"
    INT16 = "int16"
    UINT16 = "uint16"
    INT32 = "int32"
    UINT32 = "uint32"
    INT64 = "int64"
    UINT64 = "uint64"
    FLOAT = "float"
    DOUBLE = "double"
    DECIMAL = "decimal"
    STRING = "string"
    ENUM = "enum"
    DATETIME = "datetime"
    DURATION = "duration"
    VERSION = "version"
    IP_ADDRESS = "ip address"
    FILE = "file"
    DIRECTORY = "directory"


class Version(NamedTuple):
    """A dotted version number: major.minor[.build[.revision]]."""

    major: int
    minor: int
    build: Optional[int] = None
    revision: Optional[int] = None

    @classmethod
    def parse(cls, text: str) -> "Version":
        parts = text.strip().split(".")
        if not 2 <= len(parts) <= 4 or not all(_DIGITS.fullmatch(p) for p in parts):
            raise ValueError(f"Invalid version: '{text}'")
        return cls(*(int(part) for part in parts))

    def __str__(self) -> str:
        return ".".join(str(part) for part in self if part is not None)


class DayOfWeek(IntEnum):
    SUNDAY = 0
    MONDAY = 1
    TUESDAY = 2
    WEDNESDAY = 3
    THURSDAY = 4
    FRIDAY = 5
    SATURDAY = 6


_DIGITS = re.compile(r"[0-9]+")
_INTEGER = re.compile(r"\s*[+-]?[0-9]+\s*")
_DURATION = re.compile(
    r"\s*(?P<sign>-)?(?:(?P<days>[0-9]+)\.)?"
    r"(?P<hours>[0-9]{1,2}):(?P<minutes>[0-9]{1,2})"
    r"(?::(?P<seconds>[0-9]{1,2})(?:\.(?P<fraction>[0-9]{1,7}))?)?\s*"
)

INTEGER_RANGES = {
    ValueKind.INT8: (-(2**7), 2**7 - 1),
    ValueKind.UINT8: (0, 2**8 - 1),
    ValueKind.INT16: (-(2**15), 2**15 - 1),
    ValueKind.UINT16: (0, 2**16 - 1),
    ValueKind.INT32: (-(2**31), 2**31 - 1),
    ValueKind.UINT32: (0, 2**32 - 1),
    ValueKind.INT64: (-(2**63), 2**63 - 1),
    ValueKind.UINT64: (0, 2**64 - 1),
}


def _to_bool(raw: str, target: Any, comparison: ComparisonMode) -> bool:
    text = raw.strip().lower()
    if text == "true":
        return True
    if text == "false":
        return False
    raise ValueError(f"Invalid boolean value: '{raw}'. Must be true or false")


def _to_integer(
    bounds: tuple[int, int], raw: str, target: Any, comparison: ComparisonMode
) -> int:
    if not _INTEGER.fullmatch(raw):
        raise ValueError(f"Invalid integer value: '{raw}'")
    value = int(raw)
    low, high = bounds
    if not low <= value <= high:
        raise ValueError(f"Value {value} is outside the range {low}..{high}")
    return value


def _to_double(raw: str, target: Any, comparison: ComparisonMode) -> float:
    if "_" in raw:
        raise ValueError(f"Invalid floating point value: '{raw}'")
    return float(raw)


def _to_single(raw: str, target: Any, comparison: ComparisonMode) -> float:
    value = _to_double(raw, target, comparison)
    try:
        single = struct.unpack("f", struct.pack("f", value))[0]
    except OverflowError as e:
        raise ValueError(f"Value {raw} is too large for single precision") from e
    if math.isinf(single) and not math.isinf(value):
        raise ValueError(f"Value {raw} is too large for single precision")
    return single


def _to_decimal(raw: str, target: Any, comparison: ComparisonMode) -> Decimal:
    try:
        value = Decimal(raw.strip())
    except InvalidOperation as e:
        raise ValueError(f"Invalid decimal value: '{raw}'") from e
    if not value.is_finite():
        raise ValueError(f"Decimal value must be finite, got '{raw}'")
    return value


def _to_string(raw: str, target: Any, comparison: ComparisonMode) -> str:
    return raw


def _to_enum(raw: str, target: Any, comparison: ComparisonMode) -> Enum:
    text = raw.strip()
    for name, member in target.__members__.items():
        if comparison.equals(name, text):
            return member
    if _INTEGER.fullmatch(text):
        return target(int(text))
    raise ValueError(f"'{raw}' is not a member of {target.__name__}")


def _to_datetime(raw: str, target: Any, comparison: ComparisonMode) -> datetime:
    return datetime.fromisoformat(raw.strip())


def _to_duration(raw: str, target: Any, comparison: ComparisonMode) -> timedelta:
    if _INTEGER.fullmatch(raw):
        return timedelta(days=int(raw))
    match = _DURATION.fullmatch(raw)
    if match is None:
        raise ValueError(f"Invalid duration: '{raw}'")
    hours = int(match["hours"])
    minutes = int(match["minutes"])
    seconds = int(match["seconds"] or 0)
    if hours > 23 or minutes > 59 or seconds > 59:
        raise ValueError(f"Duration component out of range: '{raw}'")
    # fraction is in 100ns ticks
    ticks = int((match["fraction"] or "0").ljust(7, "0"))
    value = timedelta(
        days=int(match["days"] or 0),
        hours=hours,
        minutes=minutes,
        seconds=seconds,
        microseconds=ticks // 10,
    )
    return -value if match["sign"] else value


def _to_version(raw: str, target: Any, comparison: ComparisonMode) -> Version:
    return Version.parse(raw)


def _to_ip_address(raw: str, target: Any, comparison: ComparisonMode) -> Any:
    return ipaddress.ip_address(raw.strip())


def _to_path(raw: str, target: Any, comparison: ComparisonMode) -> Path:
    if not raw.strip():
        raise ValueError("Path must not be empty")
    return Path(raw)


Converter = Callable[[str, Any, ComparisonMode], Any]

CONVERTERS: dict[ValueKind, Converter] = {
    ValueKind.BOOL: _to_bool,
    **{
        kind: functools.partial(_to_integer, bounds)
        for kind, bounds in INTEGER_RANGES.items()
    },
    ValueKind.FLOAT: _to_single,
    ValueKind.DOUBLE: _to_double,
    ValueKind.DECIMAL: _to_decimal,
    ValueKind.STRING: _to_string,
    ValueKind.ENUM: _to_enum,
    ValueKind.DATETIME: _to_datetime,
    ValueKind.DURATION: _to_duration,
    ValueKind.VERSION: _to_version,
    ValueKind.IP_ADDRESS: _to_ip_address,
    ValueKind.FILE: _to_path,
    ValueKind.DIRECTORY: _to_path,
}

_PYTHON_TYPES = {
    bool: ValueKind.BOOL,
    int: ValueKind.INT32,
    float: ValueKind.DOUBLE,
    Decimal: ValueKind.DECIMAL,
    str: ValueKind.STRING,
    datetime: ValueKind.DATETIME,
    timedelta: ValueKind.DURATION,
    Version: ValueKind.VERSION,
    ipaddress.IPv4Address: ValueKind.IP_ADDRESS,
    ipaddress.IPv6Address: ValueKind.IP_ADDRESS,
}


def resolve_kind(value_type: Any) -> Optional[ValueKind]:
    """
    Map a declared value type to its ValueKind.

    Accepts a ValueKind directly or one of the supported Python types. Returns
    None when the type is not supported.
    """
    if isinstance(value_type, ValueKind):
        return value_type
    if isinstance(value_type, type):
        if issubclass(value_type, Enum):
            return ValueKind.ENUM
        if issubclass(value_type, PurePath):
            return ValueKind.FILE
    return _PYTHON_TYPES.get(value_type)


def convert(
    kind: ValueKind,
    raw: str,
    target: Any = None,
    comparison: ComparisonMode = DEFAULT_COMPARISON,
) -> Any:
    """
    Convert raw command-line text to a value of the given kind.

    Args:
        kind: The value kind to convert to.
        raw: The text taken from the command line.
        target: The enumeration class for ValueKind.ENUM, ignored otherwise.
        comparison: Name matching policy for enumeration members.

    Raises:
        ValueError: If the text is not a valid encoding of the kind.
    """
    return CONVERTERS[kind](raw, target, comparison)
