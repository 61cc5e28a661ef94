"""
FlagRegistry - registration, parsing and help for command-line flags.

A host creates one registry, registers its flags with the ``add_*`` methods
(or ``register`` for an explicit value type), and calls ``parse`` with the
argument vector. Each registration returns the Flag whose ``value`` the
parser updates in place. Bare tokens are collected as positional arguments,
and everything from a literal ``--`` onward is kept verbatim as the
remaining arguments.

The registry can also load flag defaults from a YAML or JSON file named by
a reserved config flag.
"""

import json
import logging
import os
import re
import sys
from datetime import datetime, timedelta
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import IO, Any, Optional, Sequence, Union

import yaml
from result import Err, Ok, Result

from .errors import ConfigFileError, DuplicateFlagError, FlagError, UnrecognizedFlagError
from .flag import Flag
from .values import DEFAULT_COMPARISON, ComparisonMode, DayOfWeek, ValueKind, Version

logger = logging.getLogger(__name__)

HELP_TEMPLATE = "-?|--help"
HELP_USAGE = "Show help information"
HELP_COLUMN_WIDTH = 20
HELP_EXIT_CODE = 1

_SEPARATOR = re.compile(r"[=:]")
_YAML_NULLS = ("", "~", "null", "Null", "NULL")


class ParseStatus(Enum):
    PARSED = "parsed"
    HELP_REQUESTED = "help_requested"


def _split_token(token: str) -> tuple[str, Optional[str]]:
    """Split a flag token on the first '=' or ':' into name and inline value."""
    parts = _SEPARATOR.split(token, maxsplit=1)
    if len(parts) == 1:
        return token, None
    return parts[0], parts[1]


def _load_config_file(config_path: Union[str, os.PathLike]) -> dict[str, Any]:
    """
    Load flag defaults from a YAML or JSON file.

    Raises:
        ConfigFileError: If the file is missing, has an unsupported extension,
            cannot be parsed, or does not hold a mapping.
    """
    if not os.path.exists(config_path):
        raise ConfigFileError(f"Configuration file not found: {config_path}")

    file_ext = os.path.splitext(config_path)[1].lower()

    with open(config_path, "r") as f:
        if file_ext in [".yaml", ".yml"]:
            try:
                # BaseLoader keeps every scalar as its source text
                data = yaml.load(f, Loader=yaml.BaseLoader)
            except yaml.YAMLError as e:
                raise ConfigFileError(f"Invalid YAML file: {e}")
        elif file_ext == ".json":
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise ConfigFileError(f"Invalid JSON file: {e}")
        else:
            raise ConfigFileError(
                f"Unsupported file format: {file_ext}. "
                "Supported formats are: .yaml, .yml, .json"
            )

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigFileError(
            f"Configuration file must hold a mapping, got {type(data).__name__}"
        )
    if file_ext in [".yaml", ".yml"]:
        data = {
            key: None if value in _YAML_NULLS else value for key, value in data.items()
        }
    return data


class FlagRegistry:
    """
    A set of command-line flags parsed together.

    Example:
        registry = FlagRegistry(prog="fetch", description="Fetches things")
        host = registry.add_ip_address("-h|--host", None, "Host to contact")
        retries = registry.add_int("--retries", 3, "Retry count")

        registry.parse_or_exit()
        print(host.value, retries.value, registry.args)
    """

    def __init__(
        self,
        prog: Optional[str] = None,
        version: Optional[str] = None,
        description: Optional[str] = None,
        comparison: ComparisonMode = DEFAULT_COMPARISON,
        output: Optional[IO[str]] = None,
        config_flag: Optional[str] = None,
    ) -> None:
        """
        Args:
            prog: Program name for the help banner; defaults to basename of sys.argv[0].
            version: Version line printed at the top of the help text.
            description: Short description printed next to the program name.
            comparison: Case-sensitivity policy for alias and enum name matching.
            output: Stream receiving help text; None means sys.stderr.
            config_flag: Alias template of a flag naming a YAML/JSON defaults file.
        """
        self.prog = prog or os.path.basename(sys.argv[0] if sys.argv else "") or "prog"
        self.version = version
        self.description = description
        self.comparison = comparison
        self.output = output
        self.flags: list[Flag] = []
        self.help_flag = Flag(HELP_TEMPLATE, False, HELP_USAGE, ValueKind.BOOL)
        self.config_flag: Optional[Flag] = None
        if config_flag is not None:
            self.config_flag = Flag(
                config_flag,
                None,
                "Path to configuration file (YAML or JSON format)",
                ValueKind.FILE,
            )
        self._args: list[str] = []
        self._remaining: Optional[list[str]] = None

    # Registration

    def register(self, value_type: Any, template: str, default: Any, usage: str) -> Flag:
        """
        Register a flag and return its value cell.

        Args:
            value_type: A ValueKind or supported Python type. Unsupported types
                are accepted here and fail on the first conversion.
            template: '|'-delimited aliases, e.g. "-v|--verbose".
            default: Value held until the command line sets one.
            usage: Help text.

        Raises:
            DuplicateFlagError: If an alias is already taken.
        """
        flag = Flag(template, default, usage, value_type)
        for alias in flag.aliases:
            if self._find(alias, reserved=True) is not None:
                raise DuplicateFlagError(alias)
        self.flags.append(flag)
        logger.debug("Registered flag %s (%s)", template, flag.type_name)
        return flag

    def add_bool(self, template: str, default: bool, usage: str) -> Flag:
        return self.register(ValueKind.BOOL, template, default, usage)

    def add_sbyte(self, template: str, default: int, usage: str) -> Flag:
        return self.register(ValueKind.INT8, template, default, usage)

    def add_byte(self, template: str, default: int, usage: str) -> Flag:
        return self.register(ValueKind.UINT8, template, default, usage)

    def add_short(self, template: str, default: int, usage: str) -> Flag:
        return self.register(ValueKind.INT16, template, default, usage)

    def add_ushort(self, template: str, default: int, usage: str) -> Flag:
        return self.register(ValueKind.UINT16, template, default, usage)

    def add_int(self, template: str, default: int, usage: str) -> Flag:
        return self.register(ValueKind.INT32, template, default, usage)

    def add_uint(self, template: str, default: int, usage: str) -> Flag:
        return self.register(ValueKind.UINT32, template, default, usage)

    def add_long(self, template: str, default: int, usage: str) -> Flag:
        return self.register(ValueKind.INT64, template, default, usage)

    def add_ulong(self, template: str, default: int, usage: str) -> Flag:
        return self.register(ValueKind.UINT64, template, default, usage)

    def add_float(self, template: str, default: float, usage: str) -> Flag:
        """Register a single-precision floating point flag."""
        return self.register(ValueKind.FLOAT, template, default, usage)

    def add_double(self, template: str, default: float, usage: str) -> Flag:
        return self.register(ValueKind.DOUBLE, template, default, usage)

    def add_decimal(self, template: str, default: Decimal, usage: str) -> Flag:
        return self.register(ValueKind.DECIMAL, template, default, usage)

    def add_string(self, template: str, default: Optional[str], usage: str) -> Flag:
        return self.register(ValueKind.STRING, template, default, usage)

    def add_datetime(
        self, template: str, default: Optional[datetime], usage: str
    ) -> Flag:
        """Register an ISO 8601 date/time flag."""
        return self.register(ValueKind.DATETIME, template, default, usage)

    def add_duration(
        self, template: str, default: Optional[timedelta], usage: str
    ) -> Flag:
        """Register a duration flag written as [-][d.]hh:mm[:ss[.fffffff]] or days."""
        return self.register(ValueKind.DURATION, template, default, usage)

    def add_version(self, template: str, default: Optional[Version], usage: str) -> Flag:
        return self.register(ValueKind.VERSION, template, default, usage)

    def add_ip_address(self, template: str, default: Any, usage: str) -> Flag:
        return self.register(ValueKind.IP_ADDRESS, template, default, usage)

    def add_file(self, template: str, default: Optional[Path], usage: str) -> Flag:
        return self.register(ValueKind.FILE, template, default, usage)

    def add_directory(
        self, template: str, default: Optional[Path], usage: str
    ) -> Flag:
        return self.register(ValueKind.DIRECTORY, template, default, usage)

    def add_enum(
        self, enum_type: type[Enum], template: str, default: Any, usage: str
    ) -> Flag:
        """Register a flag holding a member of ``enum_type``, matched by name."""
        return self.register(enum_type, template, default, usage)

    def add_day_of_week(self, template: str, default: DayOfWeek, usage: str) -> Flag:
        return self.add_enum(DayOfWeek, template, default, usage)

    # Lookup

    def get(self, name: str) -> Optional[Flag]:
        """Return the registered flag with alias ``name``, or None."""
        return self._find(name)

    def _find(self, name: str, reserved: bool = False) -> Optional[Flag]:
        candidates = list(self.flags)
        if reserved:
            candidates.append(self.help_flag)
            if self.config_flag is not None:
                candidates.append(self.config_flag)
        for flag in candidates:
            if flag.is_match(name, self.comparison):
                return flag
        return None

    @property
    def args(self) -> list[str]:
        """Positional arguments from the last parse, in order."""
        return list(self._args)

    @property
    def remaining(self) -> Optional[list[str]]:
        """Tokens from the ``--`` terminator onward, or None if there was none."""
        return None if self._remaining is None else list(self._remaining)

    def arg(self, index: int) -> Optional[str]:
        """Return the positional argument at ``index``, or None if out of range."""
        if 0 <= index < len(self._args):
            return self._args[index]
        return None

    # Parsing

    def parse(self, argv: Optional[Sequence[str]] = None) -> ParseStatus:
        """
        Parse an argument vector and update the registered flags in place.

        Index 0 of ``argv`` is the program path and is skipped. With no
        further arguments, or when the help flag appears, help is written
        to the output sink and HELP_REQUESTED is returned.

        Args:
            argv: The argument vector. If None, uses sys.argv.

        Returns:
            ParseStatus.PARSED or ParseStatus.HELP_REQUESTED.

        Raises:
            UnrecognizedFlagError: If a flag token matches no registered alias.
            ConversionError: If a value cannot be converted to its flag's type.
            ConfigFileError: If the defaults file cannot be applied.
        """
        argv = list(sys.argv if argv is None else argv)
        self._args = []
        self._remaining = None
        for flag in self.flags:
            flag.is_set = False
        if self.config_flag is not None:
            self.config_flag.is_set = False

        if len(argv) <= 1:
            logger.debug("No arguments given, showing help")
            self.print_help()
            return ParseStatus.HELP_REQUESTED

        i = 1
        while i < len(argv):
            token = argv[i]
            if not token.startswith("-"):
                self._args.append(token)
                i += 1
                continue

            if token == "--":
                self._remaining = argv[i:]
                break

            name, value = _split_token(token)
            if value is None and i + 1 < len(argv) and not argv[i + 1].startswith("-"):
                value = argv[i + 1]
                i += 1

            if self.help_flag.is_match(name, self.comparison):
                logger.debug("Help requested by %s", name)
                self.print_help()
                return ParseStatus.HELP_REQUESTED

            if self.config_flag is not None and self.config_flag.is_match(
                name, self.comparison
            ):
                flag = self.config_flag
            else:
                flag = self.get(name)
                if flag is None:
                    raise UnrecognizedFlagError(name)

            logger.debug("Token %s resolved to %s with value %r", token, flag.name, value)
            flag.parse(value, self.comparison)
            i += 1

        if self.config_flag is not None and self.config_flag.is_set:
            self.load_config(self.config_flag.value, override=False)

        return ParseStatus.PARSED

    def safe_parse(
        self, argv: Optional[Sequence[str]] = None
    ) -> Result[ParseStatus, str]:
        """
        Parse like ``parse`` but return the outcome instead of raising.

        Returns:
            Result[ParseStatus, str]:
                - Ok with the parse status,
                - Err with the error message if the command line was invalid.
        """
        try:
            return Ok(self.parse(argv))
        except FlagError as e:
            return Err(str(e))

    def parse_or_exit(self, argv: Optional[Sequence[str]] = None) -> "FlagRegistry":
        """
        Parse and terminate the process when help was shown.

        Raises:
            SystemExit: With HELP_EXIT_CODE after help was written.
        """
        if self.parse(argv) is ParseStatus.HELP_REQUESTED:
            sys.exit(HELP_EXIT_CODE)
        return self

    # Config files

    def load_config(
        self, config_path: Union[str, os.PathLike], override: bool = True
    ) -> None:
        """
        Apply flag values from a YAML or JSON file.

        Keys are flag aliases, with or without leading dashes. Values go
        through the same conversion as command-line text; null values leave
        the flag unchanged.

        Args:
            config_path: Path to a .yaml, .yml or .json file.
            override: If False, flags set on the command line keep their value.

        Raises:
            ConfigFileError: If the file cannot be read or holds a nested value.
            UnrecognizedFlagError: If a key matches no registered flag.
            ConversionError: If a value is invalid for its flag's type.
        """
        logger.debug("Loading flag defaults from %s", config_path)
        for key, raw in _load_config_file(config_path).items():
            flag = self._find_config_key(str(key))
            if flag is None:
                raise UnrecognizedFlagError(str(key))
            if raw is None or (flag.is_set and not override):
                continue
            if isinstance(raw, (dict, list)):
                raise ConfigFileError(
                    f"Value for '{key}' must be a scalar, got {type(raw).__name__}"
                )
            if isinstance(raw, bool):
                raw = "true" if raw else "false"
            flag.parse(str(raw), self.comparison)

    def _find_config_key(self, key: str) -> Optional[Flag]:
        if key.startswith("-"):
            return self.get(key)
        return self.get(f"--{key}") or self.get(f"-{key}")

    # Help

    def set_output(self, output: Optional[IO[str]]) -> None:
        """Send help text to ``output``; None restores sys.stderr."""
        self.output = output

    def format_help(self) -> str:
        """Render the help text."""
        lines = []
        if self.version:
            lines += [self.version, ""]
        if self.description:
            lines.append(f"{self.prog} - {self.description}")
        else:
            lines.append(self.prog)
        lines.append(f"Usage: {self.prog} [options] [arguments]")
        lines += ["", "OPTIONS", ""]

        rows = list(self.flags)
        if self.config_flag is not None:
            rows.append(self.config_flag)
        rows.append(self.help_flag)
        for flag in rows:
            lines.append(f"  {flag.template:<{HELP_COLUMN_WIDTH}}\t{flag.usage}")
        return "\n".join(lines) + "\n"

    def print_help(self) -> None:
        """Write the help text to the output sink."""
        output = self.output if self.output is not None else sys.stderr
        output.write(self.format_help())
        output.flush()
