"""
The Flag value cell.

A Flag is created by FlagRegistry.register and handed back to the host. The
registry writes converted command-line values into ``flag.value``, so the
host reads the parsed value straight from the object it got at
registration time.
"""

import logging
from enum import Enum
from typing import Any, Optional

from .errors import ConversionError, MissingValueError, UnsupportedTypeError
from .values import DEFAULT_COMPARISON, ComparisonMode, ValueKind, convert, resolve_kind

logger = logging.getLogger(__name__)


class Flag:
    """
    A registered command-line flag and its current value.

    Example:
        registry = FlagRegistry()
        count = registry.add_int("-c|--count", 1, "Number of items")
        registry.parse(["prog", "--count", "5"])
        assert count.value == 5
    """

    def __init__(
        self, template: str, default: Any, usage: str, value_type: Any = None
    ) -> None:
        """
        Args:
            template: '|'-delimited aliases, e.g. "-c|--count".
            default: Initial value, kept until the command line overrides it.
            usage: Help text shown next to the template.
            value_type: A ValueKind or Python type; defaults to type(default).
        """
        self.template = template
        self.usage = usage
        self.default = default
        self.value = default
        self.value_type = value_type if value_type is not None else type(default)
        # set when the current parse pass assigned the value from the command line
        self.is_set = False

    def __repr__(self) -> str:
        return f"Flag({self.template!r}, value={self.value!r})"

    @property
    def aliases(self) -> list[str]:
        return self.template.split("|")

    @property
    def name(self) -> str:
        """The longest alias, used to identify the flag in messages."""
        return max(self.aliases, key=len)

    @property
    def kind(self) -> Optional[ValueKind]:
        return resolve_kind(self.value_type)

    @property
    def type_name(self) -> str:
        enum_type = self._enum_type()
        if enum_type is not None:
            return enum_type.__name__
        kind = self.kind
        if kind is not None:
            return kind.value
        return getattr(self.value_type, "__name__", repr(self.value_type))

    def is_match(
        self, name: str, comparison: ComparisonMode = DEFAULT_COMPARISON
    ) -> bool:
        """Check whether ``name`` equals one of this flag's aliases."""
        return any(comparison.equals(alias, name) for alias in self.aliases)

    def parse(
        self, raw: Optional[str], comparison: ComparisonMode = DEFAULT_COMPARISON
    ) -> Any:
        """
        Convert ``raw`` to the flag's type and store it as the current value.

        A boolean flag given without a value is set to True.

        Raises:
            UnsupportedTypeError: If the flag's value type is not supported.
            MissingValueError: If a non-boolean flag is given no value.
            ConversionError: If ``raw`` is not valid for the flag's type.
        """
        kind = self.kind
        if kind is None or (kind is ValueKind.ENUM and self._enum_type() is None):
            raise UnsupportedTypeError(raw, self.value_type)

        if raw is None:
            if kind is not ValueKind.BOOL:
                raise MissingValueError(self.type_name, self.name)
            value = True
        else:
            try:
                value = convert(kind, raw, self._enum_type(), comparison)
            except ValueError as e:
                raise ConversionError(raw, self.type_name, self.name) from e

        logger.debug("Flag %s set to %r", self.name, value)
        self.value = value
        self.is_set = True
        return value

    def _enum_type(self) -> Optional[type[Enum]]:
        if isinstance(self.value_type, type) and issubclass(self.value_type, Enum):
            return self.value_type
        if self.value_type is ValueKind.ENUM and isinstance(self.default, Enum):
            return type(self.default)
        return None
