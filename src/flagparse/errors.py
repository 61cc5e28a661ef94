"""
Exceptions raised by flagparse.

Parsing failures caused by user input derive from FlagError so hosts can
catch them in one place. Mistakes in how the host declares its flags
(duplicate aliases, unsupported value types) use the matching builtin
exception types instead.
"""

from typing import Optional


class FlagError(Exception):
    """Base class for errors caused by the parsed command line."""


class UnrecognizedFlagError(FlagError):
    """A flag token did not match any registered alias."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unexpected argument: {name}")


class ConversionError(FlagError, ValueError):
    """A raw value could not be converted to the flag's declared type."""

    def __init__(
        self, raw: Optional[str], type_name: str, flag_name: Optional[str] = None
    ) -> None:
        self.raw = raw
        self.type_name = type_name
        self.flag_name = flag_name
        message = f"Unable to convert value '{raw}' to type {type_name}"
        if flag_name:
            message += f" (flag {flag_name})"
        super().__init__(message)


class MissingValueError(ConversionError):
    """A non-boolean flag was given without a value."""

    def __init__(self, type_name: str, flag_name: Optional[str] = None) -> None:
        super().__init__(None, type_name, flag_name)
        self.args = (f"Missing {type_name} value for flag {flag_name}",)


class ConfigFileError(FlagError):
    """The defaults file could not be read or applied."""


class DuplicateFlagError(ValueError):
    """Two flags share an alias."""

    def __init__(self, alias: str) -> None:
        self.alias = alias
        super().__init__(f"Flag name conflict: {alias}")


class UnsupportedTypeError(TypeError):
    """A flag was declared with a value type flagparse cannot convert to."""

    def __init__(self, raw: Optional[str], value_type: object) -> None:
        self.raw = raw
        self.value_type = value_type
        name = getattr(value_type, "__name__", repr(value_type))
        super().__init__(f"Unable to convert value {raw} to type {name}")
