#!/usr/bin/env python3
"""
Tests for value conversion.

This module tests every supported value kind through the registry, enum
matching under the comparison modes, and registration by Python type.
"""

import ipaddress
from datetime import datetime, timedelta
from decimal import Decimal
from enum import Enum
from io import StringIO
from pathlib import Path

import pytest

from flagparse import (
    ComparisonMode,
    ConversionError,
    DayOfWeek,
    Flag,
    FlagRegistry,
    UnrecognizedFlagError,
    UnsupportedTypeError,
    ValueKind,
    Version,
)


class Color(Enum):
    RED = 1
    GREEN = 2
    BLUE = 3


def parse_one(method, raw, default=None, **registry_kwargs):
    """Register one flag with ``method`` and parse ``--value=raw``."""
    registry = FlagRegistry(prog="tool", output=StringIO(), **registry_kwargs)
    flag = getattr(registry, method)("--value", default, "Value under test")
    registry.parse(["tool", f"--value={raw}"])
    return flag.value


class TestConversions:
    """Test suite for per-kind conversion through the registry."""

    @pytest.mark.parametrize(
        "raw,expected", [("true", True), ("False", False), (" TRUE ", True)]
    )
    def test_bool(self, raw, expected):
        assert parse_one("add_bool", raw, default=not expected) is expected

    @pytest.mark.parametrize(
        "method,raw,expected",
        [
            ("add_byte", "255", 255),
            ("add_sbyte", "-128", -128),
            ("add_short", "-32768", -32768),
            ("add_ushort", "65535", 65535),
            ("add_int", "+42", 42),
            ("add_uint", "4294967295", 4294967295),
            ("add_long", "-9223372036854775808", -(2**63)),
            ("add_ulong", "18446744073709551615", 2**64 - 1),
        ],
    )
    def test_integers(self, method, raw, expected):
        assert parse_one(method, raw, default=0) == expected

    @pytest.mark.parametrize(
        "method,raw",
        [
            ("add_byte", "256"),
            ("add_byte", "-1"),
            ("add_sbyte", "128"),
            ("add_short", "32768"),
            ("add_uint", "-1"),
            ("add_int", "2147483648"),
            ("add_int", "1.5"),
            ("add_int", "1_000"),
            ("add_long", "ten"),
        ],
    )
    def test_integer_failures(self, method, raw):
        with pytest.raises(ConversionError) as excinfo:
            parse_one(method, raw, default=0)
        assert excinfo.value.raw == raw

    def test_double(self):
        assert parse_one("add_double", "2.5e3", default=0.0) == 2500.0

    def test_float_is_single_precision(self):
        value = parse_one("add_float", "0.1", default=0.0)
        assert value != 0.1
        assert value == pytest.approx(0.1)

    @pytest.mark.parametrize("raw", ["1e300", "1e39", "-3.5e38"])
    def test_float_overflow(self, raw):
        with pytest.raises(ConversionError) as excinfo:
            parse_one("add_float", raw, default=0.0)
        assert excinfo.value.type_name == "float"

    def test_float_keeps_explicit_infinity(self):
        assert parse_one("add_float", "inf", default=0.0) == float("inf")

    @pytest.mark.parametrize("method", ["add_float", "add_double"])
    def test_underscore_grouping_rejected(self, method):
        with pytest.raises(ConversionError) as excinfo:
            parse_one(method, "1_000", default=0.0)
        assert excinfo.value.raw == "1_000"

    def test_decimal(self):
        assert parse_one("add_decimal", "10.25", default=Decimal(0)) == Decimal("10.25")

    @pytest.mark.parametrize("raw", ["abc", "NaN", "Infinity"])
    def test_decimal_failures(self, raw):
        with pytest.raises(ConversionError):
            parse_one("add_decimal", raw, default=Decimal(0))

    def test_string_is_verbatim(self):
        assert parse_one("add_string", " spaced  out ", default="") == " spaced  out "

    def test_datetime(self):
        value = parse_one("add_datetime", "2024-03-01T12:30:00", default=None)
        assert value == datetime(2024, 3, 1, 12, 30)

    def test_date_only(self):
        assert parse_one("add_datetime", "2024-03-01") == datetime(2024, 3, 1)

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("01:30", timedelta(hours=1, minutes=30)),
            ("1:02:03", timedelta(hours=1, minutes=2, seconds=3)),
            ("2.03:00:00", timedelta(days=2, hours=3)),
            ("00:00:01.5", timedelta(seconds=1, microseconds=500000)),
            ("-00:10", timedelta(minutes=-10)),
            ("3", timedelta(days=3)),
        ],
    )
    def test_duration(self, raw, expected):
        assert parse_one("add_duration", raw) == expected

    @pytest.mark.parametrize("raw", ["25:00", "10:60", "abc", "1:2:3:4"])
    def test_duration_failures(self, raw):
        with pytest.raises(ConversionError):
            parse_one("add_duration", raw)

    def test_version(self):
        value = parse_one("add_version", "1.2.3", default=Version(0, 0))
        assert value == Version(1, 2, 3)
        assert str(value) == "1.2.3"

    @pytest.mark.parametrize("raw", ["1", "1.2.3.4.5", "1.x", "-1.0"])
    def test_version_failures(self, raw):
        with pytest.raises(ConversionError):
            registry = FlagRegistry(prog="tool", output=StringIO())
            flag = registry.add_version("--value", None, "Version")
            flag.parse(raw)

    @pytest.mark.parametrize(
        "raw", ["192.168.0.1", "::1", "2001:db8::ff00:42:8329"]
    )
    def test_ip_address(self, raw):
        registry = FlagRegistry(prog="tool", output=StringIO())
        flag = registry.add_ip_address("--ipaddress", None, "Host")
        # inline form, since IPv6 text contains ':'
        registry.parse(["tool", f"--ipaddress={raw}"])
        assert flag.value == ipaddress.ip_address(raw)

    def test_ip_address_failure(self):
        with pytest.raises(ConversionError) as excinfo:
            parse_one("add_ip_address", "999.1.1.1")
        assert excinfo.value.type_name == "ip address"

    def test_file_and_directory(self):
        assert parse_one("add_file", "data/input.csv") == Path("data/input.csv")
        assert parse_one("add_directory", "/tmp/out") == Path("/tmp/out")

    def test_empty_path_fails(self):
        registry = FlagRegistry(prog="tool", output=StringIO())
        flag = registry.add_file("--value", None, "File")
        with pytest.raises(ConversionError):
            registry.parse(["tool", "--value="])
        assert flag.value is None


class TestEnums:
    """Test suite for enumeration flags."""

    def test_by_name_case_insensitive(self):
        registry = FlagRegistry(prog="tool", output=StringIO())
        color = registry.add_enum(Color, "--color", Color.RED, "Color")
        registry.parse(["tool", "--color", "blue"])
        assert color.value is Color.BLUE

    def test_by_value(self):
        registry = FlagRegistry(prog="tool", output=StringIO())
        color = registry.add_enum(Color, "--color", Color.RED, "Color")
        registry.parse(["tool", "--color=2"])
        assert color.value is Color.GREEN

    def test_case_sensitive_mode(self):
        registry = FlagRegistry(
            prog="tool", output=StringIO(), comparison=ComparisonMode.ORDINAL
        )
        registry.add_enum(Color, "--color", Color.RED, "Color")
        with pytest.raises(ConversionError) as excinfo:
            registry.parse(["tool", "--color", "blue"])
        assert excinfo.value.type_name == "Color"

    def test_unknown_member(self):
        registry = FlagRegistry(prog="tool", output=StringIO())
        registry.add_enum(Color, "--color", Color.RED, "Color")
        with pytest.raises(ConversionError, match="purple"):
            registry.parse(["tool", "--color", "purple"])

    def test_day_of_week(self):
        registry = FlagRegistry(prog="tool", output=StringIO())
        day = registry.add_day_of_week("-d|--day", DayOfWeek.MONDAY, "Day")
        registry.parse(["tool", "-d", "Friday"])
        assert day.value is DayOfWeek.FRIDAY


class TestRegisterByType:
    """Test suite for registering with Python types and unsupported types."""

    @pytest.mark.parametrize(
        "value_type,raw,expected",
        [
            (int, "12", 12),
            (float, "1.5", 1.5),
            (str, "text", "text"),
            (Decimal, "0.5", Decimal("0.5")),
            (Path, "a.txt", Path("a.txt")),
            (Version, "2.0", Version(2, 0)),
            (Color, "green", Color.GREEN),
        ],
    )
    def test_python_types(self, value_type, raw, expected):
        registry = FlagRegistry(prog="tool", output=StringIO())
        flag = registry.register(value_type, "--value", None, "Value")
        registry.parse(["tool", "--value", raw])
        assert flag.value == expected

    def test_type_inferred_from_default(self):
        flag = Flag("--count", 3, "Count")
        assert flag.kind is ValueKind.INT32
        flag.parse("4")
        assert flag.value == 4

    def test_unsupported_type_fails_on_conversion(self):
        registry = FlagRegistry(prog="tool", output=StringIO())
        flag = registry.register(complex, "--value", None, "Value")
        assert flag.value is None
        with pytest.raises(UnsupportedTypeError, match="complex"):
            registry.parse(["tool", "--value", "1+2j"])

    def test_unsupported_type_is_not_a_flag_error(self):
        registry = FlagRegistry(prog="tool", output=StringIO())
        registry.register(list, "--value", [], "Value")
        with pytest.raises(TypeError):
            registry.safe_parse(["tool", "--value", "x"])

    def test_unsupported_type_unused_is_harmless(self):
        registry = FlagRegistry(prog="tool", output=StringIO())
        registry.register(complex, "--value", None, "Value")
        count = registry.add_int("--count", 0, "Count")
        registry.parse(["tool", "--count", "1"])
        assert count.value == 1

    def test_unrecognized_flag_before_unsupported(self):
        registry = FlagRegistry(prog="tool", output=StringIO())
        registry.register(complex, "--value", None, "Value")
        with pytest.raises(UnrecognizedFlagError):
            registry.parse(["tool", "--other", "x"])


class TestComparisonModes:
    def test_culture_modes_normalize_unicode(self):
        composed = "café"
        decomposed = "cafe\u0301"
        assert ComparisonMode.CURRENT_CULTURE.equals(composed, decomposed)
        assert not ComparisonMode.ORDINAL.equals(composed, decomposed)

    def test_ignore_case_flags(self):
        assert ComparisonMode.ORDINAL_IGNORE_CASE.ignore_case
        assert not ComparisonMode.INVARIANT_CULTURE.ignore_case
        assert ComparisonMode.INVARIANT_CULTURE_IGNORE_CASE.equals("Straße", "STRASSE")
