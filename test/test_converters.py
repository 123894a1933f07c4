"""
Converters module behavioral tests.

Scope
- Validate conversion of well-formed literals for every supported type.
- Validate ConversionError for ill-formed literals, out-of-range integers,
  single-precision overflow and unknown enumeration members.
- Validate the supported-type predicate used by the declaration scanner.

Conventions
- Test method names follow CamelCase per project convention.
"""
import enum
import math
import unittest
from pathlib import Path, PurePosixPath
from unittest import TestCase

from optbind import Int32, Int64, Float32, Float64, convert, is_supported, ConversionError
from optbind.faults import FaultCode


class Color(enum.Enum):
    RED = "red"
    GREEN = "green"


class Level(enum.IntEnum):
    LOW = 1
    HIGH = 2


class TestWellFormed(TestCase):
    """Well-formed literals convert to the semantically equivalent value."""

    def testString(self):
        self.assertEqual(convert("hello world", str), "hello world")
        self.assertEqual(convert("", str), "")

    def testInt32(self):
        self.assertEqual(convert("42", Int32), 42)
        self.assertEqual(convert("-7", Int32), -7)
        self.assertEqual(convert("+7", Int32), 7)

    def testInt32Bounds(self):
        self.assertEqual(convert("2147483647", Int32), 2 ** 31 - 1)
        self.assertEqual(convert("-2147483648", Int32), -2 ** 31)

    def testInt64(self):
        self.assertEqual(convert("9223372036854775807", Int64), 2 ** 63 - 1)
        self.assertEqual(convert("-9223372036854775808", Int64), -2 ** 63)

    def testPlainIntIsUnbounded(self):
        self.assertEqual(convert("99999999999999999999999", int), 99999999999999999999999)

    def testFloat64(self):
        self.assertEqual(convert("1.5", Float64), 1.5)
        self.assertEqual(convert("-2.5e3", float), -2500.0)
        self.assertEqual(convert(".5", Float64), 0.5)

    def testFloat32RoundsToSinglePrecision(self):
        value = convert("0.1", Float32)
        self.assertNotEqual(value, 0.1)
        self.assertAlmostEqual(value, 0.1, places=6)

    def testSpecialFloats(self):
        self.assertTrue(math.isinf(convert("inf", Float64)))
        self.assertTrue(math.isnan(convert("nan", Float32)))

    def testBoolean(self):
        self.assertIs(convert("true", bool), True)
        self.assertIs(convert("FALSE", bool), False)
        self.assertIs(convert("True", bool), True)

    def testPath(self):
        self.assertEqual(convert("out/classes.jar", Path), Path("out/classes.jar"))
        self.assertIsInstance(convert("a/b", PurePosixPath), PurePosixPath)

    def testEnumerationByExactName(self):
        self.assertIs(convert("RED", Color), Color.RED)
        self.assertIs(convert("HIGH", Level), Level.HIGH)


class TestIllFormed(TestCase):
    """Ill-formed literals fail with ConversionError."""

    def assertUnconvertible(self, value, type):
        with self.assertRaises(ConversionError) as context:
            convert(value, type)
        self.assertEqual(context.exception.code, FaultCode.UNCONVERTIBLE_VALUE)
        return context.exception

    def testIntegerRejectsGarbage(self):
        for value in ("abc", "", "4.2", "1_000", " 42", "0x10", "--1"):
            with self.subTest(value=value):
                self.assertUnconvertible(value, Int32)

    def testInt32OutOfRange(self):
        self.assertUnconvertible("2147483648", Int32)
        self.assertUnconvertible("-2147483649", Int32)

    def testInt64OutOfRange(self):
        self.assertUnconvertible("9223372036854775808", Int64)

    def testFloatRejectsGarbage(self):
        for value in ("abc", "", "1_0.5", "1.2.3"):
            with self.subTest(value=value):
                self.assertUnconvertible(value, Float64)

    def testFloat32Overflow(self):
        self.assertUnconvertible("1e40", Float32)
        self.assertUnconvertible("-1e40", Float32)
        self.assertEqual(convert("1e40", Float64), 1e40)
        self.assertTrue(math.isinf(convert("inf", Float32)))

    def testNonAsciiDigitsRejected(self):
        for type in (Float64, Float32, float, Int32):
            with self.subTest(type=type):
                self.assertUnconvertible("١٥", type)

    def testBooleanRejectsAnythingElse(self):
        for value in ("yes", "1", "", "truth"):
            with self.subTest(value=value):
                self.assertUnconvertible(value, bool)

    def testEmptyPathRejected(self):
        self.assertUnconvertible("", Path)

    def testEnumerationIsCaseSensitive(self):
        self.assertUnconvertible("red", Color)
        self.assertUnconvertible("BLUE", Color)

    def testMessageNamesValueAndType(self):
        fault = self.assertUnconvertible("abc", Int32)
        self.assertEqual(fault.message, "cannot convert value 'abc' to type Int32")
        self.assertEqual(str(fault), fault.message)

    def testConversionErrorIsValueError(self):
        with self.assertRaises(ValueError):
            convert("abc", int)

    def testUnsupportedTypeFails(self):
        self.assertUnconvertible("x", list)

    def testNonStringValueRejected(self):
        with self.assertRaises(TypeError):
            convert(42, int)


class TestSupported(TestCase):

    def testClosedSet(self):
        for type in (str, int, Int32, Int64, float, Float32, Float64, bool, Path, PurePosixPath, Color, Level):
            with self.subTest(type=type):
                self.assertTrue(is_supported(type))

    def testUnsupported(self):
        for type in (list, dict, bytes, object, list[str], None):
            with self.subTest(type=type):
                self.assertFalse(is_supported(type))


if __name__ == "__main__":
    unittest.main()
