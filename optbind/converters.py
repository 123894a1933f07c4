"""
optbind value conversion: raw command-line strings to declared types.

Supported declared types (closed set)
- str: returned unchanged.
- Int32, Int64: plain decimal literals with an optional sign, range-checked
  for the signed width. Plain int is accepted too and is unbounded.
- Float32, Float64: decimal/scientific literals (also "inf"/"nan"); Float32
  values are rounded to single precision and overflow is rejected. Plain
  float is the same as Float64.
- bool: "true"/"false", case-insensitive.
- pathlib.Path (any PurePath subclass): any non-empty string.
- enum.Enum subclasses: looked up by exact member name.

Every failure raises ConversionError; nothing here is locale-sensitive.

    >>> convert("42", Int32)
    42
    >>> convert("TRUE", bool)
    True
"""
import re
import struct
from enum import Enum
from pathlib import PurePath
from typing import NewType

from .faults import ConversionError, FaultCode

Int32 = NewType("Int32", int)
Int64 = NewType("Int64", int)
Float32 = NewType("Float32", float)
Float64 = NewType("Float64", float)

_BOUNDS = {
    Int32: (-2 ** 31, 2 ** 31 - 1),
    Int64: (-2 ** 63, 2 ** 63 - 1),
    int: (None, None),
}


def typename(type, /):
    """
    Display name of a declared type for messages and help.
    """
    return getattr(type, "__name__", None) or repr(type)


def _fail(value, type):
    return ConversionError(
        "cannot convert value %r to type %s" % (value, typename(type)),
        code=FaultCode.UNCONVERTIBLE_VALUE,
        value=value,
        type=type,
    )


def _string(value, type):
    return value


def _integer(value, type):
    if not re.fullmatch(r"[+-]?[0-9]+", value):
        raise _fail(value, type)
    number = int(value)
    lower, upper = _BOUNDS[type]
    if lower is not None and not lower <= number <= upper:
        raise _fail(value, type)
    return number


def _floating(value, type):
    # float() accepts digit-group underscores and non-ASCII digits; command-line
    # literals do not.
    if "_" in value or not value.isascii():
        raise _fail(value, type)
    try:
        number = float(value)
    except ValueError:
        raise _fail(value, type) from None
    if type is Float32:
        # standard size "<f" is range-checked
        try:
            number, = struct.unpack("<f", struct.pack("<f", number))
        except OverflowError:
            raise _fail(value, type) from None
    return number


def _boolean(value, type):
    match value.lower():
        case "true":
            return True
        case "false":
            return False
        case _:
            raise _fail(value, type)


def _path(value, type):
    if not value:
        raise _fail(value, type)
    return type(value)


def _enumeration(value, type):
    try:
        return type[value]
    except KeyError:
        raise _fail(value, type) from None


_CONVERTERS = {
    str: _string,
    int: _integer,
    Int32: _integer,
    Int64: _integer,
    float: _floating,
    Float32: _floating,
    Float64: _floating,
    bool: _boolean,
}


def _resolve(type):
    try:
        return _CONVERTERS.get(type)
    except TypeError:  # unhashable annotation
        return None


def _lookup(type):
    if (converter := _resolve(type)) is not None:
        return converter
    try:
        if issubclass(type, Enum):
            return _enumeration
        if issubclass(type, PurePath):
            return _path
    except TypeError:  # not a class
        return None
    return None


def is_supported(type, /):
    """
    Whether values of the declared type can be converted.
    """
    return _lookup(type) is not None


def convert(value, type, /):
    """
    Convert a raw string into a value of the declared type.

    Raises
    - TypeError: when value is not a string.
    - ConversionError: when value does not lex as the type, is out of range
      for it, is not a member of the enumeration, or when the type itself is
      not supported.
    """
    if not isinstance(value, str):
        raise TypeError("convert() first argument must be a string")
    if (converter := _lookup(type)) is None:
        raise _fail(value, type)
    return converter(value, type)


__all__ = (
    "Int32",
    "Int64",
    "Float32",
    "Float64",
    "convert",
    "is_supported",
    "typename",
)
