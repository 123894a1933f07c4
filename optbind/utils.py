"""
optbind internal helpers.

- Unset: the "not provided" sentinel. Option declarations accept None as a
  real default, so absence needs its own falsy marker; coalesce() turns it
  into a concrete value.
- rename: decorator giving generated functions a readable name in reprs and
  tracebacks.
- mirror: read-only property over a "_name" backing field; container values
  are handed out as immutable views.

    >>> coalesce(Unset, 74)
    74
    >>> coalesce(None, 74) is None
    True
"""
import functools
from collections.abc import Mapping, Sequence, Set
from types import MappingProxyType
from typing import final


@final
class UnsetType:
    """
    Type of the Unset sentinel: one instance per process, falsy, sealed.

    Instances take part in PEP 604 unions so that isinstance(x, str | Unset)
    reads naturally.
    """

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __init_subclass__(cls, **options):
        raise TypeError("UnsetType cannot be subclassed")

    def __or__(self, other, /):
        try:
            return UnsetType | other
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        try:
            return other | UnsetType
        except TypeError:
            return NotImplemented

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"


Unset = UnsetType()


def coalesce(object, default=None, /):
    """
    object, or default when object is Unset. None and other falsy values are
    returned unchanged.
    """
    return default if object is Unset else object


def rename(name, /):
    """
    Decorator setting __name__ and __qualname__ of a function to name.
    """
    if not isinstance(name, str):
        raise TypeError("rename() argument must be a string")

    def decorator(function):
        function.__name__ = function.__qualname__ = name
        return function

    return decorator


def _view(object):
    match object:
        case str():
            return object
        case Sequence():
            return tuple(object)
        case Mapping():
            return MappingProxyType(object)
        case Set():
            return frozenset(object)
    return object


def mirror(name, /):
    """
    Read-only property returning self._<name> (containers as immutable views).
    """
    @rename(name)
    def getter(self):
        return _view(getattr(self, "_" + name))

    return property(getter)


__all__ = (
    "UnsetType",
    "Unset",
    "coalesce",
    "rename",
    "mirror",
)
