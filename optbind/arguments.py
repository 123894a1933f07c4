r"""
optbind declarative constructs.

Overview
- Opt: one declared command-line option. Assigned to a class attribute of a
  Command subclass, it is both the option's description (names, help text,
  metavar, arity, requiredness, declared default) and the binding target: a
  data descriptor that stores the converted value on the command instance.
- Syntax: the command's identity for help output (name, usage syntax,
  description, online-help URL).
- @syntax(...): class decorator attaching a Syntax to a Command subclass.

Declaring a command
    >>> from pathlib import Path
    >>> from optbind import Command, Opt, syntax
    >>> @syntax("d2j-dump", "[options] <file>", "dump a file")
    ... class Dump(Command):
    ...     output: Path = Opt("-o", "--output", "output file", metavar="out")
    ...     force: bool = Opt("-f", "--force", "overwrite the output", hasarg=False)
    ...     def execute(self): ...

Metadata (sanitized on construction)
- short: required, shell-style short name, e.g. "-o" or "-os".
- long: optional, "--long-name" style.
- descr: required, non-empty help text.
- metavar: optional label for the value in help (value options only).
- hasarg: whether the option consumes a value (False makes it a flag).
- required: whether the option must be supplied.
- default: the declared default. Unset becomes False for flags and None for
  value options. The flag invariants (bool type, False default) are checked
  by the declaration scanner, not here, since the declared type lives in the
  owning class's annotations.

Binding
- Each Opt learns its owner and attribute name through __set_name__ and can
  be declared exactly once.
- Reading the attribute on an instance yields the bound value, or the
  declared default until a value is bound.
"""
import re

from rich.text import Text

from .utils import *


class SpecType(type):
    """
    Metaclass giving declarative records stable introspection.

    Responsibilities
    - __typename__ derived from the class name (camel-case split with hyphens)
      and used in messages.
    - Read-only properties for every name listed in __introspectable__,
      mirroring a private "_name" backing field.
    - Compact __repr__ and __rich_repr__ for diagnostics and pretty printers.
    """
    __introspectable__ = ()

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            return "%s(%s)" % (
                type(self).__typename__,
                ", ".join("%s=%r" % pair for pair in self.__rich_repr__()),
            )
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in type(self).__introspectable__:
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_text(cls, metadata, name, /, *, required=False):
    """
    Internal: validate an optional (or required) non-empty text field in place.
    """
    if not isinstance(value := metadata[name], str | Text | Unset):
        raise TypeError(f"{cls.__typename__} {name!r} must be a string")
    elif isinstance(value, str) and not (value := value.strip()):
        raise ValueError(f"{cls.__typename__} {name!r} cannot be empty")
    elif required and value is Unset:
        raise TypeError(f"{cls.__typename__} must specify a {name!r}")
    metadata[name] = coalesce(value)


def _sanitize_names(cls, metadata, /):
    r"""
    Internal: validate the short/long names of an Opt in place.

    - short: r"-(?!\d)[^\W_]+" (one dash, no leading digit so negative numbers
      stay values), e.g. "-o", "-os".
    - long:  r"--[^\W\d_](-?[^\W_]+)*", e.g. "--output", "--no-color".
    """
    if not isinstance(short := metadata["short"], str):
        raise TypeError(f"{cls.__typename__} short name must be a string")
    elif not re.fullmatch(r"-(?!\d)[^\W_]+", short := short.strip()):
        raise ValueError(f"{cls.__typename__} short name must look like '-x' (got {short!r})")
    metadata["short"] = short

    if not isinstance(long := metadata["long"], str | Unset):
        raise TypeError(f"{cls.__typename__} long name must be a string")
    elif isinstance(long, str) and not re.fullmatch(r"--[^\W\d_](-?[^\W_]+)*", long := long.strip()):
        raise ValueError(f"{cls.__typename__} long name must look like '--name' (got {long!r})")
    metadata["long"] = coalesce(long)


class Opt(metaclass=SpecType):
    """
    Declared option and binding target.

    Properties
    - The names listed in __introspectable__ are exposed as read-only
      attributes mirroring the sanitized metadata values.
    - owner/name are None until the Opt is assigned in a class body.
    """

    __introspectable__ = (
        "short",
        "long",
        "descr",
        "metavar",
        "hasarg",
        "required",
        "default",
        "owner",
        "name",
    )

    def __init__(
            self,
            short,
            long=Unset,
            /,
            descr=Unset,
            *,
            metavar=Unset,
            hasarg=True,
            required=False,
            default=Unset
    ):
        metadata = {
            "short": short,
            "long": long,
            "descr": descr,
            "metavar": metavar,
        }
        _sanitize_names(type(self), metadata)
        _sanitize_text(type(self), metadata, "descr", required=True)
        _sanitize_text(type(self), metadata, "metavar")

        if not hasarg and metadata["metavar"] is not None:
            raise TypeError(f"{type(self).__typename__} without argument cannot have a 'metavar'")

        metadata |= {
            "hasarg": bool(hasarg),
            "required": bool(required),
            "default": coalesce(default, None if hasarg else False),
            "owner": None,
            "name": None,
        }
        for name, object in metadata.items():
            setattr(self, "_" + name, object)

    @property
    def names(self):
        """
        Every name this option answers to: the short name, then the long one.
        """
        return tuple(name for name in (self.short, self.long) if name)

    def __set_name__(self, owner, name):
        if self._owner is not None:
            raise TypeError(
                f"{type(self).__typename__} {self.short!r} is already bound to "
                f"{self._owner.__qualname__}.{self._name}"
            )
        self._owner = owner
        self._name = name

    def __get__(self, instance, owner=None):
        if instance is None:
            return self
        return instance.__dict__.get(self._name, self._default)

    def __set__(self, instance, value):
        instance.__dict__[self._name] = value

    def __delete__(self, instance):
        instance.__dict__.pop(self._name, None)


class Syntax(metaclass=SpecType):
    """
    Command identity rendered in help: name, usage syntax, description and
    online-help URL. Empty description/URL are normalized to None.
    """

    __introspectable__ = (
        "cmd",
        "syntax",
        "descr",
        "online",
    )

    def __init__(self, cmd, syntax="", descr=Unset, online=Unset):
        if not isinstance(cmd, str):
            raise TypeError(f"{type(self).__typename__} 'cmd' must be a string")
        elif not (cmd := cmd.strip()):
            raise ValueError(f"{type(self).__typename__} 'cmd' cannot be empty")
        if not isinstance(syntax, str):
            raise TypeError(f"{type(self).__typename__} 'syntax' must be a string")

        self._cmd = cmd
        self._syntax = syntax.strip()
        # "" is accepted here and means "no description/online help".
        self._descr = (descr.strip() if isinstance(descr, str) else coalesce(descr)) or None
        self._online = (online.strip() if isinstance(online, str) else coalesce(online)) or None

    @property
    def usage(self):
        """
        The conventional "name + usage syntax" line.
        """
        return " ".join(part for part in (self.cmd, self.syntax) if part)

    def __eq__(self, other):
        if not isinstance(other, Syntax):
            return NotImplemented
        return tuple(self.__rich_repr__()) == tuple(other.__rich_repr__())

    def __hash__(self):
        return hash(tuple(self.__rich_repr__()))


def syntax(cmd, /, syntax="", descr="", online=""):
    """
    Class decorator attaching a Syntax to a command class.

    The declaration belongs to the decorated class only: the scanner reads it
    from the class's own namespace, so a subclass without @syntax keeps its
    base's declaration and a subclass with one overrides it.

    Usage
        @syntax("d2j-dump", "[options] <file>", "dump a file", "https://example.org/dump")
        class Dump(Command): ...
    """
    declared = Syntax(cmd, syntax, descr, online)

    @rename("syntax")
    def wrapper(cls, /):
        if not isinstance(cls, type):
            raise TypeError("@syntax() must be applied to a class")
        if "__syntax__" in vars(cls):
            raise TypeError("@syntax() must be applied only once")
        cls.__syntax__ = declared
        return cls

    return wrapper


__all__ = (
    "Opt",
    "Syntax",
    "syntax",
)

# The metaclass is an implementation detail of the records above.
del SpecType
