"""
optbind declaration scanner.

scan(cls) walks a command class's hierarchy from the root ancestor down to the
class itself (reversed MRO) and collects, level by level:
- the Syntax declared with @syntax on that level (more derived levels win);
- every Opt assigned in that level's own class body, keyed by short name
  (a re-declared short name overwrites the earlier entry, keeping its place).

Each Opt is validated against its declared type, read from the annotations
of the level that declares it:
- an option without argument must be annotated bool (or left unannotated)
  and must declare a False default;
- an option with argument must be annotated with a convertible type (see
  optbind.converters); unannotated value options are str.
Violations raise DeclarationError before any argument is parsed.

The result is a fresh Declarations record per call; nothing is cached.
"""
import inspect
import logging
from collections import Counter
from types import MappingProxyType
from typing import NamedTuple

from .arguments import Opt, Syntax
from .converters import is_supported, typename
from .faults import DeclarationError, FaultCode
from .utils import Unset

log = logging.getLogger(__name__)


class Binding(NamedTuple):
    """
    Binding target of one option: the declaring Opt and its declared type.
    """
    option: Opt
    type: type

    def assign(self, instance, value, /):
        """
        Write a converted value into the command instance's slot.
        """
        self.option.__set__(instance, value)

    def reset(self, instance, /):
        """
        Drop any bound value so the slot reads as its declared default again.
        """
        self.option.__delete__(instance)


class Declarations(NamedTuple):
    """
    Scan result: the effective Syntax, the ordered options (short name → Opt)
    and the registry (short name → Binding).
    """
    syntax: Syntax | None
    options: MappingProxyType
    registry: MappingProxyType


def _annotations(level):
    try:
        return inspect.get_annotations(level, eval_str=True)
    except (NameError, SyntaxError, TypeError, AttributeError) as exception:
        raise DeclarationError(
            "cannot resolve the annotations of %s: %s" % (level.__qualname__, exception),
            code=FaultCode.INVALID_DECLARATION,
        ) from exception


def _bind(level, name, option, annotations):
    where = "%s.%s" % (level.__qualname__, name)

    if option.owner is not level or option.name != name:
        raise DeclarationError(
            "option %r of %s must be declared in a class body" % (option.short, where),
            code=FaultCode.INVALID_DECLARATION,
        )

    if not option.hasarg:
        type = annotations.get(name, bool)
        if type is not bool:
            raise DeclarationError(
                "the type of %s must be bool, as it is declared as no args" % where,
                code=FaultCode.INVALID_DECLARATION,
            )
        if option.default is not False:
            raise DeclarationError(
                "the value of %s must be False, as it is declared as no args" % where,
                code=FaultCode.INVALID_DECLARATION,
            )
        return Binding(option, bool)

    type = annotations.get(name, str)
    if not is_supported(type):
        raise DeclarationError(
            "the type %s of %s is not supported" % (typename(type), where),
            code=FaultCode.UNSUPPORTED_TYPE,
        )
    return Binding(option, type)


def scan(cls, /, syntax=None):
    """
    Collect the declarations of a command class.

    Parameters
    - cls: the command class (its whole MRO is scanned, root first).
    - syntax: the Syntax supplied by the constructor, if any; any @syntax in
      the hierarchy replaces it.

    Returns
    - Declarations(syntax, options, registry)

    Raises
    - DeclarationError: on any invalid option declaration or when two
      registered options share a long name.
    """
    if not isinstance(cls, type):
        raise TypeError("scan() argument must be a class")

    options = {}
    registry = {}

    for level in reversed(cls.__mro__):
        namespace = vars(level)

        if isinstance(declared := namespace.get("__syntax__"), Syntax):
            syntax = declared

        declared = [(name, object) for name, object in namespace.items() if isinstance(object, Opt)]
        if not declared:
            continue

        annotations = _annotations(level)
        for name, option in declared:
            binding = _bind(level, name, option, annotations)
            if option.short in registry:
                log.debug("%s.%s overrides option %s", level.__qualname__, name, option.short)
            options[option.short] = option
            registry[option.short] = binding
            log.debug("registered option %s as %s.%s (%s)", option.short, level.__qualname__, name, typename(binding.type))

    counts = Counter(option.long for option in options.values() if option.long)
    if duplicates := sorted(name for name, count in counts.items() if count > 1):
        raise DeclarationError(
            "long option names must be unique in %s: %s" % (cls.__qualname__, ", ".join(duplicates)),
            code=FaultCode.CONFLICTING_NAME,
        )

    return Declarations(syntax, MappingProxyType(options), MappingProxyType(registry))


__all__ = (
    "Binding",
    "Declarations",
    "scan",
)
