"""
optbind faults (errors) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every fault the binding
  layer can surface. Codes are grouped by domain (declaration, tokenization,
  conversion, execution) to keep logs and searches predictable.
- CommandException: base type that carries message + options and knows how to
  render itself (rich) and how to surface itself (__trigger__).
- trigger(): central entry point to surface any fault with runtime options.

Severity
- DeclarationError is a programming defect in a command's declarations. The
  scanner raises it directly; it is never downgraded to a message.
- TokenizationError and ConversionError are user-input faults. In shell mode
  they are printed as a single line with a help hint.
- ExecutionError wraps whatever the command's execute() raised. In shell mode
  it is printed together with the full traceback of the original exception.

Integration
- Command.main() catches user-input/execution faults at its boundary and calls
  Command.trigger(fault), which merges shell/colorful options.
- In non-shell mode the fault is raised to the caller instead of printed.
"""
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.text import Text
from rich.traceback import Traceback

from .utils import Unset


class FaultCode(IntEnum):
    """
    canonical fault codes used across the binding layer (stable identifiers).

    grouping (by high-level domain)
    - declarations (101xx): INVALID_DECLARATION, UNSUPPORTED_TYPE, CONFLICTING_NAME
    - tokenization (111xx): MALFORMED_ARGUMENTS
    - conversion   (112xx): UNCONVERTIBLE_VALUE
    - execution    (113xx): EXECUTION_FAILURE
    """
    # --- declaration errors (101xx) ---
    INVALID_DECLARATION         = 10101
    UNSUPPORTED_TYPE            = 10102
    CONFLICTING_NAME            = 10103

    # --- tokenization errors (111xx) ---
    MALFORMED_ARGUMENTS         = 11101

    # --- conversion errors (112xx) ---
    UNCONVERTIBLE_VALUE         = 11201

    # --- execution errors (113xx) ---
    EXECUTION_FAILURE           = 11301

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _palette(options):
    styles = defaultdict(str, {
        "error-label": "bold #FF4DA6",  # friendly pinky label
        "error-message": "#C8C8D0",  # soft light gray message
        "hint": "italic #9CE19C",  # gentle green hint text
        "hint-option": "bold #00E5FF",  # neon cyan option name
    } | getattr(__import__("__main__"), "__styles__", {}))

    def styler(style):
        return styles[style] if options.get("colorful", False) else ""

    return styler


class CommandException(Exception):
    """
    base fault: a message plus read-only rendering/surfacing options.

    recognized options
    - code: FaultCode for this fault.
    - command: the Command that surfaced the fault (optional).
    - shell: print instead of raising when True.
    - colorful: enable styles when printing.
    - hint: trailing hint text (defaults to “for detail help”).
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(*(() if message is Unset else (message,)))
        self.message = message
        self.options = MappingProxyType(options)

    @property
    def code(self):
        return self.options.get("code")

    def __rich__(self):
        styler = _palette(self.options)
        return Text.assemble(
            ("ERROR", styler("error-label")),
            ": ",
            (str(self.message or type(self).__name__), styler("error-message")),
            ", ",
            ("--help", styler("hint-option")),
            " ",
            (self.options.get("hint", "for detail help"), styler("hint")),
        )

    def __trigger__(self):
        if not self.options.get("shell", False):
            raise self from self.options.get("exception")
        Console(stderr=True).print(self, soft_wrap=True, highlight=False)

    def __replace__(self, message=Unset, /, **overrides):
        return type(self)(self.message if message is Unset else message, **{**self.options, **overrides})


class DeclarationError(CommandException, TypeError):
    """a command declares an option or syntax that cannot be bound."""


class TokenizationError(CommandException):
    """the external tokenizer rejected the raw arguments."""


class ConversionError(CommandException, ValueError):
    """a supplied value cannot be converted to its declared type."""


class ExecutionError(CommandException):
    """
    the command's execute() raised.

    the original exception travels in options["exception"]; the rendering
    shows its full traceback, not only a summary.
    """

    def __rich__(self):
        styler = _palette(self.options)
        header = Text.assemble(
            ("ERROR", styler("error-label")),
            ": ",
            (str(self.message or type(self).__name__), styler("error-message")),
        )
        exception = self.options.get("exception")
        if exception is None:
            return header
        return Group(header, Traceback.from_exception(type(exception), exception, exception.__traceback__))


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see CommandException).
    - options are merged into the fault via __replace__(**options) before triggering.
    - in shell mode, rendering happens via a rich console on stderr; otherwise, the
      fault is raised.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    fault.__replace__(**options).__trigger__()


__all__ = (
    "FaultCode",
    "CommandException",
    "DeclarationError",
    "TokenizationError",
    "ConversionError",
    "ExecutionError",
    "trigger",
)
