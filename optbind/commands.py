"""
optbind command layer: declare, bind, parse, convert, inject, run.

What this module provides
- Command: base class for concrete commands. Subclasses declare options as
  annotated class attributes (Opt) and, optionally, their identity with
  @syntax; they implement execute().
- invoke(obj, prompt): convenience runner for commands and command classes.

Lifecycle of Command.main(prompt)
1. Scan the class hierarchy (root first) for Syntax and Opt declarations.
   DeclarationError propagates: a bad declaration is a programming defect.
2. Reset every bound slot to its declared default.
3. If "-h" or "--help" appears anywhere in the tokens, print usage and stop,
   without parsing (help must work even next to malformed arguments).
4. Let argparse tokenize the arguments against the registered options.
   Failures are reported as a single line with a --help hint.
5. Keep the leftover positional tokens in command.remaining; tokens after
   a "--" terminator are positional verbatim.
6. Convert each supplied value to its declared type and inject it.
   ConversionError is reported as a single line with a --help hint.
7. If the help flag ended up set (e.g. "-vh"), print usage and stop.
8. Call execute(); any exception is reported with its full traceback.

Quick start
    from pathlib import Path
    from optbind import Command, Opt, syntax, invoke

    @syntax("dump", "[options] <file>", "dump a file")
    class Dump(Command):
        output: Path = Opt("-o", "--output", "output file", metavar="out")
        force: bool = Opt("-f", "--force", "overwrite the output", hasarg=False)

        def execute(self):
            print(self.output, self.force, self.remaining)

    if __name__ == "__main__":
        invoke(Dump)

Runtime options (constructor keywords or class attributes)
- shell: report faults on stderr instead of raising them (default True).
- colorful: style help and faults (default True; plain when not a terminal).
- fancy: wrap help in a titled panel (default False).
- width: display width of the help text (default 74).
- version: version shown in the help footer (default: installed distribution).
"""
import argparse
import importlib.metadata
import logging
import re
import shlex
import sys
from abc import ABC, abstractmethod
from collections.abc import Iterable

from rich.console import Console

from .arguments import Opt, Syntax
from .converters import convert
from .declarations import scan
from .faults import *
from .usage import WIDTH, render
from .utils import *

log = logging.getLogger(__name__)


class _Parser(argparse.ArgumentParser):
    """
    argparse adapter: tokenization failures raise TokenizationError instead
    of printing usage and exiting.
    """

    def error(self, message):
        raise TokenizationError(message, code=FaultCode.MALFORMED_ARGUMENTS)


def _parser(declarations):
    """
    Register the declared options with argparse.

    Every option defaults to SUPPRESS so the resulting namespace only holds
    what was actually supplied; dests are the short names, and leftover
    positionals land in "remaining".
    """
    syntax = declarations.syntax
    parser = _Parser(prog=syntax.cmd, usage=syntax.usage, add_help=False, allow_abbrev=False)
    try:
        for option in declarations.options.values():
            if option.hasarg:
                parser.add_argument(
                    *option.names,
                    dest=option.short,
                    metavar="VALUE",
                    required=option.required,
                    default=argparse.SUPPRESS,
                )
            else:
                parser.add_argument(
                    *option.names,
                    dest=option.short,
                    action="store_true",
                    required=option.required,
                    default=argparse.SUPPRESS,
                )
    except argparse.ArgumentError as exception:
        raise DeclarationError(str(exception), code=FaultCode.CONFLICTING_NAME) from exception
    parser.add_argument("remaining", nargs="*")
    return parser


def _tokenize(prompt):
    """
    Normalize a prompt into a list of tokens.

    - Unset: sys.argv[1:].
    - str: shell-like string split with shlex.split.
    - Iterable[str]: used as-is (empty strings are legitimate values).
    """
    if prompt is Unset:
        return sys.argv[1:]
    if isinstance(prompt, str):
        return shlex.split(prompt)
    if isinstance(prompt, Iterable):
        tokens = list(prompt)
        if not all(isinstance(token, str) for token in tokens):
            raise TypeError("main() argument must be a string or an iterable of strings")
        return tokens
    raise TypeError("main() argument must be a string or an iterable of strings")


def _split(tokens):
    """
    Split tokens at the first "--": the head is parsed, the tail is kept
    verbatim as positionals.
    """
    if "--" not in tokens:
        return tokens, []
    index = tokens.index("--")
    return tokens[:index], tokens[index + 1:]


class Command(ABC):
    """
    Base class of declarative commands.

    Identity
    - Command(): name derived from the class name (CamelCase → camel-case).
    - Command("name syntax", header): name and syntax split at the first space.
    - Command(name, syntax, header): explicit parts.
    A @syntax declaration anywhere in the hierarchy overrides these.

    State after main()
    - bound option attributes hold converted values (or declared defaults);
    - remaining: leftover positional tokens;
    - supplied: short names of the options given in this invocation.
    """

    help: bool = Opt("-h", "--help", "Print this help message", hasarg=False)

    shell = True
    colorful = True
    fancy = False
    width = WIDTH
    version = None

    def __init__(self, *parameters, shell=Unset, colorful=Unset, fancy=Unset, width=Unset, version=Unset):
        match len(parameters):
            case 0:
                syntax = None
            case 2:
                line, header = parameters
                if not isinstance(line, str):
                    raise TypeError("Command() first argument must be a string")
                cmd, _, rest = line.strip().partition(" ")
                syntax = Syntax(cmd, rest, header)
            case 3:
                syntax = Syntax(*parameters)
            case _:
                raise TypeError("Command() takes 0, 2 or 3 positional arguments but %d were given" % len(parameters))

        self._syntax = syntax
        self.remaining = []
        self.supplied = frozenset()

        for name, object in {
            "shell": shell,
            "colorful": colorful,
            "fancy": fancy,
            "width": width,
            "version": version,
        }.items():
            if object is not Unset:
                setattr(self, name, object)

    @abstractmethod
    def execute(self):
        """
        Execution entry point, called once the options are bound.
        """

    def declarations(self):
        """
        Scan this command's class hierarchy.

        Returns a fresh Declarations record; when neither the constructor nor
        any @syntax supplied an identity, one is derived from the class name.
        """
        declarations = scan(type(self), getattr(self, "_syntax", None))
        if declarations.syntax is None:
            name = re.sub(r"(?<!^)(?=[A-Z])", r"-", type(self).__name__).lower()
            declarations = declarations._replace(syntax=Syntax(name))
        return declarations

    def convert(self, value, type, /):
        """
        Convert a raw option value to its declared type.

        Subclasses may override this to support additional types; raise
        ConversionError for values that cannot be converted.
        """
        return convert(value, type)

    def getversion(self):
        """
        Version string for the help footer.

        The version runtime option wins; otherwise the version of the installed
        distribution providing this command's top-level package, if any.
        """
        if self.version is not None:
            return str(self.version)
        package = type(self).__module__.partition(".")[0]
        for distribution in importlib.metadata.packages_distributions().get(package, ()):
            try:
                return importlib.metadata.version(distribution)
            except importlib.metadata.PackageNotFoundError:
                continue
        return None

    def usage(self, declarations=Unset, /):
        """
        Print the help text to stdout.
        """
        declarations = coalesce(declarations) or self.declarations()
        Console(width=self.width).print(render(
            declarations.syntax,
            declarations.options.values(),
            self.getversion(),
            width=self.width,
            colorful=self.colorful,
            fancy=self.fancy,
        ))

    def trigger(self, fault, /, **options):
        """
        Surface a fault with this command's runtime options (see faults.trigger).
        """
        trigger(fault, **{"command": self, "shell": self.shell, "colorful": self.colorful} | options)

    def main(self, prompt=Unset, /):
        """
        Run the whole lifecycle for one invocation (see module docstring).

        Parameters
        - prompt: Unset (sys.argv[1:]), a shell-like string, or an iterable
          of string tokens.

        Raises
        - DeclarationError: the command's declarations are invalid.
        - TypeError: the prompt is not a string or an iterable of strings.
        In non-shell mode, tokenization, conversion and execution faults are
        raised as well; in shell mode they are printed and main() returns.
        """
        tokens = _tokenize(prompt)
        declarations = self.declarations()
        cmd = declarations.syntax.cmd

        for binding in declarations.registry.values():
            binding.reset(self)
        self.remaining = []
        self.supplied = frozenset()

        if any(token in ("-h", "--help") for token in tokens):
            log.debug("%s: help requested, skipping parsing", cmd)
            self.usage(declarations)
            return

        # argparse's intermixed mode ignores "--"; everything after it is positional.
        tokens, rest = _split(tokens)

        try:
            namespace = vars(_parser(declarations).parse_intermixed_args(tokens))
        except TokenizationError as fault:
            log.debug("%s: tokenization failed: %s", cmd, fault.message)
            self.trigger(fault)
            return

        self.remaining = list(namespace.pop("remaining", None) or ()) + rest
        self.supplied = frozenset(namespace)
        log.debug("%s: supplied %s, remaining %r", cmd, sorted(self.supplied), self.remaining)

        for short, raw in namespace.items():
            if (binding := declarations.registry.get(short)) is None:
                continue
            if not binding.option.hasarg:
                value = True
            else:
                try:
                    value = self.convert(raw, binding.type)
                except ConversionError as fault:
                    self.trigger(fault.__replace__(
                        "option %s: %s" % ("/".join(binding.option.names), fault.message),
                    ))
                    return
                except Exception as exception:
                    self.trigger(ExecutionError(
                        "converting option %s of %r failed" % (short, cmd),
                        code=FaultCode.EXECUTION_FAILURE,
                    ), exception=exception)
                    return
            binding.assign(self, value)
            log.debug("%s: %s = %r", cmd, short, value)

        if (helper := declarations.registry.get("-h")) is not None and helper.option.__get__(self) is True:
            self.usage(declarations)
            return

        try:
            self.execute()
        except Exception as exception:
            log.debug("%s: execution failed", cmd, exc_info=True)
            self.trigger(ExecutionError(
                "command %r failed" % cmd,
                code=FaultCode.EXECUTION_FAILURE,
            ), exception=exception)

    def __invoke__(self, prompt=Unset, /):
        self.main(prompt)


def invoke(object, prompt=Unset, /):
    """
    Convenience runner for commands.

    Parameters
    - object: a Command (anything providing __invoke__), or a Command subclass
      which is instantiated without arguments first.
    - prompt: Unset (sys.argv[1:]), a shell-like string, or an iterable of strings.

    Raises
    - TypeError: when object cannot be invoked.
    """
    if hasattr(object, "__invoke__") and callable(object.__invoke__) and not isinstance(object, type):
        object.__invoke__(prompt)
        return

    if isinstance(object, type) and issubclass(object, Command):
        return invoke(object(), prompt)

    target = "argument" if prompt is Unset else "first argument"
    raise TypeError(f"invoke() {target} must be a command or a command class") from None


__all__ = (
    "Command",
    "invoke",
)
