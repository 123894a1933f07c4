"""
Declarations module behavioral tests (hierarchy scanning and invariants).

Scope
- Validate root-first scanning: base options first, derived @syntax wins,
  re-declared short names overwrite earlier entries in place.
- Validate the no-argument invariants (bool type, False default) and the
  supported-type check, all raised as DeclarationError at scan time.
- Validate the registry bindings (declared types and setters).

Conventions
- Test method names follow CamelCase per project convention.
- Command classes live at module level so their annotations resolve.
"""
import enum
import unittest
from pathlib import Path
from unittest import TestCase

from optbind import Command, Opt, Syntax, syntax, Int32, DeclarationError
from optbind.declarations import scan
from optbind.faults import FaultCode


class Mode(enum.Enum):
    FAST = 1
    SAFE = 2


class Base(Command):
    output: Path = Opt("-o", "--output", "output file")
    force: bool = Opt("-f", "--force", "overwrite the output", hasarg=False)

    def execute(self):
        pass


@syntax("base-tool", "[options] <file>", "the base tool")
class Declared(Base):
    pass


@syntax("derived-tool", "[options] <dir>", "the derived tool", "https://example.org/derived")
class Derived(Declared):
    threads: Int32 = Opt("-t", "--threads", "worker threads", default=1)
    mode: Mode = Opt("-m", "--mode", "processing mode")


class Undecorated(Declared):
    name = Opt("-n", "--name", "a name")
    verbose = Opt("-v", "--verbose", "more output", hasarg=False)


class Overriding(Base):
    out: str = Opt("-o", "--out", "output name")


class NonBooleanFlag(Command):
    count: int = Opt("-c", "--count", "a count", hasarg=False)

    def execute(self):
        pass


class TruthyFlag(Command):
    enabled: bool = Opt("-e", "--enabled", "enabled", hasarg=False, default=True)

    def execute(self):
        pass


class NoneFlag(Command):
    enabled: bool = Opt("-e", "--enabled", "enabled", hasarg=False, default=None)

    def execute(self):
        pass


class UnsupportedType(Command):
    items: list = Opt("-i", "--items", "items")

    def execute(self):
        pass


class ConflictingLongNames(Command):
    first: str = Opt("-a", "--same", "first")
    second: str = Opt("-b", "--same", "second")

    def execute(self):
        pass


class TestScanOrder(TestCase):
    """Root-first scanning and override semantics."""

    def testBaseCommandDeclaresHelp(self):
        declarations = scan(Base)
        self.assertEqual(list(declarations.options), ["-h", "-o", "-f"])
        self.assertIs(declarations.registry["-h"].option, Command.help)

    def testRegistryKeysMatchOptions(self):
        declarations = scan(Derived)
        self.assertEqual(list(declarations.registry), list(declarations.options))
        self.assertEqual(list(declarations.options), ["-h", "-o", "-f", "-t", "-m"])

    def testDerivedSyntaxWins(self):
        self.assertEqual(scan(Declared).syntax.cmd, "base-tool")
        declared = scan(Derived).syntax
        self.assertEqual(declared.cmd, "derived-tool")
        self.assertEqual(declared.syntax, "[options] <dir>")
        self.assertEqual(declared.online, "https://example.org/derived")

    def testSyntaxIsInherited(self):
        self.assertEqual(scan(Undecorated).syntax, scan(Declared).syntax)

    def testDeclaredSyntaxOverridesConstructorSyntax(self):
        supplied = Syntax("ctor", "args", "from the constructor")
        self.assertEqual(scan(Declared, supplied).syntax.cmd, "base-tool")

    def testConstructorSyntaxKeptWithoutDeclaration(self):
        supplied = Syntax("ctor", "args", "from the constructor")
        self.assertIs(scan(Base, supplied).syntax, supplied)
        self.assertIsNone(scan(Base).syntax)

    def testRedeclaredShortNameOverwritesInPlace(self):
        declarations = scan(Overriding)
        self.assertEqual(list(declarations.options), ["-h", "-o", "-f"])
        self.assertIs(declarations.options["-o"], Overriding.out)
        self.assertEqual(declarations.options["-o"].long, "--out")
        self.assertIs(declarations.registry["-o"].type, str)

    def testEachScanIsFresh(self):
        self.assertIsNot(scan(Base).registry, scan(Base).registry)

    def testRequiresClass(self):
        with self.assertRaises(TypeError):
            scan(Base())


class TestBindings(TestCase):
    """Declared types and setters in the registry."""

    def testDeclaredTypes(self):
        registry = scan(Derived).registry
        self.assertIs(registry["-o"].type, Path)
        self.assertIs(registry["-f"].type, bool)
        self.assertIs(registry["-t"].type, Int32)
        self.assertIs(registry["-m"].type, Mode)

    def testUnannotatedTypes(self):
        registry = scan(Undecorated).registry
        self.assertIs(registry["-n"].type, str)
        self.assertIs(registry["-v"].type, bool)

    def testAssignAndReset(self):
        command = Derived()
        binding = scan(Derived).registry["-t"]
        binding.assign(command, 8)
        self.assertEqual(command.threads, 8)
        binding.reset(command)
        self.assertEqual(command.threads, 1)


class TestInvariants(TestCase):
    """DeclarationError is raised before any parsing."""

    def testFlagMustBeBoolean(self):
        with self.assertRaises(DeclarationError) as context:
            scan(NonBooleanFlag)
        self.assertIn("must be bool", context.exception.message)
        self.assertEqual(context.exception.code, FaultCode.INVALID_DECLARATION)

    def testFlagDefaultMustBeFalse(self):
        for cls in (TruthyFlag, NoneFlag):
            with self.subTest(cls=cls.__name__):
                with self.assertRaises(DeclarationError) as context:
                    scan(cls)
                self.assertIn("must be False", context.exception.message)

    def testUnsupportedType(self):
        with self.assertRaises(DeclarationError) as context:
            scan(UnsupportedType)
        self.assertEqual(context.exception.code, FaultCode.UNSUPPORTED_TYPE)

    def testConflictingLongNames(self):
        with self.assertRaises(DeclarationError) as context:
            scan(ConflictingLongNames)
        self.assertEqual(context.exception.code, FaultCode.CONFLICTING_NAME)
        self.assertIn("--same", context.exception.message)

    def testDeclarationErrorIsTypeError(self):
        with self.assertRaises(TypeError):
            scan(NonBooleanFlag)

    def testOptionAttachedAfterClassCreation(self):
        class Late(Base):
            pass

        Late.extra = Opt("-x", "--extra", "attached late")
        with self.assertRaises(DeclarationError):
            scan(Late)


if __name__ == "__main__":
    unittest.main()
