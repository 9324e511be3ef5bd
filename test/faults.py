# python
"""
Faults module behavioral tests (taxonomy, options, rendering, trigger, outcome).

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import copy
import io
import unittest
from contextlib import redirect_stderr
from unittest import TestCase

from rich.console import Console

from optspec.faults import (
    FaultCode,
    HandleRepeatedError,
    InvalidIntegerError,
    OptionsFault,
    Outcome,
    ParseError,
    SpecificationError,
    UnknownOptionError,
    attempt,
    getdoc,
    trigger,
)


class TestTaxonomy(TestCase):

    def testKindsAreDisjoint(self):
        self.assertTrue(issubclass(HandleRepeatedError, SpecificationError))
        self.assertFalse(issubclass(HandleRepeatedError, ParseError))
        self.assertTrue(issubclass(UnknownOptionError, ParseError))
        self.assertFalse(issubclass(UnknownOptionError, SpecificationError))
        self.assertEqual(HandleRepeatedError.kind, "specification")
        self.assertEqual(UnknownOptionError.kind, "parse")

    def testDefaultsComeFromTheClass(self):
        fault = HandleRepeatedError("handle repeated: '-v'", handle="-v")
        self.assertIs(fault.code, FaultCode.HANDLE_REPEATED)
        self.assertEqual(fault.title, "handle repeated")
        self.assertEqual(fault.hint, "")
        self.assertEqual(fault.options["handle"], "-v")
        self.assertEqual(str(fault), "handle repeated: '-v'")

    def testOptionsAreReadOnly(self):
        fault = UnknownOptionError("unknown")
        with self.assertRaises(TypeError):
            fault.options["code"] = FaultCode.INVALID_FLOAT

    def testReplaceMergesOptions(self):
        fault = copy.replace(UnknownOptionError("unknown", hint="a"), hint="b", shell=False)
        self.assertIsInstance(fault, UnknownOptionError)
        self.assertEqual(fault.hint, "b")
        self.assertEqual(fault.message, "unknown")

    def testCodeNormalizeDefaultsToNumber(self):
        self.assertEqual(FaultCode.INVALID_INTEGER.normalize(), "22121")

    def testGetdocWithoutHostDocs(self):
        self.assertIsNone(getdoc(FaultCode.UNKNOWN_OPTION))
        with self.assertRaises(TypeError):
            getdoc(22101)


class TestTrigger(TestCase):

    def testRaisesOutsideShell(self):
        with self.assertRaises(InvalidIntegerError):
            trigger(InvalidIntegerError("data 'x' is not an integer"))

    def testShellPrintsAndExits(self):
        stream = io.StringIO()
        with redirect_stderr(stream):
            with self.assertRaises(SystemExit) as context:
                trigger(InvalidIntegerError("data 'x' is not an integer", hint="use digits"), shell=True, colorful=False)
        self.assertEqual(context.exception.code, 1)
        self.assertIn("data 'x' is not an integer", stream.getvalue())
        self.assertIn("use digits", stream.getvalue())

    def testRejectsNonFaults(self):
        with self.assertRaises(TypeError):
            trigger(ValueError("nope"))

    def testRichRendering(self):
        console = Console(file=io.StringIO(), width=100, color_system=None)
        console.print(UnknownOptionError("unknown option '--x'", hint="check the spelling", fancy=True))
        output = console.file.getvalue()
        self.assertIn("22101", output)
        self.assertIn("Unknown Option", output)
        self.assertIn("unknown option '--x'", output)


class TestOutcome(TestCase):

    def testValue(self):
        outcome = attempt(int, "3")
        self.assertEqual(outcome, Outcome(3, None))
        self.assertTrue(outcome.ok)
        self.assertEqual(outcome.message, "")

    def testFault(self):
        def failing():
            raise SpecificationError("bad option spec")

        outcome = attempt(failing)
        self.assertFalse(outcome.ok)
        self.assertEqual(outcome.kind, "specification")
        self.assertEqual(outcome.message, "bad option spec")
        self.assertIsInstance(outcome.fault, OptionsFault)

    def testOtherExceptionsPropagate(self):
        with self.assertRaises(ValueError):
            attempt(int, "x")


if __name__ == "__main__":
    unittest.main()
