# python
"""
Compiler module behavioral tests (grammar, semantics, canonical names).

Scope
- Validate every branch of the option grammar: prefixes, handle lists, cardinality,
  assignment modes, list forms and value types.
- Validate modifiers: '[&]' honored only in subcommand mode, relational ones rejected.
- Validate canonical name derivation and explicit names.
- Validate malformed declarations raise the matching SpecificationError subclass.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from optspec import (
    Assignment,
    Cardinality,
    Collection,
    Modifier,
    ValueType,
    strip_prefix,
)
from optspec.compiler import compile
from optspec.faults import (
    EmptyNameError,
    HandleRepeatedError,
    IncompleteSpecError,
    MalformedSpecError,
    MissingHandlesError,
    SpecificationError,
    TrailingInputError,
    UnimplementedModifierError,
)


class TestAssignment(TestCase):
    """The four assignment modes and their defaults."""

    def testEqualsIsRequiredInline(self):
        descriptor = compile("-humanity=s")
        self.assertIs(descriptor.assignment, Assignment.REQUIRED_INLINE)
        self.assertIs(descriptor.collection, Collection.SCALAR)
        self.assertIs(descriptor.value_type, ValueType.STRING)

    def testEqualsQuestionIsOptionalInline(self):
        descriptor = compile("-age=?i")
        self.assertIs(descriptor.assignment, Assignment.OPTIONAL_INLINE)
        self.assertIs(descriptor.value_type, ValueType.INTEGER)

    def testNoAssignSpecIsFlag(self):
        descriptor = compile("--is-stupid")
        self.assertIs(descriptor.assignment, Assignment.FORBIDDEN)
        self.assertIs(descriptor.collection, Collection.SCALAR)
        self.assertEqual(descriptor.name, "is-stupid")
        self.assertTrue(descriptor.flag)

    def testEqualsBangIsForbiddenInline(self):
        descriptor = compile("-wife=!s")
        self.assertIs(descriptor.assignment, Assignment.FORBIDDEN_INLINE)
        self.assertIs(descriptor.collection, Collection.SCALAR)
        self.assertIs(descriptor.value_type, ValueType.STRING)
        self.assertEqual(descriptor.name, "wife")

    def testValueTypeMayBeOmitted(self):
        for spec, assignment in (
            ("-a=", Assignment.REQUIRED_INLINE),
            ("-a=?", Assignment.OPTIONAL_INLINE),
            ("-a=!", Assignment.FORBIDDEN_INLINE),
        ):
            with self.subTest(spec=spec):
                descriptor = compile(spec)
                self.assertIs(descriptor.assignment, assignment)
                self.assertIs(descriptor.value_type, ValueType.STRING)

    def testFloatValueType(self):
        self.assertIs(compile("--ratio=f").value_type, ValueType.FLOAT)


class TestCollection(TestCase):
    """List forms with and without equals sign."""

    def testBracketedValueIsList(self):
        descriptor = compile("--nums=[i]")
        self.assertIs(descriptor.collection, Collection.LIST)
        self.assertIs(descriptor.assignment, Assignment.REQUIRED_INLINE)
        self.assertIs(descriptor.value_type, ValueType.INTEGER)

    def testOptionalInlineList(self):
        descriptor = compile("--nums=?[f]")
        self.assertIs(descriptor.collection, Collection.LIST)
        self.assertIs(descriptor.assignment, Assignment.OPTIONAL_INLINE)
        self.assertIs(descriptor.value_type, ValueType.FLOAT)

    def testEmptyListIsStringList(self):
        descriptor = compile("--tags=[]")
        self.assertIs(descriptor.collection, Collection.LIST)
        self.assertIs(descriptor.value_type, ValueType.STRING)

    def testListWithoutEqualsForbidsAssignment(self):
        descriptor = compile("--count*[i]")
        self.assertIs(descriptor.cardinality, Cardinality.ANY_COUNT)
        self.assertIs(descriptor.assignment, Assignment.FORBIDDEN)
        self.assertIs(descriptor.collection, Collection.LIST)
        self.assertIs(descriptor.value_type, ValueType.INTEGER)

    def testListDirectlyAfterHandle(self):
        descriptor = compile("-x[s]")
        self.assertIs(descriptor.assignment, Assignment.FORBIDDEN)
        self.assertIs(descriptor.collection, Collection.LIST)


class TestCardinality(TestCase):

    def testDefaultIsAtMostOne(self):
        self.assertIs(compile("-v").cardinality, Cardinality.AT_MOST_ONE)

    def testQuestionIsAtMostOne(self):
        self.assertIs(compile("-v?").cardinality, Cardinality.AT_MOST_ONE)

    def testStarIsAnyCount(self):
        self.assertIs(compile("-v*").cardinality, Cardinality.ANY_COUNT)

    def testCardinalityBeforeEquals(self):
        descriptor = compile("-I*=[s]")
        self.assertIs(descriptor.cardinality, Cardinality.ANY_COUNT)
        self.assertIs(descriptor.assignment, Assignment.REQUIRED_INLINE)
        self.assertIs(descriptor.collection, Collection.LIST)


class TestHandles(TestCase):
    """Prefixes, handle lists and canonical names."""

    def testAllPrefixes(self):
        for handle in ("-x", "--x", "+x", "++x", ".x", ":x", "/x", "x"):
            with self.subTest(handle=handle):
                descriptor = compile(handle)
                self.assertEqual(descriptor.handles, frozenset({handle}))
                self.assertEqual(descriptor.name, "x")

    def testHandleList(self):
        descriptor = compile("-w|--wife=!s")
        self.assertEqual(descriptor.handles, frozenset({"-w", "--wife"}))
        self.assertEqual(descriptor.name, "wife")

    def testDuplicateHandleInList(self):
        with self.assertRaises(HandleRepeatedError) as context:
            compile("-x|-x")
        self.assertEqual(context.exception.options["handle"], "-x")
        with self.assertRaises(HandleRepeatedError):
            compile("-v|--verbose|-v=s")

    def testNotReexportedByPackage(self):
        import optspec

        self.assertNotIn("compile", optspec.__all__)
        self.assertIs(optspec.compiler.compile, compile)

    def testNameComesFromLastHandle(self):
        self.assertEqual(compile("--verbose|-v").name, "v")

    def testExplicitNameIsVerbatim(self):
        descriptor = compile("-n|--number=i", "count")
        self.assertEqual(descriptor.name, "count")
        self.assertEqual(descriptor.handles, frozenset({"-n", "--number"}))

    def testDashInsideHandle(self):
        self.assertEqual(compile("--dry-run").name, "dry-run")

    def testStripPrefix(self):
        self.assertEqual(strip_prefix("--wife"), "wife")
        self.assertEqual(strip_prefix("++x"), "x")
        self.assertEqual(strip_prefix("-_x"), "_x")
        self.assertEqual(strip_prefix("plain"), "plain")


class TestModifiers(TestCase):

    def testSubcommandIgnoredOutsideSubcommandMode(self):
        descriptor = compile("[&]deploy")
        self.assertIs(descriptor.modifier, Modifier.NONE)
        self.assertFalse(descriptor.subcommand)
        self.assertEqual(descriptor.name, "deploy")

    def testSubcommandHonoredInSubcommandMode(self):
        descriptor = compile("[&]deploy", subcommands=True)
        self.assertIs(descriptor.modifier, Modifier.SUBCOMMAND)
        self.assertTrue(descriptor.subcommand)

    def testRelationalModifiersAreUnimplemented(self):
        for spec in ("[<-a]-b", "[>--a]-b", "[!a]-b"):
            with self.subTest(spec=spec):
                with self.assertRaises(UnimplementedModifierError):
                    compile(spec)

    def testUnknownModifierIsMalformed(self):
        with self.assertRaises(MalformedSpecError):
            compile("[?]-b")

    def testUnclosedModifierIsMalformed(self):
        with self.assertRaises(MalformedSpecError):
            compile("[&-b")

    def testModifierWithoutHandles(self):
        with self.assertRaises(MissingHandlesError):
            compile("[&]")


class TestMalformed(TestCase):
    """Malformed declarations raise SpecificationError subclasses."""

    def testEmptySpec(self):
        with self.assertRaises(MissingHandlesError):
            compile("")

    def testLonePrefix(self):
        for spec in ("-", "--", "+", "/"):
            with self.subTest(spec=spec):
                with self.assertRaises(IncompleteSpecError):
                    compile(spec)

    def testTriplePrefix(self):
        with self.assertRaises(MalformedSpecError):
            compile("---x")

    def testMixedPrefix(self):
        with self.assertRaises(MalformedSpecError):
            compile("-+x")

    def testDanglingPipe(self):
        with self.assertRaises(IncompleteSpecError):
            compile("-a|")

    def testInvalidCharacterInHandle(self):
        with self.assertRaises(MalformedSpecError):
            compile("-a$b")

    def testUnknownValueType(self):
        with self.assertRaises(MalformedSpecError):
            compile("-a=x")

    def testUnclosedList(self):
        with self.assertRaises(IncompleteSpecError):
            compile("-a=[i")

    def testTrailingInput(self):
        with self.assertRaises(TrailingInputError):
            compile("-a=ss")

    def testCardinalityMustBeFollowedByAssignment(self):
        with self.assertRaises(MalformedSpecError):
            compile("-a?s")

    def testAllAreSpecificationErrors(self):
        with self.assertRaises(SpecificationError) as context:
            compile("-a=[i")
        self.assertEqual(context.exception.kind, "specification")

    def testEmptyNameErrorIsSpecificationError(self):
        self.assertTrue(issubclass(EmptyNameError, SpecificationError))

    def testNonStringSpecRejected(self):
        with self.assertRaises(TypeError):
            compile(42)


if __name__ == "__main__":
    unittest.main()
