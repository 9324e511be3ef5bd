# python
"""
Utils module behavioral tests (Unset, coalesce, rename, StorageGuard, view).

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
from collections import namedtuple
from types import MappingProxyType
from unittest import TestCase

from optspec.utils import StorageGuard, Unset, UnsetType, coalesce, rename, view


Point = namedtuple("Point", ("x", "y"))


class Box(StorageGuard):
    items = view("items")
    table = view("table")
    point = view("point")

    def __new__(cls, items, table, point=Point(0, 0)):
        with super().__new__(cls) as self:
            setattr(self, "-items", list(items))
            setattr(self, "-table", dict(table))
            setattr(self, "-point", point)
        return self


class TestUnset(TestCase):

    def testSingleton(self):
        self.assertIs(UnsetType(), Unset)
        self.assertFalse(Unset)
        self.assertEqual(repr(Unset), "Unset")

    def testNotSubclassable(self):
        with self.assertRaises(TypeError):
            type("Other", (UnsetType,), {})

    def testCoalesce(self):
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertEqual(coalesce("", "fallback"), "")
        self.assertIsNone(coalesce(None, "fallback"))


class TestRename(TestCase):

    def testDirectForm(self):
        function = rename(lambda: None, "named")
        self.assertEqual(function.__name__, "named")
        self.assertEqual(function.__qualname__, "named")

    def testDecoratorForm(self):
        @rename("handle")
        def function():
            pass

        self.assertEqual(function.__name__, "handle")

    def testValidation(self):
        with self.assertRaises(TypeError):
            rename(1, "x")
        with self.assertRaises(TypeError):
            rename()


class TestStorageGuard(TestCase):

    def testViewsAreReadOnlyContainers(self):
        box = Box(["a", "b"], {"k": "v"})
        self.assertEqual(box.items, ("a", "b"))
        self.assertIsInstance(box.table, MappingProxyType)

    def testNamedTuplesKeepTheirType(self):
        box = Box([], {}, Point(1, 2))
        self.assertIsInstance(box.point, Point)
        self.assertEqual(box.point.y, 2)

    def testSealedAfterConstruction(self):
        box = Box([], {})
        with self.assertRaises(AttributeError):
            box.items = ()
        with self.assertRaises(AttributeError):
            setattr(box, "-items", [])
        with self.assertRaises(AttributeError):
            del box.items

    def testBackingFieldsHidden(self):
        with self.assertRaises(AttributeError):
            getattr(Box([], {}), "-items")


if __name__ == "__main__":
    unittest.main()
