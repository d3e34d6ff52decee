"""
Tests for the internal helpers (Unset, coalesce, rename, mirror).

Conventions
- Test method names follow CamelCase per project convention.
"""
import unittest
from unittest import TestCase

from clistruct.utils import *


class UnsetTest(TestCase):
    """Unset is a sealed, falsey singleton usable in isinstance unions."""

    def testSingleton(self):
        self.assertIs(UnsetType(), Unset)

    def testFalseyButNotNone(self):
        self.assertFalse(Unset)
        self.assertIsNot(Unset, None)
        self.assertEqual(repr(Unset), "Unset")

    def testIsinstanceUnion(self):
        self.assertTrue(isinstance(Unset, str | Unset))
        self.assertTrue(isinstance("x", Unset | str))
        self.assertFalse(isinstance(1, str | Unset))

    def testCannotSubclass(self):
        with self.assertRaises(TypeError):
            type("Other", (UnsetType,), {})


class HelpersTest(TestCase):
    """coalesce, rename and mirror."""

    def testCoalesceKeepsFalseyValues(self):
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(Unset))
        self.assertEqual(coalesce(0, 1), 0)
        self.assertIsNone(coalesce(None, "fallback"))

    def testRenameSetsNames(self):
        @rename("__repr__")
        def function():
            pass

        self.assertEqual(function.__name__, "__repr__")
        self.assertEqual(function.__qualname__, "__repr__")

    def testRenameRequiresString(self):
        with self.assertRaises(TypeError):
            rename(1)

    def testMirrorFreezesContainers(self):
        class Holder:
            items = mirror("items")
            table = mirror("table")

            def __init__(self):
                self._items = [1, [2, 3]]
                self._table = {"a": [1]}

        holder = Holder()
        self.assertEqual(holder.items, (1, (2, 3)))
        self.assertEqual(holder.table, {"a": (1,)})
        holder.table["b"] = 2
        self.assertNotIn("b", holder._table)
        with self.assertRaises(AttributeError):
            holder.items = ()


if __name__ == "__main__":
    unittest.main()
