"""
Utilities module behavioral tests (sentinel, coalescing, introspection).

Scope
- Validate the Unset sentinel: singleton identity, falsiness, representation, finality, copying.
- Validate coalesce() and rename().
- Validate IntrospectableType: type names, mirrored read-only properties, repr.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import copy
import unittest
from unittest import TestCase

from argot.utils import Unset, UnsetType, IntrospectableType, coalesce, rename


class TestUnset(TestCase):
    """Behavioral tests for the Unset sentinel."""

    def testSingleton(self):
        self.assertIs(UnsetType(), Unset)

    def testFalsy(self):
        self.assertFalse(Unset)
        self.assertIsNot(Unset, None)

    def testRepr(self):
        self.assertEqual(repr(Unset), "Unset")

    def testCopiesPreserveIdentity(self):
        self.assertIs(copy.copy(Unset), Unset)
        self.assertIs(copy.deepcopy([Unset])[0], Unset)

    def testFinal(self):
        with self.assertRaises(TypeError):
            type("Subclass", (UnsetType,), {})

    def testUnionWithTypes(self):
        self.assertIsInstance("x", str | Unset)
        self.assertIsInstance(Unset, str | Unset)
        self.assertNotIsInstance(3, str | Unset)


class TestHelpers(TestCase):
    """Behavioral tests for coalesce() and rename()."""

    def testCoalesce(self):
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(Unset))
        self.assertIsNone(coalesce(None, "fallback"))
        self.assertEqual(coalesce(0, 5), 0)

    def testRenameFunctionForm(self):
        def original():
            pass

        self.assertEqual(rename(original, "renamed").__name__, "renamed")
        self.assertEqual(original.__qualname__, "renamed")

    def testRenameDecoratorForm(self):
        @rename("decorated")
        def original():
            pass

        self.assertEqual(original.__name__, "decorated")

    def testRenameRejectsBuiltins(self):
        with self.assertRaises(TypeError):
            rename(len, "size")


class TestIntrospectableType(TestCase):
    """Behavioral tests for the IntrospectableType metaclass."""

    def setUp(self):
        class SampleRecord(metaclass=IntrospectableType):
            __introspectable__ = ("items", "label")

            def __init__(self):
                self._items = [1, 2]
                self._label = "sample"

        self.record = SampleRecord()

    def testTypeName(self):
        self.assertEqual(type(self.record).__typename__, "sample-record")

    def testMirroredPropertiesCopyContainers(self):
        items = self.record.items
        items.append(3)
        self.assertEqual(self.record.items, [1, 2])

    def testMirroredPropertiesAreReadOnly(self):
        with self.assertRaises(AttributeError):
            self.record.label = "other"

    def testRepr(self):
        self.assertEqual(repr(self.record), "sample-record(items=[1, 2], label='sample')")


if __name__ == "__main__":
    unittest.main()
