"""
Binding module behavioral tests (annotation compatibility and signatures).

Scope
- Validate coerce() compatibility rules per annotation kind.
- Validate Annotated dereferencing and signature inspection fallbacks.
- Validate bind() arity messages for fixed, ranged and variadic handlers.

Conventions
- Test method names follow CamelCase per project convention.
- Command-level binding behavior lives in test/commands.py.
"""

from __future__ import annotations

import inspect
import numbers
import unittest
from decimal import Decimal
from fractions import Fraction
from typing import Annotated, Any
from unittest import TestCase

from argot import BindingError
from argot.binding import bind, coerce, dereference, signature


class TestCoerce(TestCase):
    """Behavioral tests for coerce()."""

    def testUnannotatedAcceptsAnything(self):
        self.assertEqual(coerce("x", inspect.Parameter.empty), "x")
        self.assertEqual(coerce(3, Any), 3)
        self.assertEqual(coerce([1], object), [1])

    def testNumericConversion(self):
        self.assertEqual(coerce(3, float), 3.0)
        self.assertIsInstance(coerce(3, float), float)
        self.assertEqual(coerce(3.0, int), 3)
        self.assertEqual(coerce(3, Decimal), Decimal(3))
        self.assertEqual(coerce(0.5, Fraction), Fraction(1, 2))

    def testAbstractNumericAnnotationsKeepValues(self):
        self.assertIs(coerce(2.5, numbers.Real).__class__, float)

    def testBooleansAreNotNumbers(self):
        from argot.binding import _Incompatible
        with self.assertRaises(_Incompatible):
            coerce(True, int)
        with self.assertRaises(_Incompatible):
            coerce(1, bool)

    def testStringsAreNotNumbers(self):
        from argot.binding import _Incompatible
        with self.assertRaises(_Incompatible):
            coerce("3", int)
        with self.assertRaises(_Incompatible):
            coerce(3, str)

    def testDereference(self):
        self.assertIs(dereference(Annotated[int, "meta"]), int)
        self.assertIs(dereference(int), int)


class TestSignature(TestCase):
    """Behavioral tests for signature() inspection."""

    def testEvaluatesStringAnnotations(self):
        def handler(n: int): ...

        self.assertIs(signature(handler).parameters["n"].annotation, int)

    def testUnresolvableAnnotationsFallBack(self):
        def handler(n: Undefined): ...  # NOQA: F-821

        self.assertEqual(signature(handler).parameters["n"].annotation, "Undefined")

    def testNonCallableRejected(self):
        with self.assertRaises(BindingError):
            signature(42)


class TestBind(TestCase):
    """Behavioral tests for bind() arity checks."""

    def testExactArity(self):
        self.assertEqual(bind(lambda a, b: None, ["x", "y"]), ("x", "y"))
        with self.assertRaises(BindingError) as context:
            bind(lambda a, b: None, ["x"])
        self.assertEqual(context.exception.options["expected"], "2")

    def testRangedArity(self):
        with self.assertRaises(BindingError) as context:
            bind(lambda a, b=1: None, ["x", "y", "z"])
        self.assertEqual(context.exception.options["expected"], "1 to 2")

    def testVariadicArity(self):
        self.assertEqual(bind(lambda a, *rest: None, ["x", "y", "z"]), ("x", "y", "z"))
        with self.assertRaises(BindingError) as context:
            bind(lambda a, *rest: None, [])
        self.assertEqual(context.exception.options["expected"], "at least 1")

    def testOptionalKeywordOnlyAllowed(self):
        self.assertEqual(bind(lambda a, *, b=1: None, ["x"]), ("x",))


if __name__ == "__main__":
    unittest.main()
