"""
Commands module behavioral tests (building, compiling, executing, binding).

Scope
- Validate builder surfaces, flag-set joining, and the sticky declaration fault.
- Validate execute/extract/degree: consumed counts, leftovers, fault positions.
- Validate handler binding: arity, keyword-only parameters, annotations, *args tails.
- Validate usage text and rich rendering.

Conventions
- Test method names follow CamelCase per project convention.
- Handlers record their calls in a list so tests can assert "invoked exactly once" or "never invoked".
"""

from __future__ import annotations

import io
import unittest
from typing import Annotated
from unittest import TestCase

from rich.console import Console

from argot import (
    command,
    Builder,
    ClosingBuilder,
    Compiler,
    Command,
    Constant,
    Flags,
    Variadic,
    Group,
    ArgNotFoundError,
    FlagValueRequiredError,
    UnknownArgsError,
    InvalidDeclarationError,
    NoArgumentsError,
    BindingError,
    FaultCode,
)


class TestBuilder(TestCase):
    """Behavioral tests for the fluent builder surfaces."""

    def testSurfacesNarrow(self):
        builder = command()
        self.assertIsInstance(builder, Builder)
        self.assertIs(builder.add_variable("a"), builder)

        closing = builder.add_variable("b", default="x")
        self.assertIsInstance(closing, ClosingBuilder)
        self.assertNotIsInstance(closing, Builder)
        self.assertFalse(hasattr(closing, "add_constant"))
        self.assertFalse(hasattr(closing, "add_flag"))

        compiler = closing.add_variadic("rest")
        self.assertIsInstance(compiler, Compiler)
        self.assertFalse(hasattr(compiler, "add_variable"))
        self.assertFalse(hasattr(compiler, "add_variadic"))

    def testCompileEmptyRaises(self):
        with self.assertRaises(NoArgumentsError) as context:
            command().compile()
        self.assertEqual(context.exception.code, FaultCode.NO_ARGUMENTS)

    def testStickyFault(self):
        builder = command().add_constant("ok").add_variable("bad name").add_constant("after")
        self.assertIsInstance(builder.fault, InvalidDeclarationError)
        self.assertEqual(builder.fault.options["index"], 2)
        self.assertIsInstance(builder.fault.options["exception"], ValueError)
        with self.assertRaises(InvalidDeclarationError):
            builder.compile()

    def testFirstFaultWins(self):
        builder = command().add_constant("").add_variable("n", int, default="x")
        self.assertEqual(builder.fault.options["index"], 1)

    def testFaultIsNoneWhenValid(self):
        self.assertIsNone(command().add_constant("run").fault)

    def testRequiredVariableAfterDefaultedRejected(self):
        builder = command().add_variable("a", default="x").add_variable("b")
        self.assertIsInstance(builder.fault, InvalidDeclarationError)
        with self.assertRaises(InvalidDeclarationError):
            builder.compile()

    def testDefaultedVariablesChain(self):
        cmd = command().add_variable("a", default="x").add_variable("b", default="y").compile()
        self.assertEqual(cmd.extract([]), (0, ["x", "y"]))

    def testInvalidBaseRejected(self):
        for base in (1, -1, 37):
            with self.subTest(base=base):
                self.assertIsInstance(command().add_variable("n", int, base=base).fault, InvalidDeclarationError)

    def testFlagWithoutDefaultRejected(self):
        self.assertIsInstance(command().add_flag("n", int).fault, InvalidDeclarationError)

    def testDuplicateFlagNameRejected(self):
        builder = command().add_flag("n", int, default=0).add_flag("n", int, default=1)
        self.assertIsInstance(builder.fault, InvalidDeclarationError)

    def testConsecutiveFlagsShareOnePosition(self):
        cmd = (
            command()
            .add_flag("x", int, default=0)
            .add_parameterless_flag("v")
            .add_constant("go")
            .add_flag("y", int, default=0)
            .compile()
        )
        arguments = cmd.arguments
        self.assertEqual(len(arguments), 3)
        self.assertIsInstance(arguments[0], Flags)
        self.assertEqual(len(arguments[0]), 2)
        self.assertIsInstance(arguments[1], Constant)
        self.assertEqual(len(arguments[2]), 1)

    def testParameterlessBooleanDefaults(self):
        flags = command().add_parameterless_flag("v").compile().arguments[0]
        flag, = flags
        self.assertIs(flag.found, True)
        self.assertIs(flag.default, False)
        self.assertTrue(flag.converter.insensitive)

    def testParameterlessNonBooleanNeedsMissingValue(self):
        self.assertIsInstance(command().add_parameterless_flag("mode", str, found="fast").fault, InvalidDeclarationError)
        self.assertIsNone(command().add_parameterless_flag("mode", str, found="fast", missing="slow").fault)

    def testAddArgument(self):
        cmd = command().add_argument(Constant("run")).compile()
        self.assertEqual(cmd.usage, "> run")

    def testAddArgumentVariadicReturnsCompiler(self):
        self.assertIsInstance(command().add_argument(Variadic("rest")), Compiler)

    def testAddArgumentRejectsNonArguments(self):
        self.assertIsInstance(command().add_argument("run").fault, InvalidDeclarationError)

    def testToGroup(self):
        group = Group()
        cmd = command().add_constant("run").to_group(group, lambda: None)
        self.assertIsInstance(cmd, Command)
        self.assertEqual(len(group), 1)
        self.assertIs(group[0].command, cmd)

    def testCommandRejectsMisplacedVariadic(self):
        with self.assertRaises(ValueError):
            Command([Variadic("rest"), Constant("run")])


class TestExecution(TestCase):
    """Behavioral tests for Command.execute/extract/degree."""

    def setUp(self):
        self.calls = []

    def record(self, *values):
        self.calls.append(values)

    def testExecuteWithoutHandlerReturnsCount(self):
        cmd = command().add_constant("run").add_variable("name").compile()
        self.assertEqual(cmd.execute(["run", "bob"]), 2)
        self.assertEqual(cmd.params, ["bob"])

    def testHandlerInvokedOnce(self):
        cmd = command().add_constant("greet").add_variable("name").compile()
        self.assertEqual(cmd.execute(["greet", "bob"], self.record), 2)
        self.assertEqual(self.calls, [("bob",)])

    def testVariadicAfterConstant(self):
        cmd = command().add_constant("test").add_variadic("items").compile()
        self.assertEqual(cmd.execute(["test", "a", "b", "c"], self.record), 4)
        self.assertEqual(self.calls, [("a", "b", "c")])

    def testTrailingTokensRaise(self):
        cmd = command().add_constant("run").add_variable("name").compile()
        with self.assertRaises(UnknownArgsError) as context:
            cmd.execute(["run", "bob", "extra", "more"], self.record)
        self.assertEqual(context.exception.consumed, 2)
        self.assertEqual(context.exception.options["leftover"], ["extra", "more"])
        self.assertEqual(self.calls, [])

    def testFaultCarriesAbsolutePosition(self):
        cmd = command().add_constant("git").add_constant("push").compile()
        with self.assertRaises(ArgNotFoundError) as context:
            cmd.execute(["git", "pull"])
        self.assertEqual(context.exception.consumed, 1)
        self.assertEqual(context.exception.options["index"], 2)

    def testFlagFaultCarriesAbsolutePosition(self):
        cmd = command().add_constant("run").add_flag("n", int, default=1).compile()
        with self.assertRaises(FlagValueRequiredError) as context:
            cmd.execute(["run", "-n", "abc"])
        self.assertEqual(context.exception.consumed, 2)

    def testDegree(self):
        cmd = command().add_constant("git").add_constant("pull").add_variable("remote").compile()
        self.assertEqual(cmd.degree(["git", "push"]), 1)
        self.assertEqual(cmd.degree(["git", "pull"]), 2)
        self.assertEqual(cmd.degree(["git", "pull", "origin"]), 3)
        self.assertEqual(cmd.degree(["git", "pull", "origin", "main"]), 3)
        self.assertEqual(cmd.degree([]), 0)

    def testFlagOrderGivesSameValues(self):
        xy = command().add_flag("x", int, default=0).add_flag("y", int, default=0).compile()
        yx = command().add_flag("y", int, default=0).add_flag("x", int, default=0).compile()

        def handler(x, y):
            self.calls.append({"x": x, "y": y})

        for tokens in (["-x", "1", "-y", "2"], ["-y", "2", "-x", "1"]):
            xy.execute(tokens, handler)
            yx.execute(tokens, lambda y, x: handler(x, y))
        self.assertEqual(self.calls, [{"x": 1, "y": 2}] * 4)

    def testParameterlessFlagBeforeVariable(self):
        cmd = command().add_parameterless_flag("v").add_variable("name").compile()
        cmd.execute(["-v", "bob"], self.record)
        cmd.execute(["bob"], self.record)
        self.assertEqual(self.calls, [(True, "bob"), (False, "bob")])

    def testParamsResetOnFailure(self):
        cmd = command().add_variable("name").compile()
        cmd.execute(["bob"])
        with self.assertRaises(ArgNotFoundError):
            cmd.execute([])
        self.assertEqual(cmd.params, [])

    def testParamsIsCopy(self):
        cmd = command().add_variable("name").compile()
        cmd.execute(["bob"])
        cmd.params.append("mallory")
        self.assertEqual(cmd.params, ["bob"])

    def testRepeatedExecutionsAreIndependent(self):
        cmd = command().add_flag("n", int, default=0).compile()
        self.assertEqual(cmd.extract(["-n", "4"]), (2, [4]))
        self.assertEqual(cmd.extract([]), (0, [0]))


class TestBinding(TestCase):
    """Behavioral tests for handler binding (arity and annotations)."""

    def setUp(self):
        self.calls = []

    def testArityMismatchNeverInvokes(self):
        cmd = command().add_variable("a").compile()

        def handler(a, b):
            self.calls.append((a, b))

        with self.assertRaises(BindingError) as context:
            cmd.execute(["x"], handler)
        self.assertEqual(context.exception.code, FaultCode.BINDING)
        self.assertEqual(self.calls, [])

    def testTooManyValuesNeverInvokes(self):
        cmd = command().add_variable("a").add_variable("b").compile()
        with self.assertRaises(BindingError):
            cmd.execute(["x", "y"], lambda a: self.calls.append(a))
        self.assertEqual(self.calls, [])

    def testDefaultedParametersWidenArity(self):
        cmd = command().add_variable("a").compile()

        def handler(a, b="fallback"):
            self.calls.append((a, b))

        cmd.execute(["x"], handler)
        self.assertEqual(self.calls, [("x", "fallback")])

    def testVariadicHandlerAcceptsAnyCount(self):
        cmd = command().add_variadic("items").compile()

        def handler(*items):
            self.calls.append(items)

        cmd.execute([], handler)
        cmd.execute(["a", "b"], handler)
        self.assertEqual(self.calls, [(), ("a", "b")])

    def testRequiredKeywordOnlyRejected(self):
        cmd = command().add_variable("a").compile()

        def handler(a, *, b):
            self.calls.append(a)

        with self.assertRaises(BindingError):
            cmd.execute(["x"], handler)
        self.assertEqual(self.calls, [])

    def testNonCallableRejected(self):
        cmd = command().add_variable("a").compile()
        with self.assertRaises(BindingError):
            cmd.execute(["x"], "not callable")

    def testAnnotationsChecked(self):
        cmd = command().add_variable("n", int).compile()

        def handler(n: str):
            self.calls.append(n)

        with self.assertRaises(BindingError):
            cmd.execute(["3"], handler)
        self.assertEqual(self.calls, [])

    def testNumericAnnotationsConvert(self):
        cmd = command().add_variable("n", int).compile()

        def handler(n: float):
            self.calls.append(n)

        cmd.execute(["3"], handler)
        self.assertEqual(self.calls, [3.0])
        self.assertIsInstance(self.calls[0], float)

    def testBooleanAnnotationRejectsNumbers(self):
        cmd = command().add_variable("n", int).compile()

        def handler(n: bool):
            self.calls.append(n)

        with self.assertRaises(BindingError):
            cmd.execute(["1"], handler)

    def testNumberAnnotationRejectsBooleans(self):
        cmd = command().add_parameterless_flag("v").compile()

        def handler(v: int):
            self.calls.append(v)

        with self.assertRaises(BindingError):
            cmd.execute(["-v"], handler)

    def testAnnotatedIsDereferenced(self):
        cmd = command().add_variable("n", int).compile()

        def handler(n: Annotated[int, "count"]):
            self.calls.append(n)

        cmd.execute(["5"], handler)
        self.assertEqual(self.calls, [5])

    def testUnionAnnotationsAccepted(self):
        cmd = command().add_variable("n", int).compile()

        def handler(n: int | None):
            self.calls.append(n)

        cmd.execute(["5"], handler)
        self.assertEqual(self.calls, [5])

    def testVariadicTailAnnotationAppliesToEachValue(self):
        cmd = command().add_variadic("numbers", int).compile()

        def strings(*numbers: str):
            self.calls.append(numbers)

        def floats(*numbers: float):
            self.calls.append(numbers)

        with self.assertRaises(BindingError):
            cmd.execute(["1", "2"], strings)
        cmd.execute(["1", "2"], floats)
        self.assertEqual(self.calls, [(1.0, 2.0)])

    def testBindingFaultCarriesConsumed(self):
        cmd = command().add_constant("run").add_variable("a").compile()
        with self.assertRaises(BindingError) as context:
            cmd.execute(["run", "x"], lambda: None)
        self.assertEqual(context.exception.consumed, 2)


class TestRendering(TestCase):
    """Behavioral tests for usage text and rich output."""

    def setUp(self):
        self.command = (
            command("copy files")
            .add_constant("cp")
            .add_parameterless_flag("r", descr="recurse")
            .add_variable("src", descr="source path")
            .add_variable("dst", default=".", descr="target path")
            .compile()
        )

    def render(self, renderable):
        console = Console(file=io.StringIO(), color_system=None, width=100)
        console.print(renderable)
        return console.file.getvalue()

    def testUsage(self):
        self.assertEqual(self.command.usage, "copy files: > cp [-r] <src> [dst]")

    def testUsageWithoutDescription(self):
        self.assertEqual(command().add_constant("ls").compile().usage, "> ls")

    def testRichOutput(self):
        output = self.render(self.command)
        self.assertIn("copy files: > cp [-r] <src> [dst]", output)
        self.assertIn("source path", output)
        self.assertIn("target path (default: .)", output)
        self.assertIn("-r", output)

    def testRepr(self):
        self.assertTrue(repr(self.command).startswith("command(descr='copy files', arguments=["))


if __name__ == "__main__":
    unittest.main()
